"""
Initial migration for Ledgerman models.
"""

from decimal import Decimal
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Ledgerman models: Warehouse, Location, Product, InventoryMove, InventoryMoveLine, ReferenceCounter."""

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Warehouse',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, verbose_name='Nome')),
                ('short_code', models.CharField(help_text='Prefixo das referências (ex: WH)', max_length=10, unique=True, verbose_name='Código')),
                ('address', models.TextField(blank=True, default='', verbose_name='Endereço')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Armazém',
                'verbose_name_plural': 'Armazéns',
                'ordering': ['short_code'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, verbose_name='Nome')),
                ('description', models.TextField(blank=True, default='', verbose_name='Descrição')),
                ('per_unit_cost', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12, verbose_name='Custo unitário')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Produto',
                'verbose_name_plural': 'Produtos',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Location',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, verbose_name='Nome')),
                ('short_code', models.CharField(max_length=20, verbose_name='Código')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='locations', to='ledgerman.warehouse', verbose_name='Armazém')),
            ],
            options={
                'verbose_name': 'Local',
                'verbose_name_plural': 'Locais',
                'ordering': ['warehouse', 'short_code'],
                'constraints': [models.UniqueConstraint(fields=('warehouse', 'short_code'), name='unique_location_code_per_warehouse')],
            },
        ),
        migrations.CreateModel(
            name='InventoryMove',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('reference', models.CharField(help_text='Gerada automaticamente (ex: WH/IN/00001)', max_length=50, unique=True, verbose_name='Referência')),
                ('move_type', models.CharField(choices=[('RECEIPT', 'Recebimento'), ('DELIVERY', 'Entrega'), ('ADJUSTMENT', 'Ajuste')], db_index=True, max_length=20, verbose_name='Tipo')),
                ('status', models.CharField(choices=[('DRAFT', 'Rascunho'), ('WAITING', 'Aguardando'), ('READY', 'Pronto'), ('DONE', 'Concluído')], db_index=True, default='DRAFT', max_length=20, verbose_name='Status')),
                ('contact', models.CharField(blank=True, default='', max_length=200, verbose_name='Contato')),
                ('schedule_date', models.DateField(blank=True, db_index=True, null=True, verbose_name='Data Agendada')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('responsible', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Responsável')),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='moves', to='ledgerman.warehouse', verbose_name='Armazém')),
            ],
            options={
                'verbose_name': 'Movimentação',
                'verbose_name_plural': 'Movimentações',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['move_type', 'status'], name='ledgerman_move_type_status')],
            },
        ),
        migrations.CreateModel(
            name='InventoryMoveLine',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=12, verbose_name='Quantidade')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('from_location', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='outgoing_lines', to='ledgerman.location', verbose_name='Origem')),
                ('move', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lines', to='ledgerman.inventorymove', verbose_name='Movimentação')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='move_lines', to='ledgerman.product', verbose_name='Produto')),
                ('to_location', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='incoming_lines', to='ledgerman.location', verbose_name='Destino')),
            ],
            options={
                'verbose_name': 'Linha de Movimentação',
                'verbose_name_plural': 'Linhas de Movimentação',
                'ordering': ['pk'],
                'indexes': [models.Index(fields=['product', 'move'], name='ledgerman_line_product_move')],
            },
        ),
        migrations.CreateModel(
            name='ReferenceCounter',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('move_type', models.CharField(choices=[('RECEIPT', 'Recebimento'), ('DELIVERY', 'Entrega'), ('ADJUSTMENT', 'Ajuste')], max_length=20, verbose_name='Tipo')),
                ('last_number', models.PositiveIntegerField(default=0, verbose_name='Último número')),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='counters', to='ledgerman.warehouse', verbose_name='Armazém')),
            ],
            options={
                'verbose_name': 'Contador de Referência',
                'verbose_name_plural': 'Contadores de Referência',
                'constraints': [models.UniqueConstraint(fields=('warehouse', 'move_type'), name='unique_counter_per_warehouse_type')],
            },
        ),
    ]
