from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('ledgerman', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='inventorymoveline',
            name='quantity',
            field=models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0'))], verbose_name='Quantidade'),
        ),
        migrations.AddConstraint(
            model_name='inventorymoveline',
            constraint=models.CheckConstraint(condition=models.Q(('quantity__gte', 0)), name='ledgerman_line_qty_non_negative'),
        ),
        migrations.AddConstraint(
            model_name='inventorymoveline',
            constraint=models.CheckConstraint(condition=models.Q(models.Q(('from_location__isnull', False), ('to_location__isnull', True)), models.Q(('from_location__isnull', True), ('to_location__isnull', False)), _connector='OR'), name='ledgerman_line_single_location'),
        ),
    ]
