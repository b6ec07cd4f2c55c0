"""
Management command to promote WAITING deliveries that are now in stock.

Usage:
    python manage.py reconcile_waiting_deliveries
    python manage.py reconcile_waiting_deliveries --dry-run
"""

from django.core.management.base import BaseCommand

from ledgerman import ledger
from ledgerman.models import InventoryMove


class Command(BaseCommand):
    """Reconcile waiting deliveries command."""

    help = 'Libera entregas aguardando estoque'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Mostra quantas entregas aguardam sem executar'
        )

    def handle(self, *args, **options):
        if options['dry_run']:
            waiting = InventoryMove.objects.waiting().count()
            self.stdout.write(f'{waiting} entrega(s) aguardando estoque')
            return

        report = ledger.reconcile_waiting_deliveries()
        self.stdout.write(
            self.style.SUCCESS(
                f'{report.checked} verificada(s), {len(report.promoted)} liberada(s)'
            )
        )
        for move_id, error in report.failed.items():
            self.stderr.write(f'Falha na movimentação {move_id}: {error}')
