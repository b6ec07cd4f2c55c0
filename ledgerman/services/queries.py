"""
Stock queries: read-only operations.

Stock levels are never stored: they are folded from the move ledger on
every read. All methods use no locking; callers that gate a write on the
result must hold their own locks (see MoveTransitions).
"""

import logging
from datetime import date
from decimal import Decimal

from django.db.models import Count, Q, Sum
from django.db.models.functions import Coalesce

from ledgerman.conf import ledgerman_settings
from ledgerman.exceptions import LedgerError
from ledgerman.models.enums import MoveStatus, MoveType
from ledgerman.models.move import InventoryMove, InventoryMoveLine
from ledgerman.models.product import Product
from ledgerman.results import StockSnapshot

logger = logging.getLogger('ledgerman')

# Line contributions, by parent move type and status
RECEIVED = Q(
    move__move_type__in=[MoveType.RECEIPT, MoveType.ADJUSTMENT],
    move__status=MoveStatus.DONE,
    to_location__isnull=False,
)
DELIVERED = Q(
    move__move_type=MoveType.DELIVERY,
    move__status=MoveStatus.DONE,
    from_location__isnull=False,
)
RESERVED = Q(
    move__move_type=MoveType.DELIVERY,
    move__status__in=[MoveStatus.WAITING, MoveStatus.READY],
    from_location__isnull=False,
)


def as_pk(obj):
    """Accept a model instance or a raw primary key."""
    return getattr(obj, 'pk', obj)


class StockQueries:
    """Read-only stock query methods."""

    @classmethod
    def compute_stock(cls, product) -> StockSnapshot:
        """
        Stock levels of one product.

        Args:
            product: Product instance or pk

        Returns:
            StockSnapshot (all zeros for a product with no lines)

        Raises:
            LedgerError('NOT_FOUND'): If the product does not exist
        """
        pk = as_pk(product)
        if not Product.objects.filter(pk=pk).exists():
            raise LedgerError('NOT_FOUND', model='Product', pk=pk)
        return cls.compute_all_stock(product_ids=[pk])[pk]

    @classmethod
    def compute_all_stock(cls, product_ids=None, exclude_move=None) -> dict[int, StockSnapshot]:
        """
        Stock levels of many products in one ledger scan.

        A single grouped query folds every relevant line into per-product
        totals; products without lines are reported with zeros.

        Args:
            product_ids: Restrict to these products (None = every product)
            exclude_move: Leave this move's own lines out of the scan

        Returns:
            Mapping product_id -> StockSnapshot
        """
        if product_ids is None:
            product_ids = list(Product.objects.values_list('pk', flat=True))
        else:
            product_ids = [as_pk(p) for p in product_ids]

        lines = InventoryMoveLine.objects.filter(product_id__in=product_ids)
        if exclude_move is not None:
            lines = lines.exclude(move_id=as_pk(exclude_move))

        rows = lines.order_by().values('product_id').annotate(
            received=Coalesce(Sum('quantity', filter=RECEIVED), Decimal('0')),
            delivered=Coalesce(Sum('quantity', filter=DELIVERED), Decimal('0')),
            reserved=Coalesce(Sum('quantity', filter=RESERVED), Decimal('0')),
        )

        snapshots = {pk: StockSnapshot(product_id=pk) for pk in product_ids}
        for row in rows:
            snapshot = StockSnapshot(
                product_id=row['product_id'],
                on_hand=row['received'] - row['delivered'],
                reserved=row['reserved'],
            )
            snapshots[row['product_id']] = snapshot
            if snapshot.oversold and ledgerman_settings.WARN_ON_OVERSELL:
                logger.warning(
                    "ledger.stock.oversold",
                    extra={
                        "product_id": snapshot.product_id,
                        "on_hand": str(snapshot.on_hand),
                        "reserved": str(snapshot.reserved),
                    },
                )
        return snapshots

    @classmethod
    def on_hand_by_location(cls, product) -> dict[int, Decimal]:
        """On-hand quantity of a product split by location."""
        pk = as_pk(product)
        lines = InventoryMoveLine.objects.filter(product_id=pk).order_by()

        totals: dict[int, Decimal] = {}
        incoming = lines.filter(RECEIVED).values('to_location_id').annotate(t=Sum('quantity'))
        for row in incoming:
            loc = row['to_location_id']
            totals[loc] = totals.get(loc, Decimal('0')) + row['t']

        outgoing = lines.filter(DELIVERED).values('from_location_id').annotate(t=Sum('quantity'))
        for row in outgoing:
            loc = row['from_location_id']
            totals[loc] = totals.get(loc, Decimal('0')) - row['t']

        return totals

    @classmethod
    def move_history(cls, search: str | None = None,
                     date_from: date | None = None, date_to: date | None = None):
        """
        Every move line with its document, newest first.

        Args:
            search: Case-insensitive match on reference or contact
            date_from: Lower bound on move creation date (inclusive)
            date_to: Upper bound on move creation date (inclusive)
        """
        qs = InventoryMoveLine.objects.select_related(
            'move', 'product', 'from_location', 'to_location',
        )

        if search:
            qs = qs.filter(
                Q(move__reference__icontains=search) |
                Q(move__contact__icontains=search)
            )

        if date_from is not None:
            qs = qs.filter(move__created_at__date__gte=date_from)

        if date_to is not None:
            qs = qs.filter(move__created_at__date__lte=date_to)

        return qs.order_by('-move__created_at', '-pk')

    @classmethod
    def dashboard(cls, today: date | None = None) -> dict[str, dict[str, int]]:
        """
        Operational counters for the overview page.

        Late = still open and scheduled before today.
        """
        today = today or date.today()
        late = Q(schedule_date__isnull=False, schedule_date__lt=today)

        counts = InventoryMove.objects.aggregate(
            receipts_ready=Count('pk', filter=Q(
                move_type=MoveType.RECEIPT, status=MoveStatus.READY)),
            receipts_late=Count('pk', filter=late & Q(
                move_type=MoveType.RECEIPT,
                status__in=[MoveStatus.DRAFT, MoveStatus.READY])),
            deliveries_ready=Count('pk', filter=Q(
                move_type=MoveType.DELIVERY, status=MoveStatus.READY)),
            deliveries_waiting=Count('pk', filter=Q(
                move_type=MoveType.DELIVERY, status=MoveStatus.WAITING)),
            deliveries_late=Count('pk', filter=late & Q(
                move_type=MoveType.DELIVERY,
                status__in=[MoveStatus.DRAFT, MoveStatus.WAITING, MoveStatus.READY])),
        )

        return {
            'receipts': {
                'to_receive': counts['receipts_ready'],
                'late': counts['receipts_late'],
            },
            'deliveries': {
                'to_deliver': counts['deliveries_ready'],
                'waiting': counts['deliveries_waiting'],
                'late': counts['deliveries_late'],
            },
        }
