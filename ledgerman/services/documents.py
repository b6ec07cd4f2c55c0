"""
Move documents: create, edit, delete and adjust.

All methods use transaction.atomic() with appropriate locking. Status
changes after creation go through MoveTransitions.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.db import IntegrityError, transaction

from ledgerman.exceptions import LedgerError
from ledgerman.models.enums import MoveStatus, MoveType, location_side
from ledgerman.models.move import InventoryMove, InventoryMoveLine
from ledgerman.models.product import Product
from ledgerman.models.warehouse import Location, Warehouse
from ledgerman.results import MoveOutcome
from ledgerman.services.queries import as_pk
from ledgerman.services.references import ReferenceSequence
from ledgerman.services.transitions import MoveTransitions

logger = logging.getLogger('ledgerman')

# Default for edits where None is a real value
UNCHANGED = object()


def _to_quantity(value, index: int) -> Decimal:
    """Parse a line quantity as a finite, non-negative Decimal."""
    try:
        quantity = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise LedgerError('INVALID_QUANTITY', line=index, quantity=value) from None
    if not quantity.is_finite() or quantity < 0:
        raise LedgerError('INVALID_QUANTITY', line=index, quantity=value)
    return quantity


def _get_warehouse(short_code: str) -> Warehouse:
    try:
        return Warehouse.objects.get(short_code=short_code)
    except Warehouse.DoesNotExist:
        raise LedgerError('NOT_FOUND', model='Warehouse', short_code=short_code) from None


def _lock_move(move) -> InventoryMove:
    pk = as_pk(move)
    try:
        return InventoryMove.objects.select_for_update().get(pk=pk)
    except InventoryMove.DoesNotExist:
        raise LedgerError('NOT_FOUND', model='InventoryMove', pk=pk) from None


def _require_draft(move: InventoryMove) -> None:
    if move.status != MoveStatus.DRAFT:
        raise LedgerError(
            'IMMUTABLE_STATE',
            move_id=move.pk,
            reference=move.reference,
            status=move.status,
        )


class MoveDocuments:
    """Document lifecycle methods."""

    @classmethod
    def prepare_lines(cls, move_type: str, warehouse: Warehouse, lines) -> list[dict]:
        """
        Validate raw line mappings for a move type and warehouse.

        Each mapping has `product`, `quantity` and the location key the
        move type uses: `to_location` for RECEIPT/ADJUSTMENT,
        `from_location` for DELIVERY. Values may be instances or pks.

        Raises:
            LedgerError('INVALID_LINE'): No lines, or wrong location side
            LedgerError('INVALID_QUANTITY'): Negative or non-numeric quantity
            LedgerError('NOT_FOUND'): Unknown product or location
            LedgerError('LOCATION_MISMATCH'): Location of another warehouse
        """
        lines = list(lines or [])
        if not lines:
            raise LedgerError('INVALID_LINE', message='Documento precisa de ao menos uma linha')

        side, other = location_side(move_type)

        product_ids = {as_pk(line.get('product')) for line in lines}
        location_ids = {as_pk(line.get(side)) for line in lines if line.get(side) is not None}
        products = Product.objects.in_bulk(product_ids - {None})
        locations = Location.objects.in_bulk(location_ids)

        prepared = []
        for index, line in enumerate(lines):
            if line.get(side) is None or line.get(other) is not None:
                raise LedgerError(
                    'INVALID_LINE',
                    message=f'Linhas de {move_type} usam apenas {side}',
                    line=index,
                )

            product_id = as_pk(line.get('product'))
            if product_id not in products:
                raise LedgerError('NOT_FOUND', model='Product', pk=product_id, line=index)

            location = locations.get(as_pk(line[side]))
            if location is None:
                raise LedgerError('NOT_FOUND', model='Location', pk=as_pk(line[side]), line=index)
            if location.warehouse_id != warehouse.pk:
                raise LedgerError(
                    'LOCATION_MISMATCH',
                    line=index,
                    location=location.short_code,
                    warehouse=warehouse.short_code,
                )

            prepared.append({
                'product_id': product_id,
                'quantity': _to_quantity(line.get('quantity'), index),
                side: location,
            })

        return prepared

    @classmethod
    def _insert_lines(cls, move: InventoryMove, prepared: list[dict]) -> None:
        InventoryMoveLine.objects.bulk_create(
            [InventoryMoveLine(move=move, **fields) for fields in prepared]
        )

    @classmethod
    def _insert_move(cls, **fields) -> InventoryMove:
        """Insert a move; a duplicate reference is a sequence bug."""
        try:
            with transaction.atomic():
                return InventoryMove.objects.create(**fields)
        except IntegrityError as exc:
            logger.critical(
                "ledger.reference.conflict",
                extra={"reference": fields.get('reference'), "error": str(exc)},
            )
            raise LedgerError('REFERENCE_CONFLICT', reference=fields.get('reference')) from exc

    @classmethod
    def create_move(cls, move_type: str, warehouse_short_code: str, lines,
                    contact: str = '', schedule_date=None, responsible=None,
                    draft: bool = False) -> MoveOutcome:
        """
        Create a movement document.

        Initial status:
        - RECEIPT: DRAFT
        - DELIVERY: READY if every line is in stock, else WAITING
          (DRAFT when draft=True)
        - ADJUSTMENT: posted DONE in the same transaction

        Returns:
            MoveOutcome; for deliveries stock_checks holds the per-line
            report and shortfalls the unsatisfied part of it.

        Concurrency:
            - Runs under transaction.atomic()
            - Reference counter row is locked until commit, so a failed
              creation does not consume a number
            - Delivery gating locks the involved Product rows
        """
        if move_type not in MoveType.values:
            raise LedgerError('INVALID_MOVE_TYPE', move_type=move_type)

        warehouse = _get_warehouse(warehouse_short_code)

        with transaction.atomic():
            prepared = cls.prepare_lines(move_type, warehouse, lines)
            reference = ReferenceSequence.next_reference(
                warehouse.short_code, move_type, warehouse=warehouse
            )
            move = cls._insert_move(
                reference=reference,
                move_type=move_type,
                status=MoveStatus.DRAFT,
                warehouse=warehouse,
                contact=contact or '',
                schedule_date=schedule_date,
                responsible=responsible,
            )
            cls._insert_lines(move, prepared)

            outcome = MoveOutcome(move=move)
            if move_type == MoveType.ADJUSTMENT:
                move.status = MoveStatus.DONE
                move.save(update_fields=['status', 'updated_at'])
            elif move_type == MoveType.DELIVERY and not draft:
                checks = tuple(MoveTransitions.stock_checks(move))
                target = (
                    MoveStatus.READY if all(check.satisfied for check in checks)
                    else MoveStatus.WAITING
                )
                applied = MoveTransitions.apply(move, target)
                outcome = MoveOutcome(move=applied.move, error=applied.error, stock_checks=checks)

            logger.info(
                "ledger.move.created",
                extra={
                    "move_id": move.pk,
                    "reference": reference,
                    "type": move_type,
                    "status": str(move.status),
                    "lines": len(prepared),
                },
            )

        if move_type == MoveType.ADJUSTMENT:
            from ledgerman.services.reconciliation import Reconciliation
            Reconciliation.after_stock_change()

        return outcome

    @classmethod
    def adjust(cls, warehouse_short_code: str, product, location, quantity,
               contact: str = '', responsible=None) -> MoveOutcome:
        """
        Post a one-line inventory adjustment into a location.

        Shortcut for create_move(ADJUSTMENT, ...).
        """
        return cls.create_move(
            MoveType.ADJUSTMENT,
            warehouse_short_code,
            [{'product': product, 'quantity': quantity, 'to_location': location}],
            contact=contact,
            responsible=responsible,
        )

    @classmethod
    def replace_lines(cls, move, lines) -> InventoryMove:
        """
        Replace every line of a DRAFT move.

        Lines are deleted and re-inserted, so line ids change.

        Raises:
            LedgerError('IMMUTABLE_STATE'): If the move is not DRAFT
        """
        return cls.update_move(move, lines=lines)

    @classmethod
    def update_move(cls, move, contact: str | None = None,
                    schedule_date=UNCHANGED, lines=None) -> InventoryMove:
        """
        Edit a DRAFT move.

        contact and lines left as None are not changed. schedule_date is
        kept unless passed; passing None clears it.

        Raises:
            LedgerError('NOT_FOUND'): If the move does not exist
            LedgerError('IMMUTABLE_STATE'): If the move is not DRAFT
        """
        with transaction.atomic():
            locked = _lock_move(move)
            _require_draft(locked)

            if contact is not None:
                locked.contact = contact
            if schedule_date is not UNCHANGED:
                locked.schedule_date = schedule_date

            if lines is not None:
                prepared = cls.prepare_lines(locked.move_type, locked.warehouse, lines)
                locked.lines.all().delete()
                cls._insert_lines(locked, prepared)

            locked.save(update_fields=['contact', 'schedule_date', 'updated_at'])
            logger.info(
                "ledger.move.updated",
                extra={
                    "move_id": locked.pk,
                    "reference": locked.reference,
                    "lines_replaced": lines is not None,
                },
            )
            return locked

    @classmethod
    def delete_move(cls, move) -> None:
        """
        Delete a DRAFT move and its lines.

        Raises:
            LedgerError('NOT_FOUND'): If the move does not exist
            LedgerError('IMMUTABLE_STATE'): If the move is not DRAFT
        """
        with transaction.atomic():
            locked = _lock_move(move)
            _require_draft(locked)
            reference = locked.reference
            locked.delete()

        logger.info("ledger.move.deleted", extra={"reference": reference})
