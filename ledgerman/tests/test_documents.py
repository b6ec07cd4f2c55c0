"""
Tests for document creation, editing and deletion.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from ledgerman import ledger, LedgerError
from ledgerman.models import (
    InventoryMove,
    InventoryMoveLine,
    MoveStatus,
    MoveType,
)


pytestmark = pytest.mark.django_db


def receipt_lines(product, location, quantity=Decimal('10')):
    return [{'product': product, 'quantity': quantity, 'to_location': location}]


class TestCreateMove:
    """Tests for ledger.create_move()."""

    def test_receipt_fields(self, product, warehouse, l1, user):
        outcome = ledger.create_move(
            MoveType.RECEIPT, 'WH', receipt_lines(product, l1),
            contact='Fornecedor ABC',
            schedule_date=date(2026, 1, 10),
            responsible=user,
        )
        move = outcome.move

        assert move.warehouse == warehouse
        assert move.contact == 'Fornecedor ABC'
        assert move.schedule_date == date(2026, 1, 10)
        assert move.responsible == user
        line = move.lines.get()
        assert line.product == product
        assert line.quantity == Decimal('10')
        assert line.to_location == l1
        assert line.from_location is None

    def test_accepts_pks(self, product, warehouse, l1):
        outcome = ledger.create_move(MoveType.RECEIPT, 'WH', [
            {'product': product.pk, 'quantity': '2.5', 'to_location': l1.pk},
        ])

        assert outcome.move.lines.get().quantity == Decimal('2.5')

    def test_line_order_is_kept(self, product, other_product, warehouse, l1):
        outcome = ledger.create_move(MoveType.RECEIPT, 'WH', [
            {'product': other_product, 'quantity': 1, 'to_location': l1},
            {'product': product, 'quantity': 2, 'to_location': l1},
        ])

        assert [line.product for line in outcome.move.lines.all()] == [other_product, product]

    def test_unknown_warehouse(self, product, l1):
        with pytest.raises(LedgerError) as exc:
            ledger.create_move(MoveType.RECEIPT, 'XX', receipt_lines(product, l1))

        assert exc.value.code == 'NOT_FOUND'

    def test_unknown_move_type(self, product, warehouse, l1):
        with pytest.raises(LedgerError) as exc:
            ledger.create_move('TRANSFER', 'WH', receipt_lines(product, l1))

        assert exc.value.code == 'INVALID_MOVE_TYPE'

    def test_requires_lines(self, warehouse):
        with pytest.raises(LedgerError) as exc:
            ledger.create_move(MoveType.RECEIPT, 'WH', [])

        assert exc.value.code == 'INVALID_LINE'
        assert not InventoryMove.objects.exists()

    def test_unknown_product(self, warehouse, l1):
        with pytest.raises(LedgerError) as exc:
            ledger.create_move(MoveType.RECEIPT, 'WH', [
                {'product': 999999, 'quantity': 1, 'to_location': l1},
            ])

        assert exc.value.code == 'NOT_FOUND'
        assert exc.value.data['model'] == 'Product'

    def test_unknown_location(self, product, warehouse):
        with pytest.raises(LedgerError) as exc:
            ledger.create_move(MoveType.RECEIPT, 'WH', [
                {'product': product, 'quantity': 1, 'to_location': 999999},
            ])

        assert exc.value.code == 'NOT_FOUND'
        assert exc.value.data['model'] == 'Location'

    @pytest.mark.parametrize('quantity', [Decimal('-1'), 'abc', None, 'NaN'])
    def test_invalid_quantity(self, product, warehouse, l1, quantity):
        with pytest.raises(LedgerError) as exc:
            ledger.create_move(MoveType.RECEIPT, 'WH', receipt_lines(product, l1, quantity))

        assert exc.value.code == 'INVALID_QUANTITY'

    def test_zero_quantity_allowed(self, product, warehouse, l1):
        outcome = ledger.create_move(MoveType.RECEIPT, 'WH', receipt_lines(product, l1, 0))

        assert outcome.move.lines.get().quantity == Decimal('0')

    def test_receipt_needs_to_location(self, product, warehouse, l1):
        with pytest.raises(LedgerError) as exc:
            ledger.create_move(MoveType.RECEIPT, 'WH', [
                {'product': product, 'quantity': 1, 'from_location': l1},
            ])

        assert exc.value.code == 'INVALID_LINE'

    def test_delivery_needs_from_location_only(self, product, warehouse, l1, l2):
        with pytest.raises(LedgerError) as exc:
            ledger.create_move(MoveType.DELIVERY, 'WH', [
                {'product': product, 'quantity': 1, 'from_location': l1, 'to_location': l2},
            ])

        assert exc.value.code == 'INVALID_LINE'

    def test_location_of_other_warehouse(self, product, warehouse, sp_location):
        with pytest.raises(LedgerError) as exc:
            ledger.adjust('WH', product, sp_location, Decimal('1'))

        assert exc.value.code == 'LOCATION_MISMATCH'

    def test_created_log(self, product, warehouse, l1, caplog):
        with caplog.at_level(logging.INFO, logger='ledgerman'):
            ledger.create_move(MoveType.RECEIPT, 'WH', receipt_lines(product, l1))

        assert 'ledger.move.created' in caplog.text

    def test_reference_conflict_is_fatal(self, product, warehouse, l1, caplog):
        """A duplicate reference means the sequence is broken: never retried."""
        InventoryMove.objects.create(
            reference='WH/IN/00001', move_type=MoveType.RECEIPT, warehouse=warehouse,
        )

        with caplog.at_level(logging.CRITICAL, logger='ledgerman'):
            with pytest.raises(LedgerError) as exc:
                ledger.create_move(MoveType.RECEIPT, 'WH', receipt_lines(product, l1))

        assert exc.value.code == 'REFERENCE_CONFLICT'
        assert exc.value.data['reference'] == 'WH/IN/00001'
        assert 'ledger.reference.conflict' in caplog.text
        assert InventoryMove.objects.count() == 1


class TestUpdateMove:
    """Tests for ledger.update_move() / ledger.replace_lines()."""

    @pytest.fixture
    def draft(self, product, warehouse, l1):
        return ledger.create_move(MoveType.RECEIPT, 'WH', receipt_lines(product, l1)).move

    def test_replace_lines(self, draft, other_product, l2):
        old_ids = set(draft.lines.values_list('pk', flat=True))

        ledger.replace_lines(draft, receipt_lines(other_product, l2, Decimal('3')))

        line = draft.lines.get()
        assert line.pk not in old_ids
        assert line.product == other_product
        assert line.quantity == Decimal('3')
        assert line.to_location == l2

    def test_update_header(self, draft):
        move = ledger.update_move(draft, contact='Novo contato', schedule_date=date(2026, 2, 1))

        move.refresh_from_db()
        assert move.contact == 'Novo contato'
        assert move.schedule_date == date(2026, 2, 1)
        assert move.lines.count() == 1

    def test_schedule_date_can_be_cleared(self, draft):
        ledger.update_move(draft, schedule_date=date(2026, 2, 1))

        ledger.update_move(draft, schedule_date=None)

        draft.refresh_from_db()
        assert draft.schedule_date is None

    def test_schedule_date_kept_when_omitted(self, draft):
        ledger.update_move(draft, schedule_date=date(2026, 2, 1))

        ledger.update_move(draft, contact='Outro')

        draft.refresh_from_db()
        assert draft.schedule_date == date(2026, 2, 1)

    def test_invalid_lines_keep_old_ones(self, draft, product, l1):
        with pytest.raises(LedgerError):
            ledger.replace_lines(draft, receipt_lines(product, l1, Decimal('-5')))

        assert draft.lines.get().quantity == Decimal('10')

    @pytest.mark.parametrize('status', [MoveStatus.READY, MoveStatus.DONE])
    def test_only_in_draft(self, draft, product, l1, status):
        ledger.transition_status(draft, MoveStatus.READY)
        if status == MoveStatus.DONE:
            ledger.transition_status(draft, MoveStatus.DONE)

        with pytest.raises(LedgerError) as exc:
            ledger.replace_lines(draft, receipt_lines(product, l1, Decimal('1')))

        assert exc.value.code == 'IMMUTABLE_STATE'
        assert draft.lines.get().quantity == Decimal('10')

    def test_waiting_delivery_is_frozen(self, product, deliver, l1):
        move = deliver(product, Decimal('4'), l1).move
        assert move.status == MoveStatus.WAITING

        with pytest.raises(LedgerError) as exc:
            ledger.update_move(move, contact='x')

        assert exc.value.code == 'IMMUTABLE_STATE'

    def test_missing_move(self, db):
        with pytest.raises(LedgerError) as exc:
            ledger.update_move(999999, contact='x')

        assert exc.value.code == 'NOT_FOUND'


class TestLineValidation:
    """Model validation of lines edited outside the service (admin forms)."""

    @pytest.fixture
    def draft(self, product, warehouse, l1):
        return ledger.create_move(MoveType.RECEIPT, 'WH', receipt_lines(product, l1)).move

    def test_negative_quantity_fails_validation(self, draft):
        line = draft.lines.get()
        line.quantity = Decimal('-50')

        with pytest.raises(ValidationError) as exc:
            line.full_clean()

        assert 'quantity' in exc.value.message_dict

    def test_both_locations_fail_validation(self, draft, l1):
        line = draft.lines.get()
        line.from_location = l1

        with pytest.raises(ValidationError) as exc:
            line.full_clean()

        assert 'from_location' in exc.value.message_dict

    def test_wrong_side_fails_validation(self, product, deliver, l1):
        move = deliver(product, Decimal('1'), l1, draft=True).move
        line = move.lines.get()
        line.to_location, line.from_location = l1, None

        with pytest.raises(ValidationError) as exc:
            line.full_clean()

        assert {'from_location', 'to_location'} <= set(exc.value.message_dict)

    def test_location_of_other_warehouse_fails_validation(self, draft, sp_location):
        line = draft.lines.get()
        line.to_location = sp_location

        with pytest.raises(ValidationError) as exc:
            line.full_clean()

        assert 'to_location' in exc.value.message_dict

    def test_valid_line_passes(self, draft, l2):
        line = draft.lines.get()
        line.to_location = l2
        line.quantity = Decimal('0')

        line.full_clean()

    def test_database_refuses_negative_quantity(self, draft, product, l1):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                InventoryMoveLine.objects.create(
                    move=draft, product=product, quantity=Decimal('-1'), to_location=l1,
                )

    def test_database_refuses_line_without_location(self, draft, product):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                InventoryMoveLine.objects.create(move=draft, product=product, quantity=Decimal('1'))

    @pytest.mark.parametrize('quantity,extra', [
        ('-50', {}),
        ('5', {'from_location': 'l1'}),
    ])
    def test_admin_inline_rejects_invalid_line(self, admin_client, draft, product, l1,
                                               no_auto_reconcile, quantity, extra):
        line = draft.lines.get()
        data = {
            'contact': '',
            'schedule_date': '',
            'lines-TOTAL_FORMS': '1',
            'lines-INITIAL_FORMS': '1',
            'lines-MIN_NUM_FORMS': '0',
            'lines-MAX_NUM_FORMS': '1000',
            'lines-0-id': line.pk,
            'lines-0-move': draft.pk,
            'lines-0-product': product.pk,
            'lines-0-quantity': quantity,
            'lines-0-to_location': l1.pk,
            'lines-0-from_location': '',
            '_save': 'Salvar',
        }
        for key in extra:
            data[f'lines-0-{key}'] = l1.pk

        response = admin_client.post(
            f'/admin/ledgerman/inventorymove/{draft.pk}/change/', data,
        )

        assert response.status_code == 200
        line.refresh_from_db()
        assert line.quantity == Decimal('10')
        assert line.from_location is None

        ledger.transition_status(draft, MoveStatus.READY).unwrap()
        ledger.transition_status(draft, MoveStatus.DONE).unwrap()
        assert ledger.compute_stock(product).on_hand == Decimal('10')


class TestLineGuards:
    """Model-level protection of lines outside DRAFT."""

    def test_cannot_edit_line_of_done_move(self, product, receive, l1):
        move = receive(product, Decimal('10'), l1)
        line = move.lines.get()
        line.quantity = Decimal('99')

        with pytest.raises(LedgerError) as exc:
            line.save()

        assert exc.value.code == 'IMMUTABLE_STATE'

    def test_cannot_delete_line_of_done_move(self, product, receive, l1):
        move = receive(product, Decimal('10'), l1)

        with pytest.raises(LedgerError):
            move.lines.get().delete()

        assert move.lines.count() == 1

    def test_cannot_add_line_to_done_move(self, product, receive, l1):
        move = receive(product, Decimal('10'), l1)

        with pytest.raises(LedgerError):
            InventoryMoveLine.objects.create(
                move=move, product=product, quantity=Decimal('1'), to_location=l1,
            )

        assert ledger.compute_stock(product).on_hand == Decimal('10')

    def test_draft_line_can_be_edited(self, product, warehouse, l1):
        move = ledger.create_move(MoveType.RECEIPT, 'WH', receipt_lines(product, l1)).move
        line = move.lines.get()
        line.quantity = Decimal('11')
        line.save()

        assert move.lines.get().quantity == Decimal('11')


class TestDeleteMove:
    """Tests for ledger.delete_move()."""

    def test_delete_draft(self, product, warehouse, l1):
        move = ledger.create_move(MoveType.RECEIPT, 'WH', receipt_lines(product, l1)).move

        ledger.delete_move(move)

        assert not InventoryMove.objects.exists()
        assert not InventoryMoveLine.objects.exists()

    def test_cannot_delete_done(self, product, receive, l1):
        move = receive(product, Decimal('10'), l1)

        with pytest.raises(LedgerError) as exc:
            ledger.delete_move(move)

        assert exc.value.code == 'IMMUTABLE_STATE'
        assert InventoryMove.objects.filter(pk=move.pk).exists()

    def test_numbers_are_not_reused(self, product, warehouse, l1):
        first = ledger.create_move(MoveType.RECEIPT, 'WH', receipt_lines(product, l1)).move
        ledger.delete_move(first)

        second = ledger.create_move(MoveType.RECEIPT, 'WH', receipt_lines(product, l1)).move

        assert second.reference == 'WH/IN/00002'


class TestMoveHistory:
    """Tests for ledger.move_history()."""

    def test_lists_lines_newest_first(self, product, receive, deliver, l1):
        receive(product, Decimal('10'), l1)
        deliver(product, Decimal('2'), l1, contact='Cliente Silva')

        history = list(ledger.move_history())

        assert [line.move.move_type for line in history] == [MoveType.DELIVERY, MoveType.RECEIPT]

    def test_search_reference_and_contact(self, product, receive, deliver, l1):
        receive(product, Decimal('10'), l1)
        deliver(product, Decimal('2'), l1, contact='Cliente Silva')

        assert ledger.move_history(search='silva').count() == 1
        assert ledger.move_history(search='WH/IN').count() == 1
        assert ledger.move_history(search='nada').count() == 0

    def test_date_bounds(self, product, receive, l1):
        receive(product, Decimal('10'), l1)
        today = timezone.localdate()

        assert ledger.move_history(date_from=today - timedelta(days=1), date_to=today + timedelta(days=1)).count() == 1
        assert ledger.move_history(date_from=today + timedelta(days=1)).count() == 0


class TestDashboard:
    """Tests for ledger.dashboard()."""

    def test_counts(self, product, receive, deliver, warehouse, l1):
        today = date(2026, 3, 10)
        receive(product, Decimal('5'), l1)
        late_receipt = ledger.create_move(
            MoveType.RECEIPT, 'WH', receipt_lines(product, l1),
            schedule_date=today - timedelta(days=2),
        ).move
        ledger.transition_status(late_receipt, MoveStatus.READY)
        deliver(product, Decimal('2'), l1)
        deliver(product, Decimal('50'), l1, schedule_date=today - timedelta(days=1))

        stats = ledger.dashboard(today=today)

        assert stats == {
            'receipts': {'to_receive': 1, 'late': 1},
            'deliveries': {'to_deliver': 1, 'waiting': 1, 'late': 1},
        }
