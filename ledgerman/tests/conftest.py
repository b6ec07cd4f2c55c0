"""
Pytest fixtures for Ledgerman tests.
"""

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from ledgerman import ledger
from ledgerman.models import Location, MoveStatus, MoveType, Product, Warehouse


User = get_user_model()


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username='testuser',
        password='testpass123'
    )


@pytest.fixture
def warehouse(db):
    """Main warehouse 'WH'."""
    return Warehouse.objects.create(name='Armazém Central', short_code='WH')


@pytest.fixture
def other_warehouse(db):
    """Second warehouse 'SP'."""
    return Warehouse.objects.create(name='Filial São Paulo', short_code='SP')


@pytest.fixture
def l1(warehouse):
    """Location L1 in WH."""
    return Location.objects.create(warehouse=warehouse, name='Prateleira 1', short_code='L1')


@pytest.fixture
def l2(warehouse):
    """Location L2 in WH."""
    return Location.objects.create(warehouse=warehouse, name='Prateleira 2', short_code='L2')


@pytest.fixture
def sp_location(other_warehouse):
    """Location in SP."""
    return Location.objects.create(warehouse=other_warehouse, name='Doca', short_code='D1')


@pytest.fixture
def product(db):
    """Product A."""
    return Product.objects.create(name='Produto A', per_unit_cost=Decimal('12.50'))


@pytest.fixture
def other_product(db):
    """Product B."""
    return Product.objects.create(name='Produto B', per_unit_cost=Decimal('3.00'))


@pytest.fixture
def no_auto_reconcile(settings):
    """Disable the sweep after stock changes."""
    settings.LEDGERMAN = {'RECONCILE_ON_STOCK_CHANGE': False}


@pytest.fixture
def receive(warehouse):
    """Helper: post a receipt through DRAFT -> READY -> DONE."""

    def _receive(product, quantity, location, short_code=None):
        outcome = ledger.create_move(
            MoveType.RECEIPT,
            short_code or warehouse.short_code,
            [{'product': product, 'quantity': quantity, 'to_location': location}],
        )
        ledger.transition_status(outcome.move, MoveStatus.READY).unwrap()
        return ledger.transition_status(outcome.move, MoveStatus.DONE).unwrap()

    return _receive


@pytest.fixture
def deliver(warehouse):
    """Helper: create a delivery (status decided by stock)."""

    def _deliver(product, quantity, location, **kwargs):
        return ledger.create_move(
            MoveType.DELIVERY,
            warehouse.short_code,
            [{'product': product, 'quantity': quantity, 'from_location': location}],
            **kwargs,
        )

    return _deliver
