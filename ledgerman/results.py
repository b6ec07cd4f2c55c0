"""
Result types returned by the ledger services.

Plain frozen dataclasses, so callers (API views, admin, commands) can
render them without touching the ORM.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from ledgerman.exceptions import TransitionError

ZERO = Decimal('0')


@dataclass(frozen=True)
class StockSnapshot:
    """Derived stock levels of one product."""

    product_id: int
    on_hand: Decimal = ZERO
    reserved: Decimal = ZERO

    @property
    def free_to_use(self) -> Decimal:
        """on_hand - reserved, floor-clamped at zero."""
        return max(ZERO, self.on_hand - self.reserved)

    @property
    def oversold(self) -> bool:
        """More reserved than physically on hand?"""
        return self.reserved > self.on_hand

    def as_dict(self) -> dict[str, Any]:
        return {
            'product_id': self.product_id,
            'on_hand': str(self.on_hand),
            'reserved': str(self.reserved),
            'free_to_use': str(self.free_to_use),
        }


@dataclass(frozen=True)
class StockCheck:
    """Whether one delivery line can be served from free-to-use stock."""

    product_id: int
    required: Decimal
    available: Decimal
    line_id: int | None = None

    @property
    def satisfied(self) -> bool:
        return self.available >= self.required

    def as_dict(self) -> dict[str, Any]:
        return {
            'line_id': self.line_id,
            'product_id': self.product_id,
            'required': str(self.required),
            'available': str(self.available),
            'satisfied': self.satisfied,
        }


@dataclass(frozen=True)
class MoveOutcome:
    """
    Result of creating a move or changing its status.

    ok=False means the request was rejected for a business reason and
    `error` says why. The move is always the current (possibly unchanged)
    state of the document.
    """

    move: Any
    error: TransitionError | None = None
    stock_checks: tuple[StockCheck, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def shortfalls(self) -> list[StockCheck]:
        """Unsatisfied stock checks only."""
        return [check for check in self.stock_checks if not check.satisfied]

    def unwrap(self):
        """Return the move, or raise the rejection."""
        if self.error is not None:
            raise self.error
        return self.move

    def as_dict(self) -> dict[str, Any]:
        return {
            'ok': self.ok,
            'move_id': self.move.pk,
            'reference': self.move.reference,
            'status': self.move.status,
            'error': self.error.as_dict() if self.error else None,
            'stock_checks': [check.as_dict() for check in self.stock_checks],
        }


@dataclass
class ReconciliationReport:
    """Outcome of a reconciliation sweep."""

    checked: int = 0
    promoted: list[int] = field(default_factory=list)
    failed: dict[int, str] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            'checked': self.checked,
            'promoted': list(self.promoted),
            'failed': dict(self.failed),
        }
