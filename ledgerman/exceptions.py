"""
Exceptions for Ledgerman.

All errors are LedgerError with a structured code for programmatic handling.

Business rejections of a status change (INVALID_TRANSITION, STOCK_SHORTFALL)
are *returned* as TransitionError inside a MoveOutcome, never raised by the
core. Callers that prefer exceptions use MoveOutcome.unwrap().
"""

from decimal import Decimal
from typing import Any


class BaseError(Exception):
    """
    Error with a machine-readable code, a message and context data.

    Subclasses declare `_default_messages` keyed by code.
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


def _plain(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if hasattr(value, 'as_dict'):
        return value.as_dict()
    return value


class LedgerError(BaseError):
    """
    Structured exception for ledger operations.

    Usage:
        try:
            ledger.create_move('DELIVERY', 'WH', lines)
        except LedgerError as e:
            if e.code == 'NOT_FOUND':
                ...

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages = {
        'NOT_FOUND': 'Registro não encontrado',
        'INVALID_TRANSITION': 'Transição de status inválida',
        'STOCK_SHORTFALL': 'Estoque insuficiente para todos os produtos',
        'IMMUTABLE_STATE': 'Documento só pode ser alterado em rascunho',
        'REFERENCE_CONFLICT': 'Referência duplicada detectada',
        'INVALID_QUANTITY': 'Quantidade inválida (não pode ser negativa)',
        'INVALID_LINE': 'Linha de movimento inválida',
        'INVALID_MOVE_TYPE': 'Tipo de movimento inválido',
        'LOCATION_MISMATCH': 'Local não pertence ao armazém',
    }

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {k: _plain(v) for k, v in self.data.items()},
        }


class TransitionError(LedgerError):
    """
    Rejected status change.

    Carries the current status, the statuses legal from it and, for
    deliveries blocked by stock, the full per-product check list.
    """

    def __init__(self, code: str, current_status: str, allowed_targets=(),
                 target_status: str | None = None, shortfalls=(),
                 message: str | None = None):
        self.current_status = current_status
        self.allowed_targets = list(allowed_targets)
        self.target_status = target_status
        self.shortfalls = list(shortfalls)
        super().__init__(
            code,
            message,
            current_status=current_status,
            target_status=target_status,
            allowed_targets=self.allowed_targets,
            terminal=self.terminal,
            shortfalls=self.shortfalls,
        )

    @property
    def terminal(self) -> bool:
        """Is the document in a state with no way out?"""
        return not self.allowed_targets
