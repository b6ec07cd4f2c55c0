"""
Ledgerman configuration.

Usage in settings.py:
    LEDGERMAN = {
        "REFERENCE_DIGITS": 5,
        "RECONCILE_ON_STOCK_CHANGE": True,
        "WARN_ON_OVERSELL": True,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class LedgermanSettings:
    """Ledgerman configuration settings."""

    # Zero padding of the sequence part of references (WH/IN/00001)
    REFERENCE_DIGITS: int = 5

    # Run the reconciliation sweep after adjustments and completed moves
    RECONCILE_ON_STOCK_CHANGE: bool = True

    # Log a warning when reserved exceeds on-hand for a product
    WARN_ON_OVERSELL: bool = True


def get_ledgerman_settings() -> LedgermanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "LEDGERMAN", {})
    return LedgermanSettings(**{
        k: v for k, v in user_settings.items()
        if k in LedgermanSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_ledgerman_settings(), name)


ledgerman_settings = _LazySettings()
