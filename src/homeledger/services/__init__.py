"""Service module exports."""

from . import accounts, forecast, ledger, recurrence, scheduled, transactions

__all__ = [
    "accounts",
    "forecast",
    "ledger",
    "recurrence",
    "scheduled",
    "transactions",
]
