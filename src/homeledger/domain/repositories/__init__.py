"""Repository protocol definitions for domain layer."""

from .account import AccountRepository
from .scheduled import ScheduledTransactionRepository
from .transaction import TransactionRepository

__all__ = [
    "AccountRepository",
    "ScheduledTransactionRepository",
    "TransactionRepository",
]
