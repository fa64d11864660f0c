"""Concrete repository implementations using SQLModel."""

from .account import SQLModelAccountRepository
from .scheduled import SQLModelScheduledTransactionRepository
from .transaction import SQLModelTransactionRepository

__all__ = [
    "SQLModelAccountRepository",
    "SQLModelScheduledTransactionRepository",
    "SQLModelTransactionRepository",
]
