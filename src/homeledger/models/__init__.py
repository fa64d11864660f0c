"""SQLModel table exports."""

from .account import Account
from .enums import AccountType, RecurrencePattern, TransactionStatus, TransactionType
from .scheduled import ScheduledTransaction
from .transaction import Transaction

__all__ = [
    "Account",
    "AccountType",
    "RecurrencePattern",
    "ScheduledTransaction",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
]
