"""Enumerations shared by ledger tables."""

from __future__ import annotations

from enum import Enum


class AccountType(str, Enum):
    BANK = "BANK"
    CASH = "CASH"
    ASSET = "ASSET"
    CREDIT_CARD = "CREDIT_CARD"
    LIABILITY = "LIABILITY"
    CURRENT = "CURRENT"
    SAVINGS = "SAVINGS"


class TransactionType(str, Enum):
    EXPENSE = "EXPENSE"
    INCOME = "INCOME"
    TRANSFER = "TRANSFER"


class TransactionStatus(str, Enum):
    """Saved transactions are always completed; there is no pending or void state."""

    COMPLETED = "COMPLETED"


class RecurrencePattern(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    BI_WEEKLY = "BI_WEEKLY"
    MONTHLY = "MONTHLY"
    MONTHLY_LAST_DAY = "MONTHLY_LAST_DAY"
    YEARLY = "YEARLY"
    EVERY_FRIDAY = "EVERY_FRIDAY"
    EVERY_SATURDAY = "EVERY_SATURDAY"
    EVERY_WEEKDAY = "EVERY_WEEKDAY"


__all__ = ["AccountType", "RecurrencePattern", "TransactionStatus", "TransactionType"]
