"""Recurring transaction templates."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from .enums import RecurrencePattern, TransactionType


class ScheduledTransaction(SQLModel, table=True):
    """Template that is posted as a Transaction each time it comes due."""

    __tablename__: ClassVar[str] = "scheduled_transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: int = Field(nullable=False, index=True)
    type: TransactionType = Field(nullable=False)
    amount: Decimal = Field(default=Decimal("0"), max_digits=15, decimal_places=2)
    from_account_id: Optional[int] = Field(default=None, foreign_key="account.id")
    to_account_id: Optional[int] = Field(default=None, foreign_key="account.id")

    payee: Optional[str] = Field(default=None, max_length=128)
    category: Optional[str] = Field(default=None, max_length=128)
    memo: Optional[str] = Field(default=None, max_length=255)
    tags: Optional[str] = Field(default=None, max_length=255)
    number: Optional[str] = Field(default=None, max_length=64)
    asset: Optional[str] = Field(default=None, max_length=64)
    units: Optional[Decimal] = Field(default=None, max_digits=19, decimal_places=8)

    # Naive local time; recurrence arithmetic keeps the time of day
    next_occurrence: datetime = Field(sa_type=DateTime(timezone=False), nullable=False, index=True)
    recurrence_pattern: RecurrencePattern = Field(nullable=False)
    recurrence_value: Optional[int] = Field(default=None, description="Step, e.g. every 2 months")
    enabled: bool = Field(default=True, nullable=False)
