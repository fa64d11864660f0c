"""SQLModel definitions for ledger transactions."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from .enums import TransactionStatus, TransactionType


class Transaction(SQLModel, table=True):
    """A single money movement against one or two accounts."""

    __tablename__: ClassVar[str] = "ledger_transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: int = Field(nullable=False, index=True)
    type: TransactionType = Field(nullable=False)
    amount: Decimal = Field(default=Decimal("0"), max_digits=15, decimal_places=2)

    # EXPENSE and TRANSFER debit from_account; INCOME and TRANSFER credit to_account.
    from_account_id: Optional[int] = Field(default=None, foreign_key="account.id", index=True)
    to_account_id: Optional[int] = Field(default=None, foreign_key="account.id", index=True)

    # Naive local time, stored as-is
    transaction_date: datetime = Field(
        default_factory=datetime.now,
        sa_type=DateTime(timezone=False),
        nullable=False,
        index=True,
    )
    sort_order: Optional[int] = Field(default=None, description="Tie-break within a day")
    status: TransactionStatus = Field(default=TransactionStatus.COMPLETED, nullable=False)

    payee: Optional[str] = Field(default=None, max_length=128)
    category: Optional[str] = Field(default=None, max_length=128)
    memo: Optional[str] = Field(default=None, max_length=255)
    tags: Optional[str] = Field(default=None, max_length=255)
    number: Optional[str] = Field(default=None, max_length=64)
    asset: Optional[str] = Field(default=None, max_length=64)
    units: Optional[Decimal] = Field(default=None, max_digits=19, decimal_places=8)
