"""Account model holding the running balance mutated by the ledger."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from .enums import AccountType


class Account(SQLModel, table=True):
    """A bank account, wallet or other financial instrument."""

    __tablename__: ClassVar[str] = "account"

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: int = Field(nullable=False, index=True)
    name: str = Field(nullable=False, max_length=128)
    account_type: AccountType = Field(default=AccountType.BANK, nullable=False)
    currency: str = Field(default="EUR", max_length=3)

    start_balance: Decimal = Field(default=Decimal("0"), max_digits=15, decimal_places=2)
    # Written only through AccountRepository.adjust_balance
    balance: Decimal = Field(default=Decimal("0"), max_digits=15, decimal_places=2)
    version: int = Field(default=0, nullable=False)

    sort_order: int = Field(default=0, nullable=False)
    exclude_from_reports: bool = Field(default=False, nullable=False)
    # Naive local time, stored as-is
    created_at: datetime = Field(
        default_factory=datetime.now, sa_type=DateTime(timezone=False), nullable=False
    )
