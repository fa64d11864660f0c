"""Unit-of-work protocol shared by the ledger services."""

from __future__ import annotations

from types import TracebackType
from typing import Optional, Protocol

from .repositories import AccountRepository, ScheduledTransactionRepository, TransactionRepository


class UnitOfWork(Protocol):
    """One commit-or-rollback boundary around a set of repositories.

    Every balance mutation and the row write that caused it happen inside the
    same unit of work, so they are committed together or not at all.
    """

    accounts: AccountRepository
    transactions: TransactionRepository
    scheduled: ScheduledTransactionRepository

    def __enter__(self) -> "UnitOfWork":
        ...

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        ...
