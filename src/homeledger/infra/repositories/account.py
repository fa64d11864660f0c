"""SQLModel implementation of Account repository."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import or_, update
from sqlmodel import Session, select

from ...errors import ConcurrentModificationError, NotFoundError
from ...logging_config import get_logger
from ...models.account import Account
from ...models.scheduled import ScheduledTransaction
from ...models.transaction import Transaction
from ..database import SessionFactory

logger = get_logger(__name__)

# Fields a plain update may touch; balance and version belong to adjust_balance.
_UPDATABLE_FIELDS = (
    "name",
    "account_type",
    "currency",
    "start_balance",
    "sort_order",
    "exclude_from_reports",
)


class SQLModelAccountRepository:
    """SQLModel-based account repository implementation."""

    def __init__(self, session_factory: SessionFactory, *, max_retries: int = 3):
        """Initialize with a session factory."""
        self.session_factory = session_factory
        self.max_retries = max(1, max_retries)

    def get_by_id(self, account_id: int) -> Optional[Account]:
        """Retrieve an account by ID."""
        with self.session_factory() as session:
            return session.get(Account, account_id)

    def list_for_owner(self, owner_id: int) -> list[Account]:
        """List an owner's accounts in display order."""
        with self.session_factory() as session:
            statement = (
                select(Account)
                .where(Account.owner_id == owner_id)
                .order_by(Account.sort_order, Account.name)  # type: ignore[arg-type]
            )
            return list(session.exec(statement).all())

    def create(self, account: Account) -> Account:
        """Create a new account."""
        with self.session_factory() as session:
            session.add(account)
            session.flush()
            session.refresh(account)
            return account

    def update(self, account: Account) -> Account:
        """Copy descriptive fields onto the stored row, leaving the balance alone."""
        with self.session_factory() as session:
            persisted = session.get(Account, account.id)
            if persisted is None:
                raise NotFoundError("account", account.id)
            for field in _UPDATABLE_FIELDS:
                setattr(persisted, field, getattr(account, field))
            session.flush()
            return persisted

    def delete(self, account_id: int) -> None:
        """Delete an account by ID, detaching transactions and templates that name it."""
        with self.session_factory() as session:
            account = session.get(Account, account_id)
            if account is None:
                return
            for model in (Transaction, ScheduledTransaction):
                statement = select(model).where(
                    or_(model.from_account_id == account_id, model.to_account_id == account_id)
                )
                for row in session.exec(statement).all():
                    if row.from_account_id == account_id:
                        row.from_account_id = None
                    if row.to_account_id == account_id:
                        row.to_account_id = None
            session.flush()
            session.delete(account)
            session.flush()

    def adjust_balance(self, account_id: int, delta: Decimal) -> Account:
        """Add ``delta`` to the account balance with an optimistic version check.

        The balance is read fresh and written back only if nobody bumped the
        version in between; otherwise the read is repeated. After
        ``max_retries`` lost races ConcurrentModificationError is raised and
        the caller's unit of work rolls back.
        """
        table = Account.__table__  # type: ignore[attr-defined]
        with self.session_factory() as session:
            session.flush()
            for attempt in range(1, self.max_retries + 1):
                current = self._fresh_read(session, account_id)
                if current is None:
                    raise NotFoundError("account", account_id)
                seen_version = current.version
                new_balance = (current.balance or Decimal("0")) + delta
                result = session.connection().execute(
                    update(table)
                    .where(table.c.id == account_id)
                    .where(table.c.version == seen_version)
                    .values(balance=new_balance, version=seen_version + 1)
                )
                if result.rowcount == 1:
                    account = session.get(Account, account_id, populate_existing=True)
                    logger.debug(
                        "Adjusted account balance",
                        extra={
                            "account_id": account_id,
                            "delta": str(delta),
                            "balance": str(new_balance),
                            "version": seen_version + 1,
                        },
                    )
                    return account  # type: ignore[return-value]
                logger.warning(
                    "Account balance changed during write; retrying",
                    extra={"account_id": account_id, "attempt": attempt},
                )
            raise ConcurrentModificationError(account_id, self.max_retries)

    def _fresh_read(self, session: Session, account_id: int) -> Optional[Account]:
        """Reload the account row, discarding whatever the identity map holds."""
        return session.get(Account, account_id, populate_existing=True)
