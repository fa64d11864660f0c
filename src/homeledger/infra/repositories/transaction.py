"""SQLModel implementation of Transaction repository."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func, or_
from sqlmodel import select

from ...models.transaction import Transaction
from ..database import SessionFactory


class SQLModelTransactionRepository:
    """SQLModel-based transaction repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        with self.session_factory() as session:
            return session.get(Transaction, transaction_id)

    def list_for_owner(self, owner_id: int) -> list[Transaction]:
        """List an owner's transactions, newest first."""
        with self.session_factory() as session:
            statement = (
                select(Transaction)
                .where(Transaction.owner_id == owner_id)
                .order_by(
                    Transaction.transaction_date.desc(),  # type: ignore[attr-defined]
                    Transaction.sort_order.desc(),  # type: ignore[union-attr]
                )
            )
            return list(session.exec(statement).all())

    def list_for_account(self, account_id: int) -> list[Transaction]:
        """Get all transactions debiting or crediting an account."""
        with self.session_factory() as session:
            statement = (
                select(Transaction)
                .where(
                    or_(
                        Transaction.from_account_id == account_id,
                        Transaction.to_account_id == account_id,
                    )
                )
                .order_by(Transaction.transaction_date, Transaction.sort_order)  # type: ignore[arg-type]
            )
            return list(session.exec(statement).all())

    def create(self, transaction: Transaction) -> Transaction:
        """Create a new transaction."""
        with self.session_factory() as session:
            session.add(transaction)
            session.flush()
            session.refresh(transaction)
            return transaction

    def update(self, transaction: Transaction) -> Transaction:
        """Update an existing transaction."""
        with self.session_factory() as session:
            merged = session.merge(transaction)
            session.flush()
            return merged

    def delete(self, transaction_id: int) -> None:
        """Delete a transaction by ID."""
        with self.session_factory() as session:
            transaction = session.get(Transaction, transaction_id)
            if transaction:
                session.delete(transaction)
                session.flush()

    def next_sort_order(self, owner_id: int) -> int:
        """Return one past the highest sort order the owner has used."""
        with self.session_factory() as session:
            statement = select(func.max(Transaction.sort_order)).where(
                Transaction.owner_id == owner_id
            )
            highest = session.exec(statement).one()
            return (highest or 0) + 1
