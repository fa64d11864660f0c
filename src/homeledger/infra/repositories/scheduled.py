"""SQLModel implementation of the scheduled transaction repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import select

from ...models.scheduled import ScheduledTransaction
from ..database import SessionFactory


class SQLModelScheduledTransactionRepository:
    """SQLModel-based template repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, template_id: int) -> Optional[ScheduledTransaction]:
        """Retrieve a template by ID."""
        with self.session_factory() as session:
            return session.get(ScheduledTransaction, template_id)

    def list_for_owner(self, owner_id: int) -> list[ScheduledTransaction]:
        """List all of an owner's templates, soonest first."""
        with self.session_factory() as session:
            statement = (
                select(ScheduledTransaction)
                .where(ScheduledTransaction.owner_id == owner_id)
                .order_by(ScheduledTransaction.next_occurrence)  # type: ignore[arg-type]
            )
            return list(session.exec(statement).all())

    def list_enabled(self, owner_id: Optional[int] = None) -> list[ScheduledTransaction]:
        """List enabled templates, optionally restricted to one owner."""
        with self.session_factory() as session:
            statement = select(ScheduledTransaction).where(
                ScheduledTransaction.enabled == True  # noqa: E712
            )
            if owner_id is not None:
                statement = statement.where(ScheduledTransaction.owner_id == owner_id)
            statement = statement.order_by(ScheduledTransaction.next_occurrence)  # type: ignore[arg-type]
            return list(session.exec(statement).all())

    def save(self, template: ScheduledTransaction) -> ScheduledTransaction:
        """Insert a new template or merge changes into an existing one."""
        with self.session_factory() as session:
            if template.id is None:
                session.add(template)
                session.flush()
                session.refresh(template)
                return template
            merged = session.merge(template)
            session.flush()
            return merged

    def delete(self, template_id: int) -> None:
        """Delete a template by ID."""
        with self.session_factory() as session:
            template = session.get(ScheduledTransaction, template_id)
            if template:
                session.delete(template)
                session.flush()
