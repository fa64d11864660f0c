"""Scheduled transaction repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.scheduled import ScheduledTransaction


class ScheduledTransactionRepository(Protocol):
    """Repository for recurring transaction templates."""

    def get_by_id(self, template_id: int) -> Optional[ScheduledTransaction]:
        """Retrieve a template by ID."""
        ...

    def list_for_owner(self, owner_id: int) -> list[ScheduledTransaction]:
        """List all of an owner's templates."""
        ...

    def list_enabled(self, owner_id: Optional[int] = None) -> list[ScheduledTransaction]:
        """List enabled templates, optionally for one owner, by next occurrence."""
        ...

    def save(self, template: ScheduledTransaction) -> ScheduledTransaction:
        """Insert or update a template."""
        ...

    def delete(self, template_id: int) -> None:
        """Delete a template by ID."""
        ...
