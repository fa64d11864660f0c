"""Transaction repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.transaction import Transaction


class TransactionRepository(Protocol):
    """Repository for managing transaction entities."""

    def get_by_id(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        ...

    def list_for_owner(self, owner_id: int) -> list[Transaction]:
        """List an owner's transactions, newest first."""
        ...

    def list_for_account(self, account_id: int) -> list[Transaction]:
        """List transactions touching an account on either side."""
        ...

    def create(self, transaction: Transaction) -> Transaction:
        """Create a new transaction."""
        ...

    def update(self, transaction: Transaction) -> Transaction:
        """Update an existing transaction."""
        ...

    def delete(self, transaction_id: int) -> None:
        """Delete a transaction by ID."""
        ...

    def next_sort_order(self, owner_id: int) -> int:
        """Return the sort order a newly created transaction should receive."""
        ...
