"""Account repository protocol."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol

from ...models.account import Account


class AccountRepository(Protocol):
    """Repository for managing account entities."""

    def get_by_id(self, account_id: int) -> Optional[Account]:
        """Retrieve an account by ID."""
        ...

    def list_for_owner(self, owner_id: int) -> list[Account]:
        """List an owner's accounts in display order."""
        ...

    def create(self, account: Account) -> Account:
        """Create a new account."""
        ...

    def update(self, account: Account) -> Account:
        """Update an existing account's descriptive fields."""
        ...

    def delete(self, account_id: int) -> None:
        """Delete an account and clear references to it."""
        ...

    def adjust_balance(self, account_id: int, delta: Decimal) -> Account:
        """Add ``delta`` to the stored balance without losing concurrent writes."""
        ...
