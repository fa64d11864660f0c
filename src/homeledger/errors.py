"""Exceptions raised by the ledger and scheduling services."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional


class LedgerError(Exception):
    """Base class for all failures surfaced by the ledger core."""


class InvalidAmountError(LedgerError, ValueError):
    """Amount is missing or negative."""

    def __init__(self, amount: Optional[Decimal]):
        self.amount = amount
        super().__init__(f"Amount cannot be negative or empty (got {amount!r})")


class NotFoundError(LedgerError, LookupError):
    """A referenced entity id does not resolve."""

    def __init__(self, entity: str, entity_id: Optional[int]):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class StaleAccountReferenceError(NotFoundError):
    """A scheduled template names an account that no longer exists."""

    def __init__(self, template_id: Optional[int], account_id: int):
        self.template_id = template_id
        super().__init__("account", account_id)
        self.args = (
            f"Scheduled transaction {template_id} references missing account {account_id}",
        )


class ConcurrentModificationError(LedgerError):
    """A balance write kept losing the version check against another writer."""

    def __init__(self, account_id: int, attempts: int):
        self.account_id = account_id
        self.attempts = attempts
        super().__init__(
            f"Balance of account {account_id} changed concurrently; gave up after {attempts} attempts"
        )


__all__ = [
    "ConcurrentModificationError",
    "InvalidAmountError",
    "LedgerError",
    "NotFoundError",
    "StaleAccountReferenceError",
]
