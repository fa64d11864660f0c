"""Balance engine: apply and reverse the effect of a transaction on its accounts."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Mapping, Optional, Protocol

from ..domain.repositories import AccountRepository
from ..logging_config import get_logger
from ..models.enums import TransactionType

logger = get_logger(__name__)

FROM_SIDE = "from_account_id"
TO_SIDE = "to_account_id"

# Per transaction type: which account side moves, and in which direction on apply.
BALANCE_EFFECTS: Mapping[TransactionType, tuple[tuple[str, int], ...]] = {
    TransactionType.EXPENSE: ((FROM_SIDE, -1),),
    TransactionType.INCOME: ((TO_SIDE, +1),),
    TransactionType.TRANSFER: ((FROM_SIDE, -1), (TO_SIDE, +1)),
}


class LedgerEntry(Protocol):
    """Anything shaped like a transaction: a Transaction or a ScheduledTransaction."""

    type: TransactionType
    amount: Decimal
    from_account_id: Optional[int]
    to_account_id: Optional[int]


def to_decimal(value: object) -> Decimal:
    """Coerce ints, strings and floats to Decimal without binary float noise."""

    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def signed_effects(entry: LedgerEntry) -> list[tuple[int, Decimal]]:
    """Return ``(account_id, delta)`` pairs produced by applying ``entry``.

    Sides without an account are skipped.
    """

    amount = to_decimal(entry.amount)
    effects: list[tuple[int, Decimal]] = []
    for side, sign in BALANCE_EFFECTS[TransactionType(entry.type)]:
        account_id = getattr(entry, side)
        if account_id is None:
            continue
        effects.append((account_id, amount * sign))
    return effects


def derived_balance(
    start_balance: Decimal, account_id: int, entries: Iterable[LedgerEntry]
) -> Decimal:
    """Recompute a balance as start balance plus every entry's effect on the account."""

    total = to_decimal(start_balance or 0)
    for entry in entries:
        for touched, delta in signed_effects(entry):
            if touched == account_id:
                total += delta
    return total


class Ledger:
    """Mutates account balances; the only writer of ``Account.balance``.

    All writes go through ``AccountRepository.adjust_balance`` which re-reads
    the row and guards the write with a version check.
    """

    def __init__(self, accounts: AccountRepository):
        self.accounts = accounts

    def apply(self, entry: LedgerEntry) -> None:
        """Apply the balance effect of ``entry``."""
        self._post(entry, direction=1)

    def reverse(self, entry: LedgerEntry) -> None:
        """Undo the balance effect of ``entry``; pass the previously persisted state."""
        self._post(entry, direction=-1)

    def shift(self, account_id: int, delta: Decimal) -> None:
        """Move a balance by ``delta`` without a transaction, e.g. a new start balance."""
        if not delta:
            return
        self.accounts.adjust_balance(account_id, delta)
        logger.debug("Ledger shifted", extra={"account_id": account_id, "delta": str(delta)})

    def _post(self, entry: LedgerEntry, *, direction: int) -> None:
        for account_id, delta in signed_effects(entry):
            self.accounts.adjust_balance(account_id, delta * direction)
        logger.debug(
            "Ledger %s",
            "applied" if direction > 0 else "reversed",
            extra={
                "type": TransactionType(entry.type).value,
                "amount": str(entry.amount),
                "from_account_id": entry.from_account_id,
                "to_account_id": entry.to_account_id,
            },
        )


__all__ = ["BALANCE_EFFECTS", "Ledger", "derived_balance", "signed_effects", "to_decimal"]
