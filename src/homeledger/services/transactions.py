"""Transaction lifecycle: create, update and delete with balance bookkeeping."""

from __future__ import annotations

from decimal import Decimal
from typing import Callable, Optional

from ..domain.unit_of_work import UnitOfWork
from ..errors import InvalidAmountError, NotFoundError
from ..logging_config import get_logger
from ..models.enums import TransactionStatus
from ..models.transaction import Transaction
from .ledger import Ledger, to_decimal

logger = get_logger(__name__)


def validate_amount(amount: Optional[object]) -> Decimal:
    """Return ``amount`` as a Decimal, rejecting missing and negative values."""

    if amount is None:
        raise InvalidAmountError(None)
    value = to_decimal(amount)
    if value < 0:
        raise InvalidAmountError(value)
    return value


class TransactionService:
    """Owns the reverse-then-apply sequence around every transaction write."""

    def __init__(self, uow_factory: Callable[[], UnitOfWork]):
        self.uow_factory = uow_factory

    def get(self, transaction_id: int) -> Transaction:
        with self.uow_factory() as uow:
            transaction = uow.transactions.get_by_id(transaction_id)
            if transaction is None:
                raise NotFoundError("transaction", transaction_id)
            return transaction

    def list_for_owner(self, owner_id: int) -> list[Transaction]:
        with self.uow_factory() as uow:
            return uow.transactions.list_for_owner(owner_id)

    def create_or_update(self, transaction: Transaction) -> Transaction:
        """Save ``transaction`` and bring account balances in line with it.

        A transaction with an id is an edit: the stored version is reversed
        before the new one is applied. Amount and references are validated
        before any balance moves.
        """
        with self.uow_factory() as uow:
            return self.save_within(uow, transaction)

    def save_within(self, uow: UnitOfWork, transaction: Transaction) -> Transaction:
        """Run the save inside a unit of work the caller already holds.

        ``transaction`` must not be the instance ``uow`` loaded for the same
        id, otherwise the stored state is already overwritten and cannot be
        reversed.
        """
        transaction.amount = validate_amount(transaction.amount)

        existing: Optional[Transaction] = None
        if transaction.id is not None:
            existing = uow.transactions.get_by_id(transaction.id)
            if existing is None:
                raise NotFoundError("transaction", transaction.id)

        for account_id in (transaction.from_account_id, transaction.to_account_id):
            if account_id is not None and uow.accounts.get_by_id(account_id) is None:
                raise NotFoundError("account", account_id)

        ledger = Ledger(uow.accounts)
        if existing is not None:
            ledger.reverse(existing)
        ledger.apply(transaction)

        transaction.status = TransactionStatus.COMPLETED
        if existing is None:
            if transaction.sort_order is None:
                transaction.sort_order = uow.transactions.next_sort_order(transaction.owner_id)
            saved = uow.transactions.create(transaction)
            action = "created"
        else:
            if transaction.sort_order is None:
                transaction.sort_order = existing.sort_order
            saved = uow.transactions.update(transaction)
            action = "updated"

        logger.info(
            "Transaction %s",
            action,
            extra={
                "transaction_id": saved.id,
                "type": saved.type,
                "amount": str(saved.amount),
            },
        )
        return saved

    def delete(self, transaction_id: int) -> None:
        """Reverse the stored transaction's effect, then remove it."""
        with self.uow_factory() as uow:
            existing = uow.transactions.get_by_id(transaction_id)
            if existing is None:
                raise NotFoundError("transaction", transaction_id)
            Ledger(uow.accounts).reverse(existing)
            uow.transactions.delete(transaction_id)
        logger.info("Transaction deleted", extra={"transaction_id": transaction_id})
