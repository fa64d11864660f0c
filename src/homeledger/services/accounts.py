"""Account helpers: opening balances and balance reconciliation."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable

from ..domain.unit_of_work import UnitOfWork
from ..errors import NotFoundError
from ..logging_config import get_logger
from ..models.account import Account
from ..models.enums import AccountType
from .ledger import Ledger, derived_balance, to_decimal

logger = get_logger(__name__)


@dataclass(slots=True)
class Reconciliation:
    """Stored balance next to the balance recomputed from transactions."""

    account_id: int
    stored: Decimal
    derived: Decimal

    @property
    def drift(self) -> Decimal:
        return self.stored - self.derived

    @property
    def balanced(self) -> bool:
        return self.drift == 0


class AccountService:
    """Account operations; balance changes are handed to the Ledger."""

    def __init__(self, uow_factory: Callable[[], UnitOfWork]):
        self.uow_factory = uow_factory

    def create_account(
        self,
        *,
        owner_id: int,
        name: str,
        account_type: AccountType = AccountType.BANK,
        currency: str = "EUR",
        start_balance: Decimal | int | str = Decimal("0"),
    ) -> Account:
        """Open an account whose balance starts at ``start_balance``."""
        opening = to_decimal(start_balance)
        account = Account(
            owner_id=owner_id,
            name=name,
            account_type=AccountType(account_type),
            currency=currency,
            start_balance=opening,
            balance=opening,
        )
        with self.uow_factory() as uow:
            created = uow.accounts.create(account)
        logger.info("Account created", extra={"account_id": created.id, "owner_id": owner_id})
        return created

    def get(self, account_id: int) -> Account:
        with self.uow_factory() as uow:
            account = uow.accounts.get_by_id(account_id)
            if account is None:
                raise NotFoundError("account", account_id)
            return account

    def list_for_owner(self, owner_id: int) -> list[Account]:
        with self.uow_factory() as uow:
            return uow.accounts.list_for_owner(owner_id)

    def adjust_start_balance(self, account_id: int, new_start: Decimal | int | str) -> Account:
        """Change the opening balance and shift the running balance by the same delta."""
        target = to_decimal(new_start)
        with self.uow_factory() as uow:
            account = uow.accounts.get_by_id(account_id)
            if account is None:
                raise NotFoundError("account", account_id)
            delta = target - to_decimal(account.start_balance or 0)
            account.start_balance = target
            uow.accounts.update(account)
            Ledger(uow.accounts).shift(account_id, delta)
            return uow.accounts.get_by_id(account_id)  # type: ignore[return-value]

    def reconcile(self, account_id: int) -> Reconciliation:
        """Compare the stored balance with start balance plus applied transactions."""
        with self.uow_factory() as uow:
            account = uow.accounts.get_by_id(account_id)
            if account is None:
                raise NotFoundError("account", account_id)
            entries = uow.transactions.list_for_account(account_id)
            result = Reconciliation(
                account_id=account_id,
                stored=to_decimal(account.balance or 0),
                derived=derived_balance(account.start_balance, account_id, entries),
            )
        if not result.balanced:
            logger.warning(
                "Account balance drift detected",
                extra={"account_id": account_id, "drift": str(result.drift)},
            )
        return result

    def delete_account(self, account_id: int) -> None:
        """Delete the account; transactions and templates naming it lose that side."""
        with self.uow_factory() as uow:
            if uow.accounts.get_by_id(account_id) is None:
                raise NotFoundError("account", account_id)
            uow.accounts.delete(account_id)
        logger.info("Account deleted", extra={"account_id": account_id})
