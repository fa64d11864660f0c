"""Pytest configuration and shared fixtures for HomeLedger tests.

This module provides database fixtures, service wiring and test data factories
for exercising the ledger, scheduling and forecast logic against a throwaway
SQLite file instead of the real application database.
"""

from __future__ import annotations

import tempfile
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest
from sqlmodel import SQLModel, create_engine

# Import all models to ensure they're registered with SQLModel metadata
from homeledger.models import (
    Account,
    AccountType,
    RecurrencePattern,
    ScheduledTransaction,
    Transaction,
    TransactionType,
)
from homeledger.infra.database import create_session_factory
from homeledger.infra.unit_of_work import create_unit_of_work_factory
from homeledger.services.accounts import AccountService
from homeledger.services.forecast import ForecastService
from homeledger.services.scheduled import ScheduledTransactionService
from homeledger.services.transactions import TransactionService

OWNER_ID = 1

# Fixed "now" for scheduling tests
NOW = datetime(2024, 3, 10, 8, 0)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to the test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(
        f"sqlite:///{db_path}", echo=False, connect_args={"check_same_thread": False}
    )
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Committing session factory, as used by repositories outside a unit of work."""
    return create_session_factory(db_engine)


@pytest.fixture(scope="function")
def uow_factory(db_engine):
    """Factory producing units of work over the test database."""
    return create_unit_of_work_factory(db_engine, balance_write_retries=3)


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def account_service(uow_factory) -> AccountService:
    return AccountService(uow_factory)


@pytest.fixture
def transaction_service(uow_factory) -> TransactionService:
    return TransactionService(uow_factory)


@pytest.fixture
def scheduled_service(uow_factory, transaction_service) -> ScheduledTransactionService:
    """Scheduled service whose clock is frozen at ``NOW``."""
    return ScheduledTransactionService(uow_factory, transaction_service, clock=lambda: NOW)


@pytest.fixture
def forecast_service(uow_factory) -> ForecastService:
    return ForecastService(uow_factory, max_iterations=10_000)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def account_factory(account_service):
    """Factory for creating test accounts.

    Returns:
        Callable: Function that opens and persists Account instances
    """

    def _create_account(
        name: str = "Checking",
        start_balance: Decimal | int | str = "0",
        account_type: AccountType = AccountType.BANK,
        owner_id: int = OWNER_ID,
    ) -> Account:
        return account_service.create_account(
            owner_id=owner_id,
            name=name,
            account_type=account_type,
            start_balance=start_balance,
        )

    return _create_account


@pytest.fixture
def transaction_factory(transaction_service):
    """Factory for posting transactions through the lifecycle service.

    Returns:
        Callable: Function that saves a Transaction and moves balances
    """

    def _create_transaction(
        type: TransactionType = TransactionType.EXPENSE,
        amount: Decimal | int | str = "10",
        from_account_id: int | None = None,
        to_account_id: int | None = None,
        transaction_date: datetime | None = None,
        payee: str | None = None,
        owner_id: int = OWNER_ID,
    ) -> Transaction:
        transaction = Transaction(
            owner_id=owner_id,
            type=type,
            amount=Decimal(str(amount)),
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            transaction_date=transaction_date or NOW,
            payee=payee,
        )
        return transaction_service.create_or_update(transaction)

    return _create_transaction


@pytest.fixture
def template_factory(scheduled_service):
    """Factory for saving recurring templates.

    Returns:
        Callable: Function that saves a ScheduledTransaction
    """

    def _create_template(
        next_occurrence: datetime,
        pattern: RecurrencePattern = RecurrencePattern.MONTHLY,
        type: TransactionType = TransactionType.EXPENSE,
        amount: Decimal | int | str = "10",
        from_account_id: int | None = None,
        to_account_id: int | None = None,
        recurrence_value: int | None = None,
        enabled: bool = True,
        payee: str | None = "Landlord",
        owner_id: int = OWNER_ID,
    ) -> ScheduledTransaction:
        template = ScheduledTransaction(
            owner_id=owner_id,
            type=type,
            amount=Decimal(str(amount)),
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            next_occurrence=next_occurrence,
            recurrence_pattern=pattern,
            recurrence_value=recurrence_value,
            enabled=enabled,
            payee=payee,
        )
        return scheduled_service.save(template)

    return _create_template


# =============================================================================
# Helper Utilities
# =============================================================================


@pytest.fixture
def balance_of(account_service):
    """Return a function reading an account's stored balance from the database."""

    def _balance(account_id: int) -> Decimal:
        return account_service.get(account_id).balance

    return _balance
