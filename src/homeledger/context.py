"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.engine import Engine

from .config import BaseConfig
from .infra.database import create_db_engine, init_database
from .infra.unit_of_work import SQLModelUnitOfWork, create_unit_of_work_factory
from .services.accounts import AccountService
from .services.forecast import ForecastService
from .services.scheduled import ScheduledTransactionService
from .services.transactions import TransactionService


@dataclass
class AppContext:
    """Centralized application context with services and wiring."""

    config: BaseConfig
    engine: Engine
    uow_factory: Callable[[], SQLModelUnitOfWork]

    accounts: AccountService
    transactions: TransactionService
    scheduled: ScheduledTransactionService
    forecasts: ForecastService

    def dispose(self) -> None:
        """Release pooled database connections."""
        self.engine.dispose()


def create_app_context(
    config: Optional[BaseConfig] = None,
    *,
    clock: Callable[[], datetime] = datetime.now,
) -> AppContext:
    """Create the engine, make sure the schema exists, and wire the services."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)

    uow_factory = create_unit_of_work_factory(
        engine, balance_write_retries=config.BALANCE_WRITE_RETRIES
    )
    transactions = TransactionService(uow_factory)
    scheduled = ScheduledTransactionService(
        uow_factory,
        transactions,
        clock=clock,
        due_horizon=timedelta(days=config.DUE_HORIZON_DAYS),
        catch_up_limit=config.CATCH_UP_LIMIT,
    )

    return AppContext(
        config=config,
        engine=engine,
        uow_factory=uow_factory,
        accounts=AccountService(uow_factory),
        transactions=transactions,
        scheduled=scheduled,
        forecasts=ForecastService(uow_factory, max_iterations=config.FORECAST_MAX_ITERATIONS),
    )
