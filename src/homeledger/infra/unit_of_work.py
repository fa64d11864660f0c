"""SQLModel-backed unit of work."""

from __future__ import annotations

from types import TracebackType
from typing import Callable, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session

from ..logging_config import get_logger
from .database import bind_session_factory
from .repositories import (
    SQLModelAccountRepository,
    SQLModelScheduledTransactionRepository,
    SQLModelTransactionRepository,
)

logger = get_logger(__name__)


class SQLModelUnitOfWork:
    """Open one session, expose repositories bound to it, commit or roll back on exit."""

    def __init__(self, engine: Engine, *, balance_write_retries: int = 3):
        self.engine = engine
        self.balance_write_retries = balance_write_retries
        self.session: Optional[Session] = None

    def __enter__(self) -> "SQLModelUnitOfWork":
        self.session = Session(self.engine, expire_on_commit=False)
        factory = bind_session_factory(self.session)
        self.accounts = SQLModelAccountRepository(factory, max_retries=self.balance_write_retries)
        self.transactions = SQLModelTransactionRepository(factory)
        self.scheduled = SQLModelScheduledTransactionRepository(factory)
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        assert self.session is not None
        try:
            if exc_type is None:
                self.session.commit()
            else:
                logger.debug("Rolling back unit of work", extra={"error": repr(exc)})
                self.session.rollback()
        finally:
            self.session.close()
            self.session = None


def create_unit_of_work_factory(
    engine: Engine, *, balance_write_retries: int = 3
) -> Callable[[], SQLModelUnitOfWork]:
    """Return a zero-argument callable producing fresh units of work."""

    def factory() -> SQLModelUnitOfWork:
        return SQLModelUnitOfWork(engine, balance_write_retries=balance_write_retries)

    return factory
