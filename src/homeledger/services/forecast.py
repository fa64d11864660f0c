"""Year forecast built from recurring templates."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable

from ..domain.unit_of_work import UnitOfWork
from ..logging_config import get_logger
from ..models.account import Account
from ..models.enums import TransactionType
from ..models.scheduled import ScheduledTransaction
from .ledger import to_decimal
from .recurrence import next_occurrence

logger = get_logger(__name__)

MonthKey = tuple[int, int]


@dataclass(slots=True)
class Forecast:
    """Projected income and expense per (year, month) for one calendar year."""

    year: int
    income: dict[MonthKey, Decimal] = field(default_factory=dict)
    expense: dict[MonthKey, Decimal] = field(default_factory=dict)

    @property
    def total_income(self) -> Decimal:
        return sum(self.income.values(), Decimal("0"))

    @property
    def total_expense(self) -> Decimal:
        return sum(self.expense.values(), Decimal("0"))

    @property
    def net(self) -> Decimal:
        return self.total_income - self.total_expense

    def months(self) -> list[dict[str, object]]:
        """One row per month of the year, zero-filled, for reporting."""
        rows: list[dict[str, object]] = []
        for month in range(1, 13):
            key = (self.year, month)
            income = self.income.get(key, Decimal("0"))
            expense = self.expense.get(key, Decimal("0"))
            rows.append(
                {"month": f"{self.year}-{month:02d}", "income": income, "expense": expense, "net": income - expense}
            )
        return rows


def _occurrences_in_year(
    template: ScheduledTransaction, year: int, max_iterations: int
) -> list[datetime]:
    """Return the template's occurrences that fall in ``year``.

    Works on a local copy of ``next_occurrence``; the template is never touched.
    Stops early, with a warning, when the step does not move forward or the
    iteration cap is hit.
    """

    found: list[datetime] = []
    occurrence = template.next_occurrence
    iterations = 0
    while occurrence.year <= year:
        if occurrence.year == year:
            found.append(occurrence)
        if iterations >= max_iterations:
            logger.warning(
                "Forecast iteration cap reached",
                extra={"template_id": template.id, "cap": max_iterations, "year": year},
            )
            break
        following = next_occurrence(
            occurrence, template.recurrence_pattern, template.recurrence_value
        )
        iterations += 1
        if following <= occurrence:
            logger.warning(
                "Recurrence did not advance; stopping forecast for template",
                extra={"template_id": template.id, "occurrence": occurrence.isoformat()},
            )
            break
        occurrence = following
    return found


def project(
    templates: Iterable[ScheduledTransaction], year: int, *, max_iterations: int = 100_000
) -> Forecast:
    """Bucket every enabled INCOME/EXPENSE occurrence in ``year`` by month."""

    income: dict[MonthKey, Decimal] = defaultdict(lambda: Decimal("0"))
    expense: dict[MonthKey, Decimal] = defaultdict(lambda: Decimal("0"))
    for template in templates:
        if not template.enabled:
            continue
        kind = TransactionType(template.type)
        if kind == TransactionType.TRANSFER:
            continue
        buckets = income if kind == TransactionType.INCOME else expense
        amount = to_decimal(template.amount)
        for occurrence in _occurrences_in_year(template, year, max_iterations):
            buckets[(occurrence.year, occurrence.month)] += amount
    return Forecast(year=year, income=dict(income), expense=dict(expense))


def _is_reportable(template: ScheduledTransaction, accounts: dict[int, Account]) -> bool:
    named = [
        accounts.get(account_id)
        for account_id in (template.from_account_id, template.to_account_id)
        if account_id is not None
    ]
    if not named:
        return True
    return any(account is None or not account.exclude_from_reports for account in named)


class ForecastService:
    """Loads an owner's templates and projects them over a year, read-only."""

    def __init__(self, uow_factory: Callable[[], UnitOfWork], *, max_iterations: int = 100_000):
        self.uow_factory = uow_factory
        self.max_iterations = max_iterations

    def forecast(self, owner_id: int, year: int) -> Forecast:
        with self.uow_factory() as uow:
            templates = uow.scheduled.list_enabled(owner_id)
            accounts = {a.id: a for a in uow.accounts.list_for_owner(owner_id) if a.id is not None}
        reportable = [t for t in templates if _is_reportable(t, accounts)]
        result = project(reportable, year, max_iterations=self.max_iterations)
        logger.info(
            "Forecast computed",
            extra={
                "owner_id": owner_id,
                "year": year,
                "templates": len(reportable),
                "income": str(result.total_income),
                "expense": str(result.total_expense),
            },
        )
        return result
