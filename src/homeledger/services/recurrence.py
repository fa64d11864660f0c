"""Next-occurrence arithmetic for recurring transactions.

Every pattern maps to a pure advance function ``(current, step) -> next``.
Time of day is carried over from ``current`` untouched. Month arithmetic uses
``relativedelta``, which clamps the day to the end of shorter months
(Jan 31 + 1 month is Feb 29 in a leap year, Feb 28 otherwise).

BI_WEEKLY and MONTHLY_LAST_DAY do not look at the step value.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Mapping, Optional

from dateutil.relativedelta import FR, SA, relativedelta

from ..models.enums import RecurrencePattern

AdvanceFn = Callable[[datetime, int], datetime]

SATURDAY = 5
SUNDAY = 6


def normalize_step(step: Optional[int]) -> int:
    """Return the effective step; anything missing or non-positive means 1."""

    if step is None or step <= 0:
        return 1
    return step


def _every_weekday(current: datetime, _step: int) -> datetime:
    following = current + timedelta(days=1)
    while following.weekday() in (SATURDAY, SUNDAY):
        following += timedelta(days=1)
    return following


ADVANCERS: Mapping[RecurrencePattern, AdvanceFn] = {
    RecurrencePattern.DAILY: lambda current, step: current + timedelta(days=step),
    RecurrencePattern.WEEKLY: lambda current, step: current + timedelta(weeks=step),
    RecurrencePattern.BI_WEEKLY: lambda current, _step: current + timedelta(weeks=2),
    RecurrencePattern.MONTHLY: lambda current, step: current + relativedelta(months=step),
    # day=31 is clamped to the month's last day
    RecurrencePattern.MONTHLY_LAST_DAY: lambda current, _step: current
    + relativedelta(months=1, day=31),
    RecurrencePattern.YEARLY: lambda current, step: current + relativedelta(years=step),
    # +1 day first so a Friday moves on to the following Friday
    RecurrencePattern.EVERY_FRIDAY: lambda current, _step: current
    + relativedelta(days=1, weekday=FR),
    RecurrencePattern.EVERY_SATURDAY: lambda current, _step: current
    + relativedelta(days=1, weekday=SA),
    RecurrencePattern.EVERY_WEEKDAY: _every_weekday,
}


def next_occurrence(
    current: datetime, pattern: RecurrencePattern | str, step: Optional[int] = None
) -> datetime:
    """Return the occurrence that follows ``current`` under ``pattern``.

    Raises:
        ValueError: if ``pattern`` is not a known recurrence pattern
    """

    advance = ADVANCERS[RecurrencePattern(pattern)]
    return advance(current, normalize_step(step))


__all__ = [
    "ADVANCERS",
    "next_occurrence",
    "normalize_step",
]
