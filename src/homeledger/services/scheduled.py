"""Recurring templates: posting, skipping and due selection."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..domain.unit_of_work import UnitOfWork
from ..errors import LedgerError, NotFoundError, StaleAccountReferenceError
from ..logging_config import get_logger
from ..models.enums import RecurrencePattern, TransactionStatus
from ..models.scheduled import ScheduledTransaction
from ..models.transaction import Transaction
from .recurrence import next_occurrence
from .transactions import TransactionService, validate_amount

logger = get_logger(__name__)

Clock = Callable[[], datetime]


@dataclass(slots=True)
class PostDueResult:
    """Outcome of a catch-up run over due templates."""

    posted: list[Transaction] = field(default_factory=list)
    failures: list[tuple[int, LedgerError]] = field(default_factory=list)

    @property
    def posted_count(self) -> int:
        return len(self.posted)


def build_transaction(template: ScheduledTransaction) -> Transaction:
    """Materialize the template's current occurrence as an unsaved transaction.

    The template's id and ordering are not carried over; the lifecycle
    service assigns the sort order.
    """

    return Transaction(
        owner_id=template.owner_id,
        type=template.type,
        amount=template.amount,
        from_account_id=template.from_account_id,
        to_account_id=template.to_account_id,
        payee=template.payee,
        category=template.category,
        memo=template.memo,
        tags=template.tags,
        number=template.number,
        asset=template.asset,
        units=template.units,
        transaction_date=template.next_occurrence,
        status=TransactionStatus.COMPLETED,
    )


class ScheduledTransactionService:
    """Owns recurring templates and turns them into transactions."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        transactions: TransactionService,
        *,
        clock: Clock = datetime.now,
        due_horizon: timedelta = timedelta(days=30),
        catch_up_limit: int = 366,
    ):
        self.uow_factory = uow_factory
        self.transactions = transactions
        self.clock = clock
        self.due_horizon = due_horizon
        self.catch_up_limit = catch_up_limit

    def get(self, template_id: int) -> ScheduledTransaction:
        with self.uow_factory() as uow:
            return self._load(uow, template_id)

    def list_for_owner(self, owner_id: int) -> list[ScheduledTransaction]:
        with self.uow_factory() as uow:
            return uow.scheduled.list_for_owner(owner_id)

    def save(self, template: ScheduledTransaction) -> ScheduledTransaction:
        """Persist a template. Templates never move a balance by themselves."""
        template.amount = validate_amount(template.amount)
        template.recurrence_pattern = RecurrencePattern(template.recurrence_pattern)
        with self.uow_factory() as uow:
            if template.id is not None:
                self._load(uow, template.id)
            return uow.scheduled.save(template)

    def delete(self, template_id: int) -> None:
        with self.uow_factory() as uow:
            self._load(uow, template_id)
            uow.scheduled.delete(template_id)
        logger.info("Scheduled transaction deleted", extra={"template_id": template_id})

    def post(self, template_id: int) -> Transaction:
        """Post the template's current occurrence and advance it by one step."""
        with self.uow_factory() as uow:
            template = self._load(uow, template_id)
            return self._post_within(uow, template)

    def skip(self, template_id: int) -> ScheduledTransaction:
        """Advance the template by one step without posting anything."""
        with self.uow_factory() as uow:
            template = self._load(uow, template_id)
            skipped = template.next_occurrence
            advanced = self._advance(uow, template)
        logger.info(
            "Scheduled transaction skipped",
            extra={
                "template_id": template_id,
                "skipped": skipped.isoformat(),
                "next_occurrence": advanced.next_occurrence.isoformat(),
            },
        )
        return advanced

    def due(
        self,
        owner_id: int,
        horizon: Optional[timedelta] = None,
        now: Optional[datetime] = None,
    ) -> list[ScheduledTransaction]:
        """Enabled templates whose next occurrence falls before ``now + horizon``."""
        cutoff = (now or self.clock()) + (self.due_horizon if horizon is None else horizon)
        with self.uow_factory() as uow:
            templates = uow.scheduled.list_enabled(owner_id)
        return sorted(
            (t for t in templates if t.next_occurrence < cutoff),
            key=lambda t: t.next_occurrence,
        )

    def post_due(
        self, owner_id: Optional[int] = None, now: Optional[datetime] = None
    ) -> PostDueResult:
        """Post every occurrence that is already due, template by template.

        Each posting runs in its own unit of work, so a template that fails
        (for instance because its account was deleted) is reported in the
        result and does not undo postings of other templates.
        """
        moment = now or self.clock()
        result = PostDueResult()
        with self.uow_factory() as uow:
            template_ids = [t.id for t in uow.scheduled.list_enabled(owner_id) if t.id is not None]

        for template_id in template_ids:
            try:
                self._catch_up(template_id, moment, result)
            except LedgerError as exc:
                logger.error(
                    "Posting scheduled transaction failed",
                    extra={"template_id": template_id},
                    exc_info=True,
                )
                result.failures.append((template_id, exc))

        logger.info(
            "Posted due scheduled transactions",
            extra={"posted": result.posted_count, "failed": len(result.failures)},
        )
        return result

    def _catch_up(self, template_id: int, moment: datetime, result: PostDueResult) -> None:
        # The template may be edited or deleted by others between postings.
        for posted_so_far in range(self.catch_up_limit + 1):
            template = self.get(template_id)
            if template.next_occurrence > moment:
                return
            if posted_so_far == self.catch_up_limit:
                logger.warning(
                    "Catch-up limit reached; remaining occurrences left due",
                    extra={"template_id": template_id, "limit": self.catch_up_limit},
                )
                return
            result.posted.append(self.post(template_id))

    def _load(self, uow: UnitOfWork, template_id: int) -> ScheduledTransaction:
        template = uow.scheduled.get_by_id(template_id)
        if template is None:
            raise NotFoundError("scheduled transaction", template_id)
        return template

    def _resolve_accounts(self, uow: UnitOfWork, template: ScheduledTransaction) -> None:
        # Re-fetch by id; the template may point at an account deleted since it was saved.
        for account_id in (template.from_account_id, template.to_account_id):
            if account_id is not None and uow.accounts.get_by_id(account_id) is None:
                raise StaleAccountReferenceError(template.id, account_id)

    def _post_within(self, uow: UnitOfWork, template: ScheduledTransaction) -> Transaction:
        self._resolve_accounts(uow, template)
        posted = self.transactions.save_within(uow, build_transaction(template))
        self._advance(uow, template)
        logger.info(
            "Scheduled transaction posted",
            extra={
                "template_id": template.id,
                "transaction_id": posted.id,
                "next_occurrence": template.next_occurrence.isoformat(),
            },
        )
        return posted

    def _advance(self, uow: UnitOfWork, template: ScheduledTransaction) -> ScheduledTransaction:
        template.next_occurrence = next_occurrence(
            template.next_occurrence, template.recurrence_pattern, template.recurrence_value
        )
        return uow.scheduled.save(template)
