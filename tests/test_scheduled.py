"""Tests for scheduled transaction posting, skipping and due selection."""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from homeledger.errors import InvalidAmountError, NotFoundError, StaleAccountReferenceError
from homeledger.models import RecurrencePattern, ScheduledTransaction, TransactionStatus, TransactionType
from homeledger.services.scheduled import ScheduledTransactionService, build_transaction

OWNER_ID = 1
NOW = datetime(2024, 3, 10, 8, 0)


def test_build_transaction_copies_template_fields():
    template = ScheduledTransaction(
        id=7,
        owner_id=OWNER_ID,
        type=TransactionType.TRANSFER,
        amount=Decimal("12.34"),
        from_account_id=1,
        to_account_id=2,
        payee="Broker",
        category="Savings",
        memo="monthly",
        tags="invest",
        number="42",
        asset="ETF",
        units=Decimal("0.5"),
        next_occurrence=datetime(2024, 5, 1, 9, 0),
        recurrence_pattern=RecurrencePattern.MONTHLY,
    )

    transaction = build_transaction(template)

    assert transaction.id is None
    assert transaction.sort_order is None
    assert transaction.transaction_date == datetime(2024, 5, 1, 9, 0)
    assert transaction.status == TransactionStatus.COMPLETED
    assert (transaction.from_account_id, transaction.to_account_id) == (1, 2)
    assert (transaction.payee, transaction.category, transaction.memo) == ("Broker", "Savings", "monthly")
    assert (transaction.tags, transaction.number, transaction.asset) == ("invest", "42", "ETF")
    assert transaction.units == Decimal("0.5")


def test_post_creates_transaction_and_advances(account_factory, template_factory, scheduled_service, balance_of):
    account = account_factory(start_balance="1000")
    template = template_factory(
        datetime(2024, 1, 31, 9, 0), amount="75", from_account_id=account.id
    )

    posted = scheduled_service.post(template.id)

    assert posted.id is not None
    assert posted.transaction_date == datetime(2024, 1, 31, 9, 0)
    assert posted.status == TransactionStatus.COMPLETED
    assert posted.amount == Decimal("75")
    assert balance_of(account.id) == Decimal("925")
    assert scheduled_service.get(template.id).next_occurrence == datetime(2024, 2, 29, 9, 0)


def test_post_assigns_next_sort_order(account_factory, transaction_factory, template_factory, scheduled_service):
    account = account_factory(start_balance="1000")
    transaction_factory(amount="5", from_account_id=account.id)
    template = template_factory(datetime(2024, 1, 1), from_account_id=account.id)

    posted = scheduled_service.post(template.id)

    assert posted.sort_order == 2


@pytest.mark.parametrize(
    "start, expected",
    [
        (datetime(2024, 1, 31), datetime(2024, 2, 29)),
        (datetime(2023, 1, 31), datetime(2023, 2, 28)),
    ],
)
def test_skip_advances_without_posting(
    account_factory, template_factory, scheduled_service, transaction_service, balance_of, start, expected
):
    account = account_factory(start_balance="1000")
    template = template_factory(start, from_account_id=account.id)

    skipped = scheduled_service.skip(template.id)

    assert skipped.next_occurrence == expected
    assert balance_of(account.id) == Decimal("1000")
    assert transaction_service.list_for_owner(OWNER_ID) == []


def test_weekly_from_friday(template_factory, scheduled_service):
    template = template_factory(datetime(2024, 1, 5), pattern=RecurrencePattern.EVERY_FRIDAY)

    assert scheduled_service.skip(template.id).next_occurrence == datetime(2024, 1, 12)


def test_post_and_skip_unknown_template(scheduled_service):
    with pytest.raises(NotFoundError):
        scheduled_service.post(404)
    with pytest.raises(NotFoundError):
        scheduled_service.skip(404)


def test_post_with_stale_account_changes_nothing(
    account_factory, template_factory, scheduled_service, transaction_service, balance_of
):
    account = account_factory(start_balance="1000")
    template = template_factory(
        datetime(2024, 1, 1),
        type=TransactionType.TRANSFER,
        from_account_id=account.id,
        to_account_id=9999,
    )

    with pytest.raises(StaleAccountReferenceError) as excinfo:
        scheduled_service.post(template.id)

    assert isinstance(excinfo.value, NotFoundError)
    assert excinfo.value.template_id == template.id
    assert excinfo.value.entity_id == 9999
    assert balance_of(account.id) == Decimal("1000")
    assert transaction_service.list_for_owner(OWNER_ID) == []
    assert scheduled_service.get(template.id).next_occurrence == datetime(2024, 1, 1)


def test_post_after_account_deleted_drops_that_side(
    account_factory, account_service, template_factory, scheduled_service, balance_of
):
    checking = account_factory(name="A", start_balance="1000")
    savings = account_factory(name="B", start_balance="0")
    template = template_factory(
        datetime(2024, 1, 1),
        type=TransactionType.TRANSFER,
        amount="100",
        from_account_id=checking.id,
        to_account_id=savings.id,
    )
    account_service.delete_account(savings.id)

    posted = scheduled_service.post(template.id)

    assert posted.to_account_id is None
    assert balance_of(checking.id) == Decimal("900")


def test_save_validates_amount_and_pattern(scheduled_service):
    negative = ScheduledTransaction(
        owner_id=OWNER_ID,
        type=TransactionType.EXPENSE,
        amount=Decimal("-1"),
        next_occurrence=NOW,
        recurrence_pattern=RecurrencePattern.DAILY,
    )
    with pytest.raises(InvalidAmountError):
        scheduled_service.save(negative)

    bad_pattern = ScheduledTransaction(
        owner_id=OWNER_ID,
        type=TransactionType.EXPENSE,
        amount=Decimal("1"),
        next_occurrence=NOW,
        recurrence_pattern="HOURLY",
    )
    with pytest.raises(ValueError):
        scheduled_service.save(bad_pattern)

    assert scheduled_service.list_for_owner(OWNER_ID) == []


def test_save_updates_existing_template(template_factory, scheduled_service):
    template = template_factory(datetime(2024, 1, 1), amount="10")

    template.amount = Decimal("20")
    template.enabled = False
    scheduled_service.save(template)

    reloaded = scheduled_service.get(template.id)
    assert reloaded.amount == Decimal("20")
    assert reloaded.enabled is False


def test_save_unknown_id_raises(scheduled_service):
    template = ScheduledTransaction(
        id=404,
        owner_id=OWNER_ID,
        type=TransactionType.INCOME,
        amount=Decimal("1"),
        next_occurrence=NOW,
        recurrence_pattern=RecurrencePattern.DAILY,
    )
    with pytest.raises(NotFoundError):
        scheduled_service.save(template)


def test_delete_template(template_factory, scheduled_service):
    template = template_factory(datetime(2024, 1, 1))

    scheduled_service.delete(template.id)

    with pytest.raises(NotFoundError):
        scheduled_service.get(template.id)
    with pytest.raises(NotFoundError):
        scheduled_service.delete(template.id)


def test_due_filters_by_horizon_and_enabled(template_factory, scheduled_service):
    soon = template_factory(NOW + timedelta(days=5), payee="soon")
    overdue = template_factory(NOW - timedelta(days=2), payee="overdue")
    template_factory(NOW + timedelta(days=40), payee="later")
    template_factory(NOW + timedelta(days=1), enabled=False, payee="disabled")
    template_factory(NOW + timedelta(days=1), owner_id=2, payee="other owner")

    due = scheduled_service.due(OWNER_ID)

    assert [t.id for t in due] == [overdue.id, soon.id]
    assert [t.id for t in scheduled_service.due(OWNER_ID, horizon=timedelta(0))] == [overdue.id]
    assert len(scheduled_service.due(OWNER_ID, horizon=timedelta(days=60))) == 3


def test_post_due_catches_up_to_now(account_factory, template_factory, scheduled_service, balance_of):
    account = account_factory(start_balance="1000")
    template = template_factory(
        NOW - timedelta(days=2),
        pattern=RecurrencePattern.DAILY,
        amount="10",
        from_account_id=account.id,
    )

    result = scheduled_service.post_due(OWNER_ID)

    assert result.posted_count == 3
    assert result.failures == []
    assert [t.transaction_date for t in result.posted] == [
        NOW - timedelta(days=2),
        NOW - timedelta(days=1),
        NOW,
    ]
    assert balance_of(account.id) == Decimal("970")
    assert scheduled_service.get(template.id).next_occurrence == NOW + timedelta(days=1)


def test_post_due_respects_catch_up_limit(uow_factory, transaction_service, account_factory, template_factory, balance_of):
    service = ScheduledTransactionService(uow_factory, transaction_service, clock=lambda: NOW, catch_up_limit=2)
    account = account_factory(start_balance="1000")
    template = template_factory(
        NOW - timedelta(days=9),
        pattern=RecurrencePattern.DAILY,
        amount="10",
        from_account_id=account.id,
    )

    result = service.post_due()

    assert result.posted_count == 2
    assert balance_of(account.id) == Decimal("980")
    assert service.get(template.id).next_occurrence == NOW - timedelta(days=7)


def test_post_due_reports_failures_and_keeps_going(account_factory, template_factory, scheduled_service, balance_of):
    account = account_factory(start_balance="1000")
    broken = template_factory(NOW - timedelta(hours=1), from_account_id=9999)
    healthy = template_factory(NOW - timedelta(hours=1), amount="25", from_account_id=account.id)

    result = scheduled_service.post_due(OWNER_ID)

    assert result.posted_count == 1
    assert [template_id for template_id, _ in result.failures] == [broken.id]
    assert isinstance(result.failures[0][1], StaleAccountReferenceError)
    assert balance_of(account.id) == Decimal("975")
    assert scheduled_service.get(healthy.id).next_occurrence > NOW


def test_post_due_ignores_disabled_and_future_templates(account_factory, template_factory, scheduled_service, balance_of):
    account = account_factory(start_balance="1000")
    template_factory(NOW - timedelta(days=1), from_account_id=account.id, enabled=False)
    template_factory(NOW + timedelta(hours=1), from_account_id=account.id)

    result = scheduled_service.post_due(OWNER_ID)

    assert result.posted_count == 0
    assert balance_of(account.id) == Decimal("1000")


def test_manual_post_of_disabled_template(account_factory, template_factory, scheduled_service, balance_of):
    account = account_factory(start_balance="1000")
    template = template_factory(datetime(2024, 1, 1), amount="10", from_account_id=account.id, enabled=False)

    scheduled_service.post(template.id)

    assert balance_of(account.id) == Decimal("990")


def test_post_due_survives_template_deleted_mid_run(
    account_factory, template_factory, scheduled_service, balance_of, monkeypatch
):
    account = account_factory(start_balance="1000")
    first = template_factory(NOW - timedelta(hours=2), amount="10", from_account_id=account.id)
    vanishing = template_factory(NOW - timedelta(hours=1), amount="20", from_account_id=account.id)
    last = template_factory(NOW - timedelta(minutes=30), amount="30", from_account_id=account.id)
    real_post = scheduled_service.post

    def post_then_delete(template_id):
        posted = real_post(template_id)
        if template_id == first.id:
            scheduled_service.delete(vanishing.id)
        return posted

    monkeypatch.setattr(scheduled_service, "post", post_then_delete)

    result = scheduled_service.post_due(OWNER_ID)

    assert [t.amount for t in result.posted] == [Decimal("10"), Decimal("30")]
    assert [template_id for template_id, _ in result.failures] == [vanishing.id]
    assert isinstance(result.failures[0][1], NotFoundError)
    assert balance_of(account.id) == Decimal("960")
    assert scheduled_service.get(last.id).next_occurrence > NOW
