"""Command-line entry points for HomeLedger."""

from __future__ import annotations

import functools
from datetime import date, timedelta
from typing import Any, Callable, Optional

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .errors import LedgerError
from .infra.database import init_database
from .logging_config import setup_logging


def _ledger_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Turn ledger failures into a clean CLI error with a non-zero exit code."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except LedgerError as exc:
            raise click.ClickException(str(exc)) from exc

    return wrapper


@click.group()
@click.pass_context
def main(click_ctx: click.Context) -> None:
    """HomeLedger ledger and recurring-transaction engine."""

    config = BaseConfig()
    setup_logging(config)
    app_ctx = create_app_context(config)
    click_ctx.obj = app_ctx
    click_ctx.call_on_close(app_ctx.dispose)


@main.command("init-db")
@click.pass_obj
def init_db(app_ctx: AppContext) -> None:
    """Create the database schema if it does not exist yet.

    Every command also does this on startup; ``init-db`` does nothing else.
    """

    init_database(app_ctx.engine)
    click.echo(f"Database ready: {app_ctx.config.DATABASE_URL}")


@main.command("due")
@click.option("--owner", "owner_id", type=int, required=True, help="Owner id")
@click.option("--days", type=int, default=None, help="Horizon in days (default from config)")
@click.pass_obj
def due(app_ctx: AppContext, owner_id: int, days: Optional[int]) -> None:
    """List enabled scheduled transactions due within the horizon."""

    horizon = timedelta(days=days) if days is not None else None
    templates = app_ctx.scheduled.due(owner_id, horizon=horizon)
    if not templates:
        click.echo("Nothing due.")
        return
    for template in templates:
        click.echo(
            f"{template.id}\t{template.next_occurrence:%Y-%m-%d}\t"
            f"{template.type.value}\t{template.amount}\t{template.payee or ''}"
        )


@main.command("post")
@click.argument("template_id", type=int)
@click.pass_obj
@_ledger_errors
def post(app_ctx: AppContext, template_id: int) -> None:
    """Post a scheduled transaction and advance it."""

    transaction = app_ctx.scheduled.post(template_id)
    click.echo(f"Posted transaction {transaction.id} dated {transaction.transaction_date:%Y-%m-%d}")


@main.command("skip")
@click.argument("template_id", type=int)
@click.pass_obj
@_ledger_errors
def skip(app_ctx: AppContext, template_id: int) -> None:
    """Advance a scheduled transaction without posting it."""

    template = app_ctx.scheduled.skip(template_id)
    click.echo(f"Next occurrence: {template.next_occurrence:%Y-%m-%d}")


@main.command("post-due")
@click.option("--owner", "owner_id", type=int, default=None, help="Only this owner")
@click.pass_obj
@_ledger_errors
def post_due(app_ctx: AppContext, owner_id: Optional[int]) -> None:
    """Post every occurrence that is already due."""

    result = app_ctx.scheduled.post_due(owner_id)
    click.echo(f"Posted {result.posted_count} transaction(s)")
    for template_id, error in result.failures:
        click.echo(f"Template {template_id} failed: {error}", err=True)
    if result.failures:
        raise click.exceptions.Exit(1)


@main.command("forecast")
@click.option("--owner", "owner_id", type=int, required=True, help="Owner id")
@click.option("--year", type=int, default=None, help="Calendar year (default: this year)")
@click.pass_obj
def forecast(app_ctx: AppContext, owner_id: int, year: Optional[int]) -> None:
    """Print the month-by-month income and expense forecast."""

    result = app_ctx.forecasts.forecast(owner_id, year or date.today().year)
    for row in result.months():
        click.echo(f"{row['month']}\t{row['income']}\t{row['expense']}\t{row['net']}")
    click.echo(f"total\t{result.total_income}\t{result.total_expense}\t{result.net}")


@main.command("reconcile")
@click.argument("account_id", type=int)
@click.pass_obj
@_ledger_errors
def reconcile(app_ctx: AppContext, account_id: int) -> None:
    """Compare an account's stored balance with its transactions."""

    result = app_ctx.accounts.reconcile(account_id)
    click.echo(f"stored={result.stored} derived={result.derived} drift={result.drift}")
    if not result.balanced:
        raise click.exceptions.Exit(2)


if __name__ == "__main__":  # pragma: no cover
    main()
