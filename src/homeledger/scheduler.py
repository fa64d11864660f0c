"""Background trigger that posts due scheduled transactions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from apscheduler.schedulers.background import BackgroundScheduler as APScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .errors import LedgerError
from .logging_config import get_logger

if TYPE_CHECKING:
    from .context import AppContext

logger = get_logger("scheduler")

POST_DUE_JOB_ID = "post_due_scheduled"


class BackgroundScheduler:
    """Runs ``post_due`` on an interval outside request handling."""

    def __init__(self, ctx: AppContext, *, owner_id: Optional[int] = None):
        """Initialize the scheduler with app context.

        Args:
            ctx: Application context with services and config
            owner_id: Restrict posting to one owner; ``None`` posts for everyone
        """
        self.ctx = ctx
        self.owner_id = owner_id
        self.scheduler: Optional[APScheduler] = None

    @property
    def running(self) -> bool:
        return self.scheduler is not None

    def start(self) -> None:
        """Start the background scheduler."""
        if self.scheduler is not None:
            logger.warning("Scheduler already running")
            return

        self.scheduler = APScheduler()
        self.scheduler.add_job(
            func=self.run_post_due,
            trigger=IntervalTrigger(minutes=self.ctx.config.AUTO_POST_MINUTES),
            id=POST_DUE_JOB_ID,
            name="Post due scheduled transactions",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        logger.info(
            "Background scheduler started",
            extra={"interval_minutes": self.ctx.config.AUTO_POST_MINUTES},
        )

    def stop(self) -> None:
        """Stop the background scheduler gracefully."""
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=True)
            self.scheduler = None
            logger.info("Background scheduler stopped")

    def run_post_due(self) -> int:
        """Job body: post everything that is due. Returns the number posted."""
        try:
            result = self.ctx.scheduled.post_due(self.owner_id)
        except LedgerError as exc:
            logger.error(f"Scheduled posting failed: {exc}", exc_info=True)
            return 0
        for template_id, error in result.failures:
            logger.warning(f"Template {template_id} was not posted: {error}")
        return result.posted_count


def create_scheduler(
    ctx: AppContext, *, owner_id: Optional[int] = None, auto_start: Optional[bool] = None
) -> BackgroundScheduler:
    """Create and optionally start a background scheduler.

    Args:
        ctx: Application context
        owner_id: Restrict posting to one owner
        auto_start: Start immediately; defaults to ``config.AUTO_POST``

    Returns:
        BackgroundScheduler instance
    """
    scheduler = BackgroundScheduler(ctx, owner_id=owner_id)
    if ctx.config.AUTO_POST if auto_start is None else auto_start:
        scheduler.start()
    return scheduler
