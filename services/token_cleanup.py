"""
Periodic expiry sweep for idle and expired session tokens.
"""

from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from services.token_service import TokenService
from utils.logger import get_logger

logger = get_logger(__name__)

CLEANUP_JOB_ID = "token_cleanup"


def run_cleanup_once(session_factory: Callable[[], Session]):
    """Run a single sweep in its own session."""
    db = session_factory()
    try:
        TokenService.invalidate_old_tokens(db)
    finally:
        db.close()


class TokenCleanupScheduler:
    """
    Runs the sweep in a background thread every ``interval_seconds``.

    A failing run is logged by the scheduler and the next run still fires;
    nothing is retried within a run.
    """

    def __init__(self, session_factory: Callable[[], Session], interval_seconds: int):
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds
        self.scheduler = BackgroundScheduler()
        self._jobs_registered = False

    def start(self):
        self._register_jobs()
        self.scheduler.start()
        logger.info("Token cleanup scheduler started", extra={"interval_seconds": self.interval_seconds})

    def _register_jobs(self):
        if self._jobs_registered:
            return

        self.scheduler.add_job(
            func=run_cleanup_once,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=CLEANUP_JOB_ID,
            name="Invalidate old tokens",
            args=[self.session_factory],
            max_instances=1,
            coalesce=True,
        )
        self._jobs_registered = True

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Token cleanup scheduler shutdown")
