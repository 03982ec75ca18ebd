from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from functools import lru_cache
from threading import Lock
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from .config import get_settings
from .db import SessionLocal
from .services import clock
from .services.break_scheduler import BreakRunSummary, process_breaks_for_date

logger = logging.getLogger(__name__)

DAILY_JOB_ID = "process-breaks-daily"
CATCH_UP_JOB_ID = "process-breaks-catch-up"


class BreakJobScheduler:
    """Runs the automatic break pass on a daily cadence and on demand.

    Both the timed job and the startup catch-up call ``run_now`` for
    yesterday, so overlapping triggers rely on the handler's idempotence.
    ``start`` registers the jobs once per instance lifetime; repeated calls,
    including after ``shutdown``, are no-ops.
    """

    def __init__(self, session_factory: Callable[[], Session], *, hour: int = 0, minute: int = 5):
        self._session_factory = session_factory
        self._hour = hour
        self._minute = minute
        self._scheduler = BackgroundScheduler(timezone=timezone.utc)
        self._lock = Lock()
        self._started = False
        self._registered = False

    @property
    def started(self) -> bool:
        return self._started

    def run_now(self, target_date: date | None = None) -> BreakRunSummary:
        target_date = target_date or clock.yesterday()
        with self._session_factory() as db:
            return process_breaks_for_date(db, target_date)

    def start(self, *, catch_up: bool = True) -> bool:
        if self._registered:
            return False
        with self._lock:
            if self._registered:
                return False

            logger.info("Registering daily break job at %02d:%02d UTC", self._hour, self._minute)
            self._scheduler.add_job(
                self._run_for_yesterday,
                CronTrigger(hour=self._hour, minute=self._minute, timezone=timezone.utc),
                id=DAILY_JOB_ID,
                replace_existing=True,
                coalesce=True,
                max_instances=1,
            )
            if catch_up:
                self._scheduler.add_job(
                    self._run_for_yesterday,
                    "date",
                    run_date=datetime.now(timezone.utc),
                    id=CATCH_UP_JOB_ID,
                    replace_existing=True,
                )
            self._scheduler.start()
            self._registered = True
            self._started = True
            return True

    def shutdown(self, wait: bool = False) -> None:
        with self._lock:
            if not self._started:
                return
            self._scheduler.shutdown(wait=wait)
            self._started = False

    def job_ids(self) -> list[str]:
        return [job.id for job in self._scheduler.get_jobs()]

    def _run_for_yesterday(self) -> None:
        # nobody awaits a timed run, so failures end here
        try:
            summary = self.run_now()
        except Exception:
            logger.exception("Scheduled break processing failed")
            return
        if summary.failures:
            logger.error("Failed to process breaks for %d user(s): %s", len(summary.failures), summary.failures)
        else:
            logger.info("Successfully processed breaks for %d users", summary.processed_users)


@lru_cache
def get_break_scheduler() -> BreakJobScheduler:
    settings = get_settings()
    return BreakJobScheduler(SessionLocal, hour=settings.break_run_hour, minute=settings.break_run_minute)
