"""APScheduler-backed implementation of the Scheduler port."""

from __future__ import annotations

from typing import Callable, Optional

from apscheduler.job import Job
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger

from gmailrelay.application.ports.scheduler import Scheduler


class APSchedulerScheduler(Scheduler):
    """Run periodic jobs on a background thread."""

    def __init__(self, scheduler: Optional[BackgroundScheduler] = None) -> None:
        self._scheduler = scheduler or BackgroundScheduler(timezone="UTC")

    def every(self, interval_seconds: float, func: Callable[[], None], name: str) -> Job:
        job = self._scheduler.add_job(
            func,
            trigger=IntervalTrigger(seconds=interval_seconds),
            id=name,
            name=name,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        if not self._scheduler.running:
            self._scheduler.start()
        logger.debug(f"Scheduled job {name} every {interval_seconds}s")
        return job

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
