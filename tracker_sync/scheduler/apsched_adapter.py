"""APScheduler wrapper arming the recurring tracker update."""

from __future__ import annotations

import time
from datetime import datetime, timedelta
from typing import Awaitable, Callable

import structlog
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from ..config import UpdateInterval
from ..exceptions import TrackerSyncError

UPDATE_JOB_ID = "tracker-sync::update"
STARTUP_DELAY_SECONDS = 5.0


def _now_ms() -> int:
    return int(time.time() * 1000)


class TrackerScheduler:
    """Own the single deferred trigger that starts the next tracker update."""

    def __init__(
        self,
        settings,
        scheduler: AsyncIOScheduler | None = None,
        startup_delay: float = STARTUP_DELAY_SECONDS,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.settings = settings
        self.scheduler = scheduler or AsyncIOScheduler()
        self.startup_delay = startup_delay
        self.clock = clock
        self.logger = structlog.get_logger("tracker_sync.scheduler")
        self.started = False
        self.job = None
        self._update: Callable[[], Awaitable[object]] | None = None

    def bind(self, update: Callable[[], Awaitable[object]]) -> None:
        self._update = update

    def start(self) -> None:
        if not self.started:
            self.scheduler.start()
            self.started = True
            self.logger.info("apscheduler_started")

    def shutdown(self) -> None:
        if self.started:
            self.scheduler.shutdown(wait=False)
            self.started = False
            self.logger.info("apscheduler_stopped")

    def arm_next(self) -> bool:
        """Arm the next cycle; unknown intervals leave the current trigger alone."""

        interval = UpdateInterval.from_code(self.settings.get_tracker_auto_update_interval())
        if interval is None:
            return False
        self._arm(interval.seconds)
        self.logger.info("next_update_scheduled", delay_ms=interval.milliseconds)
        return True

    def check_and_maybe_start(self) -> None:
        if not self.settings.get_tracker_auto_update():
            self.cancel()
            return

        interval = UpdateInterval.from_code(self.settings.get_tracker_auto_update_interval())
        if interval is None:
            return

        if self.is_due(interval):
            # runs after startup settles; run_update re-arms on success
            self._arm(self.startup_delay)
            self.logger.info("startup_update_scheduled", delay_ms=int(self.startup_delay * 1000))
        else:
            self.arm_next()

    def is_due(self, interval: UpdateInterval) -> bool:
        last_update = self.settings.get_tracker_last_update_time()
        if not last_update:
            return True
        return self.clock() - last_update >= interval.milliseconds

    def cancel(self) -> None:
        if self.job is None:
            return
        try:
            self.scheduler.remove_job(self.job.id)
        except JobLookupError:
            # already fired
            pass
        self.job = None

    def next_run_time(self) -> datetime | None:
        return getattr(self.job, "next_run_time", None) if self.job is not None else None

    def _arm(self, delay_seconds: float) -> None:
        self.cancel()
        run_date = datetime.now().astimezone() + timedelta(seconds=delay_seconds)
        self.job = self.scheduler.add_job(
            self._fire,
            trigger=DateTrigger(run_date=run_date),
            id=UPDATE_JOB_ID,
            replace_existing=True,
        )

    async def _fire(self) -> None:
        self.job = None
        if self._update is None:
            self.logger.warning("update_callback_missing")
            return
        try:
            await self._update()
        except TrackerSyncError as exc:
            # the orchestrator already logged the failure; nothing re-arms until the next attempt
            self.logger.info("scheduled_update_failed", kind=exc.kind)


__all__ = ["STARTUP_DELAY_SECONDS", "TrackerScheduler", "UPDATE_JOB_ID"]
