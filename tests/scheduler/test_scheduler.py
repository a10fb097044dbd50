from __future__ import annotations

import asyncio
from datetime import datetime
from types import SimpleNamespace

import pytest
from apscheduler.jobstores.base import JobLookupError
from apscheduler.triggers.date import DateTrigger

from tracker_sync.config import UpdateInterval
from tracker_sync.exceptions import NoTrackersFetchedError
from tracker_sync.scheduler import STARTUP_DELAY_SECONDS, UPDATE_JOB_ID, TrackerScheduler

NOW_MS = 1_700_000_000_000


class StubAPScheduler:
    def __init__(self) -> None:
        self.jobs: dict[str, SimpleNamespace] = {}
        self.calls: list[tuple] = []

    def add_job(self, func, trigger, id, replace_existing):  # noqa: A002
        job = SimpleNamespace(id=id, func=func, trigger=trigger, next_run_time=trigger.run_date)
        self.jobs[id] = job
        self.calls.append(("add", id))
        return job

    def remove_job(self, job_id):
        self.calls.append(("remove", job_id))
        if job_id not in self.jobs:
            raise JobLookupError(job_id)
        del self.jobs[job_id]

    def start(self):
        self.calls.append(("start",))

    def shutdown(self, wait=False):  # noqa: ARG002
        self.calls.append(("shutdown",))


def _scheduler(settings) -> tuple[TrackerScheduler, StubAPScheduler]:
    stub = StubAPScheduler()
    return TrackerScheduler(settings, scheduler=stub, clock=lambda: NOW_MS), stub


def _delay_seconds(job) -> float:
    assert isinstance(job.trigger, DateTrigger)
    return (job.trigger.run_date - datetime.now().astimezone()).total_seconds()


def test_interval_durations() -> None:
    assert UpdateInterval.DAILY.milliseconds == 86_400_000
    assert UpdateInterval.WEEKLY.milliseconds == 604_800_000
    assert UpdateInterval.MONTHLY.milliseconds == 2_592_000_000
    assert UpdateInterval.from_code("2w") is None


@pytest.mark.parametrize("code", ["1d", "1w", "1m"])
def test_arm_next_uses_interval(stub_settings, code: str) -> None:
    scheduler, stub = _scheduler(stub_settings(interval=code))
    assert scheduler.arm_next()
    job = stub.jobs[UPDATE_JOB_ID]
    expected = UpdateInterval(code).seconds
    assert expected - 5 < _delay_seconds(job) <= expected


def test_arm_next_cancels_previous_trigger(stub_settings) -> None:
    scheduler, stub = _scheduler(stub_settings(interval="1w"))
    scheduler.arm_next()
    first = scheduler.job
    scheduler.arm_next()
    assert scheduler.job is not first
    assert stub.calls == [("add", UPDATE_JOB_ID), ("remove", UPDATE_JOB_ID), ("add", UPDATE_JOB_ID)]


def test_arm_next_unknown_interval_leaves_existing_trigger(stub_settings) -> None:
    settings = stub_settings(interval="1d")
    scheduler, stub = _scheduler(settings)
    scheduler.arm_next()
    armed = scheduler.job

    settings.interval = "hourly"
    assert scheduler.arm_next() is False
    assert scheduler.job is armed
    assert stub.calls == [("add", UPDATE_JOB_ID)]


@pytest.mark.parametrize("code", ["1d", "1w", "1m"])
def test_startup_without_history_runs_after_grace_delay(stub_settings, code: str) -> None:
    scheduler, stub = _scheduler(stub_settings(interval=code, last_update_time=None))
    scheduler.check_and_maybe_start()
    delay = _delay_seconds(stub.jobs[UPDATE_JOB_ID])
    assert 0 < delay <= STARTUP_DELAY_SECONDS


def test_startup_when_overdue(stub_settings) -> None:
    last = NOW_MS - UpdateInterval.DAILY.milliseconds
    scheduler, stub = _scheduler(stub_settings(interval="1d", last_update_time=last))
    scheduler.check_and_maybe_start()
    assert _delay_seconds(stub.jobs[UPDATE_JOB_ID]) <= STARTUP_DELAY_SECONDS


def test_startup_not_due_arms_full_interval(stub_settings) -> None:
    last = NOW_MS - 1000
    scheduler, stub = _scheduler(stub_settings(interval="1w", last_update_time=last))
    scheduler.check_and_maybe_start()
    assert _delay_seconds(stub.jobs[UPDATE_JOB_ID]) > UpdateInterval.WEEKLY.seconds - 5


def test_startup_disabled_cancels_trigger(stub_settings) -> None:
    settings = stub_settings(interval="1d")
    scheduler, stub = _scheduler(settings)
    scheduler.arm_next()

    settings.auto_update = False
    scheduler.check_and_maybe_start()
    assert scheduler.job is None
    assert UPDATE_JOB_ID not in stub.jobs


def test_startup_unknown_interval_does_nothing(stub_settings) -> None:
    scheduler, stub = _scheduler(stub_settings(interval="sometimes"))
    scheduler.check_and_maybe_start()
    assert scheduler.job is None
    assert stub.calls == []


def test_cancel_tolerates_already_fired_job(stub_settings) -> None:
    scheduler, stub = _scheduler(stub_settings())
    scheduler.arm_next()
    stub.jobs.clear()
    scheduler.cancel()
    assert scheduler.job is None


def test_fire_runs_bound_update_and_absorbs_sync_errors(stub_settings) -> None:
    scheduler, stub = _scheduler(stub_settings())
    calls: list[str] = []

    async def update():
        calls.append("run")
        raise NoTrackersFetchedError()

    scheduler.bind(update)
    scheduler.arm_next()
    asyncio.run(stub.jobs[UPDATE_JOB_ID].func())
    assert calls == ["run"]
    assert scheduler.job is None


def test_start_and_shutdown_are_idempotent(stub_settings) -> None:
    scheduler, stub = _scheduler(stub_settings())
    scheduler.start()
    scheduler.start()
    scheduler.shutdown()
    scheduler.shutdown()
    assert stub.calls == [("start",), ("shutdown",)]
