"""Tracker update orchestrator wiring together fetching, merging and persistence."""

from __future__ import annotations

import asyncio
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Sequence

import structlog

from .engine import MergeResult, SourceFetcher, merge_trackers
from .exceptions import (
    AlreadyInProgressError,
    FetchError,
    NoSourcesConfiguredError,
    NoTrackersFetchedError,
    PersistError,
)
from .infra import BT_TRACKER_OPTION, call_with_callback


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class UpdateState:
    """Single-flight guard for tracker updates."""

    in_progress: bool = False

    @contextmanager
    def acquire(self) -> Iterator[None]:
        if self.in_progress:
            raise AlreadyInProgressError()
        self.in_progress = True
        try:
            yield
        finally:
            self.in_progress = False


@dataclass(slots=True)
class UpdateSummary:
    sources: int
    failed_sources: int
    fetched: int
    added: int
    total: int
    changed: bool
    finished_at: int


class TrackerOrchestrator:
    """Run one tracker synchronisation at a time and re-arm the scheduler."""

    def __init__(
        self,
        settings,
        options,
        fetcher: SourceFetcher,
        scheduler=None,
        state: UpdateState | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.settings = settings
        self.options = options
        self.fetcher = fetcher
        self.scheduler = scheduler
        self.state = state or UpdateState()
        self.clock = clock
        self.logger = structlog.get_logger("tracker_sync.orchestrator")

    @property
    def is_updating(self) -> bool:
        return self.state.in_progress

    async def run_update(self) -> UpdateSummary:
        if self.state.in_progress:
            self.logger.warning("update_already_in_progress")
            raise AlreadyInProgressError()

        sources = list(self.settings.get_tracker_sources() or [])
        if not sources:
            self.logger.warning("no_sources_configured")
            raise NoSourcesConfiguredError()

        with self.state.acquire():
            self.logger.info("update_started", sources=len(sources))
            try:
                summary = await self._synchronise(sources)
            except Exception as exc:
                self.logger.error(
                    "update_failed",
                    kind=getattr(exc, "kind", type(exc).__name__),
                    error=str(exc),
                )
                raise
            return summary

    async def _synchronise(self, sources: Sequence[str]) -> UpdateSummary:
        results = await asyncio.gather(*(self._fetch_or_none(source) for source in sources))
        failed = sum(1 for result in results if result is None)
        trackers = [tracker for result in results if result for tracker in result]
        if not trackers:
            raise NoTrackersFetchedError()
        self.logger.info("trackers_fetched", total=len(trackers), failed_sources=failed)

        merge = await self._persist(trackers)

        finished_at = self.clock()
        self.settings.set_tracker_last_update_time(finished_at)
        self.logger.info(
            "update_completed",
            added=merge.added,
            total=len(merge.trackers),
            changed=merge.changed,
        )
        if self.scheduler is not None and self.settings.get_tracker_auto_update():
            self.scheduler.arm_next()

        return UpdateSummary(
            sources=len(sources),
            failed_sources=failed,
            fetched=len(trackers),
            added=merge.added,
            total=len(merge.trackers),
            changed=merge.changed,
            finished_at=finished_at,
        )

    async def _fetch_or_none(self, source: str) -> list[str] | None:
        try:
            return await self.fetcher.fetch(source)
        except FetchError:
            # logged by the fetcher
            return None
        except Exception as exc:  # noqa: BLE001
            self.logger.warning("source_failed", source=source, error=str(exc))
            return None

    async def _persist(self, trackers: list[str]) -> MergeResult:
        try:
            current = await call_with_callback(self.options.get_global_option)
        except Exception as exc:  # noqa: BLE001
            raise PersistError("read", str(exc)) from exc
        if not current.success:
            raise PersistError("read", getattr(current, "error", None))

        data = current.data or {}
        merge = merge_trackers(data.get(BT_TRACKER_OPTION), trackers)
        if merge.is_noop:
            self.logger.info("trackers_unchanged", total=len(merge.trackers))
            return merge

        try:
            written = await call_with_callback(
                self.options.set_global_option, BT_TRACKER_OPTION, merge.value
            )
        except Exception as exc:  # noqa: BLE001
            raise PersistError("write", str(exc)) from exc
        if not written.success:
            raise PersistError("write", getattr(written, "error", None))
        return merge


__all__ = ["TrackerOrchestrator", "UpdateState", "UpdateSummary"]
