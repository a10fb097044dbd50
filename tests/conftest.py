"""Pytest configuration providing shared collaborators for tracker-sync tests."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Iterable

import pytest

from tracker_sync.config import ConfigLocator, ConfigRepository, TrackerSettingsStore
from tracker_sync.infra import OptionResult


class StubSettings:
    """In-memory settings collaborator."""

    def __init__(
        self,
        sources: list[str] | None = None,
        auto_update: bool = True,
        interval: str = "1d",
        last_update_time: int | None = None,
    ) -> None:
        self.sources = list(sources or [])
        self.auto_update = auto_update
        self.interval = interval
        self.last_update_time = last_update_time
        self.recorded: list[int] = []

    def get_tracker_auto_update(self) -> bool:
        return self.auto_update

    def get_tracker_auto_update_interval(self) -> str:
        return self.interval

    def get_tracker_sources(self) -> list[str]:
        return list(self.sources)

    def get_tracker_last_update_time(self) -> int | None:
        return self.last_update_time

    def set_tracker_last_update_time(self, timestamp_ms: int) -> None:
        self.last_update_time = timestamp_ms
        self.recorded.append(timestamp_ms)


class StubOptions:
    """Callback-style option collaborator answering synchronously."""

    def __init__(
        self,
        current: str | None = None,
        read_ok: bool = True,
        write_ok: bool = True,
    ) -> None:
        self.current = current
        self.read_ok = read_ok
        self.write_ok = write_ok
        self.writes: list[tuple[str, str]] = []

    def get_global_option(self, callback: Callable[[OptionResult], None]) -> None:
        data = {} if self.current is None else {"bt-tracker": self.current}
        callback(OptionResult(success=self.read_ok, data=data))

    def set_global_option(
        self, key: str, value: str, callback: Callable[[OptionResult], None]
    ) -> None:
        if self.write_ok:
            self.writes.append((key, value))
            self.current = value
        callback(OptionResult(success=self.write_ok))


class StubFetcher:
    """Fetcher returning canned trackers or raising per source."""

    def __init__(self, responses: dict[str, Any], gate: asyncio.Event | None = None) -> None:
        self.responses = responses
        self.gate = gate
        self.calls: list[str] = []

    async def fetch(self, source: str) -> list[str]:
        self.calls.append(source)
        if self.gate is not None:
            await self.gate.wait()
        outcome = self.responses.get(source, [])
        if isinstance(outcome, Exception):
            raise outcome
        return list(outcome)


class StubScheduler:
    def __init__(self) -> None:
        self.armed = 0

    def arm_next(self) -> bool:
        self.armed += 1
        return True


@pytest.fixture
def stub_settings() -> Callable[..., StubSettings]:
    return StubSettings


@pytest.fixture
def stub_options() -> Callable[..., StubOptions]:
    return StubOptions


@pytest.fixture
def stub_fetcher() -> Callable[..., StubFetcher]:
    return StubFetcher


@pytest.fixture
def stub_scheduler() -> StubScheduler:
    return StubScheduler()


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterable[ConfigRepository]:
    monkeypatch.setenv("TRACKER_SYNC_HOME", str(tmp_path))
    locator = ConfigLocator(project_root=tmp_path)
    repository = ConfigRepository(locator)
    yield repository


@pytest.fixture
def settings_store(temp_config_repository: ConfigRepository) -> TrackerSettingsStore:
    return TrackerSettingsStore(temp_config_repository)
