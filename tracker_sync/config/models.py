"""Pydantic models used across the tracker-sync configuration flow."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_TRACKER_SOURCES = [
    "https://raw.githubusercontent.com/ngosang/trackerslist/master/trackers_best.txt",
    "https://raw.githubusercontent.com/XIU2/TrackersListCollection/master/best.txt",
]


class UpdateInterval(str, Enum):
    """Auto-update intervals offered to the user."""

    DAILY = "1d"
    WEEKLY = "1w"
    MONTHLY = "1m"

    @property
    def milliseconds(self) -> int:
        return _INTERVAL_MILLISECONDS[self]

    @property
    def seconds(self) -> float:
        return self.milliseconds / 1000

    @classmethod
    def from_code(cls, value: Any) -> "UpdateInterval | None":
        """Return the interval for ``value`` or ``None`` when it is not a known code."""

        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


_INTERVAL_MILLISECONDS = {
    UpdateInterval.DAILY: 24 * 60 * 60 * 1000,
    UpdateInterval.WEEKLY: 7 * 24 * 60 * 60 * 1000,
    UpdateInterval.MONTHLY: 30 * 24 * 60 * 60 * 1000,
}


class TrackerSettings(BaseModel):
    """User-facing tracker auto-update settings."""

    auto_update: bool = False
    # Raw code as stored; unknown codes are tolerated and disable scheduling.
    auto_update_interval: str = UpdateInterval.DAILY.value
    sources: list[str] = Field(default_factory=lambda: list(DEFAULT_TRACKER_SOURCES))
    last_update_time: int | None = None

    @field_validator("auto_update_interval", mode="before")
    @classmethod
    def _coerce_interval(cls, value: Any) -> str:
        if isinstance(value, UpdateInterval):
            return value.value
        return "" if value is None else str(value)

    @field_validator("sources", mode="before")
    @classmethod
    def _coerce_sources(cls, value: Any) -> list[str]:
        if value in (None, ""):
            return []
        if isinstance(value, str):
            value = value.splitlines()
        if not isinstance(value, (list, tuple)):
            raise ValueError("sources expects a list of URLs")
        return [str(item).strip() for item in value if str(item).strip()]

    @property
    def interval(self) -> UpdateInterval | None:
        return UpdateInterval.from_code(self.auto_update_interval)


class Aria2Config(BaseModel):
    """Connection settings for the aria2 JSON-RPC endpoint."""

    rpc_url: str = "http://localhost:6800/jsonrpc"
    secret: str | None = None
    timeout: float = 10.0

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be > 0")
        return value


class GlobalConfig(BaseModel):
    """Top-level configuration document."""

    trackers: TrackerSettings = Field(default_factory=TrackerSettings)
    aria2: Aria2Config = Field(default_factory=Aria2Config)
    fetch_timeout: float = 10.0
    startup_delay: float = 5.0

    @field_validator("fetch_timeout", "startup_delay")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("durations must be non-negative")
        return value


__all__ = [
    "Aria2Config",
    "DEFAULT_TRACKER_SOURCES",
    "GlobalConfig",
    "TrackerSettings",
    "UpdateInterval",
]
