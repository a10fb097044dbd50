"""Error types raised while synchronising tracker lists."""

from __future__ import annotations

from enum import Enum


class TrackerSyncError(Exception):
    """Base exception for all tracker synchronisation failures."""

    kind = "tracker_sync_error"


class AlreadyInProgressError(TrackerSyncError):
    """Raised when an update is requested while another one is running."""

    kind = "already_in_progress"

    def __init__(self) -> None:
        super().__init__("Update already in progress")


class NoSourcesConfiguredError(TrackerSyncError):
    """Raised when the configured tracker source list is empty."""

    kind = "no_sources_configured"

    def __init__(self) -> None:
        super().__init__("No tracker sources configured")


class FetchErrorKind(str, Enum):
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    EMPTY_RESPONSE = "empty_response"


class FetchError(TrackerSyncError):
    """A single source could not be fetched. Always recovered per source."""

    kind = "fetch_error"

    def __init__(self, source: str, reason: FetchErrorKind, detail: str | None = None) -> None:
        self.source = source
        self.reason = reason
        message = f"Failed to fetch {source}: {reason.value}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class NoTrackersFetchedError(TrackerSyncError):
    """Raised when every source failed or returned no trackers."""

    kind = "no_trackers_fetched"

    def __init__(self) -> None:
        super().__init__("No trackers fetched from any source")


class PersistError(TrackerSyncError):
    """Reading or writing the engine's bt-tracker option failed."""

    kind = "persist_error"

    def __init__(self, operation: str, detail: str | None = None) -> None:
        self.operation = operation
        message = f"Failed to {operation} bt-tracker setting"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class Aria2RpcError(TrackerSyncError):
    """aria2 answered a JSON-RPC call with an error object."""

    kind = "aria2_rpc_error"

    def __init__(self, code: int | None, message: str) -> None:
        self.code = code
        super().__init__(f"aria2 RPC error {code}: {message}")


__all__ = [
    "AlreadyInProgressError",
    "Aria2RpcError",
    "FetchError",
    "FetchErrorKind",
    "NoSourcesConfiguredError",
    "NoTrackersFetchedError",
    "PersistError",
    "TrackerSyncError",
]
