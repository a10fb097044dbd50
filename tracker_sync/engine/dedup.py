"""Merging fetched trackers into the engine's existing bt-tracker list."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence


@dataclass
class MergeResult:
    value: str
    trackers: list[str] = field(default_factory=list)
    added: int = 0
    changed: bool = False

    @property
    def is_noop(self) -> bool:
        return not self.changed


def split_tracker_option(value: str | None) -> list[str]:
    """Split a comma separated bt-tracker value into trimmed, non-empty entries."""

    if not value:
        return []
    return [entry.strip() for entry in value.split(",") if entry.strip()]


def unique_trackers(trackers: Iterable[str]) -> list[str]:
    """Drop duplicates by trimmed value, keeping the first occurrence."""

    seen: set[str] = set()
    unique: list[str] = []
    for tracker in trackers:
        tracker = tracker.strip()
        if tracker and tracker not in seen:
            seen.add(tracker)
            unique.append(tracker)
    return unique


def merge_trackers(current: str | None, new_trackers: Sequence[str]) -> MergeResult:
    """Append ``new_trackers`` to the ``current`` list without duplicates.

    The result is a no-op when nothing new was supplied or every supplied
    tracker is already present; callers must not persist a no-op.
    """

    existing = split_tracker_option(current)
    if not new_trackers:
        return MergeResult(value=",".join(existing), trackers=existing)

    merged = unique_trackers([*existing, *new_trackers])
    return MergeResult(
        value=",".join(merged),
        trackers=merged,
        added=len(merged) - len(unique_trackers(existing)),
        changed=merged != existing,
    )


__all__ = ["MergeResult", "merge_trackers", "split_tracker_option", "unique_trackers"]
