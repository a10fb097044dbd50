"""Tracker list text parsing."""

from __future__ import annotations

import re

ACCEPTED_SCHEMES = ("http://", "https://", "udp://")

_LINE_BREAK = re.compile(r"\r?\n")


class TrackerParser:
    """Turn a fetched tracker list document into announce URLs."""

    def parse(self, text: str | None) -> list[str]:
        if not text:
            return []
        trackers: list[str] = []
        for raw_line in _LINE_BREAK.split(text):
            line = raw_line.strip()
            if self.is_tracker_url(line):
                trackers.append(line)
        return trackers

    @staticmethod
    def is_tracker_url(line: str) -> bool:
        """Return True for a trimmed, non-comment line with an accepted scheme."""

        if not line or line.startswith("#"):
            return False
        return line.startswith(ACCEPTED_SCHEMES)


__all__ = ["ACCEPTED_SCHEMES", "TrackerParser"]
