"""Settings collaborator backed by the YAML configuration repository."""

from __future__ import annotations

from .loader import ConfigRepository
from .models import TrackerSettings, UpdateInterval


class TrackerSettingsStore:
    """Read and update tracker auto-update settings.

    The ``get_*``/``set_tracker_last_update_time`` methods are what the
    orchestrator and scheduler consume; the remaining setters back the CLI.
    Every write is persisted immediately.
    """

    def __init__(self, repository: ConfigRepository) -> None:
        self.repository = repository

    @property
    def settings(self) -> TrackerSettings:
        return self.repository.load().trackers

    def get_tracker_auto_update(self) -> bool:
        return self.settings.auto_update

    def get_tracker_auto_update_interval(self) -> str:
        return self.settings.auto_update_interval

    def get_tracker_sources(self) -> list[str]:
        return list(self.settings.sources)

    def get_tracker_last_update_time(self) -> int | None:
        return self.settings.last_update_time

    def set_tracker_last_update_time(self, timestamp_ms: int) -> None:
        self._update(last_update_time=int(timestamp_ms))

    def set_tracker_auto_update(self, enabled: bool) -> None:
        self._update(auto_update=bool(enabled))

    def set_tracker_auto_update_interval(self, interval: UpdateInterval) -> None:
        self._update(auto_update_interval=UpdateInterval(interval).value)

    def add_tracker_source(self, source: str) -> bool:
        source = source.strip()
        sources = self.get_tracker_sources()
        if not source or source in sources:
            return False
        self._update(sources=[*sources, source])
        return True

    def remove_tracker_source(self, source: str) -> bool:
        source = source.strip()
        sources = self.get_tracker_sources()
        if source not in sources:
            return False
        self._update(sources=[item for item in sources if item != source])
        return True

    def _update(self, **changes: object) -> None:
        config = self.repository.load()
        trackers = TrackerSettings.model_validate({**config.trackers.model_dump(), **changes})
        self.repository.save(config.model_copy(update={"trackers": trackers}))


__all__ = ["TrackerSettingsStore"]
