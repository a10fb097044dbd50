"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import (
    Aria2Config,
    DEFAULT_TRACKER_SOURCES,
    GlobalConfig,
    TrackerSettings,
    UpdateInterval,
)
from .store import TrackerSettingsStore

__all__ = [
    "Aria2Config",
    "ConfigLocator",
    "ConfigRepository",
    "DEFAULT_TRACKER_SOURCES",
    "GlobalConfig",
    "TrackerSettings",
    "TrackerSettingsStore",
    "UpdateInterval",
]
