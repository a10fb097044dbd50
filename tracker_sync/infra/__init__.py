"""Infra layer adapters (download-engine option access)."""

from .aria2 import BT_TRACKER_OPTION, Aria2OptionClient, OptionResult, call_with_callback

__all__ = ["Aria2OptionClient", "BT_TRACKER_OPTION", "OptionResult", "call_with_callback"]
