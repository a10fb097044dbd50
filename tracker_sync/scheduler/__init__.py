"""Scheduling of the recurring tracker update."""

from .apsched_adapter import STARTUP_DELAY_SECONDS, UPDATE_JOB_ID, TrackerScheduler

__all__ = ["STARTUP_DELAY_SECONDS", "TrackerScheduler", "UPDATE_JOB_ID"]
