"""Engine components: fetch → parse → merge."""

from .dedup import MergeResult, merge_trackers, split_tracker_option
from .fetcher import SourceFetcher
from .parser import ACCEPTED_SCHEMES, TrackerParser

__all__ = [
    "ACCEPTED_SCHEMES",
    "MergeResult",
    "SourceFetcher",
    "TrackerParser",
    "merge_trackers",
    "split_tracker_option",
]
