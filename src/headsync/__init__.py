"""headsync: keep Markdown note filenames in step with their first heading."""

from headsync.controller import SyncController, SyncResult, SyncState
from headsync.decision import RenameDecision, SyncReason, decide_rename
from headsync.heading import HeadingMatch, HeadingStyle, find_heading, find_note_start
from headsync.inclusion import is_included
from headsync.settings import InclusionSettings, SettingsStore
from headsync.slugify import slugify

__version__ = "0.3.0"

__all__ = [
    "HeadingMatch",
    "HeadingStyle",
    "InclusionSettings",
    "RenameDecision",
    "SettingsStore",
    "SyncController",
    "SyncReason",
    "SyncResult",
    "SyncState",
    "__version__",
    "decide_rename",
    "find_heading",
    "find_note_start",
    "is_included",
    "slugify",
]
