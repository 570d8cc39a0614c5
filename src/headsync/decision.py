"""Rename decision: compare a heading's slug with the current filename's slug."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from headsync.slugify import slugify


class SyncReason(enum.Enum):
    """Why an evaluation did or did not rename a note."""

    RENAMED = "renamed"
    IGNORED = "ignored"
    NOT_INCLUDED = "not_included"
    NO_HEADING = "no_heading"
    EMPTY_SLUG = "empty_slug"
    ALREADY_SYNCHRONIZED = "already_synchronized"
    READ_FAILED = "read_failed"
    RENAME_FAILED = "rename_failed"


@dataclass(frozen=True)
class RenameDecision:
    """Whether to rename, and to which slug."""

    should_rename: bool
    target_slug: str
    reason: SyncReason


def decide_rename(heading_text: str, basename: str) -> RenameDecision:
    """Decide whether a note named *basename* should follow *heading_text*.

    Both sides are slugified before comparing, so a filename that already
    slugifies to the heading's slug is left alone.  A slug made only of
    hyphens (a heading such as ``---``) counts as empty.
    """
    target = slugify(heading_text)
    if not target.strip("-"):
        return RenameDecision(False, target, SyncReason.EMPTY_SLUG)
    if slugify(basename) == target:
        return RenameDecision(False, target, SyncReason.ALREADY_SYNCHRONIZED)
    return RenameDecision(True, target, SyncReason.RENAMED)
