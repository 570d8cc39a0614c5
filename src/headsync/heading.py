"""Heading extractor: find the first heading of a note, skipping front-matter."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

FRONT_MATTER_DELIMITER = "---"
PREFIX_MARKER = "# "

# Setext H1 underline: one or more '=' and nothing else.
_UNDERLINE_RE = re.compile(r"=+")


class HeadingStyle(enum.Enum):
    """How a heading is marked up."""

    PREFIX = "Prefix"
    UNDERLINE = "Underline"


@dataclass(frozen=True)
class HeadingMatch:
    """The first heading of a document."""

    line_number: int
    text: str  # raw heading content, not slugified
    style: HeadingStyle


def find_note_start(lines: Sequence[str]) -> int:
    """Return the index of the first body line, skipping front-matter.

    Front-matter is a block opened by ``---`` on the very first line and
    closed by the next ``---`` line.  Without a closing delimiter it is
    not front-matter at all and the body starts at line 0.
    """
    if lines and lines[0] == FRONT_MATTER_DELIMITER:
        for i in range(1, len(lines)):
            if lines[i] == FRONT_MATTER_DELIMITER:
                return i + 1
    return 0


def find_heading(lines: Sequence[str], start: int | None = None) -> HeadingMatch | None:
    """Find the first Prefix (``# Title``) or Underline (``Title`` / ``===``) heading.

    Scanning begins at *start*, or at :func:`find_note_start` when it is
    ``None``.  The lowest line index wins.  A ``# `` line is always a
    Prefix heading and is never taken as the text line of an Underline
    pair.
    """
    if start is None:
        start = find_note_start(lines)

    for i in range(start, len(lines)):
        line = lines[i]
        if line.startswith(PREFIX_MARKER):
            return HeadingMatch(
                line_number=i,
                text=line[len(PREFIX_MARKER):],
                style=HeadingStyle.PREFIX,
            )
        if i + 1 < len(lines) and _UNDERLINE_RE.fullmatch(lines[i + 1]):
            return HeadingMatch(line_number=i, text=line, style=HeadingStyle.UNDERLINE)

    return None


def find_heading_in_text(text: str) -> HeadingMatch | None:
    """Split *text* into lines and return its first heading."""
    return find_heading(text.split("\n"))
