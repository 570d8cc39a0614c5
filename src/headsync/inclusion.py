"""Inclusion policy: which notes headsync is allowed to rename."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Iterable

logger = logging.getLogger(__name__)


def compile_include_regex(regex: str) -> re.Pattern[str] | None:
    """Compile the include rule, or return ``None`` when it is empty or invalid."""
    if not regex:
        return None
    try:
        return re.compile(regex)
    except re.error as exc:
        logger.debug("Ignoring invalid include regex %r: %s", regex, exc)
        return None


def is_included(
    path: str,
    exclusion_check: Callable[[str], bool],
    explicit_set: Collection[str],
    regex: str,
) -> bool:
    """Decide whether the note at *path* is in scope.

    Rules are checked in order and the first hit wins:

    1. *exclusion_check* reports the note as excluded by the sibling rule
       system.  This maps to **included**, for compatibility with that
       system's exclusion list.
    2. *path* is in *explicit_set* (notes included by hand).
    3. *regex* is a valid, non-empty pattern that matches *path*.

    An invalid *regex* counts as no regex at all; nothing is raised.
    """
    if exclusion_check(path):
        return True

    if path in explicit_set:
        return True

    pattern = compile_include_regex(regex)
    if pattern is None:
        return False
    return pattern.search(path) is not None


def files_matching_regex(paths: Iterable[str], regex: str) -> list[str]:
    """Return the *paths* the include regex pulls in, in their given order."""
    pattern = compile_include_regex(regex)
    if pattern is None:
        return []
    return [p for p in paths if pattern.search(p) is not None]
