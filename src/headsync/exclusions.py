"""Exclusion predicates from a sibling rule system.

The inclusion policy consults one of these first.  A hit there makes a
note *included* (see :func:`headsync.inclusion.is_included`).
"""

from __future__ import annotations

import fnmatch
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

ExclusionCheck = Callable[[str], bool]


def never_excluded(path: str) -> bool:  # noqa: ARG001
    """Default predicate: no sibling rule system is configured."""
    return False


class GlobExclusions:
    """Match vault-relative paths against ``fnmatch`` patterns."""

    def __init__(self, patterns: Iterable[str]) -> None:
        self.patterns: tuple[str, ...] = tuple(p for p in patterns if p)

    def __call__(self, path: str) -> bool:
        return any(fnmatch.fnmatch(path, pattern) for pattern in self.patterns)

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def __repr__(self) -> str:
        return f"GlobExclusions({list(self.patterns)!r})"


def exclusion_check_for(patterns: Iterable[str]) -> ExclusionCheck:
    """Build the predicate for configured *patterns*, or :func:`never_excluded`."""
    globs = GlobExclusions(patterns)
    return globs if globs else never_excluded
