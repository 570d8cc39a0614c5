"""Slugifier: turn heading text into a filesystem- and URL-safe slug."""

from __future__ import annotations

import re
import unicodedata

# Combining diacritical marks block (U+0300..U+036F).
_COMBINING_MARKS_RE = re.compile("[\u0300-\u036f]")
_DISALLOWED_RE = re.compile(r"[^a-z0-9 -]")
_WHITESPACE_RE = re.compile(r"\s+")
_HYPHENS_RE = re.compile(r"-+")


def slugify(text: str) -> str:
    """Return the slug of *text*.

    Accented characters are decomposed and their marks dropped, the
    result is trimmed and lowercased, anything other than ASCII letters,
    digits, spaces and hyphens is removed, and whitespace and hyphen runs
    collapse into a single ``-``.

    Never raises.  Returns ``""`` when *text* has nothing slug-able in it;
    callers treat that as "no meaningful slug".
    """
    result = unicodedata.normalize("NFKD", str(text))
    result = _COMBINING_MARKS_RE.sub("", result)
    result = result.strip().lower()
    result = _DISALLOWED_RE.sub("", result)
    result = _WHITESPACE_RE.sub("-", result)
    return _HYPHENS_RE.sub("-", result)
