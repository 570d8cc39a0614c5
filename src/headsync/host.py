"""Host collaborator: where notes live and how they are read and renamed.

Paths handed across this boundary are vault-relative POSIX strings such
as ``"projects/plan.md"``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path, PurePosixPath
from typing import Protocol

logger = logging.getLogger(__name__)

NOTE_EXTENSION = ".md"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class StorageError(Exception):
    """Raised when the host cannot read or rename a note."""


class DocumentNotFoundError(StorageError):
    """Raised when a note does not exist."""


class RenameConflictError(StorageError):
    """Raised when the rename target already exists."""


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class NoteHost(Protocol):
    """Operations headsync needs from the application that owns the notes."""

    def read_document(self, path: str) -> str: ...

    def rename_document(self, path: str, new_path: str) -> None: ...

    def list_documents(self) -> list[str]: ...

    def get_active_document(self) -> str | None: ...


# ---------------------------------------------------------------------------
# Directory-backed host
# ---------------------------------------------------------------------------


class VaultHost:
    """A directory of Markdown notes.

    A plain directory has no editor focus, so the active document is
    whatever was last set with :meth:`set_active`.
    """

    def __init__(self, root: Path, active: str | None = None) -> None:
        self.root = root
        self._active = active

    def relative(self, path: Path | str) -> str:
        """Return *path* relative to the vault root, in POSIX form.

        Raises ``ValueError`` when *path* is outside the vault.
        """
        p = Path(path)
        if not p.is_absolute():
            p = Path.cwd() / p
        return p.resolve().relative_to(self.root.resolve()).as_posix()

    def _abs(self, path: str) -> Path:
        return self.root / PurePosixPath(path)

    def read_document(self, path: str) -> str:
        target = self._abs(path)
        try:
            return target.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise DocumentNotFoundError(f"note not found: {path}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"cannot read {path}: {exc}") from exc

    def rename_document(self, path: str, new_path: str) -> None:
        source = self._abs(path)
        target = self._abs(new_path)
        if not source.is_file():
            raise DocumentNotFoundError(f"note not found: {path}")
        if target.exists():
            raise RenameConflictError(f"target already exists: {new_path}")
        try:
            os.rename(source, target)
        except OSError as exc:
            raise StorageError(f"cannot rename {path} to {new_path}: {exc}") from exc

        if self._active == path:
            self._active = new_path
        logger.debug("Renamed %s -> %s", path, new_path)

    def list_documents(self) -> list[str]:
        result: list[str] = []
        for md_path in self.root.rglob(f"*{NOTE_EXTENSION}"):
            rel = md_path.relative_to(self.root)
            if any(part.startswith(".") for part in rel.parts[:-1]):
                continue
            if md_path.is_file():
                result.append(rel.as_posix())
        return sorted(result)

    def get_active_document(self) -> str | None:
        return self._active

    def set_active(self, path: str | None) -> None:
        """Move focus to *path* (``None`` clears it)."""
        self._active = path
