"""Shared test fixtures for headsync."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from headsync.host import DocumentNotFoundError, RenameConflictError, StorageError

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


@pytest.fixture()
def vault(tmp_path: Path) -> Path:
    """Create an empty vault with a ``notes/`` folder."""
    root = tmp_path / "vault"
    (root / "notes").mkdir(parents=True)
    return root


class FakeHost:
    """In-memory host recording every rename."""

    def __init__(self, docs: dict[str, str] | None = None, active: str | None = None) -> None:
        self.docs: dict[str, str] = dict(docs or {})
        self.active = active
        self.renames: list[tuple[str, str]] = []
        self.fail_read = False
        self.fail_rename = False
        self.on_rename: Callable[[str, str], None] | None = None

    def read_document(self, path: str) -> str:
        if self.fail_read:
            raise StorageError("disk unavailable")
        if path not in self.docs:
            raise DocumentNotFoundError(path)
        return self.docs[path]

    def rename_document(self, path: str, new_path: str) -> None:
        if self.on_rename is not None:
            self.on_rename(path, new_path)
        if self.fail_rename:
            raise StorageError("disk unavailable")
        if new_path in self.docs:
            raise RenameConflictError(new_path)
        self.docs[new_path] = self.docs.pop(path)
        self.renames.append((path, new_path))
        if self.active == path:
            self.active = new_path

    def list_documents(self) -> list[str]:
        return sorted(self.docs)

    def get_active_document(self) -> str | None:
        return self.active


@pytest.fixture()
def fake_host() -> FakeHost:
    return FakeHost()
