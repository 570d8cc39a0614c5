"""Sync controller: react to note events and rename notes after their heading."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from headsync.decision import SyncReason, decide_rename
from headsync.exclusions import exclusion_check_for
from headsync.heading import find_heading
from headsync.host import NOTE_EXTENSION, StorageError
from headsync.inclusion import is_included
from headsync.settings import InclusionSettings

if TYPE_CHECKING:
    from collections.abc import Callable

    from headsync.exclusions import ExclusionCheck
    from headsync.host import NoteHost
    from headsync.settings import SettingsStore

logger = logging.getLogger(__name__)


class SyncState(enum.Enum):
    """Controller state; a rename in flight blocks re-entrant evaluations."""

    IDLE = "idle"
    RENAME_IN_FLIGHT = "rename_in_flight"


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one evaluation."""

    path: str
    reason: SyncReason
    new_path: str | None = None

    @property
    def renamed(self) -> bool:
        return self.reason is SyncReason.RENAMED


def target_path(path: str, target_slug: str) -> str:
    """Return the path of *path* renamed to ``<target_slug>.md`` in the same folder."""
    parent = PurePosixPath(path).parent
    name = f"{target_slug}{NOTE_EXTENSION}"
    if str(parent) in ("", "."):
        return name
    return f"{parent.as_posix()}/{name}"


class SyncController:
    """Keep note filenames in step with their first heading.

    Parameters
    ----------
    host:
        The note storage collaborator.
    settings:
        Either a settings snapshot or a zero-argument callable returning
        the current one.  It is read once per evaluation.
    exclusion_check:
        Predicate of the sibling exclusion rule system.  When omitted it
        is built from the snapshot's ``exclude_globs``.
    """

    def __init__(
        self,
        host: NoteHost,
        settings: InclusionSettings | Callable[[], InclusionSettings],
        *,
        exclusion_check: ExclusionCheck | None = None,
    ) -> None:
        self.host = host
        self._settings = settings
        self._exclusion_check = exclusion_check
        self.state = SyncState.IDLE

    def snapshot(self) -> InclusionSettings:
        if isinstance(self._settings, InclusionSettings):
            return self._settings
        return self._settings()

    # -- events ---------------------------------------------------------------

    def on_file_changed(self, path: str) -> SyncResult:
        """Handle a save of *path*."""
        settings = self.snapshot()
        if not settings.use_file_save_hook:
            logger.debug("Save hook disabled, ignoring %s", path)
            return SyncResult(path, SyncReason.IGNORED)
        return self._handle_event(path, settings)

    def on_file_opened(self, path: str) -> SyncResult:
        """Handle *path* being opened."""
        settings = self.snapshot()
        if not settings.use_file_open_hook:
            logger.debug("Open hook disabled, ignoring %s", path)
            return SyncResult(path, SyncReason.IGNORED)
        return self._handle_event(path, settings)

    def _handle_event(self, path: str, settings: InclusionSettings) -> SyncResult:
        if self.state is SyncState.RENAME_IN_FLIGHT:
            logger.debug("Rename in flight, ignoring event for %s", path)
            return SyncResult(path, SyncReason.IGNORED)

        if PurePosixPath(path).suffix != NOTE_EXTENSION:
            return SyncResult(path, SyncReason.IGNORED)

        # Only react to the note under the user's attention.
        if self.host.get_active_document() != path:
            logger.debug("%s is not the active note, ignoring", path)
            return SyncResult(path, SyncReason.IGNORED)

        if not self.is_included(path, settings):
            logger.debug("%s is not included", path)
            return SyncResult(path, SyncReason.NOT_INCLUDED)

        return self.force_sync(path)

    def is_included(self, path: str, settings: InclusionSettings | None = None) -> bool:
        """Apply the inclusion policy to *path* with the current settings."""
        if settings is None:
            settings = self.snapshot()
        check = self._exclusion_check
        if check is None:
            check = exclusion_check_for(settings.exclude_globs)
        return is_included(path, check, settings.included_files, settings.include_regex)

    # -- sync -----------------------------------------------------------------

    def force_sync(self, path: str) -> SyncResult:
        """Rename *path* after its first heading, skipping inclusion checks.

        Storage failures are logged and reported in the result; the note
        keeps its name.
        """
        try:
            content = self.host.read_document(path)
        except StorageError as exc:
            logger.warning("Cannot read %s: %s", path, exc)
            return SyncResult(path, SyncReason.READ_FAILED)

        heading = find_heading(content.split("\n"))
        if heading is None:
            logger.debug("No heading in %s", path)
            return SyncResult(path, SyncReason.NO_HEADING)

        basename = PurePosixPath(path).stem
        decision = decide_rename(heading.text, basename)
        if not decision.should_rename:
            logger.debug("%s: %s", path, decision.reason.value)
            return SyncResult(path, decision.reason)

        new_path = target_path(path, decision.target_slug)
        self.state = SyncState.RENAME_IN_FLIGHT
        try:
            self.host.rename_document(path, new_path)
        except StorageError as exc:
            logger.warning("Cannot rename %s to %s: %s", path, new_path, exc)
            return SyncResult(path, SyncReason.RENAME_FAILED)
        finally:
            self.state = SyncState.IDLE

        logger.info("Renamed %s -> %s", path, new_path)
        return SyncResult(path, SyncReason.RENAMED, new_path)

    # -- commands -------------------------------------------------------------

    def sync_active_document(self) -> SyncResult | None:
        """Force-sync the active note, or return ``None`` when there is none."""
        active = self.host.get_active_document()
        if active is None:
            return None
        return self.force_sync(active)

    def include_active_file(self, store: SettingsStore) -> str | None:
        """Add the active note to the manually included notes."""
        active = self.host.get_active_document()
        if active is None:
            return None
        store.include_file(active)
        return active
