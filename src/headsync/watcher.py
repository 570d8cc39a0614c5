"""File watcher: deliver note saves and creations to the sync controller."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from headsync.host import NOTE_EXTENSION

if TYPE_CHECKING:
    import threading
    from collections.abc import Callable, Iterable

    from headsync.controller import SyncController, SyncResult
    from headsync.host import VaultHost

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 500

# ``watchfiles.Change`` values (an IntEnum).
CHANGE_ADDED = 1
CHANGE_MODIFIED = 2


def _filter_relevant(
    changes: Iterable[tuple[object, str]],
    vault_root: Path,
) -> list[tuple[int, str]]:
    """Keep added/modified notes, ignoring deletions, hidden dirs and temp files.

    Deletions are dropped, which also drops the old half of every rename.
    Each path appears once; an add wins over a modify in the same batch.
    """
    result: dict[str, int] = {}

    for change_type, path_str in changes:
        if change_type not in (CHANGE_ADDED, CHANGE_MODIFIED):
            continue

        p = Path(path_str)

        # Ignore temp files (name starts with ~ or ends with .tmp).
        if p.name.startswith("~") or p.name.endswith(".tmp"):
            continue

        if p.suffix != NOTE_EXTENSION:
            continue

        try:
            rel = p.relative_to(vault_root)
        except ValueError:
            continue

        if any(part.startswith(".") for part in rel.parts[:-1]):
            continue

        kind = int(change_type)  # type: ignore[call-overload]
        if result.get(path_str) != CHANGE_ADDED:
            result[path_str] = kind

    return [(kind, path_str) for path_str, kind in sorted(result.items())]


def _format_time() -> str:
    """Return current time as ``HH:MM:SS`` string."""
    return datetime.now(tz=timezone.utc).strftime("%H:%M:%S")


@dataclass(frozen=True)
class WatchEvent:
    """A single note event after filtering and dispatch."""

    path: str
    kind: str  # "changed" | "opened"
    result: SyncResult


def dispatch(
    changes: Iterable[tuple[object, str]],
    vault_root: Path,
    controller: SyncController,
    host: VaultHost,
    *,
    follow_edits: bool = True,
) -> list[WatchEvent]:
    """Feed one batch of raw changes to *controller*.

    New notes are delivered as "opened", edited ones as "changed".  With
    *follow_edits* the host's active note moves to each note as it is
    delivered.
    """
    events: list[WatchEvent] = []
    for change_type, path_str in _filter_relevant(changes, vault_root):
        try:
            rel = host.relative(path_str)
        except ValueError:
            continue

        # Renamed away by an earlier event in this batch.
        if not Path(path_str).is_file():
            continue

        if follow_edits:
            host.set_active(rel)

        if change_type == CHANGE_ADDED:
            kind = "opened"
            result = controller.on_file_opened(rel)
        else:
            kind = "changed"
            result = controller.on_file_changed(rel)

        logger.debug("%s %s: %s", kind, rel, result.reason.value)
        events.append(WatchEvent(path=rel, kind=kind, result=result))
    return events


def watch(
    vault_root: Path,
    controller: SyncController,
    host: VaultHost,
    *,
    debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    follow_edits: bool = True,
    stop_event: threading.Event | None = None,
    callback: Callable[[WatchEvent], None] | None = None,
) -> None:
    """Watch *vault_root* and rename notes as their headings change.

    Runs until interrupted or until *stop_event* is set.

    Requires ``watchfiles`` (optional dependency).
    """
    from rich.console import Console
    from watchfiles import watch as fs_watch

    console = Console()
    vault_root = vault_root.resolve()

    console.print(f"[bold blue]Watching:[/bold blue] {vault_root}")
    console.print(f"[dim]Debounce: {debounce_ms}ms  |  Press Ctrl+C to stop[/dim]")
    console.print()

    try:
        for batch in fs_watch(
            vault_root,
            debounce=debounce_ms,
            stop_event=stop_event,
        ):
            events = dispatch(batch, vault_root, controller, host, follow_edits=follow_edits)

            for event in events:
                if event.result.renamed:
                    console.print(
                        f"[dim]{_format_time()}[/dim] "
                        f"[green]renamed[/green] {event.path} -> {event.result.new_path}"
                    )
                if callback is not None:
                    callback(event)

    except KeyboardInterrupt:
        console.print("\n[yellow]Watch stopped.[/yellow]")
