"""headsync CLI entry point."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from headsync import __version__
from headsync.controller import SyncController
from headsync.decision import SyncReason
from headsync.host import VaultHost
from headsync.settings import SettingsStore, load_settings

_OUTCOME_MESSAGES = {
    SyncReason.NO_HEADING: "No heading found in {path}; nothing to do.",
    SyncReason.EMPTY_SLUG: "Heading of {path} has no slug-able characters; nothing to do.",
    SyncReason.ALREADY_SYNCHRONIZED: "{path} is already in sync.",
}


def _configure_logging(*, verbose: bool, quiet: bool) -> None:
    """Route ``headsync`` log records to stderr through rich."""
    from rich.console import Console
    from rich.logging import RichHandler

    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR

    pkg_logger = logging.getLogger("headsync")
    pkg_logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in pkg_logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        pkg_logger.addHandler(handler)


def _vault(ctx: click.Context) -> Path:
    vault: Path = ctx.obj["vault"]
    return vault


def _note_path(host: VaultHost, note: str) -> str:
    """Turn a NOTE argument into a vault-relative path.

    Paths that exist (or are absolute) are taken relative to the current
    directory; anything else is read as already vault-relative.
    """
    p = Path(note)
    if p.is_absolute() or p.exists():
        try:
            return host.relative(p)
        except ValueError:
            click.echo(f"Error: {note} is outside the vault {host.root}.", err=True)
            sys.exit(1)
    return p.as_posix()


@click.group()
@click.version_option(version=__version__, prog_name="headsync")
@click.option(
    "--vault",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Vault root (default: current directory).",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, vault: Path | None, verbose: bool, quiet: bool) -> None:
    """headsync - rename Markdown notes after their first heading."""
    ctx.ensure_object(dict)
    ctx.obj["vault"] = (vault or Path.cwd()).resolve()
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    _configure_logging(verbose=verbose, quiet=quiet)


@main.command()
@click.argument("note")
@click.pass_context
def sync(ctx: click.Context, note: str) -> None:
    """Slugify the note's heading as its filename.

    Runs regardless of the include rules and hook settings.
    """
    vault = _vault(ctx)
    store = SettingsStore(vault)
    host = VaultHost(vault)
    path = _note_path(host, note)
    host.set_active(path)

    controller = SyncController(host, store.snapshot)
    result = controller.sync_active_document()

    if result is None:
        click.echo("Error: no note to sync.", err=True)
        sys.exit(1)
    if result.renamed:
        click.echo(f"Renamed {path} -> {result.new_path}")
    elif result.reason is SyncReason.READ_FAILED:
        click.echo(f"Error: cannot read {path}.", err=True)
        sys.exit(1)
    elif result.reason is SyncReason.RENAME_FAILED:
        click.echo(f"Error: cannot rename {path}.", err=True)
        sys.exit(1)
    else:
        click.echo(_OUTCOME_MESSAGES[result.reason].format(path=path))


@main.command()
@click.argument("note")
@click.pass_context
def include(ctx: click.Context, note: str) -> None:
    """Include the note in automatic renaming."""
    vault = _vault(ctx)
    store = SettingsStore(vault)
    host = VaultHost(vault)
    host.set_active(_note_path(host, note))

    controller = SyncController(host, store.snapshot)
    path = controller.include_active_file(store)
    click.echo(f"Included {path}")


@main.command()
@click.argument("note")
@click.pass_context
def exclude(ctx: click.Context, note: str) -> None:
    """Remove the note from the manually included notes."""
    vault = _vault(ctx)
    store = SettingsStore(vault)
    path = _note_path(VaultHost(vault), note)

    if not store.remove_included_file(path):
        click.echo(f"Error: {path} is not manually included.", err=True)
        sys.exit(1)
    click.echo(f"Removed {path}")


@main.command()
@click.argument("pattern", required=False)
@click.option("--clear", is_flag=True, default=False, help="Remove the include regex.")
@click.pass_context
def regex(ctx: click.Context, pattern: str | None, *, clear: bool) -> None:
    """Show or set the include regex.

    Every note whose vault-relative path matches PATTERN is included.
    An invalid pattern disables the rule.
    """
    store = SettingsStore(_vault(ctx))

    if clear:
        store.set_include_regex("")
        click.echo("Include regex cleared.")
        return

    if pattern is None:
        current = store.settings.include_regex
        click.echo(current if current else "(no include regex)")
        return

    stored = store.set_include_regex(pattern)
    if stored:
        click.echo(f"Include regex set to {stored}")
    else:
        click.echo(f"Warning: invalid regex {pattern!r}; include regex cleared.", err=True)


@main.command()
@click.option("--open/--no-open", "open_hook", default=None, help="Sync when a note is opened.")
@click.option("--save/--no-save", "save_hook", default=None, help="Sync when a note is saved.")
@click.pass_context
def hooks(ctx: click.Context, *, open_hook: bool | None, save_hook: bool | None) -> None:
    """Show or toggle the open and save hooks."""
    store = SettingsStore(_vault(ctx))

    if open_hook is not None:
        store.set_open_hook(open_hook)
    if save_hook is not None:
        store.set_save_hook(save_hook)

    settings = store.settings
    click.echo(f"open: {'on' if settings.use_file_open_hook else 'off'}")
    click.echo(f"save: {'on' if settings.use_file_save_hook else 'off'}")


@main.command()
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, *, output_json: bool) -> None:
    """Show settings and the notes they include."""
    from headsync.inclusion import files_matching_regex

    vault = _vault(ctx)
    settings = SettingsStore(vault).settings
    host = VaultHost(vault)
    by_regex = files_matching_regex(host.list_documents(), settings.include_regex)
    manual = list(settings.included_files)

    if output_json:
        data = {
            "vault": str(vault),
            "include_regex": settings.include_regex,
            "use_file_open_hook": settings.use_file_open_hook,
            "use_file_save_hook": settings.use_file_save_hook,
            "exclude_globs": settings.exclude_globs,
            "included_by_regex": by_regex,
            "included_manually": manual,
        }
        click.echo(json.dumps(data, ensure_ascii=False, indent=2))
        return

    from rich.console import Console
    from rich.panel import Panel
    from rich.table import Table

    console = Console()

    console.print(Panel(
        f"Include regex: {settings.include_regex or '(none)'}",
        title=f"headsync v{__version__}",
        border_style="blue",
    ))
    console.print(
        f"  Open hook: [bold]{'on' if settings.use_file_open_hook else 'off'}[/]   "
        f"Save hook: [bold]{'on' if settings.use_file_save_hook else 'off'}[/]"
    )
    console.print()

    console.print("[bold]Included Files By Regex[/bold]")
    regex_table = Table(show_header=False, box=None, padding=(0, 1))
    regex_table.add_column("path", style="cyan")
    for path in by_regex:
        regex_table.add_row(path)
    console.print(regex_table)
    console.print()

    console.print("[bold]Manually Included Files[/bold]")
    manual_table = Table(show_header=False, box=None, padding=(0, 1))
    manual_table.add_column("path", style="cyan")
    for path in manual:
        manual_table.add_row(path)
    console.print(manual_table)


@main.command()
@click.argument("note")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, note: str, *, output_json: bool) -> None:
    """Show what `sync` would do to the note, without renaming it."""
    from headsync.controller import target_path
    from headsync.decision import decide_rename
    from headsync.heading import find_heading_in_text
    from headsync.host import StorageError
    from headsync.slugify import slugify

    vault = _vault(ctx)
    store = SettingsStore(vault)
    host = VaultHost(vault)
    path = _note_path(host, note)

    try:
        content = host.read_document(path)
    except StorageError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    controller = SyncController(host, store.snapshot)
    heading = find_heading_in_text(content)
    basename = Path(path).stem
    if heading is None:
        reason = SyncReason.NO_HEADING
        target = ""
    else:
        decision = decide_rename(heading.text, basename)
        reason = decision.reason
        target = decision.target_slug

    data = {
        "path": path,
        "heading": heading.text if heading else None,
        "style": heading.style.value if heading else None,
        "line": heading.line_number if heading else None,
        "target_slug": target,
        "current_slug": slugify(basename),
        "included": controller.is_included(path),
        "decision": reason.value,
        "new_path": target_path(path, target) if reason is SyncReason.RENAMED else None,
    }

    if output_json:
        click.echo(json.dumps(data, ensure_ascii=False, indent=2))
        return

    for key, value in data.items():
        click.echo(f"{key}: {'' if value is None else value}")


@main.command()
@click.argument("text")
def slug(text: str) -> None:
    """Print the slug of TEXT."""
    from headsync.slugify import slugify

    click.echo(slugify(text))


@main.command("watch")
@click.option("--debounce", default=500, type=int, help="Debounce delay in ms.")
@click.option(
    "--active",
    "active_note",
    default=None,
    help=(
        "Only react to this note.  Without it every note written to disk, "
        "including background writes such as a git pull, counts as active."
    ),
)
@click.pass_context
def watch_cmd(ctx: click.Context, *, debounce: int, active_note: str | None) -> None:
    """Watch the vault and rename notes as their headings change.

    Settings are re-read for every event, so `include`, `regex` and
    `hooks` take effect without a restart.  Pass --active to react only
    to the note you are editing.

    Requires watchfiles: pip install headsync[watch]
    """
    try:
        from headsync.watcher import watch
    except ImportError:
        click.echo(
            "Error: watch requires 'watchfiles'. "
            "Install with: pip install headsync[watch]",
            err=True,
        )
        sys.exit(1)

    vault = _vault(ctx)
    host = VaultHost(vault)
    if active_note is not None:
        host.set_active(_note_path(host, active_note))

    controller = SyncController(host, lambda: load_settings(vault))

    try:
        watch(vault, controller, host, debounce_ms=debounce, follow_edits=active_note is None)
    except ImportError:
        click.echo(
            "Error: watch requires 'watchfiles'. "
            "Install with: pip install headsync[watch]",
            err=True,
        )
        sys.exit(1)
