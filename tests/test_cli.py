"""Tests for the headsync CLI."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from unittest.mock import patch

from click.testing import CliRunner, Result

from headsync import __version__
from headsync.cli import main
from headsync.settings import InclusionSettings, load_settings, save_settings

if TYPE_CHECKING:
    from pathlib import Path


def _run(vault: Path, *args: str) -> Result:
    runner = CliRunner()
    return runner.invoke(main, ["--vault", str(vault), *args])


class TestCliBasics:
    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_slug(self) -> None:
        result = CliRunner().invoke(main, ["slug", "Café — Déjà Vu"])
        assert result.exit_code == 0
        assert result.output.strip() == "cafe-deja-vu"


class TestCliSync:
    def test_sync_renames(self, vault: Path) -> None:
        (vault / "notes" / "old.md").write_text("# Brand New\n", encoding="utf-8")

        result = _run(vault, "sync", str(vault / "notes" / "old.md"))

        assert result.exit_code == 0, result.output
        assert "Renamed notes/old.md -> notes/brand-new.md" in result.output
        assert (vault / "notes" / "brand-new.md").is_file()

    def test_sync_accepts_vault_relative_path(self, vault: Path) -> None:
        (vault / "notes" / "old.md").write_text("# Brand New\n", encoding="utf-8")

        result = _run(vault, "sync", "notes/old.md")

        assert result.exit_code == 0, result.output
        assert (vault / "notes" / "brand-new.md").is_file()

    def test_sync_already_in_sync(self, vault: Path) -> None:
        (vault / "notes" / "brand-new.md").write_text("# Brand New\n", encoding="utf-8")

        result = _run(vault, "sync", "notes/brand-new.md")

        assert result.exit_code == 0
        assert "already in sync" in result.output

    def test_sync_no_heading(self, vault: Path) -> None:
        (vault / "notes" / "old.md").write_text("plain text\n", encoding="utf-8")

        result = _run(vault, "sync", "notes/old.md")

        assert result.exit_code == 0
        assert "No heading found" in result.output
        assert (vault / "notes" / "old.md").is_file()

    def test_sync_missing_note(self, vault: Path) -> None:
        result = _run(vault, "sync", "notes/missing.md")
        assert result.exit_code == 1
        assert "Error: cannot read notes/missing.md" in result.output

    def test_sync_conflict(self, vault: Path) -> None:
        (vault / "notes" / "old.md").write_text("# Taken\n", encoding="utf-8")
        (vault / "notes" / "taken.md").write_text("other\n", encoding="utf-8")

        result = _run(vault, "sync", "notes/old.md")

        assert result.exit_code == 1
        assert "Error: cannot rename notes/old.md" in result.output
        assert (vault / "notes" / "old.md").is_file()

    def test_sync_outside_vault(self, vault: Path, tmp_path: Path) -> None:
        outside = tmp_path / "outside.md"
        outside.write_text("# Out\n", encoding="utf-8")

        result = _run(vault, "sync", str(outside))

        assert result.exit_code == 1
        assert "outside the vault" in result.output


class TestCliInclusion:
    def test_include_and_exclude(self, vault: Path) -> None:
        (vault / "notes" / "a.md").write_text("# A\n", encoding="utf-8")

        result = _run(vault, "include", "notes/a.md")
        assert result.exit_code == 0
        assert "Included notes/a.md" in result.output
        assert load_settings(vault).included_files == {"notes/a.md": None}

        result = _run(vault, "exclude", "notes/a.md")
        assert result.exit_code == 0
        assert load_settings(vault).included_files == {}

    def test_exclude_not_included(self, vault: Path) -> None:
        result = _run(vault, "exclude", "notes/a.md")
        assert result.exit_code == 1
        assert "not manually included" in result.output

    def test_regex_set_show_clear(self, vault: Path) -> None:
        assert "(no include regex)" in _run(vault, "regex").output

        result = _run(vault, "regex", "^journal/")
        assert result.exit_code == 0
        assert load_settings(vault).include_regex == "^journal/"
        assert "^journal/" in _run(vault, "regex").output

        _run(vault, "regex", "--clear")
        assert load_settings(vault).include_regex == ""

    def test_invalid_regex_is_cleared(self, vault: Path) -> None:
        save_settings(vault, InclusionSettings(include_regex="^journal/"))

        result = _run(vault, "regex", "journal/(")

        assert result.exit_code == 0
        assert "invalid regex" in result.output
        assert load_settings(vault).include_regex == ""

    def test_hooks(self, vault: Path) -> None:
        result = _run(vault, "hooks", "--no-save")
        assert result.exit_code == 0
        assert "open: on" in result.output
        assert "save: off" in result.output
        assert load_settings(vault).use_file_save_hook is False

        _run(vault, "hooks", "--no-open", "--save")
        settings = load_settings(vault)
        assert settings.use_file_open_hook is False
        assert settings.use_file_save_hook is True


class TestCliStatus:
    def test_status_json(self, vault: Path) -> None:
        (vault / "journal").mkdir()
        (vault / "journal" / "day.md").write_text("# Day\n", encoding="utf-8")
        (vault / "notes" / "a.md").write_text("# A\n", encoding="utf-8")
        save_settings(
            vault,
            InclusionSettings(include_regex="^journal/", included_files={"notes/a.md": None}),
        )

        result = _run(vault, "status", "--json")

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["included_by_regex"] == ["journal/day.md"]
        assert data["included_manually"] == ["notes/a.md"]
        assert data["use_file_save_hook"] is True

    def test_status_rich(self, vault: Path) -> None:
        (vault / "notes" / "b.md").write_text("# B\n", encoding="utf-8")
        save_settings(
            vault,
            InclusionSettings(include_regex="b", included_files={"notes/a.md": None}),
        )

        result = _run(vault, "status")

        assert result.exit_code == 0, result.output
        assert "Included Files By Regex" in result.output
        assert "notes/b.md" in result.output
        assert "Manually Included Files" in result.output
        assert "notes/a.md" in result.output


class TestCliCheck:
    def test_check_json(self, vault: Path) -> None:
        (vault / "notes" / "old.md").write_text("---\nx: 1\n---\nTitle Here\n===\n", encoding="utf-8")

        result = _run(vault, "check", "notes/old.md", "--json")

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["heading"] == "Title Here"
        assert data["style"] == "Underline"
        assert data["line"] == 3
        assert data["target_slug"] == "title-here"
        assert data["current_slug"] == "old"
        assert data["included"] is False
        assert data["decision"] == "renamed"
        assert data["new_path"] == "notes/title-here.md"
        assert (vault / "notes" / "old.md").is_file()

    def test_check_no_heading(self, vault: Path) -> None:
        (vault / "notes" / "old.md").write_text("text\n", encoding="utf-8")

        result = _run(vault, "check", "notes/old.md")

        assert result.exit_code == 0
        assert "decision: no_heading" in result.output

    def test_check_missing(self, vault: Path) -> None:
        result = _run(vault, "check", "notes/missing.md")
        assert result.exit_code == 1
        assert "Error:" in result.output


class TestCliWatch:
    def test_watch_help(self) -> None:
        result = CliRunner().invoke(main, ["watch", "--help"])
        assert result.exit_code == 0
        assert "Watch the vault" in result.output
        assert "--debounce" in result.output
        assert "--active" in result.output
        assert "background" in result.output

    def test_watch_no_watchfiles(self, vault: Path) -> None:
        """Graceful error when watchfiles is not installed."""
        with patch.dict("sys.modules", {"watchfiles": None}):
            result = _run(vault, "watch")
        assert result.exit_code != 0
        assert "watchfiles" in result.output

    def test_watch_runs_loop(self, vault: Path) -> None:
        with patch("headsync.watcher.watch") as fake_watch:
            result = _run(vault, "watch", "--debounce", "100")

        assert result.exit_code == 0, result.output
        kwargs = fake_watch.call_args.kwargs
        assert kwargs["debounce_ms"] == 100
        assert kwargs["follow_edits"] is True

    def test_watch_reads_settings_per_event(self, vault: Path) -> None:
        """Settings changed from another shell reach a running watcher."""
        with patch("headsync.watcher.watch") as fake_watch:
            result = _run(vault, "watch")
        assert result.exit_code == 0, result.output
        controller = fake_watch.call_args.args[1]
        assert controller.is_included("notes/a.md") is False

        save_settings(vault, InclusionSettings(included_files={"notes/a.md": None}))

        assert controller.is_included("notes/a.md") is True

    def test_watch_pinned_note(self, vault: Path) -> None:
        (vault / "notes" / "a.md").write_text("# A\n", encoding="utf-8")

        with patch("headsync.watcher.watch") as fake_watch:
            result = _run(vault, "watch", "--active", "notes/a.md")

        assert result.exit_code == 0, result.output
        host = fake_watch.call_args.args[2]
        assert host.get_active_document() == "notes/a.md"
        assert fake_watch.call_args.kwargs["follow_edits"] is False
