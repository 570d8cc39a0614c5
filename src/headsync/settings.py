"""Persisted settings: include rules and hook toggles.

Stored as YAML in ``<vault>/.headsync/config.yml`` using the keys of the
plugin's data file::

    includeRegex: ""
    includedFiles: {notes/a.md: null}
    useFileOpenHook: true
    useFileSaveHook: true
    excludeGlobs: []
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

import yaml

from headsync.inclusion import compile_include_regex

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_DIR = ".headsync"
CONFIG_FILE = "config.yml"


@dataclass
class InclusionSettings:
    """Snapshot of the user's settings, handed to each evaluation."""

    include_regex: str = ""
    included_files: dict[str, None] = field(default_factory=dict)
    use_file_open_hook: bool = True
    use_file_save_hook: bool = True
    exclude_globs: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the persisted key names."""
        return {
            "includeRegex": self.include_regex,
            "includedFiles": dict(self.included_files),
            "useFileOpenHook": self.use_file_open_hook,
            "useFileSaveHook": self.use_file_save_hook,
            "excludeGlobs": list(self.exclude_globs),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InclusionSettings:
        """Merge *data* over the defaults, ignoring unknown or mistyped keys."""
        settings = cls()

        regex = data.get("includeRegex")
        if isinstance(regex, str):
            settings.include_regex = regex

        included = data.get("includedFiles")
        if isinstance(included, (dict, list)):
            settings.included_files = {str(k): None for k in included}

        for key, attr in (
            ("useFileOpenHook", "use_file_open_hook"),
            ("useFileSaveHook", "use_file_save_hook"),
        ):
            value = data.get(key)
            if isinstance(value, bool):
                setattr(settings, attr, value)

        globs = data.get("excludeGlobs")
        if isinstance(globs, list):
            settings.exclude_globs = [str(g) for g in globs]

        return settings

    def copy(self) -> InclusionSettings:
        return replace(
            self,
            included_files=dict(self.included_files),
            exclude_globs=list(self.exclude_globs),
        )


def config_path(vault_root: Path) -> Path:
    """Return the settings file location for *vault_root*."""
    return vault_root / CONFIG_DIR / CONFIG_FILE


def load_settings(vault_root: Path) -> InclusionSettings:
    """Load settings for *vault_root*, falling back to defaults.

    A missing file gives the defaults silently; an unreadable or
    malformed one gives the defaults with a warning.
    """
    path = config_path(vault_root)
    if not path.is_file():
        return InclusionSettings()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError):
        logger.warning("Failed to read %s, using default settings", path)
        return InclusionSettings()

    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a mapping, got %s", path, type(data).__name__)
        return InclusionSettings()

    return InclusionSettings.from_dict(data)


def save_settings(vault_root: Path, settings: InclusionSettings) -> Path:
    """Write *settings* for *vault_root* and return the file path."""
    path = config_path(vault_root)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.dump(
            settings.to_dict(),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        ),
        encoding="utf-8",
    )
    return path


class SettingsStore:
    """Loaded settings for one vault, saved back on every mutation."""

    def __init__(self, vault_root: Path) -> None:
        self.vault_root = vault_root
        self._settings = load_settings(vault_root)

    @property
    def settings(self) -> InclusionSettings:
        return self._settings

    def snapshot(self) -> InclusionSettings:
        """Return a copy that later mutations will not touch."""
        return self._settings.copy()

    def save(self) -> None:
        save_settings(self.vault_root, self._settings)

    def include_file(self, path: str) -> None:
        """Add *path* to the manually included notes."""
        self._settings.included_files[path] = None
        self.save()

    def remove_included_file(self, path: str) -> bool:
        """Drop *path* from the manually included notes.

        Returns ``False`` when it was not included.
        """
        if path not in self._settings.included_files:
            return False
        del self._settings.included_files[path]
        self.save()
        return True

    def set_include_regex(self, value: str) -> str:
        """Store *value* as the include rule and return what was stored.

        An invalid pattern is stored as ``""`` (no regex rule).
        """
        if value and compile_include_regex(value) is None:
            logger.warning("Invalid include regex %r, clearing the rule", value)
            value = ""
        self._settings.include_regex = value
        self.save()
        return value

    def set_open_hook(self, enabled: bool) -> None:
        self._settings.use_file_open_hook = enabled
        self.save()

    def set_save_hook(self, enabled: bool) -> None:
        self._settings.use_file_save_hook = enabled
        self.save()
