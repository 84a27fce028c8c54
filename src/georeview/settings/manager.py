"""Settings file management with validation and change notifications."""

from __future__ import annotations

import os
import sys
from copy import deepcopy
from pathlib import Path
from typing import Any

from jsonschema.exceptions import ValidationError
from PySide6.QtCore import QObject, Signal, Slot

from ..config import APP_DIR_NAME, SEEN_STORE_FILE_NAME, SETTINGS_FILE_NAME
from ..errors import SettingsLoadError, SettingsValidationError
from ..utils.jsonio import read_json, write_json
from .schema import DEFAULT_SETTINGS, merge_with_defaults


def default_config_dir() -> Path:
    """Return the per-user configuration directory for the current platform."""

    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / APP_DIR_NAME
        return Path.home() / "AppData" / "Roaming" / APP_DIR_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def default_settings_path() -> Path:
    return default_config_dir() / SETTINGS_FILE_NAME


class SettingsManager(QObject):
    """Load, validate and persist user settings for review sessions."""

    settingsChanged = Signal(str, object)

    def __init__(self, path: Path | None = None) -> None:
        super().__init__()
        self._path = path
        self._data: dict[str, Any] = deepcopy(DEFAULT_SETTINGS)

    @property
    def path(self) -> Path:
        return self._path or default_settings_path()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def load(self) -> None:
        """Load the settings JSON from disk, creating defaults if missing."""

        path = self.path
        self._path = path
        if path.exists():
            try:
                payload = read_json(path)
            except (OSError, ValueError) as exc:
                raise SettingsLoadError(str(exc)) from exc
            if not isinstance(payload, dict):
                raise SettingsLoadError(f"{path} does not contain a JSON object")
        else:
            payload = None
        try:
            self._data = merge_with_defaults(payload)
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc
        self._write()

    @Slot(str, result="QVariant")
    @Slot(str, "QVariant", result="QVariant")
    def get(self, key: str, default: Any | None = None) -> Any:
        """Return the value for *key*, supporting dotted access for nested keys."""

        target = self._data
        parts = key.split(".")
        for index, part in enumerate(parts):
            if not isinstance(target, dict) or part not in target:
                return default
            value = target[part]
            if index == len(parts) - 1:
                return value
            target = value
        return default

    @Slot(str, "QVariant")
    def set(self, key: str, value: Any) -> None:
        """Update *key* with *value* and persist the change.

        The previous state is kept when the new value fails validation.
        """

        if isinstance(value, Path):
            value = str(value)

        candidate = deepcopy(self._data)
        parts = key.split(".")
        target: dict[str, Any] = candidate
        for part in parts[:-1]:
            branch = target.get(part)
            if not isinstance(branch, dict):
                branch = {}
                target[part] = branch
            target = branch
        target[parts[-1]] = value
        try:
            self._data = merge_with_defaults(candidate)
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc
        self._write()
        self.settingsChanged.emit(key, value)

    def seen_store_path(self) -> Path:
        """Location of the persisted seen-set, next to the settings by default."""

        configured = self.get("seen_store_path")
        if configured:
            return Path(configured).expanduser()
        return self.path.parent / SEEN_STORE_FILE_NAME

    # ------------------------------------------------------------------
    # Internal utilities
    # ------------------------------------------------------------------
    def _write(self) -> None:
        path = self.path
        self._path = path
        write_json(path, self._data)


__all__ = ["SettingsManager", "default_config_dir", "default_settings_path"]
