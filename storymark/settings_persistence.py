"""Settings persistence for application preferences.

Settings are stored as JSON in an OS-appropriate config directory and
survive application restarts. The API key is never stored here; it is read
from the environment.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .constants import EditorConstants

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: Dict[str, Any] = {
    "completion_model": EditorConstants.DEFAULT_COMPLETION_MODEL,
    "system_prompt": EditorConstants.DEFAULT_SYSTEM_PROMPT,
    "welcome_on_new": True,
    "last_document": None,
}


class SettingsPersistence:
    """Manages persistent storage of application settings.

    Stored values override ``DEFAULT_SETTINGS``; invalid stored values are
    ignored with a warning.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        self._config_dir = config_dir or Path(platformdirs.user_config_dir("storymark"))
        self._settings_file = self._config_dir / "settings.json"
        self._settings_cache: Optional[Dict[str, Any]] = None

    @property
    def settings_file(self) -> Path:
        return self._settings_file

    def _ensure_config_dir(self) -> None:
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
        except (OSError, PermissionError) as e:
            logger.warning(f"Could not create config directory {self._config_dir}: {e}")

    def _load_stored(self) -> Dict[str, Any]:
        """Load stored settings from disk.

        Returns:
            The stored settings, or an empty dict if the file doesn't exist
            or can't be read.
        """
        if self._settings_cache is not None:
            return self._settings_cache

        if not self._settings_file.exists():
            self._settings_cache = {}
            return self._settings_cache

        try:
            with open(self._settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load settings from {self._settings_file}: {e}")
            self._settings_cache = {}
            return self._settings_cache

        if not isinstance(data, dict):
            logger.warning("Settings file has invalid format (not a dict), ignoring")
            data = {}
        self._settings_cache = data
        return self._settings_cache

    def _save_stored(self, settings: Dict[str, Any]) -> bool:
        """Write settings to disk atomically (temp file + rename)."""
        self._ensure_config_dir()
        temp_file = self._settings_file.with_suffix(EditorConstants.ATOMIC_SAVE_SUFFIX)

        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(settings, f, indent=EditorConstants.JSON_INDENT, sort_keys=True)
            temp_file.replace(self._settings_file)
            self._settings_cache = settings
            return True
        except OSError as e:
            logger.warning(f"Could not save settings to {self._settings_file}: {e}")
            try:
                if temp_file.exists():
                    temp_file.unlink()
            except OSError:
                pass
            return False

    def load_settings(self) -> Dict[str, Any]:
        """Return defaults overlaid with every valid stored setting."""
        settings = dict(DEFAULT_SETTINGS)
        for key, value in self._load_stored().items():
            if self.validate_setting(key, value):
                settings[key] = value
            else:
                logger.warning(f"Ignoring invalid setting {key}={value!r}")
        return settings

    def get(self, key: str) -> Any:
        return self.load_settings().get(key)

    def save_settings(self, settings: Dict[str, Any]) -> bool:
        """Merge ``settings`` into the stored settings and write them.

        Returns:
            True if save was successful, False otherwise (including when a
            value fails validation).
        """
        for key, value in settings.items():
            if not self.validate_setting(key, value):
                logger.warning(f"Refusing to save invalid setting {key}={value!r}")
                return False
        stored = dict(self._load_stored())
        stored.update(settings)
        return self._save_stored(stored)

    def validate_setting(self, key: str, value: Any) -> bool:
        """Validate a setting value.

        Args:
            key: Setting key name.
            value: Setting value to validate.

        Returns:
            True if setting is valid, False otherwise.
        """
        if key in ('completion_model', 'system_prompt'):
            return isinstance(value, str) and bool(value.strip())

        if key == 'welcome_on_new':
            return isinstance(value, bool)

        if key == 'last_document':
            return value is None or isinstance(value, str)

        # Unknown settings are considered valid (forward compatibility)
        return True

    def clear_cache(self) -> None:
        """Clear the in-memory cache of settings."""
        self._settings_cache = None


_persistence: Optional[SettingsPersistence] = None


def get_persistence() -> SettingsPersistence:
    """Get the shared settings persistence instance used by the CLI."""
    global _persistence
    if _persistence is None:
        _persistence = SettingsPersistence()
    return _persistence
