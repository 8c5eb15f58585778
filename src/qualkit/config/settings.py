"""
Application settings and configuration.

Settings are stored as JSON in a platform-specific location:

- Windows: %APPDATA%/LocalLow/qualkit/settings.json
- macOS: ~/Library/Application Support/qualkit/settings.json
- Linux: ~/.config/qualkit/settings.json

Example:
    from qualkit.config.settings import get_settings, get_settings_manager

    settings = get_settings()
    print(settings.theme)

    # Update settings (auto-saves)
    manager = get_settings_manager()
    manager.update(theme="light", default_coder="ana")
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Optional

from ..infrastructure.paths import get_log_file_path, get_persistent_data_directory


@dataclass
class AppSettings:
    """Application-wide settings."""

    # Logging settings
    log_level: int = logging.INFO
    log_to_file: bool = True
    log_file_path: Optional[Path] = None
    """Log file location; None means the persistent data directory."""

    # UI settings
    theme: str = "dark"

    # Coding settings
    default_coder: str = ""
    """Name recorded on applied codes when the caller gives none."""

    # Recent projects
    recent_projects: list[str] = field(default_factory=list)
    max_recent_items: int = 10

    def resolved_log_file(self) -> Path:
        return self.log_file_path or get_log_file_path()


class SettingsManager:
    """
    Manages loading and saving application settings.

    Satisfies the ``ConfigStore`` protocol.
    """

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize the settings manager.

        Args:
            config_file: Path to configuration file. If None, uses default location.
        """
        if config_file is None:
            config_file = get_persistent_data_directory() / "settings.json"

        self.config_file = Path(config_file)
        self._settings = AppSettings()
        self._logger = logging.getLogger(__name__)

    def config_exists(self) -> bool:
        return self.config_file.exists()

    def load(self) -> AppSettings:
        """
        Load settings from the configuration file.

        A missing or unreadable file leaves the defaults in place, so the
        application can always start.

        Returns:
            The loaded settings object.
        """
        if not self.config_exists():
            self._logger.info(f"Settings file not found at {self.config_file}, using defaults")
            return self._settings

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            self._logger.error(f"Failed to parse settings file: {e}. Using defaults.")
            return self._settings
        except OSError as e:
            self._logger.error(f"Failed to read settings file: {e}. Using defaults.")
            return self._settings

        if not isinstance(data, dict):
            self._logger.error(f"Settings file {self.config_file} does not hold an object. Using defaults.")
            return self._settings

        if data.get('log_file_path'):
            data['log_file_path'] = Path(data['log_file_path'])

        known = {f.name for f in fields(AppSettings)}
        for key, value in data.items():
            if key in known:
                setattr(self._settings, key, value)
            else:
                self._logger.warning(f"Ignoring unknown setting in file: {key}")

        self._logger.info(f"Settings loaded from {self.config_file}")
        return self._settings

    def save(self, settings: Optional[AppSettings] = None) -> None:
        """
        Save settings to the configuration file.

        Args:
            settings: Settings object to save. If None, saves current settings.

        Raises:
            OSError: If the file cannot be written.
        """
        if settings is not None:
            self._settings = settings

        data = asdict(self._settings)
        if data.get('log_file_path'):
            data['log_file_path'] = Path(data['log_file_path']).as_posix()

        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)

            # Atomic write: write to temp file, then rename
            temp_file = self.config_file.with_suffix('.tmp')
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_file.replace(self.config_file)
        except OSError as e:
            self._logger.error(f"Failed to save settings: {e}")
            raise

        self._logger.info(f"Settings saved to {self.config_file}")

    # ConfigStore names
    load_config = load
    save_config = save

    def get(self) -> AppSettings:
        return self._settings

    def update(self, **kwargs) -> None:
        """
        Update specific settings and auto-save.

        Args:
            **kwargs: Setting names and values to update.
        """
        for key, value in kwargs.items():
            if hasattr(self._settings, key):
                setattr(self._settings, key, value)
            else:
                self._logger.warning(f"Ignoring unknown setting: {key}")

        self.save()

    def add_recent_project(self, path: str) -> None:
        """
        Put a project path at the front of the recent projects list.

        Args:
            path: Path to the project file.
        """
        normalized_path = Path(path).as_posix()

        if normalized_path in self._settings.recent_projects:
            self._settings.recent_projects.remove(normalized_path)
        self._settings.recent_projects.insert(0, normalized_path)

        del self._settings.recent_projects[self._settings.max_recent_items:]

        self.save()

    def reset_to_defaults(self) -> None:
        """Reset all settings to their default values and save."""
        self._settings = AppSettings()
        self.save()


# Global settings instance
_settings_manager: Optional[SettingsManager] = None


def get_settings_manager() -> SettingsManager:
    """
    Get the global settings manager instance.

    Returns:
        The global SettingsManager.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
        _settings_manager.load()
    return _settings_manager


def get_settings() -> AppSettings:
    return get_settings_manager().get()
