"""
Path utilities.

Locations of the application's persistent data (settings, logs) and small
helpers used when writing project files.
"""

import platform
from pathlib import Path

APP_NAME = "qualkit"

PROJECT_FILE_SUFFIX = ".qual.json"


def get_persistent_data_directory() -> Path:
    """
    Get the persistent data directory for the application (cross-platform).

    Returns:
        Path to the persistent data directory, created if missing.

    Platform-specific locations:
        - Windows: %APPDATA%/LocalLow/qualkit
        - macOS: ~/Library/Application Support/qualkit
        - Linux: ~/.config/qualkit
    """
    system = platform.system()

    if system == "Windows":
        base = Path.home() / "AppData" / "LocalLow"
    elif system == "Darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path.home() / ".config"

    data_dir = base / APP_NAME
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_log_file_path() -> Path:
    return get_persistent_data_directory() / "log.txt"


def get_old_log_file_path() -> Path:
    return get_persistent_data_directory() / "log.old.txt"


def ensure_directory(path: Path) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Path to the directory.

    Returns:
        The path (for chaining).

    Raises:
        OSError: If the directory cannot be created.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def normalize_project_path(path: Path) -> Path:
    """
    Give a project path the project file suffix if it has no suffix at all.

    Args:
        path: Path supplied by the user.

    Returns:
        The path to read or write.
    """
    path = Path(path)
    if not path.suffix:
        return path.with_name(path.name + PROJECT_FILE_SUFFIX)
    return path
