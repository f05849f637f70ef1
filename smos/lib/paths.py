"""User-scope locations for SMOS application files.

- Resolves the per-user application data directory
- Provides the canonical path of the settings file
"""
from __future__ import annotations

import os
from pathlib import Path


_APP_DIR_NAME = "SMOS"
_XDG_APP_DIR_NAME = "smos"
_SETTINGS_FILENAME = "smos.ini"


def get_user_app_data_dir() -> Path:
    """Return the user-scope application data directory.

    Prefers %APPDATA% (Windows), then $XDG_CONFIG_HOME, then ~/.config.
    """
    appdata = os.getenv("APPDATA")
    if appdata:
        return Path(appdata) / _APP_DIR_NAME
    xdg = os.getenv("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / _XDG_APP_DIR_NAME


def ensure_user_app_data_dir() -> Path:
    """Ensure the user app data directory exists and return it."""
    p = get_user_app_data_dir()
    p.mkdir(parents=True, exist_ok=True)
    return p


def settings_path() -> Path:
    """Return the full path to the application settings INI file."""
    return ensure_user_app_data_dir() / _SETTINGS_FILENAME


def resolve_in_app_dir(p: str | os.PathLike[str]) -> Path:
    """Anchor a relative path (e.g. a bare log file name) in the app data dir."""
    candidate = Path(p).expanduser()
    if candidate.is_absolute():
        return candidate
    return ensure_user_app_data_dir() / candidate


def normalize_project_path(p: str | os.PathLike[str]) -> str:
    """Normalize a project path for comparisons.

    - Expands user (~)
    - Makes absolute (without requiring the path to exist)
    - Normalizes case on case-insensitive platforms (via os.path.normcase)
    """
    abs_path = Path(p).expanduser().resolve(strict=False)
    return os.path.normcase(str(abs_path))
