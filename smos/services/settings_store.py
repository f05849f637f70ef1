from __future__ import annotations

import logging
from pathlib import Path
from typing import TypeVar, Union

from PySide6.QtCore import QSettings

from smos.core.errors import ErrorCode

DEFAULT_SECTION = "program"
LOGFILE_KEY = "logfile"
DEFAULT_LOGFILE_NAME = "smos.log"

Scalar = Union[str, int, bool]
T = TypeVar("T", str, int, bool)

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


def normalize_key(section: str, key: str) -> str:
    """Return ``SECTION/key`` with path separators stripped from both halves."""
    clean_section = section.replace("/", "").replace("\\", "").upper()
    clean_key = key.replace("/", "").replace("\\", "").lower()
    return f"{clean_section}/{clean_key}"


class SettingsStore:
    """Application preferences kept in an INI file.

    Loading and saving are explicit; nothing is written until ``save`` or
    ``sync`` is called. Construct one store per settings file and pass it to
    the components that need it.
    """

    def __init__(self, settings_file: Path | str) -> None:
        self.settings_file = Path(settings_file)
        self._settings = QSettings(str(self.settings_file), QSettings.Format.IniFormat)
        self._logfile_name = DEFAULT_LOGFILE_NAME
        self._logger = logging.getLogger(__name__)

    @property
    def logfile_name(self) -> str:
        return self._logfile_name

    @logfile_name.setter
    def logfile_name(self, name: str) -> None:
        if not isinstance(name, str):
            raise TypeError(f"logfile_name expects str, got {type(name).__name__}")
        self._logfile_name = name

    def load(self) -> None:
        self._logfile_name = self.get(DEFAULT_SECTION, LOGFILE_KEY, DEFAULT_LOGFILE_NAME)

    def save(self) -> ErrorCode:
        self.set(DEFAULT_SECTION, LOGFILE_KEY, self._logfile_name)
        return self.sync()

    def sync(self) -> ErrorCode:
        self._settings.sync()
        status = self._settings.status()
        if status != QSettings.Status.NoError:
            self._logger.error(
                "Settings file could not be written",
                extra={"operation": "sync_settings", "path": str(self.settings_file), "status": str(status)},
            )
            return ErrorCode.FILE_WRITE_ERROR
        return ErrorCode.SUCCESS

    def get(self, section: str, key: str, default: T) -> T:
        """Return the stored value converted to the type of ``default``.

        Missing keys and values that cannot be converted yield ``default``.
        """
        kind = _scalar_type(default)
        map_key = normalize_key(section, key)
        if not self._settings.contains(map_key):
            return default
        raw = self._settings.value(map_key)
        try:
            return _coerce(raw, kind)
        except (TypeError, ValueError):
            self._logger.warning(
                "Ignoring unreadable setting",
                extra={"operation": "get_setting", "key": map_key, "expected": kind.__name__},
            )
            return default

    def set(self, section: str, key: str, value: Scalar) -> None:
        _scalar_type(value)
        self._settings.setValue(normalize_key(section, key), value)

    def contains(self, section: str, key: str) -> bool:
        return self._settings.contains(normalize_key(section, key))

    def remove(self, section: str, key: str) -> None:
        self._settings.remove(normalize_key(section, key))


def _scalar_type(value: object) -> type:
    # bool first: it is a subclass of int.
    for kind in (bool, int, str):
        if isinstance(value, kind):
            return kind
    raise TypeError(f"Unsupported setting type: {type(value).__name__}")


def _coerce(raw: object, kind: type) -> Scalar:
    if raw is None:
        raise ValueError("Setting has no value")
    if kind is bool:
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise ValueError(f"Not a boolean: {raw!r}")
    if kind is int:
        if isinstance(raw, bool):
            return int(raw)
        if isinstance(raw, int):
            return raw
        return int(str(raw).strip())
    if isinstance(raw, (list, tuple)):
        # QSettings splits unquoted comma separated INI values into a list.
        return ", ".join(str(part) for part in raw)
    return str(raw)


__all__ = [
    "SettingsStore",
    "normalize_key",
    "DEFAULT_SECTION",
    "LOGFILE_KEY",
    "DEFAULT_LOGFILE_NAME",
]
