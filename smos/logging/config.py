from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from smos.lib.paths import resolve_in_app_dir
from smos.services.settings_store import SettingsStore

CONSOLE_HANDLER_NAME = "smos.console"
FILE_HANDLER_PREFIX = "smos.file:"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}
# Context keys every persistence operation logs, promoted to top-level fields.
_PROMOTED_KEYS = ("operation", "path")


class ProjectLogFormatter(logging.Formatter):
    """One JSON object per line: operation and path up front, other extras under ``context``."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        for key in _PROMOTED_KEYS:
            if key in extras:
                payload[key] = extras.pop(key)
        if extras:
            payload["context"] = extras
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def configure_logging(
    logfile: Optional[Path] = None,
    *,
    level: int = logging.INFO,
) -> logging.Logger:
    """Install console and (optionally) file handlers on the root logger.

    Safe to call repeatedly: handlers are recognised by name and added once.
    """
    root = logging.getLogger()
    root.setLevel(level)
    installed = {handler.get_name() for handler in root.handlers}

    if CONSOLE_HANDLER_NAME not in installed:
        _install(root, logging.StreamHandler(), CONSOLE_HANDLER_NAME)

    if logfile is not None:
        name = FILE_HANDLER_PREFIX + os.path.abspath(logfile)
        if name not in installed:
            try:
                logfile.parent.mkdir(parents=True, exist_ok=True)
                handler = logging.FileHandler(logfile, encoding="utf-8")
            except OSError:
                logging.getLogger(__name__).warning(
                    "Log file unavailable", extra={"operation": "configure_logging", "path": str(logfile)}, exc_info=True
                )
            else:
                _install(root, handler, name)

    return root


def configure_from_settings(store: SettingsStore, *, level: int = logging.INFO) -> logging.Logger:
    """Load ``store`` and log to its configured file (relative names land in the app dir)."""
    store.load()
    return configure_logging(resolve_in_app_dir(store.logfile_name), level=level)


def _install(root: logging.Logger, handler: logging.Handler, name: str) -> None:
    handler.set_name(name)
    handler.setFormatter(ProjectLogFormatter())
    root.addHandler(handler)


__all__ = ["ProjectLogFormatter", "configure_logging", "configure_from_settings"]
