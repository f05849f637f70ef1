from __future__ import annotations

from pathlib import Path
from typing import List

from smos.lib.paths import normalize_project_path
from smos.services.settings_store import SettingsStore

RECENT_SECTION = "recent"
COUNT_KEY = "count"
DEFAULT_LIMIT = 10


class RecentProjects:
    """Most recently used project files, newest first.

    Stored in the ``[RECENT]`` section of the application settings as
    ``count`` plus ``file0`` .. ``fileN``. Changes are not flushed; the owner
    of the store decides when to ``sync``.
    """

    def __init__(self, store: SettingsStore, *, limit: int = DEFAULT_LIMIT) -> None:
        self._store = store
        self._limit = limit

    def paths(self) -> List[Path]:
        count = min(max(self._store.get(RECENT_SECTION, COUNT_KEY, 0), 0), self._limit)
        entries: List[Path] = []
        for index in range(count):
            value = self._store.get(RECENT_SECTION, _file_key(index), "")
            if value:
                entries.append(Path(value))
        return entries

    def push(self, path: Path) -> List[Path]:
        key = normalize_project_path(path)
        others = [entry for entry in self.paths() if normalize_project_path(entry) != key]
        updated = [Path(path), *others][: self._limit]
        self._write(updated)
        return updated

    def remove(self, path: Path) -> List[Path]:
        key = normalize_project_path(path)
        remaining = [entry for entry in self.paths() if normalize_project_path(entry) != key]
        self._write(remaining)
        return remaining

    def clear(self) -> None:
        self._write([])

    def _write(self, entries: List[Path]) -> None:
        previous = self._store.get(RECENT_SECTION, COUNT_KEY, 0)
        for index, entry in enumerate(entries):
            self._store.set(RECENT_SECTION, _file_key(index), str(entry))
        for index in range(len(entries), min(max(previous, 0), self._limit)):
            self._store.remove(RECENT_SECTION, _file_key(index))
        self._store.set(RECENT_SECTION, COUNT_KEY, len(entries))


def _file_key(index: int) -> str:
    return f"file{index}"


__all__ = ["RecentProjects", "RECENT_SECTION", "DEFAULT_LIMIT"]
