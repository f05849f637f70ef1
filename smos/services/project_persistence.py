"""Load and save project descriptors to versioned project files.

``load_project`` and ``save_project`` are the only persistence entry points
for the application shell. Neither raises for I/O or format problems; both
report the outcome as an :class:`ErrorCode`.
"""
from __future__ import annotations

import io
import logging
import os
import stat
import tempfile
from pathlib import Path

from smos.core.errors import ErrorCode, ProjectFormatError
from smos.core.project import CURRENT_CLASS_VERSION, ProjectDescriptor
from smos.storage.project_stream import ProjectReader, ProjectWriter

PROJECT_FILE_SUFFIX = ".smp"

_logger = logging.getLogger(__name__)


def load_project(
    path: Path | str,
    project: ProjectDescriptor | None = None,
) -> tuple[ProjectDescriptor | None, ErrorCode]:
    """Read ``path`` into a descriptor.

    When ``project`` is given it receives the loaded state on success and is
    left untouched on failure. The returned descriptor is ``project`` itself
    (or a new instance), or ``None`` when loading failed without a target.
    """
    target = Path(path)
    context = _operation_context("load_project", target)
    if not target.exists():
        _logger.warning("Project file missing", extra=context)
        return project, ErrorCode.FILE_NOT_FOUND

    try:
        with target.open("rb") as handle:
            payload = handle.read()
    except OSError:
        _logger.error("Project file could not be read", extra=context, exc_info=True)
        return project, ErrorCode.FILE_READ_ERROR

    staged = ProjectDescriptor()
    code = staged.deserialize(ProjectReader(io.BytesIO(payload)))
    if not code.ok:
        _logger.error("Project load failed", extra={**context, "code": code.value})
        return project, code

    staged.bind_file(target)
    if project is None:
        project = staged
    else:
        project.assign_from(staged)
    _logger.info("Project loaded", extra={**context, "class_version": project.class_version})
    return project, ErrorCode.SUCCESS


def save_project(
    path: Path | str | None,
    project: ProjectDescriptor,
    force: bool = False,
) -> ErrorCode:
    """Write ``project`` to ``path`` in the current format.

    Without ``force`` an existing file is never overwritten. ``path=None``
    saves back to the file the descriptor is bound to. On success the
    descriptor is bound to the written file.
    """
    if path is None:
        bound = project.project_file_path
        if bound is None:
            _logger.error("No target file for unbound project", extra={"operation": "save_project"})
            return ErrorCode.FILE_WRITE_ERROR
        target, force = bound, True
    else:
        target = Path(path)

    context = _operation_context("save_project", target, force=force)
    if target.exists() and not force:
        _logger.warning("Refusing to overwrite existing project file", extra=context)
        return ErrorCode.FILE_ALREADY_EXISTS

    buffer = io.BytesIO()
    try:
        project.serialize(ProjectWriter(buffer))
    except ProjectFormatError as exc:
        _logger.error("Project cannot be encoded", extra={**context, "reason": str(exc)})
        return ErrorCode.FORMAT_ERROR

    try:
        _replace_file(target, buffer.getvalue())
    except OSError:
        _logger.error("Project file could not be written", extra=context, exc_info=True)
        return ErrorCode.FILE_WRITE_ERROR

    project.mark_current_version()
    project.bind_file(target)
    _logger.info("Project saved", extra={**context, "class_version": CURRENT_CLASS_VERSION})
    return ErrorCode.SUCCESS


def _replace_file(target: Path, payload: bytes) -> None:
    mode = _target_mode(target)
    fd, temp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(temp_path, mode)
        os.replace(temp_path, target)
    except OSError:
        _safe_unlink(temp_path)
        raise


def _target_mode(target: Path) -> int:
    """Permissions for the written file: keep an existing file's, else honour the umask."""
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _safe_unlink(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError:
        _logger.warning(
            "Failed to remove temporary project file",
            extra={"operation": "cleanup", "path": str(path)},
            exc_info=True,
        )


def _operation_context(operation: str, path: Path, **extra: object) -> dict[str, object]:
    context: dict[str, object] = {"operation": operation, "path": str(path)}
    context.update(extra)
    return context


__all__ = ["load_project", "save_project", "PROJECT_FILE_SUFFIX"]
