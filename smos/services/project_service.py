from __future__ import annotations

import logging
import threading
from pathlib import Path

from smos.core.errors import (
    ErrorCode,
    ProjectCreationError,
    ProjectOpenError,
    ProjectSaveError,
    UserFacingError,
)
from smos.core.project import CURRENT_CLASS_VERSION, ProjectDescriptor, SubdirectoryMode
from smos.services.project_persistence import load_project, save_project
from smos.services.recent_projects import RecentProjects
from smos.services.settings_store import SettingsStore

# (title, remediation) per failure code, used for every workflow.
_ERROR_TEXT: dict[ErrorCode, tuple[str, str]] = {
    ErrorCode.FILE_NOT_FOUND: (
        "Project Not Found",
        "Select an existing project file or create a new project.",
    ),
    ErrorCode.FILE_ALREADY_EXISTS: (
        "File Already Exists",
        "Choose a new file name or confirm overwriting the existing file.",
    ),
    ErrorCode.FILE_READ_ERROR: (
        "Project Read Failed",
        "Check that the file is readable and not locked by another process.",
    ),
    ErrorCode.FILE_WRITE_ERROR: (
        "Project Save Failed",
        "Verify you have write access to the chosen folder and retry.",
    ),
    ErrorCode.FORMAT_ERROR: (
        "Invalid Project",
        "The project file is damaged; restore it from a backup or recreate it.",
    ),
    ErrorCode.VERSION_MISMATCH: (
        "Unsupported Project Version",
        "The project was written by a newer release. Update the application to open it.",
    ),
}

# Writing fails with FORMAT_ERROR only when a field cannot be encoded.
_UNENCODABLE_TEXT = (
    "Invalid Project Settings",
    "The project name or source path cannot be stored. Shorten it or remove unsupported characters.",
)


class ProjectService:
    """Coordinates opening, creating and saving the active project."""

    def __init__(self, *, settings: SettingsStore) -> None:
        self._settings = settings
        self._recent = RecentProjects(settings)
        self._lock = threading.RLock()
        self._logger = logging.getLogger(__name__)
        self._project: ProjectDescriptor | None = None

    @property
    def project(self) -> ProjectDescriptor | None:
        return self._project

    @property
    def recent_projects(self) -> list[Path]:
        return self._recent.paths()

    def open_project(self, path: Path) -> ProjectDescriptor:
        context = self._operation_context("open_project", path)
        self._logger.info("Opening project", extra=context)
        with self._lock:
            project, code = load_project(path)
            if not code.ok or project is None:
                self._logger.error("Project open failed", extra={**context, "code": code.value})
                raise self._user_error(ProjectOpenError, code, path)
            self._project = project
            self._update_recent_projects(path)
        self._logger.info(
            "Project opened",
            extra={**context, "class_version": project.class_version},
        )
        if project.class_version < CURRENT_CLASS_VERSION:
            self._logger.info(
                "Project will be upgraded on next save",
                extra={**context, "from_version": project.class_version, "target_version": CURRENT_CLASS_VERSION},
            )
        return project

    def create_project(
        self,
        path: Path,
        *,
        project_name: str = "",
        source_path: str = "",
        include_subdirectories: SubdirectoryMode = SubdirectoryMode.NOT_USED,
    ) -> ProjectDescriptor:
        context = self._operation_context("create_project", path)
        self._logger.info("Creating project", extra=context)
        project = ProjectDescriptor()
        try:
            project.project_name = project_name or path.stem
            project.source_path = source_path
            project.include_subdirectories = include_subdirectories
        except (TypeError, ValueError) as exc:
            raise ProjectCreationError(
                f"Invalid project settings: {exc}",
                title="Invalid Project Settings",
                remediation="Correct the project settings and retry.",
            ) from exc
        with self._lock:
            code = save_project(path, project, force=False)
            if not code.ok:
                self._logger.error("Project creation failed", extra={**context, "code": code.value})
                raise self._user_error(ProjectCreationError, code, path)
            self._project = project
            self._update_recent_projects(path)
        self._logger.info("Project created", extra=context)
        return project

    def save_project(self, path: Path | None = None, *, overwrite: bool = False) -> ProjectDescriptor:
        """Save the active project, to its bound file when ``path`` is omitted."""
        with self._lock:
            project = self._project
            if project is None:
                raise ProjectSaveError(
                    "There is no open project to save.",
                    title="No Project",
                    remediation="Open or create a project first.",
                )
            target = path if path is not None else project.project_file_path
            context = self._operation_context("save_project", target or Path(""), overwrite=overwrite)
            self._logger.info("Saving project", extra=context)
            code = save_project(path, project, force=overwrite)
            if not code.ok:
                self._logger.error("Project save failed", extra={**context, "code": code.value})
                raise self._user_error(ProjectSaveError, code, target)
            bound = project.project_file_path
            if bound is not None:
                self._update_recent_projects(bound)
        self._logger.info("Project saved", extra=context)
        return project

    def close_project(self) -> None:
        with self._lock:
            self._project = None

    def _update_recent_projects(self, path: Path) -> None:
        self._recent.push(path)
        if not self._settings.sync().ok:
            self._logger.warning(
                "Failed to update recent projects list",
                extra={"operation": "update_recent", "path": str(self._settings.settings_file)},
            )

    def _user_error(
        self,
        error_type: type[UserFacingError],
        code: ErrorCode,
        path: Path | None,
    ) -> UserFacingError:
        if code is ErrorCode.FORMAT_ERROR and error_type is not ProjectOpenError:
            title, remediation = _UNENCODABLE_TEXT
        else:
            title, remediation = _ERROR_TEXT.get(code, ("Project Error", ""))
        location = str(path) if path is not None else "an unsaved project"
        return error_type(
            f"{title}: {location}.",
            title=title,
            remediation=remediation,
            code=code,
        )

    def _operation_context(self, operation: str, path: Path, **extra: object) -> dict[str, object]:
        context: dict[str, object] = {"operation": operation, "path": str(path)}
        context.update(extra)
        return context


__all__ = ["ProjectService"]
