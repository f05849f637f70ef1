from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Result of a persistence operation."""

    SUCCESS = "success"
    FILE_NOT_FOUND = "file_not_found"
    FILE_ALREADY_EXISTS = "file_already_exists"
    FILE_READ_ERROR = "file_read_error"
    FILE_WRITE_ERROR = "file_write_error"
    FORMAT_ERROR = "format_error"
    VERSION_MISMATCH = "version_mismatch"

    @property
    def ok(self) -> bool:
        return self is ErrorCode.SUCCESS


class ProjectFormatError(Exception):
    """Raised by the project file reader when the byte stream is malformed."""


class UserFacingError(Exception):
    """Base exception carrying user-presentable context."""

    def __init__(
        self,
        message: str,
        *,
        title: str,
        remediation: str | None = None,
        code: ErrorCode | None = None,
    ) -> None:
        super().__init__(message)
        self.title = title
        self.remediation = remediation or ""
        self.code = code


class ProjectCreationError(UserFacingError):
    pass


class ProjectOpenError(UserFacingError):
    pass


class ProjectSaveError(UserFacingError):
    pass


__all__ = [
    "ErrorCode",
    "ProjectFormatError",
    "UserFacingError",
    "ProjectCreationError",
    "ProjectOpenError",
    "ProjectSaveError",
]
