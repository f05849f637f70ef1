from __future__ import annotations

import logging
from enum import IntEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from smos.core.errors import ErrorCode, ProjectFormatError

if TYPE_CHECKING:
    from smos.storage.project_stream import ProjectReader, ProjectWriter

# Format version in which each field first appeared on disk.
VERSION_BASELINE = 1
VERSION_HEADER_FOOTER = 2
VERSION_MODIFIED_COMPLEXITY = 3
VERSION_XML_FILE_LIST = 4

CURRENT_CLASS_VERSION = VERSION_XML_FILE_LIST

_I32_MIN = -(1 << 31)
_I32_MAX = (1 << 31) - 1

_logger = logging.getLogger(__name__)


class SubdirectoryMode(IntEnum):
    NOT_USED = 0
    FLAT_ONLY = 1
    RECURSIVE = 2


class ProjectDescriptor:
    """Configuration of one analysis project.

    Pure data: the only I/O-related members are ``serialize`` and
    ``deserialize``, which own the on-disk field order. The backing file
    location is transient and is bound by the persistence layer after a
    successful load or save.
    """

    __slots__ = (
        "_class_version",
        "_include_subdirectories",
        "_option_flags",
        "_project_file_directory",
        "_project_file_name",
        "_project_name",
        "_source_path",
        "_ignore_header_footer",
        "_ignore_blank_lines",
        "_use_modified_complexity",
        "_is_file_list_from_xml_file",
    )

    def __init__(self) -> None:
        self._class_version: int = CURRENT_CLASS_VERSION
        self._include_subdirectories = SubdirectoryMode.NOT_USED
        self._option_flags = 0
        self._project_file_directory = ""
        self._project_file_name = ""
        self._project_name = ""
        self._source_path = ""
        self._ignore_header_footer = False
        self._ignore_blank_lines = False
        self._use_modified_complexity = False
        self._is_file_list_from_xml_file = False

    # Accessors -------------------------------------------------------
    @property
    def class_version(self) -> int:
        return self._class_version

    @property
    def include_subdirectories(self) -> SubdirectoryMode:
        return self._include_subdirectories

    @include_subdirectories.setter
    def include_subdirectories(self, mode: SubdirectoryMode | int) -> None:
        if isinstance(mode, bool) or not isinstance(mode, int):
            raise TypeError(f"include_subdirectories expects SubdirectoryMode, got {type(mode).__name__}")
        self._include_subdirectories = SubdirectoryMode(mode)

    @property
    def option_flags(self) -> int:
        """Opaque bitmask consumed by the analysis engine."""
        return self._option_flags

    @option_flags.setter
    def option_flags(self, flags: int) -> None:
        if isinstance(flags, bool) or not isinstance(flags, int):
            raise TypeError(f"option_flags expects int, got {type(flags).__name__}")
        if not _I32_MIN <= flags <= _I32_MAX:
            raise ValueError(f"option_flags {flags:#x} does not fit in 32 bits")
        self._option_flags = flags

    @property
    def project_file_directory(self) -> str:
        return self._project_file_directory

    @property
    def project_file_name(self) -> str:
        return self._project_file_name

    @property
    def project_file_path(self) -> Path | None:
        if not self._project_file_name:
            return None
        return Path(self._project_file_directory) / self._project_file_name

    @property
    def project_name(self) -> str:
        return self._project_name

    @project_name.setter
    def project_name(self, name: str) -> None:
        self._project_name = _require_str("project_name", name)

    @property
    def source_path(self) -> str:
        return self._source_path

    @source_path.setter
    def source_path(self, directory: str) -> None:
        self._source_path = _require_str("source_path", directory)

    @property
    def ignore_header_footer(self) -> bool:
        return self._ignore_header_footer

    @ignore_header_footer.setter
    def ignore_header_footer(self, ignore: bool) -> None:
        self._ignore_header_footer = _require_bool("ignore_header_footer", ignore)

    @property
    def ignore_blank_lines(self) -> bool:
        return self._ignore_blank_lines

    @ignore_blank_lines.setter
    def ignore_blank_lines(self, ignore: bool) -> None:
        self._ignore_blank_lines = _require_bool("ignore_blank_lines", ignore)

    @property
    def use_modified_complexity(self) -> bool:
        return self._use_modified_complexity

    @use_modified_complexity.setter
    def use_modified_complexity(self, enabled: bool) -> None:
        self._use_modified_complexity = _require_bool("use_modified_complexity", enabled)

    @property
    def is_file_list_from_xml_file(self) -> bool:
        return self._is_file_list_from_xml_file

    @is_file_list_from_xml_file.setter
    def is_file_list_from_xml_file(self, enabled: bool) -> None:
        self._is_file_list_from_xml_file = _require_bool("is_file_list_from_xml_file", enabled)

    # Whole-state helpers ---------------------------------------------
    def persisted_fields(self) -> dict[str, Any]:
        """Every field that survives a save/load round trip."""
        return {
            "class_version": self._class_version,
            "project_name": self._project_name,
            "source_path": self._source_path,
            "include_subdirectories": self._include_subdirectories,
            "option_flags": self._option_flags,
            "ignore_header_footer": self._ignore_header_footer,
            "ignore_blank_lines": self._ignore_blank_lines,
            "use_modified_complexity": self._use_modified_complexity,
            "is_file_list_from_xml_file": self._is_file_list_from_xml_file,
        }

    def assign_from(self, other: ProjectDescriptor) -> None:
        for slot in self.__slots__:
            setattr(self, slot, getattr(other, slot))

    def copy(self) -> ProjectDescriptor:
        clone = ProjectDescriptor()
        clone.assign_from(self)
        return clone

    def bind_file(self, path: Path | str) -> None:
        """Record the backing file after a successful load or save."""
        target = Path(path).expanduser().absolute()
        self._project_file_directory = str(target.parent)
        self._project_file_name = target.name

    def mark_current_version(self) -> None:
        self._class_version = CURRENT_CLASS_VERSION

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProjectDescriptor):
            return NotImplemented
        return all(getattr(self, slot) == getattr(other, slot) for slot in self.__slots__)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={value!r}" for key, value in self.persisted_fields().items())
        return f"ProjectDescriptor({fields}, project_file_path={self.project_file_path!r})"

    # Serialization ---------------------------------------------------
    def serialize(self, writer: ProjectWriter) -> None:
        """Write the current format version followed by every persisted field."""
        writer.write_u16(CURRENT_CLASS_VERSION)
        writer.write_str(self._project_name)
        writer.write_str(self._source_path)
        writer.write_u8(int(self._include_subdirectories))
        writer.write_i32(self._option_flags)
        writer.write_i32(1 if self._ignore_header_footer else 0)
        writer.write_bool(self._ignore_blank_lines)
        writer.write_bool(self._use_modified_complexity)
        writer.write_bool(self._is_file_list_from_xml_file)

    def deserialize(self, reader: ProjectReader) -> ErrorCode:
        """Populate ``self`` from ``reader``; ``self`` is unchanged unless SUCCESS is returned."""
        staged = ProjectDescriptor()
        try:
            version = reader.read_u16()
            if version == 0:
                raise ProjectFormatError("Class version 0 is not a valid format version")
            if version > CURRENT_CLASS_VERSION:
                _logger.warning(
                    "Project file version is newer than supported",
                    extra={"stored_version": version, "supported_version": CURRENT_CLASS_VERSION},
                )
                return ErrorCode.VERSION_MISMATCH

            staged._class_version = version
            staged._project_name = reader.read_str()
            staged._source_path = reader.read_str()
            staged._include_subdirectories = _read_mode(reader)
            staged._option_flags = reader.read_i32()
            if version >= VERSION_HEADER_FOOTER:
                # Legacy int-typed flag: any non-zero value means enabled.
                staged._ignore_header_footer = reader.read_i32() != 0
                staged._ignore_blank_lines = reader.read_bool()
            if version >= VERSION_MODIFIED_COMPLEXITY:
                staged._use_modified_complexity = reader.read_bool()
            if version >= VERSION_XML_FILE_LIST:
                staged._is_file_list_from_xml_file = reader.read_bool()
            reader.expect_end()
        except ProjectFormatError as exc:
            _logger.warning("Malformed project data", extra={"reason": str(exc)})
            return ErrorCode.FORMAT_ERROR

        staged._project_file_directory = self._project_file_directory
        staged._project_file_name = self._project_file_name
        self.assign_from(staged)
        return ErrorCode.SUCCESS


def _read_mode(reader: ProjectReader) -> SubdirectoryMode:
    raw = reader.read_u8()
    try:
        return SubdirectoryMode(raw)
    except ValueError as exc:
        raise ProjectFormatError(f"Unknown subdirectory mode: {raw}") from exc


def _require_str(name: str, value: object) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{name} expects str, got {type(value).__name__}")
    return value


def _require_bool(name: str, value: object) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"{name} expects bool, got {type(value).__name__}")
    return value


__all__ = [
    "CURRENT_CLASS_VERSION",
    "VERSION_BASELINE",
    "VERSION_HEADER_FOOTER",
    "VERSION_MODIFIED_COMPLEXITY",
    "VERSION_XML_FILE_LIST",
    "ProjectDescriptor",
    "SubdirectoryMode",
]
