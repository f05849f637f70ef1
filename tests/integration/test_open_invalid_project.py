from __future__ import annotations

import struct
from pathlib import Path

import pytest

from smos.core.errors import ErrorCode, ProjectOpenError
from smos.core.project import CURRENT_CLASS_VERSION
from smos.services.project_service import ProjectService
from smos.services.settings_store import SettingsStore

pytestmark = pytest.mark.usefixtures("qt_app")


def _service(tmp_path: Path) -> ProjectService:
    return ProjectService(settings=SettingsStore(tmp_path / "smos.ini"))


@pytest.mark.integration
def test_open_invalid_file_surfaces_error_without_list_update(tmp_path: Path) -> None:
    service = _service(tmp_path)
    invalid_path = tmp_path / "not_a_project.smp"
    invalid_path.write_bytes(b"\x02\x00garbage that is not a project")

    with pytest.raises(ProjectOpenError) as excinfo:
        service.open_project(invalid_path)

    assert excinfo.value.code is ErrorCode.FORMAT_ERROR
    assert excinfo.value.remediation
    assert service.project is None
    assert service.recent_projects == []
    assert not (tmp_path / "smos.ini").exists()


@pytest.mark.integration
def test_open_newer_project_reports_version_mismatch(tmp_path: Path) -> None:
    service = _service(tmp_path)
    future = tmp_path / "future.smp"
    future.write_bytes(struct.pack("<H", CURRENT_CLASS_VERSION + 1))

    with pytest.raises(ProjectOpenError) as excinfo:
        service.open_project(future)

    assert excinfo.value.code is ErrorCode.VERSION_MISMATCH
    assert excinfo.value.title == "Unsupported Project Version"


@pytest.mark.integration
def test_open_missing_project(tmp_path: Path) -> None:
    with pytest.raises(ProjectOpenError) as excinfo:
        _service(tmp_path).open_project(tmp_path / "missing.smp")

    assert excinfo.value.code is ErrorCode.FILE_NOT_FOUND
    assert "missing.smp" in str(excinfo.value)
