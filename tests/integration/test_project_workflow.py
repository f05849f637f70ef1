from __future__ import annotations

from pathlib import Path

import pytest

from smos.core.errors import ErrorCode, ProjectCreationError, ProjectSaveError
from smos.core.project import SubdirectoryMode
from smos.services.project_service import ProjectService
from smos.services.settings_store import SettingsStore

pytestmark = pytest.mark.usefixtures("qt_app")


def _service(tmp_path: Path) -> ProjectService:
    return ProjectService(settings=SettingsStore(tmp_path / "smos.ini"))


def _recent_paths(tmp_path: Path) -> list[str]:
    return [str(p) for p in _service(tmp_path).recent_projects]


@pytest.mark.integration
def test_create_edit_save_and_reopen(tmp_path: Path) -> None:
    service = _service(tmp_path)
    project_path = tmp_path / "metrics.smp"

    project = service.create_project(
        project_path,
        source_path="src",
        include_subdirectories=SubdirectoryMode.RECURSIVE,
    )
    assert project.project_name == "metrics"
    assert service.project is project

    project.ignore_blank_lines = True
    project.option_flags = 0b0101
    service.save_project()

    reopened = _service(tmp_path).open_project(project_path)
    assert reopened.persisted_fields() == project.persisted_fields()
    assert reopened.project_file_path == project_path
    assert _recent_paths(tmp_path)[0].endswith("metrics.smp")


@pytest.mark.integration
def test_create_refuses_existing_file(tmp_path: Path) -> None:
    service = _service(tmp_path)
    project_path = tmp_path / "taken.smp"
    project_path.write_bytes(b"keep me")

    with pytest.raises(ProjectCreationError) as excinfo:
        service.create_project(project_path)

    assert excinfo.value.code is ErrorCode.FILE_ALREADY_EXISTS
    assert excinfo.value.title == "File Already Exists"
    assert project_path.read_bytes() == b"keep me"
    assert service.project is None


@pytest.mark.integration
def test_save_as_requires_overwrite_for_existing_target(tmp_path: Path) -> None:
    service = _service(tmp_path)
    service.create_project(tmp_path / "first.smp", project_name="First")
    other = tmp_path / "other.smp"
    other.write_bytes(b"occupied")

    with pytest.raises(ProjectSaveError) as excinfo:
        service.save_project(other)
    assert excinfo.value.code is ErrorCode.FILE_ALREADY_EXISTS

    project = service.save_project(other, overwrite=True)
    assert project.project_file_path == other
    assert _recent_paths(tmp_path)[0].endswith("other.smp")


@pytest.mark.integration
def test_save_without_open_project(tmp_path: Path) -> None:
    with pytest.raises(ProjectSaveError):
        _service(tmp_path).save_project()


@pytest.mark.integration
def test_close_project_clears_state(tmp_path: Path) -> None:
    service = _service(tmp_path)
    service.create_project(tmp_path / "closing.smp")

    service.close_project()

    assert service.project is None


@pytest.mark.integration
def test_unencodable_name_surfaces_settings_error(tmp_path: Path) -> None:
    service = _service(tmp_path)
    project = service.create_project(tmp_path / "named.smp", project_name="Named")
    project.project_name = "bad\udc80"

    with pytest.raises(ProjectSaveError) as excinfo:
        service.save_project()

    assert excinfo.value.code is ErrorCode.FORMAT_ERROR
    assert excinfo.value.title == "Invalid Project Settings"
