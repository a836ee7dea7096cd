from __future__ import annotations

from pathlib import Path

import pytest
from legacy_xml import ACTIVITIES_XSD, CHILDREN_XSD, CLASS_GROUPS_XSD, SCHOOLS_XSD, write_legacy_xml

from childcare_app.importer import init_importer
from childcare_app.importer.registry import build_orchestrator


def _write_xsd(path: Path, body: str) -> Path:
    path.write_text(body, encoding="utf-8")
    return path


@pytest.fixture
def children_xsd(tmp_path) -> Path:
    return _write_xsd(tmp_path / "Children.xsd", CHILDREN_XSD)


@pytest.fixture
def activities_xsd(tmp_path) -> Path:
    return _write_xsd(tmp_path / "Activity.xsd", ACTIVITIES_XSD)


@pytest.fixture
def schools_xsd(tmp_path) -> Path:
    return _write_xsd(tmp_path / "School.xsd", SCHOOLS_XSD)


@pytest.fixture
def class_groups_xsd(tmp_path) -> Path:
    return _write_xsd(tmp_path / "Class Group.xsd", CLASS_GROUPS_XSD)


@pytest.fixture
def children_xml(tmp_path):
    """Factory writing a Children export and returning its path."""

    def _factory(records, name: str = "Children.xml") -> Path:
        return write_legacy_xml(tmp_path / name, "Children", records)

    return _factory


@pytest.fixture
def activities_xml(tmp_path):
    def _factory(records, name: str = "Activity.xml") -> Path:
        return write_legacy_xml(tmp_path / name, "Activity", records)

    return _factory


@pytest.fixture
def schools_xml(tmp_path):
    def _factory(records, name: str = "School.xml") -> Path:
        return write_legacy_xml(tmp_path / name, "School", records)

    return _factory


@pytest.fixture
def class_groups_xml(tmp_path):
    def _factory(records, name: str = "Class Group.xml") -> Path:
        return write_legacy_xml(tmp_path / name, "Class_x0020_Group", records)

    return _factory


@pytest.fixture
def importer_app(app):
    app.config.update(
        {"IMPORTER_ENABLED": True, "IMPORTER_ENTITIES": ("schools", "class_groups", "activities", "children")}
    )
    init_importer(app)
    yield app


@pytest.fixture
def children_orchestrator(importer_app):
    return build_orchestrator("children")


@pytest.fixture
def activities_orchestrator(importer_app):
    return build_orchestrator("activities")


@pytest.fixture
def schools_orchestrator(importer_app):
    return build_orchestrator("schools")
