from __future__ import annotations

import pytest

from childcare_app.importer.mapping import MappingLoadError, get_active_mapping, load_mapping


def _write(tmp_path, body: str):
    path = tmp_path / "mapping.yaml"
    path.write_text(body, encoding="utf-8")
    return path


def test_bundled_children_mapping_loads(app):
    spec = load_mapping(app.config["IMPORTER_MAPPING_PATHS"]["children"])

    assert spec.entity == "children"
    assert spec.record_element == "Children"
    assert spec.natural_key == "reference"
    assert spec.field_for("date_of_birth").type == "date"
    assert spec.field_for("date_of_birth").required is True
    assert spec.field_for("online_entry").default == 0
    assert spec.field_for("charge").default is None
    assert len(spec.checksum) == 64


def test_active_mapping_is_loaded_once_per_app(app):
    first = get_active_mapping("activities")
    second = get_active_mapping("activities")

    assert first is second


def test_numeric_field_without_default_is_rejected(tmp_path):
    path = _write(
        tmp_path,
        """
version: 1
entity: demo
record_element: Demo
natural_key: code
fields:
  - source: Code
    target: code
    required: true
  - source: Amount
    target: amount
    type: decimal
""",
    )

    with pytest.raises(MappingLoadError, match="must declare a default"):
        load_mapping(path)


def test_natural_key_must_be_mapped(tmp_path):
    path = _write(
        tmp_path,
        """
version: 1
entity: demo
record_element: Demo
natural_key: missing
fields:
  - source: Code
    target: code
""",
    )

    with pytest.raises(MappingLoadError, match="Natural key"):
        load_mapping(path)


def test_unknown_field_type_is_rejected(tmp_path):
    path = _write(
        tmp_path,
        """
version: 1
entity: demo
record_element: Demo
natural_key: code
fields:
  - source: Code
    target: code
    type: uuid
""",
    )

    with pytest.raises(MappingLoadError, match="unsupported type"):
        load_mapping(path)


def test_missing_mapping_file_is_reported(tmp_path):
    with pytest.raises(MappingLoadError, match="not found"):
        load_mapping(tmp_path / "nope.yaml")


def test_natural_key_cannot_be_truncated(tmp_path):
    path = _write(
        tmp_path,
        """
version: 1
entity: demo
record_element: Demo
natural_key: code
fields:
  - source: Code
    target: code
    required: true
    max_length: 10
""",
    )

    with pytest.raises(MappingLoadError, match="must not declare max_length"):
        load_mapping(path)


def test_bundled_natural_keys_keep_their_full_length(app):
    for path in app.config["IMPORTER_MAPPING_PATHS"].values():
        spec = load_mapping(path)

        assert spec.field_for(spec.natural_key).max_length is None
