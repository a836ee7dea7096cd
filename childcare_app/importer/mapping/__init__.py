"""Utilities for loading per-entity legacy field mappings."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml
from flask import current_app

FIELD_TYPES = frozenset({"text", "date", "time", "decimal", "integer", "float", "boolean"})
DEFAULT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
DEFAULT_TIME_FORMAT = "%H:%M"


class MappingLoadError(RuntimeError):
    """Raised when a mapping specification cannot be loaded or validated."""


@dataclass(frozen=True)
class MappingField:
    target: str
    source: str
    type: str = "text"
    required: bool = False
    default: Any | None = None
    max_length: int | None = None
    format: str | None = None


@dataclass(frozen=True)
class MappingSpec:
    version: int
    entity: str
    record_element: str
    natural_key: str
    fields: Sequence[MappingField]
    checksum: str
    path: Path

    def field_for(self, target: str) -> MappingField:
        for field in self.fields:
            if field.target == target:
                return field
        raise KeyError(target)


def _parse_field(entry: Mapping[str, Any]) -> MappingField:
    target = str(entry.get("target") or "").strip()
    source = str(entry.get("source") or "").strip()
    if not target:
        raise MappingLoadError(f"Field entry missing 'target': {entry!r}")
    if not source:
        raise MappingLoadError(f"Field '{target}' is missing its 'source' element name.")

    field_type = str(entry.get("type", "text")).strip().lower()
    if field_type not in FIELD_TYPES:
        raise MappingLoadError(
            f"Field '{target}' has unsupported type '{field_type}'. Expected one of: {', '.join(sorted(FIELD_TYPES))}."
        )

    max_length = entry.get("max_length")
    if max_length is not None:
        try:
            max_length = int(max_length)
        except (TypeError, ValueError) as exc:
            raise MappingLoadError(f"Field '{target}' has a non-integer max_length.") from exc

    date_format = entry.get("format")
    if field_type == "date":
        date_format = str(date_format or DEFAULT_DATE_FORMAT)
    elif field_type == "time":
        date_format = str(date_format or DEFAULT_TIME_FORMAT)

    required = bool(entry.get("required", False))
    if "default" not in entry and field_type in {"decimal", "integer", "float"} and not required:
        # Numeric default policy must be stated per field, never inferred.
        raise MappingLoadError(f"Numeric field '{target}' must declare a default (0 or null).")

    return MappingField(
        target=target,
        source=source,
        type=field_type,
        required=required,
        default=entry.get("default"),
        max_length=max_length,
        format=date_format,
    )


def load_mapping(path: str | Path) -> MappingSpec:
    """
    Load and validate a YAML mapping specification.
    """

    path = Path(path)
    if not path.exists():
        raise MappingLoadError(f"Mapping file not found at {path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:  # pragma: no cover - YAML parser errors
        raise MappingLoadError(f"Failed to parse mapping YAML at {path}: {exc}") from exc

    try:
        version = int(raw["version"])
        entity = str(raw["entity"]).strip()
        record_element = str(raw["record_element"]).strip()
        natural_key = str(raw["natural_key"]).strip()
        fields_payload = raw["fields"]
    except KeyError as exc:
        raise MappingLoadError(f"Missing required mapping attribute: {exc}") from exc
    except (TypeError, ValueError) as exc:
        raise MappingLoadError(f"Invalid mapping attribute: {exc}") from exc

    if not entity or not record_element:
        raise MappingLoadError("Mapping entity and record_element values cannot be empty.")

    fields: list[MappingField] = []
    seen_targets: set[str] = set()
    for entry in fields_payload or ():
        if not isinstance(entry, Mapping):
            raise MappingLoadError(f"Field definition must be a mapping, got {entry!r}")
        field = _parse_field(entry)
        if field.target in seen_targets:
            raise MappingLoadError(f"Duplicate target '{field.target}' in mapping.")
        seen_targets.add(field.target)
        fields.append(field)

    if natural_key not in seen_targets:
        raise MappingLoadError(f"Natural key '{natural_key}' is not declared as a mapped field.")
    key_field = next(field for field in fields if field.target == natural_key)
    if key_field.max_length is not None:
        raise MappingLoadError(f"Natural key '{natural_key}' must not declare max_length.")

    return MappingSpec(
        version=version,
        entity=entity,
        record_element=record_element,
        natural_key=natural_key,
        fields=tuple(fields),
        checksum=_compute_checksum(raw),
        path=path,
    )


def get_active_mapping(entity: str) -> MappingSpec:
    """
    Load the configured mapping spec for ``entity`` once per application.
    """

    paths = current_app.config.get("IMPORTER_MAPPING_PATHS") or {}
    config_path = paths.get(entity)
    if not config_path:
        raise MappingLoadError(f"No mapping path configured for entity '{entity}'.")

    cache: dict[str, MappingSpec] = current_app.extensions.setdefault("_importer_mapping_cache", {})
    cache_key = f"{entity}:{config_path}"
    spec = cache.get(cache_key)
    if spec is None:
        spec = load_mapping(config_path)
        cache[cache_key] = spec
    return spec


def _compute_checksum(raw: Mapping[str, Any]) -> str:
    serialized = json.dumps(raw, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()
