"""
Registry of legacy entity kinds the importer knows how to load.

Entity names match the ``IMPORTER_ENTITIES`` configuration and the keys of the
mapping and default-source settings. Registry order is dependency order:
schools before the class groups that point at them.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from flask import current_app

from .mapping import get_active_mapping
from .pipeline.mapper import ActivityMapper, ClassGroupMapper, SchoolMapper, StudentMapper
from .pipeline.orchestrator import ImportOrchestrator
from .pipeline.store import SQLAlchemyImportStore


@dataclass(frozen=True)
class EntityDescriptor:
    """Metadata describing one importable legacy export."""

    name: str
    title: str
    mapper_cls: type
    store_kind: str
    summary: str | None = None
    # Mapper keyword -> store kind whose persisted natural keys it receives.
    references: Mapping[str, str] = field(default_factory=dict)


def get_entity_registry() -> Mapping[str, EntityDescriptor]:
    """Return the supported entity kinds in import order."""
    return OrderedDict(
        (
            (
                "schools",
                EntityDescriptor(
                    name="schools",
                    title="Schools",
                    mapper_cls=SchoolMapper,
                    store_kind="school",
                    summary="Schools visited by the trucks, from the legacy School export.",
                ),
            ),
            (
                "class_groups",
                EntityDescriptor(
                    name="class_groups",
                    title="Class groups",
                    mapper_cls=ClassGroupMapper,
                    store_kind="class_group",
                    summary="Weekly class sessions per school, from the legacy Class Group export.",
                    references={"valid_school_ids": "school"},
                ),
            ),
            (
                "activities",
                EntityDescriptor(
                    name="activities",
                    title="Activities",
                    mapper_cls=ActivityMapper,
                    store_kind="activity",
                    summary="Programme activities from the legacy Activity export.",
                ),
            ),
            (
                "children",
                EntityDescriptor(
                    name="children",
                    title="Children",
                    mapper_cls=StudentMapper,
                    store_kind="student",
                    summary="Students and their families from the legacy Children export.",
                ),
            ),
        )
    )


def resolve_entities(
    configured: Sequence[str],
    registry: Mapping[str, EntityDescriptor] | None = None,
) -> Iterable[EntityDescriptor]:
    """
    Map configured entity names to registry descriptors, raising on unknowns.
    """
    registry = registry or get_entity_registry()
    unknown = sorted({entity for entity in configured if entity not in registry})
    if unknown:
        raise ValueError(
            "Unknown importer entities configured: "
            + ", ".join(unknown)
            + ". Update IMPORTER_ENTITIES or register these entities first."
        )
    return tuple(registry[entity] for entity in configured)


def build_orchestrator(entity: str) -> ImportOrchestrator:
    """
    Assemble an orchestrator for ``entity`` from the active application configuration.

    The mapping spec is loaded once per application and shared by reference.
    Referenced natural keys are read from the store when the orchestrator is built.
    """
    registry = get_entity_registry()
    (descriptor,) = resolve_entities((entity,), registry)
    spec = get_active_mapping(entity)
    store = SQLAlchemyImportStore()
    options = {keyword: store.natural_keys(kind) for keyword, kind in descriptor.references.items()}
    return ImportOrchestrator(
        store,
        descriptor.mapper_cls(spec, **options),
        entity=descriptor.name,
        run_by=current_app.config.get("IMPORTER_RUN_BY") or "legacy-importer",
    )
