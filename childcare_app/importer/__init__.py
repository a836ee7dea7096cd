"""
Legacy XML importer package.

Provides conditional CLI registration and entity registry validation while
remaining inert when the importer is disabled.
"""

from __future__ import annotations

from typing import Iterable

from flask import Flask

from childcare_app.utils.importer import get_importer_entities, is_importer_enabled

from .cli import get_disabled_importer_group, importer_cli
from .errors import FatalImportError
from .pipeline import ImportOrchestrator, ImportSummary, SQLAlchemyImportStore
from .registry import EntityDescriptor, build_orchestrator, get_entity_registry, resolve_entities

IMPORTER_EXTENSION_KEY = "importer"

__all__ = [
    "init_importer",
    "IMPORTER_EXTENSION_KEY",
    "FatalImportError",
    "ImportOrchestrator",
    "ImportSummary",
    "SQLAlchemyImportStore",
    "build_orchestrator",
]


def _ensure_extension_state(app: Flask) -> dict:
    return app.extensions.setdefault(
        IMPORTER_EXTENSION_KEY,
        {
            "enabled": False,
            "configured_entities": (),
            "active_entities": (),
        },
    )


def _set_cli(app: Flask, enabled: bool) -> None:
    """Register the appropriate CLI group based on flag state."""
    # Avoid duplicate registrations when running tests
    command_name = importer_cli.name
    if command_name in app.cli.commands:
        app.cli.commands.pop(command_name)

    if enabled:
        app.cli.add_command(importer_cli)
    else:
        app.cli.add_command(get_disabled_importer_group())


def init_importer(app: Flask) -> None:
    """
    Register the importer CLI based on configuration.

    Records importer state inside ``app.extensions['importer']`` for reuse by
    the CLI and other helpers.
    """
    enabled = is_importer_enabled(app)
    configured_entities = get_importer_entities(app)

    state = _ensure_extension_state(app)
    state.update({"enabled": enabled, "configured_entities": configured_entities})

    if not enabled:
        state["active_entities"] = ()
        _set_cli(app, enabled=False)
        app.logger.info("Importer disabled via IMPORTER_ENABLED flag; skipping registration.")
        return

    active: Iterable[EntityDescriptor] = resolve_entities(configured_entities, get_entity_registry())
    state["active_entities"] = tuple(active)
    _set_cli(app, enabled=True)

    entity_names = ", ".join(descriptor.name for descriptor in state["active_entities"]) or "none"
    app.logger.info("Importer enabled for entities: %s", entity_names)
