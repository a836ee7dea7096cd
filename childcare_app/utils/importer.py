"""
Utility helpers for importer feature flag checks.
"""

from __future__ import annotations

from typing import Iterable, Tuple

from flask import current_app


def _get_config(app=None):
    if app is not None:
        return app.config
    return current_app.config


def is_importer_enabled(app=None) -> bool:
    """Return True when the importer feature flag is enabled."""
    config = _get_config(app)
    return bool(config.get("IMPORTER_ENABLED", False))


def get_importer_entities(app=None) -> Tuple[str, ...]:
    """Return the configured legacy entity kinds."""
    config = _get_config(app)
    entities: Iterable[str] = config.get("IMPORTER_ENTITIES", ())
    return tuple(entities)


def get_default_sources(entity: str, app=None) -> tuple[str | None, str | None]:
    """Return the configured ``(xml, xsd)`` export paths for ``entity``."""
    config = _get_config(app)
    sources = config.get("IMPORTER_DEFAULT_SOURCES") or {}
    xml_path, xsd_path = sources.get(entity, (None, None))
    return xml_path, xsd_path
