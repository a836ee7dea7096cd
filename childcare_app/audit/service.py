"""
Change-log service enforcing the closed set of auditable entity types.
"""

from __future__ import annotations

import enum
import logging
from datetime import datetime, timezone
from typing import Mapping

from sqlalchemy.orm import Session

from childcare_app.models import AuditLog, db

logger = logging.getLogger(__name__)


class AuditEntityType(str, enum.Enum):
    """Entity kinds that may appear in the change log."""

    ATTENDANCE = "Attendance"
    STUDENT = "Student"
    FAMILY = "Family"
    SCHOOL = "School"
    CLASS_GROUP = "ClassGroup"
    ACTIVITY = "Activity"
    BILLING = "Billing"
    EVALUATION = "Evaluation"
    TRUCK = "Truck"

    @classmethod
    def parse(cls, value: "AuditEntityType | str") -> "AuditEntityType":
        """Resolve ``value`` case-insensitively, raising on anything outside the whitelist."""

        if isinstance(value, cls):
            return value
        candidate = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == candidate:
                return member
        valid = ", ".join(member.value for member in cls)
        raise AuditValidationError(f"Invalid entity type '{value}'. Valid types are: {valid}")


class AuditValidationError(ValueError):
    """Raised when a change cannot be written to the audit log."""


def _stringify(value: object | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


class AuditService:
    """Append-only writer for field-level change history."""

    def __init__(self, session: Session | None = None):
        self.session: Session = session or db.session

    def log_change(
        self,
        entity_type: AuditEntityType | str,
        entity_id: int,
        field: str,
        old_value: object | None,
        new_value: object | None,
        changed_by: str,
    ) -> AuditLog:
        """
        Stage a single change-log row in the current session.

        The caller owns the transaction; nothing is committed here.
        """

        resolved_type = AuditEntityType.parse(entity_type)
        if not field or not field.strip():
            raise AuditValidationError("Audit field name must not be empty.")
        if not changed_by or not changed_by.strip():
            raise AuditValidationError("Audit changed_by must not be empty.")

        entry = AuditLog(
            entity_type=resolved_type.value,
            entity_id=entity_id,
            field=field.strip(),
            old_value=_stringify(old_value),
            new_value=_stringify(new_value),
            changed_by=changed_by.strip(),
            changed_at=datetime.now(timezone.utc),
        )
        self.session.add(entry)
        logger.debug(
            "Audit change staged for %s:%s field=%s",
            resolved_type.value,
            entity_id,
            entry.field,
        )
        return entry

    def log_changes(
        self,
        entity_type: AuditEntityType | str,
        entity_id: int,
        changes: Mapping[str, tuple[object | None, object | None]],
        changed_by: str,
    ) -> list[AuditLog]:
        """Stage one row per ``field -> (old, new)`` pair, skipping unchanged values."""

        resolved_type = AuditEntityType.parse(entity_type)
        entries: list[AuditLog] = []
        for field, (old_value, new_value) in changes.items():
            if _stringify(old_value) == _stringify(new_value):
                continue
            entries.append(self.log_change(resolved_type, entity_id, field, old_value, new_value, changed_by))
        return entries

    def history(self, entity_type: AuditEntityType | str, entity_id: int) -> list[AuditLog]:
        """Return the change history of one entity, oldest first."""

        resolved_type = AuditEntityType.parse(entity_type)
        return list(
            self.session.query(AuditLog)
            .filter(AuditLog.entity_type == resolved_type.value, AuditLog.entity_id == entity_id)
            .order_by(AuditLog.changed_at, AuditLog.id)
        )
