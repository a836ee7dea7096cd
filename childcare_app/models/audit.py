# childcare_app/models/audit.py
"""
Append-only field-level change log shared by every mutating operation.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from .base import db


class AuditLog(db.Model):
    """One field change on one entity. Rows are never updated or deleted."""

    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(db.Integer, primary_key=True, autoincrement=True)
    entity_type: Mapped[str] = mapped_column(db.String(50), nullable=False, index=True)
    entity_id: Mapped[int] = mapped_column(db.Integer, nullable=False)
    field: Mapped[str] = mapped_column(db.String(100), nullable=False)
    old_value: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    new_value: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    changed_by: Mapped[str] = mapped_column(db.String(100), nullable=False)
    changed_at: Mapped[datetime] = mapped_column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_audit_log_entity", "entity_type", "entity_id"),
        CheckConstraint("field <> ''", name="ck_audit_log_field_non_empty"),
    )

    def __repr__(self):
        return f"<AuditLog {self.entity_type}:{self.entity_id} {self.field}>"
