"""
SQLAlchemy models for importer run bookkeeping.

A row is written once per live (non-preview) run that gets past schema
validation. Aborted runs and previews leave no trace in the store.
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Enum, Index
from sqlalchemy.orm import Mapped, mapped_column

from ..base import BaseModel, db


class ImportRunStatus(str, enum.Enum):
    """Lifecycle states for an import run."""

    NOT_STARTED = "not_started"
    VALIDATING = "validating"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ABORTED = "aborted"


class ImportRun(BaseModel):
    """Metadata and final counts for a single importer execution."""

    __tablename__ = "import_runs"

    id: Mapped[int] = mapped_column(primary_key=True)
    entity: Mapped[str] = mapped_column(db.String(50), nullable=False, index=True)
    status: Mapped[ImportRunStatus] = mapped_column(
        Enum(ImportRunStatus, name="import_run_status_enum"),
        nullable=False,
        default=ImportRunStatus.NOT_STARTED,
        index=True,
    )
    source_path: Mapped[str] = mapped_column(db.String(1024), nullable=False)
    schema_path: Mapped[str] = mapped_column(db.String(1024), nullable=False)
    run_by: Mapped[str] = mapped_column(db.String(100), nullable=False, default="system")
    started_at: Mapped[datetime] = mapped_column(db.DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(db.DateTime(timezone=True))
    imported_count: Mapped[int] = mapped_column(db.Integer, nullable=False, default=0)
    skipped_count: Mapped[int] = mapped_column(db.Integer, nullable=False, default=0)
    error_count: Mapped[int] = mapped_column(db.Integer, nullable=False, default=0)
    families_created: Mapped[int] = mapped_column(db.Integer, nullable=False, default=0)
    audit_log_path: Mapped[str | None] = mapped_column(db.String(1024), nullable=True)
    summary_path: Mapped[str | None] = mapped_column(db.String(1024), nullable=True)
    notes: Mapped[str | None] = mapped_column(db.Text, nullable=True)

    __table_args__ = (Index("idx_import_runs_entity_status", "entity", "status"),)

    @property
    def total_processed(self) -> int:
        return self.imported_count + self.skipped_count + self.error_count

    def __repr__(self):
        return f"<ImportRun {self.id} {self.entity} {self.status.value}>"
