"""
End-to-end driver for a legacy import run.

A run validates the whole document first, then streams records through the
mapper one at a time. Each accepted record is persisted in its own
transaction; preview runs walk the same path but never write.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from childcare_app.audit import AuditEntityType
from childcare_app.importer.errors import (
    FatalImportError,
    SchemaNotFoundError,
    SchemaValidationError,
    SourceNotFoundError,
)
from childcare_app.models.importer import ImportRunStatus

from .mapper import FamilyReference, NormalizedStudent
from .outcomes import (
    ALREADY_IMPORTED,
    ImportOutcome,
    ImportSummary,
    OutcomeStatus,
    write_audit_log,
    write_summary,
)
from .reconciliation import FamilyResolver, family_key
from .records import LegacyRecord, iter_legacy_records
from .schema_validation import load_document, load_schema, validate_document
from .store import ImportStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ImportOrchestrator:
    """Runs one entity kind's legacy export into the store."""

    def __init__(self, store: ImportStore, mapper: Any, *, entity: str, run_by: str):
        self.store = store
        self.mapper = mapper
        self.entity = entity
        self.run_by = run_by
        self.state = ImportRunStatus.NOT_STARTED

    def run(
        self,
        source_path: str | Path,
        schema_path: str | Path,
        *,
        audit_path: str | Path | None = None,
        summary_path: str | Path | None = None,
        preview: bool = False,
        cancel_event: threading.Event | None = None,
    ) -> ImportSummary:
        source_path = Path(source_path)
        schema_path = Path(schema_path)
        summary = ImportSummary(entity=self.entity, preview=preview)
        started_at = _utcnow()

        try:
            self.state = ImportRunStatus.VALIDATING
            try:
                document = self._load_and_validate(source_path, schema_path)
            except FatalImportError as exc:
                self.state = ImportRunStatus.ABORTED
                summary.state = self.state
                logger.error(
                    "Legacy import aborted: %s",
                    exc,
                    extra={"importer_entity": self.entity, "importer_source": str(source_path)},
                )
                raise

            self.state = ImportRunStatus.PROCESSING
            resolver = FamilyResolver(self.store.families())
            projected_keys: set[str] = set()
            for record in iter_legacy_records(document, self.mapper.spec.record_element):
                if cancel_event is not None and cancel_event.is_set():
                    self.state = ImportRunStatus.CANCELLED
                    logger.warning(
                        "Legacy import cancelled after %s record(s)",
                        summary.total_processed,
                        extra={"importer_entity": self.entity},
                    )
                    break
                if preview:
                    outcome = self._preview_record(record, resolver, projected_keys, summary)
                else:
                    outcome = self._import_record(record, resolver, summary)
                summary.record(outcome)
            else:
                self.state = ImportRunStatus.COMPLETED

            summary.state = self.state
            summary.completed_at = _utcnow()
            if not preview:
                self._finish(summary, source_path, schema_path, started_at, audit_path, summary_path)

            logger.info(
                "Legacy import %s: imported=%s skipped=%s errors=%s",
                summary.state.value,
                summary.imported,
                summary.skipped,
                summary.errors,
                extra={
                    "importer_entity": self.entity,
                    "importer_preview": preview,
                    "importer_families_created": summary.families_created,
                    "importer_run_id": summary.run_id,
                },
            )
            return summary
        finally:
            self.store.release()

    def _load_and_validate(self, source_path: Path, schema_path: Path):
        if not source_path.is_file():
            raise SourceNotFoundError(source_path)
        if not schema_path.is_file():
            raise SchemaNotFoundError(schema_path)

        document = load_document(source_path)
        schema = load_schema(schema_path)
        result = validate_document(document, schema)
        if not result.is_valid:
            for violation in result.violations:
                logger.error(
                    "Import validation error in %s: %s",
                    source_path,
                    violation,
                    extra={"importer_entity": self.entity, "importer_line": violation.line},
                )
            raise SchemaValidationError(source_path, result.violations)
        return document

    def _preview_record(
        self,
        record: LegacyRecord,
        resolver: FamilyResolver,
        projected_keys: set[str],
        summary: ImportSummary,
    ) -> ImportOutcome:
        result = self.mapper.map(record)
        if result.skip_reason:
            return ImportOutcome(record.sequence_number, result.natural_key, OutcomeStatus.SKIPPED, result.skip_reason)
        if not result.ok:
            return ImportOutcome(record.sequence_number, result.natural_key, OutcomeStatus.ERROR, result.failure)

        entity = result.entity
        key = result.natural_key
        if key in projected_keys or self.store.exists(entity.entity_type, key):
            return ImportOutcome(record.sequence_number, key, OutcomeStatus.SKIPPED, ALREADY_IMPORTED)

        warnings = list(result.warnings)
        family = entity.family if isinstance(entity, NormalizedStudent) else None
        if family is not None:
            resolution = resolver.resolve(family)
            if resolution.warning:
                warnings.append(resolution.warning)
            if resolution.action == "create":
                resolver.project(resolution.name)
                summary.families_created += 1

        projected_keys.add(key)
        return ImportOutcome(record.sequence_number, key, OutcomeStatus.IMPORTED, warnings=tuple(warnings))

    def _import_record(self, record: LegacyRecord, resolver: FamilyResolver, summary: ImportSummary) -> ImportOutcome:
        result = self.mapper.map(record)
        if result.skip_reason:
            return ImportOutcome(record.sequence_number, result.natural_key, OutcomeStatus.SKIPPED, result.skip_reason)
        if not result.ok:
            logger.debug("Record %s failed mapping: %s", record.sequence_number, result.failure)
            return ImportOutcome(record.sequence_number, result.natural_key, OutcomeStatus.ERROR, result.failure)

        entity = result.entity
        key = result.natural_key
        warnings = list(result.warnings)
        created_family: tuple[int, str] | None = None
        try:
            if self.store.exists(entity.entity_type, key):
                return ImportOutcome(record.sequence_number, key, OutcomeStatus.SKIPPED, ALREADY_IMPORTED)

            with self.store.transaction():
                family_id = None
                family = entity.family if isinstance(entity, NormalizedStudent) else None
                if family is not None:
                    family_id, created_family = self._link_family(family, resolver, warnings)
                entity_id = self.store.insert(entity, family_id=family_id)
                changes: dict[str, tuple[object | None, object | None]] = {
                    self.mapper.spec.natural_key: (None, key)
                }
                if family_id is not None:
                    changes["family_id"] = (None, family_id)
                self.store.log_changes(entity.audit_type, entity_id, changes, self.run_by)
        except Exception as exc:
            logger.warning(
                "Record %s (%s) failed to persist: %s",
                record.sequence_number,
                key,
                exc,
                extra={"importer_entity": self.entity},
            )
            return ImportOutcome(
                record.sequence_number, key, OutcomeStatus.ERROR, f"persistence failed: {exc}", tuple(warnings)
            )

        if created_family is not None:
            resolver.register(*created_family)
            summary.families_created += 1
        return ImportOutcome(record.sequence_number, key, OutcomeStatus.IMPORTED, warnings=tuple(warnings))

    def _link_family(
        self, family: FamilyReference, resolver: FamilyResolver, warnings: list[str]
    ) -> tuple[int, tuple[int, str] | None]:
        resolution = resolver.resolve(family)
        if resolution.warning:
            warnings.append(resolution.warning)
        if resolution.action == "existing":
            return resolution.family_id, None

        family_id = self.store.insert_family(family, name=resolution.name, auto_created=True)
        self.store.log_changes(
            AuditEntityType.FAMILY, family_id, {"family_name": (None, resolution.name)}, self.run_by
        )
        logger.debug("Auto-created family %s (key=%s)", family_id, family_key(resolution.name))
        return family_id, (family_id, resolution.name)

    def _finish(
        self,
        summary: ImportSummary,
        source_path: Path,
        schema_path: Path,
        started_at: datetime,
        audit_path: str | Path | None,
        summary_path: str | Path | None,
    ) -> None:
        summary.audit_log_path = Path(audit_path) if audit_path else None
        summary.summary_path = Path(summary_path) if summary_path else None

        with self.store.transaction():
            summary.run_id = self.store.record_run(
                entity=self.entity,
                status=summary.state,
                source_path=str(source_path),
                schema_path=str(schema_path),
                run_by=self.run_by,
                started_at=started_at,
                completed_at=summary.completed_at,
                imported_count=summary.imported,
                skipped_count=summary.skipped,
                error_count=summary.errors,
                families_created=summary.families_created,
                audit_log_path=str(summary.audit_log_path) if summary.audit_log_path else None,
                summary_path=str(summary.summary_path) if summary.summary_path else None,
            )

        if summary.audit_log_path is not None:
            write_audit_log(summary.audit_log_path, summary.outcomes, timestamp=summary.completed_at)
        if summary.summary_path is not None:
            write_summary(summary.summary_path, summary)
