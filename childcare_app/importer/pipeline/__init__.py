"""
Legacy XML import pipeline: validation, record mapping, reconciliation and orchestration.
"""

from .coercion import CoercedValue, FieldCoercionError, coerce_field
from .mapper import (
    ActivityMapper,
    ClassGroupMapper,
    FamilyReference,
    MappingResult,
    NormalizedActivity,
    NormalizedClassGroup,
    NormalizedSchool,
    NormalizedStudent,
    SchoolMapper,
    StudentMapper,
    extract_family_reference,
)
from .orchestrator import ImportOrchestrator
from .outcomes import ALREADY_IMPORTED, ImportOutcome, ImportSummary, OutcomeStatus, render_summary
from .reconciliation import FamilyResolution, FamilyResolver, family_key
from .records import LegacyRecord, decode_element_name, iter_legacy_records
from .schema_validation import (
    SchemaViolation,
    ValidationResult,
    load_document,
    load_schema,
    validate_document,
)
from .store import ImportStore, SQLAlchemyImportStore

__all__ = [
    "ALREADY_IMPORTED",
    "ActivityMapper",
    "ClassGroupMapper",
    "CoercedValue",
    "FamilyReference",
    "FamilyResolution",
    "FamilyResolver",
    "FieldCoercionError",
    "ImportOrchestrator",
    "ImportOutcome",
    "ImportStore",
    "ImportSummary",
    "LegacyRecord",
    "MappingResult",
    "NormalizedActivity",
    "NormalizedClassGroup",
    "NormalizedSchool",
    "NormalizedStudent",
    "OutcomeStatus",
    "SQLAlchemyImportStore",
    "SchemaViolation",
    "SchoolMapper",
    "StudentMapper",
    "ValidationResult",
    "coerce_field",
    "decode_element_name",
    "extract_family_reference",
    "family_key",
    "iter_legacy_records",
    "load_document",
    "load_schema",
    "render_summary",
    "validate_document",
]
