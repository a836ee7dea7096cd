"""XSD validation of legacy XML exports, performed before any record is mapped."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from lxml import etree

from childcare_app.importer.errors import DocumentParseError, SchemaLoadError


@dataclass(frozen=True)
class SchemaViolation:
    line: int | None
    column: int | None
    message: str

    def __str__(self) -> str:
        return f"line {self.line}, column {self.column}: {self.message}"


@dataclass(frozen=True)
class ValidationResult:
    violations: tuple[SchemaViolation, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.violations


def _hardened_parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        dtd_validation=False,
        load_dtd=False,
        remove_comments=True,
        remove_pis=True,
        huge_tree=True,
    )


def load_document(path: Path) -> etree._ElementTree:
    """Parse ``path`` as XML, raising ``DocumentParseError`` when it is not well-formed."""

    try:
        return etree.parse(str(path), _hardened_parser())
    except etree.XMLSyntaxError as exc:
        line, column = exc.position if exc.position else (None, None)
        raise DocumentParseError(path, exc.msg or str(exc), line=line, column=column) from exc
    except OSError as exc:
        raise DocumentParseError(path, str(exc)) from exc


def load_schema(path: Path) -> etree.XMLSchema:
    """Compile the XSD at ``path``."""

    try:
        schema_document = etree.parse(str(path), _hardened_parser())
        return etree.XMLSchema(schema_document)
    except (etree.XMLSyntaxError, etree.XMLSchemaParseError, OSError) as exc:
        raise SchemaLoadError(path, str(exc)) from exc


def validate_document(document: etree._ElementTree, schema: etree.XMLSchema) -> ValidationResult:
    """
    Validate the whole document against ``schema``.

    Returns every violation reported by the schema, or an empty result when the
    document is valid. The document is never partially accepted.
    """

    if schema.validate(document):
        return ValidationResult()
    violations = tuple(
        SchemaViolation(line=entry.line, column=entry.column, message=entry.message) for entry in schema.error_log
    )
    if not violations:  # pragma: no cover - lxml always populates the log on failure
        violations = (SchemaViolation(line=None, column=None, message="Document failed schema validation."),)
    return ValidationResult(violations=violations)
