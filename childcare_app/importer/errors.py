"""
Exceptions that abort an entire import run.

Anything raised from here surfaces to the caller untouched; per-record
problems never use these types and are folded into run outcomes instead.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class FatalImportError(Exception):
    """Base class for conditions that abort a run before any record is written."""


class SourceNotFoundError(FatalImportError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Source XML file not found at {path}")
        self.path = path


class SchemaNotFoundError(FatalImportError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"XSD schema file not found at {path}")
        self.path = path


class SchemaLoadError(FatalImportError):
    """Raised when the XSD itself cannot be parsed or compiled."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"Unable to load XSD schema {path}: {message}")
        self.path = path


class DocumentParseError(FatalImportError):
    """Raised when the source document is not well-formed XML."""

    def __init__(self, path: Path, message: str, line: int | None = None, column: int | None = None) -> None:
        location = f" (line {line}, column {column})" if line is not None else ""
        super().__init__(f"Malformed XML in {path}{location}: {message}")
        self.path = path
        self.line = line
        self.column = column


class SchemaValidationError(FatalImportError):
    """Raised when a well-formed document violates its XSD."""

    def __init__(self, path: Path, violations: Sequence) -> None:
        count = len(violations)
        first = f" First: {violations[0]}" if violations else ""
        super().__init__(f"{path} failed schema validation with {count} violation(s).{first}")
        self.path = path
        self.violations = tuple(violations)
