"""
Field coercion for legacy values, driven by ``MappingField`` declarations.

Blank input never becomes an empty string. Required fields and malformed dates
or times fail the record; malformed optional numbers fall back to the declared
default.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from childcare_app.importer.mapping import DEFAULT_DATE_FORMAT, DEFAULT_TIME_FORMAT, MappingField

_TRUE_TOKENS = frozenset({"1", "true", "yes", "y", "-1"})
_FALSE_TOKENS = frozenset({"0", "false", "no", "n"})


class FieldCoercionError(ValueError):
    """Raised when a value cannot be coerced and the record must fail."""

    def __init__(self, field_name: str, message: str) -> None:
        super().__init__(f"{field_name}: {message}")
        self.field_name = field_name


@dataclass
class CoercedValue:
    value: Any
    warnings: list[str] = field(default_factory=list)


def clean_text(value: str | None) -> str | None:
    """Trim ``value`` and collapse blank or whitespace-only strings to ``None``."""

    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def parse_date(value: str, fmt: str) -> datetime:
    return datetime.strptime(value, fmt)


def parse_decimal(value: str) -> Decimal:
    try:
        parsed = Decimal(value.replace(",", ""))
    except InvalidOperation as exc:
        raise ValueError(value) from exc
    if not parsed.is_finite():
        raise ValueError(value)
    return parsed


def parse_float(value: str) -> float:
    parsed = float(value)
    if not math.isfinite(parsed):
        raise ValueError(value)
    return parsed


def parse_bool(value: str) -> bool | None:
    token = value.strip().lower()
    if token in _TRUE_TOKENS:
        return True
    if token in _FALSE_TOKENS:
        return False
    return None


def coerce_field(spec: MappingField, raw: str | None) -> CoercedValue:
    """Coerce one raw legacy value according to ``spec``."""

    label = spec.source
    text = clean_text(raw)
    if text is None:
        if spec.required:
            raise FieldCoercionError(label, "required field is missing or blank")
        return CoercedValue(spec.default)

    if spec.type == "text":
        if spec.max_length is not None and len(text) > spec.max_length:
            return CoercedValue(
                text[: spec.max_length],
                [f"{label} truncated from {len(text)} to {spec.max_length} characters"],
            )
        return CoercedValue(text)

    if spec.type == "date":
        fmt = spec.format or DEFAULT_DATE_FORMAT
        try:
            return CoercedValue(parse_date(text, fmt))
        except ValueError as exc:
            raise FieldCoercionError(label, f"'{text}' does not match expected date format {fmt}") from exc

    if spec.type == "time":
        fmt = spec.format or DEFAULT_TIME_FORMAT
        try:
            return CoercedValue(parse_date(text, fmt).time())
        except ValueError as exc:
            raise FieldCoercionError(label, f"'{text}' does not match expected time format {fmt}") from exc

    if spec.type == "boolean":
        parsed = parse_bool(text)
        if parsed is None:
            return CoercedValue(spec.default, [f"{label} value '{text}' is not a boolean; using default"])
        return CoercedValue(parsed)

    parsers = {"decimal": parse_decimal, "integer": int, "float": parse_float}
    try:
        return CoercedValue(parsers[spec.type](text))
    except ValueError as exc:
        if spec.required:
            raise FieldCoercionError(label, f"'{text}' is not a valid {spec.type}") from exc
        return CoercedValue(spec.default, [f"{label} value '{text}' is not a valid {spec.type}; using default"])
