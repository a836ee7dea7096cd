"""
Record mapping from ``LegacyRecord`` bags to typed, normalized entities.

Mappers are pure: they never touch the database. Each mapping either yields an
entity or a failure reason naming the offending field; it never raises for bad
data.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime, time
from decimal import Decimal
from typing import Any, Iterable

from childcare_app.audit import AuditEntityType
from childcare_app.importer.mapping import MappingLoadError, MappingSpec

from .coercion import FieldCoercionError, clean_text, coerce_field
from .records import LegacyRecord


@dataclass(frozen=True)
class FamilyReference:
    """Free-text family details carried on a student record, prior to reconciliation."""

    name: str
    primary_contact_name: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None


@dataclass(frozen=True)
class NormalizedStudent:
    reference: str
    first_name: str
    date_of_birth: datetime
    last_name: str | None = None
    gender: str | None = None
    language: str | None = None
    account_person_name: str | None = None
    account_person_surname: str | None = None
    account_person_cellphone: str | None = None
    account_person_email: str | None = None
    relation: str | None = None
    mother_name: str | None = None
    mother_surname: str | None = None
    mother_cell: str | None = None
    mother_email: str | None = None
    father_name: str | None = None
    father_surname: str | None = None
    father_cell: str | None = None
    father_email: str | None = None
    address1: str | None = None
    address2: str | None = None
    postal_code: str | None = None
    school_name: str | None = None
    class_group_code: str | None = None
    grade: str | None = None
    teacher: str | None = None
    truck: str | None = None
    start_classes: datetime | None = None
    family_label: str | None = None
    sequence: str | None = None
    financial_code: str | None = None
    charge: Decimal | None = None
    deposit: str | None = None
    status: str | None = None
    print_id_card: bool = False
    cnt: float | None = None
    online_entry: int = 0
    general_note: str | None = None
    legacy_created: datetime | None = None
    legacy_updated: datetime | None = None
    family: FamilyReference | None = None

    entity_type = "student"
    audit_type = AuditEntityType.STUDENT

    @property
    def natural_key(self) -> str:
        return self.reference


@dataclass(frozen=True)
class NormalizedActivity:
    legacy_id: int
    code: str | None = None
    name: str | None = None
    description: str | None = None
    folder: str | None = None
    grade_level: str | None = None
    icon: str | None = None

    entity_type = "activity"
    audit_type = AuditEntityType.ACTIVITY

    @property
    def natural_key(self) -> str:
        return str(self.legacy_id)


@dataclass(frozen=True)
class NormalizedSchool:
    legacy_id: int
    name: str
    short_name: str | None = None
    description: str | None = None
    truck_number: int | None = None
    price: Decimal | None = None
    fee_description: str | None = None
    formula: Decimal | None = None
    visit_day: str | None = None
    visit_sequence: str | None = None
    contact_person: str | None = None
    contact_cell: str | None = None
    telephone: str | None = None
    fax: str | None = None
    email: str | None = None
    circulars_email: str | None = None
    address: str | None = None
    address2: str | None = None
    headmaster: str | None = None
    headmaster_cell: str | None = None
    afterschool1_name: str | None = None
    afterschool1_contact: str | None = None
    afterschool2_name: str | None = None
    afterschool2_contact: str | None = None
    money_message: str | None = None
    print_invoice: bool = False
    language: str | None = None
    import_flag: bool = False
    safe_notes: str | None = None
    web_page: str | None = None
    portal_link: str | None = None

    entity_type = "school"
    audit_type = AuditEntityType.SCHOOL

    @property
    def natural_key(self) -> str:
        return str(self.legacy_id)


@dataclass(frozen=True)
class NormalizedClassGroup:
    legacy_code: str
    name: str
    school_legacy_id: int
    day_of_week: int = 1
    start_time: time = time(8, 0)
    end_time: time = time(9, 0)
    sequence: int = 1
    description: str | None = None
    day_truck: str | None = None
    truck_number: int | None = None
    evaluate: bool = False
    notes: str | None = None
    import_flag: bool = False
    group_message: str | None = None
    send_certificates: str | None = None
    money_message: str | None = None
    ixl: str | None = None

    entity_type = "class_group"
    audit_type = AuditEntityType.CLASS_GROUP

    @property
    def natural_key(self) -> str:
        return self.legacy_code


@dataclass(frozen=True)
class MappingResult:
    natural_key: str | None
    entity: Any | None = None
    failure: str | None = None
    warnings: tuple[str, ...] = ()
    # Set when the legacy row opts out of import; neither an entity nor a failure.
    skip_reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.entity is not None


def _check_targets(spec: MappingSpec, entity_cls: type, derived: Iterable[str] = ()) -> None:
    entity_fields = dataclasses.fields(entity_cls)
    known = {field.name for field in entity_fields}
    unknown = sorted(field.target for field in spec.fields if field.target not in known)
    if unknown:
        raise MappingLoadError(
            f"Mapping {spec.path} declares targets unknown to {entity_cls.__name__}: {', '.join(unknown)}"
        )
    declared = {field.target for field in spec.fields} | set(derived)
    missing = sorted(
        field.name
        for field in entity_fields
        if field.name not in declared
        and field.default is dataclasses.MISSING
        and field.default_factory is dataclasses.MISSING
    )
    if missing:
        raise MappingLoadError(f"Mapping {spec.path} does not map required attributes: {', '.join(missing)}")


def _map_fields(spec: MappingSpec, record: LegacyRecord) -> tuple[dict[str, Any], list[str]]:
    values: dict[str, Any] = {}
    warnings: list[str] = []
    for field in spec.fields:
        coerced = coerce_field(field, record.get(field.source))
        values[field.target] = coerced.value
        warnings.extend(coerced.warnings)
    return values, warnings


def _natural_key_of(spec: MappingSpec, record: LegacyRecord) -> str | None:
    return clean_text(record.get(spec.field_for(spec.natural_key).source))


def _first_present(*values: str | None) -> str | None:
    for value in values:
        if value:
            return value
    return None


def extract_family_reference(values: dict[str, Any]) -> FamilyReference | None:
    """Build the family details for a student, or ``None`` when no family is named."""

    name = values.get("family_label")
    if not name:
        return None
    address_parts = [values.get(key) for key in ("address1", "address2", "postal_code")]
    address = ", ".join(part for part in address_parts if part) or None
    return FamilyReference(
        name=name,
        primary_contact_name=_first_present(
            values.get("account_person_name"), values.get("mother_name"), values.get("father_name")
        ),
        phone=_first_present(
            values.get("account_person_cellphone"), values.get("mother_cell"), values.get("father_cell")
        ),
        email=_first_present(
            values.get("account_person_email"), values.get("mother_email"), values.get("father_email")
        ),
        address=address,
    )


class StudentMapper:
    """Maps legacy Children records to ``NormalizedStudent``."""

    def __init__(self, spec: MappingSpec):
        _check_targets(spec, NormalizedStudent)
        self.spec = spec

    def map(self, record: LegacyRecord) -> MappingResult:
        natural_key = _natural_key_of(self.spec, record)
        try:
            values, warnings = _map_fields(self.spec, record)
        except FieldCoercionError as exc:
            return MappingResult(natural_key=natural_key, failure=str(exc))

        student = NormalizedStudent(**values, family=extract_family_reference(values))
        return MappingResult(natural_key=student.natural_key, entity=student, warnings=tuple(warnings))


class ActivityMapper:
    """Maps legacy Activity records to ``NormalizedActivity``."""

    LARGE_ICON_THRESHOLD = 100_000
    _IMAGE_PREFIXES = ("/9j/", "iVBOR")  # base64 JPEG / PNG signatures

    def __init__(self, spec: MappingSpec):
        _check_targets(spec, NormalizedActivity)
        self.spec = spec

    def map(self, record: LegacyRecord) -> MappingResult:
        natural_key = _natural_key_of(self.spec, record)
        try:
            values, warnings = _map_fields(self.spec, record)
        except FieldCoercionError as exc:
            return MappingResult(natural_key=natural_key, failure=str(exc))

        activity = NormalizedActivity(**values)
        icon = activity.icon
        if icon:
            if len(icon) > self.LARGE_ICON_THRESHOLD:
                warnings.append(f"Large icon data detected ({len(icon) // 1024}KB base64)")
            if not icon.startswith(self._IMAGE_PREFIXES):
                warnings.append("Icon data does not start with a JPEG/PNG signature; it may carry an OLE wrapper")
        return MappingResult(natural_key=activity.natural_key, entity=activity, warnings=tuple(warnings))


class SchoolMapper:
    """Maps legacy School records to ``NormalizedSchool``."""

    def __init__(self, spec: MappingSpec):
        _check_targets(spec, NormalizedSchool, derived=("name",))
        self.spec = spec

    def map(self, record: LegacyRecord) -> MappingResult:
        natural_key = _natural_key_of(self.spec, record)
        try:
            values, warnings = _map_fields(self.spec, record)
        except FieldCoercionError as exc:
            return MappingResult(natural_key=natural_key, failure=str(exc))

        name = _first_present(values.get("description"), values.get("short_name"))
        if name is None:
            warnings.append(f"School {values['legacy_id']} is missing a description and short name.")
        school = NormalizedSchool(**values, name=name or "")
        return MappingResult(natural_key=school.natural_key, entity=school, warnings=tuple(warnings))


class ClassGroupMapper:
    """
    Maps legacy Class Group records to ``NormalizedClassGroup``.

    Rows exported with ``Import`` unset are skipped rather than failed. When
    ``valid_school_ids`` is non-empty, rows pointing at any other school fail.
    """

    DEFAULT_START = time(8, 0)
    DEFAULT_END = time(9, 0)
    _WEEKDAYS = range(1, 6)

    def __init__(self, spec: MappingSpec, valid_school_ids: Iterable[int] = ()):
        _check_targets(spec, NormalizedClassGroup, derived=("name", "truck_number"))
        self.spec = spec
        self.valid_school_ids = frozenset(valid_school_ids)

    def map(self, record: LegacyRecord) -> MappingResult:
        natural_key = _natural_key_of(self.spec, record)
        try:
            values, warnings = _map_fields(self.spec, record)
        except FieldCoercionError as exc:
            return MappingResult(natural_key=natural_key, failure=str(exc))

        if not values.get("import_flag"):
            return MappingResult(natural_key=natural_key, skip_reason="import flag is false")

        school_id = values["school_legacy_id"]
        if self.valid_school_ids and school_id not in self.valid_school_ids:
            return MappingResult(
                natural_key=natural_key,
                failure=f"School Id: class group references unknown school {school_id}",
            )

        values["day_of_week"] = self._day_of_week(values.get("day_of_week"), warnings)
        values["sequence"] = self._sequence(values.get("sequence"))
        start = values.get("start_time") or self.DEFAULT_START
        end = values.get("end_time") or self.DEFAULT_END
        if end <= start:
            return MappingResult(natural_key=natural_key, failure="End Time: must be after Start Time")
        values["start_time"], values["end_time"] = start, end

        day_truck = values.get("day_truck")
        group = NormalizedClassGroup(
            **values,
            name=_first_present(values.get("description"), values["legacy_code"]),
            truck_number=int(day_truck) if day_truck and day_truck.isdigit() else None,
        )
        return MappingResult(natural_key=group.natural_key, entity=group, warnings=tuple(warnings))

    def _day_of_week(self, raw: str | None, warnings: list[str]) -> int:
        if raw is None:
            return 1
        if raw.isdigit() and int(raw) in self._WEEKDAYS:
            return int(raw)
        warnings.append(f"DayId value '{raw}' is not a weekday number; defaulting to Monday")
        return 1

    @staticmethod
    def _sequence(raw: str | None) -> int:
        if raw is None or not raw.lstrip("-").isdigit():
            return 1
        return max(int(raw), 1)
