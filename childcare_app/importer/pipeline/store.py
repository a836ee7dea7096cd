"""
Persistence collaborator used by the import orchestrator.

``ImportStore`` is the seam the pipeline depends on; ``SQLAlchemyImportStore``
is the production implementation over the Flask-SQLAlchemy session.
"""

from __future__ import annotations

import abc
import dataclasses
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from childcare_app.audit import AuditEntityType, AuditService
from childcare_app.models import Activity, ClassGroup, Family, ImportRun, School, Student, db

from .mapper import FamilyReference, NormalizedClassGroup, NormalizedStudent


class ImportStore(abc.ABC):
    """Operations the orchestrator needs from the target store."""

    @abc.abstractmethod
    def exists(self, entity_type: str, natural_key: str) -> bool: ...

    @abc.abstractmethod
    def insert(self, entity: Any, *, family_id: int | None = None) -> int: ...

    @abc.abstractmethod
    def insert_family(self, reference: FamilyReference, *, name: str, auto_created: bool = True) -> int: ...

    @abc.abstractmethod
    def families(self) -> Sequence[tuple[int, str]]: ...

    @abc.abstractmethod
    def log_changes(
        self,
        entity_type: AuditEntityType,
        entity_id: int,
        changes: dict[str, tuple[object | None, object | None]],
        changed_by: str,
    ) -> None: ...

    @abc.abstractmethod
    def record_run(self, **values: Any) -> int: ...

    @abc.abstractmethod
    def transaction(self) -> Any:
        """Context manager committing on success and rolling back on error."""

    @abc.abstractmethod
    def release(self) -> None:
        """Drop any uncommitted work and return the connection."""

    @abc.abstractmethod
    def count(self, entity_type: str) -> int: ...

    @abc.abstractmethod
    def sample(self, entity_type: str, limit: int) -> Sequence[Any]: ...


@dataclasses.dataclass(frozen=True)
class _EntityTable:
    model: type
    key_column: Any
    key_parser: Callable[[str], Any]


class SQLAlchemyImportStore(ImportStore):
    """``ImportStore`` backed by the application's SQLAlchemy session."""

    def __init__(self, session: Session | None = None):
        self.session: Session = session or db.session
        self.audit = AuditService(self.session)
        self._tables = {
            "student": _EntityTable(Student, Student.reference, str),
            "activity": _EntityTable(Activity, Activity.legacy_id, int),
            "school": _EntityTable(School, School.legacy_id, int),
            "class_group": _EntityTable(ClassGroup, ClassGroup.legacy_code, str),
        }

    def _table(self, entity_type: str) -> _EntityTable:
        try:
            return self._tables[entity_type]
        except KeyError:
            raise ValueError(f"Unsupported entity type '{entity_type}'.") from None

    def exists(self, entity_type: str, natural_key: str) -> bool:
        table = self._table(entity_type)
        try:
            key = table.key_parser(natural_key)
        except (TypeError, ValueError):
            return False
        query = self.session.query(table.model.id).filter(table.key_column == key)
        return self.session.query(query.exists()).scalar()

    def insert(self, entity: Any, *, family_id: int | None = None) -> int:
        table = self._table(entity.entity_type)
        values = {
            field.name: getattr(entity, field.name) for field in dataclasses.fields(entity) if field.name != "family"
        }
        if isinstance(entity, NormalizedStudent):
            values["family_id"] = family_id
        elif isinstance(entity, NormalizedClassGroup):
            school = self.session.query(School.id).filter(School.legacy_id == entity.school_legacy_id)
            values["school_id"] = school.scalar()
        row = table.model(**values)
        self.session.add(row)
        self.session.flush()
        return row.id

    def insert_family(self, reference: FamilyReference, *, name: str, auto_created: bool = True) -> int:
        family = Family(
            family_name=name,
            primary_contact_name=reference.primary_contact_name,
            phone=reference.phone,
            email=reference.email,
            address=reference.address,
            notes=f"Imported from legacy data on {datetime.now(timezone.utc):%Y-%m-%d}",
            is_active=True,
            auto_created=auto_created,
        )
        self.session.add(family)
        self.session.flush()
        return family.id

    def natural_keys(self, entity_type: str) -> set[Any]:
        table = self._table(entity_type)
        return {row[0] for row in self.session.query(table.key_column)}

    def families(self) -> list[tuple[int, str]]:
        rows = self.session.query(Family.id, Family.family_name).order_by(Family.id)
        return [(row.id, row.family_name) for row in rows]

    def log_changes(
        self,
        entity_type: AuditEntityType,
        entity_id: int,
        changes: dict[str, tuple[object | None, object | None]],
        changed_by: str,
    ) -> None:
        self.audit.log_changes(entity_type, entity_id, changes, changed_by)

    def record_run(self, **values: Any) -> int:
        run = ImportRun(**values)
        self.session.add(run)
        self.session.flush()
        return run.id

    @contextmanager
    def transaction(self) -> Iterator["SQLAlchemyImportStore"]:
        try:
            yield self
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def release(self) -> None:
        # db.session is a scoped_session; ask the session it proxies.
        session = self.session() if callable(self.session) else self.session
        if session.in_transaction():
            session.rollback()

    def count(self, entity_type: str) -> int:
        model = Family if entity_type == "family" else self._table(entity_type).model
        return self.session.query(func.count(model.id)).scalar() or 0

    def sample(self, entity_type: str, limit: int) -> list[Any]:
        model = self._table(entity_type).model
        return list(self.session.query(model).order_by(model.id).limit(limit))

    def recent_runs(self, limit: int) -> list[ImportRun]:
        return list(self.session.query(ImportRun).order_by(ImportRun.started_at.desc(), ImportRun.id.desc()).limit(limit))

