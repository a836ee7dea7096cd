"""
Per-record outcomes, the run summary, and the plain-text artifacts written from them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable

from childcare_app.models.importer import ImportRunStatus


class OutcomeStatus(str, enum.Enum):
    IMPORTED = "imported"
    SKIPPED = "skipped"
    ERROR = "error"


ALREADY_IMPORTED = "already imported"


@dataclass(frozen=True)
class ImportOutcome:
    sequence_number: int
    natural_key: str | None
    status: OutcomeStatus
    reason: str | None = None
    warnings: tuple[str, ...] = ()


@dataclass
class ImportSummary:
    """Counters and artifact locations for a finished run."""

    entity: str
    imported: int = 0
    skipped: int = 0
    errors: int = 0
    families_created: int = 0
    preview: bool = False
    state: ImportRunStatus = ImportRunStatus.NOT_STARTED
    completed_at: datetime | None = None
    audit_log_path: Path | None = None
    summary_path: Path | None = None
    run_id: int | None = None
    outcomes: list[ImportOutcome] = field(default_factory=list)

    @property
    def total_processed(self) -> int:
        return self.imported + self.skipped + self.errors

    def record(self, outcome: ImportOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.status is OutcomeStatus.IMPORTED:
            self.imported += 1
        elif outcome.status is OutcomeStatus.SKIPPED:
            self.skipped += 1
        else:
            self.errors += 1

    @property
    def warning_count(self) -> int:
        return sum(len(outcome.warnings) for outcome in self.outcomes)


def render_summary(summary: ImportSummary) -> str:
    completed = summary.completed_at.isoformat() if summary.completed_at else "n/a"
    lines = [
        "Legacy Import Summary" + (" (preview)" if summary.preview else ""),
        f"Entity: {summary.entity}",
        f"State: {summary.state.value}",
        f"Completed: {completed}",
        f"Imported: {summary.imported}",
        f"Skipped: {summary.skipped}",
        f"Errors: {summary.errors}",
        f"Families created: {summary.families_created}",
        f"Total processed: {summary.total_processed}",
    ]
    return "\n".join(lines) + "\n"


def format_outcome(outcome: ImportOutcome) -> str:
    key = outcome.natural_key or "<no key>"
    line = f"#{outcome.sequence_number} {key} {outcome.status.value}"
    if outcome.reason:
        line += f": {outcome.reason}"
    if outcome.warnings:
        line += f" [warnings: {'; '.join(outcome.warnings)}]"
    return line


def write_audit_log(path: Path, outcomes: Iterable[ImportOutcome], *, timestamp: datetime) -> None:
    """Append one line per outcome to ``path``, creating parent directories as needed."""

    path.parent.mkdir(parents=True, exist_ok=True)
    stamp = timestamp.isoformat()
    with path.open("a", encoding="utf-8") as handle:
        for outcome in outcomes:
            handle.write(f"{stamp} {format_outcome(outcome)}\n")


def write_summary(path: Path, summary: ImportSummary) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_summary(summary), encoding="utf-8")
