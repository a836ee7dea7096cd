"""
CLI commands for the legacy XML importer.

Console output is limited to final counts; per-record reasons are written to
the audit log file when one is requested.
"""

from __future__ import annotations

import signal
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

import click
from flask.cli import ScriptInfo

from childcare_app.importer.errors import FatalImportError
from childcare_app.importer.mapping import MappingLoadError
from childcare_app.importer.pipeline import ImportSummary, SQLAlchemyImportStore
from childcare_app.importer.registry import build_orchestrator, get_entity_registry
from childcare_app.utils.importer import get_default_sources, get_importer_entities, is_importer_enabled


@click.group(name="importer", invoke_without_command=True)
@click.pass_context
def importer_cli(ctx):
    """
    Legacy XML import commands.

    Displays configured entity kinds when invoked without a subcommand.
    """
    info = ctx.ensure_object(ScriptInfo)
    app = info.load_app()
    if not is_importer_enabled(app):
        raise click.ClickException(
            "Importer is disabled via IMPORTER_ENABLED=false. " "Enable it to run importer CLI commands."
        )
    if ctx.invoked_subcommand is None:
        entities = get_importer_entities(app)
        if not entities:
            click.echo("No importer entities configured.")
        else:
            click.echo("Configured importer entities:")
            for entity in entities:
                click.echo(f"  - {entity}")


def get_disabled_importer_group() -> click.Group:
    """
    Return a minimal command group that informs the operator the importer is disabled.
    """

    @click.group(name="importer", invoke_without_command=True)
    def disabled_group():
        raise click.ClickException("Importer commands are unavailable because IMPORTER_ENABLED=false.")

    return disabled_group


@contextmanager
def _cancel_on_interrupt() -> Iterator[threading.Event]:
    """Turn Ctrl+C into a between-records cancellation for the duration of a run."""
    cancel_event = threading.Event()
    if threading.current_thread() is not threading.main_thread():
        yield cancel_event
        return

    def _handler(signum, frame):
        click.echo("Cancellation requested; finishing the current record...", err=True)
        cancel_event.set()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield cancel_event
    finally:
        signal.signal(signal.SIGINT, previous)


def _default_artifact_paths(app, entity: str) -> tuple[Optional[Path], Optional[Path]]:
    artifact_dir = app.config.get("IMPORTER_ARTIFACT_DIR")
    if not artifact_dir:
        return None, None
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
    base = Path(artifact_dir)
    return base / f"{entity}_{stamp}_audit.log", base / f"{entity}_{stamp}_summary.txt"


def _format_summary(summary: ImportSummary) -> str:
    heading = "Preview (no changes written)" if summary.preview else f"Run {summary.run_id}"
    lines = [
        f"{heading} for {summary.entity} finished with state {summary.state.value}.",
        f"  imported        : {summary.imported}",
        f"  skipped         : {summary.skipped}",
        f"  errors          : {summary.errors}",
        f"  families_created: {summary.families_created}",
        f"  total_processed : {summary.total_processed}",
    ]
    if summary.audit_log_path:
        lines.append(f"  audit_log       : {summary.audit_log_path}")
    if summary.summary_path:
        lines.append(f"  summary         : {summary.summary_path}")
    return "\n".join(lines)


def _echo_counts(store: SQLAlchemyImportStore, kind: str, title: str) -> None:
    click.echo(f"{title}: {store.count(kind)}")
    if kind == "student":
        click.echo(f"Families: {store.count('family')}")


def _echo_sample(store: SQLAlchemyImportStore, kind: str, limit: int) -> None:
    rows = store.sample(kind, limit)
    if not rows:
        click.echo("No records found.")
        return
    for row in rows:
        if kind == "student":
            family_name = row.family.family_name if row.family else "n/a"
            name = " ".join(part for part in (row.first_name, row.last_name) if part)
            click.echo(f"{row.id}: [{row.reference}] {name} (Family: {family_name})")
        elif kind == "school":
            click.echo(f"{row.id}: [{row.legacy_id}] {row.name or '-'}")
        elif kind == "class_group":
            school_name = row.school.name if row.school else f"school {row.school_legacy_id}"
            click.echo(
                f"{row.id}: [{row.legacy_code}] {row.name} day {row.day_of_week} "
                f"{row.start_time:%H:%M}-{row.end_time:%H:%M} ({school_name})"
            )
        else:
            click.echo(f"{row.id}: [{row.legacy_id}] {row.code or '-'} {row.name or ''}".rstrip())


@importer_cli.command("run")
@click.argument("source", required=False, type=click.Path(path_type=Path, dir_okay=False))
@click.argument("schema", required=False, type=click.Path(path_type=Path, dir_okay=False))
@click.option(
    "--entity",
    type=click.Choice(list(get_entity_registry())),
    default="children",
    show_default=True,
    help="Legacy export kind to import.",
)
@click.option(
    "--audit-log",
    "audit_log",
    type=click.Path(path_type=Path, dir_okay=False),
    help="Append one line per record outcome to this file.",
)
@click.option(
    "--summary",
    "summary_path",
    type=click.Path(path_type=Path, dir_okay=False),
    help="Write the plain-text run summary to this file.",
)
@click.option("--preview", is_flag=True, help="Validate and map every record without writing anything.")
@click.option("--count", "show_count", is_flag=True, help="Print persisted record counts and exit.")
@click.option("--sample", type=click.IntRange(min=1), help="Print the first N persisted records and exit.")
@click.pass_context
def importer_run(
    ctx,
    source: Optional[Path],
    schema: Optional[Path],
    entity: str,
    audit_log: Optional[Path],
    summary_path: Optional[Path],
    preview: bool,
    show_count: bool,
    sample: Optional[int],
):
    """Import a legacy XML export (SOURCE) after validating it against its XSD (SCHEMA)."""
    info = ctx.ensure_object(ScriptInfo)
    app = info.load_app()
    if entity not in get_importer_entities(app):
        raise click.ClickException(f"Entity '{entity}' is not enabled; update IMPORTER_ENTITIES to include it.")

    kind = get_entity_registry()[entity].store_kind
    if show_count or sample:
        store = SQLAlchemyImportStore()
        if show_count:
            _echo_counts(store, kind, get_entity_registry()[entity].title)
        if sample:
            _echo_sample(store, kind, sample)
        return

    default_source, default_schema = get_default_sources(entity, app)
    source = source or (Path(default_source) if default_source else None)
    schema = schema or (Path(default_schema) if default_schema else None)
    if source is None or schema is None:
        raise click.ClickException(f"No SOURCE/SCHEMA given and no default export configured for '{entity}'.")

    if not preview and audit_log is None and summary_path is None:
        audit_log, summary_path = _default_artifact_paths(app, entity)

    try:
        orchestrator = build_orchestrator(entity)
    except MappingLoadError as exc:
        raise click.ClickException(f"Unable to load mapping for '{entity}': {exc}") from exc

    app.logger.info(
        "Legacy import started via CLI",
        extra={
            "importer_entity": entity,
            "importer_source": str(source),
            "importer_schema": str(schema),
            "importer_preview": preview,
        },
    )
    try:
        with _cancel_on_interrupt() as cancel_event:
            summary = orchestrator.run(
                source,
                schema,
                audit_path=None if preview else audit_log,
                summary_path=None if preview else summary_path,
                preview=preview,
                cancel_event=cancel_event,
            )
    except FatalImportError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(_format_summary(summary))


@importer_cli.command("history")
@click.option("-n", "--limit", type=click.IntRange(min=1), help="Number of recent runs to show.")
@click.pass_context
def importer_history(ctx, limit: Optional[int]):
    """Show the most recent import runs."""
    info = ctx.ensure_object(ScriptInfo)
    app = info.load_app()
    limit = limit or app.config.get("IMPORTER_HISTORY_DEFAULT_COUNT", 10)

    runs = SQLAlchemyImportStore().recent_runs(limit)
    if not runs:
        click.echo("No import runs recorded.")
        return

    click.echo(f"{'ID':<6}{'Date':<22}{'Entity':<12}{'Status':<11}{'Imported':>9}{'Skipped':>9}{'Errors':>8}")
    for run in runs:
        started = run.started_at.strftime("%Y-%m-%d %H:%M:%S") if run.started_at else "-"
        click.echo(
            f"{run.id:<6}{started:<22}{run.entity:<12}{run.status.value:<11}"
            f"{run.imported_count:>9}{run.skipped_count:>9}{run.error_count:>8}"
        )
