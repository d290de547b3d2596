"""
MediStock audit — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Load history (and medicine names) from files.
  4. Normalize → filter → aggregate / export.
  5. Report result to stdout.

Install and run::

    pip install -e .
    medistock-audit --help
    medistock-audit validate-config
    medistock-audit classify "Ajustement stock"
    medistock-audit history --kind adjustment --period month
    medistock-audit stats --medicines data/medicines.json
    medistock-audit export-csv --output exports/mouvements.csv
    medistock-audit export-report --author "Dr Martin" --output exports/rapport.json
"""

from __future__ import annotations

import json
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from medistock_audit.taxonomy.movement_taxonomy import MovementKind
from medistock_audit.utils.time_utils import DateRangePreset

app = typer.Typer(
    name="medistock-audit",
    help="MediStock audit trail — stock movement reconstruction, statistics and export.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from medistock_audit.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from medistock_audit.utils.logging import configure_logging
    configure_logging(config.logging)


def _load_movements_or_exit(history_file: Optional[str], config):
    """Load and normalize the history file, exiting on input errors."""
    from medistock_audit.audit.normalizer import normalize_entries
    from medistock_audit.ingestion.history_file import load_history

    path = Path(history_file or config.data.history_file)
    try:
        entries = load_history(path)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    return normalize_entries(entries)


def _load_names(medicines_file: Optional[str], config) -> dict[str, str]:
    """Load medicine names; a missing default file yields an empty map."""
    from medistock_audit.ingestion.history_file import load_medicine_names

    path = Path(medicines_file or config.data.medicines_file)
    if medicines_file is None and not path.exists():
        return {}
    try:
        return load_medicine_names(path)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _parse_datetime_or_exit(value: Optional[str], option: str) -> Optional[datetime]:
    from medistock_audit.ingestion.history_file import parse_timestamp

    if value is None:
        return None
    try:
        return parse_timestamp(value)
    except ValueError as exc:
        typer.echo(f"[ERROR] {option}: {exc}", err=True)
        raise typer.Exit(code=1)


def _build_criteria_or_exit(
    kind: Optional[MovementKind],
    search: Optional[str],
    period: DateRangePreset,
    start: Optional[str],
    end: Optional[str],
):
    """Build ``FilterCriteria`` from CLI options.

    ``--start/--end`` take precedence over ``--period``; a missing bound is
    open-ended.

    Returns:
        ``(criteria, period_label)``.
    """
    from medistock_audit.models.movement import DateRange, FilterCriteria
    from medistock_audit.utils.time_utils import preset_range, utcnow

    start_dt = _parse_datetime_or_exit(start, "--start")
    end_dt = _parse_datetime_or_exit(end, "--end")

    if start_dt is not None or end_dt is not None:
        lower = start_dt or datetime.min.replace(tzinfo=(end_dt or start_dt).tzinfo)
        upper = end_dt or datetime.max.replace(tzinfo=(start_dt or end_dt).tzinfo)
        try:
            date_range = DateRange(start=lower, end=upper)
        except ValueError as exc:
            typer.echo(f"[ERROR] Invalid date range: {exc}", err=True)
            raise typer.Exit(code=1)
        label = f"{start or '…'} → {end or '…'}"
    else:
        date_range = preset_range(period, utcnow())
        label = period.label

    criteria = FilterCriteria(date_range=date_range, kind=kind, search_text=search)
    return criteria, label


_KIND_OPTION = typer.Option(None, "--kind", help="Only this movement kind.")
_SEARCH_OPTION = typer.Option(
    None, "--search", help="Case-insensitive text matched against reason and action."
)
_PERIOD_OPTION = typer.Option(
    DateRangePreset.ALL, "--period", help="Relative period (ignored with --start/--end)."
)
_START_OPTION = typer.Option(None, "--start", help="Inclusive start (ISO 8601).")
_END_OPTION = typer.Option(None, "--end", help="Inclusive end (ISO 8601).")
_HISTORY_OPTION = typer.Option(
    None, "--history", help="History export (.json/.csv). Default: config data.history_file."
)
_MEDICINES_OPTION = typer.Option(
    None, "--medicines", help="Medicines JSON for names. Default: config data.medicines_file."
)
_CONFIG_OPTION = typer.Option(None, "--config", help="Path to TOML config file.")


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = _CONFIG_OPTION,
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  History file:     {config.data.history_file}")
    typer.echo(f"  Medicines file:   {config.data.medicines_file}")
    typer.echo(f"  Export dir:       {config.export.output_dir or '(system temp)'}")
    typer.echo(f"  Top subjects:     {config.statistics.top_subjects_limit}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str, ensure_ascii=False))


@app.command("classify")
def classify_label(
    labels: list[str] = typer.Argument(..., help="Action label(s) to classify."),
) -> None:
    """Print the movement kind of each action label."""
    from medistock_audit.audit.classifier import classify

    for label in labels:
        kind = classify(label)
        typer.echo(f"{label!r} -> {kind.value} ({kind.label})")


@app.command("history")
def history(
    kind: Optional[MovementKind] = _KIND_OPTION,
    search: Optional[str] = _SEARCH_OPTION,
    period: DateRangePreset = _PERIOD_OPTION,
    start: Optional[str] = _START_OPTION,
    end: Optional[str] = _END_OPTION,
    limit: int = typer.Option(50, "--limit", help="Max rows to print (0 = all)."),
    history_file: Optional[str] = _HISTORY_OPTION,
    medicines_file: Optional[str] = _MEDICINES_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """List normalized stock movements matching the filters, in log order."""
    from medistock_audit.audit.filters import filter_movements
    from medistock_audit.reporting.formatters import format_movements_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    movements = _load_movements_or_exit(history_file, config)
    names = _load_names(medicines_file, config)
    criteria, _ = _build_criteria_or_exit(kind, search, period, start, end)

    selected = filter_movements(movements, criteria)
    typer.echo(
        format_movements_table(
            selected,
            names,
            limit=limit or None,
            deleted_subject_label=config.export.deleted_subject_label,
        )
    )


@app.command("stats")
def stats(
    since: Optional[str] = typer.Option(
        None,
        "--since",
        help="Window start (ISO 8601). Default: start of the current month.",
    ),
    kind: Optional[MovementKind] = _KIND_OPTION,
    search: Optional[str] = _SEARCH_OPTION,
    history_file: Optional[str] = _HISTORY_OPTION,
    medicines_file: Optional[str] = _MEDICINES_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Show movement counts and the most active medicines for a window."""
    from medistock_audit.audit.aggregator import aggregate, mapping_resolver
    from medistock_audit.audit.filters import filter_movements
    from medistock_audit.models.movement import FilterCriteria
    from medistock_audit.reporting.formatters import format_statistics
    from medistock_audit.utils.time_utils import start_of_month, utcnow

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    movements = _load_movements_or_exit(history_file, config)
    names = _load_names(medicines_file, config)
    window_start = _parse_datetime_or_exit(since, "--since") or start_of_month(utcnow())

    selected = filter_movements(movements, FilterCriteria(kind=kind, search_text=search))
    result = aggregate(
        selected,
        window_start,
        mapping_resolver(names),
        top_n=config.statistics.top_subjects_limit,
    )
    typer.echo(format_statistics(result, f"depuis {window_start:%d/%m/%Y}"))


@app.command("export-csv")
def export_csv_command(
    kind: Optional[MovementKind] = _KIND_OPTION,
    search: Optional[str] = _SEARCH_OPTION,
    period: DateRangePreset = _PERIOD_OPTION,
    start: Optional[str] = _START_OPTION,
    end: Optional[str] = _END_OPTION,
    output: Optional[str] = typer.Option(
        None,
        "--output",
        help="Copy the artifact to this path (the temporary file is then removed).",
    ),
    history_file: Optional[str] = _HISTORY_OPTION,
    medicines_file: Optional[str] = _MEDICINES_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Export filtered stock movements to CSV."""
    from medistock_audit.audit.filters import filter_movements
    from medistock_audit.reporting.export import ExportError, export_csv

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    movements = _load_movements_or_exit(history_file, config)
    names = _load_names(medicines_file, config)
    criteria, _ = _build_criteria_or_exit(kind, search, period, start, end)
    selected = filter_movements(movements, criteria)

    out_dir = Path(config.export.output_dir) if config.export.output_dir else None
    try:
        path = export_csv(
            selected,
            names,
            directory=out_dir,
            date_format=config.export.date_format,
            time_format=config.export.time_format,
            deleted_subject_label=config.export.deleted_subject_label,
        )
    except ExportError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    final = _handoff_or_exit(path, output)
    typer.echo(f"[OK] {len(selected)} movements exported to {final}")


@app.command("export-report")
def export_report(
    author: Optional[str] = typer.Option(None, "--author", help="Report author display name."),
    email: Optional[str] = typer.Option(None, "--email", help="Author email (used if no name)."),
    kind: Optional[MovementKind] = _KIND_OPTION,
    search: Optional[str] = _SEARCH_OPTION,
    period: DateRangePreset = _PERIOD_OPTION,
    start: Optional[str] = _START_OPTION,
    end: Optional[str] = _END_OPTION,
    since: Optional[str] = typer.Option(
        None, "--since", help="Statistics window start. Default: start of the current month."
    ),
    output: Optional[str] = typer.Option(None, "--output", help="Copy the artifact to this path."),
    history_file: Optional[str] = _HISTORY_OPTION,
    medicines_file: Optional[str] = _MEDICINES_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Build the stock-movement report request and render it (JSON renderer)."""
    from medistock_audit.audit.aggregator import aggregate, mapping_resolver
    from medistock_audit.audit.filters import filter_movements
    from medistock_audit.reporting.export import (
        ExportError,
        build_report_request,
        describe_filter,
        export_pdf,
        resolve_author_name,
    )
    from medistock_audit.reporting.renderers import JsonReportRenderer
    from medistock_audit.utils.time_utils import start_of_month, utcnow

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    movements = _load_movements_or_exit(history_file, config)
    names = _load_names(medicines_file, config)
    criteria, period_label = _build_criteria_or_exit(kind, search, period, start, end)
    selected = filter_movements(movements, criteria)

    window_start = _parse_datetime_or_exit(since, "--since") or start_of_month(utcnow())
    statistics = aggregate(
        selected,
        window_start,
        mapping_resolver(names),
        top_n=config.statistics.top_subjects_limit,
    )
    request = build_report_request(
        selected,
        statistics,
        filter_label=describe_filter(kind, period_label),
        author_name=resolve_author_name(author, email, config.export.default_author_name),
        subject_names=names,
    )

    out_dir = Path(config.export.output_dir) if config.export.output_dir else None
    try:
        path = export_pdf(request, JsonReportRenderer(), directory=out_dir)
    except ExportError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    final = _handoff_or_exit(path, output)
    typer.echo(f"[OK] Report ({len(selected)} movements) written to {final}")


def _handoff_or_exit(path: Path, output: Optional[str]) -> Path:
    """Move the artifact to ``output`` if given; otherwise leave it in place."""
    from medistock_audit.reporting.export import scoped_export

    if output is None:
        return path
    destination = Path(output)
    with scoped_export(path) as artifact:
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(artifact, destination)
        except OSError as exc:
            typer.echo(f"[ERROR] Could not write {destination}: {exc}", err=True)
            raise typer.Exit(code=1)
    return destination


if __name__ == "__main__":
    app()
