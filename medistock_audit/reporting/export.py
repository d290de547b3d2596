"""
Export of stock movements: CSV artifact and rendered report.

Both exports take movements in caller order and never re-sort them.

CSV format
----------
Fixed header, one row per movement, plain ``,`` separators and no quoting::

    Date,Heure,Type,Médicament,Changement,Quantité Avant,Quantité Après,Raison
    18/10/2026,09:30,Ajustement,Doliprane 1000mg,+15,50,65,Livraison matinale

Commas inside free-text values (reason, medicine name) are replaced with
``;`` so they cannot shift columns. This is lossy and kept for compatibility
with files already produced by the mobile app.

Artifacts
---------
Every export writes a new uniquely named file (``mouvements_stock_<ts>_*``)
in the temp directory or a caller-supplied directory and returns its path.
The caller owns the file; ``scoped_export`` deletes it on exit. A failed
write or render removes the partial file and raises ``ExportError`` with the
original exception as ``__cause__``. Nothing is retried.
"""

from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence

from medistock_audit.models.movement import PeriodStatistics, StockMovement
from medistock_audit.models.report import DEFAULT_REPORT_TITLE, StockReportRequest
from medistock_audit.reporting.renderers import ReportRenderer
from medistock_audit.taxonomy.movement_taxonomy import (
    ALL_KINDS_FILTER_LABEL,
    MOVEMENT_KIND_FILTER_LABELS,
    MovementKind,
)
from medistock_audit.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

CSV_HEADER: tuple[str, ...] = (
    "Date",
    "Heure",
    "Type",
    "Médicament",
    "Changement",
    "Quantité Avant",
    "Quantité Après",
    "Raison",
)

DEFAULT_DATE_FORMAT = "%d/%m/%Y"
DEFAULT_TIME_FORMAT = "%H:%M"
DELETED_SUBJECT_LABEL = "Médicament supprimé"
DEFAULT_AUTHOR_NAME = "Utilisateur"
ARTIFACT_PREFIX = "mouvements_stock_"


class ExportError(Exception):
    """Writing or rendering an export artifact failed.

    Attributes:
        format: ``"csv"`` or the renderer's format name.
    """

    def __init__(self, message: str, format: str) -> None:
        super().__init__(message)
        self.format = format


# ── CSV ───────────────────────────────────────────────────────────────────────


def build_csv_rows(
    movements: Iterable[StockMovement],
    subject_names: Optional[dict[str, str]] = None,
    date_format: str = DEFAULT_DATE_FORMAT,
    time_format: str = DEFAULT_TIME_FORMAT,
    deleted_subject_label: str = DELETED_SUBJECT_LABEL,
) -> list[list[str]]:
    """Return one list of cell strings per movement (header not included).

    Args:
        movements:             Movements in the order they should appear.
        subject_names:         ``subject_id`` → medicine name.
        date_format:           ``strftime`` pattern for the Date column.
        time_format:           ``strftime`` pattern for the Heure column.
        deleted_subject_label: Name shown for ids missing from ``subject_names``.

    Returns:
        List of rows, each with ``len(CSV_HEADER)`` cells.
    """
    names = subject_names or {}
    rows: list[list[str]] = []
    for m in movements:
        rows.append(
            [
                m.timestamp.strftime(date_format),
                m.timestamp.strftime(time_format),
                m.kind.label,
                _sanitize(names.get(m.subject_id, deleted_subject_label)),
                f"{m.change_amount:+d}",
                str(m.previous_quantity),
                str(m.new_quantity),
                _sanitize(m.reason or ""),
            ]
        )
    return rows


def render_csv(
    movements: Iterable[StockMovement],
    subject_names: Optional[dict[str, str]] = None,
    date_format: str = DEFAULT_DATE_FORMAT,
    time_format: str = DEFAULT_TIME_FORMAT,
    deleted_subject_label: str = DELETED_SUBJECT_LABEL,
) -> str:
    """Return the full CSV text (header + rows, ``\\n`` line endings)."""
    rows = build_csv_rows(
        movements,
        subject_names,
        date_format=date_format,
        time_format=time_format,
        deleted_subject_label=deleted_subject_label,
    )
    lines = [",".join(CSV_HEADER)]
    lines.extend(",".join(row) for row in rows)
    return "\n".join(lines) + "\n"


def export_csv(
    movements: Sequence[StockMovement],
    subject_names: Optional[dict[str, str]] = None,
    directory: Optional[Path] = None,
    date_format: str = DEFAULT_DATE_FORMAT,
    time_format: str = DEFAULT_TIME_FORMAT,
    deleted_subject_label: str = DELETED_SUBJECT_LABEL,
) -> Path:
    """Write movements to a new CSV artifact and return its path.

    Args:
        movements:     Filtered movements, in caller order.
        subject_names: ``subject_id`` → medicine name.
        directory:     Target directory (created if missing); default is the
                       system temp directory.

    Returns:
        Path of the written ``.csv`` file. The caller is responsible for
        deleting it.

    Raises:
        ExportError: If the file cannot be created or written.
    """
    text = render_csv(
        movements,
        subject_names,
        date_format=date_format,
        time_format=time_format,
        deleted_subject_label=deleted_subject_label,
    )
    path = _write_artifact(text.encode("utf-8"), ".csv", directory, "csv")
    logger.info("Exported %d movements to %s", len(movements), path)
    return path


def _sanitize(value: str) -> str:
    return value.replace(",", ";").replace("\r", " ").replace("\n", " ")


# ── Report ────────────────────────────────────────────────────────────────────


def build_report_request(
    movements: Sequence[StockMovement],
    statistics: PeriodStatistics,
    filter_label: str,
    author_name: str,
    subject_names: Optional[dict[str, str]] = None,
    title: str = DEFAULT_REPORT_TITLE,
    generated_at: Optional[datetime] = None,
) -> StockReportRequest:
    """Assemble a ``StockReportRequest``.

    ``subject_names`` is narrowed to the subjects that appear in
    ``movements`` or in the statistics ranking.
    """
    names = subject_names or {}
    wanted = {m.subject_id for m in movements}
    wanted.update(t.subject_id for t in statistics.top_subjects)
    return StockReportRequest(
        title=title,
        movements=list(movements),
        statistics=statistics,
        filter_label=filter_label,
        author_name=author_name,
        subject_names={sid: names[sid] for sid in sorted(wanted) if sid in names},
        generated_at=generated_at or utcnow(),
    )


def export_pdf(
    request: StockReportRequest,
    renderer: ReportRenderer,
    directory: Optional[Path] = None,
) -> Path:
    """Render ``request`` and write the bytes to a new artifact.

    The file suffix comes from ``renderer.file_suffix`` (``".pdf"`` for a PDF
    engine).

    Raises:
        ExportError: If rendering or writing fails.
    """
    suffix = getattr(renderer, "file_suffix", ".pdf")
    fmt = suffix.lstrip(".") or "pdf"
    try:
        payload = renderer.render(request)
    except Exception as exc:
        raise ExportError(f"Report rendering failed: {exc}", fmt) from exc

    path = _write_artifact(payload, suffix, directory, fmt)
    logger.info(
        "Exported report (%d movements, %d bytes) to %s",
        len(request.movements), len(payload), path,
    )
    return path


@contextmanager
def scoped_export(path: Path) -> Iterator[Path]:
    """Yield ``path`` and delete the file when the block exits.

    Usage::

        with scoped_export(export_csv(movements)) as csv_path:
            upload(csv_path)
    """
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)


def resolve_author_name(
    display_name: Optional[str],
    email: Optional[str],
    default: str = DEFAULT_AUTHOR_NAME,
) -> str:
    """Return the first non-empty of display name, email, ``default``."""
    for candidate in (display_name, email):
        if candidate and candidate.strip():
            return candidate.strip()
    return default


def describe_filter(kind: Optional[MovementKind], period_label: Optional[str] = None) -> str:
    """Human-readable filter label for report headers.

    ``describe_filter(None)`` → ``"Tout"``;
    ``describe_filter(MovementKind.DELETION, "Ce mois")`` → ``"Suppressions - Ce mois"``.
    """
    kind_label = MOVEMENT_KIND_FILTER_LABELS[kind] if kind else ALL_KINDS_FILTER_LABEL
    if period_label and period_label != ALL_KINDS_FILTER_LABEL:
        return f"{kind_label} - {period_label}"
    return kind_label


# ── Private helpers ────────────────────────────────────────────────────────────


def _write_artifact(
    payload: bytes,
    suffix: str,
    directory: Optional[Path],
    fmt: str,
) -> Path:
    """Create a unique file, write ``payload`` and return its path.

    If anything goes wrong after the file is created, it is removed. Errors
    are re-raised as ``ExportError``; interrupts propagate unchanged.
    """
    stamp = utcnow().strftime("%Y%m%dT%H%M%S")
    path: Optional[Path] = None
    try:
        if directory is not None:
            Path(directory).mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(
            prefix=f"{ARTIFACT_PREFIX}{stamp}_",
            suffix=suffix,
            dir=str(directory) if directory is not None else None,
        )
        path = Path(name)
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
    except Exception as exc:
        _discard(path)
        raise ExportError(f"Could not write {fmt} export: {exc}", fmt) from exc
    except BaseException:
        _discard(path)
        raise
    return path


def _discard(path: Optional[Path]) -> None:
    if path is not None:
        path.unlink(missing_ok=True)
