"""
ASCII terminal formatters for CLI reporting commands.

All formatters accept models / plain dicts and return plain multi-line
strings suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).
"""

from __future__ import annotations

from typing import Optional, Sequence

from medistock_audit.models.movement import PeriodStatistics, StockMovement
from medistock_audit.taxonomy.movement_taxonomy import (
    MOVEMENT_KIND_FILTER_LABELS,
    MovementKind,
)


# ── Statistics ────────────────────────────────────────────────────────────────


def format_statistics(
    stats: PeriodStatistics,
    window_label: str,
) -> str:
    """Format period statistics as a short block.

    Example::

        === Statistiques (depuis 01/10/2026) ===
          Mouvements totaux:      12
          Ajouts:                  3
          Suppressions:            1
          Ajustements:             8

          Médicaments les plus actifs:
            1. Doliprane 1000mg             5

    Args:
        stats:        Computed statistics.
        window_label: Header text describing the window.

    Returns:
        Multi-line string.
    """
    lines: list[str] = []
    lines.append("")
    lines.append(f"=== Statistiques ({window_label}) ===")
    lines.append(f"  {'Mouvements totaux:':<22}{stats.total_count:>5}")
    for kind in MovementKind:
        label = f"{MOVEMENT_KIND_FILTER_LABELS[kind]}:"
        lines.append(f"  {label:<22}{stats.count_for(kind):>5}")

    lines.append("")
    if not stats.top_subjects:
        lines.append("  (aucun médicament actif sur la période)")
        return "\n".join(lines)

    lines.append("  Médicaments les plus actifs:")
    for rank, top in enumerate(stats.top_subjects, start=1):
        lines.append(f"    {rank}. {top.display_name[:28]:<28}  {top.activity_count:>4}")
    return "\n".join(lines)


# ── Movements ─────────────────────────────────────────────────────────────────


def format_movements_table(
    movements: Sequence[StockMovement],
    subject_names: Optional[dict[str, str]] = None,
    limit: Optional[int] = None,
    deleted_subject_label: str = "Médicament supprimé",
) -> str:
    """Format movements as a fixed-width table, in the given order.

    Args:
        movements:     Movements to display.
        subject_names: ``subject_id`` → medicine name.
        limit:         Show at most this many rows (``None`` = all).

    Returns:
        Multi-line string.
    """
    names = subject_names or {}
    shown = list(movements if limit is None else movements[:limit])

    lines: list[str] = []
    lines.append("")
    lines.append(f"=== Mouvements de stock ({len(movements)}) ===")
    if not shown:
        lines.append("  (aucun mouvement)")
        return "\n".join(lines)

    header = (
        f"  {'Date':<16}  {'Type':<11}  {'Médicament':<24}  "
        f"{'Chg':>5}  {'Avant':>5}  {'Après':>5}  Raison"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for m in shown:
        name = names.get(m.subject_id, deleted_subject_label)[:24]
        lines.append(
            f"  {m.timestamp.strftime('%d/%m/%Y %H:%M'):<16}  {m.kind.label:<11}  "
            f"{name:<24}  {m.change_amount:>+5d}  {m.previous_quantity:>5}  "
            f"{m.new_quantity:>5}  {m.reason or ''}"
        )
    if limit is not None and len(movements) > limit:
        lines.append(f"  … and {len(movements) - limit} more")
    return "\n".join(lines)
