"""
Period statistics over a ``StockMovement`` collection.

``aggregate`` restricts the movements to ``timestamp >= window_start`` and
then computes:
  - total and per-kind counts;
  - the most active subjects: frequency by ``subject_id``, sorted by
    descending count with ties broken by ascending ``subject_id``, limited
    to the first ``top_n`` ids, each resolved to a display name.

Subjects whose id the resolver cannot name (deleted medicines, typically)
are dropped from the ranking without being replaced, so ``top_subjects``
can be shorter than ``top_n``.

The window start is computed by the caller (see
``medistock_audit.utils.time_utils.start_of_month``); no calendar
arithmetic happens here.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Callable, Iterable, Optional

from medistock_audit.models.movement import (
    TOP_SUBJECTS_LIMIT,
    PeriodStatistics,
    StockMovement,
    TopSubject,
)
from medistock_audit.taxonomy.movement_taxonomy import MovementKind

logger = logging.getLogger(__name__)

NameResolver = Callable[[str], Optional[str]]


def aggregate(
    movements: Iterable[StockMovement],
    window_start: datetime,
    resolve_name: NameResolver,
    top_n: int = TOP_SUBJECTS_LIMIT,
) -> PeriodStatistics:
    """Compute ``PeriodStatistics`` for movements at or after ``window_start``.

    Args:
        movements:    Movements to summarise (not modified).
        window_start: Inclusive lower bound of the statistics window.
        resolve_name: ``subject_id`` → display name, or ``None`` if unknown.
        top_n:        Maximum number of ranked subjects considered.

    Returns:
        Frozen ``PeriodStatistics``.
    """
    in_window = [m for m in movements if m.timestamp >= window_start]
    kind_counts = Counter(m.kind for m in in_window)

    return PeriodStatistics(
        total_count=len(in_window),
        addition_count=kind_counts[MovementKind.ADDITION],
        deletion_count=kind_counts[MovementKind.DELETION],
        adjustment_count=kind_counts[MovementKind.ADJUSTMENT],
        top_subjects=rank_subjects(in_window, resolve_name, top_n),
    )


def rank_subjects(
    movements: Iterable[StockMovement],
    resolve_name: NameResolver,
    top_n: int = TOP_SUBJECTS_LIMIT,
) -> list[TopSubject]:
    """Return the ``top_n`` most active subjects that resolve to a name."""
    activity = Counter(m.subject_id for m in movements)
    ranked = sorted(activity.items(), key=lambda kv: (-kv[1], kv[0]))[:top_n]

    top: list[TopSubject] = []
    for subject_id, count in ranked:
        name = resolve_name(subject_id)
        if name is None:
            logger.debug("No name for subject %s; dropped from ranking.", subject_id)
            continue
        top.append(
            TopSubject(subject_id=subject_id, display_name=name, activity_count=count)
        )
    return top


def mapping_resolver(names: dict[str, str]) -> NameResolver:
    """Adapt a ``{subject_id: name}`` mapping to a ``NameResolver``."""
    return names.get
