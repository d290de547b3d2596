"""
Normalizer — raw ``LogEntry`` → typed ``StockMovement``.

Per entry:
  1. Classify ``action_label`` into a ``MovementKind``.
  2. Extract change amount, previous/new quantities and reason from
     ``details_text``.
  3. Copy identifiers and timestamp verbatim.

``normalize`` is pure: the same entry always yields an equal movement.
``normalize_entries`` maps a whole collection, keeping input order.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable

from medistock_audit.audit.classifier import classify
from medistock_audit.audit.extractor import extract_details
from medistock_audit.models.log_entry import LogEntry
from medistock_audit.models.movement import StockMovement

logger = logging.getLogger(__name__)


def normalize(entry: LogEntry) -> StockMovement:
    """Build the ``StockMovement`` for one log entry."""
    details = extract_details(entry.details_text)
    return StockMovement(
        id=entry.id,
        subject_id=entry.subject_id,
        actor_id=entry.actor_id,
        kind=classify(entry.action_label),
        timestamp=entry.timestamp,
        change_amount=details.change_amount,
        previous_quantity=details.previous_quantity,
        new_quantity=details.new_quantity,
        reason=details.reason,
        action_label=entry.action_label,
    )


def normalize_entries(entries: Iterable[LogEntry]) -> list[StockMovement]:
    """Normalize every entry, preserving input order.

    Args:
        entries: Raw log entries, as fetched from the log store.

    Returns:
        One ``StockMovement`` per entry, same order.
    """
    movements = [normalize(e) for e in entries]
    if logger.isEnabledFor(logging.DEBUG):
        by_kind = Counter(m.kind.value for m in movements)
        logger.debug(
            "Normalized %d log entries (%s)",
            len(movements),
            ", ".join(f"{k}={n}" for k, n in sorted(by_kind.items())) or "empty",
        )
    return movements
