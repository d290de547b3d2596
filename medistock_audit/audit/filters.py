"""
Filter engine over ``StockMovement`` collections.

A ``FilterCriteria`` combines up to three independent predicates with AND:
  - date range  — ``start <= timestamp <= end`` (both bounds inclusive)
  - kind        — exact ``MovementKind`` match
  - search text — case-insensitive substring of ``reason`` or ``action_label``

Absent criteria always pass. Each predicate looks at one movement only, so
the output keeps the relative order of the input and the input list is never
modified.
"""

from __future__ import annotations

import unicodedata
from typing import Callable, Iterable, Optional

from medistock_audit.models.movement import DateRange, FilterCriteria, StockMovement
from medistock_audit.taxonomy.movement_taxonomy import MovementKind

MovementPredicate = Callable[[StockMovement], bool]


def filter_movements(
    movements: Iterable[StockMovement],
    criteria: FilterCriteria,
) -> list[StockMovement]:
    """Return the movements that satisfy every predicate in ``criteria``.

    Args:
        movements: Input collection (not modified).
        criteria:  Filter to apply; ``FilterCriteria()`` keeps everything.

    Returns:
        New list, in input order.
    """
    predicates = build_predicates(criteria)
    return [m for m in movements if all(p(m) for p in predicates)]


def build_predicates(criteria: FilterCriteria) -> list[MovementPredicate]:
    """Return the active predicates for ``criteria`` (empty list = identity)."""
    predicates: list[MovementPredicate] = []
    if criteria.date_range is not None:
        predicates.append(date_range_predicate(criteria.date_range))
    if criteria.kind is not None:
        predicates.append(kind_predicate(criteria.kind))
    if criteria.search_text:
        predicates.append(text_predicate(criteria.search_text))
    return predicates


def date_range_predicate(date_range: DateRange) -> MovementPredicate:
    return lambda m: date_range.contains(m.timestamp)


def kind_predicate(kind: MovementKind) -> MovementPredicate:
    return lambda m: m.kind == kind


def text_predicate(search_text: str) -> MovementPredicate:
    """Match ``search_text`` against the reason or the action label."""
    needle = _fold(search_text)

    def _matches(m: StockMovement) -> bool:
        return _contains(m.reason, needle) or _contains(m.action_label, needle)

    return _matches


def _contains(haystack: Optional[str], needle: str) -> bool:
    return haystack is not None and needle in _fold(haystack)


def _fold(text: str) -> str:
    return unicodedata.normalize("NFC", text).casefold()
