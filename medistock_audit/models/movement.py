"""
Normalized stock movement records, filter criteria and period statistics.

``StockMovement`` is derived once per ``LogEntry`` by the normalizer and is
never mutated afterwards. Several movements may share the same ``subject_id``.

``FilterCriteria`` fields are independent; an absent field does not restrict
anything, so ``FilterCriteria()`` is the identity filter.

``DateRange`` is a closed interval: both ``start`` and ``end`` are inclusive.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from medistock_audit.taxonomy.movement_taxonomy import MovementKind

TOP_SUBJECTS_LIMIT = 5


class StockMovement(BaseModel):
    """A typed stock movement reconstructed from one raw log entry.

    Attributes:
        id: Copied from the source entry.
        subject_id: Medicine identifier.
        actor_id: User identifier.
        kind: Classified movement kind.
        timestamp: When the movement happened.
        change_amount: Signed unit count from the details text (0 if absent).
        previous_quantity: Stock before the movement (0 if absent).
        new_quantity: Stock after the movement (0 if absent).
        reason: Free-text reason after ``" - "``, or ``None``.
        action_label: Originating action label, kept for text search.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    subject_id: str
    actor_id: str
    kind: MovementKind
    timestamp: datetime
    change_amount: int = 0
    previous_quantity: int = 0
    new_quantity: int = 0
    reason: Optional[str] = None
    action_label: Optional[str] = None


class DateRange(BaseModel):
    """Closed datetime interval ``[start, end]``."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def validate_ordering(self) -> "DateRange":
        if self.end < self.start:
            raise ValueError(f"end ({self.end}) must be >= start ({self.start}).")
        return self

    def contains(self, moment: datetime) -> bool:
        """Return ``True`` if ``start <= moment <= end``."""
        return self.start <= moment <= self.end


class FilterCriteria(BaseModel):
    """Caller-selected filter over a movement collection.

    Attributes:
        date_range: Inclusive interval, or ``None`` for unbounded.
        kind: Only keep this kind, or ``None`` for all kinds.
        search_text: Case-insensitive substring matched against the reason
            and the action label; ``None`` or ``""`` disables the text filter.
    """

    model_config = ConfigDict(frozen=True)

    date_range: Optional[DateRange] = None
    kind: Optional[MovementKind] = None
    search_text: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.date_range is None and self.kind is None and not self.search_text


class TopSubject(BaseModel):
    """One entry of the most-active-subjects ranking."""

    model_config = ConfigDict(frozen=True)

    subject_id: str
    display_name: str
    activity_count: int


class PeriodStatistics(BaseModel):
    """Counts over a statistics window.

    ``top_subjects`` is ordered by descending activity (ties by ascending
    ``subject_id``) and holds at most ``TOP_SUBJECTS_LIMIT`` entries; it may be
    shorter when some subject ids could not be resolved to a name.
    """

    model_config = ConfigDict(frozen=True)

    total_count: int = 0
    addition_count: int = 0
    deletion_count: int = 0
    adjustment_count: int = 0
    top_subjects: list[TopSubject] = []

    def count_for(self, kind: MovementKind) -> int:
        """Return the count for a single kind."""
        return {
            MovementKind.ADDITION:   self.addition_count,
            MovementKind.DELETION:   self.deletion_count,
            MovementKind.ADJUSTMENT: self.adjustment_count,
        }[kind]
