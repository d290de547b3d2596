"""
Time and date-range utilities for history filtering and statistics.

Key concepts:
  - Statistics window: the aggregator counts movements from a caller-supplied
    start; ``start_of_month(now)`` gives the usual "current month" window.
  - Date-range presets: the history screen's period picker
    (Aujourd'hui / Cette semaine / Ce mois / 3 derniers mois / Tout), turned
    into an inclusive ``DateRange`` relative to ``now``.

Weeks start on Monday (fr_FR calendar). All ranges keep the tzinfo of
``now``.
"""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta, timezone
from enum import StrEnum
from typing import Optional

from medistock_audit.models.movement import DateRange

_ONE_TICK = timedelta(microseconds=1)


class DateRangePreset(StrEnum):
    """Named period relative to the current time."""

    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    THREE_MONTHS = "three_months"
    ALL = "all"

    @property
    def label(self) -> str:
        return DATE_RANGE_PRESET_LABELS[self]


DATE_RANGE_PRESET_LABELS: dict[DateRangePreset, str] = {
    DateRangePreset.TODAY:        "Aujourd'hui",
    DateRangePreset.WEEK:         "Cette semaine",
    DateRangePreset.MONTH:        "Ce mois",
    DateRangePreset.THREE_MONTHS: "3 derniers mois",
    DateRangePreset.ALL:          "Tout",
}


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_month(moment: datetime) -> datetime:
    """Return midnight on the first day of ``moment``'s month."""
    return start_of_day(moment).replace(day=1)


def add_months(moment: datetime, months: int) -> datetime:
    """Shift ``moment`` by ``months`` calendar months, clamping the day.

    ``add_months(March 31, -1)`` → February 28/29.
    """
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def preset_range(preset: DateRangePreset, now: datetime) -> Optional[DateRange]:
    """Return the inclusive ``DateRange`` for ``preset``, or ``None`` for ALL.

    Calendar periods (day, week, month) cover the whole period containing
    ``now``, up to the last microsecond; THREE_MONTHS ends at ``now``.

    Args:
        preset: Period to compute.
        now:    Reference time.

    Returns:
        ``DateRange`` or ``None`` (unbounded).
    """
    if preset is DateRangePreset.ALL:
        return None
    if preset is DateRangePreset.TODAY:
        start = start_of_day(now)
        return DateRange(start=start, end=start + timedelta(days=1) - _ONE_TICK)
    if preset is DateRangePreset.WEEK:
        start = start_of_day(now) - timedelta(days=now.weekday())
        return DateRange(start=start, end=start + timedelta(days=7) - _ONE_TICK)
    if preset is DateRangePreset.MONTH:
        start = start_of_month(now)
        return DateRange(start=start, end=add_months(start, 1) - _ONE_TICK)
    if preset is DateRangePreset.THREE_MONTHS:
        return DateRange(start=add_months(now, -3), end=now)
    raise ValueError(f"Unhandled date range preset: {preset!r}")
