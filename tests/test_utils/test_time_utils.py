"""Tests for medistock_audit.utils.time_utils — windows and period presets."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from medistock_audit.utils.time_utils import (
    DateRangePreset,
    add_months,
    preset_range,
    start_of_month,
    utcnow,
)

# Sunday 18 October 2026, 15:42 UTC
NOW = datetime(2026, 10, 18, 15, 42, 7, tzinfo=timezone.utc)


def test_utcnow_is_aware():
    assert utcnow().tzinfo is not None


def test_start_of_month():
    assert start_of_month(NOW) == datetime(2026, 10, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "moment, months, expected",
    [
        (datetime(2026, 3, 31), -1, datetime(2026, 2, 28)),
        (datetime(2024, 3, 31), -1, datetime(2024, 2, 29)),
        (datetime(2026, 1, 15), -3, datetime(2025, 10, 15)),
        (datetime(2026, 11, 30), 2, datetime(2027, 1, 30)),
    ],
)
def test_add_months(moment, months, expected):
    assert add_months(moment, months) == expected


class TestPresetRange:
    def test_all_is_unbounded(self):
        assert preset_range(DateRangePreset.ALL, NOW) is None

    def test_today(self):
        rng = preset_range(DateRangePreset.TODAY, NOW)
        assert rng.start == datetime(2026, 10, 18, tzinfo=timezone.utc)
        assert rng.end == datetime(2026, 10, 19, tzinfo=timezone.utc) - timedelta(microseconds=1)

    def test_week_starts_monday(self):
        rng = preset_range(DateRangePreset.WEEK, NOW)
        assert rng.start == datetime(2026, 10, 12, tzinfo=timezone.utc)
        assert rng.start.weekday() == 0
        assert rng.contains(NOW)

    def test_month(self):
        rng = preset_range(DateRangePreset.MONTH, NOW)
        assert rng.start == datetime(2026, 10, 1, tzinfo=timezone.utc)
        assert rng.contains(datetime(2026, 10, 31, 23, 59, 59, tzinfo=timezone.utc))
        assert not rng.contains(datetime(2026, 11, 1, tzinfo=timezone.utc))

    def test_three_months_ends_now(self):
        rng = preset_range(DateRangePreset.THREE_MONTHS, NOW)
        assert rng.start == datetime(2026, 7, 18, 15, 42, 7, tzinfo=timezone.utc)
        assert rng.end == NOW


def test_preset_labels():
    assert DateRangePreset.MONTH.label == "Ce mois"
    assert DateRangePreset.ALL.label == "Tout"
