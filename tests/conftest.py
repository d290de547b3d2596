"""
Shared pytest fixtures for the MediStock audit test suite.

Provides:
  - ``make_entry`` / ``make_movement``: factories with sensible defaults so
    each test only spells out the fields it cares about.
  - ``sample_entries``: a small realistic history log (one entry per kind).
  - ``medicine_names``: ``subject_id`` → name map matching ``sample_entries``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import pytest

from medistock_audit.models.log_entry import LogEntry
from medistock_audit.models.movement import StockMovement
from medistock_audit.taxonomy.movement_taxonomy import MovementKind

BASE_TS = datetime(2026, 10, 15, 9, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_entry() -> Callable[..., LogEntry]:
    """Factory for ``LogEntry`` objects."""
    counter = {"n": 0}

    def _make(**overrides) -> LogEntry:
        counter["n"] += 1
        fields = {
            "id": f"h{counter['n']}",
            "subject_id": "med-1",
            "actor_id": "user-1",
            "action_label": "Ajustement stock",
            "details_text": "15 unités - Livraison matinale (Stock: 50 → 65)",
            "timestamp": BASE_TS,
        }
        fields.update(overrides)
        return LogEntry(**fields)

    return _make


@pytest.fixture
def make_movement() -> Callable[..., StockMovement]:
    """Factory for ``StockMovement`` objects."""
    counter = {"n": 0}

    def _make(**overrides) -> StockMovement:
        counter["n"] += 1
        fields = {
            "id": f"m{counter['n']}",
            "subject_id": "med-1",
            "actor_id": "user-1",
            "kind": MovementKind.ADJUSTMENT,
            "timestamp": BASE_TS,
            "change_amount": 0,
            "previous_quantity": 0,
            "new_quantity": 0,
            "reason": None,
            "action_label": "Ajustement stock",
        }
        fields.update(overrides)
        return StockMovement(**fields)

    return _make


@pytest.fixture
def sample_entries(make_entry) -> list[LogEntry]:
    """Three entries: an addition, an adjustment and a deletion."""
    return [
        make_entry(
            id="h-add",
            subject_id="med-1",
            action_label="Ajout",
            details_text="Ajout de Doliprane 1000mg - Réception commande",
            timestamp=datetime(2026, 10, 2, 8, 0, tzinfo=timezone.utc),
        ),
        make_entry(
            id="h-adj",
            subject_id="med-1",
            action_label="Ajustement stock",
            details_text="15 unités - Livraison matinale (Stock: 50 → 65)",
            timestamp=datetime(2026, 10, 10, 14, 45, tzinfo=timezone.utc),
        ),
        make_entry(
            id="h-del",
            subject_id="med-2",
            action_label="Suppression",
            details_text="Médicament supprimé",
            timestamp=datetime(2026, 10, 12, 17, 5, tzinfo=timezone.utc),
        ),
    ]


@pytest.fixture
def medicine_names() -> dict[str, str]:
    return {"med-1": "Doliprane 1000mg", "med-2": "Amoxicilline 500mg"}
