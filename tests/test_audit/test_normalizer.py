"""Tests for medistock_audit.audit.normalizer — LogEntry → StockMovement."""

from __future__ import annotations

from medistock_audit.audit.filters import filter_movements
from medistock_audit.audit.normalizer import normalize, normalize_entries
from medistock_audit.models.movement import FilterCriteria
from medistock_audit.taxonomy.movement_taxonomy import MovementKind


def test_fields_copied_and_extracted(make_entry):
    entry = make_entry(
        id="h42",
        subject_id="med-7",
        actor_id="user-3",
        action_label="Ajustement stock",
        details_text="15 unités - Livraison matinale (Stock: 50 → 65)",
    )
    m = normalize(entry)
    assert m.id == "h42"
    assert m.subject_id == "med-7"
    assert m.actor_id == "user-3"
    assert m.timestamp == entry.timestamp
    assert m.kind == MovementKind.ADJUSTMENT
    assert m.change_amount == 15
    assert (m.previous_quantity, m.new_quantity) == (50, 65)
    assert m.reason == "Livraison matinale (Stock: 50 → 65)"
    assert m.action_label == "Ajustement stock"


def test_unparsable_details_use_defaults(make_entry):
    m = normalize(make_entry(action_label="Suppression", details_text="Médicament supprimé"))
    assert m.kind == MovementKind.DELETION
    assert m.change_amount == 0
    assert m.previous_quantity == 0
    assert m.new_quantity == 0
    assert m.reason is None


def test_idempotent(make_entry):
    entry = make_entry()
    assert normalize(entry) == normalize(entry)


def test_scenario_kinds_in_order(sample_entries):
    movements = normalize_entries(sample_entries)
    assert [m.kind for m in movements] == [
        MovementKind.ADDITION,
        MovementKind.ADJUSTMENT,
        MovementKind.DELETION,
    ]
    assert [m.id for m in movements] == ["h-add", "h-adj", "h-del"]


def test_pipeline_with_empty_criteria_keeps_cardinality(sample_entries):
    movements = normalize_entries(sample_entries)
    assert len(filter_movements(movements, FilterCriteria())) == len(sample_entries)


def test_accepts_generator(make_entry):
    movements = normalize_entries(make_entry() for _ in range(4))
    assert len(movements) == 4


def test_empty_input():
    assert normalize_entries([]) == []
