"""
Stock movement taxonomy for the audit trail.

Every history log entry resolves to exactly one ``MovementKind``:
  - ``ADDITION``   — a medicine was created / added to the inventory.
  - ``DELETION``   — a medicine was removed from the inventory.
  - ``ADJUSTMENT`` — a stock quantity or record changed (the default bucket).

The enum values are stable machine slugs (used in config, CLI options and JSON
output); ``label`` gives the French display text used by the CSV and report
exports.

This module has NO imports from any other ``medistock_audit`` package.
"""

from enum import StrEnum


class MovementKind(StrEnum):
    """Closed classification of a stock movement."""

    ADDITION = "addition"
    """Medicine created or added ("Ajout", "Création ...")."""

    DELETION = "deletion"
    """Medicine deleted ("Suppression", "... supprimé")."""

    ADJUSTMENT = "adjustment"
    """Stock quantity or record updated; also the fallback for unknown labels."""

    @property
    def label(self) -> str:
        """French display label, e.g. ``"Ajustement"``."""
        return MOVEMENT_KIND_LABELS[self]


MOVEMENT_KIND_LABELS: dict[MovementKind, str] = {
    MovementKind.ADDITION:   "Ajout",
    MovementKind.DELETION:   "Suppression",
    MovementKind.ADJUSTMENT: "Ajustement",
}

# Plural headings used when a kind is the active filter (report label).
MOVEMENT_KIND_FILTER_LABELS: dict[MovementKind, str] = {
    MovementKind.ADDITION:   "Ajouts",
    MovementKind.DELETION:   "Suppressions",
    MovementKind.ADJUSTMENT: "Ajustements",
}

ALL_KINDS_FILTER_LABEL = "Tout"
