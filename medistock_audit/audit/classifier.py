"""
Action-label classifier.

Maps a free-text history action label to a ``MovementKind`` using a fixed,
ordered rule table. Labels are NFC-normalized (a decomposed "e" + U+0301
matches "é") and lower-cased, then rules are tried top to bottom and the
first match wins:

  1. DELETION   — contains "supprim" or "suppression"
  2. ADDITION   — contains "création", or is exactly "création" / "ajout"
  3. ADJUSTMENT — contains "ajout stock", "retrait stock", "ajustement stock",
                  "ajustement" or "mise à jour", or is exactly "modification"
  4. ADJUSTMENT — fallback for everything else (including "")

Order matters: a compound label such as "Création - ajustement stock" is an
ADDITION because rule 2 is evaluated before rule 3.
"""

from __future__ import annotations

import unicodedata
from typing import NamedTuple

from medistock_audit.taxonomy.movement_taxonomy import MovementKind

DEFAULT_KIND = MovementKind.ADJUSTMENT


class ClassificationRule(NamedTuple):
    """One row of the rule table.

    ``contains`` phrases are substring checks; ``equals`` phrases must match
    the whole lower-cased label.
    """

    kind: MovementKind
    contains: tuple[str, ...] = ()
    equals: tuple[str, ...] = ()

    def matches(self, label: str) -> bool:
        return any(p in label for p in self.contains) or label in self.equals


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        MovementKind.DELETION,
        contains=("supprim", "suppression"),
        equals=("suppression",),
    ),
    ClassificationRule(
        MovementKind.ADDITION,
        contains=("création",),
        equals=("création", "ajout"),
    ),
    ClassificationRule(
        MovementKind.ADJUSTMENT,
        contains=(
            "ajout stock",
            "retrait stock",
            "ajustement stock",
            "ajustement",
            "mise à jour",
        ),
        equals=("modification",),
    ),
)


def classify(action_label: str) -> MovementKind:
    """Return the ``MovementKind`` for an action label.

    Total and deterministic: every string, including ``""``, maps to exactly
    one kind.

    Args:
        action_label: Free-text action, e.g. ``"Ajustement stock"``.

    Returns:
        The kind of the first matching rule, or ``DEFAULT_KIND``.
    """
    label = unicodedata.normalize("NFC", action_label or "").lower()
    for rule in CLASSIFICATION_RULES:
        if rule.matches(label):
            return rule.kind
    return DEFAULT_KIND
