"""
Raw history log entry — the read-only input of the audit engine.

``LogEntry`` mirrors one document of the remote history collection. It has no
structured schema beyond the identifiers and timestamp: the ``action_label``
is a short human label ("Ajustement stock") and ``details_text`` a free-text
sentence ("15 unités - Livraison matinale (Stock: 50 → 65)").

The engine never mutates or persists entries.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class LogEntry(BaseModel):
    """One raw audit record as supplied by the log store.

    Attributes:
        id: Document identifier in the log store.
        subject_id: Identifier of the medicine the entry concerns.
        actor_id: Identifier of the user who performed the action.
        action_label: Short free-text action, e.g. ``"Suppression"``.
        details_text: Free-text details sentence (may be empty).
        timestamp: When the action happened.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    subject_id: str
    actor_id: str
    action_label: str = ""
    details_text: str = ""
    timestamp: datetime
