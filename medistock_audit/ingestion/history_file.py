"""
File-backed log source: history exports → ``LogEntry`` list.

The remote store's history documents use the mobile app's field names::

    {"id": "h1", "medicineId": "m1", "userId": "u1",
     "action": "Ajustement stock",
     "details": "15 unités - Livraison matinale (Stock: 50 → 65)",
     "timestamp": "2026-10-18T09:30:00Z"}

Accepted inputs:
  - ``.json`` — a list of such documents, or ``{"history": [...]}``.
  - ``.csv``  — header row with the same column names.

``timestamp`` may be ISO 8601 (``Z`` or explicit offset) or epoch seconds.
A document without ``id`` gets a generated UUID, as the app does for
documents that were never saved.

All rows are validated before any are returned. If **any** row fails, a
single ``ValueError`` is raised listing the first 10 failures.

Medicines file (name lookup for the statistics ranking and exports):
  - a JSON list of ``{"id": ..., "name": ...}`` documents, or
  - a JSON object ``{id: name}``.
"""

from __future__ import annotations

import csv
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from medistock_audit.models.log_entry import LogEntry

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = frozenset({"medicineId", "userId", "timestamp"})

_MAX_ERRORS_SHOWN = 10


def load_history(path: Path) -> list[LogEntry]:
    """Load history entries from a JSON or CSV export.

    Args:
        path: Path to a ``.json`` or ``.csv`` file (must exist).

    Returns:
        Validated entries, in file order.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: On an unsupported extension, a malformed file, or any
            row that fails validation.
    """
    if not path.exists():
        raise FileNotFoundError(f"History file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        documents = _read_json_documents(path)
    elif suffix == ".csv":
        documents = _read_csv_documents(path)
    else:
        raise ValueError(f"Unsupported history file type '{suffix}': {path}")

    if not documents:
        logger.warning("History file is empty: %s", path)
        return []

    entries: list[LogEntry] = []
    errors: list[tuple[int, str]] = []
    for i, doc in enumerate(documents):
        try:
            entries.append(document_to_entry(doc))
        except (ValueError, ValidationError) as exc:
            errors.append((i + 1, str(exc)))

    if errors:
        detail = "\n".join(f"  Entry {n}: {msg}" for n, msg in errors[:_MAX_ERRORS_SHOWN])
        suffix_msg = (
            f"\n  … and {len(errors) - _MAX_ERRORS_SHOWN} more"
            if len(errors) > _MAX_ERRORS_SHOWN else ""
        )
        raise ValueError(
            f"{len(errors)} entry(ies) failed validation in {path.name}:\n{detail}{suffix_msg}"
        )

    logger.info("Loaded %d history entries from %s", len(entries), path.name)
    return entries


def document_to_entry(doc: dict[str, Any]) -> LogEntry:
    """Convert one history document to a validated ``LogEntry``.

    Raises:
        ValueError: On missing required fields or an unparsable timestamp.
        pydantic.ValidationError: On model-level validation failure.
    """
    missing = sorted(f for f in REQUIRED_FIELDS if _blank(doc.get(f)))
    if missing:
        raise ValueError(f"Missing required field(s): {missing}")

    return LogEntry(
        id=str(doc.get("id") or uuid.uuid4()),
        subject_id=str(doc["medicineId"]),
        actor_id=str(doc["userId"]),
        action_label=str(doc.get("action") or ""),
        details_text=str(doc.get("details") or ""),
        timestamp=parse_timestamp(doc["timestamp"]),
    )


def parse_timestamp(value: Any) -> datetime:
    """Parse ISO 8601 text or epoch seconds into an aware datetime.

    Naive ISO strings are taken as UTC. Text is read as ISO first, so a
    basic-format date such as ``"20261001"`` is a date, not epoch seconds;
    purely numeric text that is not a valid ISO date is read as epoch seconds.
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            raise ValueError(f"Epoch timestamp out of range: {value}")
    else:
        text = str(value).strip()
        try:
            moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            moment = None
        if moment is None:
            try:
                return datetime.fromtimestamp(float(text), tz=timezone.utc)
            except (ValueError, OverflowError, OSError):
                pass
            raise ValueError(
                f"Invalid timestamp '{text}'. "
                "Expected ISO 8601, e.g. '2026-10-18T09:30:00Z', or epoch seconds."
            )
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def load_medicine_names(path: Path) -> dict[str, str]:
    """Load a ``{medicine_id: name}`` map from a medicines JSON export.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the JSON has neither accepted shape.
    """
    if not path.exists():
        raise FileNotFoundError(f"Medicines file not found: {path}")

    data = _load_json(path)
    if isinstance(data, dict):
        return {str(k): str(v) for k, v in data.items()}
    if isinstance(data, list):
        names: dict[str, str] = {}
        for doc in data:
            if isinstance(doc, dict) and doc.get("id") and doc.get("name"):
                names[str(doc["id"])] = str(doc["name"])
        logger.info("Loaded %d medicine names from %s", len(names), path.name)
        return names
    raise ValueError(f"Unrecognized medicines file layout: {path}")


# ── Private helpers ────────────────────────────────────────────────────────────


def _read_json_documents(path: Path) -> list[dict[str, Any]]:
    data = _load_json(path)
    if isinstance(data, dict):
        data = data.get("history")
    if not isinstance(data, list) or not all(isinstance(d, dict) for d in data):
        raise ValueError(
            f"Expected a list of history documents (or {{\"history\": [...]}}) in {path}"
        )
    return data


def _read_csv_documents(path: Path) -> list[dict[str, Any]]:
    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise ValueError(f"CSV file is empty or has no header row: {path}")
        missing = REQUIRED_FIELDS - set(reader.fieldnames)
        if missing:
            raise ValueError(
                f"CSV missing required columns: {sorted(missing)}\n"
                f"Found columns: {sorted(reader.fieldnames)}"
            )
        return list(reader)


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc


def _blank(value: Optional[Any]) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
