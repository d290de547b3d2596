"""
Pattern extraction over free-text history details.

Details sentences are written by the mobile app in a loose format, e.g.::

    "15 unités - Livraison matinale (Stock: 50 → 65)"
    "8 boîtes"
    "Médicament supprimé"

Three independent extractions run over the same text:
  - ``extract_change_amount`` → ``<int> <unit>``            (default ``0``)
  - ``extract_quantities``    → ``Stock: <int> → <int>``    (default ``(0, 0)``)
  - ``extract_reason``        → text after the first ``" - "`` (default ``None``)

None of them raises: a text that does not match yields the default.
"""

from __future__ import annotations

import re
from typing import NamedTuple, Optional

STOCK_UNITS: tuple[str, ...] = ("unités", "boîtes", "comprimés", "gélules")

REASON_SEPARATOR = " - "

_CHANGE_PATTERN = re.compile(r"(\d+)\s+(" + "|".join(STOCK_UNITS) + r")")
_QUANTITIES_PATTERN = re.compile(r"Stock:\s*(\d+)\s*→\s*(\d+)")


class ExtractedDetails(NamedTuple):
    """All values pulled out of one details sentence."""

    change_amount: int
    previous_quantity: int
    new_quantity: int
    reason: Optional[str]


def extract_change_amount(details: str) -> int:
    """Return the first ``<integer> <unit>`` count in ``details``, else ``0``.

    Args:
        details: Free-text details sentence.

    Returns:
        The integer preceding the first recognized unit word.
    """
    if not details:
        return 0
    match = _CHANGE_PATTERN.search(details)
    if match is None:
        return 0
    return _to_int(match.group(1))


def extract_quantities(details: str) -> tuple[int, int]:
    """Return ``(previous, new)`` from a ``Stock: X → Y`` marker, else ``(0, 0)``."""
    if not details:
        return 0, 0
    match = _QUANTITIES_PATTERN.search(details)
    if match is None:
        return 0, 0
    return _to_int(match.group(1)), _to_int(match.group(2))


def extract_reason(details: str) -> Optional[str]:
    """Return the stripped text after the first ``" - "``, or ``None``.

    ``None`` is also returned when the separator is present but nothing
    but whitespace follows it.
    """
    if not details:
        return None
    _, sep, tail = details.partition(REASON_SEPARATOR)
    if not sep:
        return None
    reason = tail.strip()
    return reason or None


def extract_details(details: str) -> ExtractedDetails:
    """Run all three extractions over ``details``."""
    previous, new = extract_quantities(details)
    return ExtractedDetails(
        change_amount=extract_change_amount(details),
        previous_quantity=previous,
        new_quantity=new,
        reason=extract_reason(details),
    )


def _to_int(digits: str) -> int:
    # \d also matches non-ASCII decimal digits; int() accepts those too.
    try:
        return int(digits)
    except ValueError:
        return 0
