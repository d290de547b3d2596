"""
Report request handed to an external rendering engine.

``StockReportRequest`` is a plain value: the renderer decides how it becomes a
document. Everything the report shows is carried here, so a renderer needs no
access to the log store or the medicines catalogue.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from medistock_audit.models.movement import PeriodStatistics, StockMovement

DEFAULT_REPORT_TITLE = "Rapport de mouvements de stock"


class StockReportRequest(BaseModel):
    """Structured stock-movement report request.

    Attributes:
        title: Document title.
        movements: Filtered movements, in caller order.
        statistics: Statistics computed over the same movements.
        filter_label: Human-readable filter / date range label, e.g. ``"Ce mois"``.
        author_name: Display name of the user producing the report.
        subject_names: ``subject_id`` → medicine name for the movements shown.
        generated_at: When the request was built (UTC).
    """

    model_config = ConfigDict(frozen=True)

    title: str = DEFAULT_REPORT_TITLE
    movements: list[StockMovement]
    statistics: PeriodStatistics
    filter_label: str
    author_name: str
    subject_names: dict[str, str] = {}
    generated_at: datetime
