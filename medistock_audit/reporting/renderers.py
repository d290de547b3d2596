"""
Report renderers — turn a ``StockReportRequest`` into document bytes.

The PDF engine lives outside this package; anything with a
``render(request) -> bytes`` method satisfies ``ReportRenderer`` and can be
passed to ``export.export_pdf``.

``JsonReportRenderer`` is the built-in renderer used by the CLI: it emits the
request itself as pretty-printed UTF-8 JSON, which a downstream PDF service
(or a human) can consume.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from medistock_audit.models.report import StockReportRequest


@runtime_checkable
class ReportRenderer(Protocol):
    """Renders a report request to raw document bytes.

    Implementations may raise any exception on failure; the exporter wraps it
    in ``ExportError`` for the caller.
    """

    file_suffix: str

    def render(self, request: StockReportRequest) -> bytes: ...


class JsonReportRenderer:
    """Serialise the report request as indented JSON."""

    file_suffix = ".json"

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def render(self, request: StockReportRequest) -> bytes:
        return request.model_dump_json(indent=self.indent).encode("utf-8")
