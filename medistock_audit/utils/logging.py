"""
Logging setup for the medistock-audit CLI.

``configure_logging(config)`` is called once per command, right after the
config is loaded. Library modules only ever do
``logger = logging.getLogger(__name__)``.

Log lines go to stderr so that tables, CSV paths and ``[OK]`` messages on
stdout can be piped. Timestamps are UTC in both output styles.

With ``json_format = true`` under ``[logging]`` each record becomes one JSON
object::

    {"ts": "2026-10-18T09:00:00Z", "level": "INFO",
     "logger": "medistock_audit.reporting.export", "msg": "Exported 4 movements to ..."}
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from medistock_audit.config import LoggingConfig

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(message)s"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record, with ``extra=`` fields merged at top level."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict = {
            "ts": created.strftime(TIMESTAMP_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(
            (key, val)
            for key, val in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


def build_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return JsonLineFormatter()
    formatter = logging.Formatter(TEXT_FORMAT, datefmt=TIMESTAMP_FORMAT)
    formatter.converter = time.gmtime
    return formatter


def _handler(
    formatter: logging.Formatter,
    level: int,
    log_file: Optional[str] = None,
) -> logging.Handler:
    if log_file is None:
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
    else:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_logging(config: "LoggingConfig") -> None:
    """(Re)configure the root logger from a ``LoggingConfig``.

    Replaces any handlers installed by a previous call, so commands invoked
    repeatedly in one process (tests) do not stack handlers.

    Args:
        config: ``AppConfig.logging``.
    """
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    formatter = build_formatter(config.json_format)
    handlers = [_handler(formatter, level)]
    if config.log_file:
        handlers.append(_handler(formatter, level, config.log_file))

    logging.basicConfig(level=level, handlers=handlers, force=True)
