"""Tests for medistock_audit.utils.logging."""

from __future__ import annotations

import json
import logging

import pytest

from medistock_audit.config import LoggingConfig
from medistock_audit.utils.logging import JsonLineFormatter, build_formatter, configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(msg: str = "Exported %d movements", *args, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "medistock_audit.reporting.export", logging.INFO, __file__, 1, msg, args or (4,), None
    )
    record.__dict__.update(extra)
    return record


def test_json_line_fields():
    payload = json.loads(JsonLineFormatter().format(_record()))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "medistock_audit.reporting.export"
    assert payload["msg"] == "Exported 4 movements"
    assert payload["ts"].endswith("Z")


def test_json_line_keeps_extra_and_unicode():
    line = JsonLineFormatter().format(_record(subject="Médicament supprimé"))
    assert "Médicament supprimé" in line
    assert json.loads(line)["subject"] == "Médicament supprimé"


def test_text_formatter():
    text = build_formatter(json_format=False).format(_record())
    assert "INFO" in text
    assert "Exported 4 movements" in text


def test_configure_logging_sets_level_and_file(tmp_path):
    log_file = tmp_path / "logs" / "audit.log"
    configure_logging(LoggingConfig(level="DEBUG", log_file=str(log_file)))

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 2

    logging.getLogger("medistock_audit.test").debug("hello %s", "file")
    for handler in root.handlers:
        handler.flush()
    assert "hello file" in log_file.read_text(encoding="utf-8")


def test_configure_logging_replaces_handlers():
    configure_logging(LoggingConfig())
    configure_logging(LoggingConfig())
    assert len(logging.getLogger().handlers) == 1
