# tests/unit/logging/test_logger.py - v1
"""Tests for logging/logger.py - logger setup and formatters."""

from __future__ import annotations

import io
import json
import logging

from ppsequencer.config.settings import Settings
from ppsequencer.logging.context import clear_context, set_operation_context, set_project_context
from ppsequencer.logging.logger import (
    JsonFormatter,
    TextFormatter,
    get_logger,
    setup_logging,
    setup_logging_from_settings,
)


def _record(msg: str = "Hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test", level=logging.INFO, pathname="", lineno=0,
        msg=msg, args=(), exc_info=None,
    )
    for k, v in extra.items():
        setattr(record, k, v)
    return record


class TestJsonFormatter:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["level"] == "INFO"
        assert parsed["message"] == "Hello"
        assert "timestamp" in parsed
        assert "context" not in parsed

    def test_format_with_context(self):
        set_project_context("crm", "alice")
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["context"] == {"project_id": "crm", "actor": "alice"}

    def test_extra_data(self):
        parsed = json.loads(JsonFormatter().format(_record(data={"edges": 3})))
        assert parsed["data"] == {"edges": 3}


class TestTextFormatter:
    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        output = TextFormatter().format(_record("Hello text"))
        assert "Hello text" in output
        assert "INFO" in output

    def test_context_shown(self):
        set_project_context("crm")
        set_operation_context("assign_phase")
        output = TextFormatter().format(_record())
        assert "[crm]" in output
        assert "(assign_phase)" in output


class TestSetupLogging:
    def teardown_method(self):
        root = logging.getLogger("ppsequencer")
        for handler in root.handlers:
            handler.close()
        root.handlers.clear()
        root.setLevel(logging.NOTSET)

    def test_get_logger_name(self):
        assert get_logger("graph").name == "ppsequencer.graph"

    def test_no_duplicate_handlers(self):
        setup_logging(level="DEBUG", log_format="text")
        root = setup_logging(level="DEBUG", log_format="text")
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG

    def test_records_reach_stream(self):
        stream = io.StringIO()
        setup_logging(level="INFO", log_format="json", stream=stream)
        logging.getLogger("ppsequencer.sequencing.coordinator").info("committed")
        line = stream.getvalue().strip().splitlines()[-1]
        assert json.loads(line)["message"] == "committed"

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "engine.log"
        root = setup_logging(log_format="text", log_file=log_file, stream=io.StringIO())
        assert len(root.handlers) == 2
        logging.getLogger("ppsequencer.test").warning("to file")
        for handler in root.handlers:
            handler.flush()
        assert "to file" in log_file.read_text()

    def test_from_settings(self):
        settings = Settings(_env_file=None, log_level="WARNING", log_format="text")
        root = setup_logging_from_settings(settings, stream=io.StringIO())
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, TextFormatter)
