"""Tests for structured logging setup."""

import io
import json
import logging

import pytest
import structlog

from report_logging import configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


class TestConfigureLogging:

    def test_json_output(self, restore_root_logger):
        stream = io.StringIO()
        configure_logging("INFO", "json", stream=stream)

        structlog.get_logger("report_logging_json").info("Report written", output="out.md")

        record = json.loads(stream.getvalue().strip())
        assert record["event"] == "Report written"
        assert record["output"] == "out.md"
        assert record["level"] == "info"
        assert record["logger"] == "report_logging_json"
        assert "timestamp" in record

    def test_level_filtering(self, restore_root_logger):
        stream = io.StringIO()
        configure_logging("WARNING", "text", stream=stream)

        logger = structlog.get_logger("report_logging_text")
        logger.info("Rendering report")
        logger.warning("Datastore lookup failed", key_path="eggs.meta.colour")

        output = stream.getvalue()
        assert "Rendering report" not in output
        assert "Datastore lookup failed" in output
        assert "key_path=eggs.meta.colour" in output

    def test_defaults_from_environment(self, restore_root_logger, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        monkeypatch.setenv("LOG_FORMAT", "json")
        stream = io.StringIO()
        configure_logging(stream=stream)

        logger = structlog.get_logger("report_logging_env")
        logger.warning("hidden")
        logger.error("Report generation failed")

        lines = stream.getvalue().strip().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["event"] == "Report generation failed"
