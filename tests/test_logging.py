"""
Tests for the logging module.

Tests verify:
- configure_logging renders JSON with ECS field names
- DEBUG logs are suppressed at INFO level
- Logs go to the configured stream
- Named loggers carry their name
- Context binding and scoped LogContext
"""

from __future__ import annotations

import io
import json

import structlog
from structlog.testing import capture_logs

from rowkey.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


def _json_lines(text: str) -> list[dict]:
    return [json.loads(line) for line in text.splitlines() if line.startswith("{")]


class TestConfigureLogging:
    def test_json_output_fields(self, capsys):
        configure_logging(level="INFO", json_format=True, service="db-connector")
        get_logger("rowkey.test").info("unique_key_built", columns=["id"])

        lines = _json_lines(capsys.readouterr().out)
        assert len(lines) == 1
        entry = lines[0]
        assert entry["event"] == "unique_key_built"
        assert entry["columns"] == ["id"]
        assert entry["log.level"] == "info"
        assert entry["service.name"] == "db-connector"
        assert entry["logger_name"] == "rowkey.test"
        assert "@timestamp" in entry

    def test_debug_suppressed_at_info(self, capsys):
        configure_logging(level="INFO", json_format=True)
        get_logger("rowkey.test").debug("hidden")
        assert _json_lines(capsys.readouterr().out) == []

    def test_without_timestamp(self, capsys):
        configure_logging(level="DEBUG", json_format=True, add_timestamp=False)
        get_logger("rowkey.test").debug("shown")
        entry = _json_lines(capsys.readouterr().out)[0]
        assert "@timestamp" not in entry

    def test_writes_to_given_stream(self, capsys):
        stream = io.StringIO()
        configure_logging(level="INFO", json_format=True, stream=stream, cache_loggers=False)
        get_logger("rowkey.test").info("doc_ids_listed", listed=3)

        assert capsys.readouterr().out == ""
        entry = _json_lines(stream.getvalue())[0]
        assert entry["event"] == "doc_ids_listed"
        assert entry["listed"] == 3


class TestGetLogger:
    def test_named_logger_emits(self):
        import rowkey

        with capture_logs() as logs:
            get_logger(rowkey.__name__).info("unique_key_built", columns=["id"])
        assert logs == [
            {
                "event": "unique_key_built",
                "columns": ["id"],
                "logger_name": "rowkey",
                "log_level": "info",
            }
        ]

    def test_unnamed_logger_emits(self):
        with capture_logs() as logs:
            get_logger().warning("row_skipped")
        assert logs == [{"event": "row_skipped", "log_level": "warning"}]

    def test_module_loggers_usable(self):
        from rowkey.unique_key import UniqueKeyBuilder

        with capture_logs() as logs:
            UniqueKeyBuilder("id:int").build()
        assert logs[0]["event"] == "unique_key_built"
        assert logs[0]["logger_name"] == "rowkey.unique_key"


class TestContextManagement:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_bind_and_unbind(self):
        bind_context(doc_id="1/a", table="data")
        assert structlog.contextvars.get_contextvars() == {"doc_id": "1/a", "table": "data"}
        unbind_context("table")
        assert structlog.contextvars.get_contextvars() == {"doc_id": "1/a"}

    def test_log_context_scoped(self):
        with LogContext(doc_id="345/abc"):
            assert structlog.contextvars.get_contextvars()["doc_id"] == "345/abc"
        assert "doc_id" not in structlog.contextvars.get_contextvars()

    def test_context_merged_into_events(self, capsys):
        configure_logging(level="INFO", json_format=True)
        with LogContext(doc_id="345/abc"):
            get_logger("rowkey.test").info("acl_fetched")
        entry = _json_lines(capsys.readouterr().out)[0]
        assert entry["doc_id"] == "345/abc"
