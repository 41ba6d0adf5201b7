"""Tests for pagegen.common.logging: correlation IDs and JSON output."""

import io
import json

import structlog

from pagegen.common.logging import (
    add_correlation_id,
    configure_logging,
    correlation_id_var,
    get_correlation_id,
    set_correlation_id,
)


class TestCorrelationId:
    def test_set_and_get(self):
        cid = set_correlation_id("test-123")
        assert cid == "test-123"
        assert get_correlation_id() == "test-123"

    def test_auto_generate(self):
        cid = set_correlation_id()
        assert len(cid) == 16
        assert get_correlation_id() == cid

    def test_default_empty(self):
        token = correlation_id_var.set("")
        try:
            assert get_correlation_id() == ""
        finally:
            correlation_id_var.reset(token)

    def test_processor_adds_id(self):
        token = correlation_id_var.set("abc")
        try:
            assert add_correlation_id(None, "info", {"event": "x"}) == {"event": "x", "correlation_id": "abc"}
        finally:
            correlation_id_var.reset(token)

    def test_processor_skips_empty_id(self):
        token = correlation_id_var.set("")
        try:
            assert add_correlation_id(None, "info", {"event": "x"}) == {"event": "x"}
        finally:
            correlation_id_var.reset(token)


class TestConfigureLogging:
    def teardown_method(self):
        structlog.reset_defaults()

    def test_emits_json_lines(self):
        stream = io.StringIO()
        configure_logging("INFO", file=stream)
        token = correlation_id_var.set("cid-1")
        try:
            structlog.get_logger().info("csv_parsed", rows=3)
        finally:
            correlation_id_var.reset(token)

        entry = json.loads(stream.getvalue().strip())
        assert entry["event"] == "csv_parsed"
        assert entry["rows"] == 3
        assert entry["level"] == "info"
        assert entry["correlation_id"] == "cid-1"
        assert "timestamp" in entry

    def test_filters_below_level(self):
        stream = io.StringIO()
        configure_logging("warning", file=stream)
        logger = structlog.get_logger()
        logger.info("quiet")
        logger.warning("loud")

        lines = stream.getvalue().strip().splitlines()
        assert [json.loads(line)["event"] for line in lines] == ["loud"]
