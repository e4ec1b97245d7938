"""Unit tests for structured logging configuration."""

import io
import json
import logging

import pytest
import structlog

from src.observability import (
    bind_session_context,
    clear_session_context,
    configure_logging,
)


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.mark.unit
    def test_json_output_with_session_context(self) -> None:
        """Events render as JSON and carry the bound session ID."""
        output = io.StringIO()
        configure_logging(output=output, json_format=True)
        bind_session_context("session-1")
        try:
            structlog.get_logger().info("ranking_complete", items_out=3)
        finally:
            clear_session_context()

        record = json.loads(output.getvalue().strip())
        assert record["event"] == "ranking_complete"
        assert record["items_out"] == 3
        assert record["session_id"] == "session-1"
        assert record["level"] == "info"
        assert "timestamp" in record

    @pytest.mark.unit
    def test_level_filtering(self) -> None:
        """Events below the configured level are dropped."""
        output = io.StringIO()
        configure_logging(level=logging.WARNING, output=output, json_format=True)

        log = structlog.get_logger()
        log.info("ignored")
        log.warning("kept")

        lines = output.getvalue().strip().splitlines()
        assert [json.loads(line)["event"] for line in lines] == ["kept"]

    @pytest.mark.unit
    def test_context_cleared(self) -> None:
        """Session context does not leak after clearing."""
        output = io.StringIO()
        configure_logging(output=output, json_format=True)
        bind_session_context("session-2")
        clear_session_context()

        structlog.get_logger().info("after_clear")

        assert "session_id" not in json.loads(output.getvalue().strip())
