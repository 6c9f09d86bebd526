"""Tests for releasecore.logging module."""

from __future__ import annotations

import json
import logging

import pytest

from releasecore import (
    LogLevel,
    ReleaseCoreConfig,
    ReleaseFormatter,
    ResolveRelease,
    get_release_logger,
    safe_preview,
    setup_logging,
)


class TestSafePreview:
    """Tests for safe_preview function."""

    def test_none_value(self) -> None:
        """Test that None returns empty string."""
        assert safe_preview(None) == ""

    def test_string_with_whitespace(self) -> None:
        """Test that whitespace is normalized."""
        assert safe_preview("hello\n\tworld  test") == "hello world test"

    def test_string_truncation(self) -> None:
        """Test that long strings are truncated."""
        result = safe_preview("a" * 300, limit=100)
        assert len(result) == 100
        assert result.endswith("…")

    def test_list_value(self) -> None:
        assert safe_preview(["a", "b"]) == '["a", "b"]'

    def test_model_value(self) -> None:
        """Test pydantic models are rendered as JSON."""
        entry = ResolveRelease(resource_id="r1", contracts=[{"policy_id": "p1"}])
        result = safe_preview(entry)
        assert '"resource_id": "r1"' in result


def _record(message: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("releasecore.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestReleaseFormatter:
    """Tests for ReleaseFormatter."""

    def test_json_output(self) -> None:
        output = ReleaseFormatter(json_format=True).format(
            _record(release_id="rel-1", scheme_id="s-1")
        )
        data = json.loads(output)
        assert data["message"] == "hello"
        assert data["level"] == "INFO"
        assert data["release_id"] == "rel-1"
        assert data["scheme_id"] == "s-1"

    def test_plain_output(self) -> None:
        output = ReleaseFormatter(json_format=False).format(_record(release_id="rel-1"))
        assert "release_id=rel-1" in output
        assert output.endswith(": hello")


class TestReleaseLoggerAdapter:
    """Tests for get_release_logger."""

    def test_context_and_fields_become_extra(self, caplog: pytest.LogCaptureFixture) -> None:
        log = get_release_logger("releasecore.test", release_id="rel-1", request_id="req-1")
        with caplog.at_level(logging.INFO, logger="releasecore.test"):
            log.info("Scheme created", scheme_id="s-1")

        record = caplog.records[-1]
        assert record.release_id == "rel-1"
        assert record.request_id == "req-1"
        assert record.scheme_id == "s-1"

    def test_per_call_release_id_overrides(self, caplog: pytest.LogCaptureFixture) -> None:
        log = get_release_logger("releasecore.test", release_id="rel-1")
        with caplog.at_level(logging.INFO, logger="releasecore.test"):
            log.info("override", release_id="rel-2")
        assert caplog.records[-1].release_id == "rel-2"


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_configures_root_logger(self) -> None:
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging(ReleaseCoreConfig(log_level=LogLevel.DEBUG), json_format=True)
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, ReleaseFormatter)
            assert root.handlers[0].formatter.json_format is True
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
