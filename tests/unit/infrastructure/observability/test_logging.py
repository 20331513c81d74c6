"""Tests for structured logging."""

import json
import logging

from merch_archive.infrastructure.observability.logging import (
    CompactExceptionFormatter,
    CorrelationIdFilter,
    CustomJsonFormatter,
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)


class TestCorrelationId:
    """Test correlation ID functionality."""

    def test_set_and_get_correlation_id(self):
        """Test setting and getting correlation ID."""
        result = set_correlation_id("test-123-abc")
        assert result == "test-123-abc"
        assert get_correlation_id() == "test-123-abc"

    def test_set_correlation_id_generates_uuid_when_none(self):
        """Test that setting None generates a UUID."""
        result = set_correlation_id(None)
        assert len(result) == 36
        assert get_correlation_id() == result

    def test_filter_stamps_record(self):
        """Test that the filter copies the current ID onto log records."""
        set_correlation_id("req-42")
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "req-42"


class TestLoggingConfiguration:
    """Test logging configuration."""

    def test_configure_logging_debug_level(self):
        """Test configuring logging with DEBUG level."""
        configure_logging(log_level="DEBUG", json_format=False, app_name="test-app")
        assert logging.getLogger("test").getEffectiveLevel() <= logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        """Test that a typo in the level does not crash startup."""
        configure_logging(log_level="LOUD", json_format=False, app_name="test-app")
        assert logging.getLogger().level == logging.INFO

    def test_repeated_configuration_keeps_one_handler(self):
        """Test that handlers are replaced, not stacked."""
        configure_logging(log_level="INFO", json_format=True, app_name="test-app")
        configure_logging(log_level="INFO", json_format=False, app_name="test-app")
        assert len(logging.getLogger().handlers) == 1

    def test_json_format(self):
        """Test that JSON mode installs the JSON formatter."""
        configure_logging(log_level="INFO", json_format=True, app_name="test-app")
        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, CustomJsonFormatter)


class TestFormatters:
    """Test the custom formatters."""

    def test_json_formatter_fields(self):
        """Test that JSON lines carry level, logger and correlation ID."""
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
        record = logging.LogRecord(
            "merch_archive.test", logging.WARNING, __file__, 10, "slug taken", None, None
        )
        record.correlation_id = "abc"

        data = json.loads(formatter.format(record))

        assert data["level"] == "WARNING"
        assert data["logger"] == "merch_archive.test"
        assert data["message"] == "slug taken"
        assert data["correlation_id"] == "abc"

    def test_compact_exception_chain_root_cause_first(self):
        """Test that chained exceptions print root cause first."""
        try:
            try:
                raise KeyError("inner")
            except KeyError as e:
                raise RuntimeError("outer") from e
        except RuntimeError as exc:
            text = CompactExceptionFormatter().formatException(
                (type(exc), exc, exc.__traceback__)
            )

        lines = [line for line in text.splitlines() if line.startswith("╰─►")]
        assert lines == ["╰─► KeyError: 'inner'", "╰─► RuntimeError: outer"]

    def test_compact_exception_without_value(self):
        """Test that an empty exc_info formats to nothing."""
        assert CompactExceptionFormatter().formatException((None, None, None)) == ""
