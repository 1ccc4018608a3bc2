"""
Unit Tests for Logging Module

Tests logger configuration, request context, PII redaction and logging utilities.
"""

from unittest.mock import MagicMock

import pytest

from src.core.config.constants import Stage
from src.core.logging.logger import (
    add_log_level_name,
    add_request_id,
    add_timestamp,
    clear_request_id,
    get_logger,
    get_request_id,
    log_stage,
    redact_pii,
    set_request_id,
    setup_logging,
)


@pytest.mark.unit
class TestLoggerCreation:
    """Test logger creation and configuration."""

    def test_get_logger_returns_logger_instance(self):
        """Test that get_logger returns a logger with logging methods."""
        logger = get_logger(__name__)
        assert hasattr(logger, "info")
        assert hasattr(logger, "debug")

    @pytest.mark.parametrize("log_format", ["json", "console"])
    def test_setup_logging_accepts_both_formats(self, log_format):
        """Test that setup_logging configures structlog without errors."""
        setup_logging(log_level="DEBUG", log_format=log_format)
        get_logger("test").info("configured", stage=Stage.INITIALIZATION.value)


@pytest.mark.unit
class TestRequestContext:
    """Test request ID context management."""

    def test_set_and_get_request_id(self):
        """Test that the request ID round-trips through the context."""
        set_request_id("req-123")
        try:
            assert get_request_id() == "req-123"
        finally:
            clear_request_id()

    def test_clear_request_id(self):
        """Test that clear_request_id removes the context value."""
        set_request_id("req-123")
        clear_request_id()
        assert get_request_id() is None

    def test_add_request_id_processor(self):
        """Test that the processor adds request_id when one is set."""
        set_request_id("req-9")
        try:
            event = add_request_id(None, "info", {"event": "x"})
        finally:
            clear_request_id()

        assert event["request_id"] == "req-9"

    def test_add_request_id_skips_when_unset(self):
        """Test that no request_id field is added without a request."""
        clear_request_id()
        assert "request_id" not in add_request_id(None, "info", {"event": "x"})


@pytest.mark.unit
class TestProcessors:
    """Test custom structlog processors."""

    def test_timestamp_is_utc_iso(self):
        """Test the timestamp format."""
        event = add_timestamp(None, "info", {})
        assert event["timestamp"].endswith("Z")
        assert "T" in event["timestamp"]

    def test_level_name_uppercased(self):
        """Test level normalization."""
        assert add_log_level_name(None, "info", {"level": "warning"})["level"] == "WARNING"

    def test_redacts_email_in_cache_key(self):
        """Test that emails embedded in cache keys are redacted."""
        event = redact_pii(None, "debug", {"event": "Cache hit", "cache_key": "user:jane.doe@example.com"})
        assert event["cache_key"] == "user:[EMAIL]"

    def test_redacts_bearer_token_and_phone(self):
        """Test token and phone redaction in the message."""
        event = redact_pii(None, "info", {"event": "Bearer abc.def-123 called 555-123-4567"})
        assert "abc.def-123" not in event["event"]
        assert "[PHONE]" in event["event"]

    def test_leaves_other_fields_untouched(self):
        """Test that non-string and unrelated fields are kept."""
        event = redact_pii(None, "info", {"event": "ok", "deleted": 3, "error": "a@b.com"})
        assert event["deleted"] == 3
        assert event["error"] == "a@b.com"


@pytest.mark.unit
class TestLogStage:
    """Test the log_stage helper."""

    def test_log_stage_uses_enum_value(self):
        """Test that enum stages are logged by value."""
        logger = MagicMock()

        log_stage(logger, Stage.LOOKUP, "Cache hit", cache_key="jobs:1")

        logger.info.assert_called_once_with("Cache hit", stage="CACHE.2_LOOKUP", cache_key="jobs:1")

    def test_log_stage_respects_level(self):
        """Test that the level selects the logger method."""
        logger = MagicMock()

        log_stage(logger, "CUSTOM", "careful", level="WARNING")

        logger.warning.assert_called_once_with("careful", stage="CUSTOM")
        logger.info.assert_not_called()
