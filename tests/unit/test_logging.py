"""Tests for structured logging"""

import logging

import pytest

from yt_ersatztv.core.logging import (
    add_request_id,
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    hash_client_id,
    set_request_id,
)


class TestClientIdHashing:
    """Test client address hashing for safe logging"""

    def test_hash_client_id(self) -> None:
        client_ip = "203.0.113.7"
        hashed = hash_client_id(client_ip)

        assert hashed.startswith("sha256:")
        assert len(hashed) == 23  # "sha256:" (7) + 16 hex chars
        assert client_ip not in hashed

    def test_hash_is_stable_and_distinct(self) -> None:
        assert hash_client_id("10.0.0.1") == hash_client_id("10.0.0.1")
        assert hash_client_id("10.0.0.1") != hash_client_id("10.0.0.2")


class TestRequestIDManagement:
    """Test request_id context variable management"""

    def test_set_request_id_explicit(self) -> None:
        result = set_request_id("test-request-123")

        assert result == "test-request-123"
        assert get_request_id() == "test-request-123"
        clear_request_id()

    def test_set_request_id_auto_generate(self) -> None:
        result = set_request_id()

        assert result.startswith("req_")
        assert len(result) == 16  # "req_" (4) + 12 hex chars
        assert get_request_id() == result
        clear_request_id()

    def test_clear_request_id(self) -> None:
        set_request_id("test-123")
        clear_request_id()

        assert get_request_id() is None


class TestAddRequestIDProcessor:
    """Test request_id processor for structlog"""

    def test_add_request_id_when_set(self) -> None:
        set_request_id("test-request-456")

        result = add_request_id(None, "info", {"event": "test"})

        assert result["request_id"] == "test-request-456"
        clear_request_id()

    def test_add_request_id_when_not_set(self) -> None:
        clear_request_id()

        result = add_request_id(None, "info", {"event": "test"})

        assert "request_id" not in result


class TestLoggingConfiguration:
    """Test logging configuration"""

    def test_configure_logging_json_format(self, caplog: pytest.LogCaptureFixture) -> None:
        configure_logging(log_level="INFO", log_format="json")
        logger = get_logger("test")

        with caplog.at_level(logging.INFO):
            logger.info("video_converted", video_id="dQw4w9WgXcQ")

        assert len(caplog.records) == 1
        assert "video_converted" in caplog.records[0].message
        assert "dQw4w9WgXcQ" in caplog.records[0].message

    def test_configure_logging_console_format(self) -> None:
        configure_logging(log_level="DEBUG", log_format="console")

        get_logger("test").debug("debug message")

    def test_http_client_loggers_quieted(self) -> None:
        configure_logging(log_level="INFO")

        assert logging.getLogger("httpx").getEffectiveLevel() == logging.WARNING
        assert logging.getLogger("httpcore").getEffectiveLevel() == logging.WARNING

    def test_get_logger(self) -> None:
        configure_logging()
        logger = get_logger("test.module")

        assert hasattr(logger, "info")
        assert hasattr(logger, "error")
