"""Tests for structured logging configuration."""

import json
import logging
from io import StringIO
from unittest.mock import patch

import structlog

from carousel_engine.core.logging import (
    bind_page_context,
    clear_page_context,
    configure_logging,
    get_logger,
    page_context,
)


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def setup_method(self) -> None:
        """Reset structlog and logging configuration before each test."""
        structlog.reset_defaults()

    def test_configure_development_mode(self) -> None:
        """Should configure pretty-printed output in development mode."""
        configure_logging(development=True)
        logger = get_logger("test")
        # Should not raise
        logger.info("page_merged", page=1, items=12)

    def test_configure_production_mode(self) -> None:
        """Should configure JSON output in production mode."""
        configure_logging(development=False)
        logger = get_logger("test")
        # Should not raise
        logger.info("page_merged", page=1, items=12)

    def test_reads_environment_variable(self) -> None:
        """Should read ENVIRONMENT env var to determine mode."""
        with patch.dict("os.environ", {"ENVIRONMENT": "production"}):
            configure_logging()
            logger = get_logger("test")
            logger.info("test")

    def test_reads_log_level_environment_variable(self) -> None:
        """Should read LOG_LEVEL env var."""
        with patch.dict("os.environ", {"LOG_LEVEL": "DEBUG"}):
            configure_logging(development=True)
            assert logging.getLogger().level == logging.DEBUG

    def test_default_log_level_is_info(self) -> None:
        """Should default to INFO log level."""
        configure_logging(development=True, log_level="INFO")
        assert logging.getLogger().level == logging.INFO

    def test_unknown_log_level_falls_back_to_info(self) -> None:
        """Should fall back to INFO for unknown level names."""
        configure_logging(development=True, log_level="CHATTY")
        assert logging.getLogger().level == logging.INFO

    def test_silences_transport_loggers(self) -> None:
        """Should set transport library loggers to WARNING level."""
        configure_logging(development=True)
        assert logging.getLogger("aiohttp").level == logging.WARNING
        assert logging.getLogger("asyncio").level == logging.WARNING


class TestGetLogger:
    """Tests for get_logger function."""

    def setup_method(self) -> None:
        """Configure logging before each test."""
        structlog.reset_defaults()
        configure_logging(development=True)

    def test_returns_bound_logger(self) -> None:
        """Should return a structlog BoundLogger."""
        logger = get_logger("carousel_engine.core.carousel")
        assert hasattr(logger, "info")
        assert hasattr(logger, "debug")
        assert hasattr(logger, "warning")
        assert hasattr(logger, "error")

    def test_logger_without_name(self) -> None:
        """Should create logger without name."""
        logger = get_logger()
        logger.info("test message")

    def test_bound_carousel_name(self) -> None:
        """Should accept a carousel name bound as context."""
        logger = get_logger("test").bind(carousel="flash_sale")
        logger.info("first_page_loaded", items=6)


class TestProductionJsonOutput:
    """Tests for JSON output in production mode."""

    def setup_method(self) -> None:
        """Reset configuration before each test."""
        structlog.reset_defaults()

    def test_json_output_is_valid(self) -> None:
        """Should produce valid JSON in production mode."""
        output = StringIO()
        handler = logging.StreamHandler(output)
        handler.setLevel(logging.INFO)

        configure_logging(development=False, log_level="INFO")

        root_logger = logging.getLogger()
        root_logger.addHandler(handler)

        try:
            logger = get_logger("test")
            logger.info("page_merged", carousel="flash_sale", page=2)

            handler.flush()
            log_output = output.getvalue()

            if log_output.strip():
                lines = [line for line in log_output.strip().split("\n") if line]
                if lines:
                    parsed = json.loads(lines[-1])
                    assert parsed["event"] == "page_merged"
                    assert parsed["carousel"] == "flash_sale"
                    assert parsed["page"] == 2
        finally:
            root_logger.removeHandler(handler)


class TestStructuredLoggingIntegration:
    """Integration tests for structured logging."""

    def setup_method(self) -> None:
        """Configure logging before each test."""
        structlog.reset_defaults()
        configure_logging(development=True)

    def test_log_with_exception(self) -> None:
        """Should handle exception logging."""
        logger = get_logger("test")
        try:
            raise ValueError("test error")
        except ValueError:
            logger.exception("caught error")

    def test_log_levels(self) -> None:
        """Should support all standard log levels."""
        logger = get_logger("test")
        logger.debug("debug message")
        logger.info("info message")
        logger.warning("warning message")
        logger.error("error message")


class TestPageContext:
    """Tests for page-level context helpers."""

    def setup_method(self) -> None:
        """Start every test from an empty context."""
        structlog.contextvars.clear_contextvars()

    def teardown_method(self) -> None:
        structlog.contextvars.clear_contextvars()

    def test_bind_and_clear(self) -> None:
        """Should bind page context until it is cleared."""
        bind_page_context(route="/", session_id="s-42")
        assert structlog.contextvars.get_contextvars() == {"route": "/", "session_id": "s-42"}

        clear_page_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_scoped_context_is_removed_on_exit(self) -> None:
        """Should only keep scoped context inside the block."""
        bind_page_context(route="/")
        with page_context(carousel="flash_sale"):
            assert structlog.contextvars.get_contextvars() == {
                "route": "/",
                "carousel": "flash_sale",
            }
        assert structlog.contextvars.get_contextvars() == {"route": "/"}

    def test_context_reaches_json_output(self) -> None:
        """Should merge page context into production log lines."""
        structlog.reset_defaults()
        output = StringIO()
        handler = logging.StreamHandler(output)
        configure_logging(development=False, log_level="INFO")
        root_logger = logging.getLogger()
        root_logger.addHandler(handler)

        try:
            with page_context(route="/sale"):
                get_logger("test").info("first_page_loaded", items=6)
            handler.flush()
            parsed = json.loads(output.getvalue().strip().split("\n")[-1])
            assert parsed["route"] == "/sale"
            assert parsed["event"] == "first_page_loaded"
        finally:
            root_logger.removeHandler(handler)
