"""Tests for setup_logging()."""

import logging

import pytest
from jarfetch import setup_logging


@pytest.fixture
def clean_logger():
    logger = logging.getLogger("jarfetch")
    saved_handlers = list(logger.handlers)
    saved_level = logger.level
    logger.handlers.clear()
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = saved_handlers
    logger.setLevel(saved_level)
    logger.propagate = True


@pytest.fixture
def transport_logger():
    logger = logging.getLogger("aiohttp.client")
    saved_handlers = list(logger.handlers)
    saved_level = logger.level
    saved_propagate = logger.propagate
    logger.handlers.clear()
    yield logger
    logger.handlers[:] = saved_handlers
    logger.setLevel(saved_level)
    logger.propagate = saved_propagate


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_console_handler_added(self, clean_logger):
        """Test that a single stdout handler is configured."""
        logger = setup_logging("DEBUG")

        assert logger is clean_logger
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_not_reconfigured_without_force(self, clean_logger):
        """Test that a second call keeps the existing handlers."""
        setup_logging()
        handler = clean_logger.handlers[0]

        setup_logging("WARNING")

        assert clean_logger.handlers == [handler]
        assert clean_logger.level == logging.WARNING

    def test_force_replaces_handlers(self, clean_logger):
        """Test that force=True rebuilds the handlers."""
        setup_logging()
        handler = clean_logger.handlers[0]

        setup_logging(force=True)

        assert len(clean_logger.handlers) == 1
        assert clean_logger.handlers[0] is not handler

    def test_log_file(self, clean_logger, tmp_path):
        """Test that messages reach the log file, child loggers included."""
        log_file = tmp_path / "jarfetch.log"
        setup_logging("INFO", log_file=str(log_file), format_string="%(name)s:%(message)s")

        logging.getLogger("jarfetch.core.fetcher").info("restored jar")
        for handler in clean_logger.handlers:
            handler.flush()

        assert "jarfetch.core.fetcher:restored jar" in log_file.read_text()

    def test_unknown_level_defaults_to_info(self, clean_logger):
        """Test that an unknown level name falls back to INFO."""
        assert setup_logging("LOUD").level == logging.INFO

    def test_numeric_level(self, clean_logger):
        """Test that a logging constant is accepted as the level."""
        assert setup_logging(logging.WARNING).level == logging.WARNING

    def test_transport_logger_shares_handlers(self, clean_logger, transport_logger, tmp_path):
        """Test that include_transport routes aiohttp.client into the same file."""
        log_file = tmp_path / "wire.log"
        setup_logging("DEBUG", log_file=log_file, include_transport=True, format_string="%(name)s:%(message)s")

        assert transport_logger.handlers == clean_logger.handlers
        assert transport_logger.propagate is False

        logging.getLogger("aiohttp.client").debug("connection reset")
        for handler in clean_logger.handlers:
            handler.flush()

        assert "aiohttp.client:connection reset" in log_file.read_text(encoding="utf-8")

    def test_transport_logger_untouched_by_default(self, clean_logger, transport_logger):
        """Test that aiohttp's logger is left alone without include_transport."""
        setup_logging()
        assert transport_logger.handlers == []
