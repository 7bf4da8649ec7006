"""
Tests for logging configuration.
"""
import asyncio
import logging

import pytest

from sales_bot.tasks import ConfirmedItem, SessionStep


@pytest.fixture(autouse=True)
def restore_level():
    logger = logging.getLogger("sales_bot")
    original = logger.level
    yield
    logger.setLevel(original)


class TestLoggingConfiguration:
    """Test logging setup and configuration."""

    def test_setup_logging_default_level(self, monkeypatch):
        """Test that setup_logging defaults to INFO level."""
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        from sales_bot.logging_config import setup_logging
        setup_logging()

        logger = logging.getLogger("sales_bot")
        # INFO level is 20
        assert logger.level == logging.INFO

    def test_setup_logging_respects_env_var(self, monkeypatch):
        """Test that LOG_LEVEL env var is respected."""
        monkeypatch.setenv("LOG_LEVEL", "warning")

        from sales_bot.logging_config import setup_logging
        setup_logging()

        logger = logging.getLogger("sales_bot")
        assert logger.level == logging.WARNING

    def test_setup_logging_explicit_level(self):
        """Test that explicit level parameter works."""
        from sales_bot.logging_config import setup_logging
        setup_logging(level="ERROR")

        logger = logging.getLogger("sales_bot")
        assert logger.level == logging.ERROR

    def test_setup_logging_invalid_level_defaults_to_info(self):
        """Test that invalid level falls back to INFO."""
        from sales_bot.logging_config import setup_logging
        setup_logging(level="INVALID_LEVEL")

        logger = logging.getLogger("sales_bot")
        assert logger.level == logging.INFO

    def test_debug_logs_not_shown_at_info_level(self, caplog):
        """Test that DEBUG logs don't appear when level is INFO."""
        from sales_bot.logging_config import setup_logging
        setup_logging(level="INFO")

        with caplog.at_level(logging.INFO):
            logger = logging.getLogger("sales_bot.test")
            logger.debug("This should not appear")
            logger.info("This should appear")

            messages = [r.message for r in caplog.records]
            assert "This should not appear" not in messages
            assert "This should appear" in messages


    def test_third_party_loggers_quieted_outside_debug(self):
        """SQL echo and webhook client logs stay at WARNING unless debugging."""
        from sales_bot.logging_config import setup_logging
        setup_logging(level="INFO")

        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("urllib3").level == logging.WARNING

        setup_logging(level="DEBUG")

        assert logging.getLogger("sqlalchemy.engine").level == logging.NOTSET

    def test_resolve_level(self, monkeypatch):
        from sales_bot.logging_config import resolve_level

        monkeypatch.setenv("LOG_LEVEL", "error")

        assert resolve_level() == logging.ERROR
        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level("notset") == logging.INFO
        assert resolve_level("verbose") == logging.INFO


class TestNoOrderContentInInfoLogs:
    """Order contents are only logged at DEBUG level."""

    def test_commit_logs_no_note_or_client_at_info(self, bot, store, user, caplog):
        from sales_bot.logging_config import setup_logging
        setup_logging(level="INFO")

        store.create(
            user.id, SessionStep.WAITING_NOTE, client="ABARROTES LUPITA",
            confirmed_items=[ConfirmedItem(code="VAS10", description="VASO", quantity=1, price=25.0)],
        )

        with caplog.at_level(logging.INFO):
            asyncio.run(bot.on_text(user, "Mandar cambio de $500"))

        info_messages = [r.getMessage() for r in caplog.records if r.levelno >= logging.INFO]
        assert any("Order #1 created" in m for m in info_messages)
        for message in info_messages:
            assert "Mandar cambio" not in message
            assert "ABARROTES LUPITA" not in message
