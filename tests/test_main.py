"""Tests for the CLI entry point."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest

from auction_messaging.__main__ import (
    EXIT_CONFIG_ERROR,
    EXIT_ERROR,
    EXIT_SUCCESS,
    configure_logging,
    create_parser,
    main,
    run_broadcasts,
    run_config_check,
    validate_config,
)
from auction_messaging.config import clear_settings_cache
from auction_messaging.dispatcher.sinks import CHAT_LOGGER_NAME
from auction_messaging.models import Message

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def reset_logging(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Isolate settings and logging changes made by the CLI."""
    for name in (
        "AUCTIONS_TAX_PERCENT",
        "AUCTIONS_TRUNCATE_NUMBERS",
        "AUCTIONS_ITEM_FORMAT",
        "AUCTIONS_COLOR_CHAR",
        "AUCTIONS_QUEUE_MAXSIZE",
        "AUCTIONS_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    root = logging.getLogger()
    root_handlers = list(root.handlers)
    root_level = root.level
    clear_settings_cache()
    yield
    clear_settings_cache()
    root.handlers[:] = root_handlers
    root.setLevel(root_level)
    chat_logger = logging.getLogger(CHAT_LOGGER_NAME)
    chat_logger.handlers.clear()
    chat_logger.propagate = True
    chat_logger.setLevel(logging.NOTSET)


class TestCreateParser:
    """Tests for argument parser creation."""

    def test_parser_has_version(self):
        """Parser should have version flag."""
        parser = create_parser()
        with pytest.raises(SystemExit) as exc_info:
            parser.parse_args(["--version"])
        assert exc_info.value.code == 0

    def test_parser_config_check(self):
        """Parser should accept --config-check flag."""
        parser = create_parser()
        args = parser.parse_args(["--config-check"])
        assert args.config_check is True

    def test_parser_log_level(self):
        """Parser should accept --log-level option."""
        parser = create_parser()
        args = parser.parse_args(["--log-level", "DEBUG"])
        assert args.log_level == "DEBUG"

    def test_parser_message_flags(self):
        """Parser should accept message flags and templates."""
        parser = create_parser()
        args = parser.parse_args(["--ignorable", "--spammy", "&aone", "two"])
        assert args.ignorable is True
        assert args.spammy is True
        assert args.messages == ["&aone", "two"]

    def test_parser_default_values(self):
        """Parser should have correct defaults."""
        parser = create_parser()
        args = parser.parse_args([])
        assert args.config_check is False
        assert args.log_level is None
        assert args.ignorable is False
        assert args.spammy is False
        assert args.messages == []


class TestConfigureLogging:
    """Tests for logging configuration."""

    def test_configure_logging_info(self):
        """Should configure logging at INFO level."""
        configure_logging("INFO")
        assert logging.getLogger().level == logging.INFO

    def test_configure_logging_debug(self):
        """Should configure logging at DEBUG level."""
        configure_logging("DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_chat_logger_does_not_propagate(self):
        """Chat lines should only go to the chat handler."""
        configure_logging("WARNING")
        assert logging.getLogger(CHAT_LOGGER_NAME).propagate is False


class TestValidateConfig:
    """Tests for configuration validation."""

    def test_validate_config_success(self):
        """Should return settings on valid config."""
        settings = validate_config()
        assert settings is not None

    def test_validate_config_failure(self, monkeypatch, capsys):
        """Should return None on invalid config."""
        monkeypatch.setenv("AUCTIONS_TAX_PERCENT", "150")

        settings = validate_config()
        assert settings is None

        captured = capsys.readouterr()
        assert "Configuration validation failed" in captured.err
        assert "tax_percent" in captured.err


class TestRunConfigCheck:
    """Tests for config check mode."""

    def test_config_check_prints_summary(self, capsys):
        """Config check should print configuration summary."""
        settings = validate_config()
        assert settings is not None

        result = run_config_check(settings)
        assert result == EXIT_SUCCESS

        captured = capsys.readouterr()
        assert "Configuration is valid!" in captured.out
        assert "Configuration:" in captured.out
        assert "Truncate Numbers: False" in captured.out


class TestRunBroadcasts:
    """Tests for the broadcast runner."""

    @pytest.mark.asyncio
    async def test_broadcasts_to_console(self, caplog):
        """Messages should reach the console through the logging sink."""
        with caplog.at_level(logging.INFO, logger=CHAT_LOGGER_NAME):
            result = await run_broadcasts([Message("&aHello"), Message("&cWorld")])

        assert result == EXIT_SUCCESS
        assert "[CONSOLE] Hello" in caplog.text
        assert caplog.text.index("Hello") < caplog.text.index("World")


class TestMain:
    """Tests for main entry point."""

    def test_main_with_config_check(self):
        """Main should exit successfully with --config-check."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--config-check"])

        assert exc_info.value.code == EXIT_SUCCESS

    def test_main_with_invalid_config(self, monkeypatch):
        """Main should exit with config error on invalid config."""
        monkeypatch.setenv("AUCTIONS_COLOR_CHAR", "&&")

        with pytest.raises(SystemExit) as exc_info:
            main(["hello"])

        assert exc_info.value.code == EXIT_CONFIG_ERROR

    def test_main_without_messages(self, capsys):
        """Main should fail when there is nothing to broadcast."""
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == EXIT_ERROR
        assert "nothing to broadcast" in capsys.readouterr().err

    @patch("auction_messaging.__main__.run_broadcasts")
    @patch("auction_messaging.__main__.asyncio.run")
    def test_main_runs_broadcasts(self, mock_asyncio_run, mock_run_broadcasts):
        """Main should run the broadcasts when given messages."""
        mock_asyncio_run.return_value = EXIT_SUCCESS

        with pytest.raises(SystemExit) as exc_info:
            main(["--ignorable", "hello"])

        assert exc_info.value.code == EXIT_SUCCESS
        mock_asyncio_run.assert_called_once()
        (messages,) = mock_run_broadcasts.call_args.args
        assert messages == [Message("hello", ignorable=True, spammy=False)]

    def test_main_broadcasts(self, capsys):
        """Main should print broadcast lines to stdout."""
        with pytest.raises(SystemExit) as exc_info:
            main(["&aAuction &lstarted"])

        assert exc_info.value.code == EXIT_SUCCESS
        assert "Auction started" in capsys.readouterr().out


class TestIntegration:
    """Integration tests for CLI invocation."""

    def test_cli_help_option(self, capsys):
        """CLI should display help with -h option."""
        with pytest.raises(SystemExit) as exc_info:
            main(["-h"])

        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "auction-messaging" in captured.out
        assert "--config-check" in captured.out
        assert "--ignorable" in captured.out
        assert "--log-level" in captured.out

    def test_cli_version_option(self, capsys):
        """CLI should display version with --version option."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "0.1.0" in captured.out

    def test_cli_invalid_log_level(self, capsys):
        """CLI should reject invalid log level."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--log-level", "INVALID"])

        assert exc_info.value.code != 0
        captured = capsys.readouterr()
        assert "invalid choice" in captured.err
