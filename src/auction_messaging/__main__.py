"""CLI entry point for Auction Messaging.

Renders message templates through the dispatch engine and broadcasts them
to the console, which is handy for checking colour codes and settings.

Usage:
    python -m auction_messaging [options] [MESSAGE ...]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import logging.config
import sys
from typing import NoReturn

from pydantic import ValidationError

from auction_messaging import __version__
from auction_messaging.config import Settings, clear_settings_cache, get_settings
from auction_messaging.dispatcher import ConsoleRecipient, DispatchEngine, LoggingSink
from auction_messaging.models import Message

# Application info
APP_NAME = "Auction Messaging"
APP_VERSION = __version__

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="auction-messaging",
        description="Render auction chat messages and broadcast them to the console.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m auction_messaging "&6Auction started!"    Broadcast a message
  python -m auction_messaging --config-check          Validate config and exit
  python -m auction_messaging --ignorable "&7tick"    Broadcast an ignorable message
  python -m auction_messaging --log-level DEBUG "hi"  Enable debug logging
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {APP_VERSION}",
    )

    parser.add_argument(
        "--config-check",
        action="store_true",
        help="Validate configuration and exit without broadcasting",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override logging level (default: from settings)",
    )

    parser.add_argument(
        "--ignorable",
        action="store_true",
        help="Mark the messages as ignorable",
    )

    parser.add_argument(
        "--spammy",
        action="store_true",
        help="Mark the messages as spammy",
    )

    parser.add_argument(
        "messages",
        nargs="*",
        metavar="MESSAGE",
        help="Message templates to broadcast",
    )

    return parser


def configure_logging(level: str) -> None:
    """Configure structured logging for the application.

    Args:
        level: Logging level string (DEBUG, INFO, etc.)
    """
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": (
                    "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "chat": {
                "format": "%(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "detailed" if level == "DEBUG" else "standard",
                "stream": "ext://sys.stdout",
            },
            "chat": {
                "class": "logging.StreamHandler",
                "level": "INFO",
                "formatter": "chat",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
        # Chat lines are printed verbatim
        "loggers": {
            "auction_messaging.chat": {
                "level": "INFO",
                "handlers": ["chat"],
                "propagate": False,
            },
        },
    }
    logging.config.dictConfig(config)


def print_config_summary(settings: Settings) -> None:
    """Print a summary of the configuration.

    Args:
        settings: Application settings.
    """
    summary = settings.summary()
    print("Configuration:")
    print(f"  Tax Percent: {summary['tax_percent']}")
    print(f"  Truncate Numbers: {summary['truncate_numbers']}")
    print(f"  Item Format: {summary['item_format']}")
    print(f"  Color Char: {summary['color_char']}")
    print(f"  Queue Size: {summary['queue_maxsize']}")
    print(f"  Log Level: {summary['log_level']}")
    print()


def validate_config() -> Settings | None:
    """Validate and load configuration.

    Returns:
        Settings instance if valid, None if invalid.
    """
    try:
        # Clear cache to force reload
        clear_settings_cache()
        return get_settings()
    except ValidationError as e:
        print("Configuration validation failed:", file=sys.stderr)
        for error in e.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            msg = error["msg"]
            print(f"  {field}: {msg}", file=sys.stderr)
        return None


def run_config_check(settings: Settings) -> int:
    """Run configuration check and exit.

    Args:
        settings: Validated settings.

    Returns:
        Exit code (0 for success).
    """
    print("Configuration is valid!")
    print()
    print_config_summary(settings)
    return EXIT_SUCCESS


async def run_broadcasts(messages: list[Message]) -> int:
    """Broadcast messages to the console and wait for delivery.

    Args:
        messages: Messages to broadcast, in order.

    Returns:
        Exit code.
    """
    logger = logging.getLogger(__name__)
    engine = DispatchEngine(LoggingSink(), ConsoleRecipient())

    try:
        async with engine:
            futures = [engine.submit_broadcast(message) for message in messages]
            results = await asyncio.gather(*futures)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.exception("Broadcast failed: %s", e)
        return EXIT_ERROR

    failed = sum(result.failed for result in results)
    if failed:
        logger.error(f"{failed} deliveries failed")
        return EXIT_ERROR
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:]).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Validate configuration first
    settings = validate_config()
    if settings is None:
        sys.exit(EXIT_CONFIG_ERROR)

    # Determine effective log level
    log_level = args.log_level or settings.log_level
    configure_logging(log_level)

    # Config check mode
    if args.config_check:
        sys.exit(run_config_check(settings))

    if not args.messages:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: nothing to broadcast", file=sys.stderr)
        sys.exit(EXIT_ERROR)

    messages = [
        Message(text, ignorable=args.ignorable, spammy=args.spammy) for text in args.messages
    ]
    exit_code = asyncio.run(run_broadcasts(messages))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
