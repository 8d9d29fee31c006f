"""Chat delivery sinks."""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from auction_messaging.dispatcher.recipients import Recipient
    from auction_messaging.renderer.models import RenderedLine

CHAT_LOGGER_NAME = "auction_messaging.chat"
DEFAULT_TRANSCRIPT_SIZE = 100


class ChatSink(Protocol):
    """Protocol for host chat delivery."""

    async def deliver(self, recipient: Recipient, line: RenderedLine) -> bool:
        """Deliver one line to one recipient. Returns True on success."""
        ...


class LoggingSink:
    """Sink that writes every delivered line to a logger.

    Recipients able to show styled text get the section-sign coded form of
    the line; all others get plain text. The most recent lines per recipient
    are also kept in ``transcript``, keyed by recipient name.
    """

    def __init__(
        self,
        chat_logger: logging.Logger | None = None,
        transcript_size: int = DEFAULT_TRANSCRIPT_SIZE,
    ) -> None:
        """Initialize the sink.

        Args:
            chat_logger: Logger receiving the lines (default: auction_messaging.chat).
            transcript_size: Lines kept per recipient in the transcript.
        """
        self._chat_logger = chat_logger or logging.getLogger(CHAT_LOGGER_NAME)
        self.transcript: defaultdict[str, deque[str]] = defaultdict(
            lambda: deque(maxlen=transcript_size)
        )

    async def deliver(self, recipient: Recipient, line: RenderedLine) -> bool:
        """Log the line for the recipient."""
        text = line.to_legacy_text() if recipient.rich_text else line.to_plain_text()
        self.transcript[recipient.name].append(text)
        self._chat_logger.info(f"[{recipient.name}] {text}")
        return True
