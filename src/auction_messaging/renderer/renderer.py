"""Message renderer turning expanded text into styled chat lines.

Each line of an expanded message is parsed into styled segments. When an
auction is attached, the ``[item]`` placeholder is replaced by the configured
item label and, for item rewards, decorated with a hover preview produced by
the host's item serializer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from typing import TYPE_CHECKING, Protocol

from auction_messaging.config import COLOR_CODE_CHAR, Settings, get_settings
from auction_messaging.formatter.placeholders import ITEM_NAME
from auction_messaging.models import ItemReward
from auction_messaging.renderer.colors import (
    ALL_CODES,
    COLOR_CODES,
    RESET_CODE,
    translate_color_codes,
)
from auction_messaging.renderer.models import HoverPreview, RenderedLine, TextSegment

if TYPE_CHECKING:
    from auction_messaging.models import AuctionContext, Reward

logger = logging.getLogger(__name__)

ITEM_TOKEN = "[item]"

FORMAT_FLAGS = {
    "k": "obfuscated",
    "l": "bold",
    "m": "strikethrough",
    "n": "underlined",
    "o": "italic",
}


class ItemSerializer(Protocol):
    """Protocol for host item serializers."""

    def serialize(self, item: object) -> str | None:
        """Serialize an item for a hover preview. May raise on failure."""
        ...


def parse_legacy_text(text: str) -> tuple[TextSegment, ...]:
    """Split section-sign coded text into styled segments.

    A colour code clears any format flags, a format code adds its flag to
    the current colour and ``r`` resets both. Unknown codes stay in the text.
    """
    segments: list[TextSegment] = []
    style = TextSegment(text="")
    buffer: list[str] = []

    def flush() -> None:
        if buffer:
            segments.append(replace(style, text="".join(buffer)))
            buffer.clear()

    i = 0
    while i < len(text):
        char = text[i]
        if char == COLOR_CODE_CHAR and i + 1 < len(text):
            code = text[i + 1].lower()
            if code in ALL_CODES:
                flush()
                if code in COLOR_CODES:
                    style = TextSegment(text="", color=code)
                elif code == RESET_CODE:
                    style = TextSegment(text="")
                else:
                    style = replace(style, **{FORMAT_FLAGS[code]: True})
                i += 2
                continue
        buffer.append(char)
        i += 1

    flush()
    return tuple(segments)


class MessageRenderer:
    """Renders expanded messages into lines of styled segments."""

    def __init__(
        self,
        settings_provider: Callable[[], Settings] = get_settings,
        serializer: ItemSerializer | None = None,
    ) -> None:
        """Initialize the renderer.

        Args:
            settings_provider: Callable returning the current settings.
            serializer: Host item serializer used for hover previews.
        """
        self._settings_provider = settings_provider
        self._serializer = serializer

    def render(
        self, text: str, auction: AuctionContext | None = None
    ) -> list[RenderedLine]:
        """Render an expanded message.

        Args:
            text: Expanded message text with section-sign codes.
            auction: Auction used for the ``[item]`` placeholder, if any.

        Returns:
            One RenderedLine per newline-separated line, empty lines included.
        """
        lines = [parse_legacy_text(line) for line in text.split("\n")]

        if auction is None:
            return [RenderedLine(segments=segments) for segments in lines]

        settings = self._settings_provider()
        label = translate_color_codes(
            settings.item_format.replace(ITEM_NAME, auction.reward.name),
            settings.color_char,
        )

        preview: HoverPreview | None = None
        preview_loaded = False
        rendered: list[RenderedLine] = []

        for segments in lines:
            formatted: list[TextSegment] = []
            for segment in segments:
                if ITEM_TOKEN not in segment.text:
                    formatted.append(segment)
                    continue

                if not preview_loaded:
                    preview = self._build_preview(auction.reward)
                    preview_loaded = True

                formatted.append(
                    replace(
                        segment,
                        text=segment.text.replace(ITEM_TOKEN, label),
                        hover=preview if preview is not None else segment.hover,
                    )
                )
            rendered.append(RenderedLine(segments=tuple(formatted)))

        return rendered

    def _build_preview(self, reward: Reward) -> HoverPreview | None:
        """Build the hover preview for a reward, or None if unavailable."""
        if not isinstance(reward, ItemReward) or self._serializer is None:
            return None

        try:
            payload = self._serializer.serialize(reward.item)
        except Exception as e:
            logger.error(
                f"Failed to serialize item for hover preview: {e}", exc_info=True
            )
            return None

        if not payload:
            return None
        return HoverPreview(value=payload)
