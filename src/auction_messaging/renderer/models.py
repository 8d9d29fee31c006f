"""Data models for rendered chat lines."""

from __future__ import annotations

from dataclasses import dataclass

from auction_messaging.config import COLOR_CODE_CHAR
from auction_messaging.renderer.colors import RESET_CODE, strip_color_codes

SHOW_ITEM = "show_item"


@dataclass(frozen=True)
class HoverPreview:
    """Structured content shown when a recipient hovers over a segment.

    Attributes:
        action: Hover action name understood by the chat client.
        value: Raw payload, e.g. the serialized item.
    """

    value: str
    action: str = SHOW_ITEM


@dataclass(frozen=True)
class TextSegment:
    """A run of text sharing one colour and set of format flags."""

    text: str
    color: str | None = None
    bold: bool = False
    italic: bool = False
    underlined: bool = False
    strikethrough: bool = False
    obfuscated: bool = False
    hover: HoverPreview | None = None

    def format_codes(self) -> str:
        """Return the colour and format codes that open this segment."""
        codes: list[str] = []
        if self.color is not None:
            codes.append(self.color)
        for flag, code in (
            (self.obfuscated, "k"),
            (self.bold, "l"),
            (self.strikethrough, "m"),
            (self.underlined, "n"),
            (self.italic, "o"),
        ):
            if flag:
                codes.append(code)
        return "".join(f"{COLOR_CODE_CHAR}{code}" for code in codes)


@dataclass(frozen=True)
class RenderedLine:
    """One line of a message, ready for delivery."""

    segments: tuple[TextSegment, ...] = ()

    @property
    def has_hover(self) -> bool:
        """Return True if any segment carries a hover preview."""
        return any(segment.hover is not None for segment in self.segments)

    def to_legacy_text(self) -> str:
        """Encode the line as section-sign coded text for plain recipients."""
        parts: list[str] = []
        for i, segment in enumerate(self.segments):
            if i and segment.color is None:
                # Uncoloured segments must not inherit the previous style
                parts.append(f"{COLOR_CODE_CHAR}{RESET_CODE}")
            parts.append(segment.format_codes())
            parts.append(segment.text)
        return "".join(parts)

    def to_plain_text(self) -> str:
        """Return the line without any colour or format codes."""
        return strip_color_codes("".join(segment.text for segment in self.segments))
