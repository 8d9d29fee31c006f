"""Rendering layer - Styled chat lines and item previews."""

from auction_messaging.renderer.colors import strip_color_codes, translate_color_codes
from auction_messaging.renderer.models import HoverPreview, RenderedLine, TextSegment
from auction_messaging.renderer.renderer import (
    ItemSerializer,
    MessageRenderer,
    parse_legacy_text,
)

__all__ = [
    "HoverPreview",
    "ItemSerializer",
    "MessageRenderer",
    "RenderedLine",
    "TextSegment",
    "parse_legacy_text",
    "strip_color_codes",
    "translate_color_codes",
]
