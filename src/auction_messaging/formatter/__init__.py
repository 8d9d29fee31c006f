"""Formatting layer - Numbers and auction placeholders."""

from auction_messaging.formatter.numbers import (
    format_readable,
    format_truncated,
    format_value,
)
from auction_messaging.formatter.placeholders import (
    PlaceholderExpander,
    get_reward_display_name,
    get_top_bidder_name,
)

__all__ = [
    "PlaceholderExpander",
    "format_readable",
    "format_truncated",
    "format_value",
    "get_reward_display_name",
    "get_top_bidder_name",
]
