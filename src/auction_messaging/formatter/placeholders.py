"""Auction placeholder expansion.

Replaces the fixed vocabulary of ``[token]`` placeholders in a message with
values taken from an auction. Replacement is literal and case-sensitive.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from auction_messaging.config import Settings, get_settings
from auction_messaging.formatter.numbers import format_readable, format_value
from auction_messaging.models import ItemReward

if TYPE_CHECKING:
    from auction_messaging.models import AuctionContext, Reward

# Placeholder tokens
ITEM_NAME = "[itemName]"
ITEM_DISPLAY_NAME = "[itemDisplayName]"
ITEM_AMOUNT = "[itemamount]"
TIME = "[time]"
OWNER_NAME = "[ownername]"
TOP_BIDDER_NAME = "[topbiddername]"
TAX_PERCENT = "[taxpercent]"
AUTOWIN = "[autowin]"
INCREMENT = "[increment]"
TOP_BID = "[topbid]"
START_PRICE = "[startprice]"

NO_BIDDER_NAME = "Nobody"
CONSOLE_BIDDER_NAME = "Console"

# Time formatting is not implemented yet; [time] always renders this
TIME_LEFT_UNKNOWN = "Unknown"


def get_top_bidder_name(auction: AuctionContext) -> str:
    """Get the name shown for the top bidder of an auction."""
    if not auction.has_bid:
        return NO_BIDDER_NAME
    if auction.bidder_name is None:
        return CONSOLE_BIDDER_NAME
    return auction.bidder_name


def get_reward_display_name(reward: Reward) -> str:
    """Get the display name of a reward, preferring a custom item name."""
    if isinstance(reward, ItemReward) and reward.display_name:
        return reward.display_name
    return reward.name


def get_time_left(auction: AuctionContext) -> str:
    """Get the formatted time left in an auction."""
    # TODO: format auction.time_left once a short/long time format setting exists
    return TIME_LEFT_UNKNOWN


class PlaceholderExpander:
    """Expands auction placeholders in message templates.

    Settings are fetched from ``settings_provider`` on every call, so a
    changed ``truncate_numbers`` or ``tax_percent`` applies to the next
    message without rebuilding the expander.
    """

    def __init__(
        self,
        settings_provider: Callable[[], Settings] = get_settings,
    ) -> None:
        """Initialize the expander.

        Args:
            settings_provider: Callable returning the current settings.
        """
        self._settings_provider = settings_provider

    def expand(self, template: str, auction: AuctionContext | None = None) -> str:
        """Replace every auction placeholder in a template.

        Args:
            template: The message template.
            auction: Auction to take values from. Without one the template
                is returned untouched.

        Returns:
            The template with all placeholders replaced.
        """
        if auction is None:
            return template

        settings = self._settings_provider()
        truncate = settings.truncate_numbers
        reward = auction.reward

        replacements = (
            (ITEM_NAME, reward.name),
            (ITEM_DISPLAY_NAME, get_reward_display_name(reward)),
            (ITEM_AMOUNT, str(reward.amount)),
            (TIME, get_time_left(auction)),
            (OWNER_NAME, auction.owner_name),
            (TOP_BIDDER_NAME, get_top_bidder_name(auction)),
            (TAX_PERCENT, format_readable(settings.tax_percent)),
            (AUTOWIN, format_value(auction.autowin, truncate)),
            (INCREMENT, format_value(auction.bid_increment, truncate)),
            (TOP_BID, format_value(auction.bid, truncate)),
            (START_PRICE, format_value(auction.start_price, truncate)),
        )

        message = template
        for token, value in replacements:
            message = message.replace(token, value)
        return message
