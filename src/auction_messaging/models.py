"""Data models shared by the formatter, renderer and dispatcher."""

from __future__ import annotations

from dataclasses import dataclass

# Bid value of an auction nobody has bid on yet
NO_BID = -1.0

# Autowin value of an auction without an autowin threshold
NO_AUTOWIN = -1.0


@dataclass(frozen=True)
class Message:
    """A message template and its delivery flags.

    Attributes:
        text: Template text with ``&`` colour codes, newlines and placeholders.
        ignorable: Whether recipients may opt out of this message.
        spammy: Whether recipients ignoring spam may opt out of this message.
    """

    text: str
    ignorable: bool = False
    spammy: bool = False


@dataclass(frozen=True)
class Reward:
    """An abstract auction prize."""

    name: str
    amount: int = 1


@dataclass(frozen=True)
class ItemReward(Reward):
    """A reward backed by a host item object.

    Attributes:
        item: Opaque host item handed to the item serializer.
        display_name: Custom display name set on the item, if any.
    """

    item: object = None
    display_name: str | None = None


@dataclass(frozen=True)
class AuctionContext:
    """Read-only view of an auction used to fill placeholders.

    Attributes:
        reward: The prize being auctioned.
        owner_name: Name of the player who started the auction.
        bid: Current top bid, or ``NO_BID``.
        bidder_name: Name of the top bidder, ``None`` when the console bid.
        time_left: Seconds remaining.
        start_price: Opening price.
        bid_increment: Minimum raise per bid.
        autowin: Bid that wins instantly, or ``NO_AUTOWIN``.
    """

    reward: Reward
    owner_name: str
    bid: float = NO_BID
    bidder_name: str | None = None
    time_left: int = 0
    start_price: float = 0.0
    bid_increment: float = 0.0
    autowin: float = NO_AUTOWIN

    @property
    def has_bid(self) -> bool:
        """Return True if anyone has bid on the auction."""
        return self.bid != NO_BID
