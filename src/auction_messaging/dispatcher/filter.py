"""Recipient filtering based on ignore preferences."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from auction_messaging.dispatcher.recipients import Recipient
    from auction_messaging.models import Message


class RecipientFilter:
    """Decides whether a message may be delivered to a recipient.

    Spam ignoring is narrower than general ignoring: it only suppresses
    messages that are both ignorable and spammy, and it applies even when
    general ignoring is off.
    """

    def may_deliver(self, recipient: Recipient, message: Message) -> bool:
        """Return True if the message should be delivered to the recipient."""
        if not recipient.interactive:
            return True
        if not message.ignorable:
            return True
        if message.spammy and recipient.ignoring_spam:
            return False
        return not recipient.ignoring
