"""Dispatch layer - Recipient filtering and ordered delivery."""

from auction_messaging.dispatcher.engine import (
    DispatchEngine,
    DispatchEngineError,
    DispatchQueueFullError,
    DispatchResult,
    EngineState,
)
from auction_messaging.dispatcher.filter import RecipientFilter
from auction_messaging.dispatcher.recipients import (
    ChatRecipient,
    ConsoleRecipient,
    Recipient,
    RecipientGroup,
    RecipientRegistry,
    StaticRecipientGroup,
)
from auction_messaging.dispatcher.sinks import ChatSink, LoggingSink

__all__ = [
    "ChatRecipient",
    "ChatSink",
    "ConsoleRecipient",
    "DispatchEngine",
    "DispatchEngineError",
    "DispatchQueueFullError",
    "DispatchResult",
    "EngineState",
    "LoggingSink",
    "Recipient",
    "RecipientFilter",
    "RecipientGroup",
    "RecipientRegistry",
    "StaticRecipientGroup",
]
