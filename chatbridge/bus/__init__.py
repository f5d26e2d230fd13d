"""Inbound event types and the event queue."""

from chatbridge.bus.events import (
    BotIdentity,
    ConnectedEvent,
    ConnectionErrorEvent,
    ConversationInfo,
    ConversationKind,
    IncomingErrorEvent,
    InvalidAuthEvent,
    MessageContext,
    MessageEvent,
    OutgoingErrorEvent,
    RateLimitedEvent,
    SlackEvent,
    UnmarshallingErrorEvent,
)
from chatbridge.bus.queue import EventBus

__all__ = [
    "BotIdentity",
    "ConnectedEvent",
    "ConnectionErrorEvent",
    "ConversationInfo",
    "ConversationKind",
    "EventBus",
    "IncomingErrorEvent",
    "InvalidAuthEvent",
    "MessageContext",
    "MessageEvent",
    "OutgoingErrorEvent",
    "RateLimitedEvent",
    "SlackEvent",
    "UnmarshallingErrorEvent",
]
