"""Event types flowing from the Slack connection to the bot."""

from dataclasses import dataclass
from enum import Enum
from typing import Union


@dataclass(frozen=True)
class BotIdentity:
    """Authenticated bot user, resolved once per connection."""

    user_id: str

    @property
    def mention(self) -> str:
        """Addressing token Slack renders as @bot."""
        return f"<@{self.user_id}>"


class ConversationKind(Enum):
    CHANNEL = "channel"
    PRIVATE = "private"
    DIRECT = "direct"
    UNKNOWN = "unknown"  # lookup failed or not classified

    @property
    def is_multi_party(self) -> bool:
        return self in (ConversationKind.CHANNEL, ConversationKind.PRIVATE)


@dataclass(frozen=True)
class ConversationInfo:
    """Subset of Slack conversation metadata used for authorization."""

    kind: ConversationKind
    name: str = ""


# ----------------------------------------------------------------------
# Inbound events
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class ConnectedEvent:
    """The socket handshake completed."""

    info: str = ""


@dataclass(frozen=True)
class MessageEvent:
    """A user message posted in a conversation the bot can see."""

    sender_id: str
    channel: str
    text: str
    thread_ts: str | None = None


@dataclass(frozen=True)
class RateLimitedEvent:
    retry_after: float | None = None
    error: str = ""


@dataclass(frozen=True)
class UnmarshallingErrorEvent:
    error: str = ""


@dataclass(frozen=True)
class OutgoingErrorEvent:
    error: str = ""


@dataclass(frozen=True)
class IncomingErrorEvent:
    error: str = ""


@dataclass(frozen=True)
class ConnectionErrorEvent:
    error: str = ""
    attempt: int = 0


@dataclass(frozen=True)
class InvalidAuthEvent:
    """Slack rejected the token. The session cannot recover."""

    error: str = "invalid_auth"


SlackEvent = Union[
    ConnectedEvent,
    MessageEvent,
    RateLimitedEvent,
    UnmarshallingErrorEvent,
    OutgoingErrorEvent,
    IncomingErrorEvent,
    ConnectionErrorEvent,
    InvalidAuthEvent,
]


# ----------------------------------------------------------------------
# Per-message pipeline state
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class MessageContext:
    """State carried through filter -> dispatch -> send for one message.

    Built fresh for every inbound message and dropped after the reply attempt.
    Later stages derive new values with ``dataclasses.replace``.
    """

    channel: str
    text: str
    thread_ts: str | None = None
    authorized: bool = False
    request: str = ""
    response: str = ""

    @classmethod
    def from_event(cls, event: MessageEvent) -> "MessageContext":
        return cls(channel=event.channel, text=event.text, thread_ts=event.thread_ts or None)
