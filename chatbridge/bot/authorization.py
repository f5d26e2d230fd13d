"""Decides which inbound messages the bot answers, and with what authority."""

from dataclasses import replace

from loguru import logger

from chatbridge.bus.events import (
    BotIdentity,
    ConversationInfo,
    ConversationKind,
    MessageContext,
    MessageEvent,
)
from chatbridge.channels.base import SlackTransport

UNCLASSIFIED = ConversationInfo(kind=ConversationKind.UNKNOWN)


class AuthorizationFilter:
    """
    Stamps inbound messages with eligibility and authorization.

    Two independent rules can authorize a message: the conversation name
    matches the configured channel (multi-party conversations only), or the
    conversation id equals the configured channel. Either is enough.
    """

    def __init__(self, channel: str):
        self.channel = channel

    def is_addressed(self, info: ConversationInfo, identity: BotIdentity, text: str) -> bool:
        """Multi-party conversations must mention the bot first; others need not."""
        if not info.kind.is_multi_party:
            return True
        return text.startswith(identity.mention)

    def matches_name(self, info: ConversationInfo) -> bool:
        return bool(self.channel) and info.kind.is_multi_party and info.name == self.channel

    def matches_id(self, channel_id: str) -> bool:
        return bool(self.channel) and channel_id == self.channel

    async def lookup(self, transport: SlackTransport, channel_id: str) -> ConversationInfo:
        """Fetch conversation metadata, degrading to UNCLASSIFIED on failure."""
        result = await transport.get_conversation_info(channel_id)
        if not result:
            logger.debug(f"Conversation lookup skipped: {result.message}")
            return UNCLASSIFIED
        return result.value

    async def stamp(
        self,
        transport: SlackTransport,
        identity: BotIdentity,
        event: MessageEvent,
    ) -> MessageContext | None:
        """Return a stamped MessageContext, or None if the bot should stay silent."""
        info = await self.lookup(transport, event.channel)

        if not self.is_addressed(info, identity, event.text):
            logger.debug(f"Ignoring message as it doesn't contain {identity.mention!r} prefix")
            return None

        authorized = self.matches_name(info) or self.matches_id(event.channel)
        return replace(MessageContext.from_event(event), authorized=authorized)
