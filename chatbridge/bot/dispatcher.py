"""Turns a stamped message into a request and runs it through the executor."""

import asyncio
from dataclasses import replace

from chatbridge.bus.events import BotIdentity, MessageContext
from chatbridge.executor.base import ExecutorFactory, Platform


def strip_mention(text: str, identity: BotIdentity) -> str:
    """Remove a leading bot mention; text without one is returned unchanged."""
    return text.removeprefix(identity.mention)


class CommandDispatcher:
    """Calls the executor for one message at a time."""

    def __init__(self, executor_factory: ExecutorFactory, platform: Platform = Platform.SLACK):
        self.executor_factory = executor_factory
        self.platform = platform

    async def dispatch(self, ctx: MessageContext, identity: BotIdentity) -> MessageContext:
        request = strip_mention(ctx.text, identity)
        executor = self.executor_factory.new_default(self.platform, ctx.authorized, request)
        # Executors block; keep the event loop free for the socket keepalive
        response = await asyncio.to_thread(executor.execute)
        return replace(ctx, request=request, response=response)
