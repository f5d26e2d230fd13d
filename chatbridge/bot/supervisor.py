"""Connection lifecycle and event dispatch for the Slack bot."""

import asyncio
from typing import assert_never

from loguru import logger

from chatbridge.bot.authorization import AuthorizationFilter
from chatbridge.bot.dispatcher import CommandDispatcher
from chatbridge.bot.sender import ResponseSender
from chatbridge.bus.events import (
    BotIdentity,
    ConnectedEvent,
    ConnectionErrorEvent,
    IncomingErrorEvent,
    InvalidAuthEvent,
    MessageEvent,
    OutgoingErrorEvent,
    RateLimitedEvent,
    SlackEvent,
    UnmarshallingErrorEvent,
)
from chatbridge.channels.base import SlackTransport
from chatbridge.config.schema import Config
from chatbridge.errors import (
    ChatBridgeError,
    IdentityResolutionError,
    InvalidCredentialsError,
    SendError,
)
from chatbridge.executor.base import ExecutorFactory


class ConnectionSupervisor:
    """
    Listens for Slack messages, executes commands and sends back the result.

    One supervisor owns one transport session. Events are handled strictly in
    order: a message is filtered, dispatched and answered before the next
    event is taken from the stream.
    """

    def __init__(
        self,
        config: Config,
        transport: SlackTransport,
        executor_factory: ExecutorFactory,
    ):
        self.config = config
        self.transport = transport
        self.filter = AuthorizationFilter(config.slack.channel)
        self.dispatcher = CommandDispatcher(executor_factory)
        self.sender = ResponseSender(transport)
        self.identity: BotIdentity | None = None

    async def resolve_identity(self) -> BotIdentity:
        """Use the configured bot id with a custom endpoint, else ask Slack."""
        slack = self.config.slack
        if slack.api_url:
            if not slack.bot_id:
                raise IdentityResolutionError("bot_id must be set when api_url is configured")
            return BotIdentity(user_id=slack.bot_id)
        try:
            user_id = await self.transport.auth_test()
        except Exception as e:
            raise IdentityResolutionError(
                f"while testing the ability to do auth request: {e}"
            ) from e
        return BotIdentity(user_id=user_id)

    async def start(self, stop_event: asyncio.Event) -> None:
        """
        Run until *stop_event* is set or the event stream ends.

        Raises:
            IdentityResolutionError: If the bot identity cannot be resolved.
            InvalidCredentialsError: If Slack reports invalid authentication.
        """
        logger.info("Starting bot")
        self.identity = await self.resolve_identity()
        logger.debug(f"Bot identity: {self.identity.user_id}")

        await self.transport.connect()

        stop_wait = asyncio.create_task(stop_event.wait())
        try:
            while True:
                next_event = asyncio.create_task(self.transport.events.consume())
                done, _ = await asyncio.wait(
                    {stop_wait, next_event}, return_when=asyncio.FIRST_COMPLETED
                )
                if stop_wait in done:
                    next_event.cancel()
                    logger.info("Shutdown requested. Finishing...")
                    await self.transport.disconnect()
                    return

                event = next_event.result()
                if event is None:
                    logger.info("Incoming events stream closed. Finishing...")
                    return

                try:
                    await self.handle_event(event)
                except InvalidCredentialsError:
                    await self.transport.disconnect()
                    raise
        finally:
            stop_wait.cancel()

    async def handle_event(self, event: SlackEvent) -> None:
        """Route one event. Only invalid authentication escapes as an error."""
        match event:
            case ConnectedEvent():
                logger.info("chatbridge connected to Slack!")
            case MessageEvent():
                if event.sender_id == self.identity.user_id:
                    return
                try:
                    await self.handle_message(event)
                except ChatBridgeError as e:
                    logger.error(f"while handling message: {e}")
                except Exception as e:
                    logger.exception(f"while handling message: unexpected error: {e}")
            case RateLimitedEvent():
                logger.error(f"Slack rate limiting error: {event.error} (retry after {event.retry_after}s)")
            case UnmarshallingErrorEvent():
                logger.error(f"Slack unmarshalling error: {event.error}")
            case OutgoingErrorEvent():
                logger.error(f"Slack outgoing event error: {event.error}")
            case IncomingErrorEvent():
                logger.error(f"Slack incoming event error: {event.error}")
            case ConnectionErrorEvent():
                logger.error(f"Slack connection error (attempt {event.attempt}): {event.error}")
            case InvalidAuthEvent():
                raise InvalidCredentialsError(f"invalid credentials: {event.error}")
            case _:
                assert_never(event)

    async def handle_message(self, event: MessageEvent) -> None:
        """Filter, dispatch and answer a single message."""
        ctx = await self.filter.stamp(self.transport, self.identity, event)
        if ctx is None:
            return
        ctx = await self.dispatcher.dispatch(ctx, self.identity)
        try:
            await self.sender.send(ctx)
        except ChatBridgeError as e:
            raise SendError(f"while sending message: {e}") from e
