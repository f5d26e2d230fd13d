"""Slack transport using slack_sdk Socket Mode and the async Web API."""

import asyncio
from typing import Any

import aiohttp
from loguru import logger
from slack_sdk.errors import SlackApiError
from slack_sdk.socket_mode.aiohttp import SocketModeClient
from slack_sdk.socket_mode.request import SocketModeRequest
from slack_sdk.socket_mode.response import SocketModeResponse
from slack_sdk.web.async_client import AsyncWebClient

from chatbridge.bus.events import (
    ConnectedEvent,
    ConnectionErrorEvent,
    ConversationInfo,
    ConversationKind,
    IncomingErrorEvent,
    InvalidAuthEvent,
    MessageEvent,
    OutgoingErrorEvent,
    RateLimitedEvent,
    UnmarshallingErrorEvent,
)
from chatbridge.channels.base import SlackTransport
from chatbridge.config.schema import SlackConfig
from chatbridge.utils.result import Result

# Web API error codes that mean the token itself is unusable
AUTH_ERRORS = {"invalid_auth", "not_authed", "account_inactive", "token_revoked", "token_expired"}

# Message subtypes that carry a user-authored text worth dispatching
DISPATCHABLE_SUBTYPES = {None, "thread_broadcast", "file_share"}


def classify_conversation(channel: dict[str, Any]) -> ConversationInfo:
    """Map a ``conversations.info`` channel object to a ConversationInfo."""
    name = channel.get("name") or ""
    if channel.get("is_im"):
        kind = ConversationKind.DIRECT
    elif channel.get("is_private") or channel.get("is_group") or channel.get("is_mpim"):
        kind = ConversationKind.PRIVATE
    elif channel.get("is_channel"):
        kind = ConversationKind.CHANNEL
    else:
        kind = ConversationKind.UNKNOWN
    return ConversationInfo(kind=kind, name=name)


def to_message_event(event: dict[str, Any]) -> MessageEvent | None:
    """
    Convert an Events API ``message`` payload to a MessageEvent.

    Returns None for payloads that are not plain user messages (edits,
    deletions, joins). Raises KeyError, TypeError or AttributeError for
    malformed payloads.
    """
    if event.get("type") != "message":
        return None
    if event.get("subtype") not in DISPATCHABLE_SUBTYPES:
        return None
    return MessageEvent(
        sender_id=event.get("user") or event.get("bot_id") or "",
        channel=event["channel"],
        text=event.get("text") or "",
        thread_ts=event.get("thread_ts") or None,
    )


class SlackChannel(SlackTransport):
    """
    Slack session over Socket Mode.

    ``connect`` starts one background task that opens the socket, retrying
    with backoff until it succeeds. After that the socket-mode client keeps
    the link alive with pings and reconnects by itself. Everything observed
    on the socket is published to ``events``.
    """

    name = "slack"

    def __init__(
        self,
        config: SlackConfig,
        bot_token: str,
        app_token: str,
        web_client: AsyncWebClient | None = None,
    ):
        super().__init__()
        self.config = config
        self.app_token = app_token
        if web_client is None:
            kwargs: dict[str, Any] = {"token": bot_token}
            if config.api_url:
                kwargs["base_url"] = config.api_url
            web_client = AsyncWebClient(**kwargs)
        self.web = web_client
        self._socket: SocketModeClient | None = None
        self._task: asyncio.Task | None = None
        self._closing = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def auth_test(self) -> str:
        response = await self.web.auth_test()
        return response["user_id"]

    async def connect(self) -> None:
        self._closing = False
        self._socket = SocketModeClient(
            app_token=self.app_token,
            web_client=self.web,
            auto_reconnect_enabled=True,
            ping_interval=self.config.ping_interval,
            on_error_listeners=[self._on_socket_error],
            on_close_listeners=[self._on_socket_close],
        )
        self._socket.socket_mode_request_listeners.append(self._on_request)
        self._socket.message_listeners.append(self._on_socket_message)
        self._task = asyncio.create_task(self._manage_connection())

    async def disconnect(self) -> None:
        self._closing = True
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self._socket:
            logger.info("Disconnecting from Slack...")
            await self._socket.disconnect()
            await self._socket.close()
            self._socket = None
        self.events.close()

    async def _manage_connection(self) -> None:
        """
        Open the socket, backing off on failures until it is up.

        The WSS URL is issued here so a rejected app token surfaces as an
        InvalidAuthEvent. SocketModeClient.connect retries internally forever.
        """
        delay = min(1.0, self.config.reconnect_max_delay)
        attempt = 0
        while not self._closing:
            attempt += 1
            try:
                response = await self.web.apps_connections_open(app_token=self.app_token)
                self._socket.wss_uri = response["url"]
                await self._socket.connect()
                return
            except SlackApiError as e:
                error = e.response.get("error", "") if e.response is not None else ""
                if error in AUTH_ERRORS:
                    logger.error(f"Slack rejected the app token: {error}")
                    await self.events.publish(InvalidAuthEvent(error=error))
                    return
                if e.response is not None and (e.response.status_code == 429 or error == "ratelimited"):
                    retry_after = float(e.response.headers.get("Retry-After", delay))
                    await self.events.publish(RateLimitedEvent(retry_after=retry_after, error=str(e)))
                    await asyncio.sleep(retry_after)
                    continue
                await self.events.publish(ConnectionErrorEvent(error=str(e), attempt=attempt))
            except asyncio.CancelledError:
                raise
            except Exception as e:
                await self.events.publish(ConnectionErrorEvent(error=str(e), attempt=attempt))

            await asyncio.sleep(delay)
            delay = min(delay * 2, self.config.reconnect_max_delay)

    # ------------------------------------------------------------------
    # Socket listeners
    # ------------------------------------------------------------------

    async def _on_socket_message(self, client, message: dict, raw_message: str | None) -> None:
        if message.get("type") == "hello":
            info = message.get("debug_info", {}).get("host", "")
            await self.events.publish(ConnectedEvent(info=info))

    async def _on_request(self, client, req: SocketModeRequest) -> None:
        try:
            await client.send_socket_mode_response(SocketModeResponse(envelope_id=req.envelope_id))
        except Exception as e:
            await self.events.publish(OutgoingErrorEvent(error=f"ack {req.envelope_id}: {e}"))

        if req.type != "events_api":
            return

        try:
            event = to_message_event(req.payload["event"])
        except (AttributeError, KeyError, TypeError) as e:
            await self.events.publish(UnmarshallingErrorEvent(error=f"{type(e).__name__}: {e}"))
            return
        if event is not None:
            await self.events.publish(event)

    async def _on_socket_error(self, message) -> None:
        await self.events.publish(IncomingErrorEvent(error=str(getattr(message, "data", message))))

    async def _on_socket_close(self, message) -> None:
        if self._closing:
            return
        await self.events.publish(ConnectionErrorEvent(error="socket closed, reconnecting"))

    # ------------------------------------------------------------------
    # Web API
    # ------------------------------------------------------------------

    async def post_message(
        self,
        channel: str,
        text: str,
        *,
        as_user: bool = True,
        thread_ts: str | None = None,
    ) -> None:
        kwargs: dict[str, Any] = {"channel": channel, "text": text, "as_user": as_user}
        if thread_ts:
            kwargs["thread_ts"] = thread_ts
        await self.web.chat_postMessage(**kwargs)

    async def upload_file(self, channel: str, filename: str, title: str, content: str) -> None:
        await self.web.files_upload_v2(
            channel=channel,
            filename=filename,
            title=title,
            content=content,
        )

    async def get_conversation_info(self, channel: str) -> Result:
        try:
            response = await self.web.conversations_info(channel=channel, include_locale=True)
        except SlackApiError as e:
            error = e.response.get("error", str(e)) if e.response is not None else str(e)
            return Result.fail(f"conversations.info failed for {channel}: {error}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            return Result.fail(f"conversations.info failed for {channel}: {e}")
        return Result.ok(classify_conversation(response["channel"]))
