"""Delivers executor output back to the conversation it came from."""

from loguru import logger

from chatbridge.bus.events import MessageContext
from chatbridge.channels.base import SlackTransport
from chatbridge.errors import EmptyResponseError, SendError

# Responses this long are uploaded as a file instead of posted inline
MAX_INLINE_LENGTH = 3990


def format_code_block(text: str) -> str:
    """Wrap text in a Slack preformatted block."""
    return f"```\n{text}\n```"


class ResponseSender:
    """Posts a response inline or as a file, keeping thread replies in-thread."""

    def __init__(self, transport: SlackTransport):
        self.transport = transport

    async def send(self, ctx: MessageContext) -> None:
        """
        Send ``ctx.response`` to ``ctx.channel``.

        Raises:
            EmptyResponseError: If there is nothing to send.
            SendError: If Slack rejected the upload or post.
        """
        logger.debug(f"Slack incoming request: {ctx.request}")
        logger.debug(f"Slack response: {ctx.response}")

        if not ctx.response:
            raise EmptyResponseError(ctx.request)

        if len(ctx.response) >= MAX_INLINE_LENGTH:
            try:
                await self.transport.upload_file(
                    ctx.channel,
                    filename=ctx.request,
                    title=ctx.request,
                    content=ctx.response,
                )
            except Exception as e:
                raise SendError(f"while uploading file: {e}") from e
            return

        try:
            await self.transport.post_message(
                ctx.channel,
                format_code_block(ctx.response),
                as_user=True,
                thread_ts=ctx.thread_ts,
            )
        except Exception as e:
            raise SendError(f"while posting Slack message: {e}") from e
