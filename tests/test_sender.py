"""Tests for the inline/upload reply policy."""

import pytest

from chatbridge.bot.sender import MAX_INLINE_LENGTH, ResponseSender, format_code_block
from chatbridge.bus.events import MessageContext
from chatbridge.errors import EmptyResponseError, SendError


def _ctx(response, thread_ts=None, channel="C_OPS", request=" get pods"):
    return MessageContext(
        channel=channel,
        text=f"<@U123>{request}",
        thread_ts=thread_ts,
        authorized=True,
        request=request,
        response=response,
    )


def test_format_code_block():
    assert format_code_block("hello") == "```\nhello\n```"


class TestSizePolicy:
    @pytest.mark.asyncio
    async def test_empty_response_raises_without_transport_calls(self, transport):
        with pytest.raises(EmptyResponseError, match="get pods"):
            await ResponseSender(transport).send(_ctx(""))
        assert transport.posts == []
        assert transport.uploads == []

    @pytest.mark.asyncio
    async def test_short_response_posted_inline(self, transport):
        await ResponseSender(transport).send(_ctx("x" * 50))
        assert transport.uploads == []
        assert transport.posts == [
            {
                "channel": "C_OPS",
                "text": format_code_block("x" * 50),
                "as_user": True,
                "thread_ts": None,
            }
        ]

    @pytest.mark.asyncio
    async def test_just_below_threshold_is_inline(self, transport):
        await ResponseSender(transport).send(_ctx("x" * (MAX_INLINE_LENGTH - 1)))
        assert len(transport.posts) == 1
        assert transport.uploads == []

    @pytest.mark.asyncio
    async def test_threshold_uploads(self, transport):
        await ResponseSender(transport).send(_ctx("x" * MAX_INLINE_LENGTH))
        assert transport.posts == []
        assert len(transport.uploads) == 1

    @pytest.mark.asyncio
    async def test_long_response_uploaded_with_request_as_name(self, transport):
        body = "y" * 4200
        await ResponseSender(transport).send(_ctx(body))
        assert transport.posts == []
        assert transport.uploads == [
            {"channel": "C_OPS", "filename": " get pods", "title": " get pods", "content": body}
        ]

    def test_threshold_value(self):
        assert MAX_INLINE_LENGTH == 3990


class TestThreads:
    @pytest.mark.asyncio
    async def test_thread_anchor_preserved(self, transport):
        await ResponseSender(transport).send(_ctx("ok", thread_ts="1700000000.000100"))
        assert transport.posts[0]["thread_ts"] == "1700000000.000100"

    @pytest.mark.asyncio
    async def test_direct_message_thread_anchor(self, transport):
        await ResponseSender(transport).send(
            _ctx("ok", thread_ts="1700000000.000200", channel="D_DIRECT", request="get pods")
        )
        assert transport.posts[0]["channel"] == "D_DIRECT"
        assert transport.posts[0]["thread_ts"] == "1700000000.000200"

    @pytest.mark.asyncio
    async def test_direct_message_long_response_uploaded(self, transport):
        await ResponseSender(transport).send(
            _ctx("z" * 5000, thread_ts="1700000000.000300", channel="D_DIRECT", request="logs app")
        )
        assert transport.posts == []
        assert transport.uploads[0]["channel"] == "D_DIRECT"
        assert transport.uploads[0]["filename"] == "logs app"


class TestFailures:
    @pytest.mark.asyncio
    async def test_post_failure_surfaces(self, transport):
        transport.post_error = RuntimeError("channel_not_found")
        with pytest.raises(SendError, match="while posting Slack message: channel_not_found"):
            await ResponseSender(transport).send(_ctx("ok"))

    @pytest.mark.asyncio
    async def test_upload_failure_has_no_inline_fallback(self, transport):
        transport.upload_error = RuntimeError("file_upload_failed")
        with pytest.raises(SendError, match="while uploading file"):
            await ResponseSender(transport).send(_ctx("x" * 4000))
        assert transport.posts == []
