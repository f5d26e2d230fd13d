"""Shared fixtures: an in-memory Slack transport and a scripted executor."""

import pytest
from loguru import logger

from chatbridge.bus.events import BotIdentity, ConversationInfo, ConversationKind
from chatbridge.channels.base import SlackTransport
from chatbridge.config.schema import Config
from chatbridge.executor.base import Executor, ExecutorFactory
from chatbridge.utils.result import Result

BOT_ID = "U123"


class FakeTransport(SlackTransport):
    """Records outbound calls instead of talking to Slack."""

    def __init__(self, user_id=BOT_ID, conversations=None):
        super().__init__()
        self.user_id = user_id
        self.conversations = conversations or {}
        self.posts: list[dict] = []
        self.uploads: list[dict] = []
        self.lookups: list[str] = []
        self.auth_calls = 0
        self.connected = False
        self.disconnected = False
        self.auth_error: Exception | None = None
        self.post_error: Exception | None = None
        self.upload_error: Exception | None = None

    async def auth_test(self) -> str:
        self.auth_calls += 1
        if self.auth_error:
            raise self.auth_error
        return self.user_id

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.disconnected = True
        self.events.close()

    async def post_message(self, channel, text, *, as_user=True, thread_ts=None):
        if self.post_error:
            raise self.post_error
        self.posts.append(
            {"channel": channel, "text": text, "as_user": as_user, "thread_ts": thread_ts}
        )

    async def upload_file(self, channel, filename, title, content):
        if self.upload_error:
            raise self.upload_error
        self.uploads.append(
            {"channel": channel, "filename": filename, "title": title, "content": content}
        )

    async def get_conversation_info(self, channel):
        self.lookups.append(channel)
        info = self.conversations.get(channel)
        if info is None:
            return Result.fail(f"channel_not_found: {channel}")
        return Result.ok(info)


class ScriptedExecutor(Executor):
    def __init__(self, response):
        self.response = response

    def execute(self) -> str:
        return self.response


class ScriptedFactory(ExecutorFactory):
    """Returns canned responses in order and records every request."""

    def __init__(self, *responses):
        self.responses = list(responses) or ["ok"]
        self.calls: list[tuple] = []

    def new_default(self, platform, authorized, request):
        self.calls.append((platform, authorized, request))
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        return ScriptedExecutor(response)


@pytest.fixture
def identity():
    return BotIdentity(user_id=BOT_ID)


@pytest.fixture
def conversations():
    return {
        "C_OPS": ConversationInfo(kind=ConversationKind.CHANNEL, name="ops"),
        "C_RANDOM": ConversationInfo(kind=ConversationKind.CHANNEL, name="random"),
        "G_SECRET": ConversationInfo(kind=ConversationKind.PRIVATE, name="secret-ops"),
        "D_DIRECT": ConversationInfo(kind=ConversationKind.DIRECT),
    }


@pytest.fixture
def transport(conversations):
    return FakeTransport(conversations=conversations)


@pytest.fixture
def config():
    cfg = Config()
    cfg.communications.slack.channel = "ops"
    cfg.settings.cluster_name = "prod"
    return cfg


@pytest.fixture
def log_messages():
    """Capture loguru output as a list of message strings."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
