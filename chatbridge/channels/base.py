"""Transport interface the bot requires from the chat platform."""

from abc import ABC, abstractmethod

from chatbridge.bus.queue import EventBus
from chatbridge.utils.result import Result


class SlackTransport(ABC):
    """
    A live session with the chat platform.

    Implementations own the inbound event stream (``events``) and the outbound
    web API. ``connect`` starts a background task that keeps the socket alive
    and reconnects on its own; the bot only drains ``events``.
    """

    def __init__(self):
        self.events = EventBus()

    @abstractmethod
    async def auth_test(self) -> str:
        """Return the authenticated bot user id."""

    @abstractmethod
    async def connect(self) -> None:
        """Open the real-time session and start the background connection task."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the session and the event stream."""

    @abstractmethod
    async def post_message(
        self,
        channel: str,
        text: str,
        *,
        as_user: bool = True,
        thread_ts: str | None = None,
    ) -> None:
        """Post a text message. ``thread_ts`` is only sent when given."""

    @abstractmethod
    async def upload_file(self, channel: str, filename: str, title: str, content: str) -> None:
        """Upload *content* as a file shared into *channel*."""

    @abstractmethod
    async def get_conversation_info(self, channel: str) -> Result:
        """Look up conversation metadata.

        Returns ``Result.ok(ConversationInfo)`` or ``Result.fail(reason)``;
        never raises for API errors.
        """
