"""Exception hierarchy for chatbridge."""


class ChatBridgeError(Exception):
    """Base class for all chatbridge errors."""


class ConfigError(ChatBridgeError):
    """Raised when the resolved configuration cannot start a bot."""


class IdentityResolutionError(ChatBridgeError):
    """Raised when the bot identity cannot be resolved at startup."""


class InvalidCredentialsError(ChatBridgeError):
    """Raised when the platform rejects the bot credentials mid-session."""


class EmptyResponseError(ChatBridgeError):
    """Raised when the executor produced no output for a request."""

    def __init__(self, request: str):
        super().__init__(f"while reading Slack response: empty response for request {request!r}")
        self.request = request


class SendError(ChatBridgeError):
    """Raised when a reply could not be delivered to Slack."""
