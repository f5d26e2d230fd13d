"""Message pipeline: authorization, dispatch, reply, and the supervisor loop."""

from chatbridge.bot.authorization import AuthorizationFilter
from chatbridge.bot.dispatcher import CommandDispatcher, strip_mention
from chatbridge.bot.sender import MAX_INLINE_LENGTH, ResponseSender, format_code_block
from chatbridge.bot.supervisor import ConnectionSupervisor

__all__ = [
    "AuthorizationFilter",
    "CommandDispatcher",
    "ConnectionSupervisor",
    "MAX_INLINE_LENGTH",
    "ResponseSender",
    "format_code_block",
    "strip_mention",
]
