"""Executor interface consumed by the command dispatcher."""

from abc import ABC, abstractmethod
from enum import Enum


class Platform(str, Enum):
    """Origin tag passed to executors so they know where a request came from."""

    SLACK = "slack"


class Executor(ABC):
    """A single command execution, bound to its request."""

    @abstractmethod
    def execute(self) -> str:
        """Run the command and return its textual result (possibly empty)."""


class ExecutorFactory(ABC):
    """Builds executors for incoming requests."""

    @abstractmethod
    def new_default(self, platform: Platform, authorized: bool, request: str) -> Executor:
        """Return an executor for *request* received on *platform*."""
