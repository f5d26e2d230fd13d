"""Command executors."""

from chatbridge.executor.base import Executor, ExecutorFactory, Platform
from chatbridge.executor.default import DefaultExecutor, DefaultExecutorFactory

__all__ = [
    "DefaultExecutor",
    "DefaultExecutorFactory",
    "Executor",
    "ExecutorFactory",
    "Platform",
]
