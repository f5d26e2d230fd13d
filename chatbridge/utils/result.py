"""Lightweight result type for best-effort lookups."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Result:
    """Outcome of an operation that is allowed to fail without raising.

    Supports boolean evaluation and carries an optional payload via *value*.

    Examples::

        r = await transport.get_conversation_info("C123")
        if r:
            print(r.value.name)
        else:
            logger.debug(r.message)
    """

    success: bool
    message: str = ""
    value: Any = field(default=None, repr=False)

    @classmethod
    def ok(cls, value: Any = None, message: str = "") -> Result:
        return cls(success=True, message=message, value=value)

    @classmethod
    def fail(cls, message: str = "") -> Result:
        return cls(success=False, message=message)

    def __bool__(self) -> bool:
        return self.success
