"""Error types raised by the analytics core."""

from typing import Any


class InvalidInput(ValueError):
    """Input that cannot be analysed (non-finite scores, malformed midpoint or scale).

    Fatal: propagates out of report generation unchanged.
    """

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        super().__init__(message)
        self.field = field
        self.value = value


class DataUnavailable(Exception):
    """An optional upstream component could not provide its data.

    Non-fatal: callers omit the dependent statements instead of failing.
    """

    def __init__(self, component: str, reason: str):
        super().__init__(f"{component} unavailable: {reason}")
        self.component = component
        self.reason = reason
