"""Exception types raised while declaring or parsing parameters."""
from __future__ import annotations


class ParameterError(Exception):
    """Base class for parameter related failures."""


class InvalidParameterValue(ParameterError, ValueError):
    """Raised when raw environment text cannot be parsed."""

    def __init__(self, raw: str, reason: str) -> None:
        super().__init__(f"invalid value {raw!r}: {reason}")
        self.raw = raw
        self.reason = reason


class DuplicateParameterError(ParameterError, ValueError):
    """Raised when a parameter name is registered twice."""


class UnknownParameterError(ParameterError, KeyError):
    """Raised when looking up a parameter that was never declared."""
