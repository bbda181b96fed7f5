"""Parse strategies turning raw environment text into parameter values."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol, Tuple, Type, TypeVar

from ..errors import InvalidParameterValue

T = TypeVar("T")

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

SET_MESSAGE = "Setting %s environment variable to %s"

# Leading C whitespace and a sign, then a hex, octal or decimal body.
_INTEGER = re.compile(
    r"[ \t\n\v\f\r]*(?P<sign>[+-]?)"
    r"(?:0[xX](?P<hex>[0-9a-fA-F]+)|(?P<oct>0[0-7]*)|(?P<dec>[1-9][0-9]*))"
)


class ParseStrategy(Protocol[T]):
    """Protocol describing how a cell interprets its environment variable."""

    kind: str
    errors: Tuple[Type[BaseException], ...]

    def consider(self, raw: str) -> bool:
        """Return ``True`` when a present ``raw`` value should be parsed."""

    def parse(self, raw: str) -> T:
        """Convert ``raw`` into a value or raise."""

    def failure(self, env: str, raw: str, default: T, exc: BaseException) -> Tuple[str, Tuple[object, ...]]:
        """Return the diagnostic message and arguments for a fallback."""


def parse_int64(raw: str) -> int:
    """Parse ``raw`` like ``strtoll(raw, &end, 0)`` requiring ``*end == '\\0'``.

    ``0x``/``0X`` selects base 16, a leading ``0`` selects base 8 and anything
    else is decimal.  Leading whitespace and a sign are accepted; trailing
    characters of any kind are not.

    Raises
    ------
    InvalidParameterValue
        If ``raw`` is not fully consumed or the value overflows 64 bits.
    """

    match = _INTEGER.fullmatch(raw)
    if match is None:
        raise InvalidParameterValue(raw, "not a base 10, 8 or 16 integer")

    if match.group("hex") is not None:
        magnitude = int(match.group("hex"), 16)
    elif match.group("oct") is not None:
        magnitude = int(match.group("oct"), 8)
    else:
        magnitude = int(match.group("dec"), 10)

    value = -magnitude if match.group("sign") == "-" else magnitude
    if not INT64_MIN <= value <= INT64_MAX:
        raise InvalidParameterValue(raw, "out of range for a 64-bit signed integer")
    return value


@dataclass(frozen=True)
class IntParser:
    """Integer strategy: empty values are ignored, malformed ones rejected."""

    kind: str = "int"
    errors: Tuple[Type[BaseException], ...] = (InvalidParameterValue,)

    def consider(self, raw: str) -> bool:
        return len(raw) > 0

    def parse(self, raw: str) -> int:
        return parse_int64(raw)

    def failure(self, env: str, raw: str, default: int, exc: BaseException) -> Tuple[str, Tuple[object, ...]]:
        return (
            "Invalid value %s provided for %s environment variable, using default %s",
            (raw, env, default),
        )


@dataclass(frozen=True)
class StrParser:
    """String strategy: any present value, even an empty one, is adopted."""

    kind: str = "str"
    errors: Tuple[Type[BaseException], ...] = (MemoryError,)

    def consider(self, raw: str) -> bool:
        return True

    def parse(self, raw: str) -> str:
        # Owned copy; the cell keeps it for the life of the process.
        return "".join(raw)

    def failure(self, env: str, raw: str, default: str, exc: BaseException) -> Tuple[str, Tuple[object, ...]]:
        return (
            "Allocation error saving result for %s environment variable.  Falling back to default %s",
            (env, default),
        )


__all__ = [
    "INT64_MAX",
    "INT64_MIN",
    "IntParser",
    "ParseStrategy",
    "SET_MESSAGE",
    "StrParser",
    "parse_int64",
]
