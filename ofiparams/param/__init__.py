"""Parameter cells and the strategies that parse their values."""

from .cell import CellState, IntParam, ParameterCell, StrParam
from .parsers import IntParser, ParseStrategy, StrParser, parse_int64

__all__ = [
    "CellState",
    "IntParam",
    "IntParser",
    "ParameterCell",
    "ParseStrategy",
    "StrParam",
    "StrParser",
    "parse_int64",
]
