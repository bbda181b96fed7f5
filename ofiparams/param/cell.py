"""Lazily resolved, thread-safe parameter cells.

A :class:`ParameterCell` owns one named parameter.  The first call to
:meth:`ParameterCell.get` reads ``OFI_NCCL_<SUFFIX>`` from the environment,
parses it with the cell's strategy and caches the outcome.  Every later call,
from any thread, returns the cached value without locking.

Only one thread ever runs the resolution for a given cell.  Threads that race
on the first access queue on the cell's private lock and, once inside,
observe that the value has already been resolved.
"""
from __future__ import annotations

import enum
import logging
import threading
from typing import Generic, Mapping, Optional, TypeVar

from ..config import env_key, get_env
from ..obs.events import DEFAULT_SINK, DiagnosticSink, Subsystem
from .parsers import INT64_MAX, INT64_MIN, SET_MESSAGE, IntParser, ParseStrategy, StrParser

T = TypeVar("T")

PARAM_SUBSYSTEM = Subsystem.INIT | Subsystem.NET


class CellState(enum.Enum):
    """Lifecycle of a :class:`ParameterCell`; transitions only move forward."""

    UNINITIALIZED = "uninitialized"
    RESOLVING = "resolving"
    RESOLVED = "resolved"


class ParameterCell(Generic[T]):
    """One named configuration parameter resolved at most once per process."""

    __slots__ = ("name", "env_suffix", "default", "parser", "_sink", "_environ", "_value", "_state", "_lock")

    def __init__(
        self,
        name: str,
        env_suffix: str,
        default: T,
        parser: ParseStrategy[T],
        *,
        sink: Optional[DiagnosticSink] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.name = name
        self.env_suffix = env_suffix
        self.default = default
        self.parser = parser
        self._sink = sink
        self._environ = environ
        self._value: T = default
        self._state = CellState.UNINITIALIZED
        self._lock = threading.Lock()

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return (
            f"{self.__class__.__name__}(name={self.name!r}, env={self.env_name!r}, "
            f"kind={self.parser.kind!r}, state={self._state.value!r})"
        )

    @property
    def env_name(self) -> str:
        return env_key(self.env_suffix)

    @property
    def state(self) -> CellState:
        return self._state

    @property
    def resolved(self) -> bool:
        return self._state is CellState.RESOLVED

    def get(self) -> T:
        """Return the resolved value, resolving it on first use."""

        if self._state is CellState.RESOLVED:
            return self._value

        with self._lock:
            if self._state is CellState.UNINITIALIZED:
                self._state = CellState.RESOLVING
                try:
                    self._value = self._resolve()
                finally:
                    self._state = CellState.RESOLVED
        return self._value

    __call__ = get

    def _emit(self, msg: str, args: tuple) -> None:
        sink = self._sink if self._sink is not None else DEFAULT_SINK
        sink.emit(level=logging.INFO, subsystem=PARAM_SUBSYSTEM, msg=msg, args=args, env=self.env_name)

    def _resolve(self) -> T:
        env = self.env_name
        raw = get_env(env, environ=self._environ)
        if raw is None or not self.parser.consider(raw):
            return self.default

        try:
            value = self.parser.parse(raw)
        except self.parser.errors as exc:
            msg, args = self.parser.failure(env, raw, self.default, exc)
            self._emit(msg, args)
            return self.default

        self._emit(SET_MESSAGE, (env, value))
        return value


def IntParam(
    name: str,
    env_suffix: str,
    default: int,
    *,
    sink: Optional[DiagnosticSink] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ParameterCell[int]:
    """Declare a 64-bit integer parameter."""

    if isinstance(default, bool) or not isinstance(default, int):
        raise TypeError(f"Default for '{name}' must be an int, got {type(default).__name__}")
    if not INT64_MIN <= default <= INT64_MAX:
        raise ValueError(f"Default for '{name}' does not fit in a 64-bit signed integer")
    return ParameterCell(name, env_suffix, default, IntParser(), sink=sink, environ=environ)


def StrParam(
    name: str,
    env_suffix: str,
    default: str,
    *,
    sink: Optional[DiagnosticSink] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ParameterCell[str]:
    """Declare a text parameter."""

    if not isinstance(default, str):
        raise TypeError(f"Default for '{name}' must be a str, got {type(default).__name__}")
    return ParameterCell(name, env_suffix, default, StrParser(), sink=sink, environ=environ)


__all__ = ["CellState", "IntParam", "PARAM_SUBSYSTEM", "ParameterCell", "StrParam"]
