"""Diagnostic sinks used to report which parameter values were chosen."""
from __future__ import annotations

import datetime as _dt
import enum
import logging
import threading
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Protocol, Tuple

LOGGER = logging.getLogger(__name__)


class Subsystem(enum.Flag):
    """Category tags attached to diagnostic messages."""

    INIT = enum.auto()
    NET = enum.auto()


def utc_now() -> str:
    """Return the current UTC time formatted as an ISO 8601 string."""

    return _dt.datetime.now(_dt.timezone.utc).isoformat()


def _subsystem_label(subsystem: Subsystem) -> str:
    names = [member.name for member in Subsystem if member in subsystem]
    return "|".join(names)


class DiagnosticSink(Protocol):
    """Protocol for collaborators receiving parameter diagnostics."""

    def emit(
        self,
        *,
        level: int,
        subsystem: Subsystem,
        msg: str,
        args: Tuple[object, ...] = (),
        env: str | None = None,
    ) -> None:  # pragma: no cover - interface
        ...


@dataclass
class LoggingSink:
    """Forward diagnostics to :mod:`logging`."""

    logger: logging.Logger = field(default_factory=lambda: LOGGER)

    def emit(
        self,
        *,
        level: int,
        subsystem: Subsystem,
        msg: str,
        args: Tuple[object, ...] = (),
        env: str | None = None,
    ) -> None:
        self.logger.log(
            level,
            msg,
            *args,
            extra={"subsystem": _subsystem_label(subsystem), "env": env},
        )


@dataclass
class Event:
    """Simple event structure stored in the event bus."""

    ts: str
    level: int
    subsystem: Subsystem
    msg: str
    env: str | None = None


@dataclass
class EventBus:
    """Append-only in-memory record of diagnostics.

    Events are rendered eagerly so the history reads exactly as the log line
    would.  When ``forward`` is set every event is also passed on to that
    sink, which lets callers keep normal logging while inspecting history.
    """

    events: List[Event] = field(default_factory=list)
    forward: Optional[DiagnosticSink] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def emit(
        self,
        *,
        level: int,
        subsystem: Subsystem,
        msg: str,
        args: Tuple[object, ...] = (),
        env: str | None = None,
    ) -> Event:
        """Create and store a new :class:`Event`."""

        event = Event(
            ts=utc_now(),
            level=level,
            subsystem=subsystem,
            msg=msg % args if args else msg,
            env=env,
        )
        with self._lock:
            self.events.append(event)
        if self.forward is not None:
            self.forward.emit(level=level, subsystem=subsystem, msg=msg, args=args, env=env)
        return event

    def history(self) -> Iterable[Event]:
        """Return the chronological event history."""

        with self._lock:
            return tuple(self.events)

    def for_env(self, env: str) -> List[Event]:
        """Return the events emitted for the variable ``env``."""

        return [event for event in self.history() if event.env == env]


DEFAULT_SINK: DiagnosticSink = LoggingSink()

__all__ = [
    "DEFAULT_SINK",
    "DiagnosticSink",
    "Event",
    "EventBus",
    "LoggingSink",
    "Subsystem",
    "utc_now",
]
