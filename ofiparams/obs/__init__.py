"""Observability helpers for parameter resolution."""

from .events import DEFAULT_SINK, DiagnosticSink, Event, EventBus, LoggingSink, Subsystem

__all__ = ["DEFAULT_SINK", "DiagnosticSink", "Event", "EventBus", "LoggingSink", "Subsystem"]
