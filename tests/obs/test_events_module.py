"""Tests for :mod:`ofiparams.obs.events`."""

from __future__ import annotations

import logging

from ofiparams.obs.events import EventBus, LoggingSink, Subsystem


def test_event_bus_emit_and_history():
    bus = EventBus()
    event = bus.emit(
        level=logging.INFO,
        subsystem=Subsystem.INIT | Subsystem.NET,
        msg="Setting %s environment variable to %s",
        args=("OFI_NCCL_X", 3),
        env="OFI_NCCL_X",
    )

    assert event.msg == "Setting OFI_NCCL_X environment variable to 3"
    assert Subsystem.NET in event.subsystem
    history = list(bus.history())
    assert history == [event]
    assert bus.for_env("OFI_NCCL_X") == [event]
    assert bus.for_env("OFI_NCCL_Y") == []


def test_event_bus_keeps_literal_percent_without_args():
    bus = EventBus()
    event = bus.emit(level=logging.INFO, subsystem=Subsystem.INIT, msg="100% done")

    assert event.msg == "100% done"


def test_logging_sink_tags_subsystem(caplog):
    sink = LoggingSink()

    with caplog.at_level(logging.INFO, logger="ofiparams.obs.events"):
        sink.emit(
            level=logging.INFO,
            subsystem=Subsystem.INIT | Subsystem.NET,
            msg="Setting %s environment variable to %s",
            args=("OFI_NCCL_X", "lo"),
            env="OFI_NCCL_X",
        )

    [record] = caplog.records
    assert record.getMessage() == "Setting OFI_NCCL_X environment variable to lo"
    assert record.subsystem == "INIT|NET"
    assert record.env == "OFI_NCCL_X"


def test_event_bus_forwards_to_another_sink():
    inner = EventBus()
    outer = EventBus(forward=inner)

    outer.emit(level=logging.INFO, subsystem=Subsystem.NET, msg="value %s", args=(1,))

    assert [event.msg for event in inner.history()] == ["value 1"]
