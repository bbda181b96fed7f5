"""Tests for :mod:`ofiparams.param.cell`."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Mapping

import pytest

from ofiparams.obs.events import EventBus, Subsystem
from ofiparams.param.cell import CellState, IntParam, ParameterCell, StrParam
from ofiparams.param.parsers import StrParser


class CountingEnviron(Mapping):
    """Mapping that records every lookup and can stall to widen races."""

    def __init__(self, data: dict, delay: float = 0.0) -> None:
        self.data = dict(data)
        self.delay = delay
        self.lookups = 0
        self._lock = threading.Lock()

    def __getitem__(self, key):
        with self._lock:
            self.lookups += 1
        if self.delay:
            time.sleep(self.delay)
        return self.data[key]

    def __iter__(self):
        return iter(self.data)

    def __len__(self):
        return len(self.data)


def make_int(environ, bus=None, default=4):
    return IntParam("cq_read_count", "CQ_READ_COUNT", default, sink=bus or EventBus(), environ=environ)


def make_str(environ, bus=None, default="lo,docker0"):
    return StrParam("exclude_tcp_if", "EXCLUDE_TCP_IF", default, sink=bus or EventBus(), environ=environ)


def test_int_cell_returns_default_when_unset():
    bus = EventBus()
    cell = make_int({}, bus)

    assert cell.state is CellState.UNINITIALIZED
    assert cell.get() == 4
    assert cell.resolved
    assert list(bus.history()) == []


def test_int_cell_adopts_valid_override_and_logs_it():
    bus = EventBus()
    cell = make_int({"OFI_NCCL_CQ_READ_COUNT": "8"}, bus)

    assert cell.get() == 8
    [event] = bus.history()
    assert event.msg == "Setting OFI_NCCL_CQ_READ_COUNT environment variable to 8"
    assert event.level == logging.INFO
    assert event.subsystem == Subsystem.INIT | Subsystem.NET
    assert event.env == "OFI_NCCL_CQ_READ_COUNT"


def test_int_cell_falls_back_on_invalid_override():
    bus = EventBus()
    cell = make_int({"OFI_NCCL_CQ_READ_COUNT": "abc"}, bus)

    assert cell.get() == 4
    [event] = bus.history()
    assert event.msg == "Invalid value abc provided for OFI_NCCL_CQ_READ_COUNT environment variable, using default 4"


def test_int_cell_treats_empty_value_as_unset():
    bus = EventBus()
    cell = make_int({"OFI_NCCL_CQ_READ_COUNT": ""}, bus)

    assert cell.get() == 4
    assert list(bus.history()) == []


def test_str_cell_returns_default_when_unset():
    bus = EventBus()
    cell = make_str({}, bus)

    assert cell.get() == "lo,docker0"
    assert list(bus.history()) == []


def test_str_cell_adopts_empty_value_unlike_int_cell():
    bus = EventBus()
    environ = {"OFI_NCCL_EXCLUDE_TCP_IF": "", "OFI_NCCL_CQ_READ_COUNT": ""}
    str_cell = make_str(environ, bus)
    int_cell = make_int(environ, bus)

    assert str_cell.get() == ""
    assert int_cell.get() == 4
    assert [event.env for event in bus.history()] == ["OFI_NCCL_EXCLUDE_TCP_IF"]


def test_str_cell_falls_back_when_copy_fails():
    class FailingCopy(StrParser):
        def parse(self, raw: str) -> str:
            raise MemoryError

    bus = EventBus()
    cell = ParameterCell(
        "exclude_tcp_if",
        "EXCLUDE_TCP_IF",
        "lo,docker0",
        FailingCopy(),
        sink=bus,
        environ={"OFI_NCCL_EXCLUDE_TCP_IF": "eth0"},
    )

    assert cell.get() == "lo,docker0"
    [event] = bus.history()
    assert event.msg.startswith("Allocation error saving result for OFI_NCCL_EXCLUDE_TCP_IF")


def test_cell_value_is_immutable_after_first_resolution():
    environ = {"OFI_NCCL_CQ_READ_COUNT": "8"}
    bus = EventBus()
    cell = make_int(environ, bus)

    assert cell.get() == 8
    environ["OFI_NCCL_CQ_READ_COUNT"] = "16"
    del environ["OFI_NCCL_CQ_READ_COUNT"]

    assert cell.get() == 8
    assert cell() == 8
    assert len(list(bus.history())) == 1


def test_cell_reads_process_environment_once(monkeypatch):
    monkeypatch.setenv("OFI_NCCL_TEST_CELL_ONCE", "0x10")
    cell = IntParam("test_cell_once", "TEST_CELL_ONCE", 1, sink=EventBus())

    assert cell.get() == 16
    monkeypatch.setenv("OFI_NCCL_TEST_CELL_ONCE", "32")
    assert cell.get() == 16


@pytest.mark.parametrize("make_cell", [make_int, make_str])
def test_concurrent_first_access_resolves_exactly_once(make_cell):
    threads_count = 16
    environ = CountingEnviron(
        {"OFI_NCCL_CQ_READ_COUNT": "8", "OFI_NCCL_EXCLUDE_TCP_IF": "eth0"},
        delay=0.01,
    )
    bus = EventBus()
    cell = make_cell(environ, bus)
    barrier = threading.Barrier(threads_count)
    results = []
    results_lock = threading.Lock()

    def worker():
        barrier.wait()
        value = cell.get()
        with results_lock:
            results.append(value)

    workers = [threading.Thread(target=worker) for _ in range(threads_count)]
    for thread in workers:
        thread.start()
    for thread in workers:
        thread.join()

    assert len(results) == threads_count
    assert len(set(results)) == 1
    assert environ.lookups == 1
    assert len(list(bus.history())) == 1


def test_int_param_rejects_out_of_range_default():
    with pytest.raises(ValueError):
        IntParam("huge", "HUGE", 2**63, sink=EventBus(), environ={})


def test_param_constructors_check_default_types():
    with pytest.raises(TypeError):
        IntParam("flag", "FLAG", True, environ={})
    with pytest.raises(TypeError):
        StrParam("name", "NAME", 3, environ={})  # type: ignore[arg-type]
