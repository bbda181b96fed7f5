"""Parameters understood by the OFI NCCL network plugin.

Each parameter is resolved from ``OFI_NCCL_<NAME>`` the first time its
accessor is called and keeps that value for the rest of the process.
"""
from __future__ import annotations

from typing import Mapping, Optional

from .obs.events import DiagnosticSink
from .registry import ParameterRegistry


def build_registry(
    *,
    sink: Optional[DiagnosticSink] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ParameterRegistry:
    """Return a fresh registry holding every plugin parameter, unresolved."""

    registry = ParameterRegistry(sink=sink, environ=environ)
    registry.declare_int("use_ipv6_tcp", 0)
    registry.declare_str("exclude_tcp_if", "lo,docker0")
    registry.declare_int("gdr_flush_disable", 0)
    registry.declare_int("nic_dup_conns", 0)
    registry.declare_int("cuda_flush_enable", 0)
    registry.declare_int("mr_key_size", 2)
    registry.declare_int("cq_read_count", 4)
    return registry


REGISTRY = build_registry()

_use_ipv6_tcp = REGISTRY.get("use_ipv6_tcp")
_exclude_tcp_if = REGISTRY.get("exclude_tcp_if")
_gdr_flush_disable = REGISTRY.get("gdr_flush_disable")
_nic_dup_conns = REGISTRY.get("nic_dup_conns")
_cuda_flush_enable = REGISTRY.get("cuda_flush_enable")
_mr_key_size = REGISTRY.get("mr_key_size")
_cq_read_count = REGISTRY.get("cq_read_count")


def use_ipv6_tcp() -> int:
    """Allow endpoints with IPv6 addressing for the TCP provider.

    Disabled by default.
    """

    return _use_ipv6_tcp.get()


def exclude_tcp_if() -> str:
    """Comma separated interface names filtered out for the TCP provider.

    Defaults to ``lo,docker0``.
    """

    return _exclude_tcp_if.get()


def gdr_flush_disable() -> int:
    """Disable the flush issued after GPUDirect receives.

    Flushes enforce data consistency at the receiving GPU and should only be
    disabled when the provider or hardware already guarantees it.
    """

    return _gdr_flush_disable.get()


def nic_dup_conns() -> int:
    """Number of times each provider is duplicated and exposed as an endpoint."""

    return _nic_dup_conns.get()


def cuda_flush_enable() -> int:
    """Use ``cudaDeviceFlushGPUDirectRDMAWrites`` to order GPUDirect writes.

    Requires CUDA 11.3 or later.  This is only a GPU memory fence; some
    networks and PCIe topologies still need a network level flush.
    """

    return _cuda_flush_enable.get()


def mr_key_size() -> int:
    """Memory registration key size in bytes for providers with app-chosen keys."""

    return _mr_key_size.get()


def cq_read_count() -> int:
    """Maximum number of completion queue entries read per ``fi_cq_read`` call."""

    return _cq_read_count.get()


__all__ = [
    "REGISTRY",
    "build_registry",
    "cq_read_count",
    "cuda_flush_enable",
    "exclude_tcp_if",
    "gdr_flush_disable",
    "mr_key_size",
    "nic_dup_conns",
    "use_ipv6_tcp",
]
