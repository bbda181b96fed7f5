"""ofiparams package initialization.

This module exposes the declared plugin parameters together with the
building blocks used to declare new ones.
"""

from .param import IntParam, ParameterCell, StrParam
from .params import (
    REGISTRY,
    build_registry,
    cq_read_count,
    cuda_flush_enable,
    exclude_tcp_if,
    gdr_flush_disable,
    mr_key_size,
    nic_dup_conns,
    use_ipv6_tcp,
)
from .registry import ParameterRegistry

__all__ = [
    "IntParam",
    "ParameterCell",
    "ParameterRegistry",
    "REGISTRY",
    "StrParam",
    "build_registry",
    "cq_read_count",
    "cuda_flush_enable",
    "exclude_tcp_if",
    "gdr_flush_disable",
    "mr_key_size",
    "nic_dup_conns",
    "use_ipv6_tcp",
]
