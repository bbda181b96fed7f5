"""Configuration helpers for reading plugin environment variables.

Every parameter is controlled by a variable named ``OFI_NCCL_<SUFFIX>``.
Consumers should rely on :func:`get_env` instead of using :func:`os.getenv`
directly so that the process environment is read in a single, well-defined
place.  The environment is treated as read-only.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

ENV_PREFIX = "OFI_NCCL_"


def env_key(suffix: str) -> str:
    """Return the environment variable name controlling ``suffix``."""

    return f"{ENV_PREFIX}{suffix}"


def get_env(
    key: str,
    default: Optional[str] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Return the value for ``key`` from the environment.

    Parameters
    ----------
    key:
        The name of the environment variable to look up.
    default:
        The value to return when ``key`` is not present.
    environ:
        Mapping to read from instead of :data:`os.environ`.
    """

    source = os.environ if environ is None else environ
    return source.get(key, default)


__all__ = ["ENV_PREFIX", "env_key", "get_env"]
