"""Unified timeout values for the relay.

Centralizes the timeouts used by the pooled HTTP clients so no call site
carries ad-hoc numeric literals.

Key Components
--------------
TimeoutConfig
    Dataclass capturing normalized timeout values.

get_timeout_config()
    Returns a process-cached configuration, parsing environment overrides on
    first use (and again only when the overrides change). Supported
    environment variables (all optional):
        RELAY_TIMEOUT_START_SECONDS
        RELAY_TIMEOUT_STREAM_SECONDS
        RELAY_TIMEOUT_HTTP_SECONDS

build_httpx_timeout(purpose)
    Translate the config into an ``httpx.Timeout`` for a client pool. Stream
    pools use the idle stream timeout as their read timeout because a
    prediction may stay silent for a while between tokens.
"""
from __future__ import annotations

from dataclasses import dataclass
import os

import httpx


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        start_timeout_seconds: Connect timeout for any backend call.
        stream_timeout_seconds: Idle read timeout while waiting for the next
            event on a prediction stream.
        http_timeout_seconds: Read timeout for job creation and status fetches.
    """

    start_timeout_seconds: float = 30.0
    stream_timeout_seconds: float = 60.0
    http_timeout_seconds: float = 30.0


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None

_ENV_NAMES = (
    "RELAY_TIMEOUT_START_SECONDS",
    "RELAY_TIMEOUT_STREAM_SECONDS",
    "RELAY_TIMEOUT_HTTP_SECONDS",
)


def _parse_env_float(name: str, default: float) -> float:
    """Read ``name`` as a positive float, falling back to ``default``."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
        return val if val > 0 else default
    except ValueError:
        return default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached `TimeoutConfig` instance."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = "/".join(os.getenv(n, "") for n in _ENV_NAMES)
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED
    _CACHED = TimeoutConfig(
        start_timeout_seconds=_parse_env_float("RELAY_TIMEOUT_START_SECONDS", 30.0),
        stream_timeout_seconds=_parse_env_float("RELAY_TIMEOUT_STREAM_SECONDS", 60.0),
        http_timeout_seconds=_parse_env_float("RELAY_TIMEOUT_HTTP_SECONDS", 30.0),
    )
    _ENV_GUARD = guard
    return _CACHED


def build_httpx_timeout(purpose: str) -> httpx.Timeout:
    """Return an ``httpx.Timeout`` for a client pool of the given purpose."""
    cfg = get_timeout_config()
    read = cfg.stream_timeout_seconds if purpose.endswith("stream") else cfg.http_timeout_seconds
    return httpx.Timeout(read, connect=cfg.start_timeout_seconds)


__all__ = [
    "TimeoutConfig",
    "get_timeout_config",
    "build_httpx_timeout",
]
