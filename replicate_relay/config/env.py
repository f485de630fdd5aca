"""replicate_relay.config.env
==========================

Environment variable names for provider credentials.

- ``ENV_MAP`` holds the canonical variable per provider.
- ``ENV_ALIASES`` lists every accepted name, canonical first, which sets
  the precedence.

Helpers never raise on unknown providers or unset variables; they return
``None`` and let the caller decide.
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, Optional, Tuple

ENV_MAP: Dict[str, str] = {
    "replicate": "REPLICATE_API_KEY",
}

# Replicate's own tooling reads REPLICATE_API_TOKEN.
ENV_ALIASES: Dict[str, Tuple[str, ...]] = {
    "replicate": ("REPLICATE_API_KEY", "REPLICATE_API_TOKEN"),
}


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if ``val`` looks like a placeholder/test value.

    Heuristics (case-insensitive): contains 'placeholder', 'changeme' or
    'example', or starts with 'test_'.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return (
        "placeholder" in v
        or "changeme" in v
        or "example" in v
        or v.startswith("test_")
    )


def get_env_var_names(provider: str) -> Iterable[str]:
    """Return accepted env var names for ``provider`` (canonical first)."""
    name = (provider or "").lower().strip()
    if name in ENV_ALIASES:
        return ENV_ALIASES[name]
    canonical = ENV_MAP.get(name)
    return (canonical,) if canonical else ()


def resolve_provider_key(provider: str) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(value, env_name)`` for the first non-placeholder key found."""
    for env_name in get_env_var_names(provider):
        val = os.getenv(env_name)
        if val and not is_placeholder(val):
            return val, env_name
    return None, None


__all__ = [
    "ENV_MAP",
    "ENV_ALIASES",
    "is_placeholder",
    "get_env_var_names",
    "resolve_provider_key",
]
