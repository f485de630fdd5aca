"""Unified configuration layer for the relay.

Sources merge in a predictable order (later wins):

1. Built-in defaults (:mod:`replicate_relay.config.defaults`)
2. Optional external config file (JSON or YAML) named by ``RELAY_CONFIG_FILE``
3. Environment variables ``<PROVIDER>_<FIELD>`` (e.g. ``REPLICATE_BASE_URL``)
4. In-code overrides passed to :func:`get_provider_config`

A ``.env`` file (``DOTENV_FILE``, default ``.env``) is read once before the
environment is consulted; it only fills variables that are unset or hold a
placeholder.

External Config File
--------------------
```
replicate:
  model: meta/meta-llama-3-70b-instruct
  base_url: https://api.replicate.com
  poll_interval: 1.0
  poll_max_attempts: 30
```

Public API
----------
* get_provider_config(provider: str, overrides: dict | None = None) -> dict
* get_model(provider: str) -> str | None
* clear_config_cache() -> None
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml

from .env import is_placeholder, resolve_provider_key
from .defaults import (
    POLL_INTERVAL_SECONDS,
    POLL_MAX_ATTEMPTS,
    REPLICATE_DEFAULT_BASE_URL,
    REPLICATE_DEFAULT_MODEL,
)


DEFAULTS: Dict[str, Dict[str, Any]] = {
    "replicate": {
        "model": REPLICATE_DEFAULT_MODEL,
        "base_url": REPLICATE_DEFAULT_BASE_URL,
        "poll_interval": POLL_INTERVAL_SECONDS,
        "poll_max_attempts": POLL_MAX_ATTEMPTS,
    },
}


ENV_FIELD_MAP = {
    "model": "MODEL",
    "base_url": "BASE_URL",
    "version": "VERSION",
    "poll_interval": "POLL_INTERVAL",
    "poll_max_attempts": "POLL_MAX_ATTEMPTS",
}

# Numeric fields and their coercions; invalid values fall back to the default.
_NUMERIC_FIELDS: Dict[str, Callable[[Any], Any]] = {
    "poll_interval": float,
    "poll_max_attempts": int,
}


_FILE_CACHE: Optional[Dict[str, Any]] = None
_DOTENV_LOADED = False


def _load_dotenv_once() -> None:
    """Load KEY=VALUE lines from the dotenv file once per process."""
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    path = os.getenv("DOTENV_FILE", ".env")
    _DOTENV_LOADED = True
    if not os.path.isfile(path):
        return
    with open(path, "r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            k, v = line.split("=", 1)
            k = k.strip()
            v = v.strip().strip('"').strip("'")
            if k and (k not in os.environ or is_placeholder(os.environ.get(k))):
                os.environ[k] = v


def _load_external_config() -> Dict[str, Any]:
    global _FILE_CACHE
    if _FILE_CACHE is not None:
        return _FILE_CACHE
    path = os.getenv("RELAY_CONFIG_FILE")
    if not path or not Path(path).exists():
        _FILE_CACHE = {}
        return _FILE_CACHE
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except ValueError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError:
            data = {}
    _FILE_CACHE = data if isinstance(data, dict) else {}
    return _FILE_CACHE


def _env_overrides(provider: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    prefix = provider.upper()
    for field, suffix in ENV_FIELD_MAP.items():
        val = os.getenv(f"{prefix}_{suffix}")
        if val is not None and val != "":
            out[field] = val
    key, _ = resolve_provider_key(provider)
    if key:
        out["api_key"] = key
    return out


def _coerce_numeric(cfg: Dict[str, Any], defaults: Dict[str, Any]) -> None:
    for field, cast in _NUMERIC_FIELDS.items():
        if field not in cfg:
            continue
        try:
            value = cast(cfg[field])
        except (TypeError, ValueError):
            value = None
        if value is None or value < 0:
            value = defaults.get(field)
        cfg[field] = value


def get_provider_config(provider: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return merged configuration for a provider.

    Merge order (later wins): defaults -> external config -> env vars -> overrides.
    ``None`` override values are ignored.
    """
    _load_dotenv_once()
    name = (provider or "").lower().strip()
    defaults = DEFAULTS.get(name, {})
    cfg: Dict[str, Any] = dict(defaults)

    file_cfg = _load_external_config().get(name)
    if isinstance(file_cfg, dict):
        cfg |= file_cfg

    cfg |= _env_overrides(name)

    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}

    _coerce_numeric(cfg, defaults)
    return cfg


def get_model(provider: str) -> Optional[str]:
    return get_provider_config(provider).get("model")


def clear_config_cache() -> None:
    """Forget the cached config file and dotenv state (tests, reloads)."""
    global _FILE_CACHE, _DOTENV_LOADED
    _FILE_CACHE = None
    _DOTENV_LOADED = False


__all__ = [
    "get_provider_config",
    "get_model",
    "clear_config_cache",
    "DEFAULTS",
]
