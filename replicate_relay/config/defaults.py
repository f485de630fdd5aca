"""replicate_relay.config.defaults
===============================

Central place for the small, stable default values used across the relay.
Each can be overridden through environment variables or the external config
file; see :mod:`replicate_relay.config`.

This module imports nothing from the rest of the package.
"""

from __future__ import annotations

# ---- Service / HTTP layer ----
# Comma-separated list of allowed CORS origins for the inbound service.
RELAY_SERVICE_CORS_DEFAULT_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173"

# ---- Replicate backend ----
REPLICATE_DEFAULT_BASE_URL = "https://api.replicate.com"
REPLICATE_DEFAULT_MODEL = "meta/meta-llama-3-70b-instruct"
REPLICATE_PREDICTIONS_PATH = "/v1/predictions"

# ---- Prediction lifecycle ----
# Output-token limit never sent below this value.
MAX_TOKENS_FLOOR = 1024
# Fixed sleep between status fetches while waiting for a prediction.
POLL_INTERVAL_SECONDS = 1.0
# Status fetches before giving up on a non-streaming prediction.
POLL_MAX_ATTEMPTS = 30


__all__ = [
    "RELAY_SERVICE_CORS_DEFAULT_ORIGINS",
    "REPLICATE_DEFAULT_BASE_URL",
    "REPLICATE_DEFAULT_MODEL",
    "REPLICATE_PREDICTIONS_PATH",
    "MAX_TOKENS_FLOOR",
    "POLL_INTERVAL_SECONDS",
    "POLL_MAX_ATTEMPTS",
]
