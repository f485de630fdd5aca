"""
Normalized relay error codes (taxonomy).

Defines the `ErrorCode` enumeration shared by the Replicate bridge, the
retry policy and the inbound service. Values are lowercase snake_case and are
a stable contract for logs and for the ``code`` field of OpenAI-style error
bodies.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    TRANSIENT = "transient"
    UNSUPPORTED = "unsupported"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    SERVER_ERROR = "server_error"
    INTERNAL = "internal"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"
    # Prediction lifecycle failures
    SUBMISSION = "submission"
    PREDICTION_FAILED = "prediction_failed"
    POLLING_TIMEOUT = "polling_timeout"
    STREAM_TRANSPORT = "stream_transport"


RETRYABLE_CODES = (ErrorCode.TRANSIENT, ErrorCode.RATE_LIMIT, ErrorCode.TIMEOUT)


__all__ = ["ErrorCode", "RETRYABLE_CODES"]
