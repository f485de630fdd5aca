"""Unified relay error taxonomy public surface.

Re-exports the one-class-per-file implementations under
``replicate_relay.base.errors_parts`` behind a stable import path.
"""

from .errors_parts.error_code import ErrorCode, RETRYABLE_CODES
from .errors_parts.provider_error import ProviderError
from .errors_parts.classification import classify_exception, code_for_status
from .errors_parts.relay_errors import (
    PollingTimeoutError,
    PredictionFailedError,
    StreamTransportError,
    SubmissionError,
)

__all__ = [
    "ErrorCode",
    "RETRYABLE_CODES",
    "ProviderError",
    "classify_exception",
    "code_for_status",
    "SubmissionError",
    "PredictionFailedError",
    "PollingTimeoutError",
    "StreamTransportError",
]
