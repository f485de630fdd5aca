"""Errors parts package public surface.

Prefer importing from `replicate_relay.base.errors` for the stable surface.
"""

from .error_code import ErrorCode, RETRYABLE_CODES
from .provider_error import ProviderError
from .classification import classify_exception, code_for_status
from .relay_errors import (
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
