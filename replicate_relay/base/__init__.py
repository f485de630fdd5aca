"""
Relay Base Package

Provider-agnostic building blocks used by the Replicate bridge and the
inbound service:

- Models (DTOs): chat request, prediction snapshot, outward responses
- Errors: normalized taxonomy and prediction lifecycle errors
- HTTP: pooled ``httpx`` clients and timeout configuration
- Logging: structured JSON events
"""

from .errors import (
    ErrorCode,
    PollingTimeoutError,
    PredictionFailedError,
    ProviderError,
    StreamTransportError,
    SubmissionError,
    classify_exception,
)
from .models import (
    ChatCompletion,
    ChatCompletionChunk,
    ChatRequest,
    ContentPart,
    Message,
    PredictionJob,
    PredictionStatus,
    ProviderJobInput,
    Usage,
)
from .timeouts import TimeoutConfig, get_timeout_config

__all__ = [
    "ErrorCode",
    "ProviderError",
    "SubmissionError",
    "PredictionFailedError",
    "PollingTimeoutError",
    "StreamTransportError",
    "classify_exception",
    "ChatCompletion",
    "ChatCompletionChunk",
    "ChatRequest",
    "ContentPart",
    "Message",
    "PredictionJob",
    "PredictionStatus",
    "ProviderJobInput",
    "Usage",
    "TimeoutConfig",
    "get_timeout_config",
]
