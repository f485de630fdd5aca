"""replicate_relay package

OpenAI chat-completions facade over Replicate's asynchronous prediction API.

Purpose:
    Accept OpenAI-style chat requests, run them as Replicate predictions and
    answer with OpenAI-style completions or chunk streams (packaging is
    configured via the repository root ``pyproject.toml``).

Public API (re-exported):
    - Version: ``__version__``
    - Exceptions: :class:`ProviderError`, :class:`ErrorCode` and the
      prediction lifecycle errors
    - Provider: :class:`ReplicateProvider`
    - Factory: :func:`create`
"""

from typing import Any, Optional

from .base.errors import (
    ErrorCode,
    PollingTimeoutError,
    PredictionFailedError,
    ProviderError,
    StreamTransportError,
    SubmissionError,
)
from .base.models import ChatCompletion, ChatCompletionChunk, ChatRequest, Message, Usage
from .replicate import ReplicateProvider

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Exceptions
    "ProviderError",
    "ErrorCode",
    "SubmissionError",
    "PredictionFailedError",
    "PollingTimeoutError",
    "StreamTransportError",
    # Models
    "ChatRequest",
    "Message",
    "ChatCompletion",
    "ChatCompletionChunk",
    "Usage",
    # Provider
    "ReplicateProvider",
    "create",
]


def create(model: Optional[str] = None, **kwargs: Any) -> ReplicateProvider:
    """Create a :class:`ReplicateProvider`; ``kwargs`` override config values."""
    return ReplicateProvider(model=model, **kwargs)
