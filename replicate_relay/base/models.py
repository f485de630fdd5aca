"""
Relay domain models (DTOs) public surface.

Re-exports the one-class-per-file implementations under
``replicate_relay.base.models_parts``.
"""

from .models_parts.content_part import ContentPart, ContentPartType
from .models_parts.message import Message, Role
from .models_parts.chat_request import ChatRequest
from .models_parts.job_input import ProviderJobInput
from .models_parts.prediction import PredictionJob, PredictionStatus
from .models_parts.usage import Usage
from .models_parts.chat_completion import ChatCompletion, ChatCompletionChunk, FINISH_REASON_STOP

__all__ = [
    "ContentPart",
    "ContentPartType",
    "Message",
    "Role",
    "ChatRequest",
    "ProviderJobInput",
    "PredictionJob",
    "PredictionStatus",
    "Usage",
    "ChatCompletion",
    "ChatCompletionChunk",
    "FINISH_REASON_STOP",
]
