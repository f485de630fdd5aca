"""Models parts package public surface.

`replicate_relay.base.models` remains the primary stable import path.
"""

from .content_part import ContentPart, ContentPartType
from .message import Message, Role
from .chat_request import ChatRequest
from .job_input import ProviderJobInput
from .prediction import PredictionJob, PredictionStatus
from .usage import Usage
from .chat_completion import ChatCompletion, ChatCompletionChunk, FINISH_REASON_STOP

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
