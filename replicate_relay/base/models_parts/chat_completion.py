"""
Outward OpenAI-style response objects.

`ChatCompletion` is the single non-streaming response; `ChatCompletionChunk`
is one unit of a streamed response. Both serialize through ``to_dict`` into
the exact JSON shapes of the OpenAI chat-completions contract.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .usage import Usage

FINISH_REASON_STOP = "stop"


@dataclass(frozen=True)
class ChatCompletion:
    """A complete assistant reply with usage."""

    id: str
    created: int
    model: str
    content: str
    usage: Usage
    finish_reason: str = FINISH_REASON_STOP

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "object": "chat.completion",
            "created": self.created,
            "model": self.model,
            "choices": [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": self.content},
                    "finish_reason": self.finish_reason,
                }
            ],
            "usage": self.usage.to_dict(),
        }


@dataclass(frozen=True)
class ChatCompletionChunk:
    """One streamed delta.

    Text chunks carry ``content``; the terminal chunk carries
    ``finish_reason`` and ``usage`` and no text.
    """

    id: str
    created: int
    model: str
    content: Optional[str] = None
    role: Optional[str] = "assistant"
    finish_reason: Optional[str] = None
    usage: Optional[Usage] = None

    @property
    def is_terminal(self) -> bool:
        return self.finish_reason is not None

    def to_dict(self) -> Dict[str, Any]:
        delta: Dict[str, Any] = {}
        if self.role is not None:
            delta["role"] = self.role
        if self.content is not None:
            delta["content"] = self.content
        data: Dict[str, Any] = {
            "id": self.id,
            "object": "chat.completion.chunk",
            "created": self.created,
            "model": self.model,
            "choices": [{"index": 0, "delta": delta, "finish_reason": self.finish_reason}],
        }
        if self.usage is not None:
            data["usage"] = self.usage.to_dict()
        return data


__all__ = [
    "ChatCompletion",
    "ChatCompletionChunk",
    "FINISH_REASON_STOP",
]
