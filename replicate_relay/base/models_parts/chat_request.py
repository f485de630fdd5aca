"""
ChatRequest DTO for OpenAI-style chat completion calls.

This is the normalized inbound request handed to the Replicate bridge. Field
names follow the OpenAI chat-completions contract.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .message import Message


@dataclass
class ChatRequest:
    """Normalized chat request.

    Attributes:
        model: Model name echoed in responses (the backend job decides the
            actual model).
        messages: Ordered list of `Message` instances.
        max_tokens: Primary output-token limit.
        max_completion_tokens: Alias used only when ``max_tokens`` is unset
            or zero.
        temperature, top_p, presence_penalty, frequency_penalty: Sampling
            parameters forwarded as-is.
        stream: Whether the caller wants chunked output.
    """

    model: str
    messages: List[Message]
    max_tokens: Optional[int] = None
    max_completion_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None
    stream: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary representation of the request."""
        return {
            "model": self.model,
            "messages": [
                {
                    "role": m.role,
                    "content": (
                        m.content if not isinstance(m.content, list)
                        else [p.to_dict() for p in m.content]
                    ),
                }
                for m in self.messages
            ],
            "max_tokens": self.max_tokens,
            "max_completion_tokens": self.max_completion_tokens,
            "temperature": self.temperature,
            "top_p": self.top_p,
            "presence_penalty": self.presence_penalty,
            "frequency_penalty": self.frequency_penalty,
            "stream": self.stream,
        }


__all__ = [
    "ChatRequest",
]
