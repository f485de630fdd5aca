"""Chat request construction from validated inbound DTOs.

Converts :class:`ChatCompletionRequestDTO` into the dataclass
:class:`ChatRequest` consumed by the provider. Validation already happened at
the HTTP edge, so conversion never fails.
"""

from __future__ import annotations

from typing import List

from replicate_relay.base.dto import ChatCompletionRequestDTO, MessageDTO
from replicate_relay.base.models import ChatRequest, ContentPart, Message


def to_messages(dtos: List[MessageDTO]) -> List[Message]:
    """Convert message DTOs to ``Message`` objects, keeping part order."""
    msgs: List[Message] = []
    for m in dtos:
        if isinstance(m.content, list):
            parts = [
                ContentPart(type="image_url", image_url=p.url())
                if p.type == "image_url"
                else ContentPart(type="text", text=p.text)
                for p in m.content
            ]
            msgs.append(Message(role=m.role, content=parts))
        else:
            msgs.append(Message(role=m.role, content=m.content))
    return msgs


def build_chat_request(body: ChatCompletionRequestDTO) -> ChatRequest:
    """Construct a ``ChatRequest`` from a validated request body."""
    return ChatRequest(
        model=body.model,
        messages=to_messages(body.messages),
        max_tokens=body.max_tokens,
        max_completion_tokens=body.max_completion_tokens,
        temperature=body.temperature,
        top_p=body.top_p,
        presence_penalty=body.presence_penalty,
        frequency_penalty=body.frequency_penalty,
        stream=body.stream,
    )


__all__ = ["to_messages", "build_chat_request"]
