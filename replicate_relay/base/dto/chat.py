"""
Pydantic DTOs and validators for inbound OpenAI-style chat requests.

Purpose
-------
Validate chat-completion payloads at the HTTP edge before they are converted
into the dataclass :class:`~replicate_relay.base.models.ChatRequest`. Roles,
content part shapes and sampling parameter bounds are enforced here so the
translation layer can stay total (it never fails).

Failure semantics: validation either succeeds or raises
``pydantic.ValidationError``; the service maps that to HTTP 400.
"""

from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


Role = Literal["system", "user", "assistant"]


class ImageURLDTO(BaseModel):
    """``image_url`` payload of an image content part."""

    url: str = Field(..., min_length=1)
    detail: Optional[str] = None


class ContentPartDTO(BaseModel):
    """A content part: ``{"type": "text", "text": ...}`` or ``{"type": "image_url", "image_url": {...}}``.

    Image parts also accept a bare string for ``image_url``.
    """

    type: Literal["text", "image_url"]
    text: Optional[str] = None
    image_url: Optional[Union[ImageURLDTO, str]] = None

    @model_validator(mode="after")
    def _validate_payload(self) -> "ContentPartDTO":
        if self.type == "text" and self.text is None:
            raise ValueError("text part requires 'text'")
        if self.type == "image_url" and self.image_url is None:
            raise ValueError("image_url part requires 'image_url'")
        return self

    def url(self) -> Optional[str]:
        if isinstance(self.image_url, ImageURLDTO):
            return self.image_url.url
        return self.image_url


class MessageDTO(BaseModel):
    """A chat message with string, part-list or null content."""

    role: Role
    content: Union[str, List[ContentPartDTO], None] = None
    name: Optional[str] = None


class ChatCompletionRequestDTO(BaseModel):
    """OpenAI chat-completions request body.

    Unknown fields (``n``, ``stop``, ``user``...) are accepted and ignored.

    Raises:
        ValidationError: On invalid roles, malformed parts, or out-of-range
        parameters.
    """

    model_config = ConfigDict(extra="ignore")

    model: str = Field(..., min_length=1)
    messages: List[MessageDTO] = Field(..., min_length=1)
    max_tokens: Optional[int] = Field(default=None, ge=0)
    max_completion_tokens: Optional[int] = Field(default=None, ge=0)
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    presence_penalty: Optional[float] = Field(default=None, ge=-2.0, le=2.0)
    frequency_penalty: Optional[float] = Field(default=None, ge=-2.0, le=2.0)
    stream: bool = False


__all__ = [
    "Role",
    "ImageURLDTO",
    "ContentPartDTO",
    "MessageDTO",
    "ChatCompletionRequestDTO",
]
