"""
Message DTO used by the chat request model.

Content may be plain text or a list of `ContentPart` objects; helpers expose
the two views the prompt translation needs (concatenated text and image
references in order).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, Optional, Union

from .content_part import ContentPart


Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class Message:
    """A chat message.

    Attributes:
        role: ``"system"``, ``"user"`` or ``"assistant"``.
        content: Plain text, a list of parts, or ``None`` for a message that
            carries nothing.
    """

    role: Role
    content: Union[str, List[ContentPart], None]

    def text(self) -> str:
        """Concatenate text content with no separator (``""`` when absent)."""
        if self.content is None:
            return ""
        if isinstance(self.content, str):
            return self.content
        return "".join(p.text or "" for p in self.content if p.type == "text")

    def image_urls(self) -> List[str]:
        """Return image references in the order they appear."""
        if not isinstance(self.content, list):
            return []
        return [p.image_url for p in self.content if p.type == "image_url" and p.image_url]

    def last_image_url(self) -> Optional[str]:
        urls = self.image_urls()
        return urls[-1] if urls else None


__all__ = [
    "Message",
    "Role",
]
