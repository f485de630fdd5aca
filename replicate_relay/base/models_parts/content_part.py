"""
Content part model for chat messages.

OpenAI-style messages may carry a list of parts instead of a plain string.
The relay only distinguishes text parts from image references; any other
part type is kept (``"other"``) so translation can skip it explicitly.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Literal, Optional


ContentPartType = Literal[
    "text",       # Plain text content
    "image_url",  # Image reference (URL or data URI)
    "other",      # Anything else; ignored by the prompt translation
]


@dataclass(frozen=True)
class ContentPart:
    """A single piece of message content.

    Attributes:
        type: Semantic kind of the part.
        text: Text for ``"text"`` parts.
        image_url: Image location for ``"image_url"`` parts.
    """

    type: ContentPartType
    text: Optional[str] = None
    image_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary representation of the part."""
        return asdict(self)


__all__ = [
    "ContentPart",
    "ContentPartType",
]
