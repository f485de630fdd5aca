"""
ProviderJobInput: the ``input`` object of a Replicate prediction.

Produced by the request translation and discarded once the job is submitted.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ProviderJobInput:
    """Flattened prompt plus remapped sampling parameters.

    Attributes:
        prompt: Non-system turns rendered as ``"<role>: \\n<text>\\n"`` followed
            by the ``"assistant: \\n"`` cue.
        system_prompt: System message texts, each followed by a newline.
        image: The single image reference the backend accepts (``""`` if none).
        max_tokens: Resolved output-token limit (never below the floor).
        min_tokens: Always ``0``.
    """

    prompt: str
    system_prompt: str
    image: str = ""
    max_tokens: int = 1024
    min_tokens: int = 0
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the wire ``input`` object.

        Key order is fixed. ``image`` is always present (``""`` when there is
        none); unset sampling keys are left out.
        """
        data: Dict[str, Any] = {
            "prompt": self.prompt,
            "system_prompt": self.system_prompt,
            "image": self.image,
            "max_tokens": self.max_tokens,
            "min_tokens": self.min_tokens,
        }
        for key in ("temperature", "top_p", "presence_penalty", "frequency_penalty"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


__all__ = [
    "ProviderJobInput",
]
