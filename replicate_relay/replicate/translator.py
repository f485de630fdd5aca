"""OpenAI chat request -> Replicate prediction input.

Pure and total: no I/O, no failure path. Missing content renders as empty
text so a malformed message still produces a well-formed prompt.

Prompt layout::

    <role>: \\n<text>\\n        (one block per non-system message, in order)
    assistant: \\n             (cue for the backend to answer as the assistant)

System messages go to ``system_prompt`` instead, each followed by a newline.
The backend accepts one image, so the last image reference found in any
message wins.
"""

from __future__ import annotations

from typing import List, Optional

from ..base.models import ChatRequest, ProviderJobInput
from ..config.defaults import MAX_TOKENS_FLOOR

ASSISTANT_CUE = "assistant: \n"


def resolve_max_tokens(request: ChatRequest, floor: int = MAX_TOKENS_FLOOR) -> int:
    """Return the output-token limit to send.

    ``max_completion_tokens`` is used only when ``max_tokens`` is unset or
    zero; the result is raised to ``floor`` when smaller.
    """
    max_tokens = request.max_tokens or 0
    if max_tokens == 0 and request.max_completion_tokens:
        max_tokens = request.max_completion_tokens
    return max(max_tokens, floor)


def translate(request: ChatRequest) -> ProviderJobInput:
    """Translate ``request`` into the backend's job input."""
    max_tokens = resolve_max_tokens(request)

    system_parts: List[str] = []
    prompt_parts: List[str] = []
    image: Optional[str] = None

    for msg in request.messages:
        last_image = msg.last_image_url()
        if last_image:
            image = last_image
        if msg.role == "system":
            system_parts.append(msg.text() + "\n")
            continue
        prompt_parts.append(f"{msg.role}: \n")
        prompt_parts.append(msg.text())
        prompt_parts.append("\n")
    prompt_parts.append(ASSISTANT_CUE)

    return ProviderJobInput(
        prompt="".join(prompt_parts),
        system_prompt="".join(system_parts),
        image=image or "",
        max_tokens=max_tokens,
        min_tokens=0,
        temperature=request.temperature,
        top_p=request.top_p,
        presence_penalty=request.presence_penalty,
        frequency_penalty=request.frequency_penalty,
    )


__all__ = ["translate", "resolve_max_tokens", "ASSISTANT_CUE"]
