"""Outward OpenAI-style response construction.

The non-streaming path builds one ``chat.completion`` from a succeeded
snapshot. The streaming path stamps every chunk through a per-session
:class:`ChunkFactory` so the id and ``created`` timestamp stay stable across
the whole stream.
"""

from __future__ import annotations

import time
from typing import Optional

from ..base.models import (
    FINISH_REASON_STOP,
    ChatCompletion,
    ChatCompletionChunk,
    PredictionJob,
    Usage,
)
from .usage import usage_from_job


def timestamp() -> int:
    """Unix seconds, the ``created`` unit of the OpenAI contract."""
    return int(time.time())


def assemble_completion(job: PredictionJob, model: str, created: Optional[int] = None) -> ChatCompletion:
    """Join output fragments (in order, no separator) into one assistant reply."""
    return ChatCompletion(
        id=job.id,
        created=created if created is not None else timestamp(),
        model=model,
        content="".join(job.output or []),
        usage=usage_from_job(job),
        finish_reason=FINISH_REASON_STOP,
    )


class ChunkFactory:
    """Builds the chunks of one stream session."""

    def __init__(self, job_id: str, model: str, created: Optional[int] = None) -> None:
        self.job_id = job_id
        self.model = model
        self.created = created if created is not None else timestamp()

    def text(self, content: str) -> ChatCompletionChunk:
        return ChatCompletionChunk(
            id=self.job_id,
            created=self.created,
            model=self.model,
            content=content,
        )

    def terminal(self, usage: Usage) -> ChatCompletionChunk:
        return ChatCompletionChunk(
            id=self.job_id,
            created=self.created,
            model=self.model,
            content=None,
            role=None,
            finish_reason=FINISH_REASON_STOP,
            usage=usage,
        )


__all__ = ["assemble_completion", "ChunkFactory", "timestamp"]
