"""Token usage from a terminal prediction snapshot.

Both the non-streaming response and the terminal stream chunk call
:func:`usage_from_job`, so the two paths report identical numbers for the
same snapshot. A job without metrics yields all-zero usage rather than
omitting the field.
"""

from __future__ import annotations

from typing import Optional

from ..base.models import PredictionJob, Usage


def usage_from_job(job: Optional[PredictionJob]) -> Usage:
    """Return a fresh :class:`Usage` for ``job`` (zeros when unknown)."""
    if job is None or not job.has_metrics:
        return Usage()
    return Usage(
        prompt_tokens=job.input_token_count or 0,
        completion_tokens=job.output_token_count or 0,
    )


__all__ = ["usage_from_job"]
