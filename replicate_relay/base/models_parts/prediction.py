"""
PredictionJob: read-only projection of a Replicate prediction.

Built from one ``POST /v1/predictions`` or ``GET /v1/predictions/{id}``
response body and never refreshed in place; callers fetch a new snapshot
instead.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Optional


class PredictionStatus(str, Enum):
    """Lifecycle states reported by the backend."""

    STARTING = "starting"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in (PredictionStatus.SUCCEEDED, PredictionStatus.FAILED, PredictionStatus.CANCELED)

    @classmethod
    def parse(cls, value: Any) -> "PredictionStatus":
        """Map a wire status to an enum member; unknown values count as processing."""
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.PROCESSING


def _coerce_count(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        count = int(value)
    except (TypeError, ValueError):
        return None
    return count if count >= 0 else None


def _coerce_output(value: Any) -> Optional[List[str]]:
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return ["" if v is None else str(v) for v in value]
    return [str(value)]


@dataclass(frozen=True)
class PredictionJob:
    """Snapshot of a prediction.

    Attributes:
        id: Opaque backend-assigned identifier.
        status: Current lifecycle state.
        error: Backend error text (set on failure).
        output: Output text fragments, present once the job succeeded.
        input_token_count: Prompt-side token count from ``metrics``.
        output_token_count: Completion-side token count from ``metrics``.
        stream_url: Event subscription URL (``urls.stream``), when offered.
    """

    id: str
    status: PredictionStatus
    error: Optional[str] = None
    output: Optional[List[str]] = None
    input_token_count: Optional[int] = None
    output_token_count: Optional[int] = None
    stream_url: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def has_metrics(self) -> bool:
        return self.input_token_count is not None or self.output_token_count is not None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "PredictionJob":
        """Build a snapshot from a decoded prediction response body.

        Raises:
            ValueError: ``data`` is not a JSON object.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"prediction payload is not an object: {type(data).__name__}")
        metrics = data.get("metrics") or {}
        urls = data.get("urls") or {}
        error = data.get("error")
        stream_url = urls.get("stream") if isinstance(urls, Mapping) else None
        return cls(
            id=str(data.get("id") or ""),
            status=PredictionStatus.parse(data.get("status")),
            error=str(error) if error else None,
            output=_coerce_output(data.get("output")),
            input_token_count=_coerce_count(metrics.get("input_token_count")) if isinstance(metrics, Mapping) else None,
            output_token_count=_coerce_count(metrics.get("output_token_count")) if isinstance(metrics, Mapping) else None,
            stream_url=stream_url if isinstance(stream_url, str) and stream_url else None,
        )


__all__ = [
    "PredictionJob",
    "PredictionStatus",
]
