"""
Prediction lifecycle errors.

Each class pins the :class:`ErrorCode` and default HTTP status for one failure
of the submit -> poll/stream bridge so callers can branch on type while the
service layer renders them uniformly through :class:`ProviderError`.
"""
from __future__ import annotations

from typing import Optional

from .error_code import ErrorCode
from .provider_error import ProviderError

PROVIDER = "replicate"


class SubmissionError(ProviderError):
    """Job creation failed (transport error or non-success status).

    ``status_code`` is the backend's status when it answered; transport
    failures leave it unset and surface as HTTP 500.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        model: Optional[str] = None,
        raw: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.SUBMISSION,
            message=message,
            provider=PROVIDER,
            model=model,
            raw=raw,
            status_code=status_code,
            body=body,
        )


class PredictionFailedError(ProviderError):
    """The backend reported the job as ``failed`` or ``canceled``."""

    def __init__(
        self,
        job_id: str,
        error_text: Optional[str],
        *,
        status: str = "failed",
        model: Optional[str] = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.PREDICTION_FAILED,
            message=f"prediction failed or canceled: {error_text or ''}",
            provider=PROVIDER,
            model=model,
            status_code=500,
        )
        self.job_id = job_id
        self.error_text = error_text
        self.status = status


class PollingTimeoutError(ProviderError):
    """The attempt ceiling was exhausted without a terminal status."""

    def __init__(self, job_id: str, attempts: int, *, model: Optional[str] = None) -> None:
        super().__init__(
            code=ErrorCode.POLLING_TIMEOUT,
            message=f"polling timeout after {attempts} attempts",
            provider=PROVIDER,
            model=model,
            status_code=504,
        )
        self.job_id = job_id
        self.attempts = attempts


class StreamTransportError(ProviderError):
    """Reading the event stream failed before the ``done`` event."""

    def __init__(
        self,
        message: str,
        *,
        job_id: Optional[str] = None,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        model: Optional[str] = None,
        raw: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.STREAM_TRANSPORT,
            message=message,
            provider=PROVIDER,
            model=model,
            raw=raw,
            status_code=status_code,
            body=body,
        )
        self.job_id = job_id


__all__ = [
    "SubmissionError",
    "PredictionFailedError",
    "PollingTimeoutError",
    "StreamTransportError",
]
