"""Prediction job submission and status polling.

``JobSubmitter`` issues the single ``POST /v1/predictions`` call for a
request. ``ResultPoller`` reads ``GET /v1/predictions/{id}`` either in a
bounded loop (non-streaming completion) or exactly once (final usage after a
stream ends); both modes share :meth:`ResultPoller.await_completion` so
terminal statuses are interpreted identically.

Status fetches are idempotent and go through the shared ``retry()``
decorator for transport-level hiccups. Job creation is never retried.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Any, Dict, Optional

import httpx

from ..base.errors import (
    ErrorCode,
    PollingTimeoutError,
    PredictionFailedError,
    ProviderError,
    SubmissionError,
    classify_exception,
    code_for_status,
    RETRYABLE_CODES,
)
from ..base.http import get_httpx_client
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import PredictionJob, PredictionStatus, ProviderJobInput
from ..base.resilience.retry import DEFAULT_RETRY_CONFIG, RetryConfig, logging_attempt_logger, retry
from ..config.defaults import (
    POLL_INTERVAL_SECONDS,
    POLL_MAX_ATTEMPTS,
    REPLICATE_PREDICTIONS_PATH,
)

PROVIDER = "replicate"
_SUBMIT_OK = (200, 201, 202)


def auth_headers(api_key: Optional[str]) -> Dict[str, str]:
    """Build the backend authorization header (empty without a key)."""
    return {"Authorization": f"Token {api_key}"} if api_key else {}


def error_message(status_code: int, body: str) -> str:
    return f"API request error, status: {status_code}, message: {body}"


class JobSubmitter:
    """Creates predictions.

    Parameters:
        api_key: Backend token sent as ``Authorization: Token <key>``.
        base_url: Backend root (``https://api.replicate.com``).
        version: Optional model version hash added to the request body.
        client: Injected ``httpx.Client``; defaults to the shared pool.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str],
        base_url: str,
        version: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        logger=None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._version = version
        self._client = client
        self._logger = logger or get_logger("relay.replicate")

    def _http(self) -> httpx.Client:
        return self._client or get_httpx_client(self._base_url, purpose="replicate.jobs")

    def build_body(self, job_input: ProviderJobInput, *, stream: bool) -> Dict[str, Any]:
        body: Dict[str, Any] = {"stream": stream, "input": job_input.to_dict()}
        if self._version:
            body["version"] = self._version
        return body

    def submit(
        self,
        job_input: ProviderJobInput,
        *,
        stream: bool = False,
        model: Optional[str] = None,
        ctx: Optional[LogContext] = None,
    ) -> PredictionJob:
        """Create a prediction and return its initial snapshot.

        Raises:
            SubmissionError: transport failure, non-success status, or an
                undecodable response body.
        """
        headers = {"Content-Type": "application/json", **auth_headers(self._api_key)}
        try:
            resp = self._http().post(
                REPLICATE_PREDICTIONS_PATH,
                json=self.build_body(job_input, stream=stream),
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise SubmissionError(str(e), model=model, raw=e) from e

        if resp.status_code not in _SUBMIT_OK:
            raise SubmissionError(
                error_message(resp.status_code, resp.text),
                status_code=resp.status_code,
                body=resp.text,
                model=model,
            )
        try:
            job = PredictionJob.from_payload(resp.json())
        except ValueError as e:
            raise SubmissionError(f"decode_error: {e}", body=resp.text, model=model, raw=e) from e
        if not job.id:
            raise SubmissionError("prediction response carries no id", body=resp.text, model=model)

        normalized_log_event(
            self._logger,
            "job.submitted",
            ctx,
            phase="submit",
            emitted=None,
            tokens=None,
            job_id=job.id,
            status=job.status.value,
            stream=stream,
            has_stream_url=job.stream_url is not None,
        )
        return job


class ResultPoller:
    """Reads prediction status until it is terminal.

    Parameters:
        api_key: Backend token.
        base_url: Backend root.
        interval: Seconds slept between non-terminal fetches.
        max_attempts: Default attempt ceiling for :meth:`await_completion`.
        retry_config: Policy for transport failures of a single fetch.
        client: Injected ``httpx.Client``; defaults to the shared pool.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str],
        base_url: str,
        interval: float = POLL_INTERVAL_SECONDS,
        max_attempts: int = POLL_MAX_ATTEMPTS,
        retry_config: RetryConfig = DEFAULT_RETRY_CONFIG,
        client: Optional[httpx.Client] = None,
        logger=None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._interval = interval
        self._max_attempts = max(1, int(max_attempts))
        self._client = client
        self._logger = logger or get_logger("relay.replicate")
        if retry_config.attempt_logger is None:
            retry_config = replace(retry_config, attempt_logger=logging_attempt_logger(self._logger))
        self._retry_config = retry_config

    def _http(self) -> httpx.Client:
        return self._client or get_httpx_client(self._base_url, purpose="replicate.jobs")

    def _get(self, job_id: str) -> httpx.Response:
        try:
            return self._http().get(
                f"{REPLICATE_PREDICTIONS_PATH}/{job_id}",
                headers=auth_headers(self._api_key),
            )
        except httpx.HTTPError as e:
            code = classify_exception(e)
            raise ProviderError(
                code=code,
                message=str(e),
                provider=PROVIDER,
                retryable=code in RETRYABLE_CODES,
                raw=e,
            ) from e

    def fetch(self, job_id: str) -> PredictionJob:
        """Fetch the current snapshot once (transport failures retried).

        Raises:
            ProviderError: non-200 answer (classified from its status) or a
                transport failure that outlived the retry policy.
        """
        resp = retry(self._retry_config)(self._get)(job_id)
        if resp.status_code != 200:
            code = code_for_status(resp.status_code, ErrorCode.SERVER_ERROR)
            raise ProviderError(
                code=code,
                message=error_message(resp.status_code, resp.text),
                provider=PROVIDER,
                status_code=resp.status_code,
                body=resp.text,
            )
        try:
            return PredictionJob.from_payload(resp.json())
        except ValueError as e:
            raise ProviderError(
                code=ErrorCode.SERVER_ERROR,
                message=f"decode_error: {e}",
                provider=PROVIDER,
                body=resp.text,
                raw=e,
            ) from e

    def await_completion(
        self,
        job_id: str,
        max_attempts: Optional[int] = None,
        *,
        ctx: Optional[LogContext] = None,
    ) -> PredictionJob:
        """Fetch until the job is terminal or the attempt ceiling is reached.

        Each attempt is one fetch; the interval is slept only between
        attempts, so a ceiling of 1 is a plain single fetch.

        Returns:
            The succeeded snapshot.

        Raises:
            PredictionFailedError: the job ended ``failed`` or ``canceled``.
            PollingTimeoutError: ``max_attempts`` fetches without a terminal status.
        """
        attempts = self._max_attempts if max_attempts is None else max(1, int(max_attempts))
        for attempt in range(1, attempts + 1):
            job = self.fetch(job_id)
            normalized_log_event(
                self._logger,
                "job.poll",
                ctx,
                phase="poll",
                attempt=attempt,
                emitted=None,
                tokens=None,
                level=logging.DEBUG,
                job_id=job_id,
                status=job.status.value,
            )
            if job.status is PredictionStatus.SUCCEEDED:
                return job
            if job.is_terminal:
                raise PredictionFailedError(
                    job.id or job_id,
                    job.error,
                    status=job.status.value,
                    model=ctx.model if ctx else None,
                )
            if attempt < attempts and self._interval > 0:
                time.sleep(self._interval)

        normalized_log_event(
            self._logger,
            "job.poll_timeout",
            ctx,
            phase="poll",
            attempt=attempts,
            error_code=ErrorCode.POLLING_TIMEOUT.value,
            emitted=None,
            tokens=None,
            job_id=job_id,
        )
        raise PollingTimeoutError(job_id, attempts, model=ctx.model if ctx else None)

    def fetch_once(self, job_id: str, *, ctx: Optional[LogContext] = None) -> PredictionJob:
        """Single-shot terminal read used for final usage after a stream ends."""
        return self.await_completion(job_id, max_attempts=1, ctx=ctx)


__all__ = ["JobSubmitter", "ResultPoller", "auth_headers", "error_message"]
