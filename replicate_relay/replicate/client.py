"""Replicate provider adapter (OpenAI chat completions over predictions).

Summary:
- Non-stream chat: translate -> create prediction -> poll until terminal ->
  assemble one ``chat.completion``.
- Streaming chat: translate -> create prediction with ``stream=True`` ->
  read ``urls.stream`` through :class:`StreamNormalizer` -> chunks, closed by
  one terminal chunk carrying usage from a single status fetch.

Timeouts & Retries:
- Pooled ``httpx`` clients take their timeouts from ``get_timeout_config()``.
- Status fetches use ``retry()``; prediction creation is never retried.

Errors & Observability:
- Failures surface as ``ProviderError`` subclasses (``SubmissionError``,
  ``PredictionFailedError``, ``PollingTimeoutError``, ``StreamTransportError``).
- Structured ``chat.*`` and ``stream.*`` events; streaming records
  ``emitted``, ``time_to_first_token_ms``, ``total_duration_ms`` and tokens.

This module orchestrates I/O only; translation, normalization and assembly
live in their own modules.
"""

from __future__ import annotations

import logging
from contextlib import closing
from typing import Any, Dict, Iterator, Optional

import httpx

from ..base.errors import PollingTimeoutError, ProviderError, SubmissionError
from ..base.http import get_httpx_client
from ..base.logging import LogContext, get_logger, log_event, normalized_log_event
from ..base.models import ChatCompletion, ChatCompletionChunk, ChatRequest, Usage
from ..base.resilience.retry import DEFAULT_RETRY_CONFIG, RetryConfig
from ..base.streaming import StreamMetrics
from ..config import get_provider_config
from ..config.defaults import REPLICATE_DEFAULT_BASE_URL, REPLICATE_DEFAULT_MODEL
from .assembler import ChunkFactory, assemble_completion
from .jobs import PROVIDER, JobSubmitter, ResultPoller
from .stream_helpers import iter_event_lines
from .stream_normalizer import StreamNormalizer, iter_stream_chunks
from .translator import translate
from .usage import usage_from_job


class ReplicateProvider:
    """Serves OpenAI-style chat completions from Replicate predictions.

    Parameters:
        api_key: Explicit API token; otherwise resolved from provider config
            (``REPLICATE_API_KEY`` / ``REPLICATE_API_TOKEN``).
        model: Default model name echoed in responses when the request has none.
        base_url: Backend root (defaults to ``https://api.replicate.com``).
        version: Optional model version hash sent with each prediction.
        client: ``httpx.Client`` for prediction create/status calls.
        stream_client: ``httpx.Client`` for event streams.
        poll_interval: Seconds between status fetches.
        poll_max_attempts: Attempt ceiling of the non-streaming poll loop.
        retry_config: Retry policy for status fetch transport failures.

    Side effects:
        - Reads configuration via ``get_provider_config("replicate")``.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        version: Optional[str] = None,
        *,
        client: Optional[httpx.Client] = None,
        stream_client: Optional[httpx.Client] = None,
        poll_interval: Optional[float] = None,
        poll_max_attempts: Optional[int] = None,
        retry_config: RetryConfig = DEFAULT_RETRY_CONFIG,
    ) -> None:
        cfg = get_provider_config(
            PROVIDER,
            {
                "api_key": api_key,
                "model": model,
                "base_url": base_url,
                "version": version,
                "poll_interval": poll_interval,
                "poll_max_attempts": poll_max_attempts,
            },
        )
        self._api_key = cfg.get("api_key")
        self._model = cfg.get("model") or REPLICATE_DEFAULT_MODEL
        self._base_url = cfg.get("base_url") or REPLICATE_DEFAULT_BASE_URL
        self._stream_client = stream_client
        self._logger = get_logger("relay.replicate")
        self.submitter = JobSubmitter(
            api_key=self._api_key,
            base_url=self._base_url,
            version=cfg.get("version"),
            client=client,
            logger=self._logger,
        )
        self.poller = ResultPoller(
            api_key=self._api_key,
            base_url=self._base_url,
            interval=cfg["poll_interval"],
            max_attempts=cfg["poll_max_attempts"],
            retry_config=retry_config,
            client=client,
            logger=self._logger,
        )

    @property
    def provider_name(self) -> str:
        return PROVIDER

    def default_model(self) -> str:
        return self._model

    def _stream_http(self) -> httpx.Client:
        return self._stream_client or get_httpx_client(self._base_url, purpose="replicate.stream")

    def _context(self, request: ChatRequest) -> LogContext:
        return LogContext(provider=PROVIDER, model=request.model or self._model)

    def chat(self, request: ChatRequest) -> ChatCompletion:
        """Perform a non-streaming chat completion.

        Blocks for up to ``poll_max_attempts`` status fetches.

        Raises:
            SubmissionError: prediction could not be created.
            PredictionFailedError: the prediction failed or was canceled.
            PollingTimeoutError: no terminal status within the attempt ceiling.
            ProviderError: a status fetch failed after retries.
        """
        ctx = self._context(request)
        job_input = translate(request)
        log_event(
            self._logger,
            "chat.start",
            ctx,
            messages=len(request.messages),
            max_tokens=job_input.max_tokens,
            has_image=bool(job_input.image),
        )
        try:
            job = self.submitter.submit(job_input, stream=False, model=ctx.model, ctx=ctx)
            ctx.job_id = job.id
            job = self.poller.await_completion(job.id, ctx=ctx)
        except ProviderError as e:
            normalized_log_event(
                self._logger,
                "chat.error",
                ctx,
                phase="finalize",
                error_code=e.code.value,
                emitted=False,
                tokens=None,
                level=logging.ERROR,
                error=e.message,
            )
            raise

        completion = assemble_completion(job, ctx.model)
        normalized_log_event(
            self._logger,
            "chat.end",
            ctx,
            phase="finalize",
            emitted=True,
            tokens=completion.usage,
            response_chars=len(completion.content),
        )
        return completion

    def _stream_url(self, job_id: str, stream_url: Optional[str], ctx: LogContext) -> str:
        if stream_url:
            return stream_url
        job = self.poller.fetch(job_id)
        if not job.stream_url:
            raise SubmissionError("missing stream URL", model=ctx.model)
        return job.stream_url

    def _final_usage(self, job_id: str, ctx: LogContext) -> Usage:
        try:
            job = self.poller.fetch_once(job_id, ctx=ctx)
        except PollingTimeoutError:
            normalized_log_event(
                self._logger,
                "stream.usage_unavailable",
                ctx,
                phase="finalize",
                emitted=None,
                tokens=None,
                level=logging.WARNING,
            )
            return Usage()
        return usage_from_job(job)

    def stream_chat(self, request: ChatRequest) -> Iterator[ChatCompletionChunk]:
        """Stream a chat completion as OpenAI-style chunks.

        Nothing is sent until the first chunk is pulled. Text chunks arrive
        in backend order; when the backend reports ``done`` the last chunk
        is the terminal one (``finish_reason="stop"`` plus usage). A stream
        that ends without ``done`` stops without a terminal chunk.

        Raises:
            SubmissionError: prediction could not be created or exposes no
                stream URL.
            StreamTransportError: the event stream failed.
            PredictionFailedError: the final status fetch reports failure.
        """
        ctx = self._context(request)
        job = self.submitter.submit(translate(request), stream=True, model=ctx.model, ctx=ctx)
        ctx.job_id = job.id
        stream_url = self._stream_url(job.id, job.stream_url, ctx)

        normalizer = StreamNormalizer(
            ChunkFactory(job.id, ctx.model),
            lambda: self._final_usage(job.id, ctx),
        )
        metrics = StreamMetrics()
        normalized_log_event(self._logger, "stream.start", ctx, phase="start", emitted=None, tokens=None)

        lines = iter_event_lines(
            self._stream_http(),
            stream_url,
            api_key=self._api_key,
            job_id=job.id,
            model=ctx.model,
        )
        try:
            with closing(iter_stream_chunks(lines, normalizer)) as chunks:
                for chunk in chunks:
                    if not chunk.is_terminal and metrics.record_emit():
                        normalized_log_event(
                            self._logger,
                            "stream.first_token",
                            ctx,
                            phase="stream",
                            emitted=True,
                            tokens=None,
                            time_to_first_token_ms=metrics.time_to_first_token_ms,
                        )
                    yield chunk
        except ProviderError as e:
            metrics.finish()
            normalized_log_event(
                self._logger,
                "stream.error",
                ctx,
                phase="finalize",
                error_code=e.code.value,
                emitted=metrics.emitted,
                tokens=None,
                level=logging.ERROR,
                error=e.message,
            )
            raise

        if not normalizer.closed:
            normalized_log_event(
                self._logger,
                "stream.eof_without_done",
                ctx,
                phase="finalize",
                emitted=metrics.emitted,
                tokens=None,
                level=logging.WARNING,
            )
        metrics.finish(normalizer.usage)
        normalized_log_event(self._logger, "stream.end", ctx, **self._end_fields(metrics))

    @staticmethod
    def _end_fields(metrics: StreamMetrics) -> Dict[str, Any]:
        return {
            "phase": "finalize",
            "emitted": metrics.emitted,
            "tokens": metrics.tokens(),
            "time_to_first_token_ms": metrics.time_to_first_token_ms,
            "total_duration_ms": metrics.total_duration_ms,
        }


__all__ = ["ReplicateProvider"]
