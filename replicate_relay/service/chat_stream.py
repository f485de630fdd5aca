"""
Server-sent events rendering for streamed chat completions.

Purpose
-------
Turn a provider chunk iterator into the OpenAI wire format: one
``data: <chunk json>`` event per chunk, closed by ``data: [DONE]``.

Error semantics
---------------
- The first chunk is pulled before the response starts, so submission and
  stream-open failures still surface as a regular JSON error with the
  error's HTTP status (see ``service.app``).
- An exception after streaming started becomes one final
  ``data: {"error": {...}}`` event and the stream ends without ``[DONE]``.
- The provider iterator is always closed, which releases the backend
  connection when the client goes away.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, Optional

from replicate_relay.base.errors import ProviderError, classify_exception
from replicate_relay.base.logging import get_logger, log_event
from replicate_relay.base.models import ChatCompletionChunk

SSE_MEDIA_TYPE = "text/event-stream"
DONE_EVENT = b"data: [DONE]\n\n"

_logger = get_logger("relay.service")


def sse_event(payload: Dict[str, Any]) -> bytes:
    """Encode one SSE ``data:`` event."""
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n".encode("utf-8")


def as_provider_error(exc: Exception) -> ProviderError:
    """Wrap an unexpected exception in a classified ``ProviderError``."""
    if isinstance(exc, ProviderError):
        return exc
    return ProviderError(code=classify_exception(exc), message=str(exc), provider="relay", raw=exc)


def iter_sse(
    first: Optional[ChatCompletionChunk],
    rest: Iterator[ChatCompletionChunk],
) -> Iterator[bytes]:
    """Yield SSE bytes for ``first`` followed by the remaining chunks."""
    try:
        if first is not None:
            yield sse_event(first.to_dict())
            for chunk in rest:
                yield sse_event(chunk.to_dict())
    except Exception as exc:  # noqa: BLE001 - reported to the client as an error event
        err = as_provider_error(exc)
        log_event(
            _logger,
            "service.stream_error",
            level=logging.ERROR,
            error_code=err.code.value,
            error=err.message,
        )
        yield sse_event(err.to_openai_error())
        return
    finally:
        close = getattr(rest, "close", None)
        if callable(close):
            close()
    yield DONE_EVENT


__all__ = ["iter_sse", "sse_event", "as_provider_error", "SSE_MEDIA_TYPE", "DONE_EVENT"]
