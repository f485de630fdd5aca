"""
OpenAI-compatible HTTP surface for the Replicate relay.

Routes
------
- ``POST /v1/chat/completions``: JSON ``chat.completion`` or, with
  ``"stream": true``, an SSE stream of ``chat.completion.chunk`` events.
- ``GET /api/health``: liveness probe.

Errors
------
``ProviderError`` (and its subclasses) render as ``{"error": {...}}`` with
the error's HTTP status. Body validation failures render as 400.

The provider is created per request through a replaceable factory
(:func:`set_provider_factory`), which tests use to inject fakes.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict

from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError

from replicate_relay.base.dto import ChatCompletionRequestDTO
from replicate_relay.base.errors import ErrorCode, ProviderError
from replicate_relay.base.logging import get_logger, log_event
from replicate_relay.config.defaults import RELAY_SERVICE_CORS_DEFAULT_ORIGINS
from replicate_relay.replicate import ReplicateProvider

from .chat_request_build import build_chat_request
from .chat_stream import SSE_MEDIA_TYPE, iter_sse

ProviderFactory = Callable[[], Any]

_logger = get_logger("relay.service")
_provider_factory: ProviderFactory = ReplicateProvider


def set_provider_factory(factory: ProviderFactory | None) -> None:
    """Replace the provider constructor (``None`` restores the default)."""
    global _provider_factory
    _provider_factory = factory or ReplicateProvider


def get_provider() -> Any:
    return _provider_factory()


app = FastAPI(title="Replicate Relay", version="0.1.0")


# ---------------------------------------------------------------------------
# CORS configuration
# ---------------------------------------------------------------------------

cors_origins_env = os.getenv("RELAY_SERVICE_CORS_ORIGINS", RELAY_SERVICE_CORS_DEFAULT_ORIGINS)
allow_origins = [o.strip() for o in cors_origins_env.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error rendering
# ---------------------------------------------------------------------------


def _validation_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "error": {
                "message": message,
                "type": "invalid_request_error",
                "code": ErrorCode.VALIDATION.value,
            }
        },
    )


@app.exception_handler(ProviderError)
async def _provider_error_handler(_: Request, exc: ProviderError) -> JSONResponse:
    log_event(
        _logger,
        "service.error",
        level=logging.ERROR,
        error_code=exc.code.value,
        status=exc.http_status,
        error=exc.message,
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_openai_error())


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return _validation_response(str(exc.errors()))


# ---------------------------------------------------------------------------
# Health and chat endpoints
# ---------------------------------------------------------------------------


@app.get("/api/health")
def health() -> Dict[str, Any]:
    """Return a simple response indicating the service is running."""
    return {"ok": True}


@app.post("/v1/chat/completions")
def post_chat_completions(body: Dict[str, Any] = Body(...)):
    """Serve an OpenAI chat-completions request.

    Behavior:
        - Validates the body into ``ChatCompletionRequestDTO`` (400 on failure).
        - Non-streaming: blocks until the prediction finishes and returns the
          ``chat.completion`` object.
        - Streaming: pulls the first chunk eagerly so failures before any
          output keep their HTTP status, then streams SSE events.
    """
    try:
        dto = ChatCompletionRequestDTO.model_validate(body)
    except ValidationError as e:
        return _validation_response(str(e.errors()))

    req = build_chat_request(dto)
    provider = get_provider()
    if not req.stream:
        return provider.chat(req).to_dict()

    chunks = provider.stream_chat(req)
    first = next(chunks, None)
    return StreamingResponse(
        iter_sse(first, chunks),
        media_type=SSE_MEDIA_TYPE,
        headers={"Cache-Control": "no-cache"},
    )


def get_app() -> FastAPI:
    """Return the module-level FastAPI application."""
    return app


__all__ = ["app", "get_app", "get_provider", "set_provider_factory"]
