"""HTTP side of a prediction stream.

``iter_event_lines`` opens ``GET {urls.stream}`` and yields raw SSE lines.
It is a generator so the response stays open only while a consumer pulls
lines; closing the generator closes the response.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, Optional

import httpx

from ..base.errors import StreamTransportError
from .jobs import auth_headers, error_message

STREAM_HEADERS = {"Accept": "text/event-stream", "Cache-Control": "no-store"}

# SSE ends lines with CRLF, CR or LF only. ``str.splitlines`` (and so
# ``Response.iter_lines``) also breaks on form feeds and U+2028, which can
# appear inside a token.
_LINE_END = re.compile(r"\r\n|\r|\n")


def split_sse_lines(texts: Iterable[str]) -> Iterator[str]:
    """Re-frame decoded text fragments into SSE lines (terminators removed).

    A CR at the end of one fragment followed by LF at the start of the next
    is a single terminator.
    """
    buffer = ""
    after_cr = False
    for text in texts:
        if not text:
            continue
        if after_cr and text.startswith("\n"):
            text = text[1:]
        pending = buffer + text
        after_cr = pending.endswith("\r")
        lines = _LINE_END.split(pending)
        buffer = lines.pop()
        yield from lines
    if buffer:
        yield buffer


def iter_event_lines(
    client: httpx.Client,
    stream_url: str,
    *,
    api_key: Optional[str] = None,
    job_id: Optional[str] = None,
    model: Optional[str] = None,
) -> Iterator[str]:
    """Yield SSE lines from ``stream_url`` (line terminators stripped).

    Raises:
        StreamTransportError: non-200 answer (with its status and body) or an
            ``httpx`` failure while connecting, reading or decoding.
    """
    headers = {**STREAM_HEADERS, **auth_headers(api_key)}
    try:
        with client.stream("GET", stream_url, headers=headers) as resp:
            if resp.status_code != 200:
                body = resp.read().decode("utf-8", errors="replace")
                raise StreamTransportError(
                    error_message(resp.status_code, body),
                    job_id=job_id,
                    status_code=resp.status_code,
                    body=body,
                    model=model,
                )
            yield from split_sse_lines(resp.iter_text())
    except httpx.HTTPError as e:
        raise StreamTransportError(str(e) or type(e).__name__, job_id=job_id, model=model, raw=e) from e


__all__ = ["iter_event_lines", "split_sse_lines", "STREAM_HEADERS"]
