from __future__ import annotations

import json
from typing import Iterator, List

import pytest
from fastapi.testclient import TestClient

from replicate_relay.base.errors import PredictionFailedError, StreamTransportError, SubmissionError
from replicate_relay.base.models import ChatCompletion, ChatCompletionChunk, ChatRequest, Usage
from replicate_relay.replicate import ReplicateProvider
from replicate_relay.service import app as app_mod

from replicate_relay.tests.fakes import BASE_URL, DONE_EVENT, FakeReplicate, output_event


class _FakeProvider:
    """Records requests and replays scripted results."""

    def __init__(self, chunks: List[ChatCompletionChunk] | None = None, error: Exception | None = None,
                 fail_after: int | None = None) -> None:
        self.chunks = chunks or []
        self.error = error
        self.fail_after = fail_after
        self.requests: List[ChatRequest] = []

    def chat(self, request: ChatRequest) -> ChatCompletion:
        self.requests.append(request)
        if self.error:
            raise self.error
        return ChatCompletion(id="job-1", created=1, model=request.model, content="hi", usage=Usage(1, 2))

    def stream_chat(self, request: ChatRequest) -> Iterator[ChatCompletionChunk]:
        self.requests.append(request)
        for i, chunk in enumerate(self.chunks):
            if self.error is not None and self.fail_after == i:
                raise self.error
            yield chunk
        if self.error is not None and self.fail_after is None:
            raise self.error


@pytest.fixture()
def client() -> Iterator[TestClient]:
    yield TestClient(app_mod.get_app())
    app_mod.set_provider_factory(None)


def _use(provider) -> None:
    app_mod.set_provider_factory(lambda: provider)


def _body(**kw):
    body = {"model": "meta/llama", "messages": [{"role": "user", "content": "hi"}]}
    body.update(kw)
    return body


def _sse_payloads(text: str) -> List[str]:
    return [line[len("data: "):] for line in text.split("\n\n") if line.startswith("data: ")]


def _chunk(content=None, finish=None, usage=None) -> ChatCompletionChunk:
    return ChatCompletionChunk(
        id="job-1",
        created=1,
        model="meta/llama",
        content=content,
        role=None if finish else "assistant",
        finish_reason=finish,
        usage=usage,
    )


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_chat_completion_json(client):
    fake = _FakeProvider()
    _use(fake)
    resp = client.post(
        "/v1/chat/completions",
        json=_body(
            max_completion_tokens=2048,
            top_p=0.5,
            messages=[
                {"role": "system", "content": "sys"},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": "look"},
                        {"type": "image_url", "image_url": {"url": "https://img/x.png"}},
                    ],
                },
            ],
        ),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["object"] == "chat.completion"
    assert data["choices"][0]["message"] == {"role": "assistant", "content": "hi"}
    assert data["usage"]["total_tokens"] == 3

    req = fake.requests[0]
    assert req.max_completion_tokens == 2048
    assert req.top_p == 0.5
    assert req.messages[1].last_image_url() == "https://img/x.png"
    assert req.messages[1].text() == "look"


@pytest.mark.parametrize(
    "body",
    [
        {"model": "m", "messages": []},
        {"model": "m", "messages": [{"role": "tool", "content": "x"}]},
        _body(temperature=3.5),
        _body(top_p=-0.1),
        _body(max_tokens=-1),
        {"messages": [{"role": "user", "content": "x"}]},
    ],
)
def test_invalid_body_is_400(client, body):
    _use(_FakeProvider())
    resp = client.post("/v1/chat/completions", json=body)
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "validation"


def test_non_json_body_is_400(client):
    _use(_FakeProvider())
    resp = client.post("/v1/chat/completions", content=b"not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400


@pytest.mark.parametrize(
    "error,status",
    [
        (SubmissionError("API request error, status: 401, message: nope", status_code=401), 401),
        (PredictionFailedError("job-1", "boom"), 500),
        (StreamTransportError("reset"), 502),
    ],
)
def test_provider_errors_map_to_status(client, error, status):
    _use(_FakeProvider(error=error))
    resp = client.post("/v1/chat/completions", json=_body())
    assert resp.status_code == status
    payload = resp.json()["error"]
    assert payload["code"] == error.code.value
    assert payload["type"] == "replicate_error"


def test_stream_emits_sse_chunks_and_done(client):
    _use(_FakeProvider(chunks=[_chunk("Hel"), _chunk("lo"), _chunk(finish="stop", usage=Usage(3, 4))]))
    resp = client.post("/v1/chat/completions", json=_body(stream=True))

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")
    payloads = _sse_payloads(resp.text)
    assert payloads[-1] == "[DONE]"
    chunks = [json.loads(p) for p in payloads[:-1]]
    assert [c["choices"][0]["delta"].get("content") for c in chunks[:-1]] == ["Hel", "lo"]
    assert chunks[-1]["choices"][0]["finish_reason"] == "stop"
    assert chunks[-1]["usage"]["total_tokens"] == 7


def test_stream_error_before_first_chunk_keeps_status(client):
    _use(_FakeProvider(chunks=[_chunk("never")], error=SubmissionError("bad", status_code=422), fail_after=0))
    resp = client.post("/v1/chat/completions", json=_body(stream=True))
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "submission"


def test_stream_error_after_first_chunk_becomes_error_event(client):
    _use(_FakeProvider(chunks=[_chunk("partial"), _chunk("more")], error=StreamTransportError("reset"), fail_after=1))
    resp = client.post("/v1/chat/completions", json=_body(stream=True))

    assert resp.status_code == 200
    payloads = _sse_payloads(resp.text)
    assert json.loads(payloads[0])["choices"][0]["delta"]["content"] == "partial"
    assert json.loads(payloads[-1])["error"]["code"] == "stream_transport"
    assert "[DONE]" not in payloads


def test_stream_end_to_end_with_replicate_backend(client):
    fake = FakeReplicate(
        stream_lines=output_event("Hi") + output_event("", "") + output_event("there") + DONE_EVENT,
        metrics={"input_token_count": 2, "output_token_count": 3},
    )
    http = fake.client()
    app_mod.set_provider_factory(
        lambda: ReplicateProvider(api_key="k", base_url=BASE_URL, client=http, stream_client=http)
    )
    resp = client.post("/v1/chat/completions", json=_body(stream=True))

    payloads = _sse_payloads(resp.text)
    assert payloads[-1] == "[DONE]"
    chunks = [json.loads(p) for p in payloads[:-1]]
    assert "".join(c["choices"][0]["delta"].get("content", "") for c in chunks) == "Hi\nthere"
    assert chunks[-1]["usage"] == {"prompt_tokens": 2, "completion_tokens": 3, "total_tokens": 5}
    assert {c["id"] for c in chunks} == {"job-123"}
