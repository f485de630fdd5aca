from __future__ import annotations

import httpx
import pytest

from replicate_relay.base.errors import (
    ErrorCode,
    PollingTimeoutError,
    PredictionFailedError,
    ProviderError,
    SubmissionError,
)
from replicate_relay.base.models import PredictionStatus, ProviderJobInput
from replicate_relay.base.resilience.retry import RetryConfig
from replicate_relay.replicate.jobs import JobSubmitter, ResultPoller

from replicate_relay.tests.fakes import BASE_URL, FakeReplicate

_INPUT = ProviderJobInput(prompt="user: \nhi\nassistant: \n", system_prompt="", max_tokens=1024)


def _submitter(fake: FakeReplicate, **kw) -> JobSubmitter:
    return JobSubmitter(api_key="r8_secret", base_url=BASE_URL, client=fake.client(), **kw)


def _poller(fake: FakeReplicate, **kw) -> ResultPoller:
    kw.setdefault("interval", 1.0)
    return ResultPoller(api_key="r8_secret", base_url=BASE_URL, client=fake.client(), **kw)


def test_submit_posts_input_with_token_auth():
    fake = FakeReplicate()
    job = _submitter(fake).submit(_INPUT, stream=True)

    assert job.id == "job-123"
    assert job.status is PredictionStatus.STARTING
    assert job.stream_url == fake.stream_url
    request = fake.posts[0]
    assert request.url.path == "/v1/predictions"
    assert request.headers["Authorization"] == "Token r8_secret"
    assert fake.submitted_body() == {
        "stream": True,
        "input": {
            "prompt": "user: \nhi\nassistant: \n",
            "system_prompt": "",
            "image": "",
            "max_tokens": 1024,
            "min_tokens": 0,
        },
    }


def test_submit_includes_version_when_configured():
    fake = FakeReplicate()
    _submitter(fake, version="abc123").submit(_INPUT)
    body = fake.submitted_body()
    assert body["version"] == "abc123"
    assert body["stream"] is False


@pytest.mark.parametrize("status", [200, 202])
def test_submit_accepts_success_statuses(status):
    fake = FakeReplicate(submit_status=status)
    assert _submitter(fake).submit(_INPUT).id == "job-123"


def test_submit_non_success_raises_submission_error_with_status():
    fake = FakeReplicate(submit_status=422, submit_body='{"detail":"bad input"}')
    with pytest.raises(SubmissionError) as ei:
        _submitter(fake).submit(_INPUT)
    err = ei.value
    assert err.code is ErrorCode.SUBMISSION
    assert err.http_status == 422
    assert err.body == '{"detail":"bad input"}'
    assert err.message == 'API request error, status: 422, message: {"detail":"bad input"}'
    # creation is never retried
    assert len(fake.posts) == 1


def test_submit_transport_failure_maps_to_500():
    def boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = httpx.Client(transport=httpx.MockTransport(boom), base_url=BASE_URL)
    submitter = JobSubmitter(api_key="k", base_url=BASE_URL, client=client)
    with pytest.raises(SubmissionError) as ei:
        submitter.submit(_INPUT)
    assert ei.value.http_status == 500
    assert isinstance(ei.value.raw, httpx.ConnectError)


def test_submit_undecodable_body_is_submission_error():
    fake = FakeReplicate(submit_status=201, submit_body="not json")
    with pytest.raises(SubmissionError):
        _submitter(fake).submit(_INPUT)


def test_submit_non_object_body_is_submission_error():
    fake = FakeReplicate(submit_status=201, submit_body='["x"]')
    with pytest.raises(SubmissionError) as ei:
        _submitter(fake).submit(_INPUT)
    assert "not an object" in ei.value.message
    assert ei.value.http_status == 500


def test_poll_returns_on_sixth_fetch(sleeps):
    fake = FakeReplicate(statuses=["starting"] + ["processing"] * 4 + ["succeeded"])
    job = _poller(fake).await_completion("job-123")

    assert job.status is PredictionStatus.SUCCEEDED
    assert job.output == ["Hello", " world"]
    assert len(fake.status_gets) == 6
    assert sleeps == [1.0] * 5


def test_poll_times_out_after_thirty_fetches(sleeps):
    fake = FakeReplicate(statuses=["processing"])
    with pytest.raises(PollingTimeoutError) as ei:
        _poller(fake).await_completion("job-123")

    assert len(fake.status_gets) == 30
    assert ei.value.attempts == 30
    assert ei.value.job_id == "job-123"
    assert ei.value.http_status == 504
    assert ei.value.message == "polling timeout after 30 attempts"
    assert len(sleeps) == 29


@pytest.mark.parametrize("status", ["failed", "canceled"])
def test_poll_terminal_failure_raises_prediction_failed(status, sleeps):
    fake = FakeReplicate(statuses=["processing", status], error="CUDA out of memory")
    with pytest.raises(PredictionFailedError) as ei:
        _poller(fake).await_completion("job-123")

    err = ei.value
    assert err.error_text == "CUDA out of memory"
    assert err.status == status
    assert err.http_status == 500
    assert "CUDA out of memory" in err.message
    assert len(fake.status_gets) == 2


def test_fetch_once_never_repolls(sleeps):
    fake = FakeReplicate(statuses=["processing", "succeeded"])
    with pytest.raises(PollingTimeoutError) as ei:
        _poller(fake).fetch_once("job-123")

    assert ei.value.attempts == 1
    assert len(fake.status_gets) == 1
    assert sleeps == []


def test_fetch_once_returns_succeeded_snapshot(sleeps):
    fake = FakeReplicate(metrics={"input_token_count": 5, "output_token_count": 6})
    job = _poller(fake).fetch_once("job-123")
    assert job.input_token_count == 5
    assert job.output_token_count == 6


def test_status_fetch_non_200_is_classified(sleeps):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="invalid token")

    client = httpx.Client(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    poller = ResultPoller(api_key="bad", base_url=BASE_URL, client=client)
    with pytest.raises(ProviderError) as ei:
        poller.fetch("job-123")
    assert ei.value.code is ErrorCode.AUTH
    assert ei.value.http_status == 401


@pytest.mark.parametrize("body", [b'["x"]', b'"processing"', b"null"])
def test_status_fetch_non_object_body_is_server_error(body, sleeps):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body, headers={"Content-Type": "application/json"})

    client = httpx.Client(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    poller = ResultPoller(api_key="k", base_url=BASE_URL, client=client)
    with pytest.raises(ProviderError) as ei:
        poller.fetch("job-123")
    assert ei.value.code is ErrorCode.SERVER_ERROR
    assert "not an object" in ei.value.message


def test_status_fetch_unmapped_status_is_server_error(sleeps):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(418, text="teapot")

    client = httpx.Client(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    poller = ResultPoller(api_key="k", base_url=BASE_URL, client=client)
    with pytest.raises(ProviderError) as ei:
        poller.fetch("job-123")
    assert ei.value.code is ErrorCode.SERVER_ERROR
    assert ei.value.http_status == 418


def test_status_fetch_transport_failure_is_retried_without_counting_an_attempt(sleeps):
    fake = FakeReplicate(statuses=["succeeded"])
    failures = {"left": 2}

    def handler(request: httpx.Request) -> httpx.Response:
        if failures["left"]:
            failures["left"] -= 1
            raise httpx.ConnectError("reset", request=request)
        return fake.handler(request)

    client = httpx.Client(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    poller = ResultPoller(
        api_key="k",
        base_url=BASE_URL,
        client=client,
        max_attempts=1,
        retry_config=RetryConfig(max_attempts=3, delay_base=1.0),
    )
    job = poller.await_completion("job-123")
    assert job.status is PredictionStatus.SUCCEEDED
    assert sleeps == [1.0, 1.0]


def test_zero_interval_skips_sleep(sleeps):
    fake = FakeReplicate(statuses=["processing", "processing", "succeeded"])
    _poller(fake, interval=0).await_completion("job-123")
    assert sleeps == []
    assert len(fake.status_gets) == 3
