from __future__ import annotations

import time

import pytest

from replicate_relay.base.models import PredictionJob, PredictionStatus, Usage
from replicate_relay.base.streaming import StreamMetrics


def test_from_payload_full_snapshot():
    job = PredictionJob.from_payload(
        {
            "id": "abc",
            "status": "succeeded",
            "output": ["a", None, "b"],
            "metrics": {"input_token_count": 4, "output_token_count": "6", "predict_time": 1.2},
            "urls": {"stream": "https://stream/abc", "get": "https://api/abc"},
        }
    )
    assert job.is_terminal
    assert job.output == ["a", "", "b"]
    assert (job.input_token_count, job.output_token_count) == (4, 6)
    assert job.stream_url == "https://stream/abc"


def test_from_payload_sparse_snapshot():
    job = PredictionJob.from_payload({"id": "abc", "status": "weird", "output": "whole text"})
    assert job.status is PredictionStatus.PROCESSING
    assert not job.is_terminal
    assert job.output == ["whole text"]
    assert not job.has_metrics
    assert job.stream_url is None


def test_failed_snapshot_keeps_error_text():
    job = PredictionJob.from_payload({"id": "x", "status": "failed", "error": "OOM"})
    assert job.is_terminal
    assert job.error == "OOM"


def test_stream_metrics_first_emit_and_tokens(monkeypatch):
    ticks = iter([0.05, 0.5])
    monkeypatch.setattr(time, "perf_counter", lambda: next(ticks))
    metrics = StreamMetrics(started_at=0.0)

    assert metrics.record_emit() is True
    assert metrics.record_emit() is False
    metrics.finish(Usage(2, 3))

    assert metrics.emitted == 2
    assert metrics.time_to_first_token_ms == pytest.approx(50.0)
    assert metrics.total_duration_ms == pytest.approx(500.0)
    assert metrics.tokens() == {"prompt": 2, "completion": 3, "total": 5}
