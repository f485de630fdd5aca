"""Focused tests for replicate_relay.base.logging."""
from __future__ import annotations

import json
import logging

from replicate_relay.base.logging import (
    REQUIRED_NORMALIZED_KEYS,
    _parse_level,  # type: ignore[attr-defined]
    configure_logger,
    get_logger,
    log_event,
    normalized_log_event,
)
from replicate_relay.base.log_support import JsonFormatter, LogContext


def test_parse_level_variants():
    assert _parse_level(None) == logging.INFO
    assert _parse_level("debug") == logging.DEBUG
    assert _parse_level("WARN") == logging.WARNING
    assert _parse_level("unknown", default=logging.ERROR) == logging.ERROR


def test_component_loggers_share_the_relay_namespace():
    logger = get_logger("replicate")
    assert logger.name == "relay.replicate"
    assert get_logger("relay.service").name == "relay.service"
    assert logger.propagate


def test_normalized_event_carries_required_keys(log_messages):
    ctx = LogContext(provider="replicate", model="m", job_id="job-1")
    normalized_log_event(
        get_logger("relay.replicate"),
        "stream.end",
        ctx,
        phase="finalize",
        emitted=3,
        tokens={"prompt": 1, "completion": 2, "total": 3},
        total_duration_ms=12.5,
    )
    payload = json.loads(log_messages[-1])
    for key in REQUIRED_NORMALIZED_KEYS:
        if key != "error_code":
            assert key in payload
    assert "error_code" not in payload
    assert payload["job_id"] == "job-1"
    assert payload["tokens"]["total"] == 3
    assert payload["total_duration_ms"] == 12.5


def test_error_event_keeps_code_and_ignores_none_extras(log_messages):
    normalized_log_event(
        get_logger("relay.replicate"),
        "chat.error",
        phase="finalize",
        error_code="submission",
        emitted=False,
        attempt=2,
        error=None,
    )
    payload = json.loads(log_messages[-1])
    assert payload["error_code"] == "submission"
    assert payload["attempt"] == 2
    assert payload["emitted"] is False
    assert payload["tokens"] is None
    assert "error" not in payload


def test_log_event_drops_none_unless_kept(log_messages):
    logger = get_logger("relay.service")
    log_event(logger, "x", a=None, b=1)
    assert json.loads(log_messages[-1]) == {"event": "x", "b": 1}
    log_event(logger, "y", keep_none=True, a=None)
    assert json.loads(log_messages[-1]) == {"event": "y", "a": None}


def test_json_formatter_hoists_event_keys():
    record = logging.LogRecord("relay.x", logging.INFO, __file__, 1, json.dumps({"event": "e", "n": 1}), None, None)
    line = json.loads(JsonFormatter().format(record))
    assert line["event"] == "e"
    assert line["n"] == 1
    assert line["level"] == "INFO"
    assert "msg" not in line


def test_configure_logger_attaches_and_removes_file_handler(tmp_path):
    path = tmp_path / "logs" / "relay.log"
    logger = configure_logger(file_path=str(path))
    try:
        log_event(get_logger("relay.replicate"), "file.check")
        for h in logger.handlers:
            h.flush()
        assert "file.check" in path.read_text(encoding="utf-8")
    finally:
        configure_logger(file_path=None)
    assert not any(getattr(h, "baseFilename", None) == str(path) for h in logger.handlers)
