"""Pytest configuration for the relay test suite.

Every test starts from a clean configuration: ``REPLICATE_*`` variables are
removed, the dotenv lookup points at a missing file and the config cache is
reset. Sleeps are disabled so poll loops run instantly.
"""

from __future__ import annotations

import logging
import time
from typing import Iterator, List

import pytest

from replicate_relay.base.http import close_all_clients
from replicate_relay.base.logging import get_logger
from replicate_relay.config import clear_config_cache

_CONFIG_ENV = (
    "REPLICATE_API_KEY",
    "REPLICATE_API_TOKEN",
    "REPLICATE_MODEL",
    "REPLICATE_BASE_URL",
    "REPLICATE_VERSION",
    "REPLICATE_POLL_INTERVAL",
    "REPLICATE_POLL_MAX_ATTEMPTS",
    "RELAY_CONFIG_FILE",
)


class ListHandler(logging.Handler):
    """Capture formatted log messages into a list for assertions."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.messages: List[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())


@pytest.fixture(autouse=True)
def clean_config(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    for name in _CONFIG_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DOTENV_FILE", str(tmp_path / "missing.env"))
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture()
def sleeps(monkeypatch: pytest.MonkeyPatch) -> List[float]:
    """Replace ``time.sleep`` with a recorder."""
    calls: List[float] = []
    monkeypatch.setattr(time, "sleep", lambda seconds: calls.append(seconds))
    return calls


@pytest.fixture()
def log_messages() -> Iterator[List[str]]:
    """Collect raw JSON messages emitted on the shared ``relay`` logger."""
    logger = get_logger()
    handler = ListHandler()
    previous = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    yield handler.messages
    logger.removeHandler(handler)
    logger.setLevel(previous)


@pytest.fixture(scope="session", autouse=True)
def close_clients_after_session() -> Iterator[None]:
    yield
    close_all_clients()
