"""Retry policy for idempotent backend calls.

Only status fetches go through this decorator; job creation is never retried
because a repeated POST would start a second prediction.
"""
from __future__ import annotations

import functools
import logging
import time
from dataclasses import dataclass
from typing import Callable, Protocol, TypeVar

from ..errors import RETRYABLE_CODES, ErrorCode, ProviderError
from ..logging import LogContext, normalized_log_event

T = TypeVar("T")


class AttemptLogger(Protocol):  # pragma: no cover - structural protocol
    def __call__(
        self,
        *,
        attempt: int,
        max_attempts: int,
        delay: float | None,
        error: ProviderError | None,
    ) -> None: ...


@dataclass(frozen=True)
class RetryConfig:
    """Backoff policy for one idempotent call.

    Attributes:
        max_attempts: Total calls, the first one included.
        delay_base: The wait after failed attempt ``n`` (0-based) is
            ``delay_base ** n`` seconds.
        max_delay: Upper bound for a single wait.
        retryable_codes: Error codes worth another attempt.
        attempt_logger: Called once per attempt with its outcome.
    """

    max_attempts: int = 3
    delay_base: float = 2.0
    max_delay: float = 10.0
    retryable_codes: tuple[ErrorCode, ...] = RETRYABLE_CODES
    attempt_logger: AttemptLogger | None = None

    def delay_after(self, attempt: int, error: ProviderError) -> float | None:
        """Seconds to wait before the next attempt, or None to give up."""
        if error.code not in self.retryable_codes or attempt >= self.max_attempts - 1:
            return None
        return min(self.delay_base**attempt, self.max_delay)


DEFAULT_RETRY_CONFIG = RetryConfig()


def logging_attempt_logger(logger: logging.Logger, ctx: LogContext | None = None) -> AttemptLogger:
    """Return an attempt logger emitting ``job.fetch_retry`` for failed attempts."""

    def _log(*, attempt: int, max_attempts: int, delay: float | None, error: ProviderError | None) -> None:
        if error is None:
            return
        normalized_log_event(
            logger,
            "job.fetch_retry",
            ctx,
            phase="poll",
            attempt=attempt + 1,
            error_code=error.code.value,
            emitted=None,
            tokens=None,
            level=logging.WARNING,
            max_attempts=max_attempts,
            delay=delay,
            will_retry=delay is not None,
        )

    return _log


def retry(config: RetryConfig = DEFAULT_RETRY_CONFIG):
    """Return a decorator applying ``config`` to a callable.

    Only ``ProviderError`` is caught; anything else propagates at once. The
    last error is re-raised when the policy gives up.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        def _report(attempt: int, delay: float | None, error: ProviderError | None) -> None:
            if config.attempt_logger:
                config.attempt_logger(
                    attempt=attempt,
                    max_attempts=config.max_attempts,
                    delay=delay,
                    error=error,
                )

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            attempt = 0
            while True:
                try:
                    result = func(*args, **kwargs)
                except ProviderError as e:
                    delay = config.delay_after(attempt, e)
                    _report(attempt, delay, e)
                    if delay is None:
                        raise
                    time.sleep(delay)
                    attempt += 1
                    continue
                _report(attempt, None, None)
                return result

        return wrapper

    return decorator


__all__ = [
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "logging_attempt_logger",
    "retry",
]
