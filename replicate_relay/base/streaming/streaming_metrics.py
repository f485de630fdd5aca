"""Streaming metrics for a single relay stream session."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..models import Usage


@dataclass
class StreamMetrics:
    """Collected metrics for one streamed prediction.

    ``emitted`` counts text chunks only; the terminal chunk is not included.
    Durations are milliseconds measured from session start.
    """

    started_at: float = field(default_factory=time.perf_counter)
    emitted: int = 0
    time_to_first_token_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None
    usage: Optional[Usage] = None

    def _elapsed_ms(self) -> float:
        return (time.perf_counter() - self.started_at) * 1000.0

    def record_emit(self) -> bool:
        """Count one emitted chunk; return True when it was the first."""
        self.emitted += 1
        if self.time_to_first_token_ms is None:
            self.time_to_first_token_ms = self._elapsed_ms()
            return True
        return False

    def finish(self, usage: Optional[Usage] = None) -> None:
        self.total_duration_ms = self._elapsed_ms()
        if usage is not None:
            self.usage = usage

    def tokens(self) -> Optional[Dict[str, Any]]:
        if self.usage is None:
            return None
        return {
            "prompt": self.usage.prompt_tokens,
            "completion": self.usage.completion_tokens,
            "total": self.usage.total_tokens,
        }


__all__ = ["StreamMetrics"]
