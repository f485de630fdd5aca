"""
Structured relay error exception type.

Wraps backend and transport failures with a normalized `ErrorCode` plus the
HTTP-equivalent status surfaced to the relay's own callers.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .error_code import ErrorCode

# Status used when an error carries no explicit HTTP status.
_CODE_STATUS: Dict[ErrorCode, int] = {
    ErrorCode.AUTH: 401,
    ErrorCode.RATE_LIMIT: 429,
    ErrorCode.TIMEOUT: 504,
    ErrorCode.VALIDATION: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.UNAVAILABLE: 503,
    ErrorCode.TRANSIENT: 502,
    ErrorCode.POLLING_TIMEOUT: 504,
    ErrorCode.STREAM_TRANSPORT: 502,
}


@dataclass
class ProviderError(Exception):
    """Represents a structured relay error with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for logging.
        provider: Provider key where the error originated (``"replicate"``).
        model: Optional model name associated with the failure.
        retryable: Hint for upstream retry logic (not authoritative).
        raw: Optional original exception for diagnostics.
        status_code: HTTP status reported by the backend or chosen for the
            outward error, when known.
        body: Raw backend response body for diagnostics.
    """

    code: ErrorCode
    message: str
    provider: str
    model: Optional[str] = None
    retryable: bool = False
    raw: Optional[Exception] = None
    status_code: Optional[int] = None
    body: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        """Return a compact string combining provider, model, code, and message."""
        return f"{self.provider}:{self.model or '-'} {self.code.value}: {self.message}"

    @property
    def http_status(self) -> int:
        """HTTP status to surface to the relay's caller."""
        if self.status_code is not None:
            return self.status_code
        return _CODE_STATUS.get(self.code, 500)

    def to_openai_error(self) -> Dict[str, Any]:
        """Return an OpenAI-style error body."""
        return {
            "error": {
                "message": self.message,
                "type": f"{self.provider}_error",
                "code": self.code.value,
            }
        }


__all__ = ["ProviderError"]
