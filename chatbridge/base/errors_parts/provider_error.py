"""
Structured provider error exception type.

Wraps backend-specific failures with a normalized `ErrorCode` for consistent
handling, response mapping, and structured logging.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .error_code import ErrorCode


@dataclass(eq=False)
class ProviderError(Exception):
    """Represents a structured provider error with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for logging and for
            the ``error`` field of the JSON error response.
        provider: Provider key where the error originated (e.g., ``"openrouter"``).
        model: Optional model name associated with the failure.
        retryable: Hint for upstream retry logic (not authoritative).
        status: Upstream HTTP status when one was received.
        details: Parsed upstream error payload or extra diagnostics; only
            exposed to callers in development mode.
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    provider: str
    model: Optional[str] = None
    retryable: bool = False
    status: Optional[int] = None
    details: Any = None
    raw: Optional[BaseException] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        """Return a compact string combining provider, model, code, and message."""
        return f"{self.provider}:{self.model or '-'} {self.code.value}: {self.message}"


__all__ = ["ProviderError"]
