"""Concrete error kinds raised by the chat pipeline.

Each kind is a :class:`ProviderError` with a fixed default ``ErrorCode`` so
call sites only supply what they know. All kinds share the same wire shape
when surfaced to the caller; the distinction exists for logs and tests.
"""
from __future__ import annotations

from typing import Any, Optional

from ...config.env import get_env_var_name
from .classification import status_to_code
from .error_code import ErrorCode
from .provider_error import ProviderError


class InputError(ProviderError):
    """Malformed caller request (messages not a sequence, nothing to send)."""

    def __init__(self, message: str, *, provider: str = "chatbridge", model: Optional[str] = None, details: Any = None) -> None:
        super().__init__(code=ErrorCode.INPUT, message=message, provider=provider, model=model, details=details)


class CredentialError(ProviderError):
    """No credential available for the selected backend.

    The message names the environment variable that would supply a default.
    """

    def __init__(self, provider: str, *, model: Optional[str] = None) -> None:
        env_var = get_env_var_name(provider)
        hint = f" (set {env_var} or pass an API key)" if env_var else ""
        super().__init__(
            code=ErrorCode.MISSING_CREDENTIAL,
            message=f"API key for provider '{provider}' is not set{hint}",
            provider=provider,
            model=model,
        )


class UpstreamHTTPError(ProviderError):
    """Non-success status returned by the upstream API."""

    def __init__(
        self,
        status: int,
        message: str,
        *,
        provider: str,
        model: Optional[str] = None,
        details: Any = None,
    ) -> None:
        code = status_to_code(status)
        super().__init__(
            code=code,
            message=f"upstream returned HTTP {status}: {message}",
            provider=provider,
            model=model,
            retryable=code in (ErrorCode.TRANSIENT, ErrorCode.RATE_LIMIT, ErrorCode.TIMEOUT, ErrorCode.UNAVAILABLE),
            status=status,
            details=details,
        )


class UpstreamSchemaError(ProviderError):
    """Successful status but the response lacks the expected fields."""

    def __init__(self, message: str, *, provider: str, model: Optional[str] = None, details: Any = None) -> None:
        super().__init__(code=ErrorCode.SCHEMA, message=message, provider=provider, model=model, details=details)


class StreamDecodeError(ProviderError):
    """A single malformed stream line; recovered locally by skipping it."""

    def __init__(self, line: str, *, provider: str, model: Optional[str] = None) -> None:
        super().__init__(
            code=ErrorCode.DECODE,
            message="malformed stream frame skipped",
            provider=provider,
            model=model,
            details=line[:200],
        )


class TransportError(ProviderError):
    """Network failure while opening or reading the upstream connection."""

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        model: Optional[str] = None,
        code: ErrorCode = ErrorCode.TRANSPORT,
        raw: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            provider=provider,
            model=model,
            retryable=True,
            raw=raw,
        )


__all__ = [
    "InputError",
    "CredentialError",
    "UpstreamHTTPError",
    "UpstreamSchemaError",
    "StreamDecodeError",
    "TransportError",
]
