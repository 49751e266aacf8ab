"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `chatbridge.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import ProviderError
from .kinds import (
    CredentialError,
    InputError,
    StreamDecodeError,
    TransportError,
    UpstreamHTTPError,
    UpstreamSchemaError,
)
from .classification import classify_exception, status_to_code, wrap_exception

__all__ = [
    "ErrorCode",
    "ProviderError",
    "InputError",
    "CredentialError",
    "UpstreamHTTPError",
    "UpstreamSchemaError",
    "StreamDecodeError",
    "TransportError",
    "classify_exception",
    "status_to_code",
    "wrap_exception",
]
