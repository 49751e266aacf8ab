"""Unified error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``chatbridge.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import ProviderError
from .errors_parts.kinds import (
    CredentialError,
    InputError,
    StreamDecodeError,
    TransportError,
    UpstreamHTTPError,
    UpstreamSchemaError,
)
from .errors_parts.classification import classify_exception, status_to_code, wrap_exception

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
