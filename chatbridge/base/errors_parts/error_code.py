"""
Normalized error codes (taxonomy).

Defines the `ErrorCode` enumeration used across the clients, the stream
bridge and the HTTP surface. Values are lowercase snake_case and are
considered a stable public contract for logging.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    INPUT = "input"
    MISSING_CREDENTIAL = "missing_credential"
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    TRANSIENT = "transient"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    UNAVAILABLE = "unavailable"
    SCHEMA = "schema"
    DECODE = "decode"
    TRANSPORT = "transport"
    INTERNAL = "internal"
    UNKNOWN = "unknown"


__all__ = ["ErrorCode"]
