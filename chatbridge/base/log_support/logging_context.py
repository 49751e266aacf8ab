"""Structured logging context object for chatbridge.

This module defines :class:`LogContext`, a dataclass used to carry common
fields for logging events (provider, model, backend path and request id). It
offers a ``to_dict`` helper that merges the ``extra`` mapping and prunes
``None`` values for clean structured output.

Credentials never belong in a ``LogContext``.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Optional


@dataclass
class LogContext:
    """Structured context for chat logging events."""

    provider: Optional[str] = None
    model: Optional[str] = None
    backend: Optional[str] = None
    request_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        extra = data.pop("extra", {}) or {}
        data.update({k: v for k, v in extra.items() if v is not None})
        return {k: v for k, v in data.items() if v is not None}


__all__ = ["LogContext"]
