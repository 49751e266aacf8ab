"""Provider selector deciding which backend path serves a request.

This module maps ``(model, declared provider, web_search)`` onto a
:class:`Route`. It is pure: no I/O, no logging, and it never raises. The
service layer logs the outcome as ``route.selected``.

Rules, first match wins:

1. ``web_search`` → unified SDK, provider ``google``, fixed web model.
2. Model id in the Raw-HTTP catalog → raw HTTP (OpenRouter).
3. Declared provider ``openrouter`` → raw HTTP, model unchanged (the
   OpenRouter default when empty).
4. Model prefixed ``openai/``, ``anthropic/`` or ``google/`` → unified SDK
   with that provider and the prefix stripped.
5. Declared SDK provider → unified SDK with that provider.
6. Anything else → unified SDK, provider ``google``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from ...config.defaults import (
    GOOGLE_DEFAULT_MODEL,
    OPENROUTER_DEFAULT_MODEL,
    WEB_SEARCH_MODEL,
)
from ..catalog import is_raw_http_model

SDK_PROVIDERS: Tuple[str, ...] = ("openai", "anthropic", "google")


class Backend(str, Enum):
    """Backend integration path."""

    UNIFIED_SDK = "unified_sdk"
    RAW_HTTP = "raw_http"


@dataclass(frozen=True)
class Route:
    """Outcome of route selection.

    Attributes:
        backend: Path that will serve the request.
        provider: Provider key the backend talks to.
        model: Model id as the provider expects it.
        web_search: Whether search grounding is active.
    """

    backend: Backend
    provider: str
    model: str
    web_search: bool = False

    @property
    def is_raw_http(self) -> bool:
        return self.backend is Backend.RAW_HTTP


def _split_vendor_prefix(model: str) -> Optional[Tuple[str, str]]:
    head, sep, tail = model.partition("/")
    if sep and head.lower() in SDK_PROVIDERS and tail:
        return head.lower(), tail
    return None


def select_route(model: Optional[str], provider: Optional[str] = None, web_search: bool = False) -> Route:
    """Return the :class:`Route` serving ``model`` for the declared ``provider``."""
    model_id = (model or "").strip()
    declared = (provider or "").strip().lower()

    if web_search:
        return Route(Backend.UNIFIED_SDK, "google", WEB_SEARCH_MODEL, web_search=True)
    if is_raw_http_model(model_id):
        return Route(Backend.RAW_HTTP, "openrouter", model_id)
    if declared == "openrouter":
        return Route(Backend.RAW_HTTP, "openrouter", model_id or OPENROUTER_DEFAULT_MODEL)
    if prefixed := _split_vendor_prefix(model_id):
        vendor, bare = prefixed
        return Route(Backend.UNIFIED_SDK, vendor, bare)
    if declared in SDK_PROVIDERS and model_id:
        return Route(Backend.UNIFIED_SDK, declared, model_id)
    return Route(Backend.UNIFIED_SDK, "google", model_id or GOOGLE_DEFAULT_MODEL)


__all__ = ["Backend", "Route", "SDK_PROVIDERS", "select_route"]
