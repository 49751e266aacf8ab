"""Static model catalogs.

Purpose:
    Enumerate the models the UI offers and mark which of them are served over
    the raw OpenRouter HTTP path. The router consults ``RAW_HTTP_MODELS`` by
    exact model id; everything else is handled by the unified SDK path.

External dependencies:
    None. All data is defined at import time and exposed read-only.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..config.defaults import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    OPENROUTER_DEFAULT_MODEL,
)
from .models import ModelCatalogEntry

_RAW_HTTP_ENTRIES: Tuple[ModelCatalogEntry, ...] = (
    ModelCatalogEntry(
        model_id="mistralai/mistral-7b-instruct:free",
        display_name="Mistral 7B Instruct (Free)",
        context_window=8192,
        pricing_tier="Free",
        vendor="Mistral AI",
        is_raw_http_backend=True,
    ),
    ModelCatalogEntry(
        model_id="google/gemma-7b-it:free",
        display_name="Gemma 7B (Free)",
        context_window=8192,
        pricing_tier="Free",
        vendor="Google",
        is_raw_http_backend=True,
    ),
    ModelCatalogEntry(
        model_id="openai/gpt-3.5-turbo",
        display_name="GPT-3.5 Turbo",
        context_window=16385,
        pricing_tier="Paid",
        vendor="OpenAI",
        is_raw_http_backend=True,
    ),
    ModelCatalogEntry(
        model_id="anthropic/claude-3-haiku",
        display_name="Claude 3 Haiku",
        context_window=200000,
        pricing_tier="Paid",
        vendor="Anthropic",
        is_raw_http_backend=True,
    ),
)

# Raw-HTTP catalog keyed by exact model id.
RAW_HTTP_MODELS: Mapping[str, ModelCatalogEntry] = MappingProxyType(
    {e.model_id: e for e in _RAW_HTTP_ENTRIES}
)

# Models offered per unified SDK provider.
PROVIDER_MODELS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "openai": ("gpt-4-turbo", "gpt-3.5-turbo", "gpt-4"),
        "anthropic": (
            "claude-3-opus-20240229",
            "claude-3-sonnet-20240229",
            "claude-3-haiku-20240307",
        ),
        "google": ("gemini-pro", "gemini-1.5-pro-latest"),
    }
)

DEFAULT_CHAT_SETTINGS: Mapping[str, Any] = MappingProxyType(
    {
        "provider": "openrouter",
        "model": OPENROUTER_DEFAULT_MODEL,
        "temperature": DEFAULT_TEMPERATURE,
        "maxTokens": DEFAULT_MAX_TOKENS,
    }
)


def is_raw_http_model(model: Optional[str]) -> bool:
    """Return True when ``model`` is an exact Raw-HTTP catalog id."""
    return bool(model) and model in RAW_HTTP_MODELS


def known_providers() -> List[str]:
    return ["openrouter", *PROVIDER_MODELS.keys()]


def models_for(provider: str) -> Optional[List[Dict[str, Any]]]:
    """Return catalog rows for ``provider`` or ``None`` when unknown.

    OpenRouter rows carry the full catalog entry; SDK providers list bare ids
    because their metadata is owned by the SDK vendor.
    """
    p = (provider or "").strip().lower()
    if p == "openrouter":
        return [e.to_dict() for e in _RAW_HTTP_ENTRIES]
    ids = PROVIDER_MODELS.get(p)
    if ids is None:
        return None
    return [{"model_id": m, "display_name": m, "is_raw_http_backend": False} for m in ids]


def catalog_snapshot() -> Dict[str, Any]:
    """Return every provider's models plus the default UI settings."""
    return {
        "providers": {p: models_for(p) for p in known_providers()},
        "defaults": dict(DEFAULT_CHAT_SETTINGS),
    }


__all__ = [
    "RAW_HTTP_MODELS",
    "PROVIDER_MODELS",
    "DEFAULT_CHAT_SETTINGS",
    "is_raw_http_model",
    "known_providers",
    "models_for",
    "catalog_snapshot",
]
