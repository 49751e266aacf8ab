"""Route selection and static catalog tests."""
from __future__ import annotations

import pytest

from chatbridge.base.catalog import (
    DEFAULT_CHAT_SETTINGS,
    PROVIDER_MODELS,
    RAW_HTTP_MODELS,
    catalog_snapshot,
    is_raw_http_model,
    models_for,
)
from chatbridge.base.routing import Backend, Route, select_route
from chatbridge.config.defaults import (
    GOOGLE_DEFAULT_MODEL,
    OPENROUTER_DEFAULT_MODEL,
    WEB_SEARCH_MODEL,
)


def test_raw_http_catalog_contents():
    assert set(RAW_HTTP_MODELS) == {
        "mistralai/mistral-7b-instruct:free",
        "google/gemma-7b-it:free",
        "openai/gpt-3.5-turbo",
        "anthropic/claude-3-haiku",
    }
    assert all(e.is_raw_http_backend for e in RAW_HTTP_MODELS.values())
    assert RAW_HTTP_MODELS["anthropic/claude-3-haiku"].context_window == 200000
    assert [e.display_name for e in RAW_HTTP_MODELS.values()] == [
        "Mistral 7B Instruct (Free)",
        "Gemma 7B (Free)",
        "GPT-3.5 Turbo",
        "Claude 3 Haiku",
    ]
    with pytest.raises(TypeError):
        RAW_HTTP_MODELS["x"] = None  # type: ignore[index]


def test_default_chat_settings():
    assert dict(DEFAULT_CHAT_SETTINGS) == {
        "provider": "openrouter",
        "model": "mistralai/mistral-7b-instruct:free",
        "temperature": 0.7,
        "maxTokens": 1000,
    }


def test_models_for_known_and_unknown_providers():
    assert [r["model_id"] for r in models_for("OpenAI")] == list(PROVIDER_MODELS["openai"])
    assert len(models_for("openrouter")) == len(RAW_HTTP_MODELS)
    assert models_for("deepseek") is None
    snap = catalog_snapshot()
    assert set(snap["providers"]) == {"openrouter", "openai", "anthropic", "google"}
    assert snap["defaults"]["provider"] == "openrouter"


def test_is_raw_http_model_requires_exact_match():
    assert is_raw_http_model("openai/gpt-3.5-turbo")
    assert not is_raw_http_model("openai/gpt-3.5-turbo ")
    assert not is_raw_http_model("")
    assert not is_raw_http_model(None)


def test_web_search_always_routes_to_google_web_model():
    route = select_route("mistralai/mistral-7b-instruct:free", "openrouter", web_search=True)
    assert route == Route(Backend.UNIFIED_SDK, "google", WEB_SEARCH_MODEL, web_search=True)


def test_raw_catalog_model_wins_over_declared_provider():
    route = select_route("anthropic/claude-3-haiku", "anthropic")
    assert route.backend is Backend.RAW_HTTP
    assert route.provider == "openrouter"
    assert route.model == "anthropic/claude-3-haiku"
    assert route.is_raw_http


def test_declared_openrouter_keeps_model_or_uses_default():
    assert select_route("meta-llama/llama-3-8b", "openrouter").model == "meta-llama/llama-3-8b"
    assert select_route("", "openrouter") == Route(Backend.RAW_HTTP, "openrouter", OPENROUTER_DEFAULT_MODEL)


@pytest.mark.parametrize(
    "model, provider, model_out",
    [
        ("openai/gpt-4", "openai", "gpt-4"),
        ("anthropic/claude-3-opus-20240229", "anthropic", "claude-3-opus-20240229"),
        ("google/gemini-pro", "google", "gemini-pro"),
    ],
)
def test_vendor_prefix_is_stripped(model, provider, model_out):
    route = select_route(model, None)
    assert route == Route(Backend.UNIFIED_SDK, provider, model_out)


def test_bare_model_with_declared_sdk_provider():
    assert select_route("gpt-4", "OpenAI") == Route(Backend.UNIFIED_SDK, "openai", "gpt-4")
    assert select_route("claude-3-haiku-20240307", "anthropic").provider == "anthropic"


def test_fallback_is_google():
    assert select_route("some-model", None) == Route(Backend.UNIFIED_SDK, "google", "some-model")
    assert select_route(None, None) == Route(Backend.UNIFIED_SDK, "google", GOOGLE_DEFAULT_MODEL)
    assert select_route("gpt-4", "unknown").provider == "google"
