"""Construction-level checks for the vendor SDK backends (no network)."""
from __future__ import annotations

import pytest
from google.genai import types

from chatbridge.base.models import ChatMessage
from chatbridge.sdk.backends import (
    AnthropicBackend,
    GoogleBackend,
    OpenAIBackend,
    SdkCall,
    create_backend,
)


@pytest.mark.parametrize(
    "provider, cls",
    [("openai", OpenAIBackend), ("anthropic", AnthropicBackend), ("google", GoogleBackend)],
)
def test_create_backend_dispatches_by_provider(provider, cls):
    backend = create_backend(provider, "sk-test", 30.0)
    assert isinstance(backend, cls)
    assert backend.provider == provider


def test_create_backend_unknown_provider():
    with pytest.raises(KeyError):
        create_backend("openrouter", "sk-test", 30.0)


def test_google_config_adds_search_tool_only_for_web_search():
    backend = GoogleBackend("g-test", 30.0)
    call = SdkCall(model="gemini-2.0-flash", system="sys", messages=[ChatMessage("user", "hi")], web_search=True)
    cfg = backend._config(call)
    assert cfg.system_instruction == "sys"
    assert cfg.max_output_tokens == 1000
    assert len(cfg.tools) == 1
    assert isinstance(cfg.tools[0].google_search, types.GoogleSearch)

    plain = backend._config(SdkCall(model="gemini-pro", system="sys"))
    assert not plain.tools
