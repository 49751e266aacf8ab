from __future__ import annotations

import math

import pytest

from chatbridge.base.models import (
    ChatMessage,
    ProviderRequest,
    clamp_max_tokens,
    clamp_temperature,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (0.3, 0.3),
        (-1, 0.0),
        (5, 1.0),
        ("0.25", 0.25),
        (None, 0.7),
        ("hot", 0.7),
        (True, 0.7),
        (math.nan, 0.7),
        (math.inf, 1.0),
    ],
)
def test_clamp_temperature(value, expected):
    assert clamp_temperature(value) == pytest.approx(expected)


@pytest.mark.parametrize(
    "value, expected",
    [
        (500, 500),
        (0, 1),
        (-20, 1),
        (10_000, 4096),
        (512.9, 512),
        ("64", 64),
        (None, 1000),
        ([], 1000),
        (math.inf, 4096),
    ],
)
def test_clamp_max_tokens(value, expected):
    result = clamp_max_tokens(value)
    assert result == expected
    assert isinstance(result, int)


def test_build_clamps_and_copies_messages():
    msgs = [ChatMessage(role="user", content="hi")]
    req = ProviderRequest.build("openrouter", "m", msgs, temperature=3, max_tokens=0, stream=False)
    assert req.temperature == 1.0
    assert req.max_tokens == 1
    assert req.stream is False
    assert req.web_search is False
    assert req.messages == msgs
    assert req.messages is not msgs


def test_build_defaults():
    req = ProviderRequest.build("google", "gemini-pro", [])
    assert (req.temperature, req.max_tokens, req.stream) == (0.7, 1000, True)
