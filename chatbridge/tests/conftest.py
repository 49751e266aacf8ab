"""Pytest configuration for the chatbridge test suite.

Provides hermetic settings (built from explicit mappings, never from the
process environment or a ``.env`` file) and small builders for upstream
OpenRouter responses served through ``httpx.MockTransport``.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Iterable, List

import httpx
import pytest

from chatbridge.config import ChatSettings, load_settings

DEFAULT_TEST_ENV: Dict[str, str] = {
    "OPENROUTER_API_KEY": "sk-or-default",
    "OPENAI_API_KEY": "sk-openai-default",
    "ANTHROPIC_API_KEY": "sk-ant-default",
    "GOOGLE_GENERATIVE_AI_API_KEY": "g-default",
    "NEXT_PUBLIC_SITE_URL": "https://chat.test",
}


@pytest.fixture()
def settings() -> ChatSettings:
    """Settings with a default credential for every provider."""
    return load_settings(environ=dict(DEFAULT_TEST_ENV))


@pytest.fixture()
def settings_without_keys() -> ChatSettings:
    """Settings with no default credentials at all."""
    return load_settings(environ={})


@pytest.fixture()
def sse_bytes() -> Callable[..., bytes]:
    """Return a builder turning payloads into an SSE body.

    Dict payloads are JSON encoded; strings are emitted verbatim after
    ``data: ``.
    """

    def _build(*payloads: Any) -> bytes:
        frames: List[str] = []
        for p in payloads:
            body = p if isinstance(p, str) else json.dumps(p)
            frames.append(f"data: {body}\n\n")
        return "".join(frames).encode("utf-8")

    return _build


def delta(text: str) -> Dict[str, Any]:
    return {"choices": [{"delta": {"content": text}}]}


@pytest.fixture()
def scenario_a_body(sse_bytes) -> bytes:
    """Role frame, two text deltas, finish frame, sentinel."""
    return sse_bytes(
        {"choices": [{"delta": {"role": "assistant"}}]},
        delta("Hi"),
        delta(" there"),
        {"choices": [{"delta": {}, "finish_reason": "stop"}]},
        "[DONE]",
    )


class RecordingTransport:
    """Callable handler for ``httpx.MockTransport`` that records requests."""

    def __init__(self, status: int = 200, chunks: Iterable[bytes] = (), json_body: Any = None) -> None:
        self.status = status
        self.chunks = list(chunks)
        self.json_body = json_body
        self.requests: List[httpx.Request] = []

    async def _stream(self):
        for c in self.chunks:
            yield c

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.json_body is not None:
            return httpx.Response(self.status, json=self.json_body)
        return httpx.Response(
            self.status,
            headers={"content-type": "text/event-stream"},
            content=self._stream(),
        )

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture()
def recording_transport() -> Callable[..., RecordingTransport]:
    return RecordingTransport
