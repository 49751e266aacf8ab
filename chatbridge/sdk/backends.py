"""Vendor SDK backends for the unified SDK path.

Each backend wraps one official async SDK behind the same two-step shape:

- ``start(stack, call)`` opens the streaming generation (the only phase that
  is retried) and registers the open stream on ``stack``
- the returned async iterator yields plain text fragments
- ``aclose()`` releases the underlying SDK client

External dependencies:
- ``openai`` (``AsyncOpenAI.chat.completions.create(stream=True)``)
- ``anthropic`` (``AsyncAnthropic.messages.stream`` / ``text_stream``)
- ``google-genai`` (``genai.Client.aio.models.generate_content_stream``)

SDK-level retries are disabled; the adapter applies the shared retry policy
so every vendor follows the same bounded count.
"""

from __future__ import annotations

from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, List, Protocol

import anthropic
import openai
from google import genai
from google.genai import types

from ..base.models import ChatMessage


@dataclass(frozen=True)
class SdkCall:
    """Everything a backend needs to open one generation.

    ``messages`` holds only user and assistant turns; system text has been
    folded into ``system``.
    """

    model: str
    system: str
    messages: List[ChatMessage] = field(default_factory=list)
    temperature: float = 0.7
    max_tokens: int = 1000
    web_search: bool = False


class SdkBackend(Protocol):  # pragma: no cover - structural protocol
    provider: str

    async def start(self, stack: AsyncExitStack, call: SdkCall) -> AsyncIterator[str]: ...

    async def aclose(self) -> None: ...


class OpenAIBackend:
    provider = "openai"

    def __init__(self, api_key: str, timeout_seconds: float) -> None:
        self._client = openai.AsyncOpenAI(api_key=api_key, timeout=timeout_seconds, max_retries=0)

    async def aclose(self) -> None:
        await self._client.close()

    async def start(self, stack: AsyncExitStack, call: SdkCall) -> AsyncIterator[str]:
        messages = [{"role": "system", "content": call.system}]
        messages.extend(m.to_dict() for m in call.messages)
        stream = await self._client.chat.completions.create(
            model=call.model,
            messages=messages,
            temperature=call.temperature,
            max_tokens=call.max_tokens,
            stream=True,
        )
        stack.push_async_callback(stream.close)
        return self._texts(stream)

    @staticmethod
    async def _texts(stream) -> AsyncIterator[str]:
        async for chunk in stream:
            if not chunk.choices:
                continue
            if text := chunk.choices[0].delta.content:
                yield text


class AnthropicBackend:
    provider = "anthropic"

    def __init__(self, api_key: str, timeout_seconds: float) -> None:
        self._client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout_seconds, max_retries=0)

    async def aclose(self) -> None:
        await self._client.close()

    async def start(self, stack: AsyncExitStack, call: SdkCall) -> AsyncIterator[str]:
        stream = await stack.enter_async_context(
            self._client.messages.stream(
                model=call.model,
                system=call.system,
                messages=[m.to_dict() for m in call.messages],
                temperature=call.temperature,
                max_tokens=call.max_tokens,
            )
        )
        return stream.text_stream


class GoogleBackend:
    provider = "google"

    # Gemini names the assistant role "model".
    _ROLE_MAP: Dict[str, str] = {"user": "user", "assistant": "model"}

    def __init__(self, api_key: str, timeout_seconds: float) -> None:
        self._client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout_seconds * 1000)),
        )

    async def aclose(self) -> None:
        await self._client.aio.aclose()

    def _config(self, call: SdkCall) -> types.GenerateContentConfig:
        tools = [types.Tool(google_search=types.GoogleSearch())] if call.web_search else None
        return types.GenerateContentConfig(
            system_instruction=call.system,
            temperature=call.temperature,
            max_output_tokens=call.max_tokens,
            tools=tools,
        )

    async def start(self, stack: AsyncExitStack, call: SdkCall) -> AsyncIterator[str]:
        contents = [
            types.Content(role=self._ROLE_MAP.get(m.role, "user"), parts=[types.Part(text=m.content)])
            for m in call.messages
        ]
        stream = await self._client.aio.models.generate_content_stream(
            model=call.model,
            contents=contents,
            config=self._config(call),
        )
        return self._texts(stream)

    @staticmethod
    async def _texts(stream) -> AsyncIterator[str]:
        async for chunk in stream:
            if text := chunk.text:
                yield text


_BACKENDS = {
    "openai": OpenAIBackend,
    "anthropic": AnthropicBackend,
    "google": GoogleBackend,
}


def create_backend(provider: str, api_key: str, timeout_seconds: float) -> SdkBackend:
    """Return the backend for ``provider``.

    Raises:
        KeyError: for a provider without an SDK backend. The router only
            produces known providers, so this indicates a wiring bug.
    """
    return _BACKENDS[provider](api_key, timeout_seconds)


__all__ = [
    "SdkCall",
    "SdkBackend",
    "OpenAIBackend",
    "AnthropicBackend",
    "GoogleBackend",
    "create_backend",
]
