"""Unified SDK adapter.

Purpose:
    Put OpenAI, Anthropic and Google behind one call shape: a route plus
    normalized messages in, a ``StreamEvent`` sequence out. Transport is left
    entirely to the vendor SDKs (see :mod:`chatbridge.sdk.backends`).

Behavior:
    - Missing credential raises ``CredentialError`` before any SDK call.
    - The stream start is retried with the shared ``RetryConfig`` policy
      (``sdk_max_retries`` retries, transient codes only).
    - The system preamble is the base persona, the web-search clause when
      search grounding is active, and the citation clause; caller system
      messages follow it.
    - SDK failures after the stream has started become one ``StreamError``.

External dependencies:
    Vendor SDKs are touched only through the backend factory, which tests
    replace with fakes.
"""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack
from typing import Any, AsyncIterator, Callable, List, Optional, Sequence, Tuple

from ..base.errors import (
    CredentialError,
    InputError,
    ProviderError,
    wrap_exception,
)
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import ChatMessage, clamp_max_tokens, clamp_temperature
from ..base.resilience.retry import RetryConfig, retry
from ..base.routing import Route
from ..base.streaming import StreamEnd, StreamError, StreamEvent, TextDelta, collect_text
from ..config import ChatSettings, load_settings
from ..config.defaults import (
    SYSTEM_PREAMBLE_BASE,
    SYSTEM_PREAMBLE_CITATIONS,
    SYSTEM_PREAMBLE_WEB_SEARCH,
)
from .backends import SdkBackend, SdkCall, create_backend

BackendFactory = Callable[[str, str, float], SdkBackend]


def build_system_prompt(web_search: bool, caller_system: Sequence[str] = ()) -> str:
    """Return the system text for an SDK generation."""
    sections = [SYSTEM_PREAMBLE_BASE]
    if web_search:
        sections.append(SYSTEM_PREAMBLE_WEB_SEARCH)
    sections.append(SYSTEM_PREAMBLE_CITATIONS)
    sections.extend(caller_system)
    return "\n\n".join(sections)


def split_system(messages: Sequence[ChatMessage]) -> Tuple[List[str], List[ChatMessage]]:
    """Separate caller system messages from the conversation turns."""
    system = [m.content for m in messages if m.role == "system"]
    turns = [m for m in messages if m.role != "system"]
    return system, turns


class SdkEventStream:
    """Async iterator of ``StreamEvent`` over an SDK text stream.

    Yields one ``TextDelta`` per non-empty fragment, then ``StreamEnd``; a
    failure while reading yields a single ``StreamError`` instead. The exit
    stack (open stream and SDK client) is released when iteration ends or
    :meth:`aclose` is called.
    """

    def __init__(self, texts: AsyncIterator[str], stack: AsyncExitStack, ctx: LogContext) -> None:
        self._texts = texts
        self._stack = stack
        self._ctx = ctx
        self._logger = get_logger("sdk.stream")
        self._events: Optional[AsyncIterator[StreamEvent]] = None
        self._closed = False

    def __aiter__(self) -> "SdkEventStream":
        return self

    async def __anext__(self) -> StreamEvent:
        if self._closed:
            raise StopAsyncIteration
        if self._events is None:
            self._events = self._generate()
        return await self._events.__anext__()

    async def __aenter__(self) -> "SdkEventStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._events is not None:
            await self._events.aclose()
        await self._stack.aclose()

    async def _generate(self) -> AsyncIterator[StreamEvent]:
        emitted = 0
        try:
            try:
                async for text in self._texts:
                    if text:
                        emitted += 1
                        yield TextDelta(text)
            except Exception as e:
                err = wrap_exception(e, provider=self._ctx.provider or "sdk", model=self._ctx.model)
                normalized_log_event(
                    self._logger,
                    "stream.error",
                    self._ctx,
                    phase="finalize",
                    error_code=err.code.value,
                    emitted=emitted,
                    level=logging.ERROR,
                    error=err.message,
                )
                yield StreamError(err.message, err.code.value)
                return
            normalized_log_event(self._logger, "stream.end", self._ctx, phase="finalize", emitted=emitted)
            yield StreamEnd()
        finally:
            await self._stack.aclose()


class UnifiedSdkAdapter:
    """Streams generations from the directly integrated SDK providers.

    Parameters:
        settings: Injected configuration (timeout, retry count, default keys).
        backend_factory: ``(provider, api_key, timeout_seconds) -> backend``;
            defaults to :func:`chatbridge.sdk.backends.create_backend`.
    """

    def __init__(
        self,
        settings: Optional[ChatSettings] = None,
        *,
        backend_factory: Optional[BackendFactory] = None,
    ) -> None:
        self._settings = settings or load_settings()
        self._backend_factory = backend_factory or create_backend
        self._logger = get_logger("sdk")

    def _retry_config(self, ctx: LogContext) -> RetryConfig:
        retryable = RetryConfig().retryable_codes

        def _log_attempt(*, attempt: int, max_attempts: int, delay: float | None, error: ProviderError | None) -> None:
            # only attempts that will actually be retried
            if error is None or delay is None or error.code not in retryable:
                return
            normalized_log_event(
                self._logger,
                "sdk.retry",
                ctx,
                phase="start",
                attempt=attempt,
                error_code=error.code.value,
                emitted=0,
                level=logging.WARNING,
                max_attempts=max_attempts,
                delay=delay,
            )

        return RetryConfig.from_retries(self._settings.sdk_max_retries, attempt_logger=_log_attempt)

    def _prepare(
        self,
        route: Route,
        messages: Sequence[ChatMessage],
        temperature: Any,
        max_tokens: Any,
        api_key: Optional[str],
    ) -> Tuple[str, SdkCall]:
        key = api_key or self._settings.default_key_for(route.provider)
        if not key:
            raise CredentialError(route.provider, model=route.model)
        caller_system, turns = split_system(messages)
        if not turns:
            raise InputError("no user or assistant messages to send", provider=route.provider, model=route.model)
        call = SdkCall(
            model=route.model,
            system=build_system_prompt(route.web_search, caller_system),
            messages=turns,
            temperature=clamp_temperature(temperature),
            max_tokens=clamp_max_tokens(max_tokens),
            web_search=route.web_search,
        )
        return key, call

    async def open_stream(
        self,
        route: Route,
        messages: Sequence[ChatMessage],
        temperature: Any = None,
        max_tokens: Any = None,
        api_key: Optional[str] = None,
    ) -> SdkEventStream:
        """Open a streaming generation for ``route``.

        Failure modes:
            - ``CredentialError`` / ``InputError`` before any SDK call.
            - ``ProviderError`` (classified) when every start attempt fails.
        """
        ctx = LogContext(provider=route.provider, model=route.model, backend="unified_sdk")
        key, call = self._prepare(route, messages, temperature, max_tokens, api_key)
        backend = self._backend_factory(route.provider, key, self._settings.request_timeout_seconds)
        stack = AsyncExitStack()
        stack.push_async_callback(backend.aclose)

        @retry(self._retry_config(ctx))
        async def _start() -> AsyncIterator[str]:
            try:
                return await backend.start(stack, call)
            except Exception as e:
                err = wrap_exception(e, provider=route.provider, model=route.model)
                if err is e:
                    raise
                raise err from e

        try:
            texts = await _start()
        except BaseException:
            await stack.aclose()
            raise
        normalized_log_event(self._logger, "stream.start", ctx, phase="start", attempt=0, emitted=0)
        return SdkEventStream(texts, stack, ctx)

    async def complete(
        self,
        route: Route,
        messages: Sequence[ChatMessage],
        temperature: Any = None,
        max_tokens: Any = None,
        api_key: Optional[str] = None,
    ) -> str:
        """Return the full generation text (non-stream mode)."""
        events = await self.open_stream(route, messages, temperature, max_tokens, api_key)
        ctx = LogContext(provider=route.provider, model=route.model, backend="unified_sdk")
        return await collect_text(events, ctx)


__all__ = [
    "UnifiedSdkAdapter",
    "SdkEventStream",
    "build_system_prompt",
    "split_system",
]
