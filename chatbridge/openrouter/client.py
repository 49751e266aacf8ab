"""OpenRouter client over raw HTTP.

Summary:
- One ``POST <base_url>/chat/completions`` per call via ``httpx.AsyncClient``
- Non-stream mode returns the completion text
- Stream mode returns an :class:`OpenRouterEventStream` that decodes the SSE
  body incrementally with the pure helpers in ``stream_helpers``

Preconditions & Errors:
- Messages and credential are validated before any network I/O
  (``InputError`` / ``CredentialError``)
- Non-success status raises ``UpstreamHTTPError`` before iteration starts
- Missing completion text raises ``UpstreamSchemaError``
- Connection and timeout failures raise ``TransportError``; failures while
  reading the body surface as a single ``StreamError`` event

Resources:
- The response and, when the client created it, the ``httpx.AsyncClient``
  are registered on an ``AsyncExitStack`` released on completion, error,
  early exit and cancellation. There are no automatic retries on this path.
"""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Union

import httpx

from ..base.errors import (
    CredentialError,
    InputError,
    StreamDecodeError,
    TransportError,
    UpstreamHTTPError,
    UpstreamSchemaError,
    classify_exception,
)
from ..base.http import build_async_client
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import ChatMessage, clamp_max_tokens, clamp_temperature
from ..base.streaming import StreamError, StreamEvent, TextDelta, is_terminal
from ..config import ChatSettings, load_settings
from ..config.defaults import OPENROUTER_CHAT_PATH, OPENROUTER_DEFAULT_MODEL
from .stream_helpers import DecoderState, consume, finish

PROVIDER = "openrouter"


class OpenRouterEventStream:
    """Async iterator of ``StreamEvent`` decoded from an open SSE response.

    The stream owns the response and its exit stack. It is single-use:
    iterate it once, or use it as an async context manager so that an early
    exit still releases the connection. ``aclose`` is idempotent.
    """

    def __init__(
        self,
        response: httpx.Response,
        stack: AsyncExitStack,
        ctx: LogContext,
    ) -> None:
        self._response = response
        self._stack = stack
        self._ctx = ctx
        self._logger = get_logger("openrouter.stream")
        self._events: Optional[AsyncIterator[StreamEvent]] = None
        self._closed = False

    def __aiter__(self) -> "OpenRouterEventStream":
        return self

    async def __anext__(self) -> StreamEvent:
        if self._closed:
            raise StopAsyncIteration
        if self._events is None:
            self._events = self._generate()
        return await self._events.__anext__()

    async def __aenter__(self) -> "OpenRouterEventStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the response and any owned client."""
        if self._closed:
            return
        self._closed = True
        if self._events is not None:
            await self._events.aclose()
        await self._stack.aclose()

    def _log_skipped(self, lines: List[str]) -> None:
        for line in lines:
            err = StreamDecodeError(line, provider=PROVIDER, model=self._ctx.model)
            normalized_log_event(
                self._logger,
                "stream.decode_error",
                self._ctx,
                phase="decode",
                error_code=err.code.value,
                emitted=None,
                level=logging.WARNING,
                line=err.details,
            )

    def _log_terminal(self, event: StreamEvent, emitted: int) -> None:
        if isinstance(event, StreamError):
            normalized_log_event(
                self._logger,
                "stream.error",
                self._ctx,
                phase="finalize",
                error_code=event.code,
                emitted=emitted,
                level=logging.ERROR,
                error=event.message,
            )
        else:
            normalized_log_event(
                self._logger, "stream.end", self._ctx, phase="finalize", emitted=emitted
            )

    async def _generate(self) -> AsyncIterator[StreamEvent]:
        state = DecoderState()
        emitted = 0
        try:
            try:
                async for chunk in self._response.aiter_bytes():
                    events, state, skipped = consume(state, chunk)
                    self._log_skipped(skipped)
                    for event in events:
                        if isinstance(event, TextDelta):
                            emitted += 1
                        else:
                            self._log_terminal(event, emitted)
                        yield event
                    if state.done:
                        return
            except (httpx.HTTPError, httpx.StreamError) as e:
                event = StreamError(
                    f"stream read failed: {e}", classify_exception(e).value
                )
                self._log_terminal(event, emitted)
                yield event
                return
            events, skipped = finish(state)
            self._log_skipped(skipped)
            for event in events:
                if is_terminal(event):
                    self._log_terminal(event, emitted)
                yield event
        finally:
            await self._stack.aclose()


class OpenRouterClient:
    """Raw HTTP client for the OpenRouter chat completions API.

    Parameters:
        settings: Injected configuration; defaults to :func:`load_settings`.
        http_client: Optional shared ``httpx.AsyncClient``. When omitted, a
            client is created per request and closed with the request.
        transport: Optional ``httpx`` transport for per-request clients
            (tests pass ``httpx.MockTransport``).

    Side effects:
        - Performs outbound HTTP I/O only inside :meth:`send`.
        - Never logs or stores the credential.
    """

    def __init__(
        self,
        settings: Optional[ChatSettings] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings or load_settings()
        self._http_client = http_client
        self._transport = transport
        self._logger = get_logger("openrouter")

    @property
    def provider_name(self) -> str:
        return PROVIDER

    @property
    def endpoint(self) -> str:
        return self._settings.openrouter_base_url.rstrip("/") + OPENROUTER_CHAT_PATH

    def _headers(self, api_key: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self._settings.site_url,
            "X-Title": self._settings.app_title,
        }

    @staticmethod
    def build_payload(
        messages: Sequence[ChatMessage],
        model: str,
        temperature: Any,
        max_tokens: Any,
        stream: bool,
    ) -> Dict[str, Any]:
        """Return the JSON body with clamped generation parameters."""
        return {
            "model": model,
            "messages": [m.to_dict() for m in messages],
            "temperature": clamp_temperature(temperature),
            "max_tokens": clamp_max_tokens(max_tokens),
            "stream": bool(stream),
        }

    async def send(
        self,
        messages: Sequence[ChatMessage],
        model: Optional[str] = None,
        temperature: Any = None,
        max_tokens: Any = None,
        stream: bool = True,
        api_key: Optional[str] = None,
    ) -> Union[str, OpenRouterEventStream]:
        """Send one chat completion request.

        Parameters:
            messages: Normalized, non-empty message history.
            model: OpenRouter model id; defaults to the configured default.
            temperature: Clamped into ``[0, 1]``.
            max_tokens: Clamped into ``[1, 4096]``.
            stream: ``True`` for an event stream, ``False`` for full text.
            api_key: Per-request credential; falls back to the configured
                default.

        Returns:
            The completion text when ``stream`` is ``False``; otherwise an
            :class:`OpenRouterEventStream` the caller must iterate or close.

        Failure modes:
            - ``InputError`` for empty ``messages`` and ``CredentialError``
              for a missing key, both before any network call.
            - ``UpstreamHTTPError`` for a non-success status.
            - ``UpstreamSchemaError`` when non-stream text is missing.
            - ``TransportError`` when the connection cannot be opened.
        """
        model = model or OPENROUTER_DEFAULT_MODEL
        ctx = LogContext(provider=PROVIDER, model=model, backend="raw_http")
        if not messages:
            raise InputError("no messages to send", provider=PROVIDER, model=model)
        key = api_key or self._settings.default_key_for(PROVIDER)
        if not key:
            raise CredentialError(PROVIDER, model=model)

        payload = self.build_payload(messages, model, temperature, max_tokens, stream)
        stack = AsyncExitStack()
        try:
            response = await self._open(stack, payload, self._headers(key), model)
            if not stream:
                async with stack:
                    return await self._read_text(response, model)
        except BaseException:
            await stack.aclose()
            raise
        normalized_log_event(self._logger, "stream.start", ctx, phase="start", attempt=0, emitted=0)
        return OpenRouterEventStream(response, stack, ctx)

    async def _open(
        self,
        stack: AsyncExitStack,
        payload: Dict[str, Any],
        headers: Dict[str, str],
        model: str,
    ) -> httpx.Response:
        client = self._http_client
        if client is None:
            client = await stack.enter_async_context(
                build_async_client(self._settings.request_timeout_seconds, self._transport)
            )
        request = client.build_request("POST", self.endpoint, json=payload, headers=headers)
        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            code = classify_exception(e)
            raise TransportError(
                f"could not reach OpenRouter: {e}", provider=PROVIDER, model=model, code=code, raw=e
            ) from e
        stack.push_async_callback(response.aclose)
        if not response.is_success:
            await response.aread()
            raise self._http_error(response, model)
        return response

    @staticmethod
    def _http_error(response: httpx.Response, model: str) -> UpstreamHTTPError:
        try:
            data = response.json()
        except ValueError:
            data = None
        error = data.get("error") if isinstance(data, dict) else None
        message = None
        if isinstance(error, dict) and error.get("message"):
            message = str(error["message"])
        elif isinstance(error, str) and error:
            message = error
        return UpstreamHTTPError(
            response.status_code,
            message or response.reason_phrase or "Failed to fetch from OpenRouter API",
            provider=PROVIDER,
            model=model,
            details=data,
        )

    @staticmethod
    async def _read_text(response: httpx.Response, model: str) -> str:
        await response.aread()
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamSchemaError(
                "response body is not valid JSON", provider=PROVIDER, model=model
            ) from e
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None
        if not content:
            raise UpstreamSchemaError(
                "Unexpected response format from OpenRouter API",
                provider=PROVIDER,
                model=model,
                details=data,
            )
        return str(content)


__all__ = ["OpenRouterClient", "OpenRouterEventStream", "PROVIDER"]
