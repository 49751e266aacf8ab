"""Response stream bridge.

Republishes a backend ``StreamEvent`` sequence in the form the HTTP caller
expects:

- :func:`sse_body` for the raw HTTP path (``text/event-stream``)
- :func:`text_body` for the unified SDK path (plain UTF-8 text)
- :func:`collect_text` for non-stream requests

Every body generator forwards deltas in arrival order, emits at most one
terminal signal and closes the source in ``finally`` so an early client
disconnect still releases upstream resources. Output already yielded is
never retracted or repeated.
"""

from __future__ import annotations

import contextlib
import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

from ..errors import ErrorCode, ProviderError, classify_exception
from ..logging import LogContext, get_logger, normalized_log_event
from .events import StreamEnd, StreamError, StreamEvent, TextDelta

SSE_DONE_FRAME = b"data: [DONE]\n\n"

_logger = get_logger("bridge")


def sse_frame(payload: Dict[str, Any]) -> bytes:
    """Encode one ``data:`` frame."""
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n".encode("utf-8")


def _error_message(exc: BaseException) -> str:
    if isinstance(exc, ProviderError):
        return exc.message
    return str(exc) or type(exc).__name__


def _code_of(value: str) -> ErrorCode:
    try:
        return ErrorCode(value)
    except ValueError:
        return ErrorCode.UNKNOWN


async def _close_source(events: AsyncIterator[StreamEvent]) -> None:
    aclose = getattr(events, "aclose", None)
    if aclose is None:
        return
    with contextlib.suppress(Exception):
        await aclose()


def _log_end(ctx: Optional[LogContext], emitted: int, error: Optional[StreamError] = None) -> None:
    if error is None:
        normalized_log_event(_logger, "chat.end", ctx, phase="finalize", emitted=emitted)
        return
    normalized_log_event(
        _logger,
        "chat.error",
        ctx,
        phase="finalize",
        emitted=emitted,
        error_code=error.code,
        level=logging.ERROR,
        error=error.message,
    )


def _error_event(exc: BaseException) -> StreamError:
    return StreamError(_error_message(exc), classify_exception(exc).value)


def _stream_failure(event: StreamError, ctx: Optional[LogContext]) -> ProviderError:
    return ProviderError(
        code=_code_of(event.code),
        message=event.message,
        provider=(ctx.provider if ctx else None) or "chatbridge",
        model=ctx.model if ctx else None,
    )


async def sse_body(
    events: AsyncIterator[StreamEvent], ctx: Optional[LogContext] = None
) -> AsyncIterator[bytes]:
    """Yield SSE frames for ``events``.

    Deltas become ``data: {"text": ...}``; success ends with ``data: [DONE]``
    and failure with ``data: {"error": ...}``. Source exhaustion without a
    terminal event counts as success; an exception raised by the source
    becomes the error frame.
    """
    emitted = 0
    terminal_sent = False
    try:
        async for event in events:
            if isinstance(event, TextDelta):
                emitted += 1
                yield sse_frame({"text": event.text})
            elif isinstance(event, StreamError):
                terminal_sent = True
                _log_end(ctx, emitted, event)
                yield sse_frame({"error": event.message})
                return
            elif isinstance(event, StreamEnd):
                break
        terminal_sent = True
        _log_end(ctx, emitted)
        yield SSE_DONE_FRAME
    except Exception as exc:
        if terminal_sent:
            raise
        terminal_sent = True
        error = _error_event(exc)
        _log_end(ctx, emitted, error)
        yield sse_frame({"error": error.message})
    finally:
        await _close_source(events)


async def text_body(
    events: AsyncIterator[StreamEvent], ctx: Optional[LogContext] = None
) -> AsyncIterator[bytes]:
    """Yield raw UTF-8 text for ``events``.

    The plain text stream has no error frame. A terminal error is logged and
    raised as ``ProviderError`` so the server aborts the response instead of
    completing it; the caller sees a broken transfer, never a clean finish.
    """
    emitted = 0
    failure: Optional[StreamError] = None
    try:
        async for event in events:
            if isinstance(event, TextDelta):
                emitted += 1
                yield event.text.encode("utf-8")
            elif isinstance(event, StreamError):
                failure = event
                break
            elif isinstance(event, StreamEnd):
                break
    except Exception as exc:
        error = _error_event(exc)
        _log_end(ctx, emitted, error)
        raise _stream_failure(error, ctx) from exc
    finally:
        await _close_source(events)
    _log_end(ctx, emitted, failure)
    if failure is not None:
        raise _stream_failure(failure, ctx)


async def collect_text(
    events: AsyncIterator[StreamEvent], ctx: Optional[LogContext] = None
) -> str:
    """Accumulate ``events`` into one string.

    Raises:
        ProviderError: when the stream ends with a ``StreamError``.
    """
    parts: List[str] = []
    try:
        async for event in events:
            if isinstance(event, TextDelta):
                parts.append(event.text)
            elif isinstance(event, StreamError):
                _log_end(ctx, len(parts), event)
                raise _stream_failure(event, ctx)
            elif isinstance(event, StreamEnd):
                break
    finally:
        await _close_source(events)
    _log_end(ctx, len(parts))
    return "".join(parts)


__all__ = [
    "SSE_DONE_FRAME",
    "sse_frame",
    "sse_body",
    "text_body",
    "collect_text",
]
