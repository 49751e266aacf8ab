"""Response stream bridge tests: framing, single terminal, source closing."""
from __future__ import annotations

import json
from typing import List

import pytest

from chatbridge.base.errors import ErrorCode, ProviderError
from chatbridge.base.streaming import (
    SSE_DONE_FRAME,
    StreamEnd,
    StreamError,
    TextDelta,
    collect_text,
    sse_body,
    sse_frame,
    text_body,
)


class _Source:
    """Async event source that records whether it was closed."""

    def __init__(self, events, fail_with: Exception | None = None) -> None:
        self._events = list(events)
        self._fail_with = fail_with
        self.closed = False

    def __aiter__(self):
        return self._gen()

    async def _gen(self):
        for e in self._events:
            yield e
        if self._fail_with is not None:
            raise self._fail_with

    async def aclose(self) -> None:
        self.closed = True


async def _collect(body) -> List[bytes]:
    return [chunk async for chunk in body]


def _terminal_count(frames: List[bytes]) -> int:
    n = 0
    for f in frames:
        if f == SSE_DONE_FRAME or b'"error"' in f:
            n += 1
    return n


def test_sse_frame_shape():
    assert sse_frame({"text": "é"}) == 'data: {"text": "é"}\n\n'.encode("utf-8")


@pytest.mark.asyncio
async def test_sse_body_success():
    src = _Source([TextDelta("Hi"), TextDelta(" there"), StreamEnd()])
    frames = await _collect(sse_body(src))
    assert frames == [sse_frame({"text": "Hi"}), sse_frame({"text": " there"}), SSE_DONE_FRAME]
    assert src.closed


@pytest.mark.asyncio
async def test_sse_body_exhaustion_without_terminal_is_success():
    src = _Source([TextDelta("a")])
    frames = await _collect(sse_body(src))
    assert frames[-1] == SSE_DONE_FRAME
    assert _terminal_count(frames) == 1


@pytest.mark.asyncio
async def test_sse_body_stream_error_frame_and_nothing_after():
    src = _Source([TextDelta("a"), StreamError("upstream died", "server_error"), TextDelta("b"), StreamEnd()])
    frames = await _collect(sse_body(src))
    assert frames == [sse_frame({"text": "a"}), sse_frame({"error": "upstream died"})]
    assert src.closed


@pytest.mark.asyncio
async def test_sse_body_source_exception_becomes_error_frame():
    src = _Source([TextDelta("a")], fail_with=RuntimeError("boom"))
    frames = await _collect(sse_body(src))
    assert frames[0] == sse_frame({"text": "a"})
    assert json.loads(frames[1][len(b"data: "):]) == {"error": "boom"}
    assert _terminal_count(frames) == 1
    assert src.closed


@pytest.mark.asyncio
async def test_sse_body_closes_source_on_early_exit():
    src = _Source([TextDelta("a"), TextDelta("b"), StreamEnd()])
    body = sse_body(src)
    assert await body.__anext__() == sse_frame({"text": "a"})
    await body.aclose()
    assert src.closed


@pytest.mark.asyncio
async def test_text_body_plain_chunks():
    ok = await _collect(text_body(_Source([TextDelta("Hel"), TextDelta("lo"), StreamEnd()])))
    assert b"".join(ok) == b"Hello"


@pytest.mark.asyncio
async def test_text_body_aborts_on_stream_error():
    src = _Source([TextDelta("part"), StreamError("cut", "transport"), TextDelta("never")])
    body = text_body(src)
    assert await body.__anext__() == b"part"
    with pytest.raises(ProviderError) as ei:
        await body.__anext__()
    assert ei.value.code is ErrorCode.TRANSPORT
    assert ei.value.message == "cut"
    assert src.closed


@pytest.mark.asyncio
async def test_text_body_aborts_when_source_raises():
    src = _Source([TextDelta("part")], fail_with=RuntimeError("socket reset"))
    body = text_body(src)
    assert await body.__anext__() == b"part"
    with pytest.raises(ProviderError) as ei:
        await body.__anext__()
    assert ei.value.message == "socket reset"
    assert isinstance(ei.value.__cause__, RuntimeError)
    assert src.closed


@pytest.mark.asyncio
async def test_collect_text_joins_deltas():
    assert await collect_text(_Source([TextDelta("a"), TextDelta("b"), StreamEnd()])) == "ab"


@pytest.mark.asyncio
async def test_collect_text_raises_on_stream_error():
    src = _Source([TextDelta("a"), StreamError("quota", "rate_limit")])
    with pytest.raises(ProviderError) as ei:
        await collect_text(src)
    assert ei.value.code is ErrorCode.RATE_LIMIT
    assert ei.value.message == "quota"
    assert src.closed
