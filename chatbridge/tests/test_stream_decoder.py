"""Tests for the pure SSE decoder in `chatbridge.openrouter.stream_helpers`.

The decoder must produce the same events no matter where the body is split,
stop at the ``[DONE]`` sentinel, and skip malformed frames without failing.
"""
from __future__ import annotations

import json
from typing import List, Sequence

import pytest

from chatbridge.base.streaming import StreamEnd, StreamError, StreamEvent, TextDelta
from chatbridge.openrouter.stream_helpers import (
    DecoderState,
    consume,
    decode_line,
    finish,
)


def _frame(payload) -> str:
    body = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
    return f"data: {body}\n\n"


def _delta(text: str) -> dict:
    return {"choices": [{"delta": {"content": text}}]}


def _decode(chunks: Sequence[bytes]):
    state = DecoderState()
    events: List[StreamEvent] = []
    skipped: List[str] = []
    for chunk in chunks:
        out, state, bad = consume(state, chunk)
        events.extend(out)
        skipped.extend(bad)
    out, bad = finish(state)
    events.extend(out)
    skipped.extend(bad)
    return events, skipped


def _split_every(data: bytes, size: int) -> List[bytes]:
    return [data[i : i + size] for i in range(0, len(data), size)]


BODY = (
    ": OPENROUTER PROCESSING\n\n"
    + _frame({"choices": [{"delta": {"role": "assistant"}}]})
    + _frame(_delta("Hé"))
    + _frame(_delta("llo 👋"))
    + _frame(_delta(" 世界"))
    + _frame({"choices": [{"delta": {}, "finish_reason": "stop"}]})
    + _frame("[DONE]")
).encode("utf-8")

EXPECTED = [TextDelta("Hé"), TextDelta("llo 👋"), TextDelta(" 世界"), StreamEnd()]


def test_whole_body_decodes_to_expected_events():
    events, skipped = _decode([BODY])
    assert events == EXPECTED
    assert skipped == []


@pytest.mark.parametrize("size", [1, 2, 3, 5, 7, 16, 64])
def test_decoding_is_independent_of_chunk_size(size):
    events, _ = _decode(_split_every(BODY, size))
    assert events == EXPECTED


def test_split_inside_multibyte_character_is_carried_as_pending_bytes():
    emoji_at = BODY.index("👋".encode("utf-8"))
    first, second = BODY[: emoji_at + 2], BODY[emoji_at + 2 :]
    out, state, _ = consume(DecoderState(), first)
    assert state.pending == "👋".encode("utf-8")[:2]
    assert out == [TextDelta("Hé")]
    rest, state, _ = consume(state, second)
    assert out + rest == EXPECTED
    assert state.done


def test_split_inside_frame_keeps_fragment_in_buffer():
    data = _frame(_delta("abc")).encode()
    out, state, _ = consume(DecoderState(), data[:10])
    assert out == []
    assert state.buffer == data[:10].decode()
    out, state, _ = consume(state, data[10:])
    assert out == [TextDelta("abc")]


def test_done_sentinel_stops_decoding():
    data = (_frame(_delta("a")) + _frame("[DONE]") + _frame(_delta("late"))).encode()
    out, state, _ = consume(DecoderState(), data)
    assert out == [TextDelta("a"), StreamEnd()]
    assert state.done
    more, state, _ = consume(state, _frame(_delta("later")).encode())
    assert more == []
    assert finish(state) == ([], [])


def test_eof_without_sentinel_flushes_buffer_then_ends():
    data = (_frame(_delta("a")) + "data: " + json.dumps(_delta("tail"))).encode()
    events, _ = _decode([data])
    assert events == [TextDelta("a"), TextDelta("tail"), StreamEnd()]


def test_empty_body_ends_once():
    assert _decode([]) == ([StreamEnd()], [])


def test_malformed_frames_are_skipped_and_reported():
    data = (
        _frame(_delta("a"))
        + "data: {not json\n\n"
        + _frame(_delta("b"))
        + _frame("[DONE]")
    ).encode()
    events, skipped = _decode(_split_every(data, 4))
    assert events == [TextDelta("a"), TextDelta("b"), StreamEnd()]
    assert skipped == ["data: {not json"]


def test_error_frame_is_terminal():
    data = (
        _frame(_delta("partial"))
        + _frame({"error": {"message": "Provider overloaded", "code": 503}})
        + _frame(_delta("ignored"))
    ).encode()
    events, _ = _decode([data])
    assert events == [TextDelta("partial"), StreamError("Provider overloaded", "unavailable")]


def test_crlf_lines_and_prefix_without_space():
    data = b'data:{"choices":[{"delta":{"content":"x"}}]}\r\n\r\ndata: [DONE]\r\n\r\n'
    events, _ = _decode(_split_every(data, 3))
    assert events == [TextDelta("x"), StreamEnd()]


@pytest.mark.parametrize(
    "line",
    [
        "",
        ": keep-alive",
        "event: message",
        "data:",
        "data: 123",
        'data: {"choices": []}',
        'data: {"choices": [{"delta": {"content": ""}}]}',
        'data: {"choices": [{"delta": {"content": null}}]}',
    ],
)
def test_lines_without_text_yield_nothing(line):
    assert decode_line(line) == (None, False)
