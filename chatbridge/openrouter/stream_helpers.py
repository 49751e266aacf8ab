"""SSE decoding helpers for the OpenRouter provider.

Purpose:
- Turn the raw bytes of an OpenRouter ``text/event-stream`` response into
  ``StreamEvent`` values without performing any I/O.
- Keep ``client.py`` focused on the request lifecycle.

Model:
- :class:`DecoderState` carries everything that must survive between reads:
  the incomplete trailing line (``buffer``) and the bytes of a UTF-8 sequence
  split across reads (``pending``).
- :func:`consume` folds one chunk into the state and returns the events the
  chunk completed. :func:`finish` flushes the state at end of body.
- Output is independent of how the body was chunked: the same bytes split at
  any boundary, including inside a frame or inside a multi-byte character,
  yield the same events.

Notes:
- Lines that do not start with ``data:`` (comments such as
  ``: OPENROUTER PROCESSING``, ``event:`` or ``id:`` fields) carry no text and
  are ignored.
- A ``data:`` payload that is not valid JSON is returned in ``skipped`` so
  the caller can log it; decoding continues with the next line.
"""

from __future__ import annotations

import codecs
import json
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from ..base.errors import ErrorCode, status_to_code
from ..base.streaming import StreamEnd, StreamError, StreamEvent, TextDelta, is_terminal

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"

_Utf8Decoder = codecs.getincrementaldecoder("utf-8")


@dataclass(frozen=True)
class DecoderState:
    """Rolling decoder state between body reads.

    Attributes:
        buffer: Text after the last newline seen so far.
        pending: Trailing bytes of an incomplete UTF-8 sequence.
        done: ``True`` once a terminal event was produced; later input is
            ignored.
    """

    buffer: str = ""
    pending: bytes = b""
    done: bool = False


def _stream_error_from(error: Any) -> StreamError:
    if isinstance(error, dict):
        message = error.get("message") or json.dumps(error, ensure_ascii=False, default=str)
        code = error.get("code")
        if isinstance(code, int) and not isinstance(code, bool):
            return StreamError(str(message), status_to_code(code).value)
        return StreamError(str(message), ErrorCode.SERVER_ERROR.value)
    return StreamError(str(error), ErrorCode.SERVER_ERROR.value)


def _text_from_frame(data: dict) -> Optional[str]:
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    return content if isinstance(content, str) and content else None


def decode_line(line: str) -> Tuple[Optional[StreamEvent], bool]:
    """Decode one complete SSE line.

    Returns:
        ``(event, malformed)`` where ``event`` is ``None`` for lines that
        carry nothing (blank lines, comments, role-only or finish-only
        frames) and ``malformed`` is ``True`` when a ``data:`` payload could
        not be parsed as JSON.
    """
    s = line.strip()
    if not s.startswith(DATA_PREFIX):
        return None, False
    payload = s[len(DATA_PREFIX):].strip()
    if payload == DONE_SENTINEL:
        return StreamEnd(), False
    if not payload:
        return None, False
    try:
        data = json.loads(payload)
    except ValueError:
        return None, True
    if not isinstance(data, dict):
        return None, False
    if data.get("error"):
        return _stream_error_from(data["error"]), False
    text = _text_from_frame(data)
    return (TextDelta(text), False) if text is not None else (None, False)


def _decode_lines(lines: List[str]) -> Tuple[List[StreamEvent], List[str], bool]:
    events: List[StreamEvent] = []
    skipped: List[str] = []
    for line in lines:
        event, malformed = decode_line(line)
        if malformed:
            skipped.append(line)
            continue
        if event is None:
            continue
        events.append(event)
        if is_terminal(event):
            return events, skipped, True
    return events, skipped, False


def consume(state: DecoderState, chunk: bytes) -> Tuple[List[StreamEvent], DecoderState, List[str]]:
    """Fold ``chunk`` into ``state``.

    Returns:
        ``(events, new_state, skipped_lines)``. Once a terminal event has been
        returned the new state is ``done`` and further chunks produce nothing.
    """
    if state.done:
        return [], state, []
    decoder = _Utf8Decoder(errors="replace")
    decoder.setstate((state.pending, 0))
    text = state.buffer + decoder.decode(chunk)
    pending, _ = decoder.getstate()
    *lines, rest = text.split("\n")
    events, skipped, terminal = _decode_lines(lines)
    if terminal:
        return events, DecoderState(done=True), skipped
    return events, DecoderState(buffer=rest, pending=pending), skipped


def finish(state: DecoderState) -> Tuple[List[StreamEvent], List[str]]:
    """Flush ``state`` at end of body.

    The leftover fragment is decoded as a final line. When it does not carry
    a terminal event a ``StreamEnd`` is appended, so every stream that reaches
    the end of its bytes terminates exactly once.
    """
    if state.done:
        return [], []
    decoder = _Utf8Decoder(errors="replace")
    decoder.setstate((state.pending, 0))
    rest = state.buffer + decoder.decode(b"", final=True)
    events, skipped, terminal = _decode_lines([rest])
    if not terminal:
        events.append(StreamEnd())
    return events, skipped


__all__ = [
    "DATA_PREFIX",
    "DONE_SENTINEL",
    "DecoderState",
    "decode_line",
    "consume",
    "finish",
]
