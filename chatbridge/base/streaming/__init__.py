"""Streaming primitives: the event union and the response bridge."""

from .events import StreamEnd, StreamError, StreamEvent, TextDelta, is_terminal
from .bridge import SSE_DONE_FRAME, collect_text, sse_body, sse_frame, text_body

__all__ = [
    "TextDelta",
    "StreamEnd",
    "StreamError",
    "StreamEvent",
    "is_terminal",
    "SSE_DONE_FRAME",
    "sse_frame",
    "sse_body",
    "text_body",
    "collect_text",
]
