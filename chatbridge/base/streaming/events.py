"""Stream events shared by both backend paths.

A stream for one request is an ordered sequence of ``TextDelta`` values
followed by at most one terminal value (``StreamEnd`` or ``StreamError``).
Nothing follows a terminal value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ..errors import ErrorCode


@dataclass(frozen=True)
class TextDelta:
    """One incremental fragment of generated text."""

    text: str


@dataclass(frozen=True)
class StreamEnd:
    """Successful end of the stream."""


@dataclass(frozen=True)
class StreamError:
    """Terminal failure of the stream.

    Fields:
      message: human readable reason, forwarded to the caller as-is
      code: normalized ``ErrorCode`` value for logs
    """

    message: str
    code: str = ErrorCode.UNKNOWN.value


StreamEvent = Union[TextDelta, StreamEnd, StreamError]


def is_terminal(event: StreamEvent) -> bool:
    return isinstance(event, (StreamEnd, StreamError))


__all__ = [
    "TextDelta",
    "StreamEnd",
    "StreamError",
    "StreamEvent",
    "is_terminal",
]
