"""OpenRouter raw HTTP backend."""

from .client import OpenRouterClient, OpenRouterEventStream
from .stream_helpers import DecoderState, consume, decode_line, finish

__all__ = [
    "OpenRouterClient",
    "OpenRouterEventStream",
    "DecoderState",
    "consume",
    "decode_line",
    "finish",
]
