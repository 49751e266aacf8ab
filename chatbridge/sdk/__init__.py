"""Unified SDK backend (OpenAI, Anthropic, Google)."""

from .adapter import SdkEventStream, UnifiedSdkAdapter, build_system_prompt
from .backends import SdkCall, create_backend

__all__ = [
    "UnifiedSdkAdapter",
    "SdkEventStream",
    "build_system_prompt",
    "SdkCall",
    "create_backend",
]
