"""
Provider-neutral chat request with clamped generation parameters.

`ProviderRequest.build` is the single place where caller supplied
``temperature`` and ``max_tokens`` are coerced into their valid ranges.
Out-of-range values are clamped and missing or non-numeric values fall back
to the defaults; nothing here rejects a request.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from ...config.defaults import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    MAX_TOKENS_MAX,
    MAX_TOKENS_MIN,
    TEMPERATURE_MAX,
    TEMPERATURE_MIN,
)
from .chat_message import ChatMessage


def _coerce_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def clamp_temperature(value: Any) -> float:
    """Return ``value`` clamped into ``[0, 1]`` (default 0.7)."""
    number = _coerce_number(value)
    if number is None:
        return DEFAULT_TEMPERATURE
    return min(max(number, TEMPERATURE_MIN), TEMPERATURE_MAX)


def clamp_max_tokens(value: Any) -> int:
    """Return ``value`` clamped into ``[1, 4096]`` as an int (default 1000)."""
    number = _coerce_number(value)
    if number is None:
        return DEFAULT_MAX_TOKENS
    return int(min(max(number, MAX_TOKENS_MIN), MAX_TOKENS_MAX))


@dataclass
class ProviderRequest:
    """A chat request ready to hand to a backend.

    Attributes:
        provider: Provider key (``openrouter``, ``openai``, ``anthropic``,
            ``google``).
        model: Model identifier understood by that provider.
        messages: Ordered normalized messages.
        temperature: Sampling temperature, always within ``[0, 1]``.
        max_tokens: Output token ceiling, always within ``[1, 4096]``.
        web_search: Whether search grounding was requested.
        stream: Whether the caller wants an incremental response.
    """

    provider: str
    model: str
    messages: List[ChatMessage] = field(default_factory=list)
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    web_search: bool = False
    stream: bool = True

    @classmethod
    def build(
        cls,
        provider: str,
        model: str,
        messages: Sequence[ChatMessage],
        temperature: Any = None,
        max_tokens: Any = None,
        web_search: bool = False,
        stream: bool = True,
    ) -> "ProviderRequest":
        """Construct a request with clamped generation parameters."""
        return cls(
            provider=provider,
            model=model,
            messages=list(messages),
            temperature=clamp_temperature(temperature),
            max_tokens=clamp_max_tokens(max_tokens),
            web_search=bool(web_search),
            stream=bool(stream),
        )


__all__ = ["ProviderRequest", "clamp_temperature", "clamp_max_tokens"]
