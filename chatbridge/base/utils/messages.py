"""Message normalization helpers.

This module converts whatever the caller sent as a message history into
canonical :class:`~chatbridge.base.models.ChatMessage` records. Helpers here
must be side-effect free and never raise on a malformed element.

Summary
- Each element is first classified into a tagged content variant
  (``TextContent``, ``PartsContent``, ``OpaqueContent``) and then flattened.
- Roles other than ``assistant`` and ``system`` collapse to ``user``.
- Multi-part content keeps string parts and the ``text`` of mapping parts,
  joined with newlines.
- Values that are neither text nor parts are JSON-serialized so no message is
  silently lost.
- Results are trimmed; empty results are omitted.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple, Union

from ..errors import InputError
from ..models import ChatMessage, Role


@dataclass(frozen=True)
class TextContent:
    """Content that already is a plain string."""

    text: str


@dataclass(frozen=True)
class PartsContent:
    """Content given as a list of parts (strings or ``{"text": ...}`` objects)."""

    parts: Tuple[Any, ...]


@dataclass(frozen=True)
class OpaqueContent:
    """Any other value; serialized as JSON when flattened."""

    value: Any


MessageContent = Union[TextContent, PartsContent, OpaqueContent]


def _to_json(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        # circular structures
        return str(value)


def _coerce_role(value: Any) -> Role:
    if value == "assistant":
        return "assistant"
    if value == "system":
        return "system"
    return "user"


def classify_content(value: Any) -> MessageContent:
    """Classify a raw ``content`` value into its tagged variant.

    ``None`` is treated as empty text so the message is dropped downstream.
    """
    if value is None:
        return TextContent("")
    if isinstance(value, str):
        return TextContent(value)
    if isinstance(value, (list, tuple)):
        return PartsContent(tuple(value))
    return OpaqueContent(value)


def _part_text(part: Any) -> str:
    if isinstance(part, str):
        return part
    if isinstance(part, Mapping) and "text" in part:
        text = part["text"]
        return "" if text is None else str(text)
    return ""


def flatten_content(content: MessageContent) -> str:
    """Flatten a classified content value into a single string (untrimmed)."""
    if isinstance(content, TextContent):
        return content.text
    if isinstance(content, PartsContent):
        return "\n".join(t for t in (_part_text(p) for p in content.parts) if t)
    return _to_json(content.value)


def _classify_element(item: Any) -> Tuple[Role, MessageContent]:
    if isinstance(item, ChatMessage):
        return _coerce_role(item.role), TextContent(item.content)
    if isinstance(item, str):
        return "user", TextContent(item)
    if isinstance(item, Mapping):
        role = _coerce_role(item.get("role"))
        if "content" in item:
            return role, classify_content(item["content"])
        return role, OpaqueContent(dict(item))
    return "user", OpaqueContent(item)


def normalize_message(item: Any) -> Optional[ChatMessage]:
    """Normalize one caller element into a ``ChatMessage``.

    Returns ``None`` when the element resolves to empty text. Never raises.
    """
    role, content = _classify_element(item)
    text = flatten_content(content).strip()
    if not text:
        return None
    return ChatMessage(role=role, content=text)


def normalize_messages(value: Any) -> List[ChatMessage]:
    """Normalize a caller supplied message history.

    Parameters
    - value: list or tuple of heterogeneous message elements.

    Returns
    - List of canonical messages in input order; elements that resolve to
      empty text are omitted. An empty list is a valid result.

    Failure modes
    - ``InputError`` when ``value`` is not a list or tuple.
    """
    if not isinstance(value, (list, tuple)):
        raise InputError("messages must be an array", details={"type": type(value).__name__})
    out: List[ChatMessage] = []
    for item in value:
        if (msg := normalize_message(item)) is not None:
            out.append(msg)
    return out


__all__ = [
    "TextContent",
    "PartsContent",
    "OpaqueContent",
    "MessageContent",
    "classify_content",
    "flatten_content",
    "normalize_message",
    "normalize_messages",
]
