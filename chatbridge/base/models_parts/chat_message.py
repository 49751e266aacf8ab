"""
Canonical chat message record.

Defines the `ChatMessage` dataclass and the `Role` literal. Instances are
produced by the message normalizer and are the only message shape the
backends ever see.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal


# Roles accepted by every backend.
Role = Literal["user", "assistant", "system"]


@dataclass
class ChatMessage:
    """A normalized chat message.

    Attributes:
        role: The role of the message author (``"user"``, ``"assistant"`` or
            ``"system"``).
        content: Flat, trimmed, non-empty text. Structured caller content is
            resolved to a string before an instance is created.
    """

    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        """Return the wire form used by OpenAI-style chat payloads."""
        return {"role": self.role, "content": self.content}


__all__ = ["ChatMessage", "Role"]
