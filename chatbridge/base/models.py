"""Public model surface.

Re-exports the dataclasses defined under ``chatbridge.base.models_parts``.
"""

from .models_parts import (
    ChatMessage,
    ModelCatalogEntry,
    ProviderRequest,
    Role,
    clamp_max_tokens,
    clamp_temperature,
)

__all__ = [
    "ChatMessage",
    "Role",
    "ProviderRequest",
    "ModelCatalogEntry",
    "clamp_temperature",
    "clamp_max_tokens",
]
