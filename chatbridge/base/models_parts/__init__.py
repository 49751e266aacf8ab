"""Split model definitions.

Each file defines a single dataclass to keep responsibilities focused.
Use ``chatbridge.base.models`` as the stable import surface.
"""

from .chat_message import ChatMessage, Role
from .provider_request import ProviderRequest, clamp_max_tokens, clamp_temperature
from .model_catalog_entry import ModelCatalogEntry

__all__ = [
    "ChatMessage",
    "Role",
    "ProviderRequest",
    "clamp_temperature",
    "clamp_max_tokens",
    "ModelCatalogEntry",
]
