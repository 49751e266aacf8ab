"""
Static model catalog entry.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ModelCatalogEntry:
    """Describes one selectable model.

    Attributes:
        model_id: Identifier sent upstream.
        display_name: Human readable label for the UI.
        context_window: Context size in tokens, when known.
        pricing_tier: ``"Free"`` or ``"Paid"``.
        vendor: Organization that publishes the model.
        is_raw_http_backend: ``True`` when the model is served over the raw
            OpenRouter HTTP path.
    """

    model_id: str
    display_name: str
    context_window: Optional[int] = None
    pricing_tier: str = "Paid"
    vendor: Optional[str] = None
    is_raw_http_backend: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["ModelCatalogEntry"]
