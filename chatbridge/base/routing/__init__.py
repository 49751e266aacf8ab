"""Backend route selection."""

from .router import SDK_PROVIDERS, Backend, Route, select_route

__all__ = ["Backend", "Route", "SDK_PROVIDERS", "select_route"]
