"""HTTP utilities for the raw HTTP backend."""

from .client import build_async_client

__all__ = ["build_async_client"]
