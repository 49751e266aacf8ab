"""Async HTTP client factory for the raw HTTP backend.

Purpose:
    Provide one place that decides how ``httpx.AsyncClient`` instances are
    configured (timeout ceiling, optional transport) so the OpenRouter client
    does not hard-code client construction.

External dependencies:
    - ``httpx`` for the underlying asynchronous HTTP client.

Timeout strategy:
    - The request ceiling comes from ``ChatSettings.request_timeout_seconds``
      and applies to connect, read, write and pool acquisition alike.

Lifecycle & cleanup:
    - Clients are created per request and owned by the caller, which closes
      them (the OpenRouter client registers them on its ``AsyncExitStack``).
      There is no process-wide pool; each request owns its connection state.
    - An injected ``transport`` (for example ``httpx.MockTransport`` in tests)
      is passed through unchanged.
"""

from __future__ import annotations

from typing import Optional

import httpx


def build_async_client(
    timeout_seconds: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Return a new ``httpx.AsyncClient`` bounded by ``timeout_seconds``.

    Parameters:
        timeout_seconds: Ceiling applied to every phase of the request.
        transport: Optional transport override; ``None`` uses the default
            network transport.

    Returns:
        An unopened client the caller is responsible for closing.
    """
    timeout = httpx.Timeout(timeout_seconds)
    if transport is not None:
        return httpx.AsyncClient(timeout=timeout, transport=transport)
    return httpx.AsyncClient(timeout=timeout)


__all__ = ["build_async_client"]
