"""FastAPI application for chatbridge.

Routes:
    ``POST /api/chat``    chat request; streams SSE (raw HTTP path), plain
                          text (unified SDK path) or returns JSON when
                          ``stream`` is false
    ``GET /api/models``   model catalogs and default UI settings
    ``GET /api/health``   liveness probe

Errors raised before a response starts are rendered as HTTP 500
``{"error": ..., "details"?: ...}`` by the ``ProviderError`` handler.

:func:`create_app` builds an application around an explicit
:class:`~chatbridge.config.ChatSettings`; the module-level ``app`` is built
from the environment for ``uvicorn``.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chatbridge import __version__
from chatbridge.base.errors import ProviderError
from chatbridge.config import ChatSettings, load_settings
from chatbridge.openrouter import OpenRouterClient
from chatbridge.sdk import UnifiedSdkAdapter
from chatbridge.sdk.adapter import BackendFactory

from .app_parts.app_core import (
    ChatService,
    build_models_response,
    error_payload,
    read_chat_body,
)


def create_app(
    settings: Optional[ChatSettings] = None,
    *,
    http_transport: Optional[httpx.AsyncBaseTransport] = None,
    sdk_backend_factory: Optional[BackendFactory] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Parameters:
        settings: Configuration; loaded from the environment when omitted.
        http_transport: Optional ``httpx`` transport for OpenRouter requests
            (tests pass ``httpx.MockTransport``).
        sdk_backend_factory: Optional replacement for the vendor SDK backend
            factory (tests pass fakes).
    """
    settings = settings or load_settings()
    service = ChatService(
        settings,
        OpenRouterClient(settings, transport=http_transport),
        UnifiedSdkAdapter(settings, backend_factory=sdk_backend_factory),
    )

    app = FastAPI(title="chatbridge", version=__version__)
    app.state.settings = settings
    app.state.chat_service = service

    # -----------------------------------------------------------------------
    # CORS configuration
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ProviderError)
    async def _provider_error_handler(request: Request, exc: ProviderError) -> JSONResponse:
        return JSONResponse(status_code=500, content=error_payload(exc, settings))

    # -----------------------------------------------------------------------
    # Health and catalog endpoints
    # -----------------------------------------------------------------------

    @app.get("/api/health")
    def health() -> Dict[str, Any]:
        """Check the health status of the service."""
        return {"ok": True}

    @app.get("/api/models")
    def get_models(provider: Optional[str] = None) -> Dict[str, Any]:
        """Return model catalogs, or the models of one provider."""
        return build_models_response(provider)

    # -----------------------------------------------------------------------
    # Chat endpoint
    # -----------------------------------------------------------------------

    @app.post("/api/chat", response_model=None)
    async def post_chat(request: Request) -> Any:
        """Process a chat request.

        The backend stream is opened before the response is returned so that
        credential, status and connection failures surface as JSON errors
        rather than as a truncated stream.
        """
        body = await read_chat_body(request)
        return await service.handle(body, request.headers)

    return app


app = create_app()


def get_app() -> FastAPI:
    """Return the module-level FastAPI application instance."""
    return app


__all__ = ["app", "create_app", "get_app"]
