"""Request handling behind the chat routes.

Purpose:
    Keep ``app.py`` limited to wiring (factory, middleware, routes) while the
    request pipeline lives here: body parsing, message normalization, route
    selection, credential precedence, backend dispatch and response shaping.

Failure modes:
    Every failure before the first byte of a streamed body is raised as a
    ``ProviderError`` and rendered by the app's exception handler as HTTP 500
    JSON. Failures after streaming has begun are reported in-band by the
    response bridge.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Mapping, Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from chatbridge.base.catalog import catalog_snapshot, models_for
from chatbridge.base.errors import InputError, ProviderError, wrap_exception
from chatbridge.base.logging import LogContext, get_logger, normalized_log_event
from chatbridge.base.models import ProviderRequest
from chatbridge.base.routing import Route, select_route
from chatbridge.base.streaming import sse_body, text_body
from chatbridge.base.utils.messages import normalize_messages
from chatbridge.config import ChatSettings
from chatbridge.openrouter import OpenRouterClient
from chatbridge.sdk import UnifiedSdkAdapter

OPENROUTER_KEY_HEADER = "x-openrouter-api-key"
SSE_MEDIA_TYPE = "text/event-stream"
TEXT_MEDIA_TYPE = "text/plain; charset=utf-8"

_logger = get_logger("service")


class ChatBody(BaseModel):
    """Represents the body of a chat request.

    Field names follow the browser client's camelCase keys. ``messages`` and
    the generation parameters are deliberately loose: messages are
    normalized and parameters clamped downstream instead of being rejected.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    messages: Any = None
    provider: Optional[str] = None
    api_key: Optional[str] = Field(default=None, alias="apiKey")
    model: Optional[str] = None
    web_search: bool = Field(default=False, alias="webSearch")
    temperature: Any = None
    max_tokens: Any = Field(default=None, alias="maxTokens")
    stream: bool = True


async def read_chat_body(request: Request) -> ChatBody:
    """Decode and validate the JSON request body.

    Raises:
        InputError: for undecodable JSON, a non-object body or a body that
            fails ``ChatBody`` validation.
    """
    try:
        raw = await request.json()
    except ValueError as e:
        raise InputError("request body is not valid JSON") from e
    if not isinstance(raw, dict):
        raise InputError("request body must be a JSON object")
    try:
        return ChatBody.model_validate(raw)
    except ValidationError as e:
        raise InputError(
            "invalid chat request",
            details=e.errors(include_url=False, include_context=False),
        ) from e


def _bearer_token(headers: Mapping[str, str]) -> Optional[str]:
    value = headers.get("authorization") or ""
    scheme, _, token = value.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


def resolve_api_key(route: Route, headers: Mapping[str, str], body: ChatBody) -> Optional[str]:
    """Return the per-request credential, or ``None`` to use the default.

    Precedence: ``x-openrouter-api-key`` (raw HTTP path only) >
    ``Authorization: Bearer`` > body ``apiKey``. The configured default is
    applied by the backend client when this returns ``None``.
    """
    if route.is_raw_http:
        header_key = (headers.get(OPENROUTER_KEY_HEADER) or "").strip()
        if header_key:
            return header_key
    if token := _bearer_token(headers):
        return token
    body_key = (body.api_key or "").strip()
    return body_key or None


def error_payload(exc: ProviderError, settings: ChatSettings) -> Dict[str, Any]:
    """Build the JSON error body; diagnostics only in development."""
    payload: Dict[str, Any] = {"error": exc.message}
    if settings.is_development:
        payload["details"] = {
            "code": exc.code.value,
            "provider": exc.provider,
            "model": exc.model,
            "status": exc.status,
            "upstream": exc.details,
        }
    return payload


def build_models_response(provider: Optional[str]) -> Dict[str, Any]:
    """Return the models endpoint payload, optionally for one provider."""
    if provider is None:
        return {"ok": True, **catalog_snapshot()}
    provider_norm = provider.strip().lower()
    if not provider_norm:
        raise HTTPException(status_code=400, detail="provider is required")
    rows = models_for(provider_norm)
    if rows is None:
        raise HTTPException(status_code=404, detail=f"unknown provider: {provider_norm}")
    return {"ok": True, "provider": provider_norm, "models": rows}


class ChatService:
    """Runs one chat request through normalization, routing and dispatch.

    Holds no per-request state; every call builds its own messages, route,
    credential and backend stream.
    """

    def __init__(self, settings: ChatSettings, openrouter: OpenRouterClient, sdk: UnifiedSdkAdapter) -> None:
        self._settings = settings
        self._openrouter = openrouter
        self._sdk = sdk

    @property
    def settings(self) -> ChatSettings:
        return self._settings

    def _build_request(self, body: ChatBody, route: Route) -> ProviderRequest:
        messages = normalize_messages(body.messages)
        if not messages:
            raise InputError("no messages to send", provider=route.provider, model=route.model)
        return ProviderRequest.build(
            provider=route.provider,
            model=route.model,
            messages=messages,
            temperature=body.temperature,
            max_tokens=body.max_tokens,
            web_search=route.web_search,
            stream=body.stream,
        )

    async def handle(self, body: ChatBody, headers: Mapping[str, str]) -> Any:
        """Serve one chat request and return the response object.

        Raises:
            ProviderError: for any failure before a response is returned.
        """
        route = select_route(body.model, body.provider, body.web_search)
        ctx = LogContext(
            provider=route.provider,
            model=route.model,
            backend=route.backend.value,
            request_id=uuid.uuid4().hex,
        )
        normalized_log_event(
            _logger,
            "route.selected",
            ctx,
            phase="route",
            declared_provider=body.provider,
            requested_model=body.model,
            web_search=route.web_search,
        )
        try:
            req = self._build_request(body, route)
            normalized_log_event(
                _logger,
                "chat.start",
                ctx,
                phase="start",
                attempt=0,
                emitted=0,
                messages=len(req.messages),
                stream=req.stream,
            )
            api_key = resolve_api_key(route, headers, body)
            if route.is_raw_http:
                return await self._raw_http(req, api_key, ctx)
            return await self._unified_sdk(req, route, api_key, ctx)
        except Exception as e:
            err = wrap_exception(e, provider=route.provider, model=route.model)
            normalized_log_event(
                _logger,
                "chat.error",
                ctx,
                phase="start",
                error_code=err.code.value,
                emitted=0,
                level=logging.ERROR,
                error=err.message,
                status=err.status,
            )
            if err is e:
                raise
            raise err from e

    @staticmethod
    def _json(text: str, req: ProviderRequest) -> JSONResponse:
        return JSONResponse({"text": text, "provider": req.provider, "model": req.model})

    async def _raw_http(self, req: ProviderRequest, api_key: Optional[str], ctx: LogContext) -> Any:
        result = await self._openrouter.send(
            req.messages,
            model=req.model,
            temperature=req.temperature,
            max_tokens=req.max_tokens,
            stream=req.stream,
            api_key=api_key,
        )
        if isinstance(result, str):
            normalized_log_event(_logger, "chat.end", ctx, phase="finalize", emitted=1)
            return self._json(result, req)
        return StreamingResponse(
            sse_body(result, ctx),
            media_type=SSE_MEDIA_TYPE,
            headers={"Cache-Control": "no-cache"},
        )

    async def _unified_sdk(
        self, req: ProviderRequest, route: Route, api_key: Optional[str], ctx: LogContext
    ) -> Any:
        if not req.stream:
            text = await self._sdk.complete(route, req.messages, req.temperature, req.max_tokens, api_key)
            return self._json(text, req)
        events = await self._sdk.open_stream(route, req.messages, req.temperature, req.max_tokens, api_key)
        return StreamingResponse(text_body(events, ctx), media_type=TEXT_MEDIA_TYPE)


__all__ = [
    "ChatBody",
    "ChatService",
    "read_chat_body",
    "resolve_api_key",
    "error_payload",
    "build_models_response",
]
