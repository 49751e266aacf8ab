"""Unified configuration layer for chatbridge.

Goals
-----
* Centralize defaults (endpoint, models, site identification, timeouts).
* Merge sources in a predictable order:
    1. Built-in defaults (:mod:`chatbridge.config.defaults`)
    2. Optional ``.env`` file (path from ``DOTENV_FILE``, default ``.env``)
    3. Environment variables
    4. In-code overrides passed to :func:`load_settings`
* Produce one immutable :class:`ChatSettings` value that is injected into the
  clients and the app factory. Nothing deeper in the call path reads the
  environment.

Environment Variable Conventions
--------------------------------
``OPENROUTER_API_KEY``, ``OPENAI_API_KEY``, ``ANTHROPIC_API_KEY``,
``GOOGLE_GENERATIVE_AI_API_KEY`` (aliases in :mod:`chatbridge.config.env`),
``OPENROUTER_BASE_URL``, ``NEXT_PUBLIC_SITE_URL`` / ``SITE_URL``,
``CHATBRIDGE_APP_TITLE``, ``CHATBRIDGE_ENV``, ``CHATBRIDGE_CORS_ORIGINS``,
``CHATBRIDGE_TIMEOUT_SECONDS``, ``CHATBRIDGE_SDK_MAX_RETRIES``.

Public API
----------
* load_settings(environ: Mapping | None = None, **overrides) -> ChatSettings
* ChatSettings.default_key_for(provider) -> str | None
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from .defaults import (
    CHATBRIDGE_CORS_DEFAULT_ORIGINS,
    DEFAULT_APP_TITLE,
    DEFAULT_ENVIRONMENT,
    DEFAULT_SITE_URL,
    DEVELOPMENT_ENVIRONMENT,
    MAX_DURATION_SECONDS,
    OPENROUTER_DEFAULT_BASE_URL,
    SDK_MAX_RETRIES,
)
from .env import ENV_MAP, is_placeholder, resolve_provider_key

_DOTENV_LOADED = False


def _load_dotenv_once() -> None:
    """Lightweight .env loader.

    Parses KEY=VALUE lines, ignoring comments and blank lines. Safe to call
    multiple times. Overrides existing environment variables only if their
    current values appear to be placeholders.
    """
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    path = os.getenv("DOTENV_FILE", ".env")
    if not os.path.isfile(path):
        _DOTENV_LOADED = True
        return
    try:
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                k, v = line.split("=", 1)
                k = k.strip()
                v = v.strip().strip('"').strip("'")
                if k and (k not in os.environ or is_placeholder(os.environ.get(k))):
                    os.environ[k] = v
    finally:
        _DOTENV_LOADED = True


def _parse_float(value: Optional[str], default: float) -> float:
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _parse_int(value: Optional[str], default: int) -> int:
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


@dataclass(frozen=True)
class ChatSettings:
    """Immutable configuration injected into clients and the HTTP app.

    Attributes:
        provider_keys: Default credential per provider (``openrouter``,
            ``openai``, ``anthropic``, ``google``). Used only when the request
            carries no credential of its own.
        openrouter_base_url: Base URL for the raw HTTP backend.
        site_url: Site identification sent as ``HTTP-Referer``.
        app_title: Application title sent as ``X-Title``.
        environment: Deployment environment name; ``development`` exposes
            error details to the caller.
        request_timeout_seconds: Ceiling for a single upstream request.
        sdk_max_retries: Bounded retry count for SDK start failures.
        cors_origins: Allowed browser origins.
    """

    provider_keys: Dict[str, str] = field(default_factory=dict, repr=False)
    openrouter_base_url: str = OPENROUTER_DEFAULT_BASE_URL
    site_url: str = DEFAULT_SITE_URL
    app_title: str = DEFAULT_APP_TITLE
    environment: str = DEFAULT_ENVIRONMENT
    request_timeout_seconds: float = MAX_DURATION_SECONDS
    sdk_max_retries: int = SDK_MAX_RETRIES
    cors_origins: Tuple[str, ...] = tuple(
        o.strip() for o in CHATBRIDGE_CORS_DEFAULT_ORIGINS.split(",") if o.strip()
    )

    @property
    def is_development(self) -> bool:
        return self.environment.strip().lower() == DEVELOPMENT_ENVIRONMENT

    def default_key_for(self, provider: str) -> Optional[str]:
        """Return the configured default credential for ``provider`` if any."""
        return self.provider_keys.get((provider or "").lower()) or None

    def with_overrides(self, **overrides: Any) -> "ChatSettings":
        """Return a copy with non-``None`` overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_settings(environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> ChatSettings:
    """Build :class:`ChatSettings` from defaults, ``.env`` and the environment.

    Merge order (later wins): defaults -> .env -> env vars -> overrides.
    When ``environ`` is given, the ``.env`` file is not consulted and only the
    supplied mapping is read, which keeps tests hermetic.
    """
    if environ is None:
        _load_dotenv_once()
        env: Mapping[str, str] = os.environ
    else:
        env = environ

    keys: Dict[str, str] = {}
    for provider in ENV_MAP:
        value, _ = resolve_provider_key(provider, env)
        if value:
            keys[provider] = value

    cors_raw = env.get("CHATBRIDGE_CORS_ORIGINS", CHATBRIDGE_CORS_DEFAULT_ORIGINS)
    settings = ChatSettings(
        provider_keys=keys,
        openrouter_base_url=env.get("OPENROUTER_BASE_URL") or OPENROUTER_DEFAULT_BASE_URL,
        site_url=env.get("NEXT_PUBLIC_SITE_URL") or env.get("SITE_URL") or DEFAULT_SITE_URL,
        app_title=env.get("CHATBRIDGE_APP_TITLE") or DEFAULT_APP_TITLE,
        environment=env.get("CHATBRIDGE_ENV") or DEFAULT_ENVIRONMENT,
        request_timeout_seconds=_parse_float(env.get("CHATBRIDGE_TIMEOUT_SECONDS"), MAX_DURATION_SECONDS),
        sdk_max_retries=_parse_int(env.get("CHATBRIDGE_SDK_MAX_RETRIES"), SDK_MAX_RETRIES),
        cors_origins=tuple(o.strip() for o in cors_raw.split(",") if o.strip()),
    )
    return settings.with_overrides(**overrides) if overrides else settings


__all__ = [
    "ChatSettings",
    "load_settings",
]
