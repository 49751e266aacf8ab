"""chatbridge.config.defaults
==========================

Central place for small, stable default values used across the chatbridge
package and its HTTP service. These defaults can be overridden via environment
variables (see :mod:`chatbridge.config`), but provide sensible fallbacks for
local development and tests.

Module Purpose
--------------
- Provide a single import location for conservative default constants (no I/O).
- Keep the service and adapter layers free of magic literals.

This module intentionally avoids importing from other chatbridge packages to
prevent circular dependencies. Only plain constants should live here.
"""

from __future__ import annotations

# ---- Service / HTTP layer ----

# Comma-separated list of allowed origins for the browser client.
CHATBRIDGE_CORS_DEFAULT_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"

# Site identification sent to OpenRouter (``HTTP-Referer``) and app title (``X-Title``).
DEFAULT_SITE_URL = "http://localhost:3000"
DEFAULT_APP_TITLE = "AI Chatbot"

# Environment name; ``development`` exposes error details in JSON error bodies.
DEFAULT_ENVIRONMENT = "production"
DEVELOPMENT_ENVIRONMENT = "development"

# Upper bound for a single request (seconds); applied as the HTTP/SDK timeout.
MAX_DURATION_SECONDS = 30.0

# Bounded retry count for transient start failures on the unified SDK path.
SDK_MAX_RETRIES = 2


# ---- Generation parameters ----
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000
TEMPERATURE_MIN = 0.0
TEMPERATURE_MAX = 1.0
MAX_TOKENS_MIN = 1
MAX_TOKENS_MAX = 4096


# ---- OpenRouter (raw HTTP path) ----
OPENROUTER_DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
OPENROUTER_CHAT_PATH = "/chat/completions"
OPENROUTER_DEFAULT_MODEL = "mistralai/mistral-7b-instruct:free"


# ---- Unified SDK path ----
OPENAI_DEFAULT_MODEL = "gpt-3.5-turbo"
ANTHROPIC_DEFAULT_MODEL = "claude-3-haiku-20240307"
GOOGLE_DEFAULT_MODEL = "gemini-1.5-pro-latest"
# Web-enabled generation always runs on this Google model with search grounding.
WEB_SEARCH_MODEL = "gemini-2.0-flash"


# ---- System preamble for SDK-backed generations ----
SYSTEM_PREAMBLE_BASE = (
    "You are a helpful, concise AI assistant. Answer clearly and accurately, "
    "and say so when you are unsure."
)
SYSTEM_PREAMBLE_WEB_SEARCH = (
    "You have access to live web search results. Use them to answer questions "
    "about recent events and facts that may have changed."
)
SYSTEM_PREAMBLE_CITATIONS = (
    "When sources are provided, cite the source URLs you relied on at the end "
    "of your answer."
)


__all__ = [
    "CHATBRIDGE_CORS_DEFAULT_ORIGINS",
    "DEFAULT_SITE_URL",
    "DEFAULT_APP_TITLE",
    "DEFAULT_ENVIRONMENT",
    "DEVELOPMENT_ENVIRONMENT",
    "MAX_DURATION_SECONDS",
    "SDK_MAX_RETRIES",
    "DEFAULT_TEMPERATURE",
    "DEFAULT_MAX_TOKENS",
    "TEMPERATURE_MIN",
    "TEMPERATURE_MAX",
    "MAX_TOKENS_MIN",
    "MAX_TOKENS_MAX",
    "OPENROUTER_DEFAULT_BASE_URL",
    "OPENROUTER_CHAT_PATH",
    "OPENROUTER_DEFAULT_MODEL",
    "OPENAI_DEFAULT_MODEL",
    "ANTHROPIC_DEFAULT_MODEL",
    "GOOGLE_DEFAULT_MODEL",
    "WEB_SEARCH_MODEL",
    "SYSTEM_PREAMBLE_BASE",
    "SYSTEM_PREAMBLE_WEB_SEARCH",
    "SYSTEM_PREAMBLE_CITATIONS",
]
