"""Development server entry point (``chatbridge-dev`` / ``python -m``).

Environment:
    - CHATBRIDGE_HOST: interface to bind (default "127.0.0.1")
    - CHATBRIDGE_PORT: port to bind, 1-65535 (default 8000)
    - CHATBRIDGE_RELOAD: "true"/"false"; when unset, reload follows
      ``CHATBRIDGE_ENV`` (on in development, off otherwise)
    - CHATBRIDGE_LOG_LEVEL: level for the shared ``chatbridge`` logger
    - CHATBRIDGE_LOG_FILE: optional path for a rotating JSON log file
"""
from __future__ import annotations

import os
from typing import Any, Dict, Mapping, Optional

import uvicorn

from chatbridge.base.logging import configure_logger, get_logger, log_event
from chatbridge.config import load_settings

APP_IMPORT_PATH = "chatbridge.service.app:app"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


def _parse_port(value: str | None, default: int) -> int:
    """Best-effort parse of a TCP port, falling back to ``default``."""
    if not value:
        return default
    try:
        port = int(value)
    except ValueError:
        return default
    return port if 0 < port < 65536 else default


def server_options(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Return the ``uvicorn.run`` keyword arguments for ``environ``."""
    env = os.environ if environ is None else environ
    reload_env = env.get("CHATBRIDGE_RELOAD")
    if reload_env is None:
        reload_enabled = load_settings(environ=env).is_development
    else:
        reload_enabled = reload_env.strip().lower() == "true"
    return {
        "host": env.get("CHATBRIDGE_HOST") or DEFAULT_HOST,
        "port": _parse_port(env.get("CHATBRIDGE_PORT"), DEFAULT_PORT),
        "reload": reload_enabled,
    }


def main() -> None:
    """Configure logging and start uvicorn for the chatbridge app."""
    configure_logger(
        level=os.getenv("CHATBRIDGE_LOG_LEVEL"),
        file_path=os.getenv("CHATBRIDGE_LOG_FILE") or None,
    )
    options = server_options()
    log_event(get_logger("service.dev_server"), "server.start", None, app=APP_IMPORT_PATH, **options)
    uvicorn.run(APP_IMPORT_PATH, **options)


if __name__ == "__main__":
    main()
