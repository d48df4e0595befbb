"""HTTP server configuration."""
from __future__ import annotations

import os

from .paths import BASE_DIR  # noqa: F401  .env must load first

_DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:3000",
]


def _parse_cors_origins() -> list[str]:
    raw = os.getenv("CORS_ORIGINS", "")
    if raw.strip():
        return [o.strip() for o in raw.split(",") if o.strip()]
    return list(_DEFAULT_CORS_ORIGINS)


CORS_ORIGINS = _parse_cors_origins()
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
ALERT_WS_QUEUE_SIZE = int(os.getenv("ALERT_WS_QUEUE_SIZE", "1"))
