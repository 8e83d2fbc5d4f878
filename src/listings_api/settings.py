from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - UPSTREAM_BACKEND: 'memory' (default) or 'http'
    - UPSTREAM_BASE_URL: base URL of the upstream REST backend. Default 'http://localhost:3000/api'
    - UPSTREAM_TIMEOUT: upstream request timeout in seconds (default: 10)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: standard logging level name (default: INFO)
    """

    upstream_backend: str
    upstream_base_url: str
    upstream_timeout: float
    cors_allow_origins: List[str]
    log_level: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_float(value: str, default: float) -> float:
    try:
        parsed = float(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


def _parse_log_level(value: str) -> str:
    level = value.strip().upper()
    if level not in logging.getLevelNamesMapping():
        return "INFO"
    return level


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("UPSTREAM_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "http"}:
        # Fallback to memory if unsupported
        backend = "memory"

    return Settings(
        upstream_backend=backend,
        upstream_base_url=_get_env("UPSTREAM_BASE_URL", "http://localhost:3000/api").strip(),
        upstream_timeout=_parse_float(_get_env("UPSTREAM_TIMEOUT", "10"), 10.0),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_parse_log_level(_get_env("LOG_LEVEL", "INFO")),
    )
