"""Environment-driven configuration for the CORS gateway."""

from __future__ import annotations

import os
from typing import Final

WILDCARD: Final[str] = "*"
PREFLIGHT_METHOD: Final[str] = "OPTIONS"

ORIGIN_HEADER: Final[str] = "Origin"
VARY_HEADER: Final[str] = "Vary"
REQUEST_METHOD_HEADER: Final[str] = "Access-Control-Request-Method"
REQUEST_HEADERS_HEADER: Final[str] = "Access-Control-Request-Headers"
ALLOW_ORIGIN_HEADER: Final[str] = "Access-Control-Allow-Origin"
ALLOW_METHODS_HEADER: Final[str] = "Access-Control-Allow-Methods"
ALLOW_HEADERS_HEADER: Final[str] = "Access-Control-Allow-Headers"

# Sent instead of the requesting origin when the origin itself is refused.
DENIED_ORIGIN_VALUE: Final[str] = "null"


def _get_env(name: str, *, default: str | None = None, required: bool = False) -> str | None:
    value = os.getenv(name)
    if value is None:
        if required:
            raise RuntimeError(f"Missing required environment variable: {name}")
        return default
    return value.strip()


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def policy_file() -> str | None:
    """Return the configured policy file path, if any."""

    return _get_env("CORS_POLICY_FILE") or None


def check_headers_enabled() -> bool:
    return _get_bool("CORS_CHECK_HEADERS", False)


def deny_keeps_origin() -> bool:
    return _get_bool("CORS_DENY_KEEPS_ORIGIN", True)
