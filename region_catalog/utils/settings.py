"""Runtime settings sourced from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple


DEFAULT_STORE_TIMEOUT_SECONDS = 5.0

_DEFAULT_CORS_ORIGINS: Tuple[str, ...] = (
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:5000",
    "http://localhost:8000",
)


@dataclass(frozen=True)
class Settings:
    store_timeout_seconds: float
    cors_origins: Tuple[str, ...]
    log_level: str


def _parse_timeout(value: str | None, default: float = DEFAULT_STORE_TIMEOUT_SECONDS) -> float:
    """Return a positive timeout in seconds, falling back to ``default``."""
    if value is None:
        return default
    try:
        parsed = float(value.strip())
    except ValueError:
        return default
    if parsed <= 0:
        return default
    return parsed


def _parse_origins(value: str | None) -> Tuple[str, ...]:
    if not value:
        return _DEFAULT_CORS_ORIGINS
    origins = tuple(o.strip() for o in value.split(",") if o.strip())
    return origins or _DEFAULT_CORS_ORIGINS


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """Return the cached settings built from environment variables."""
    return Settings(
        store_timeout_seconds=_parse_timeout(os.getenv("CATALOG_STORE_TIMEOUT_SECONDS")),
        cors_origins=_parse_origins(os.getenv("CATALOG_CORS_ORIGINS")),
        log_level=(os.getenv("LOG_LEVEL", "INFO") or "INFO").upper(),
    )


def refresh_settings_cache() -> None:
    """Invalidate cached settings (useful for tests)."""
    get_settings.cache_clear()
