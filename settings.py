from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


__version__ = "0.1.0"

_API_BASE_URL_ENV = "OPENSENSEMAP_API_BASE_URL"
_REQUEST_TIMEOUT_ENV = "OPENSENSEMAP_REQUEST_TIMEOUT"
_CACHE_TTL_ENV = "OPENSENSEMAP_CACHE_TTL"
_CACHE_PATH_ENV = "OPENSENSEMAP_CACHE_PATH"
_USER_AGENT_ENV = "OPENSENSEMAP_USER_AGENT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_API_BASE_URL = "https://api.opensensemap.org"
DEFAULT_REQUEST_TIMEOUT = 15.0
DEFAULT_CACHE_TTL = 5 * 60
DEFAULT_USER_AGENT = f"opensensemap-block/{__version__}"


@dataclass(frozen=True)
class Settings:
    api_base_url: str
    request_timeout: float
    cache_ttl: int
    cache_path: Optional[str]
    user_agent: str
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        api_base_url=_read_str_env(_API_BASE_URL_ENV, DEFAULT_API_BASE_URL).rstrip("/"),
        request_timeout=_read_positive_float(_REQUEST_TIMEOUT_ENV, DEFAULT_REQUEST_TIMEOUT),
        cache_ttl=_read_positive_int(_CACHE_TTL_ENV, DEFAULT_CACHE_TTL),
        cache_path=_read_optional_env(_CACHE_PATH_ENV, None),
        user_agent=_read_str_env(_USER_AGENT_ENV, DEFAULT_USER_AGENT),
        log_level=_read_log_level("INFO"),
    )
