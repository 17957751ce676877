from __future__ import annotations

from typing import Iterable

from datastore.snapshot_cache import build_default_cache
from services.station_data import build_default_service
from settings import DEFAULT_USER_AGENT, get_settings


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


CACHES = (get_settings, build_default_cache, build_default_service)


def test_defaults_match_upstream_contract(monkeypatch) -> None:
    for name in (
        "OPENSENSEMAP_API_BASE_URL",
        "OPENSENSEMAP_REQUEST_TIMEOUT",
        "OPENSENSEMAP_CACHE_TTL",
        "OPENSENSEMAP_CACHE_PATH",
        "OPENSENSEMAP_USER_AGENT",
    ):
        monkeypatch.delenv(name, raising=False)
    _clear_caches(CACHES)

    try:
        settings = get_settings()
        assert settings.api_base_url == "https://api.opensensemap.org"
        assert settings.request_timeout == 15.0
        assert settings.cache_ttl == 300
        assert settings.cache_path is None
        assert settings.user_agent == DEFAULT_USER_AGENT
        assert DEFAULT_USER_AGENT.startswith("opensensemap-block/")
    finally:
        _clear_caches(CACHES)


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    cache_path = tmp_path / "snapshots.json"

    monkeypatch.setenv("OPENSENSEMAP_API_BASE_URL", "http://mirror.local/api/")
    monkeypatch.setenv("OPENSENSEMAP_REQUEST_TIMEOUT", "3.5")
    monkeypatch.setenv("OPENSENSEMAP_CACHE_TTL", "60")
    monkeypatch.setenv("OPENSENSEMAP_CACHE_PATH", str(cache_path))
    monkeypatch.setenv("OPENSENSEMAP_USER_AGENT", "my-site/2.0")
    monkeypatch.setenv("LOG_LEVEL", " debug ")

    _clear_caches(CACHES)

    cache = build_default_cache()
    service = build_default_service()

    try:
        assert get_settings().log_level == "DEBUG"
        assert cache.persistence_path == cache_path
        assert service.cache is cache
        assert service.base_url == "http://mirror.local/api"
        assert service.cache_ttl == 60
        assert service.client.timeout.read == 3.5
        assert service.client.headers["User-Agent"] == "my-site/2.0"
    finally:
        service.close()
        _clear_caches(CACHES)


def test_invalid_numbers_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("OPENSENSEMAP_REQUEST_TIMEOUT", "-1")
    monkeypatch.setenv("OPENSENSEMAP_CACHE_TTL", "five minutes")
    _clear_caches(CACHES)

    try:
        settings = get_settings()
        assert settings.request_timeout == 15.0
        assert settings.cache_ttl == 300
    finally:
        _clear_caches(CACHES)
