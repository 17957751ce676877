from __future__ import annotations
import json
import logging
import time
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Callable, Dict, Optional, Protocol

from app.schemas import StationSnapshot
from models.records import CacheEntry
from settings import get_settings

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class SnapshotCache(Protocol):
    """Time-bounded key/value store used by the station service."""

    def get(self, key: str) -> Optional[StationSnapshot]:
        ...

    def set(self, key: str, value: StationSnapshot, ttl: float) -> None:
        ...


class InMemorySnapshotCache:
    """Thread-safe TTL cache with lazy expiry and optional JSON persistence."""

    def __init__(
        self,
        persistence_path: Optional[Path] = None,
        clock: Clock = time.time,
    ) -> None:
        self._entries: Dict[str, CacheEntry[StationSnapshot]] = {}
        self.persistence_path = persistence_path
        self._clock = clock
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def get(self, key: str) -> Optional[StationSnapshot]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            return entry.value.model_copy(deep=True)

    def set(self, key: str, value: StationSnapshot, ttl: float) -> None:
        with self._lock:
            now = self._clock()
            self._drop_expired(now)
            self._entries[key] = CacheEntry(
                value=value.model_copy(deep=True),
                expires_at=now + ttl,
            )
            self._persist()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _drop_expired(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = {
            key: {
                "expires_at": entry.expires_at,
                "value": entry.value.model_dump(mode="json", by_alias=True),
            }
            for key, entry in self._entries.items()
        }
        self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable cache file %s", self.persistence_path)
            return

        if not isinstance(data, dict):
            logger.warning("Ignoring malformed cache file %s", self.persistence_path)
            return

        now = self._clock()
        for key, payload in data.items():
            try:
                expires_at = float(payload["expires_at"])
                snapshot = StationSnapshot.model_validate(payload["value"])
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed cache entry", extra={"cache_key": key})
                continue
            if expires_at <= now:
                continue
            self._entries[key] = CacheEntry(value=snapshot, expires_at=expires_at)


@lru_cache
def build_default_cache(path: Optional[str] = None) -> InMemorySnapshotCache:
    settings = get_settings()
    cache_path = settings.cache_path if path is None else path
    persistence = Path(cache_path) if cache_path else None
    return InMemorySnapshotCache(persistence_path=persistence)
