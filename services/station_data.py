"""Fetching, normalizing and caching openSenseMap station readings."""

from __future__ import annotations

import logging
import re
import time
from functools import lru_cache
from typing import Any, Iterable, List, Mapping, Optional
from urllib.parse import quote

import httpx

from app.schemas import LastMeasurement, SensorReading, StationSnapshot
from datastore.snapshot_cache import SnapshotCache, build_default_cache
from models.records import RawSensorRecord, RawStationResponse, StationQuery
from services.errors import (
    InvalidRequest,
    StationDataError,
    UnexpectedError,
    UpstreamError,
    UpstreamInvalidResponse,
    UpstreamUnreachable,
)
from services.sensor_labels import SensorLabeler
from settings import get_settings

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "opensensemap_data_"

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)[^>]*?>.*?</\1>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>?")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_WHITESPACE_RE = re.compile(r"[\r\n\t ]+")
_OCTET_RE = re.compile(r"%[a-f0-9]{2}", re.IGNORECASE)
_STATION_ID_RE = re.compile(r"^[\w-]+$", re.ASCII)


def sanitize_text(value: str) -> str:
    """Strip markup, control characters and percent-encoded octets."""
    cleaned = _SCRIPT_STYLE_RE.sub("", value)
    cleaned = _TAG_RE.sub("", cleaned)
    cleaned = _CONTROL_RE.sub("", cleaned)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()
    while _OCTET_RE.search(cleaned):
        cleaned = _OCTET_RE.sub("", cleaned)
    return cleaned.strip()


def build_query(station_id: Optional[str]) -> StationQuery:
    candidate = sanitize_text(station_id or "")
    if not candidate:
        raise InvalidRequest()
    if not _STATION_ID_RE.match(candidate):
        raise InvalidRequest("Box ID contains invalid characters", code="invalid_id")
    return StationQuery(station_id=candidate)


def cache_key_for(query: StationQuery) -> str:
    return f"{CACHE_KEY_PREFIX}{query.station_id}"


class SensorDataService:
    """Proxies openSenseMap box lookups through a time-bounded cache."""

    def __init__(
        self,
        cache: SnapshotCache,
        client: httpx.Client,
        labeler: SensorLabeler,
        base_url: str = "https://api.opensensemap.org",
        cache_ttl: float = 300,
    ) -> None:
        self.cache = cache
        self.client = client
        self.labeler = labeler
        self.base_url = base_url.rstrip("/")
        self.cache_ttl = cache_ttl

    def get_station_data(self, station_id: Optional[str]) -> StationSnapshot:
        """Return the normalized snapshot for ``station_id``.

        Raises only ``StationDataError`` subclasses. Failed fetches leave the
        cache untouched, so the next call goes upstream again.
        """
        query = build_query(station_id)
        key = cache_key_for(query)
        log_context = {"station_id": query.station_id, "cache_key": key}

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit", extra=log_context)
            return cached

        start_time = time.perf_counter()
        try:
            payload = self._fetch(query)
            snapshot = self.transform(payload)
            self.cache.set(key, snapshot, self.cache_ttl)
        except StationDataError as exc:
            logger.warning(
                "Station lookup failed: %s",
                exc.message,
                extra={**log_context, "status": exc.status, "error_code": exc.kind.value},
            )
            raise
        except Exception as exc:
            logger.exception(
                "Unexpected failure while fetching station",
                extra={**log_context, "error_code": UnexpectedError.kind.value},
            )
            raise UnexpectedError() from exc

        logger.info(
            "Fetched station from upstream",
            extra={
                **log_context,
                "elapsed_ms": int((time.perf_counter() - start_time) * 1000),
                "sensor_count": len(snapshot.sensors),
            },
        )
        return snapshot

    def transform(self, payload: RawStationResponse) -> StationSnapshot:
        """Build a snapshot from a decoded ``/boxes/{id}`` body."""
        sensors = payload.get("sensors") or []
        if not isinstance(sensors, list):
            raise UpstreamInvalidResponse()
        return StationSnapshot(
            current_location=_text(payload.get("name")),
            last_measurement_at=_text(payload.get("lastMeasurementAt")),
            sensors=self._transform_sensors(sensors),
        )

    def close(self) -> None:
        self.client.close()

    def _fetch(self, query: StationQuery) -> RawStationResponse:
        url = f"{self.base_url}/boxes/{quote(query.station_id, safe='')}"
        try:
            response = self.client.get(url)
        except httpx.TransportError as exc:
            raise UpstreamUnreachable() from exc

        if response.status_code != 200:
            raise UpstreamError(response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamInvalidResponse() from exc

        if not data or not isinstance(data, dict):
            raise UpstreamInvalidResponse()
        return data

    def _transform_sensors(self, sensors: Iterable[RawSensorRecord]) -> List[SensorReading]:
        readings: List[SensorReading] = []
        for sensor in sensors:
            if not isinstance(sensor, Mapping):
                raise UpstreamInvalidResponse()
            raw_name = sensor.get("title") or sensor.get("sensorType") or ""
            readings.append(
                SensorReading(
                    name=self.labeler.translate_name(str(raw_name)),
                    unit=_text(sensor.get("unit")),
                    icon=self.labeler.icon_for(_text(sensor.get("sensorType"))),
                    last_measurement=_last_measurement(sensor.get("lastMeasurement")),
                )
            )
        return readings


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _last_measurement(raw: Any) -> Optional[LastMeasurement]:
    if not raw or not isinstance(raw, Mapping):
        return None
    value = raw.get("value")
    return LastMeasurement(
        value=0 if value is None else value,
        timestamp=_text(raw.get("createdAt")),
    )


def build_http_client(timeout: float, user_agent: str) -> httpx.Client:
    return httpx.Client(
        timeout=timeout,
        headers={"User-Agent": user_agent, "Accept": "application/json"},
    )


@lru_cache
def build_default_service() -> SensorDataService:
    """Factory that wires the service with the configured cache and client."""
    settings = get_settings()
    client = build_http_client(settings.request_timeout, settings.user_agent)
    return SensorDataService(
        cache=build_default_cache(),
        client=client,
        labeler=SensorLabeler(),
        base_url=settings.api_base_url,
        cache_ttl=settings.cache_ttl,
    )
