"""Domain records shared between the cache and the station service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, List, TypedDict, TypeVar

ValueT = TypeVar("ValueT")


class RawLastMeasurement(TypedDict, total=False):
    value: Any
    createdAt: str


class RawSensorRecord(TypedDict, total=False):
    """One sensor as listed under ``sensors`` in an openSenseMap box."""

    _id: str
    title: str
    sensorType: str
    unit: str
    lastMeasurement: RawLastMeasurement


class RawStationResponse(TypedDict, total=False):
    """The subset of ``GET /boxes/{id}`` that gets transformed."""

    _id: str
    name: str
    lastMeasurementAt: str
    sensors: List[RawSensorRecord]


@dataclass(frozen=True, slots=True)
class StationQuery:
    """A sanitized, non-empty station identifier."""

    station_id: str


@dataclass(slots=True)
class CacheEntry(Generic[ValueT]):
    """A cached value together with its absolute expiry (epoch seconds)."""

    value: ValueT
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at
