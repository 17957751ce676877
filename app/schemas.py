"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class SensorIcon(str, Enum):
    """Icon names understood by the block frontend."""

    thermometer = "thermometer"
    humidity = "humidity"
    cloud = "cloud"
    chart = "chart"


class LastMeasurement(_CamelModel):
    """Most recent value reported by a sensor."""

    # Upstream reports values as strings; they are passed through untouched.
    value: Union[int, float, str] = 0
    timestamp: str = ""


class SensorReading(_CamelModel):
    """A single sensor channel, English-labelled and icon-annotated."""

    name: str
    unit: str = ""
    icon: SensorIcon = SensorIcon.chart
    last_measurement: Optional[LastMeasurement] = None


class StationSnapshot(_CamelModel):
    """Normalized view of a station's current readings."""

    current_location: str = ""
    last_measurement_at: str = ""
    sensors: List[SensorReading] = Field(default_factory=list)


class ErrorData(BaseModel):
    status: int


class ErrorResponse(BaseModel):
    """Structured error body returned by the proxy route."""

    code: str = Field(..., description="Machine readable error code.")
    message: str
    data: ErrorData
