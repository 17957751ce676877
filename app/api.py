"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Union

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.schemas import ErrorResponse, StationSnapshot
from services.errors import StationDataError
from services.station_data import SensorDataService, build_default_service

ROUTE_NAMESPACE = "/opensensemap-block/v1"

router = APIRouter()


def get_service() -> SensorDataService:
    return build_default_service()


@router.get(
    f"{ROUTE_NAMESPACE}/opensensemap/{{station_id}}",
    response_model=StationSnapshot,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or malformed box ID."},
        500: {"model": ErrorResponse, "description": "Upstream or unexpected failure."},
    },
    summary="Fetch the current readings of an openSenseMap box.",
)
def get_station_data(
    station_id: str,
    service: SensorDataService = Depends(get_service),
) -> Union[StationSnapshot, JSONResponse]:
    try:
        return service.get_station_data(station_id)
    except StationDataError as exc:
        return JSONResponse(status_code=exc.status, content=exc.to_payload())


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
