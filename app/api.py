"""HTTP route definitions for the sensor query surface."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.schemas import HealthResponse, SensorReadingOut
from services.telemetry_store import TelemetryStore, build_default_store

router = APIRouter()


def get_store() -> TelemetryStore:
    return build_default_store()


@router.get(
    "/api/sensors",
    response_model=List[SensorReadingOut],
    summary="Latest reading of every known device.",
)
async def list_latest(
    store: TelemetryStore = Depends(get_store),
) -> List[SensorReadingOut]:
    return [SensorReadingOut.from_reading(reading) for reading in store.get_all_latest()]


@router.get(
    "/api/sensors/{device_id}",
    response_model=SensorReadingOut,
    summary="Latest reading for a single device.",
)
async def get_latest(
    device_id: str,
    store: TelemetryStore = Depends(get_store),
) -> SensorReadingOut:
    reading = store.get_latest(device_id)
    if reading is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No readings for device {device_id!r}.",
        )
    return SensorReadingOut.from_reading(reading)


@router.get(
    "/api/sensors/{device_id}/history",
    response_model=List[SensorReadingOut],
    summary="Recent readings for a device, newest first.",
)
async def get_history(
    device_id: str,
    store: TelemetryStore = Depends(get_store),
) -> List[SensorReadingOut]:
    return [SensorReadingOut.from_reading(reading) for reading in store.get_history(device_id)]


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck(
    request: Request,
    store: TelemetryStore = Depends(get_store),
) -> HealthResponse:
    subscriber = getattr(request.app.state, "mqtt", None)
    return HealthResponse(
        devices=len(store.device_ids()),
        mqtt_connected=subscriber.connected if subscriber is not None else None,
    )


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
