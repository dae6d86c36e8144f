"""Pydantic schemas for the wire formats (MQTT payloads and HTTP responses)."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from models.records import SensorReading


class TelemetryPayload(BaseModel):
    """Inbound telemetry message as published by a device.

    Field names are camelCase on the wire. Unknown keys are ignored, so a
    device-supplied ``receivedAt`` never reaches the domain model.
    """

    model_config = ConfigDict(alias_generator=to_camel, extra="ignore")

    device_id: str = Field(..., min_length=1)
    timestamp: int = 0
    temperature: float = 0.0
    humidity: float = 0.0
    air_quality_raw: int = 0
    co2: int = 0
    nh3: int = 0
    ch4: int = 0
    co: int = 0
    air_quality_status: Optional[str] = None
    is_light: bool = False
    motion_detected: bool = False

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # Explicit nulls fall back to the field defaults.
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    def to_reading(self, received_at: datetime) -> SensorReading:
        return SensorReading(received_at=received_at, **self.model_dump())


class SensorReadingOut(TelemetryPayload):
    """Reading as exposed over HTTP and WebSocket."""

    # Built from domain objects by field name; serialised by alias.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    received_at: datetime

    @classmethod
    def from_reading(cls, reading: SensorReading) -> "SensorReadingOut":
        return cls(
            device_id=reading.device_id,
            received_at=reading.received_at,
            timestamp=reading.timestamp,
            temperature=reading.temperature,
            humidity=reading.humidity,
            air_quality_raw=reading.air_quality_raw,
            co2=reading.co2,
            nh3=reading.nh3,
            ch4=reading.ch4,
            co=reading.co,
            air_quality_status=reading.air_quality_status,
            is_light=reading.is_light,
            motion_detected=reading.motion_detected,
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class HealthResponse(BaseModel):
    status: str = "ok"
    devices: int = Field(0, ge=0)
    mqtt_connected: Optional[bool] = None
