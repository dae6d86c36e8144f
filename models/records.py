"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True, slots=True)
class SensorReading:
    """A single telemetry sample reported by one device.

    ``timestamp`` is the device clock (epoch, untrusted). ``received_at`` is
    stamped by the server when the reading is ingested and is the only time
    used for ordering.
    """

    device_id: str
    received_at: datetime
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
