"""Broker message ingestion: parse, store and rebroadcast telemetry."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, Optional, Union

from pydantic import ValidationError

from app.schemas import SensorReadingOut, TelemetryPayload
from models.records import SensorReading
from services.alerts import AlertThresholds, LoggingNotifier, SensorAlertService
from services.broadcast import BroadcastSink, build_default_hub
from services.telemetry_store import TelemetryStore, build_default_store
from services.topics import TopicKind, TopicRoutes
from settings import get_settings

logger = logging.getLogger(__name__)

RawPayload = Union[bytes, bytearray, str]

DEFAULT_SENSOR_CHANNEL = "/topic/sensors"
DEFAULT_STATUS_CHANNEL = "/topic/status"


class MalformedPayload(ValueError):
    """Raised when a telemetry message cannot be turned into a reading."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_text(raw_payload: RawPayload, errors: str = "strict") -> str:
    if isinstance(raw_payload, str):
        return raw_payload
    return bytes(raw_payload).decode("utf-8", errors=errors)


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "payload"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def parse_reading(raw_payload: RawPayload, received_at: datetime) -> SensorReading:
    """Decode a telemetry payload and stamp it with ``received_at``."""
    try:
        text = _as_text(raw_payload)
    except UnicodeDecodeError as exc:
        raise MalformedPayload("payload is not valid UTF-8") from exc

    try:
        payload = TelemetryPayload.model_validate_json(text)
    except ValidationError as exc:
        raise MalformedPayload(_describe_validation_error(exc)) from exc
    return payload.to_reading(received_at)


class IngestionAdapter:
    """Stateless handler invoked once per broker message.

    ``on_message`` never raises: failures are logged and the message dropped.
    """

    def __init__(
        self,
        store: TelemetryStore,
        sink: BroadcastSink,
        routes: TopicRoutes,
        sensor_channel: str = DEFAULT_SENSOR_CHANNEL,
        status_channel: str = DEFAULT_STATUS_CHANNEL,
        alerts: Optional[SensorAlertService] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.sink = sink
        self.routes = routes
        self.sensor_channel = sensor_channel
        self.status_channel = status_channel
        self.alerts = alerts
        self._clock = clock

    def on_message(self, topic: str, raw_payload: RawPayload) -> Optional[TopicKind]:
        """Handle one message; returns the kind handled or ``None`` if dropped."""
        kind = self.routes.classify(topic)
        try:
            if kind is TopicKind.telemetry:
                self._handle_telemetry(raw_payload)
            elif kind is TopicKind.status:
                self._handle_status(raw_payload)
            else:
                logger.debug("Ignoring message on unrecognised topic", extra={"topic": topic})
        except MalformedPayload as exc:
            logger.warning(
                "Dropping malformed telemetry message",
                extra={"topic": topic, "reason": exc.reason},
            )
            return None
        except Exception:
            logger.exception("Failed to process message", extra={"topic": topic})
            return None
        return kind

    def _handle_telemetry(self, raw_payload: RawPayload) -> None:
        reading = parse_reading(raw_payload, received_at=self._clock())
        if not self.store.upsert(reading):
            return

        self.sink.publish(self.sensor_channel, SensorReadingOut.from_reading(reading).to_wire())
        logger.debug(
            "Broadcast sensor reading",
            extra={
                "device_id": reading.device_id,
                "channel": self.sensor_channel,
            },
        )

        if self.alerts is None:
            return
        try:
            self.alerts.process(reading)
        except Exception:
            logger.exception(
                "Alert evaluation failed",
                extra={"device_id": reading.device_id},
            )

    def _handle_status(self, raw_payload: RawPayload) -> None:
        self.sink.publish(self.status_channel, _as_text(raw_payload, errors="replace"))


@lru_cache
def build_default_adapter() -> IngestionAdapter:
    """Factory that wires the adapter with the default store and hub."""
    settings = get_settings()
    alerts = None
    if settings.alerts_enabled:
        alerts = SensorAlertService(
            notifier=LoggingNotifier(),
            recipient=settings.alert_recipient,
            thresholds=AlertThresholds.from_settings(settings),
        )
    return IngestionAdapter(
        store=build_default_store(),
        sink=build_default_hub(),
        routes=TopicRoutes(
            telemetry_topic=settings.telemetry_topic,
            status_topic=settings.status_topic,
        ),
        sensor_channel=settings.sensor_channel,
        status_channel=settings.status_channel,
        alerts=alerts,
    )
