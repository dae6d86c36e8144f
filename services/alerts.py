"""Threshold alerts raised from incoming sensor readings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Protocol

from models.records import SensorReading
from settings import Settings

logger = logging.getLogger(__name__)

_POOR_AIR_STATUSES = {"poor", "hazardous"}


@dataclass(frozen=True)
class AlertThresholds:
    high_temperature: float = 35.0
    low_temperature: float = 10.0
    high_humidity: float = 80.0
    high_co2: int = 1000

    @classmethod
    def from_settings(cls, settings: Settings) -> "AlertThresholds":
        return cls(
            high_temperature=settings.high_temperature,
            low_temperature=settings.low_temperature,
            high_humidity=settings.high_humidity,
            high_co2=settings.high_co2,
        )


@dataclass(frozen=True)
class SensorAlert:
    """One alert destined for ``recipient``."""

    recipient: str
    title: str
    message: str
    device_id: str


class AlertNotifier(Protocol):
    def notify(self, alert: SensorAlert) -> None:
        ...


class LoggingNotifier:
    """Notifier that only records alerts in the application log."""

    def notify(self, alert: SensorAlert) -> None:
        logger.warning(
            "%s: %s",
            alert.title,
            alert.message.replace("\n", "; "),
            extra={
                "device_id": alert.device_id,
                "alert": alert.title,
                "recipient": alert.recipient,
            },
        )


class SensorAlertService:
    """Evaluates readings against thresholds and notifies on breaches.

    Motion is only logged; it never produces a notification.
    """

    def __init__(
        self,
        notifier: AlertNotifier,
        recipient: str,
        thresholds: AlertThresholds | None = None,
    ) -> None:
        self.notifier = notifier
        self.recipient = recipient
        self.thresholds = thresholds or AlertThresholds()

    def process(self, reading: SensorReading) -> List[SensorAlert]:
        alerts = self.evaluate(reading)
        for alert in alerts:
            self.notifier.notify(alert)
        if reading.motion_detected:
            logger.info(
                "Motion detected",
                extra={"device_id": reading.device_id},
            )
        return alerts

    def evaluate(self, reading: SensorReading) -> List[SensorAlert]:
        limits = self.thresholds
        alerts: List[SensorAlert] = []

        if reading.temperature > limits.high_temperature:
            alerts.append(
                self._alert(
                    reading,
                    "High Temperature Alert",
                    f"High temperature detected:\nTemperature: {reading.temperature:.2f}°C",
                    f"Threshold: {limits.high_temperature:.2f}°C",
                )
            )
        elif reading.temperature < limits.low_temperature:
            alerts.append(
                self._alert(
                    reading,
                    "Low Temperature Alert",
                    f"Low temperature detected:\nTemperature: {reading.temperature:.2f}°C",
                    f"Threshold: {limits.low_temperature:.2f}°C",
                )
            )

        if reading.humidity > limits.high_humidity:
            alerts.append(
                self._alert(
                    reading,
                    "High Humidity Alert",
                    f"High humidity detected:\nHumidity: {reading.humidity:.2f}%",
                    f"Threshold: {limits.high_humidity:.2f}%",
                )
            )

        status = (reading.air_quality_status or "").lower()
        if status in _POOR_AIR_STATUSES:
            alerts.append(
                self._alert(
                    reading,
                    "Air Quality Alert",
                    (
                        "Poor air quality detected:\n"
                        f"Status: {reading.air_quality_status}\n"
                        f"CO2: {reading.co2} ppm\n"
                        f"CO: {reading.co} ppm\n"
                        f"NH3: {reading.nh3} ppm\n"
                        f"CH4: {reading.ch4} ppm"
                    ),
                )
            )

        if reading.co2 > limits.high_co2:
            alerts.append(
                self._alert(
                    reading,
                    "High CO2 Alert",
                    f"High CO2 levels detected:\nCO2: {reading.co2} ppm",
                    f"Threshold: {limits.high_co2} ppm",
                )
            )

        return alerts

    def _alert(
        self,
        reading: SensorReading,
        title: str,
        body: str,
        threshold: str | None = None,
    ) -> SensorAlert:
        lines = [
            body,
            f"Device ID: {reading.device_id}",
            f"Time: {reading.received_at.isoformat()}",
        ]
        if threshold:
            lines.append(threshold)
        return SensorAlert(
            recipient=self.recipient,
            title=title,
            message="\n".join(lines),
            device_id=reading.device_id,
        )
