"""Unit tests for threshold alert evaluation."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from models.records import SensorReading
from services.alerts import AlertThresholds, LoggingNotifier, SensorAlert, SensorAlertService


class RecordingNotifier:
    def __init__(self) -> None:
        self.alerts: list[SensorAlert] = []

    def notify(self, alert: SensorAlert) -> None:
        self.alerts.append(alert)


def _reading(**fields) -> SensorReading:
    defaults = {"temperature": 22.0, "humidity": 40.0, "co2": 400}
    defaults.update(fields)
    return SensorReading(
        device_id="dev-9",
        received_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        **defaults,
    )


def _service(notifier=None, **thresholds) -> SensorAlertService:
    return SensorAlertService(
        notifier=notifier or RecordingNotifier(),
        recipient="admin@example.com",
        thresholds=AlertThresholds(**thresholds),
    )


def test_normal_reading_raises_nothing() -> None:
    assert _service().evaluate(_reading()) == []


def test_high_and_low_temperature_are_exclusive() -> None:
    service = _service()

    high = service.evaluate(_reading(temperature=36.0))
    low = service.evaluate(_reading(temperature=9.5))

    assert [alert.title for alert in high] == ["High Temperature Alert"]
    assert [alert.title for alert in low] == ["Low Temperature Alert"]
    assert "Threshold: 35.00°C" in high[0].message
    assert "Device ID: dev-9" in low[0].message


def test_thresholds_are_strict_comparisons() -> None:
    service = _service()

    assert service.evaluate(_reading(temperature=35.0, humidity=80.0, co2=1000)) == []


def test_air_quality_status_is_case_insensitive() -> None:
    service = _service()

    for status in ("Poor", "HAZARDOUS", "poor"):
        alerts = service.evaluate(_reading(air_quality_status=status))
        assert [alert.title for alert in alerts] == ["Air Quality Alert"]

    assert service.evaluate(_reading(air_quality_status="Moderate")) == []


def test_air_quality_status_must_match_exactly() -> None:
    service = _service()

    for status in ("Poor ", " hazardous", "Very Poor"):
        assert service.evaluate(_reading(air_quality_status=status)) == []


def test_multiple_breaches_produce_multiple_alerts() -> None:
    notifier = RecordingNotifier()
    service = _service(notifier)

    alerts = service.process(
        _reading(temperature=40.0, humidity=95.0, co2=1500, air_quality_status="Poor")
    )

    titles = [alert.title for alert in alerts]
    assert titles == [
        "High Temperature Alert",
        "High Humidity Alert",
        "Air Quality Alert",
        "High CO2 Alert",
    ]
    assert notifier.alerts == alerts
    assert all(alert.recipient == "admin@example.com" for alert in alerts)


def test_custom_thresholds_apply() -> None:
    service = _service(high_co2=500)

    alerts = service.evaluate(_reading(co2=600))

    assert [alert.title for alert in alerts] == ["High CO2 Alert"]
    assert "Threshold: 500 ppm" in alerts[0].message


def test_motion_is_logged_but_not_notified(caplog) -> None:
    notifier = RecordingNotifier()
    service = _service(notifier)

    with caplog.at_level(logging.INFO, logger="services.alerts"):
        alerts = service.process(_reading(motion_detected=True))

    assert alerts == []
    assert notifier.alerts == []
    assert any(record.getMessage() == "Motion detected" for record in caplog.records)


def test_logging_notifier_emits_warning_with_context(caplog) -> None:
    service = _service(LoggingNotifier())

    with caplog.at_level(logging.WARNING, logger="services.alerts"):
        service.process(_reading(humidity=90.0))

    records = [record for record in caplog.records if record.name == "services.alerts"]
    assert len(records) == 1
    assert records[0].levelno == logging.WARNING
    assert getattr(records[0], "alert") == "High Humidity Alert"
    assert getattr(records[0], "device_id") == "dev-9"
    assert "\n" not in records[0].getMessage()
