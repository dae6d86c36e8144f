from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_MQTT_ENABLED_ENV = "MQTT_ENABLED"
_MQTT_HOST_ENV = "MQTT_BROKER_HOST"
_MQTT_PORT_ENV = "MQTT_BROKER_PORT"
_MQTT_CLIENT_ID_ENV = "MQTT_CLIENT_ID"
_MQTT_USERNAME_ENV = "MQTT_USERNAME"
_MQTT_PASSWORD_ENV = "MQTT_PASSWORD"
_TELEMETRY_TOPIC_ENV = "MQTT_TELEMETRY_TOPIC"
_STATUS_TOPIC_ENV = "MQTT_STATUS_TOPIC"
_SENSOR_CHANNEL_ENV = "SENSOR_CHANNEL"
_STATUS_CHANNEL_ENV = "STATUS_CHANNEL"
_HISTORY_LIMIT_ENV = "HISTORY_LIMIT"
_REJECT_STALE_ENV = "REJECT_STALE_READINGS"
_ALERTS_ENABLED_ENV = "ALERTS_ENABLED"
_ALERT_RECIPIENT_ENV = "ALERT_RECIPIENT"
_HIGH_TEMP_ENV = "ALERT_HIGH_TEMPERATURE"
_LOW_TEMP_ENV = "ALERT_LOW_TEMPERATURE"
_HIGH_HUMIDITY_ENV = "ALERT_HIGH_HUMIDITY"
_HIGH_CO2_ENV = "ALERT_HIGH_CO2"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    mqtt_enabled: bool
    mqtt_host: str
    mqtt_port: int
    mqtt_client_id: str
    mqtt_username: Optional[str]
    mqtt_password: Optional[str]
    telemetry_topic: str
    status_topic: str
    sensor_channel: str
    status_channel: str
    history_limit: int
    reject_stale_readings: bool
    alerts_enabled: bool
    alert_recipient: str
    high_temperature: float
    low_temperature: float
    high_humidity: float
    high_co2: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        return float(candidate)
    except ValueError:
        return default


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUTHY:
        return True
    if candidate in _FALSY:
        return False
    return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        mqtt_enabled=_read_bool(_MQTT_ENABLED_ENV, False),
        mqtt_host=_read_str_env(_MQTT_HOST_ENV, "broker.hivemq.com"),
        mqtt_port=_read_positive_int(_MQTT_PORT_ENV, 1883),
        mqtt_client_id=_read_str_env(_MQTT_CLIENT_ID_ENV, "auralink-backend-client"),
        mqtt_username=_read_optional_env(_MQTT_USERNAME_ENV, None),
        mqtt_password=_read_optional_env(_MQTT_PASSWORD_ENV, None),
        telemetry_topic=_read_str_env(_TELEMETRY_TOPIC_ENV, "auralink/sensors"),
        status_topic=_read_str_env(_STATUS_TOPIC_ENV, "auralink/status"),
        sensor_channel=_read_str_env(_SENSOR_CHANNEL_ENV, "/topic/sensors"),
        status_channel=_read_str_env(_STATUS_CHANNEL_ENV, "/topic/status"),
        history_limit=_read_positive_int(_HISTORY_LIMIT_ENV, 100),
        reject_stale_readings=_read_bool(_REJECT_STALE_ENV, False),
        alerts_enabled=_read_bool(_ALERTS_ENABLED_ENV, False),
        alert_recipient=_read_str_env(_ALERT_RECIPIENT_ENV, "admin@example.com"),
        high_temperature=_read_float(_HIGH_TEMP_ENV, 35.0),
        low_temperature=_read_float(_LOW_TEMP_ENV, 10.0),
        high_humidity=_read_float(_HIGH_HUMIDITY_ENV, 80.0),
        high_co2=_read_positive_int(_HIGH_CO2_ENV, 1000),
        log_level=_read_log_level("INFO"),
    )
