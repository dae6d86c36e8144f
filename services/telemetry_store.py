"""In-memory latest-value cache and bounded history per device."""

from __future__ import annotations

import logging
from collections import deque
from functools import lru_cache
from threading import Lock
from typing import Deque, Dict, Optional

from models.records import SensorReading
from settings import get_settings

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100


class TelemetryStore:
    """Owns the latest reading and recent history of every known device.

    A single lock covers both maps, so ``latest`` and ``history`` for a device
    are always updated together and readers never see one without the other.
    """

    def __init__(
        self,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        reject_stale: bool = False,
    ) -> None:
        if history_limit < 1:
            raise ValueError("history_limit must be positive.")
        self.history_limit = history_limit
        self.reject_stale = reject_stale
        self._latest: Dict[str, SensorReading] = {}
        self._history: Dict[str, Deque[SensorReading]] = {}
        self._lock = Lock()

    def upsert(self, reading: SensorReading) -> bool:
        """Record ``reading`` as the device's latest and prepend it to history.

        Returns ``False`` only when ``reject_stale`` is enabled and the reading's
        device timestamp is not newer than the current latest.
        """
        device_id = reading.device_id
        with self._lock:
            current = self._latest.get(device_id)
            if (
                self.reject_stale
                and current is not None
                and reading.timestamp <= current.timestamp
            ):
                logger.info(
                    "Ignoring stale reading",
                    extra={"device_id": device_id, "reason": "timestamp not newer"},
                )
                return False

            self._latest[device_id] = reading
            history = self._history.get(device_id)
            if history is None:
                history = deque(maxlen=self.history_limit)
                self._history[device_id] = history
            history.appendleft(reading)
        return True

    def get_latest(self, device_id: str) -> Optional[SensorReading]:
        with self._lock:
            return self._latest.get(device_id)

    def get_all_latest(self) -> list[SensorReading]:
        with self._lock:
            return list(self._latest.values())

    def get_history(self, device_id: str) -> list[SensorReading]:
        """Return the device's readings newest-first, or an empty list."""
        with self._lock:
            history = self._history.get(device_id)
            if history is None:
                return []
            return list(history)

    def device_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._latest)


@lru_cache
def build_default_store() -> TelemetryStore:
    settings = get_settings()
    return TelemetryStore(
        history_limit=settings.history_limit,
        reject_stale=settings.reject_stale_readings,
    )
