"""Routing of inbound broker topics to handling kinds."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TopicKind(str, Enum):
    telemetry = "telemetry"
    status = "status"
    ignored = "ignored"


@dataclass(frozen=True)
class TopicRoutes:
    """Exact-match mapping from the watched inbound topics to a ``TopicKind``."""

    telemetry_topic: str
    status_topic: str

    def classify(self, topic: str) -> TopicKind:
        if topic == self.telemetry_topic:
            return TopicKind.telemetry
        if topic == self.status_topic:
            return TopicKind.status
        return TopicKind.ignored

    def subscriptions(self) -> tuple[str, str]:
        return (self.telemetry_topic, self.status_topic)
