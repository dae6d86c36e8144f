"""paho-mqtt subscriber that feeds broker messages into the ingestion adapter."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional

import paho.mqtt.client as mqtt

from services.topics import TopicRoutes
from settings import Settings

logger = logging.getLogger(__name__)

MessageHandler = Callable[[str, bytes], Any]


class MQTTSubscriber:
    """Owns the broker connection and forwards ``(topic, payload)`` pairs.

    Subscriptions are re-issued on every connect so they survive the client's
    automatic reconnects. Message handling runs on paho's network thread.
    """

    def __init__(
        self,
        handler: MessageHandler,
        topics: Iterable[str],
        host: str = "localhost",
        port: int = 1883,
        client_id: str = "auralink-backend-client",
        username: Optional[str] = None,
        password: Optional[str] = None,
        qos: int = 1,
        keepalive: int = 60,
    ) -> None:
        self.handler = handler
        self.topics = tuple(topics)
        self.host = host
        self.port = port
        self.qos = qos
        self.keepalive = keepalive
        self.connected = False

        self.client = mqtt.Client(
            callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
            client_id=f"{client_id}-in",
            clean_session=True,
        )
        if username:
            self.client.username_pw_set(username, password)
        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect
        self.client.on_message = self._on_message

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        handler: MessageHandler,
        routes: TopicRoutes,
    ) -> "MQTTSubscriber":
        return cls(
            handler=handler,
            topics=routes.subscriptions(),
            host=settings.mqtt_host,
            port=settings.mqtt_port,
            client_id=settings.mqtt_client_id,
            username=settings.mqtt_username,
            password=settings.mqtt_password,
        )

    @property
    def broker(self) -> str:
        return f"{self.host}:{self.port}"

    def start(self) -> None:
        logger.info("Connecting to MQTT broker", extra={"broker": self.broker})
        self.client.connect_async(self.host, self.port, keepalive=self.keepalive)
        self.client.loop_start()

    def stop(self) -> None:
        self.client.disconnect()
        self.client.loop_stop()
        self.connected = False
        logger.info("Disconnected from MQTT broker", extra={"broker": self.broker})

    def _on_connect(self, client, userdata, flags, reason_code, properties=None) -> None:
        if reason_code.is_failure:
            logger.error(
                "MQTT connection refused",
                extra={"broker": self.broker, "reason": str(reason_code)},
            )
            return
        self.connected = True
        client.subscribe([(topic, self.qos) for topic in self.topics])
        for topic in self.topics:
            logger.info("Subscribed to topic", extra={"topic": topic, "broker": self.broker})

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None) -> None:
        self.connected = False
        if reason_code.is_failure:
            logger.warning(
                "Unexpected MQTT disconnect",
                extra={"broker": self.broker, "reason": str(reason_code)},
            )

    def _on_message(self, client, userdata, message) -> None:
        # An exception escaping here would stop paho's network loop.
        try:
            self.handler(message.topic, message.payload)
        except Exception:
            logger.exception("MQTT message handler failed", extra={"topic": message.topic})
