"""In-process publish/subscribe hub used to fan readings out to WebSocket clients."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from threading import Lock
from typing import Any, Dict, Protocol, Set

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 100


class BroadcastSink(Protocol):
    def publish(self, channel: str, payload: Any) -> None:
        ...


@dataclass(eq=False)
class Subscription:
    """A single consumer's queue on one channel, bound to its event loop."""

    channel: str
    loop: asyncio.AbstractEventLoop
    queue: asyncio.Queue = field(repr=False)

    async def get(self) -> Any:
        return await self.queue.get()


class BroadcastHub:
    """Fans payloads out to every subscriber of a channel.

    ``publish`` may be called from any thread (the MQTT network thread in
    production); delivery always happens on the subscriber's own loop.
    """

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self.queue_size = queue_size
        self._subscriptions: Dict[str, Set[Subscription]] = {}
        self._lock = Lock()

    def subscribe(self, channel: str) -> Subscription:
        """Register a subscriber; must be called from a running event loop."""
        subscription = Subscription(
            channel=channel,
            loop=asyncio.get_running_loop(),
            queue=asyncio.Queue(maxsize=self.queue_size),
        )
        with self._lock:
            self._subscriptions.setdefault(channel, set()).add(subscription)
            count = len(self._subscriptions[channel])
        logger.debug(
            "Subscriber added",
            extra={"channel": channel, "subscriber_count": count},
        )
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscriptions.get(subscription.channel)
            if subscribers is None:
                return
            subscribers.discard(subscription)
            if not subscribers:
                del self._subscriptions[subscription.channel]

    def subscriber_count(self, channel: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(channel, ()))

    def publish(self, channel: str, payload: Any) -> None:
        with self._lock:
            targets = list(self._subscriptions.get(channel, ()))

        for subscription in targets:
            try:
                subscription.loop.call_soon_threadsafe(self._deliver, subscription, payload)
            except RuntimeError:
                # The subscriber's loop has been closed.
                logger.info(
                    "Dropping subscriber with closed event loop",
                    extra={"channel": channel},
                )
                self.unsubscribe(subscription)

    @staticmethod
    def _deliver(subscription: Subscription, payload: Any) -> None:
        try:
            subscription.queue.put_nowait(payload)
        except asyncio.QueueFull:
            logger.warning(
                "Subscriber queue full; message dropped",
                extra={"channel": subscription.channel, "reason": "queue full"},
            )


@lru_cache
def build_default_hub() -> BroadcastHub:
    return BroadcastHub()
