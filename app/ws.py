from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from services.broadcast import BroadcastHub, Subscription, build_default_hub
from settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


def get_hub() -> BroadcastHub:
    return build_default_hub()


def _resolve_channel(name: str) -> str | None:
    settings = get_settings()
    channels = {
        "sensors": settings.sensor_channel,
        "status": settings.status_channel,
    }
    return channels.get(name)


async def _forward(websocket: WebSocket, subscription: Subscription) -> None:
    try:
        while True:
            payload = await subscription.get()
            if isinstance(payload, str):
                await websocket.send_text(payload)
            else:
                await websocket.send_json(payload)
    except WebSocketDisconnect:
        return


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    # Inbound client frames are not part of the protocol and are discarded.
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/ws/{channel_name}")
async def stream_channel(
    websocket: WebSocket,
    channel_name: str,
    hub: BroadcastHub = Depends(get_hub),
) -> None:
    channel = _resolve_channel(channel_name)
    if channel is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    subscription = hub.subscribe(channel)
    logger.info(
        "WebSocket client subscribed",
        extra={"channel": channel, "subscriber_count": hub.subscriber_count(channel)},
    )

    forwarder = asyncio.create_task(_forward(websocket, subscription))
    try:
        await _wait_for_disconnect(websocket)
    except WebSocketDisconnect:
        pass
    finally:
        forwarder.cancel()
        await asyncio.gather(forwarder, return_exceptions=True)
        hub.unsubscribe(subscription)
        logger.info("WebSocket client disconnected", extra={"channel": channel})
