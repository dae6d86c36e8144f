from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import router
from app.ws import router as ws_router
from logging_config import configure_logging
from services.broadcast import build_default_hub
from services.ingestion import build_default_adapter
from services.mqtt_client import MQTTSubscriber
from services.telemetry_store import build_default_store
from settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    adapter = build_default_adapter()
    subscriber = None
    if settings.mqtt_enabled:
        subscriber = MQTTSubscriber.from_settings(
            settings, handler=adapter.on_message, routes=adapter.routes
        )
        subscriber.start()
    else:
        logger.info("MQTT ingestion disabled; serving queries only")
    app.state.mqtt = subscriber
    try:
        yield
    finally:
        if subscriber is not None:
            subscriber.stop()
        app.state.mqtt = None
        build_default_adapter.cache_clear()
        build_default_hub.cache_clear()
        build_default_store.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="AuraLink Telemetry Hub",
        description="Ingests sensor telemetry over MQTT and rebroadcasts it over WebSocket.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.include_router(router)
    app.include_router(ws_router)
    return app

app = create_app()
