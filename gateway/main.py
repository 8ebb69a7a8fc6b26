"""
Device Gateway — FastAPI application entry point.

Run with:
    uvicorn gateway.main:app --host 0.0.0.0 --port 3000
or:
    device-gateway
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gateway.api.deps import shutdown_hub
from gateway.api.routes import commands as commands_router
from gateway.api.routes import status as status_router
from gateway.api.routes import stress as stress_router
from gateway.api.routes import websocket as websocket_router
from gateway.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Log startup; on shutdown stop streaming and fail requests still in flight."""
    logger.info("Device gateway ready (device socket at %s)", settings.device_ws_path)
    try:
        yield
    finally:
        await shutdown_hub()
        logger.info("Device gateway stopped")


app = FastAPI(
    title="Device Gateway API",
    description="HTTP front end for a microcontroller attached over a single WebSocket.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(status_router.router, tags=["health"])
app.include_router(commands_router.router, tags=["device"])
app.include_router(stress_router.router, tags=["stress"])
app.include_router(websocket_router.router, tags=["websocket"])


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
