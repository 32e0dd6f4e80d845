"""FastAPI server exposing the live usage snapshot and session statistics."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.usage_routes import usage_router
from src.config import settings
from src.usage_tracker.client import UsageClient
from src.usage_tracker.poller import UsagePoller

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the usage poller for the lifetime of the app."""
    client = UsageClient()
    poller = UsagePoller(client, interval=float(settings.usage_poll_interval))
    app.state.usage_client = client
    app.state.usage_poller = poller

    poller.start()
    logger.info(
        "Usage poller running (url=%s, interval=%ds)",
        settings.usage_api_url,
        settings.usage_poll_interval,
    )

    yield

    await poller.aclose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Usage Tracker",
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

    app.include_router(usage_router, prefix="/api")

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
