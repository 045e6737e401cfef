"""FastAPI application entry point with lifespan management.

Startup: load the configuration document, open the shared upstream client,
mount the relay and health routers.
Shutdown: close the upstream client.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from feedrelay.config.settings import RelaySettings
from feedrelay.config.store import ConfigStore
from feedrelay.logging_config import configure_logging
from feedrelay.middleware.error_handler import register_error_handlers
from feedrelay.middleware.request_id import RequestIdMiddleware
from feedrelay.proxy.relay import UpstreamRelay
from feedrelay.routers.health import create_health_router
from feedrelay.routers.relay import create_relay_router

logger = logging.getLogger(__name__)


def create_app(
    settings: RelaySettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    settings:
        Service settings; read from the environment when omitted.
    transport:
        Optional httpx transport for upstream calls (tests use a mock).
    """
    settings = settings or RelaySettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan: startup and shutdown logic."""
        logger.info("Starting relay on port %d", settings.port)

        config_store = ConfigStore(settings.config_path)
        config_store.load()

        client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.upstream_timeout_seconds),
            follow_redirects=False,
            transport=transport,
        )
        relay = UpstreamRelay(client, block_private_targets=settings.block_private_targets)

        # Mount routers
        app.include_router(create_health_router(config_store=config_store))
        app.include_router(create_relay_router(config_store=config_store, relay=relay))

        app.state.settings = settings
        app.state.config_store = config_store

        logger.info("Relay started successfully")

        yield

        logger.info("Shutting down relay…")
        await client.aclose()
        logger.info("Relay shut down")

    app = FastAPI(
        title="feedrelay",
        version="1.0.0",
        lifespan=lifespan,
    )

    register_error_handlers(app)

    # Starlette applies middleware in reverse order of add_middleware calls
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Config-Revision", "X-Rewrite-Warnings"],
    )
    app.add_middleware(RequestIdMiddleware)

    return app


def serve() -> None:
    """Console entry point: run the relay with uvicorn."""
    settings = RelaySettings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port, log_config=None)


app = create_app()
