"""Service health endpoint.

``GET /health`` reports the loaded configuration revision and endpoint count.
It never contacts upstreams; endpoint availability lives in the health-check
report.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from feedrelay.models.responses import ApiResponse


def create_health_router(*, config_store: Any = None) -> APIRouter:
    """Factory that creates the health router with injected dependencies."""

    health_router = APIRouter(tags=["health"])

    @health_router.get("/health")
    async def health() -> dict:
        """Service health with configuration details."""
        snapshot = config_store.snapshot if config_store else None

        return ApiResponse(
            success=True,
            data={
                "status": "healthy",
                "config_revision": snapshot.revision if snapshot else None,
                "endpoints": len(snapshot.endpoints) if snapshot else 0,
            },
        ).model_dump()

    return health_router
