"""HTTP routers."""

from feedrelay.routers.health import create_health_router
from feedrelay.routers.relay import create_relay_router

__all__ = ["create_health_router", "create_relay_router"]
