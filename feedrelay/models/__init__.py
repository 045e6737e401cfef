"""Public models for the relay and health-check paths."""

from feedrelay.models.responses import ApiResponse
from feedrelay.models.schemas import (
    Endpoint,
    EndpointStats,
    EndpointStatus,
    HistoryDay,
    ProbeResult,
)

__all__ = [
    "ApiResponse",
    "Endpoint",
    "EndpointStats",
    "EndpointStatus",
    "HistoryDay",
    "ProbeResult",
]
