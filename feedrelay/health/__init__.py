"""Health-check path: probes, rolling statistics and the markdown report."""

from feedrelay.health.aggregator import (
    append_day,
    compute_stats,
    duplicate_addresses,
    group_by_address,
    status_counts,
)
from feedrelay.health.prober import EndpointProber
from feedrelay.health.report import load_history, parse_history, render
from feedrelay.health.runner import HealthCheckRunner, RunOutcome

__all__ = [
    "EndpointProber",
    "HealthCheckRunner",
    "RunOutcome",
    "append_day",
    "compute_stats",
    "duplicate_addresses",
    "group_by_address",
    "load_history",
    "parse_history",
    "render",
    "status_counts",
]
