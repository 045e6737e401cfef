"""Rolling per-endpoint statistics over the probe history.

Nothing here keeps state between runs: statistics are rebuilt from the full
history every time, so a hand-edited history heals itself on the next run.

Streak rule: scanning days oldest to newest, a success resets the counter, a
failure increments it, and a day without a result for the address leaves it
unchanged.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence

from feedrelay.models.schemas import (
    Endpoint,
    EndpointStats,
    EndpointStatus,
    HistoryDay,
    ProbeResult,
)

MAX_HISTORY_DAYS = 30
ALERT_STREAK = 3


def group_by_address(endpoints: Iterable[Endpoint]) -> dict[str, int]:
    """Count configured endpoints per address."""
    return dict(Counter(endpoint.address for endpoint in endpoints))


def duplicate_addresses(endpoints: Iterable[Endpoint]) -> set[str]:
    """Addresses configured more than once."""
    return {address for address, count in group_by_address(endpoints).items() if count > 1}


def append_day(
    history: Sequence[HistoryDay],
    day: HistoryDay,
    max_days: int = MAX_HISTORY_DAYS,
) -> list[HistoryDay]:
    """Append ``day`` and keep only the newest ``max_days`` entries."""
    updated = [*history, day]
    return updated[-max_days:]


def _status(stats: EndpointStats, current: ProbeResult | None, alert_streak: int) -> EndpointStatus:
    if stats.duplicate:
        return EndpointStatus.DUPLICATE
    if stats.fail_streak >= alert_streak:
        return EndpointStatus.ALERT
    if current is not None and current.success:
        return EndpointStatus.OK
    return EndpointStatus.FAIL


def compute_stats(
    endpoints: Sequence[Endpoint],
    history: Sequence[HistoryDay],
    current_results: Sequence[ProbeResult],
    alert_streak: int = ALERT_STREAK,
) -> dict[str, EndpointStats]:
    """Build statistics keyed by address for every configured endpoint.

    ``history`` should already include the current run's day. Endpoints that
    share an address share one entry; the first configured name is kept.
    """
    duplicates = duplicate_addresses(endpoints)
    current_by_address: dict[str, ProbeResult] = {}
    for result in current_results:
        current_by_address.setdefault(result.address, result)

    stats: dict[str, EndpointStats] = {}
    for endpoint in endpoints:
        if endpoint.address in stats:
            continue

        entry = EndpointStats(
            name=endpoint.name,
            address=endpoint.address,
            duplicate=endpoint.address in duplicates,
        )
        for day in history:
            result = day.find(endpoint.address)
            if result is None:
                continue
            if result.success:
                entry.ok += 1
                entry.fail_streak = 0
            else:
                entry.fail += 1
                entry.fail_streak += 1

        entry.status = _status(entry, current_by_address.get(endpoint.address), alert_streak)
        stats[endpoint.address] = entry

    return stats


def status_counts(stats: Iterable[EndpointStats]) -> dict[EndpointStatus, int]:
    """Number of addresses in each status bucket, every bucket present."""
    counts = {status: 0 for status in EndpointStatus}
    for entry in stats:
        counts[entry.status] += 1
    return counts
