"""One health-check run, end to end.

load configuration -> read previous history -> probe -> append today's day
-> trim -> compute statistics -> render -> write report.

Only one run may be active at a time; scheduling runs so they never overlap
is the caller's job (cron, CI schedule). No file lock is taken:
the report is read once at the start and replaced atomically at the end.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from zoneinfo import ZoneInfo

import httpx

from feedrelay.config.settings import RelaySettings
from feedrelay.config.store import ConfigStore
from feedrelay.health.aggregator import append_day, compute_stats, duplicate_addresses
from feedrelay.health.prober import EndpointProber
from feedrelay.health.report import load_history, render
from feedrelay.models.schemas import EndpointStats, HistoryDay, ProbeResult

logger = logging.getLogger(__name__)


@dataclass
class RunOutcome:
    """Everything a run produced, for callers and tests."""

    results: list[ProbeResult]
    history: list[HistoryDay]
    stats: dict[str, EndpointStats]
    report: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def write_report(path: Path, text: str) -> None:
    """Replace the report atomically so readers never see a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    tmp_path.write_text(text, encoding="utf-8")
    os.replace(tmp_path, path)


class HealthCheckRunner:
    """Runs the monitoring path once.

    Parameters
    ----------
    settings:
        Paths, limits and timeouts for the run.
    transport:
        Optional httpx transport, used by tests to stand in for the network.
    clock:
        Returns the current time as an aware datetime.
    """

    def __init__(
        self,
        settings: RelaySettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._clock = clock

    async def run(self) -> RunOutcome:
        """Execute the run and persist the report.

        Raises ``ConfigParseError`` before any probe is sent if the
        configuration is unusable. Probe failures never abort the run.
        """
        settings = self._settings
        snapshot = ConfigStore(settings.config_path).load()
        endpoints = snapshot.endpoints
        report_path = Path(settings.report_path)

        history = load_history(report_path)
        now = self._clock()

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(settings.probe_timeout_seconds),
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                prober = EndpointProber(
                    client,
                    timeout_seconds=settings.probe_timeout_seconds,
                    max_concurrency=settings.probe_concurrency,
                )
                results = await prober.probe_all(endpoints)
        except Exception:
            logger.exception("Probing aborted, recording every endpoint as failed")
            results = [
                ProbeResult(name=e.name, address=e.address, success=False) for e in endpoints
            ]

        today = HistoryDay(date=now.astimezone(timezone.utc).date(), results=results)
        history = append_day(history, today, settings.max_history_days)
        stats = compute_stats(endpoints, history, results, settings.alert_streak)

        report = render(
            endpoints,
            stats,
            history,
            generated_at=now.astimezone(ZoneInfo(settings.report_timezone)),
            max_days=settings.max_history_days,
        )
        write_report(report_path, report)

        logger.info(
            "Health check complete: %d endpoints, %d duplicate addresses, %d reachable",
            len(endpoints),
            len(duplicate_addresses(endpoints)),
            sum(1 for r in results if r.success),
            extra={"config_revision": snapshot.revision},
        )
        return RunOutcome(results=results, history=history, stats=stats, report=report)
