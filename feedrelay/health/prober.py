"""Endpoint reachability probes.

One GET per endpoint. A probe succeeds only on HTTP 200 within the timeout;
every other outcome, including exceptions, is recorded as ``success=False``.
Probes run concurrently under a semaphore and never cancel one another.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence

import httpx

from feedrelay.models.schemas import Endpoint, ProbeResult

logger = logging.getLogger(__name__)


class EndpointProber:
    """Runs bounded-parallel probes over a list of endpoints.

    Parameters
    ----------
    client:
        HTTP client shared by all probes of a run.
    timeout_seconds:
        Hard limit for a single probe, connection setup and body included.
    max_concurrency:
        Maximum number of probes in flight.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        timeout_seconds: float = 10.0,
        max_concurrency: int = 10,
    ) -> None:
        self._client = client
        self._timeout_seconds = timeout_seconds
        self._max_concurrency = max_concurrency

    async def probe(self, endpoint: Endpoint) -> ProbeResult:
        """Probe one endpoint; never raises."""
        start = time.monotonic()
        status_code: int | None = None
        reason: str | None = None

        try:
            response = await asyncio.wait_for(
                self._client.get(endpoint.address),
                timeout=self._timeout_seconds,
            )
            status_code = response.status_code
            if status_code != 200:
                reason = f"HTTP {status_code}"
        except asyncio.TimeoutError:
            reason = f"timed out after {self._timeout_seconds}s"
        except httpx.HTTPError as exc:
            reason = f"{exc.__class__.__name__}: {exc}"
        except Exception as exc:  # noqa: BLE001
            reason = f"{exc.__class__.__name__}: {exc}"

        duration_ms = round((time.monotonic() - start) * 1000, 2)
        success = reason is None
        if success:
            logger.debug(
                "Probe ok: %s",
                endpoint.name,
                extra={
                    "endpoint_name": endpoint.name,
                    "target_url": endpoint.address,
                    "status_code": status_code,
                    "duration_ms": duration_ms,
                },
            )
        else:
            logger.warning(
                "Probe failed: %s (%s)",
                endpoint.name,
                reason,
                extra={
                    "endpoint_name": endpoint.name,
                    "target_url": endpoint.address,
                    "status_code": status_code,
                    "duration_ms": duration_ms,
                    "error_reason": reason,
                },
            )

        return ProbeResult(name=endpoint.name, address=endpoint.address, success=success)

    async def probe_all(self, endpoints: Sequence[Endpoint]) -> list[ProbeResult]:
        """Probe every endpoint; results come back in input order."""
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _bounded(endpoint: Endpoint) -> ProbeResult:
            async with semaphore:
                return await self.probe(endpoint)

        return list(await asyncio.gather(*(_bounded(e) for e in endpoints)))
