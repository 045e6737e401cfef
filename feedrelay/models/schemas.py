"""Endpoint, probe and history models.

``Endpoint``, ``ProbeResult`` and ``HistoryDay`` are validated Pydantic models
because they cross a persistence boundary (configuration document, report
history block). The persisted key for an address is ``api``; Python code uses
``address``. ``EndpointStats`` is derived on every run and never persisted.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EndpointStatus(str, Enum):
    """Health bucket of an endpoint after a run, highest precedence first."""

    DUPLICATE = "duplicate"
    ALERT = "alert"
    OK = "ok"
    FAIL = "fail"


class Endpoint(BaseModel):
    """One configured video-search API."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    address: str = Field(alias="api")


class ProbeResult(BaseModel):
    """Outcome of a single reachability probe."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    address: str = Field(alias="api")
    success: bool


class HistoryDay(BaseModel):
    """All probe results recorded for one calendar day (UTC)."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    results: list[ProbeResult] = Field(default_factory=list)

    def find(self, address: str) -> ProbeResult | None:
        """Return the first result recorded for ``address`` on this day."""
        for result in self.results:
            if result.address == address:
                return result
        return None


@dataclass
class EndpointStats:
    """Rolling statistics for one address, recomputed from history."""

    name: str
    address: str
    ok: int = 0
    fail: int = 0
    fail_streak: int = 0
    duplicate: bool = False
    status: EndpointStatus = EndpointStatus.FAIL

    @property
    def total(self) -> int:
        return self.ok + self.fail

    @property
    def availability(self) -> float | None:
        """Percentage of successful probes, or None when nothing was recorded."""
        if self.total == 0:
            return None
        return self.ok / self.total * 100
