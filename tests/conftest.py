"""Shared test fixtures and hypothesis strategies for the feedrelay test suite."""

from __future__ import annotations

import json
import os
from datetime import date, timedelta
from pathlib import Path
from urllib.parse import quote

import httpx
import pytest
from hypothesis import strategies as st

from feedrelay.config.settings import RelaySettings
from feedrelay.models.schemas import Endpoint, HistoryDay, ProbeResult


# ---------------------------------------------------------------------------
# Keep the developer's environment out of RelaySettings
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clear_relay_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("FEEDRELAY_"):
            monkeypatch.delenv(key)


# ---------------------------------------------------------------------------
# Configuration document fixtures
# ---------------------------------------------------------------------------

SAMPLE_DOCUMENT = {
    "cache_time": 7200,
    "api_site": {
        "alpha": {"name": "Alpha", "api": "https://alpha.test/api.php/provide/vod", "detail": "https://alpha.test"},
        "beta": {"name": "Beta", "api": "https://beta.test/api"},
        "gamma": {"name": "Gamma", "api": "https://old-proxy.test/?url=https%3A%2F%2Fgamma.test%2Fapi"},
    },
}


def write_config(path: Path, document: dict) -> Path:
    path.write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def sample_document() -> dict:
    return json.loads(json.dumps(SAMPLE_DOCUMENT))


@pytest.fixture
def config_file(tmp_path: Path, sample_document: dict) -> Path:
    return write_config(tmp_path / "luna-tv-config.json", sample_document)


@pytest.fixture
def settings(tmp_path: Path, config_file: Path) -> RelaySettings:
    """Test settings pointing at temporary files."""
    return RelaySettings(
        config_path=str(config_file),
        report_path=str(tmp_path / "report.md"),
        probe_timeout_seconds=0.5,
        probe_concurrency=4,
    )


# ---------------------------------------------------------------------------
# Upstream doubles
# ---------------------------------------------------------------------------

def status_transport(statuses: dict[str, int], default: int = 200) -> httpx.MockTransport:
    """Answer each URL with a fixed status; unknown URLs get ``default``."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(statuses.get(str(request.url), default), text="ok")

    return httpx.MockTransport(handler)


# ---------------------------------------------------------------------------
# History helpers
# ---------------------------------------------------------------------------

def make_history(
    pattern: list[bool | None],
    address: str = "https://alpha.test/api",
    name: str = "Alpha",
    start: date = date(2026, 1, 1),
) -> list[HistoryDay]:
    """One day per pattern item; None leaves the endpoint out of that day."""
    days = []
    for offset, outcome in enumerate(pattern):
        results = [] if outcome is None else [ProbeResult(name=name, address=address, success=outcome)]
        days.append(HistoryDay(date=start + timedelta(days=offset), results=results))
    return days


# ---------------------------------------------------------------------------
# Hypothesis strategies (reusable across property tests)
# ---------------------------------------------------------------------------

hosts = st.from_regex(r"[a-z]{3,10}\.(test|com|org|net)", fullmatch=True)
paths = st.from_regex(r"(/[a-zA-Z0-9_.~-]{0,8}){0,3}", fullmatch=True)
queries = st.one_of(
    st.just(""),
    st.from_regex(r"\?[a-z]{1,5}=[a-zA-Z0-9%&= ]{0,12}", fullmatch=True),
)

http_urls = st.builds(
    lambda scheme, host, path, query: f"{scheme}://{host}{path}{query}",
    st.sampled_from(["http", "https"]),
    hosts,
    paths,
    queries,
)

proxy_prefixes = st.one_of(
    hosts.map(lambda h: f"https://{h}/?url="),
    hosts.map(lambda h: f"https://{h}/proxy?token=abc&url="),
    hosts.map(lambda h: f"https://{h}/p/"),
)

malformed_addresses = st.sampled_from(["", "not a url", "ftp://files.test/x", "//no-scheme.test", "https://"])

# Addresses as they appear in real documents: plain, already proxied, or broken
addresses = st.one_of(
    http_urls,
    st.tuples(proxy_prefixes, http_urls).map(lambda t: t[0] + quote(t[1], safe="")),
    st.tuples(hosts, http_urls).map(lambda t: f"https://{t[0]}/?url={t[1]}"),
    malformed_addresses,
)

endpoint_names = st.text(
    alphabet=st.characters(blacklist_categories=("Cs",)),
    min_size=1,
    max_size=20,
)

endpoints = st.builds(Endpoint, name=endpoint_names, address=http_urls)

probe_results = st.builds(ProbeResult, name=endpoint_names, address=http_urls, success=st.booleans())

history_days = st.lists(
    st.builds(
        HistoryDay,
        date=st.dates(min_value=date(2020, 1, 1), max_value=date(2030, 12, 31)),
        results=st.lists(probe_results, max_size=5),
    ),
    max_size=35,
)
