"""Markdown health report with an embedded history block.

The report is both the published status page and the only durable state of
the health check. The history travels in the last section as pretty-printed
JSON inside a fence opened by a line of three backticks followed by ``json``;
``HISTORY_BLOCK`` is the single extraction rule for reading it back and must
keep matching reports written by earlier versions.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping, Sequence
from datetime import datetime
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from feedrelay.health.aggregator import duplicate_addresses, status_counts
from feedrelay.middleware.error_handler import HistoryParseError
from feedrelay.models.schemas import Endpoint, EndpointStats, EndpointStatus, HistoryDay

logger = logging.getLogger(__name__)

HISTORY_BLOCK = re.compile(r"```json\n([\s\S]+?)\n```")

STATUS_GLYPHS = {
    EndpointStatus.OK: "✅",
    EndpointStatus.FAIL: "❌",
    EndpointStatus.ALERT: "🚨",
    EndpointStatus.DUPLICATE: "🔁",
}

_history_adapter = TypeAdapter(list[HistoryDay])


def _cell(value: object) -> str:
    """Flatten a value into a single markdown table cell."""
    text = " ".join(str(value).splitlines())
    return text.replace("|", "\\|")


def format_availability(stats: EndpointStats) -> str:
    availability = stats.availability
    if availability is None:
        return "-"
    return f"{availability:.1f}%"


def serialize_history(history: Sequence[HistoryDay]) -> str:
    return json.dumps(
        _history_adapter.dump_python(list(history), mode="json", by_alias=True),
        indent=2,
        ensure_ascii=False,
    )


def render(
    endpoints: Sequence[Endpoint],
    stats: Mapping[str, EndpointStats],
    history: Sequence[HistoryDay],
    generated_at: datetime,
    max_days: int = 30,
) -> str:
    """Render the report for one run.

    ``stats`` is keyed by address as returned by ``compute_stats``; one table
    row is written per configured endpoint, in configuration order.
    """
    row_stats = [stats[endpoint.address] for endpoint in endpoints]
    counts = status_counts(row_stats)
    duplicates = len(duplicate_addresses(endpoints))

    lines = [
        "# API Health Report",
        "",
        f"Last updated: {generated_at.strftime('%Y-%m-%d %H:%M %Z').strip()}",
        "",
        f"**Total endpoints:** {len(endpoints)}  |  **Duplicate addresses:** {duplicates}",
        "",
        "  |  ".join(
            f"{STATUS_GLYPHS[status]} {status.name}: {counts[status]}"
            for status in EndpointStatus
        ),
        "",
        f"## Endpoint health over the last {max_days} days",
        "",
        "| Status | Name | Address | OK | Fail | Availability | Fail streak |",
        "|--------|------|---------|---:|-----:|-------------:|------------:|",
    ]

    for endpoint, entry in zip(endpoints, row_stats):
        lines.append(
            f"| {STATUS_GLYPHS[entry.status]} | {_cell(endpoint.name)} | {_cell(endpoint.address)} "
            f"| {entry.ok} | {entry.fail} | {format_availability(entry)} | {entry.fail_streak} |"
        )

    lines += [
        "",
        "## History (JSON)",
        "```json",
        serialize_history(history),
        "```",
        "",
    ]
    return "\n".join(lines)


def parse_history(text: str) -> list[HistoryDay]:
    """Extract the history block from a rendered report.

    Raises ``HistoryParseError`` when the block is missing or its content is
    not a list of history days.
    """
    match = HISTORY_BLOCK.search(text)
    if match is None:
        raise HistoryParseError("Report has no JSON history block")

    try:
        return _history_adapter.validate_json(match.group(1))
    except ValidationError as exc:
        raise HistoryParseError(
            "Report history block is malformed",
            errors=exc.error_count(),
        ) from exc


def load_history(path: str | Path) -> list[HistoryDay]:
    """Read the history from a previous report, or start empty.

    A missing, unreadable or malformed report is not fatal: the run starts a
    fresh history and says so in the log.
    """
    report_path = Path(path)
    if not report_path.exists():
        logger.info("No previous report at %s, starting a new history", report_path)
        return []

    try:
        return parse_history(report_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, HistoryParseError) as exc:
        logger.warning(
            "Could not read history from %s, starting a new history: %s",
            report_path,
            exc,
            extra={"error_reason": str(exc)},
        )
        return []
