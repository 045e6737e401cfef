"""Command-line entry point for a single health-check run.

Usage::

    feedrelay-check --config luna-tv-config.json --report report.md

Exit codes: 0 on success (even if every endpoint is down), 2 when the
configuration document cannot be used.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from feedrelay.config.settings import RelaySettings
from feedrelay.health.runner import HealthCheckRunner
from feedrelay.logging_config import configure_logging
from feedrelay.middleware.error_handler import ConfigParseError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="feedrelay-check",
        description="Probe every configured endpoint and update the health report.",
    )
    parser.add_argument("--config", dest="config_path", help="configuration document (JSON)")
    parser.add_argument("--report", dest="report_path", help="markdown report to read and rewrite")
    parser.add_argument("--concurrency", dest="probe_concurrency", type=int, help="probes in flight")
    parser.add_argument("--timeout", dest="probe_timeout_seconds", type=float, help="per-probe timeout in seconds")
    parser.add_argument("--max-days", dest="max_history_days", type=int, help="history days to keep")
    parser.add_argument("--log-level", dest="log_level", help="DEBUG, INFO, WARNING or ERROR")
    return parser


def build_settings(args: argparse.Namespace) -> RelaySettings:
    """Environment settings with command-line values taking precedence.

    Raises ``pydantic.ValidationError`` when a value is out of range.
    """
    overrides = {key: value for key, value in vars(args).items() if value is not None}
    return RelaySettings(**overrides)


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in exc.errors()
    )


def main(argv: list[str] | None = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    try:
        settings = build_settings(args)
    except ValidationError as exc:
        parser.error(_describe(exc))
    configure_logging(settings.log_level)

    try:
        asyncio.run(HealthCheckRunner(settings).run())
    except ConfigParseError as exc:
        logger.error("Health check aborted: %s", exc.message, extra={"error_reason": exc.details})
        return EXIT_CONFIG_ERROR
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
