"""Pydantic Settings for the relay service and the health-check runner.

All environment variables use the FEEDRELAY_ prefix.
Example: FEEDRELAY_PORT=8080, FEEDRELAY_CONFIG_PATH=/srv/luna-tv-config.json
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class RelaySettings(BaseSettings):
    """Service and monitoring configuration validated from environment variables."""

    # Service
    port: int = 8000
    log_level: str = "INFO"
    cors_allow_origins: list[str] = ["*"]

    # Configuration document (endpoint list)
    config_path: str = "luna-tv-config.json"

    # Upstream relay
    upstream_timeout_seconds: float = Field(default=30.0, gt=0)
    block_private_targets: bool = False  # Refuse relay targets in private networks

    # Health check
    report_path: str = "report.md"
    max_history_days: int = Field(default=30, ge=1)
    alert_streak: int = Field(default=3, ge=1)  # Consecutive failures before ALERT
    probe_timeout_seconds: float = Field(default=10.0, gt=0)
    probe_concurrency: int = Field(default=10, ge=1)
    report_timezone: str = "Asia/Shanghai"

    model_config = {"env_prefix": "FEEDRELAY_"}
