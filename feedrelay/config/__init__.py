"""Configuration module: service settings and the endpoint document store."""

from feedrelay.config.settings import RelaySettings
from feedrelay.config.store import ConfigSnapshot, ConfigStore, parse_document

__all__ = [
    "ConfigSnapshot",
    "ConfigStore",
    "RelaySettings",
    "parse_document",
]
