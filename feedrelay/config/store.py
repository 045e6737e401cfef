"""Configuration document store.

The document is a JSON object whose ``api_site`` member maps arbitrary keys
to ``{name, api, ...}`` entries. It is always replaced wholesale: ``load()``
re-reads and re-validates the whole file, ``refresh()`` does the same only
when the SHA-256 digest of the file contents differs from the current
revision. Readers hold on to a ``ConfigSnapshot``, which never changes after
it is built.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from feedrelay.middleware.error_handler import ConfigParseError
from feedrelay.models.schemas import Endpoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigSnapshot:
    """One parsed revision of the configuration document."""

    document: dict
    endpoints: tuple[Endpoint, ...]
    revision: str  # SHA-256 hex digest of the raw bytes

    @property
    def sites(self) -> dict:
        return self.document["api_site"]


def parse_document(raw: bytes) -> ConfigSnapshot:
    """Validate raw document bytes and build a snapshot.

    Raises ``ConfigParseError`` on invalid JSON, a missing or non-object
    ``api_site`` member, or any entry without string ``name``/``api`` fields.
    """
    revision = hashlib.sha256(raw).hexdigest()

    try:
        document = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ConfigParseError(f"Configuration is not valid JSON: {exc}") from exc

    if not isinstance(document, dict) or not isinstance(document.get("api_site"), dict):
        raise ConfigParseError("Configuration must be an object with an 'api_site' mapping")

    endpoints: list[Endpoint] = []
    for key, entry in document["api_site"].items():
        try:
            endpoints.append(Endpoint.model_validate(entry))
        except ValidationError as exc:
            raise ConfigParseError(
                f"Invalid api_site entry '{key}'",
                key=key,
                errors=[err["msg"] for err in exc.errors()],
            ) from exc

    return ConfigSnapshot(document=document, endpoints=tuple(endpoints), revision=revision)


class ConfigStore:
    """Loads the endpoint list from disk and swaps in new revisions on change."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._snapshot: ConfigSnapshot | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def snapshot(self) -> ConfigSnapshot:
        """Current snapshot, loading the document on first access."""
        if self._snapshot is None:
            return self.load()
        return self._snapshot

    def _read(self) -> bytes:
        try:
            return self._path.read_bytes()
        except OSError as exc:
            raise ConfigParseError(
                f"Cannot read configuration at {self._path}: {exc}"
            ) from exc

    def load(self) -> ConfigSnapshot:
        """Read and validate the document unconditionally."""
        snapshot = parse_document(self._read())
        self._snapshot = snapshot
        logger.info(
            "Loaded configuration from %s (%d endpoints)",
            self._path,
            len(snapshot.endpoints),
            extra={"config_revision": snapshot.revision},
        )
        return snapshot

    def refresh(self) -> ConfigSnapshot:
        """Reload only if the file contents changed since the last load.

        A malformed new revision raises ``ConfigParseError`` and leaves the
        previous snapshot in place.
        """
        raw = self._read()
        revision = hashlib.sha256(raw).hexdigest()
        if self._snapshot is not None and self._snapshot.revision == revision:
            return self._snapshot

        snapshot = parse_document(raw)
        if self._snapshot is not None:
            logger.info(
                "Configuration changed, reloaded %d endpoints",
                len(snapshot.endpoints),
                extra={"config_revision": snapshot.revision},
            )
        self._snapshot = snapshot
        return snapshot
