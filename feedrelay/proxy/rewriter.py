"""Proxy prefix rewriting for configuration documents.

Every ``api`` address is turned into ``prefix + quote(target)`` where the
target is the address with any earlier proxy prefix removed:

- an address that already starts with ``prefix`` keeps only the remainder,
  provided the remainder decodes to an http(s) URL;
- otherwise an address containing ``?url=`` keeps only what follows the
  first marker, whatever proxy came before it;
- otherwise the address itself is the target.

Extracted targets are percent-decoded before being re-encoded, so applying
the same prefix twice gives the same document. Entries whose target is not an
http(s) URL are left untouched and reported as ``RewriteWarning``.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import quote, unquote_to_bytes

from feedrelay.validators.url_validator import is_http_url

logger = logging.getLogger(__name__)

PROXY_MARKER = "?url="

# Characters encodeURIComponent leaves alone besides alphanumerics and "-_.~"
_QUERY_SAFE = "!*'()"


@dataclass(frozen=True)
class RewriteWarning:
    """An entry that was passed through unrewritten."""

    key: str
    address: object
    reason: str


@dataclass
class RewriteResult:
    """Rewritten ``api_site`` mapping plus the entries that were skipped."""

    sites: dict
    warnings: list[RewriteWarning] = field(default_factory=list)


def default_prefix(origin: str) -> str:
    """Build the prefix that routes through the relay serving ``origin``."""
    return origin.rstrip("/") + "/" + PROXY_MARKER


def encode_for_query(target: str | bytes) -> str:
    """Percent-encode ``target`` for use as a query parameter value."""
    return quote(target, safe=_QUERY_SAFE)


def _as_text(target: bytes) -> str:
    # Only for validation and messages; the bytes are what gets re-encoded
    return target.decode("utf-8", errors="replace")


def original_target(address: str, prefix: str) -> bytes:
    """Strip any proxy prefix from ``address`` and return the upstream URL.

    The result is raw bytes so that percent escapes which are not UTF-8
    (GBK query values, for instance) survive re-encoding unchanged. The own
    prefix is only stripped when what follows it decodes to an http(s) URL.
    """
    if prefix and address.startswith(prefix):
        target = unquote_to_bytes(address[len(prefix):])
        if is_http_url(_as_text(target)):
            return target
    marker_at = address.find(PROXY_MARKER)
    if marker_at != -1:
        return unquote_to_bytes(address[marker_at + len(PROXY_MARKER):])
    return address.encode("utf-8")


def rewrite_address(address: str, prefix: str) -> str:
    """Rewrite a single address, raising ``ValueError`` for a non-http(s) target."""
    target = original_target(address, prefix)
    if not is_http_url(_as_text(target)):
        raise ValueError(f"not an http(s) URL: {_as_text(target)!r}")
    return prefix + encode_for_query(target)


def rewrite(sites: Mapping[str, object], prefix: str) -> RewriteResult:
    """Rewrite the ``api`` field of every entry in an ``api_site`` mapping.

    Entries are copied; fields other than ``api`` are passed through as-is.
    A bad entry never aborts the batch.
    """
    rewritten: dict = {}
    warnings: list[RewriteWarning] = []

    for key, entry in sites.items():
        if not isinstance(entry, Mapping):
            warnings.append(RewriteWarning(str(key), None, "entry is not an object"))
            rewritten[key] = copy.deepcopy(entry)
            continue

        new_entry = copy.deepcopy(dict(entry))
        address = entry.get("api")
        try:
            if not isinstance(address, str):
                raise ValueError("missing or non-string 'api' field")
            new_entry["api"] = rewrite_address(address, prefix)
        except ValueError as exc:
            warnings.append(RewriteWarning(str(key), address, str(exc)))
            logger.warning(
                "Left api_site entry '%s' unrewritten: %s",
                key,
                exc,
                extra={"endpoint_name": entry.get("name"), "error_reason": str(exc)},
            )
        rewritten[key] = new_entry

    return RewriteResult(sites=rewritten, warnings=warnings)


def rewrite_document(document: Mapping[str, object], prefix: str) -> tuple[dict, list[RewriteWarning]]:
    """Return a copy of the whole document with ``api_site`` rewritten."""
    result = rewrite(document.get("api_site") or {}, prefix)  # type: ignore[arg-type]
    new_document = {
        key: (result.sites if key == "api_site" else copy.deepcopy(value))
        for key, value in document.items()
    }
    return new_document, result.warnings
