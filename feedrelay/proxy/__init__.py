"""Proxy package: prefix rewriting and upstream pass-through."""

from feedrelay.proxy.relay import UpstreamRelay
from feedrelay.proxy.rewriter import (
    PROXY_MARKER,
    RewriteResult,
    RewriteWarning,
    default_prefix,
    rewrite,
    rewrite_document,
)

__all__ = [
    "PROXY_MARKER",
    "RewriteResult",
    "RewriteWarning",
    "UpstreamRelay",
    "default_prefix",
    "rewrite",
    "rewrite_document",
]
