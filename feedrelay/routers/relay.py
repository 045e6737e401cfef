"""Relay entry point.

All traffic hits ``/`` and is dispatched on query parameters, first match wins:

1. ``url``: pass the request through to that URL
2. ``config=0``: raw configuration document
3. ``config=1``: configuration with every ``api`` routed through ``prefix``
   (default: this relay's origin + ``/?url=``)
4. ``encode=base58`` alongside ``config``: the same JSON, Base58-encoded, as text/plain
5. anything else: usage payload
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from feedrelay.codec import base58
from feedrelay.middleware.error_handler import InvalidParameterError
from feedrelay.models.responses import ApiResponse
from feedrelay.proxy.rewriter import default_prefix, rewrite_document

logger = logging.getLogger(__name__)

RELAY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

USAGE = {
    "url": "Relay the request to this URL and return the upstream response",
    "config": "0 = raw configuration, 1 = configuration rewritten through the proxy prefix",
    "encode": "base58 = Base58-encode the configuration JSON (text/plain)",
    "prefix": "Override the rewrite prefix used by config=1",
}


def request_origin(request: Request) -> str:
    """Scheme and host the client used to reach this relay."""
    return f"{request.url.scheme}://{request.url.netloc}"


def create_relay_router(
    *,
    config_store: Any = None,
    relay: Any = None,
) -> APIRouter:
    """Factory that creates the relay router with injected dependencies.

    Parameters
    ----------
    config_store:
        ConfigStore supplying the configuration document.
    relay:
        UpstreamRelay used for ``url`` pass-through.
    """
    relay_router = APIRouter(tags=["relay"])

    @relay_router.api_route("/", methods=RELAY_METHODS)
    async def dispatch(request: Request) -> Response:
        params = request.query_params

        if "url" in params:
            body = await request.body()
            return await relay.forward(
                request.method,
                params["url"],
                request.headers.items(),
                body,
            )

        if "config" in params:
            return _config_response(request)

        return JSONResponse(ApiResponse(success=True, data={"usage": USAGE}).model_dump())

    def _config_response(request: Request) -> Response:
        params = request.query_params
        mode = params["config"]
        encoding = params.get("encode")

        if mode not in ("0", "1"):
            raise InvalidParameterError("'config' must be 0 or 1", config=mode)
        if encoding is not None and encoding != "base58":
            raise InvalidParameterError("'encode' only supports base58", encode=encoding)

        snapshot = config_store.refresh()
        headers = {"X-Config-Revision": snapshot.revision}

        if mode == "0":
            payload = snapshot.document
        else:
            prefix = params.get("prefix") or default_prefix(request_origin(request))
            payload, warnings = rewrite_document(snapshot.document, prefix)
            if warnings:
                headers["X-Rewrite-Warnings"] = str(len(warnings))

        if encoding == "base58":
            text = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
            return PlainTextResponse(base58.encode(text), headers=headers)

        return JSONResponse(payload, headers=headers)

    return relay_router
