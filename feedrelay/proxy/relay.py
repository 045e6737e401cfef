"""Upstream pass-through for the ``url`` query parameter.

The request method, body and end-to-end headers are forwarded to the target;
the upstream status, headers and raw (still content-encoded) body are streamed
back unchanged. Network failures never hang the caller: timeouts surface as
``UpstreamTimeoutError`` (504) and other transport errors as ``UpstreamError``
(502).
"""

from __future__ import annotations

import asyncio
import logging
import time

import httpx
from starlette.background import BackgroundTask
from starlette.responses import StreamingResponse

from feedrelay.middleware.error_handler import (
    InvalidParameterError,
    UpstreamError,
    UpstreamTimeoutError,
)
from feedrelay.validators.url_validator import is_http_url, resolves_to_private_network

logger = logging.getLogger(__name__)

# Connection-scoped headers (RFC 9110 §7.6.1) plus the ones the relay recomputes.
HOP_BY_HOP_HEADERS = frozenset({
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "proxy-connection",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
})
_REQUEST_ONLY_HEADERS = frozenset({"host", "content-length", "x-request-id"})
# Credentials meant for the relay itself, never for arbitrary targets
_CREDENTIAL_HEADERS = frozenset({"cookie", "authorization"})


def forwardable_request_headers(headers: list[tuple[str, str]]) -> list[tuple[str, str]]:
    """Drop hop-by-hop headers, caller credentials and the ones httpx must compute itself."""
    dropped = HOP_BY_HOP_HEADERS | _REQUEST_ONLY_HEADERS | _CREDENTIAL_HEADERS
    return [(name, value) for name, value in headers if name.lower() not in dropped]


class UpstreamRelay:
    """Relays single requests through a shared ``httpx.AsyncClient``.

    Parameters
    ----------
    client:
        Client used for every upstream call; owns the connection pool.
    block_private_targets:
        Refuse targets whose host resolves into a private network.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        block_private_targets: bool = False,
    ) -> None:
        self._client = client
        self._block_private_targets = block_private_targets

    async def forward(
        self,
        method: str,
        url: str,
        headers: list[tuple[str, str]],
        body: bytes = b"",
    ) -> StreamingResponse:
        """Send the request upstream and stream the answer back verbatim."""
        if not is_http_url(url):
            raise InvalidParameterError("'url' must be an absolute http(s) URL", url=url)
        if self._block_private_targets and await asyncio.to_thread(resolves_to_private_network, url):
            raise InvalidParameterError("'url' points to a private network", url=url)

        start = time.monotonic()
        try:
            request = self._client.build_request(
                method,
                url,
                headers=forwardable_request_headers(headers),
                content=body or None,
            )
            upstream = await self._client.send(request, stream=True)
        except httpx.TimeoutException as exc:
            logger.warning(
                "Upstream timed out: %s %s",
                method,
                url,
                extra={"target_url": url, "method": method, "error_reason": repr(exc)},
            )
            raise UpstreamTimeoutError(url=url) from exc
        except httpx.InvalidURL as exc:
            raise InvalidParameterError(f"Invalid upstream URL: {exc}", url=url) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "Upstream request failed: %s %s",
                method,
                url,
                extra={"target_url": url, "method": method, "error_reason": repr(exc)},
            )
            raise UpstreamError(f"Upstream request failed: {exc.__class__.__name__}", url=url) from exc

        logger.info(
            "Relayed %s %s -> %d",
            method,
            url,
            upstream.status_code,
            extra={
                "target_url": url,
                "method": method,
                "status_code": upstream.status_code,
                "duration_ms": round((time.monotonic() - start) * 1000, 2),
            },
        )

        response = StreamingResponse(
            upstream.aiter_raw(),
            status_code=upstream.status_code,
            background=BackgroundTask(upstream.aclose),
        )
        response.raw_headers = [
            (name.lower(), value)
            for name, value in upstream.headers.raw
            if name.decode("latin-1").lower() not in HOP_BY_HOP_HEADERS
        ]
        return response
