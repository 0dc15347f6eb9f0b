"""HTTP utilities."""
from __future__ import annotations

import logging

import httpx

from iconfetch.config import Settings
from iconfetch.errors import HTTPStatusError, ReadError, TransportError

logger = logging.getLogger(__name__)


def build_client(settings: Settings) -> httpx.AsyncClient:
    """Return an HTTP client configured from ``settings``."""

    return httpx.AsyncClient(
        timeout=settings.request_timeout,
        follow_redirects=settings.follow_redirects,
    )


async def fetch_bytes(client: httpx.AsyncClient, url: str) -> bytes:
    """Download the full body at ``url`` with a plain GET.

    Failures are mapped onto the icon error taxonomy: no response at all is a
    :class:`TransportError`, a non-2xx status an :class:`HTTPStatusError` and a
    body that breaks off midway a :class:`ReadError`.
    """

    logger.debug("Fetching %s", url)
    try:
        async with client.stream("GET", url) as response:
            if not response.is_success:
                raise HTTPStatusError(url, response.status_code, response.reason_phrase)
            try:
                body = await response.aread()
            except httpx.HTTPError as exc:
                raise ReadError(url, exc) from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise TransportError(url, exc) from exc

    logger.debug("Fetched %d bytes from %s", len(body), url)
    return body


__all__ = ["build_client", "fetch_bytes"]
