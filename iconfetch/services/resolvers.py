"""Icon resolver implementations.

A resolver turns a batch of raw charm references into a mapping from charm
path to icon bytes. Two variants exist:

* :class:`LinkResolver` embeds each icon as a link to its URL, without any
  network traffic.
* :class:`ConcurrentFetcher` downloads each icon over HTTP, running at most
  ``concurrency`` downloads at once.

Both parse and deduplicate the whole batch before doing any work, so a single
malformed reference fails the call without touching the network.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import AsyncContextManager, Callable, Iterable, Optional, Protocol
from xml.sax.saxutils import escape

import httpx

from iconfetch.config import DEFAULT_CONCURRENCY, Settings, get_settings
from iconfetch.models.schemas import BundleData
from iconfetch.references import CharmReference, parse_reference
from iconfetch.utils.http import build_client, fetch_bytes
from iconfetch.utils.parallel import BoundedRunner

logger = logging.getLogger(__name__)

IconURLFunc = Callable[[CharmReference], str]

ICON_SIZE = 96
LINK_ICON_TEMPLATE = """
<svg xmlns:xlink="http://www.w3.org/1999/xlink">
    <image width="{size}" height="{size}" xlink:href="{href}" />
</svg>"""

_XML_ATTR_ENTITIES = {'"': "&quot;", "'": "&apos;"}


class IconResolver(Protocol):
    """Anything able to resolve a batch of charm references to icon data."""

    async def resolve(self, references: Iterable[str]) -> dict[str, bytes]:
        ...


def icon_url_for(base_url: str) -> IconURLFunc:
    """Return a function mapping a reference to ``<base_url>/<path>/icon.svg``."""

    base = base_url.rstrip("/")

    def icon_url(reference: CharmReference) -> str:
        return f"{base}/{reference.path}/icon.svg"

    return icon_url


def unique_references(references: Iterable[str]) -> dict[str, CharmReference]:
    """Parse ``references`` and keep the first reference seen for each path.

    Raises :class:`~iconfetch.errors.ParseError` on the first malformed entry.
    """

    if isinstance(references, (str, bytes)):
        raise TypeError("references must be an iterable of strings, not a single string")

    unique: dict[str, CharmReference] = {}
    for raw in references:
        reference = parse_reference(raw)
        unique.setdefault(reference.path, reference)
    return unique


def render_link_icon(url: str) -> bytes:
    """Return an SVG document that references the icon at ``url``."""

    href = escape(url, _XML_ATTR_ENTITIES)
    return LINK_ICON_TEMPLATE.format(size=ICON_SIZE, href=href).encode("utf-8")


class LinkResolver:
    """Resolve icons to SVG image tags that link to the icon URL."""

    def __init__(self, icon_url: IconURLFunc):
        self.icon_url = icon_url

    async def resolve(self, references: Iterable[str]) -> dict[str, bytes]:
        unique = unique_references(references)
        return {path: render_link_icon(self.icon_url(ref)) for path, ref in unique.items()}


class ConcurrentFetcher:
    """Download icons over HTTP with bounded concurrency.

    ``concurrency`` defaults to the configured value; non-positive values
    fall back to 10. When ``client`` is omitted a fresh client is built from
    the settings for every :meth:`resolve` call and closed afterwards. A
    supplied client is shared by all downloads and is never closed here.

    The first failed download fails the whole call. Downloads that already
    started are allowed to finish but their results are discarded, and no
    partial mapping is ever returned.
    """

    def __init__(
        self,
        icon_url: Optional[IconURLFunc] = None,
        *,
        concurrency: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        if concurrency is None:
            concurrency = settings.concurrency
        if concurrency <= 0:
            concurrency = DEFAULT_CONCURRENCY
        self.concurrency = concurrency
        self.icon_url = icon_url or icon_url_for(settings.icon_base_url)
        self.client = client
        self._settings = settings

    def _client(self) -> AsyncContextManager[httpx.AsyncClient]:
        if self.client is not None:
            return contextlib.nullcontext(self.client)
        return build_client(self._settings)

    async def resolve(self, references: Iterable[str]) -> dict[str, bytes]:
        unique = unique_references(references)
        if not unique:
            return {}

        logger.info(
            "Fetching %d unique icons with concurrency %d", len(unique), self.concurrency
        )
        icons: dict[str, bytes] = {}
        icons_lock = asyncio.Lock()

        async with self._client() as client:
            runner = BoundedRunner(self.concurrency)

            def fetch_task(path: str, reference: CharmReference):
                async def task() -> None:
                    icon = await fetch_bytes(client, self.icon_url(reference))
                    async with icons_lock:
                        icons[path] = icon

                return task

            for path, reference in unique.items():
                await runner.submit(fetch_task(path, reference))
            await runner.wait()

        logger.debug("Fetched %d icons", len(icons))
        return icons


async def resolve_bundle(resolver: IconResolver, bundle: BundleData) -> dict[str, bytes]:
    """Resolve the icons of every charm deployed by ``bundle``."""

    return await resolver.resolve(bundle.charm_references())


def resolve_sync(resolver: IconResolver, references: Iterable[str]) -> dict[str, bytes]:
    """Run ``resolver.resolve`` to completion for callers outside an event loop."""

    return asyncio.run(resolver.resolve(references))


def build_resolver(
    settings: Optional[Settings] = None,
    icon_url: Optional[IconURLFunc] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> IconResolver:
    """Instantiate the resolver requested in the settings."""

    settings = settings or get_settings()
    icon_url = icon_url or icon_url_for(settings.icon_base_url)
    if settings.resolver == "link":
        return LinkResolver(icon_url)
    if settings.resolver == "http":
        return ConcurrentFetcher(icon_url, client=client, settings=settings)
    raise ValueError(f"Unsupported resolver '{settings.resolver}'")


__all__ = [
    "ConcurrentFetcher",
    "IconResolver",
    "IconURLFunc",
    "LinkResolver",
    "build_resolver",
    "icon_url_for",
    "render_link_icon",
    "resolve_bundle",
    "resolve_sync",
    "unique_references",
]
