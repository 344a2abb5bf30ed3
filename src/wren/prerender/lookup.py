"""Request-time prerender decisions.

Answers two questions for a concrete request path: should the
prerendered HTML be served, and what is it?  Errors never reach the
request: a missing artifact is logged and reported as "no prerendered
content" so the caller falls back to live rendering.
"""

import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

import anyio

from wren.errors import ArtifactError
from wren.prerender.cache import PrerenderCache
from wren.routing.table import RouteTable

logger = logging.getLogger("wren.prerender")

HtmlReader = Callable[[Path], Awaitable[str]]


async def read_html(path: Path) -> str:
    """Read a prerendered HTML file.

    Raises ``ArtifactError`` if the file is missing or unreadable.
    """
    try:
        return await anyio.Path(path).read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ArtifactError(path, "file not found") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ArtifactError(path, str(exc)) from exc


class PrerenderLookup:
    """Prerender gate and read-through lookup over a built route table.

    The table is read-only here; the lookup is safe to share across
    concurrent requests.
    """

    __slots__ = ("_cache", "_production", "_reader", "_table")

    def __init__(
        self,
        table: RouteTable,
        cache: PrerenderCache,
        *,
        production: bool,
        reader: HtmlReader = read_html,
    ) -> None:
        self._table = table
        self._cache = cache
        self._production = production
        self._reader = reader

    @property
    def table(self) -> RouteTable:
        return self._table

    def should_prerender(self, path: str) -> bool:
        """True only in production when the matched route is prerendered."""
        if not self._production:
            return False
        route = self._table.match(path)
        return route is not None and route.prerender

    async def prerender(self, path: str) -> str | None:
        """Return the prerendered HTML for *path*, or ``None``.

        ``None`` means "render live": no route matched, the route has no
        generated HTML, or the artifact could not be read.
        """
        route = self._table.match(path)
        if route is None or route.html_path is None:
            return None

        html_path = route.html_path
        try:
            return await self._cache.get(path, lambda: self._reader(html_path))
        except ArtifactError as exc:
            logger.warning("Serving %s live: %s", path, exc)
            return None
