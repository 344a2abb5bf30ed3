"""Route manager: one build process's routes, cache, and bundler.

Explicitly constructed and passed around; there is no module-level
instance.

Lifecycle::

    manager = RouteManager(config)
    await manager.compile_routes()      # discover + merge + manifest
    await manager.compile_prerender()   # static HTML for prerendered routes

    manager.should_prerender("/detail/42")
    html = await manager.prerender("/detail/42")
"""

import logging

from wren.build.bundler import Bundler
from wren.build.orchestrator import BuildOrchestrator
from wren.build.static import StaticBundler
from wren.config import BuildConfig
from wren.manifest import write_manifest
from wren.prerender.cache import PrerenderCache
from wren.prerender.lookup import HtmlReader, PrerenderLookup, read_html
from wren.routing.builder import build_route_table
from wren.routing.table import RouteTable

logger = logging.getLogger("wren.build")


class RouteManager:
    """Owns the route table for one build process.

    The table is replaced (never mutated) by ``compile_routes()`` and
    ``compile_prerender()``; lookups always see a complete table.
    """

    __slots__ = ("_cache", "_lookup", "_reader", "_table", "bundler", "config", "orchestrator")

    def __init__(
        self,
        config: BuildConfig | None = None,
        *,
        bundler: Bundler | None = None,
        cache: PrerenderCache | None = None,
        reader: HtmlReader = read_html,
    ) -> None:
        self.config: BuildConfig = config or BuildConfig()
        self.bundler: Bundler = bundler or StaticBundler(
            self.config.output_path,
            public_path=self.config.public_path,
        )
        self.orchestrator = BuildOrchestrator(self.config, self.bundler)
        self._cache = cache or PrerenderCache(
            max_entries=self.config.cache_max_entries,
            ttl=self.config.cache_ttl,
        )
        self._reader = reader
        self._table = RouteTable()
        self._lookup = self._make_lookup()

    def _make_lookup(self) -> PrerenderLookup:
        return PrerenderLookup(
            self._table,
            self._cache,
            production=self.config.production,
            reader=self._reader,
        )

    def _install(self, table: RouteTable) -> None:
        self._table = table
        self._lookup = self._make_lookup()
        self._cache.clear()

    @property
    def routes(self) -> RouteTable:
        return self._table

    @property
    def cache(self) -> PrerenderCache:
        return self._cache

    async def compile_routes(self) -> RouteTable:
        """Discover pages, merge overrides, and write ``routes.json``."""
        table = await build_route_table(
            self.config.pages_path,
            self.config.routes,
            suffixes=self.config.page_suffixes,
            root_dir=self.config.resolve("."),
        )
        manifest = await write_manifest(table, self.config.target_path)
        logger.info("All routes generated: %s", manifest)
        self._install(table)
        return table

    async def compile_prerender(self) -> RouteTable:
        """Prerender flagged routes and record their html paths."""
        table = await self.orchestrator.run(self._table)
        if table is not self._table:
            await write_manifest(table, self.config.target_path)
            self._install(table)
        return table

    async def build(self) -> RouteTable:
        await self.compile_routes()
        return await self.compile_prerender()

    def should_prerender(self, path: str) -> bool:
        return self._lookup.should_prerender(path)

    async def prerender(self, path: str) -> str | None:
        return await self._lookup.prerender(path)
