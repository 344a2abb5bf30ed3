"""Route table construction.

Discovers page modules, merges per-route configuration overrides,
compiles each path and hashes each name.  The resulting
:class:`RouteTable` is immutable.
"""

import logging
from collections.abc import Iterable
from functools import partial
from pathlib import Path

import anyio

from wren.config import RouteConfig
from wren.routing.discovery import DiscoveredPage, discover_pages
from wren.routing.matcher import compile_path
from wren.routing.route import RouteDescriptor, route_hash
from wren.routing.table import RouteTable

logger = logging.getLogger("wren.routing")


def _resolve(path: str | Path | None, root_dir: Path | None) -> Path | None:
    if path is None:
        return None
    candidate = Path(path)
    if root_dir is not None and not candidate.is_absolute():
        candidate = root_dir / candidate
    return candidate


def make_descriptor(
    page: DiscoveredPage,
    override: RouteConfig | None = None,
    *,
    root_dir: Path | None = None,
) -> RouteDescriptor:
    """Build one descriptor from a discovered page and its override.

    An override's ``path`` wins over the discovered default.
    ``lazy_loading`` is taken from the override when given, otherwise
    it is true whenever a chunk name is configured.
    """
    if override is None:
        path = page.path
        return RouteDescriptor(
            name=page.name,
            path=path,
            matcher=compile_path(path),
            source=page.source,
            hash=route_hash(page.name),
        )

    path = override.path or page.path
    if override.lazy_loading is not None:
        lazy_loading = override.lazy_loading
    else:
        lazy_loading = bool(override.chunkname)

    return RouteDescriptor(
        name=page.name,
        path=path,
        matcher=compile_path(path),
        source=page.source,
        hash=route_hash(page.name),
        prerender=override.prerender,
        lazy_loading=lazy_loading,
        chunkname=override.chunkname,
        template=_resolve(override.template, root_dir),
        skeleton=_resolve(override.skeleton, root_dir),
    )


def merge_routes(
    pages: Iterable[DiscoveredPage],
    overrides: Iterable[RouteConfig] = (),
    *,
    root_dir: Path | None = None,
) -> RouteTable:
    """Merge discovered pages with configuration overrides.

    Overrides are matched by name.  Overrides that match no page are
    logged and ignored.
    """
    by_name = {o.name: o for o in overrides}
    descriptors: list[RouteDescriptor] = []
    for page in pages:
        descriptors.append(make_descriptor(page, by_name.pop(page.name, None), root_dir=root_dir))

    for name in by_name:
        logger.warning("Route config %r matches no page and is ignored", name)

    return RouteTable(descriptors)


async def build_route_table(
    pages_root: str | Path,
    overrides: Iterable[RouteConfig] = (),
    *,
    suffixes: tuple[str, ...] = (".py", ".html"),
    root_dir: str | Path | None = None,
) -> RouteTable:
    """Discover pages under *pages_root* and build the route table.

    Directory enumeration runs in a worker thread.  Relative template
    and skeleton paths in *overrides* resolve against *root_dir*.
    """
    logger.info("Compiling routes from %s", pages_root)
    pages = await anyio.to_thread.run_sync(partial(discover_pages, pages_root, suffixes))
    table = merge_routes(
        pages,
        overrides,
        root_dir=Path(root_dir) if root_dir is not None else None,
    )
    logger.info("Compiled %d route(s)", len(table))
    return table
