"""PathSegment and RouteDescriptor frozen dataclasses."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wren.routing.matcher import PathMatcher


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:  ``/detail``  (is_param=False)
    Param:   ``/:id``     (is_param=True, param_name="id")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None


def route_hash(name: str) -> str:
    """Stable MD5 hex digest of a route name. Not used for security."""
    return hashlib.md5(name.encode("utf-8"), usedforsecurity=False).hexdigest()


@dataclass(frozen=True, slots=True)
class RouteDescriptor:
    """The compiled record for one discovered page.

    Built by :func:`wren.routing.builder.build_route_table`.  ``matcher``
    and ``hash`` are derived from ``path`` and ``name``; ``html_path`` is
    only set by the build orchestrator.

    Attributes:
        name: Unique route name derived from the page location.
        path: Route pattern (e.g., ``/detail/:id``).
        matcher: Compiled matcher for ``path``.
        source: The page module this route was discovered from.
        hash: MD5 hex digest of ``name``.
        prerender: Whether a static HTML artifact is produced.
        lazy_loading: Whether the page is split into its own chunk.
        chunkname: Chunk name for lazy loading, if configured.
        template: Custom HTML template for the prerendered page.
        skeleton: Skeleton component shown while the page hydrates.
        html_path: Absolute path of the generated HTML file.
    """

    name: str
    path: str
    matcher: PathMatcher = field(compare=False)
    source: Path
    hash: str
    prerender: bool = False
    lazy_loading: bool = False
    chunkname: str | None = None
    template: Path | None = None
    skeleton: Path | None = None
    html_path: Path | None = None

    @property
    def identifier(self) -> str:
        """``hash`` usable as a symbol name (never starts with a digit)."""
        if self.hash[:1].isdigit():
            return f"_{self.hash}"
        return self.hash

    def matches(self, path: str) -> bool:
        return self.matcher(path)
