"""Immutable, ordered route table.

Built once by the route builder.  The only change ever made after that
is the html path back-write from the build orchestrator, which returns
a new table instead of mutating this one.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import replace
from pathlib import Path

from wren.errors import ConfigurationError
from wren.routing.route import RouteDescriptor


class RouteTable:
    """Ordered sequence of :class:`RouteDescriptor` with name lookup.

    Usage::

        table = RouteTable(descriptors)
        table.get("detail")
        table.match("/detail/42")
    """

    __slots__ = ("_by_name", "_routes")

    def __init__(self, routes: Iterable[RouteDescriptor] = ()) -> None:
        self._routes: tuple[RouteDescriptor, ...] = tuple(routes)
        by_name: dict[str, RouteDescriptor] = {}
        for route in self._routes:
            if route.name in by_name:
                raise ConfigurationError(f"Duplicate route name {route.name!r}")
            by_name[route.name] = route
        self._by_name = by_name

    def __iter__(self) -> Iterator[RouteDescriptor]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __repr__(self) -> str:
        return f"RouteTable({list(self._by_name)!r})"

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._by_name)

    @property
    def prerendered(self) -> tuple[RouteDescriptor, ...]:
        """Routes flagged for prerendering, in table order."""
        return tuple(r for r in self._routes if r.prerender)

    def get(self, name: str) -> RouteDescriptor | None:
        return self._by_name.get(name)

    def match(self, path: str) -> RouteDescriptor | None:
        """Return the first route whose matcher accepts *path*."""
        for route in self._routes:
            if route.matcher(path):
                return route
        return None

    def with_html_paths(self, html_paths: Mapping[str, Path]) -> RouteTable:
        """Return a copy with ``html_path`` set on the named routes.

        Routes not named in *html_paths* are carried over unchanged.
        """
        unknown = set(html_paths) - set(self._by_name)
        if unknown:
            raise KeyError(f"Unknown route(s): {', '.join(sorted(unknown))}")
        return RouteTable(
            replace(route, html_path=html_paths[route.name]) if route.name in html_paths else route
            for route in self._routes
        )
