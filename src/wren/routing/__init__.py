"""Routing: page discovery, path matchers, and the immutable route table.

The route table is built once per build process and is read-only
afterwards, so it can be shared across concurrent lookups.
"""

from wren.routing.builder import build_route_table, merge_routes
from wren.routing.discovery import DiscoveredPage, discover_pages
from wren.routing.matcher import PathMatcher, compile_path
from wren.routing.route import RouteDescriptor
from wren.routing.table import RouteTable

__all__ = [
    "DiscoveredPage",
    "PathMatcher",
    "RouteDescriptor",
    "RouteTable",
    "build_route_table",
    "compile_path",
    "discover_pages",
    "merge_routes",
]
