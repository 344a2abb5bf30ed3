"""Wren: route compiler and prerender cache for multi-page sites.

Derives a route table from a ``pages/`` directory, merges per-route
configuration, prerenders flagged routes to static HTML, and serves
that HTML from a bounded, time-expiring cache in production.

Basic usage::

    from wren import BuildConfig, RouteManager

    manager = RouteManager(BuildConfig(mode="production"))
    await manager.build()

    if manager.should_prerender("/detail/42"):
        html = await manager.prerender("/detail/42")
"""

__version__ = "0.1.0-dev"
__all__ = [
    "ArtifactError",
    "BuildConfig",
    "BuildOrchestrator",
    "CompileError",
    "ConfigurationError",
    "PrerenderCache",
    "RouteConfig",
    "RouteDescriptor",
    "RouteManager",
    "RouteTable",
    "StaticBundler",
    "WrenError",
    "compile_path",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "RouteManager":
        from wren.manager import RouteManager

        return RouteManager

    if name in ("BuildConfig", "RouteConfig"):
        from wren import config as _config

        return getattr(_config, name)

    if name in ("ArtifactError", "CompileError", "ConfigurationError", "WrenError"):
        from wren import errors as _errors

        return getattr(_errors, name)

    if name == "BuildOrchestrator":
        from wren.build.orchestrator import BuildOrchestrator

        return BuildOrchestrator

    if name == "StaticBundler":
        from wren.build.static import StaticBundler

        return StaticBundler

    if name == "PrerenderCache":
        from wren.prerender.cache import PrerenderCache

        return PrerenderCache

    if name in ("RouteDescriptor", "RouteTable", "compile_path"):
        from wren import routing as _routing

        return getattr(_routing, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
