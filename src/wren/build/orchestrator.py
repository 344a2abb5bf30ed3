"""Prerender build orchestration.

For every route flagged for prerendering:

1. Resolve its HTML template (custom, configured default, or packaged)
2. Register an entry and an :class:`HtmlOutput` on the primary bundle
3. Record ``<output_dir>/<name>.html`` as the route's html path
4. If a skeleton is configured, write a skeleton entry file and add it
   to the secondary bundle

Per-route work runs concurrently and is joined before anything is
registered.  All skeleton entries share one secondary bundle, attached
through a single :class:`SkeletonPlugin`.  The bundler is then invoked
exactly once.

States::

    IDLE -> CONFIGURING -> COMPILING -> DONE
                  |              |
                  +--> FAILED <--+

A failed run returns no table, so no html path ever points at a file
that was not produced.
"""

from __future__ import annotations

import enum
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

import anyio

from wren.build.bundler import BundleConfig, Bundler, HtmlOutput, SkeletonPlugin
from wren.config import BuildConfig
from wren.errors import CompileError, ConfigurationError
from wren.routing.route import RouteDescriptor
from wren.routing.table import RouteTable

logger = logging.getLogger("wren.build")

DEFAULT_TEMPLATE = Path(__file__).parent / "templates" / "index.html"

# Skeleton entry files are kida templates; the component markup is inlined
SKELETON_ENTRY = """\
{{# skeleton entry for route {name}, generated from {source} #}}
<div class="wren-skeleton" data-route="{name}">
{markup}
</div>
"""


class BuildState(enum.Enum):
    IDLE = "idle"
    CONFIGURING = "configuring"
    COMPILING = "compiling"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class _Registration:
    """Everything one prerendered route contributes to the bundles."""

    route: RouteDescriptor
    html_path: Path
    output: HtmlOutput
    skeleton_entry: Path | None = None


class BuildOrchestrator:
    """Drives the prerender build for a route table.

    Usage::

        orchestrator = BuildOrchestrator(config, StaticBundler(config.output_path))
        table = await orchestrator.run(table)

    Not reentrant: one ``run()`` at a time per orchestrator.
    """

    __slots__ = ("_bundler", "_config", "state", "warnings")

    def __init__(self, config: BuildConfig, bundler: Bundler) -> None:
        self._config = config
        self._bundler = bundler
        self.state = BuildState.IDLE
        self.warnings: tuple[str, ...] = ()

    async def run(self, table: RouteTable) -> RouteTable:
        """Build every prerendered route and return the annotated table.

        Raises ``ConfigurationError`` for missing templates or skeletons
        and ``CompileError`` when the bundler reports errors.
        """
        if self.state in (BuildState.CONFIGURING, BuildState.COMPILING):
            msg = f"Build already in progress ({self.state.value})"
            raise RuntimeError(msg)

        self.state = BuildState.CONFIGURING
        self.warnings = ()
        try:
            primary = await self._configure(table)
        except BaseException:
            self.state = BuildState.FAILED
            raise

        if not primary.bundle.entries:
            logger.info("No routes to prerender")
            self.state = BuildState.DONE
            return table

        self.state = BuildState.COMPILING
        logger.info("Prerendering %d route(s)", len(primary.bundle.entries))
        try:
            result = await self._bundler.compile(primary.bundle)
        except BaseException:
            self.state = BuildState.FAILED
            raise

        if not result.ok:
            self.state = BuildState.FAILED
            for error in result.errors:
                logger.error("Compile error: %s", error)
            raise CompileError(result.errors)

        for warning in result.warnings:
            logger.warning("Compile warning: %s", warning)
        self.warnings = result.warnings

        self.state = BuildState.DONE
        logger.info("Prerender completed")
        return table.with_html_paths(primary.html_paths)

    async def _configure(self, table: RouteTable) -> _Configured:
        config = self._config
        routes = table.prerendered
        if any(route.skeleton is not None for route in routes):
            await anyio.to_thread.run_sync(_empty_directory, config.skeletons_path)

        registrations: dict[str, _Registration] = {}

        async def _register(route: RouteDescriptor) -> None:
            registrations[route.name] = await self._register_route(route)

        try:
            async with anyio.create_task_group() as tg:
                for route in routes:
                    tg.start_soon(_register, route)
        except ExceptionGroup as group:
            # Report the first failing route; the others were cancelled
            raise group.exceptions[0] from None

        primary = BundleConfig(name="prerender", context=config.resolve("."))
        skeletons = BundleConfig(name="skeleton", context=config.skeletons_path)
        html_paths: dict[str, Path] = {}

        # Apply in table order so bundles are deterministic
        for route in routes:
            registration = registrations[route.name]
            primary.add_entry(route.name, [config.client_entry])
            primary.add_plugin(registration.output)
            html_paths[route.name] = registration.html_path
            if registration.skeleton_entry is not None:
                skeletons.add_entry(route.name, [str(registration.skeleton_entry)])

        if skeletons.entries:
            primary.add_plugin(SkeletonPlugin(config=skeletons))

        return _Configured(bundle=primary, html_paths=html_paths)

    async def _register_route(self, route: RouteDescriptor) -> _Registration:
        config = self._config
        template = await self._resolve_template(route)
        filename = f"{route.name}.html"
        output = HtmlOutput(
            filename=filename,
            template=template,
            entry=route.name,
            chunks=(*config.common_chunks, route.name),
            minify=config.minify,
            favicon=config.resolve(config.favicon) if config.favicon else None,
        )

        skeleton_entry = None
        if route.skeleton is not None:
            skeleton_entry = await self._write_skeleton_entry(route.name, route.skeleton)

        return _Registration(
            route=route,
            html_path=config.output_path / filename,
            output=output,
            skeleton_entry=skeleton_entry,
        )

    async def _resolve_template(self, route: RouteDescriptor) -> Path:
        if route.template is not None:
            if not await anyio.Path(route.template).is_file():
                raise ConfigurationError(
                    f"Template for route {route.name!r} not found: {route.template}"
                )
            return route.template

        if self._config.default_template is not None:
            template = self._config.resolve(self._config.default_template)
            if not await anyio.Path(template).is_file():
                raise ConfigurationError(f"Default template not found: {template}")
            return template

        return DEFAULT_TEMPLATE

    async def _write_skeleton_entry(self, name: str, skeleton: Path) -> Path:
        """Write ``<skeletons>/<name>/skeleton.html`` and return its path."""
        try:
            markup = await anyio.Path(skeleton).read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ConfigurationError(f"Skeleton for route {name!r} not found: {skeleton}") from exc

        entry_path = anyio.Path(self._config.skeletons_path / name / "skeleton.html")
        await entry_path.parent.mkdir(parents=True, exist_ok=True)
        await entry_path.write_text(
            SKELETON_ENTRY.format(name=name, source=skeleton, markup=markup.strip()),
            encoding="utf-8",
        )
        return Path(entry_path)


@dataclass(frozen=True, slots=True)
class _Configured:
    bundle: BundleConfig
    html_paths: dict[str, Path]


def _empty_directory(directory: Path) -> None:
    if directory.exists():
        shutil.rmtree(directory)
    directory.mkdir(parents=True, exist_ok=True)
