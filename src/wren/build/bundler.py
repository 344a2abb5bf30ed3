"""Bundler interface used by the build orchestrator.

The orchestrator assembles one primary :class:`BundleConfig` (entries
plus one :class:`HtmlOutput` plugin per prerendered route, and at most
one :class:`SkeletonPlugin` wrapping a secondary bundle) and hands it to
a :class:`Bundler` exactly once per run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class HtmlOutput:
    """Instruction to emit one static HTML file.

    Attributes:
        filename: Output filename relative to the bundle output
            directory (e.g., ``detail.html``).
        template: HTML template to render.
        entry: Name of the entry whose scripts the page loads.
        chunks: Chunk names injected into the page, in order.
        inject: Insert ``<script>`` tags before ``</body>``.
        minify: Strip comments and collapse whitespace between tags.
        favicon: Optional favicon file copied next to the page.
    """

    filename: str
    template: Path
    entry: str
    chunks: tuple[str, ...] = ()
    inject: bool = True
    minify: bool = True
    favicon: Path | None = None


@dataclass(frozen=True, slots=True)
class SkeletonPlugin:
    """Secondary bundle of skeleton entries, compiled in the same pass.

    Each entry is named after its route; the compiled skeleton markup
    is placed into the page emitted for that route.
    """

    config: BundleConfig


Plugin = HtmlOutput | SkeletonPlugin


@dataclass(slots=True)
class BundleConfig:
    """Mutable bundle description, filled in while configuring a build.

    Usage::

        bundle = BundleConfig(name="prerender", context=root_dir)
        bundle.add_entry("detail", ["entry-client.js"])
        bundle.add_plugin(HtmlOutput("detail.html", template, entry="detail"))
    """

    name: str
    context: Path
    entries: dict[str, list[str]] = field(default_factory=dict)
    plugins: list[Plugin] = field(default_factory=list)

    def add_entry(self, name: str, sources: list[str]) -> None:
        if name in self.entries:
            msg = f"Entry {name!r} is already registered in bundle {self.name!r}"
            raise ValueError(msg)
        self.entries[name] = list(sources)

    def add_plugin(self, plugin: Plugin) -> None:
        self.plugins.append(plugin)

    @property
    def html_outputs(self) -> list[HtmlOutput]:
        return [p for p in self.plugins if isinstance(p, HtmlOutput)]

    @property
    def skeleton(self) -> SkeletonPlugin | None:
        for plugin in self.plugins:
            if isinstance(plugin, SkeletonPlugin):
                return plugin
        return None


@dataclass(frozen=True, slots=True)
class CompileResult:
    """Outcome of one compilation. Errors are fatal, warnings are not."""

    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


@runtime_checkable
class Bundler(Protocol):
    """Anything that can compile a :class:`BundleConfig`.

    ``compile`` is one long-running call.  It is never cancelled
    mid-compile and has no timeout.
    """

    async def compile(self, config: BundleConfig) -> CompileResult: ...
