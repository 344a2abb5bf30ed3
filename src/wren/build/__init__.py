"""Prerender build: bundle assembly, orchestration, and a static bundler."""

from wren.build.bundler import (
    BundleConfig,
    Bundler,
    CompileResult,
    HtmlOutput,
    SkeletonPlugin,
)
from wren.build.orchestrator import BuildOrchestrator, BuildState
from wren.build.static import StaticBundler

__all__ = [
    "BuildOrchestrator",
    "BuildState",
    "BundleConfig",
    "Bundler",
    "CompileResult",
    "HtmlOutput",
    "SkeletonPlugin",
    "StaticBundler",
]
