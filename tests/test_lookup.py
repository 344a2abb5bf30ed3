"""Tests for wren.prerender.lookup — prerender gate and artifact reads."""

import logging
from pathlib import Path

import pytest

from wren.errors import ArtifactError
from wren.prerender.cache import PrerenderCache
from wren.prerender.lookup import PrerenderLookup, read_html
from wren.routing.matcher import compile_path
from wren.routing.route import RouteDescriptor, route_hash
from wren.routing.table import RouteTable


def _route(
    name: str,
    path: str,
    *,
    prerender: bool = False,
    html_path: Path | None = None,
) -> RouteDescriptor:
    return RouteDescriptor(
        name=name,
        path=path,
        matcher=compile_path(path),
        source=Path(f"/pages/{name}.py"),
        hash=route_hash(name),
        prerender=prerender,
        html_path=html_path,
    )


def _table(tmp_path: Path) -> RouteTable:
    return RouteTable(
        [
            _route("home", "/", prerender=True, html_path=tmp_path / "home.html"),
            _route("detail", "/detail/:id", prerender=True, html_path=tmp_path / "detail.html"),
            _route("about", "/about"),
        ]
    )


class TestShouldPrerender:
    def test_production_prerendered_route(self, tmp_path: Path) -> None:
        lookup = PrerenderLookup(_table(tmp_path), PrerenderCache(), production=True)
        assert lookup.should_prerender("/") is True
        assert lookup.should_prerender("/detail/42") is True

    def test_production_live_route(self, tmp_path: Path) -> None:
        lookup = PrerenderLookup(_table(tmp_path), PrerenderCache(), production=True)
        assert lookup.should_prerender("/about") is False

    def test_production_no_match(self, tmp_path: Path) -> None:
        lookup = PrerenderLookup(_table(tmp_path), PrerenderCache(), production=True)
        assert lookup.should_prerender("/missing") is False

    @pytest.mark.parametrize("path", ["/", "/detail/42", "/about", "/missing"])
    def test_never_outside_production(self, tmp_path: Path, path: str) -> None:
        lookup = PrerenderLookup(_table(tmp_path), PrerenderCache(), production=False)
        assert lookup.should_prerender(path) is False


class TestReadHtml:
    @pytest.mark.anyio
    async def test_reads_file(self, tmp_path: Path) -> None:
        page = tmp_path / "home.html"
        page.write_text("<h1>home</h1>", encoding="utf-8")
        assert await read_html(page) == "<h1>home</h1>"

    @pytest.mark.anyio
    async def test_missing_file_is_artifact_error(self, tmp_path: Path) -> None:
        with pytest.raises(ArtifactError) as exc_info:
            await read_html(tmp_path / "gone.html")
        assert exc_info.value.path == tmp_path / "gone.html"


class TestPrerender:
    @pytest.mark.anyio
    async def test_returns_html(self, tmp_path: Path) -> None:
        (tmp_path / "detail.html").write_text("<p>detail</p>", encoding="utf-8")
        lookup = PrerenderLookup(_table(tmp_path), PrerenderCache(), production=True)

        assert await lookup.prerender("/detail/7") == "<p>detail</p>"

    @pytest.mark.anyio
    async def test_cached_per_request_path(self, tmp_path: Path) -> None:
        reads: list[Path] = []

        async def reader(path: Path) -> str:
            reads.append(path)
            return "<p>detail</p>"

        cache = PrerenderCache()
        lookup = PrerenderLookup(_table(tmp_path), cache, production=True, reader=reader)

        await lookup.prerender("/detail/7")
        await lookup.prerender("/detail/7")
        await lookup.prerender("/detail/8")

        assert reads == [tmp_path / "detail.html", tmp_path / "detail.html"]
        assert "/detail/7" in cache
        assert "/detail/8" in cache

    @pytest.mark.anyio
    async def test_no_html_path(self, tmp_path: Path) -> None:
        lookup = PrerenderLookup(_table(tmp_path), PrerenderCache(), production=True)
        assert await lookup.prerender("/about") is None

    @pytest.mark.anyio
    async def test_no_match(self, tmp_path: Path) -> None:
        lookup = PrerenderLookup(_table(tmp_path), PrerenderCache(), production=True)
        assert await lookup.prerender("/nope/nope") is None

    @pytest.mark.anyio
    async def test_missing_artifact_degrades_to_none(
        self,
        tmp_path: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        cache = PrerenderCache()
        lookup = PrerenderLookup(_table(tmp_path), cache, production=True)

        with caplog.at_level(logging.WARNING, logger="wren.prerender"):
            assert await lookup.prerender("/") is None

        assert "/" not in cache
        assert "Serving / live" in caplog.text
