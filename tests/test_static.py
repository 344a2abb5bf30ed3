"""Tests for wren.build.static — the reference static bundler."""

import re
from pathlib import Path

import pytest

from wren.build.bundler import BundleConfig, HtmlOutput, SkeletonPlugin
from wren.build.orchestrator import DEFAULT_TEMPLATE
from wren.build.static import SKELETON_OUTLET, StaticBundler, minify_html


def _project(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    root.mkdir()
    (root / "entry-client.js").write_text("console.log('hydrate');", encoding="utf-8")
    return root


def _bundle(root: Path, *names: str, template: Path = DEFAULT_TEMPLATE, **options) -> BundleConfig:
    bundle = BundleConfig(name="prerender", context=root)
    for name in names:
        bundle.add_entry(name, ["entry-client.js"])
        bundle.add_plugin(
            HtmlOutput(
                filename=f"{name}.html",
                template=template,
                entry=name,
                chunks=("manifest", "vendor", name),
                **options,
            )
        )
    return bundle


class TestMinifyHtml:
    def test_strips_comments_and_gaps(self) -> None:
        html = "<div>\n  <!-- note -->\n  <p>hi there</p>\n</div>\n"
        assert minify_html(html) == "<div><p>hi there</p></div>"

    def test_keeps_conditional_comments(self) -> None:
        assert "<!--[if IE]>" in minify_html("<!--[if IE]><p>x</p><![endif]-->")


class TestStaticBundler:
    @pytest.mark.anyio
    async def test_emits_page_with_scripts(self, tmp_path: Path) -> None:
        root = _project(tmp_path)
        out = tmp_path / "dist"

        result = await StaticBundler(out).compile(_bundle(root, "home"))

        assert result.ok
        assert result.warnings == ()
        html = (out / "home.html").read_text(encoding="utf-8")
        assert "<title>home</title>" in html
        assert re.search(r'<script src="/js/home\.[0-9a-f]{8}\.js"></script></body>', html)
        assert "prerendered by wren" not in html  # minified
        assert SKELETON_OUTLET not in html

        (asset,) = (out / "js").iterdir()
        assert asset.read_text(encoding="utf-8") == "console.log('hydrate');"

    @pytest.mark.anyio
    async def test_public_path_prefix(self, tmp_path: Path) -> None:
        root = _project(tmp_path)
        out = tmp_path / "dist"

        await StaticBundler(out, public_path="/static").compile(_bundle(root, "home"))

        html = (out / "home.html").read_text(encoding="utf-8")
        assert 'src="/static/js/home.' in html

    @pytest.mark.anyio
    async def test_no_minify_keeps_comments(self, tmp_path: Path) -> None:
        root = _project(tmp_path)
        out = tmp_path / "dist"

        await StaticBundler(out).compile(_bundle(root, "home", minify=False))

        assert "<!-- prerendered by wren: home -->" in (out / "home.html").read_text(
            encoding="utf-8"
        )

    @pytest.mark.anyio
    async def test_missing_entry_module_is_error(self, tmp_path: Path) -> None:
        root = tmp_path / "empty"
        root.mkdir()

        result = await StaticBundler(tmp_path / "dist").compile(_bundle(root, "home"))

        assert not result.ok
        assert "entry-client.js" in result.errors[0]

    @pytest.mark.anyio
    async def test_missing_template_is_error(self, tmp_path: Path) -> None:
        root = _project(tmp_path)
        out = tmp_path / "dist"

        result = await StaticBundler(out).compile(
            _bundle(root, "home", template=tmp_path / "missing.html")
        )

        assert any("template not found" in e for e in result.errors)
        assert not (out / "home.html").exists()

    @pytest.mark.anyio
    async def test_missing_body_tag_warns(self, tmp_path: Path) -> None:
        root = _project(tmp_path)
        template = tmp_path / "bare.html"
        template.write_text("<main>{{ title }}</main>", encoding="utf-8")
        out = tmp_path / "dist"

        result = await StaticBundler(out).compile(_bundle(root, "home", template=template))

        assert result.ok
        assert any("no </body>" in w for w in result.warnings)
        assert "<script" in (out / "home.html").read_text(encoding="utf-8")

    @pytest.mark.anyio
    async def test_missing_favicon_warns(self, tmp_path: Path) -> None:
        root = _project(tmp_path)

        result = await StaticBundler(tmp_path / "dist").compile(
            _bundle(root, "home", favicon=tmp_path / "favicon.ico")
        )

        assert result.ok
        assert any("favicon not found" in w for w in result.warnings)

    @pytest.mark.anyio
    async def test_favicon_copied_and_linked(self, tmp_path: Path) -> None:
        root = _project(tmp_path)
        favicon = tmp_path / "favicon.ico"
        favicon.write_bytes(b"\x00\x01")
        out = tmp_path / "dist"

        await StaticBundler(out).compile(_bundle(root, "home", favicon=favicon))

        assert (out / "favicon.ico").read_bytes() == b"\x00\x01"
        assert '<link rel="icon" href="/favicon.ico">' in (out / "home.html").read_text(
            encoding="utf-8"
        )


class TestSkeletons:
    def _skeleton_bundle(self, tmp_path: Path, *names: str) -> BundleConfig:
        skeletons = tmp_path / "skeletons"
        bundle = BundleConfig(name="skeleton", context=skeletons)
        for name in names:
            entry = skeletons / name / "skeleton.html"
            entry.parent.mkdir(parents=True)
            entry.write_text(
                f'<div class="shimmer" data-route="{{{{ name }}}}">{name}</div>\n',
                encoding="utf-8",
            )
            bundle.add_entry(name, [str(entry)])
        return bundle

    @pytest.mark.anyio
    async def test_skeleton_placed_in_outlet(self, tmp_path: Path) -> None:
        root = _project(tmp_path)
        out = tmp_path / "dist"
        bundle = _bundle(root, "home", "about")
        bundle.add_plugin(SkeletonPlugin(config=self._skeleton_bundle(tmp_path, "home")))

        result = await StaticBundler(out).compile(bundle)

        assert result.ok
        home = (out / "home.html").read_text(encoding="utf-8")
        about = (out / "about.html").read_text(encoding="utf-8")
        assert '<div id="app"><div class="shimmer" data-route="home">home</div></div>' in home
        assert '<div id="app"></div>' in about

    @pytest.mark.anyio
    async def test_orphan_skeleton_warns(self, tmp_path: Path) -> None:
        root = _project(tmp_path)
        bundle = _bundle(root, "home")
        bundle.add_plugin(SkeletonPlugin(config=self._skeleton_bundle(tmp_path, "ghost")))

        result = await StaticBundler(tmp_path / "dist").compile(bundle)

        assert result.ok
        assert any("'ghost'" in w for w in result.warnings)

    @pytest.mark.anyio
    async def test_template_without_outlet_drops_skeleton(self, tmp_path: Path) -> None:
        root = _project(tmp_path)
        template = tmp_path / "plain.html"
        template.write_text("<html><body><main></main></body></html>", encoding="utf-8")
        bundle = _bundle(root, "home", template=template)
        bundle.add_plugin(SkeletonPlugin(config=self._skeleton_bundle(tmp_path, "home")))

        result = await StaticBundler(tmp_path / "dist").compile(bundle)

        assert result.ok
        assert any("skeleton dropped" in w for w in result.warnings)
