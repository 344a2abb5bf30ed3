"""Reference bundler: renders prerendered pages to static files.

Implements the :class:`~wren.build.bundler.Bundler` protocol without
any JavaScript toolchain.  Entries are concatenated into fingerprinted
files, HTML outputs are rendered with kida, and the skeleton bundle is
compiled in the same pass and placed into each page's outlet marker.

Problems are reported through :class:`CompileResult`, never raised:
missing entry modules and template failures are errors, anything the
page can live without is a warning.
"""

import hashlib
import logging
import re
import shutil
from pathlib import Path

import anyio
from kida import Environment, FileSystemLoader

from wren.build.bundler import BundleConfig, CompileResult, HtmlOutput

logger = logging.getLogger("wren.build")

# Marker replaced by the compiled skeleton markup
SKELETON_OUTLET = "<!--wren-skeleton-outlet-->"

_COMMENT_RE = re.compile(r"<!--(?!\[if).*?-->", re.DOTALL)
_BETWEEN_TAGS_RE = re.compile(r">\s+<")


def minify_html(html: str) -> str:
    """Remove comments and collapse whitespace between tags."""
    html = _COMMENT_RE.sub("", html)
    return _BETWEEN_TAGS_RE.sub("><", html).strip()


class StaticBundler:
    """Compile a bundle into ``output_dir``.

    Usage::

        bundler = StaticBundler(Path("dist"), public_path="/")
        result = await bundler.compile(bundle)
    """

    __slots__ = ("_environments", "assets_dirname", "output_dir", "public_path")

    def __init__(
        self,
        output_dir: str | Path,
        *,
        public_path: str = "/",
        assets_dirname: str = "js",
    ) -> None:
        self.output_dir = Path(output_dir)
        self.public_path = public_path if public_path.endswith("/") else f"{public_path}/"
        self.assets_dirname = assets_dirname
        self._environments: dict[Path, Environment] = {}

    async def compile(self, config: BundleConfig) -> CompileResult:
        return await anyio.to_thread.run_sync(self._compile_sync, config)

    def _environment(self, directory: Path) -> Environment:
        env = self._environments.get(directory)
        if env is None:
            env = Environment(loader=FileSystemLoader(str(directory)), autoescape=True)
            self._environments[directory] = env
        return env

    def _compile_sync(self, config: BundleConfig) -> CompileResult:
        errors: list[str] = []
        warnings: list[str] = []
        self.output_dir.mkdir(parents=True, exist_ok=True)

        scripts = self._emit_entries(config, errors)

        skeletons: dict[str, str] = {}
        skeleton_plugin = config.skeleton
        if skeleton_plugin is not None:
            skeletons = self._compile_skeletons(skeleton_plugin.config, errors)
            pages = {output.entry for output in config.html_outputs}
            for name in skeletons:
                if name not in pages:
                    warnings.append(f"Skeleton {name!r} has no HTML output to attach to")

        for output in config.html_outputs:
            self._emit_html(output, scripts, skeletons.get(output.entry), errors, warnings)

        logger.debug(
            "Bundle %r: %d entr(ies), %d page(s), %d skeleton(s)",
            config.name,
            len(config.entries),
            len(config.html_outputs),
            len(skeletons),
        )
        return CompileResult(errors=tuple(errors), warnings=tuple(warnings))

    def _emit_entries(self, config: BundleConfig, errors: list[str]) -> dict[str, str]:
        """Concatenate each entry's sources into a fingerprinted file.

        Returns entry name -> public URL.
        """
        assets_dir = self.output_dir / self.assets_dirname
        urls: dict[str, str] = {}
        for name, sources in config.entries.items():
            parts: list[str] = []
            for source in sources:
                source_path = config.context / source
                try:
                    parts.append(source_path.read_text(encoding="utf-8"))
                except OSError as exc:
                    errors.append(f"Entry {name!r}: cannot read module {source}: {exc.strerror}")
            if len(parts) != len(sources) or not parts:
                continue

            content = "\n".join(parts)
            digest = hashlib.md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()[:8]
            filename = f"{name}.{digest}{Path(sources[0]).suffix}"
            assets_dir.mkdir(parents=True, exist_ok=True)
            (assets_dir / filename).write_text(content, encoding="utf-8")
            urls[name] = f"{self.public_path}{self.assets_dirname}/{filename}"
        return urls

    def _compile_skeletons(self, config: BundleConfig, errors: list[str]) -> dict[str, str]:
        """Render every skeleton entry to markup, keyed by route name."""
        env = Environment(autoescape=True)
        compiled: dict[str, str] = {}
        for name, sources in config.entries.items():
            markup: list[str] = []
            for source in sources:
                source_path = config.context / source
                try:
                    template = env.from_string(source_path.read_text(encoding="utf-8"))
                    markup.append(template.render({"name": name}))
                except OSError as exc:
                    errors.append(f"Skeleton {name!r}: cannot read {source}: {exc.strerror}")
                except Exception as exc:
                    errors.append(f"Skeleton {name!r}: {exc}")
            if len(markup) == len(sources):
                compiled[name] = "".join(markup)
        return compiled

    def _emit_html(
        self,
        output: HtmlOutput,
        scripts: dict[str, str],
        skeleton: str | None,
        errors: list[str],
        warnings: list[str],
    ) -> None:
        if not output.template.is_file():
            errors.append(f"{output.filename}: template not found: {output.template}")
            return

        favicon_url = None
        if output.favicon is not None:
            if output.favicon.is_file():
                shutil.copyfile(output.favicon, self.output_dir / output.favicon.name)
                favicon_url = f"{self.public_path}{output.favicon.name}"
            else:
                warnings.append(f"{output.filename}: favicon not found: {output.favicon}")

        page_scripts = [scripts[chunk] for chunk in output.chunks if chunk in scripts]
        context = {
            "name": output.entry,
            "title": output.entry,
            "scripts": page_scripts,
            "favicon": favicon_url,
        }
        try:
            env = self._environment(output.template.parent)
            html = env.get_template(output.template.name).render(context)
        except Exception as exc:
            errors.append(f"{output.filename}: failed to render {output.template}: {exc}")
            return

        if skeleton is not None and SKELETON_OUTLET not in html:
            warnings.append(
                f"{output.filename}: template has no {SKELETON_OUTLET} marker, skeleton dropped"
            )
        html = html.replace(SKELETON_OUTLET, skeleton or "")

        if output.inject and page_scripts:
            tags = "".join(f'<script src="{url}"></script>' for url in page_scripts)
            if "</body>" in html:
                html = html.replace("</body>", f"{tags}</body>", 1)
            else:
                warnings.append(f"{output.filename}: no </body> tag, scripts appended")
                html = f"{html}{tags}"

        if output.minify:
            html = minify_html(html)

        (self.output_dir / output.filename).write_text(html, encoding="utf-8")
