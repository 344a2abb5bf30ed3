"""Filesystem page discovery for the pages/ directory.

Walks the pages directory tree and yields one :class:`DiscoveredPage`
per page module.

Directory and file names wrapped in ``{braces}`` become path
parameters.  ``page`` and ``index`` modules map to their directory URL;
other modules append their stem to the path.  Names starting with
``_`` or ``.`` are private and skipped.

Conventions::

    pages/
      index.py            # name "index",      path "/"
      about.py            # name "about",      path "/about"
      detail/
        {id}.py           # name "detail-id",  path "/detail/:id"
      docs/
        page.html         # name "docs",       path "/docs"
        _partial.html     # skipped
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from wren.errors import ConfigurationError

# Stems that map to their directory URL
_DIRECTORY_STEMS = frozenset({"page", "index"})

# Regex matching {param} directory and file names
_PARAM_RE = re.compile(r"^\{(\w+)\}$")


@dataclass(frozen=True, slots=True)
class DiscoveredPage:
    """A page module found under the pages directory.

    Attributes:
        name: Route name (segments joined with ``-``).
        path: Default route path (e.g., ``/detail/:id``).
        source: Absolute path to the page module.
    """

    name: str
    path: str
    source: Path


def discover_pages(
    pages_dir: str | Path,
    suffixes: tuple[str, ...] = (".py", ".html"),
) -> list[DiscoveredPage]:
    """Walk a pages directory and discover all page modules.

    Args:
        pages_dir: Path to the ``pages/`` directory.
        suffixes: File suffixes recognised as page modules.

    Returns:
        Discovered pages in walk order: files before subdirectories,
        each sorted by name.

    Raises:
        FileNotFoundError: If *pages_dir* is not a directory.
        ConfigurationError: If two modules resolve to the same route name.
    """
    root = Path(pages_dir).resolve()
    if not root.is_dir():
        raise FileNotFoundError(f"Pages directory not found: {root}")

    pages: list[DiscoveredPage] = []
    _walk_directory(root, segments=[], suffixes=suffixes, pages=pages)

    seen: dict[str, DiscoveredPage] = {}
    for page in pages:
        previous = seen.get(page.name)
        if previous is not None:
            raise ConfigurationError(
                f"Route name {page.name!r} is produced by both "
                f"{previous.source.relative_to(root)} and {page.source.relative_to(root)}"
            )
        seen[page.name] = page
    return pages


def _walk_directory(
    directory: Path,
    *,
    segments: list[tuple[str, str]],
    suffixes: tuple[str, ...],
    pages: list[DiscoveredPage],
) -> None:
    """Recursively walk a directory, collecting page modules.

    Args:
        directory: Current directory being walked.
        segments: ``(name_part, path_part)`` pairs accumulated so far.
        suffixes: Recognised page module suffixes.
        pages: Accumulator for discovered pages.
    """
    entries = sorted(
        item for item in directory.iterdir() if not item.name.startswith(("_", "."))
    )

    for item in entries:
        if item.is_file() and item.suffix in suffixes:
            pages.append(_page_for_file(item, segments))

    for item in entries:
        if item.is_dir():
            _walk_directory(
                item,
                segments=[*segments, _segment(item.name)],
                suffixes=suffixes,
                pages=pages,
            )


def _segment(part: str) -> tuple[str, str]:
    """Map a directory or file stem to its ``(name_part, path_part)``."""
    match = _PARAM_RE.match(part)
    if match:
        return match.group(1), ":" + match.group(1)
    return part, part


def _page_for_file(file: Path, segments: list[tuple[str, str]]) -> DiscoveredPage:
    if file.stem in _DIRECTORY_STEMS:
        parts = segments
    else:
        parts = [*segments, _segment(file.stem)]

    name = "-".join(name_part for name_part, _ in parts) or "index"
    path = "/" + "/".join(path_part for _, path_part in parts)
    return DiscoveredPage(name=name, path=path, source=file)
