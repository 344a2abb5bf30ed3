"""Route manifest: the route table serialised to ``routes.json``.

Written into the target directory after every route compile so client
code and tooling can load the table without re-walking the pages tree.
"""

import json
from pathlib import Path
from typing import Any

import anyio

from wren.routing.route import RouteDescriptor
from wren.routing.table import RouteTable

MANIFEST_FILENAME = "routes.json"


def route_to_dict(route: RouteDescriptor) -> dict[str, Any]:
    return {
        "name": route.name,
        "path": route.path,
        "hash": route.hash,
        "identifier": route.identifier,
        "lazy_loading": route.lazy_loading,
        "chunkname": route.chunkname,
        "prerender": route.prerender,
        "html_path": str(route.html_path) if route.html_path else None,
    }


def render_manifest(table: RouteTable) -> str:
    return json.dumps([route_to_dict(r) for r in table], indent=2) + "\n"


async def write_manifest(table: RouteTable, target_dir: str | Path) -> Path:
    """Write ``routes.json`` into *target_dir* and return its path."""
    directory = anyio.Path(target_dir)
    await directory.mkdir(parents=True, exist_ok=True)
    manifest = directory / MANIFEST_FILENAME
    await manifest.write_text(render_manifest(table), encoding="utf-8")
    return Path(manifest)
