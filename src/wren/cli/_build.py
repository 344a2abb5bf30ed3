"""``wren build``: compile routes and prerender flagged pages.

Writes ``routes.json`` into the target directory and one HTML file per
prerendered route into the output directory.  Exits with code 1 on
configuration or compile errors.
"""

import argparse
import sys

import anyio

from wren.cli._resolve import resolve_config
from wren.errors import WrenError
from wren.manager import RouteManager


def run_build(args: argparse.Namespace) -> None:
    config = resolve_config(args, mode="production" if args.production else None)
    manager = RouteManager(config)
    try:
        table = anyio.run(manager.build)
    except (WrenError, FileNotFoundError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    for route in table.prerendered:
        print(f"  {route.name:<20} {route.html_path}")
    print(f"Built {len(table)} route(s), {len(table.prerendered)} prerendered ({config.mode}).")
