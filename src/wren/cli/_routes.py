"""``wren routes``: list discovered routes.

Builds the route table from the configured pages directory and prints
NAME, PATH, PRERENDER and identifier for every route.
"""

import argparse
import sys

import anyio

from wren.cli._resolve import resolve_config
from wren.errors import ConfigurationError
from wren.routing.builder import build_route_table


def run_routes(args: argparse.Namespace) -> None:
    """Print the route table for the configured pages directory."""
    config = resolve_config(args)
    try:
        table = anyio.run(
            lambda: build_route_table(
                config.pages_path,
                config.routes,
                suffixes=config.page_suffixes,
                root_dir=config.resolve("."),
            )
        )
    except (ConfigurationError, FileNotFoundError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if not len(table):
        print("No routes discovered.")
        return

    # Build rows: (name, path, prerender, identifier)
    rows: list[tuple[str, str, str, str]] = [
        (route.name, route.path, "yes" if route.prerender else "no", route.identifier)
        for route in table
    ]

    # Column widths
    max_name = max(max(len(r[0]) for r in rows), 4)  # "NAME" header
    max_path = max(max(len(r[1]) for r in rows), 4)  # "PATH" header

    fmt = f"{{:<{max_name}}}  {{:<{max_path}}}  {{:<9}}  {{}}"
    print(fmt.format("NAME", "PATH", "PRERENDER", "ID"))
    sep_len = max_name + max_path + 15 + max(len(r[3]) for r in rows)
    print("-" * min(sep_len, 80))
    for row in rows:
        print(fmt.format(*row))
