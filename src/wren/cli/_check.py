"""``wren check``: validate pages and route configuration.

Builds the route table without prerendering.  Exits with code 1 on
duplicate route names, malformed paths, and missing templates (per
route or default) or skeletons.
"""

import argparse
import sys

import anyio

from wren.cli._resolve import resolve_config
from wren.errors import ConfigurationError
from wren.routing.builder import build_route_table


def run_check(args: argparse.Namespace) -> None:
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

    problems: list[str] = []
    for route in table.prerendered:
        if route.template is not None and not route.template.is_file():
            problems.append(f"{route.name}: template not found: {route.template}")
        if route.skeleton is not None and not route.skeleton.is_file():
            problems.append(f"{route.name}: skeleton not found: {route.skeleton}")

    # The default template is only rendered for prerendered routes without their own
    if config.default_template is not None and any(
        route.template is None for route in table.prerendered
    ):
        default_template = config.resolve(config.default_template)
        if not default_template.is_file():
            problems.append(f"default template not found: {default_template}")

    if problems:
        for problem in problems:
            print(f"Error: {problem}", file=sys.stderr)
        raise SystemExit(1)

    prerendered = len(table.prerendered)
    print(f"OK: {len(table)} route(s), {prerendered} prerendered.")
