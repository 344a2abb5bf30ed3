"""Wren CLI: route listing, configuration checks, and prerender builds.

Entry point registered as ``wren`` in ``pyproject.toml``::

    [project.scripts]
    wren = "wren.cli:main"
"""

import argparse
import logging
import sys


def _add_config_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        "-c",
        default=None,
        help="Path to wren.toml (default: ./wren.toml if present)",
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``wren`` command."""
    parser = argparse.ArgumentParser(
        prog="wren",
        description="Wren: route compiler and prerender cache for multi-page sites.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- wren routes ------------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List discovered routes")
    _add_config_argument(routes_parser)

    # -- wren check -------------------------------------------------------
    check_parser = subparsers.add_parser("check", help="Validate pages and route config")
    _add_config_argument(check_parser)

    # -- wren build -------------------------------------------------------
    build_parser = subparsers.add_parser("build", help="Compile routes and prerender pages")
    _add_config_argument(build_parser)
    build_parser.add_argument(
        "--production",
        action="store_true",
        help="Build in production mode (overrides config and $WREN_ENV)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(name)s] %(levelname)s: %(message)s",
    )

    if args.command == "routes":
        from wren.cli._routes import run_routes

        run_routes(args)
    elif args.command == "check":
        from wren.cli._check import run_check

        run_check(args)
    elif args.command == "build":
        from wren.cli._build import run_build

        run_build(args)
