"""Config resolution shared by every ``wren`` subcommand."""

import argparse
import os
import sys
from dataclasses import replace
from pathlib import Path

from wren.config import MODE_ENV_VAR, BuildConfig, Mode, load_config
from wren.errors import ConfigurationError

DEFAULT_CONFIG_FILE = "wren.toml"


def resolve_config(args: argparse.Namespace, *, mode: Mode | None = None) -> BuildConfig:
    """Load the BuildConfig named by ``args.config``.

    Without ``--config``, ``./wren.toml`` is used when it exists and the
    defaults (rooted at the current directory) otherwise.  Exits with
    status 1 on configuration errors.
    """
    try:
        if args.config is not None:
            return load_config(args.config, mode=mode)
        default = Path.cwd() / DEFAULT_CONFIG_FILE
        if default.is_file():
            return load_config(default, mode=mode)

        config = BuildConfig(root_dir=Path.cwd())
        override = mode or os.environ.get(MODE_ENV_VAR)
        if override:
            config = replace(config, mode=override)
        return config
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
