"""Build configuration.

BuildConfig and RouteConfig are frozen dataclasses: immutable after
creation, IDE-autocompletable, no string-key dict lookups.  Loose input
(TOML files, plain dicts) is validated once, at load time, by
``RouteConfig.from_mapping`` and ``load_config``.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Literal

from wren.errors import ConfigurationError

Mode = Literal["development", "production"]

_MODES: frozenset[str] = frozenset({"development", "production"})

# Environment variable that overrides ``BuildConfig.mode`` in load_config()
MODE_ENV_VAR = "WREN_ENV"


@dataclass(frozen=True, slots=True)
class RouteConfig:
    """Per-route overrides, matched to discovered pages by ``name``.

    Only ``name`` is required.  ``None`` means "not supplied": the
    discovered default stays in place.
    """

    name: str
    path: str | None = None
    lazy_loading: bool | None = None
    chunkname: str | None = None
    template: str | Path | None = None
    skeleton: str | Path | None = None
    prerender: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RouteConfig:
        """Build a RouteConfig from a loosely-typed mapping.

        Accepts ``lazyLoading`` as an alias for ``lazy_loading``.
        Raises ``ConfigurationError`` for unknown keys or wrong types.
        """
        values = dict(data)
        if "lazyLoading" in values:
            values["lazy_loading"] = values.pop("lazyLoading")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown route option(s) {', '.join(unknown)} "
                f"in route {values.get('name', '<unnamed>')!r}. "
                f"Allowed: {', '.join(sorted(known))}"
            )

        name = values.get("name")
        if not isinstance(name, str) or not name:
            raise ConfigurationError(f"Route config requires a non-empty 'name', got {name!r}")

        _check_type(values, "path", str)
        _check_type(values, "chunkname", str)
        _check_type(values, "template", (str, Path))
        _check_type(values, "skeleton", (str, Path))
        _check_type(values, "lazy_loading", bool)
        _check_type(values, "prerender", bool)
        if values.get("prerender") is None:
            values.pop("prerender", None)

        return cls(**values)


def _check_type(values: dict[str, Any], key: str, expected: type | tuple[type, ...]) -> None:
    value = values.get(key)
    if value is not None and not isinstance(value, expected):
        raise ConfigurationError(
            f"Route {values['name']!r}: option {key!r} has invalid value {value!r}"
        )


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Build configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = BuildConfig(pages_dir="src/pages", mode="production")

    Relative directories resolve against ``root_dir``.
    """

    # Layout
    root_dir: str | Path = "."
    pages_dir: str | Path = "pages"
    output_dir: str | Path = "dist"
    target_dir: str | Path = ".wren"  # Generated working files (manifest, skeleton entries)
    skeletons_dirname: str = "skeletons"

    # Mode: prerendered content is only served in production
    mode: Mode = "development"

    # Discovery
    page_suffixes: tuple[str, ...] = (".py", ".html")

    # Prerender bundle
    client_entry: str = "entry-client.js"
    common_chunks: tuple[str, ...] = ("manifest", "vendor")
    public_path: str = "/"
    default_template: str | Path | None = None  # None = packaged index.html
    favicon: str | Path | None = None
    minify: bool = True

    # Prerender cache
    cache_max_entries: int = 1000
    cache_ttl: float = 15 * 60.0  # seconds, from insertion

    # Per-route overrides
    routes: tuple[RouteConfig, ...] = field(default=())

    def __post_init__(self) -> None:
        if self.mode not in _MODES:
            raise ConfigurationError(
                f"Invalid mode {self.mode!r}. Expected one of: {', '.join(sorted(_MODES))}"
            )
        if self.cache_max_entries < 1:
            raise ConfigurationError("cache_max_entries must be at least 1")
        if self.cache_ttl <= 0:
            raise ConfigurationError("cache_ttl must be positive")
        seen: set[str] = set()
        for route in self.routes:
            if route.name in seen:
                raise ConfigurationError(f"Route {route.name!r} is configured more than once")
            seen.add(route.name)

    @property
    def production(self) -> bool:
        return self.mode == "production"

    def resolve(self, path: str | Path) -> Path:
        """Resolve *path* against ``root_dir`` unless it is absolute."""
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return (Path(self.root_dir) / candidate).resolve()

    @property
    def pages_path(self) -> Path:
        return self.resolve(self.pages_dir)

    @property
    def output_path(self) -> Path:
        return self.resolve(self.output_dir)

    @property
    def target_path(self) -> Path:
        return self.resolve(self.target_dir)

    @property
    def skeletons_path(self) -> Path:
        return self.target_path / self.skeletons_dirname


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _is_str_array(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


# Value check for every key accepted in the [build] table of a config file
_BUILD_TYPES: dict[str, Callable[[Any], bool]] = {
    "pages_dir": _is_str,
    "output_dir": _is_str,
    "target_dir": _is_str,
    "skeletons_dirname": _is_str,
    "mode": _is_str,
    "page_suffixes": _is_str_array,
    "client_entry": _is_str,
    "common_chunks": _is_str_array,
    "public_path": _is_str,
    "default_template": _is_str,
    "favicon": _is_str,
    "minify": _is_bool,
    "cache_max_entries": _is_int,
    "cache_ttl": _is_number,
}

_BUILD_KEYS: frozenset[str] = frozenset(_BUILD_TYPES)


def load_config(path: str | Path, *, mode: Mode | None = None) -> BuildConfig:
    """Load a BuildConfig from a TOML file.

    Layout::

        [build]
        pages_dir = "pages"
        output_dir = "dist"

        [[routes]]
        name = "detail"
        path = "/detail/:id"
        prerender = true

    ``root_dir`` is the directory containing the file.  Precedence for
    the mode: the *mode* argument, then ``$WREN_ENV``, then the file.
    """
    config_file = Path(path)
    try:
        with config_file.open("rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Config file not found: {config_file}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid TOML in {config_file}: {exc}") from exc

    unknown_sections = sorted(set(data) - {"build", "routes"})
    if unknown_sections:
        raise ConfigurationError(
            f"Unknown section(s) in {config_file}: {', '.join(unknown_sections)}"
        )

    build_table = data.get("build", {})
    if not isinstance(build_table, dict):
        raise ConfigurationError(f"'build' must be a table in {config_file}")
    build = dict(build_table)
    unknown = sorted(set(build) - _BUILD_KEYS)
    if unknown:
        raise ConfigurationError(f"Unknown build option(s) in {config_file}: {', '.join(unknown)}")
    for key, value in build.items():
        if not _BUILD_TYPES[key](value):
            raise ConfigurationError(
                f"Build option {key!r} in {config_file} has invalid value {value!r}"
            )
    for key in ("page_suffixes", "common_chunks"):
        if key in build:
            build[key] = tuple(build[key])

    raw_routes = data.get("routes", [])
    if not isinstance(raw_routes, list) or not all(isinstance(r, dict) for r in raw_routes):
        raise ConfigurationError(f"'routes' must be an array of tables in {config_file}")
    routes = tuple(RouteConfig.from_mapping(r) for r in raw_routes)

    config = BuildConfig(
        root_dir=config_file.parent.resolve(),
        routes=routes,
        **build,
    )

    override = mode or os.environ.get(MODE_ENV_VAR)
    if override:
        config = replace(config, mode=override)
    return config
