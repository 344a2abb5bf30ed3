"""Path pattern compilation.

Turns a route path such as ``/detail/:id`` into an anchored regex
matcher.  ``{id}`` is accepted as an alias for ``:id`` so directory
names from the pages tree can be used verbatim.

Parameters are only tested for presence, never captured: two patterns
that differ only in parameter names compile to equal matchers.
"""

import re
from dataclasses import dataclass

from wren.errors import ConfigurationError
from wren.routing.route import PathSegment

# One non-empty path segment
PARAM_PATTERN = r"[^/]+"

_PARAM_NAME_RE = re.compile(r"^[A-Za-z_]\w*$")


def parse_path(pattern: str) -> list[PathSegment]:
    """Parse a route pattern into segments.

    Examples::

        "/"             -> []
        "/detail"       -> [PathSegment("detail")]
        "/detail/:id"   -> [PathSegment("detail"), PathSegment(":id", is_param=True, param_name="id")]
        "/detail/{id}"  -> [PathSegment("detail"), PathSegment("{id}", is_param=True, param_name="id")]

    Raises ``ConfigurationError`` for malformed patterns.
    """
    if not pattern.startswith("/"):
        raise ConfigurationError(f"Route path {pattern!r} must start with '/'")

    segments: list[PathSegment] = []
    seen_params: set[str] = set()
    for part in pattern.strip("/").split("/"):
        if not part:
            continue

        if part.startswith(":"):
            param_name = part[1:]
        elif part.startswith("{") or part.endswith("}"):
            if not (part.startswith("{") and part.endswith("}")):
                raise ConfigurationError(
                    f"Unbalanced braces in segment {part!r} of route path {pattern!r}"
                )
            param_name = part[1:-1]
        else:
            if "{" in part or "}" in part or ":" in part:
                raise ConfigurationError(
                    f"Parameter syntax must span a whole segment: {part!r} in {pattern!r}"
                )
            segments.append(PathSegment(value=part))
            continue

        if not param_name:
            raise ConfigurationError(f"Empty parameter name in route path {pattern!r}")
        if not _PARAM_NAME_RE.match(param_name):
            raise ConfigurationError(
                f"Invalid parameter name {param_name!r} in route path {pattern!r}"
            )
        if param_name in seen_params:
            raise ConfigurationError(
                f"Duplicate parameter {param_name!r} in route path {pattern!r}"
            )
        seen_params.add(param_name)
        segments.append(PathSegment(value=part, is_param=True, param_name=param_name))

    return segments


@dataclass(frozen=True, slots=True)
class PathMatcher:
    """Compiled matcher for one route pattern.

    Callable: ``matcher("/detail/42")`` returns a bool.  Equality and
    hashing follow the compiled regex, so ``/a/:x`` and ``/a/:y`` are
    equal.
    """

    regex: re.Pattern[str]
    params: tuple[str, ...] = ()

    def __call__(self, path: str) -> bool:
        return self.regex.fullmatch(path) is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathMatcher):
            return NotImplemented
        return self.regex.pattern == other.regex.pattern

    def __hash__(self) -> int:
        return hash(self.regex.pattern)


def compile_path(pattern: str) -> PathMatcher:
    """Compile a route pattern into a :class:`PathMatcher`.

    ``/detail/:id`` becomes ``^/detail/[^/]+/?$``.  The root pattern
    ``/`` matches only ``/``.
    """
    segments = parse_path(pattern)
    body = "".join(
        "/" + (PARAM_PATTERN if seg.is_param else re.escape(seg.value)) for seg in segments
    )
    source = f"^{body}/?$" if body else "^/$"
    params = tuple(seg.param_name for seg in segments if seg.param_name)
    return PathMatcher(regex=re.compile(source), params=params)
