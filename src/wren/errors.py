"""Wren exception hierarchy.

Shared across the route builder, the build orchestrator, and the
prerender lookup so every module raises and catches the same types.
"""

from pathlib import Path


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when build configuration is invalid.

    Covers duplicate route names, malformed path patterns, declared
    templates or skeletons that do not exist, and invalid config files.
    Always fatal: raised before anything is compiled.
    """


class CompileError(WrenError):
    """The bundler reported errors. The whole build run is aborted.

    ``errors`` holds every message the bundler reported, in order.
    """

    def __init__(self, errors: tuple[str, ...] | list[str]) -> None:
        self.errors: tuple[str, ...] = tuple(errors)
        count = len(self.errors)
        noun = "error" if count == 1 else "errors"
        detail = "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(f"Compilation failed with {count} {noun}:\n{detail}")


class ArtifactError(WrenError):
    """A prerendered HTML artifact could not be read.

    Raised by the backing store; the prerender lookup catches it and
    falls back to live rendering.
    """

    def __init__(self, path: str | Path, detail: str = "") -> None:
        self.path = Path(path)
        message = f"Prerendered artifact unavailable: {self.path}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
