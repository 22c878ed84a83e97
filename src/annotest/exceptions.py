"""Exception types raised across the annotest harness."""

from __future__ import annotations

from pathlib import Path


class AnnotestError(RuntimeError):
    pass


class SourceFileError(AnnotestError):
    """A fixture file could not be read or failed base syntactic parsing.

    This is the only fatal class of error in a run, and it is fatal for the
    offending file alone: the driver reports it and continues with the next
    fixture.
    """

    def __init__(self, path: Path | str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = str(path)
        self.reason = message


class UnquoteError(AnnotestError, ValueError):
    pass


class EngineError(AnnotestError):
    """The analysis engine reported a failure for one query."""


class NeverThrown(AnnotestError):
    """Raised by never() when a path marked unreachable is reached."""

    def __init__(self, message: str, *, env: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.env = dict(env or {})


class ToolError(AnnotestError):
    """An external comparison or copy tool failed to run."""
