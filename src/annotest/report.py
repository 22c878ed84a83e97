from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable


class DiagnosticKind(str, Enum):
    ERROR = "error"
    LOG = "log"
    SKIP = "skip"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    path: str | None = None

    def render(self) -> str:
        if self.kind is DiagnosticKind.ERROR:
            return self.message
        return f"[{self.kind.value}] {self.message}"


@dataclass
class Reporter:
    """Accumulating, non-fatal reporting channel for a harness run.

    Errors never interrupt control flow; they are collected in emission order
    and summarized at the end of the run. ``echo`` receives every rendered
    diagnostic as soon as it is recorded.
    """

    echo: Callable[[str], None] | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def error(self, message: str, *, path: str | None = None) -> None:
        self._record(Diagnostic(DiagnosticKind.ERROR, message, path))

    def log(self, message: str, *, path: str | None = None) -> None:
        self._record(Diagnostic(DiagnosticKind.LOG, message, path))

    def skip(self, message: str, *, path: str | None = None) -> None:
        self._record(Diagnostic(DiagnosticKind.SKIP, message, path))

    def _record(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        if self.echo is not None:
            self.echo(diagnostic.render())

    @property
    def errors(self) -> list[Diagnostic]:
        return [item for item in self.diagnostics if item.kind is DiagnosticKind.ERROR]

    @property
    def failed(self) -> bool:
        return any(item.kind is DiagnosticKind.ERROR for item in self.diagnostics)

    def errors_for(self, path: str) -> list[Diagnostic]:
        return [item for item in self.errors if item.path == path]

    def summary(self) -> str:
        errors = self.errors
        if not errors:
            return "ok"
        lines = [f"{len(errors)} failure(s):"]
        lines.extend(item.render() for item in errors)
        return "\n".join(lines)
