"""Analysis engine capability.

The harness treats the engine as a black box that answers one query at a time.
An engine receives the query verb, a location specifier
(``<file>:#<start>,<end>``), the files making up the analyzed program and an
EngineContext describing where imports and dependencies resolve.
"""

from __future__ import annotations

import importlib
import inspect
import json
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Protocol, Sequence, TextIO, runtime_checkable

from annotest.exceptions import EngineError
from annotest.json_types import JSONValue


@runtime_checkable
class QueryResult(Protocol):
    def write_to(self, stream: TextIO) -> None: ...

    def to_json(self) -> JSONValue: ...


@runtime_checkable
class Engine(Protocol):
    def run_query(
        self,
        verb: str,
        location: str,
        *,
        files: Sequence[str],
        context: EngineContext,
        log: TextIO | None = None,
    ) -> QueryResult: ...


@dataclass(frozen=True)
class EngineContext:
    root: Path = Path(".")
    search_path: tuple[Path, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    search_path_var: str = "PYTHONPATH"

    def environ(self, base: Mapping[str, str] | None = None) -> dict[str, str]:
        environ = dict(os.environ if base is None else base)
        environ.update(self.env)
        if self.search_path:
            entries = [str(self.root / entry) for entry in self.search_path]
            existing = environ.get(self.search_path_var, "")
            if existing:
                entries.append(existing)
            environ[self.search_path_var] = os.pathsep.join(entries)
        return environ


@dataclass(frozen=True)
class TextResult:
    text: str

    def write_to(self, stream: TextIO) -> None:
        stream.write(self.text)

    def to_json(self) -> JSONValue:
        try:
            return json.loads(self.text)
        except json.JSONDecodeError:
            return self.text.splitlines()


@dataclass
class CommandEngine:
    """Engine backed by an external command.

    The command is run as ``argv + [verb, location, *files]`` in the context
    root. A non-zero exit status is an engine error carrying stderr (or
    stdout when stderr is empty).
    """

    argv: Sequence[str]
    timeout: float | None = None
    run_fn: Callable[..., subprocess.CompletedProcess[str]] = subprocess.run

    def run_query(
        self,
        verb: str,
        location: str,
        *,
        files: Sequence[str],
        context: EngineContext,
        log: TextIO | None = None,
    ) -> QueryResult:
        cmd = [*self.argv, verb, location, *files]
        try:
            proc = self.run_fn(
                cmd,
                cwd=context.root,
                env=context.environ(),
                check=False,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise EngineError(f"{self.argv[0]}: {exc}") from exc
        if log is not None and proc.stderr:
            log.write(proc.stderr)
        if proc.returncode != 0:
            message = proc.stderr.strip() or proc.stdout.strip()
            raise EngineError(message or f"{self.argv[0]} exited with status {proc.returncode}")
        return TextResult(proc.stdout)


@dataclass(frozen=True)
class CallableEngine:
    fn: Callable[..., QueryResult]

    def run_query(
        self,
        verb: str,
        location: str,
        *,
        files: Sequence[str],
        context: EngineContext,
        log: TextIO | None = None,
    ) -> QueryResult:
        return self.fn(verb, location, files=files, context=context, log=log)


def load_engine(spec: str) -> Engine:
    """Resolve a ``module:attribute`` entry point into an Engine.

    The attribute may be an engine instance, a zero-argument engine class or a
    plain function with the ``run_query`` signature.
    """
    module_name, sep, attr_path = spec.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(f"engine entry point must look like 'module:attribute', got {spec!r}")
    target: object = importlib.import_module(module_name)
    for part in attr_path.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise ValueError(f"engine entry point {spec!r} has no attribute {part!r}") from exc
    if inspect.isclass(target):
        target = target()
    if isinstance(target, Engine):
        return target
    if callable(target):
        return CallableEngine(target)
    raise ValueError(f"engine entry point {spec!r} is not an engine or callable")
