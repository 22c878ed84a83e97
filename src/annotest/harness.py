"""Driver loop: fixture file -> queries -> engine -> got artifact -> golden diff.

Fixtures are processed one at a time in the order given, and the queries of a
fixture in source order, so a got artifact is byte-for-byte reproducible.
Failures of one fixture never stop the processing of the next.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, TextIO

from annotest.annotations import parse_queries
from annotest.config import (
    TomlTable,
    harness_engine_command,
    harness_engine_timeout,
    harness_search_path,
    harness_update,
)
from annotest.engine import CommandEngine, Engine, EngineContext, load_engine
from annotest.exceptions import SourceFileError
from annotest.golden import (
    ARTIFACT_SUFFIXES,
    CommandCopier,
    DiffCommandComparator,
    DifflibComparator,
    FileComparator,
    FileCopier,
    GoldenStatus,
    ShutilCopier,
    artifact_paths,
    compare_and_update,
)
from annotest.ingest.registry import supported_extensions
from annotest.invoke import invoke_query
from annotest.render import DEFAULT_STRUCTURED_SUFFIX, mode_for_path, write_query
from annotest.report import Reporter

COMPARATORS: dict[str, type[FileComparator]] = {
    "diff": DiffCommandComparator,
    "difflib": DifflibComparator,
}
COPIERS: dict[str, type[FileCopier]] = {
    "cp": CommandCopier,
    "shutil": ShutilCopier,
}


@dataclass(frozen=True)
class HarnessConfig:
    engine: Engine
    context: EngineContext = field(default_factory=EngineContext)
    update: bool = False
    structured_suffix: str = DEFAULT_STRUCTURED_SUFFIX
    comparator: FileComparator = field(default_factory=DiffCommandComparator)
    copier: FileCopier = field(default_factory=CommandCopier)
    engine_log: TextIO | None = None


class FileStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    UPDATED = "updated"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass(frozen=True)
class FileOutcome:
    path: str
    status: FileStatus
    queries: int = 0
    query_errors: int = 0
    got: str | None = None
    golden: str | None = None


def engine_from_section(section: TomlTable) -> Engine:
    spec = section.get("engine")
    if isinstance(spec, str) and spec.strip():
        return load_engine(spec.strip())
    argv = harness_engine_command(section)
    if argv:
        return CommandEngine(argv, timeout=harness_engine_timeout(section))
    raise ValueError("no engine configured: set 'engine' or 'engine_command' under [harness]")


def _named_capability(table: dict[str, type], name: object, *, kind: str) -> object:
    key = str(name or "").strip().lower()
    factory = table.get(key)
    if factory is None:
        choices = ", ".join(sorted(table))
        raise ValueError(f"unknown {kind} {name!r} (expected one of: {choices})")
    return factory()


def config_from_section(
    section: TomlTable,
    *,
    root: Path,
    engine: Engine | None = None,
) -> HarnessConfig:
    """Build a HarnessConfig from a merged ``[harness]`` table."""
    if engine is None:
        engine = engine_from_section(section)
    suffix = section.get("structured_suffix")
    return HarnessConfig(
        engine=engine,
        context=EngineContext(
            root=root,
            search_path=tuple(Path(entry) for entry in harness_search_path(section)),
        ),
        update=harness_update(section),
        structured_suffix=suffix if isinstance(suffix, str) else DEFAULT_STRUCTURED_SUFFIX,
        comparator=_named_capability(
            COMPARATORS, section.get("comparator", "diff"), kind="comparator"
        ),
        copier=_named_capability(COPIERS, section.get("copier", "cp"), kind="copier"),
    )


def discover_fixtures(paths: Iterable[Path]) -> list[Path]:
    extensions = set(supported_extensions())
    fixtures: list[Path] = []
    seen: set[Path] = set()
    for path in paths:
        if path.is_dir():
            candidates = [
                candidate
                for candidate in sorted(path.rglob("*"))
                if candidate.is_file()
                and candidate.suffix.lower() in extensions
                and candidate.suffix not in ARTIFACT_SUFFIXES
            ]
        else:
            candidates = [path]
        for candidate in candidates:
            if candidate in seen:
                continue
            seen.add(candidate)
            fixtures.append(candidate)
    return fixtures


def run_file(path: Path | str, config: HarnessConfig, reporter: Reporter) -> FileOutcome:
    path = Path(path)
    name = str(path)
    errors_before = len(reporter.errors_for(name))
    try:
        queries = parse_queries(path, reporter)
    except SourceFileError as exc:
        reporter.error(str(exc), path=name)
        return FileOutcome(path=name, status=FileStatus.ERROR)

    mode = mode_for_path(path, config.structured_suffix)
    got, golden = artifact_paths(path)
    query_errors = 0
    try:
        with got.open("w", encoding="utf-8", newline="") as out:
            # Each query's output is appended in directive order.
            for query in queries:
                outcome = invoke_query(
                    query, config.engine, config.context, log=config.engine_log
                )
                if outcome.error is not None:
                    query_errors += 1
                write_query(out, outcome, mode)
    except OSError as exc:
        reporter.error(f"Create({got}) failed: {exc}", path=name)
        return FileOutcome(path=name, status=FileStatus.ERROR, queries=len(queries))

    golden_status = compare_and_update(
        path,
        got=got,
        golden=golden,
        comparator=config.comparator,
        copier=config.copier,
        update=config.update,
        reporter=reporter,
    )
    if golden_status is GoldenStatus.SKIPPED:
        status = FileStatus.SKIPPED
    elif golden_status is GoldenStatus.UPDATED:
        status = FileStatus.UPDATED
    elif len(reporter.errors_for(name)) > errors_before:
        status = FileStatus.FAILED
    else:
        status = FileStatus.PASSED
    return FileOutcome(
        path=name,
        status=status,
        queries=len(queries),
        query_errors=query_errors,
        got=str(got),
        golden=str(golden),
    )


def run_fixtures(
    paths: Iterable[Path | str],
    config: HarnessConfig,
    reporter: Reporter,
) -> list[FileOutcome]:
    """Run every fixture; one file failing never stops the rest."""
    outcomes: list[FileOutcome] = []
    for path in paths:
        try:
            outcomes.append(run_file(path, config, reporter))
        except Exception as exc:
            name = str(path)
            reporter.error(f"{name}: harness failure: {exc}", path=name)
            outcomes.append(FileOutcome(path=name, status=FileStatus.ERROR))
    return outcomes
