from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import typer

from annotest.annotations import parse_queries
from annotest.config import TomlTable, harness_defaults, harness_fixtures, merge_payload
from annotest.exceptions import SourceFileError
from annotest.harness import (
    FileOutcome,
    config_from_section,
    discover_fixtures,
    run_fixtures,
)
from annotest.invoke import location_spec
from annotest.report import Reporter
from annotest.schema import DiagnosticDTO, FileOutcomeDTO, RunReportDTO

app = typer.Typer(add_completion=False)


def _echo_err(message: str) -> None:
    typer.echo(message, err=True)


def _ensure_import_root(root: Path) -> None:
    entry = str(root.resolve())
    if entry not in sys.path:
        sys.path.insert(0, entry)


def _build_report(
    outcomes: list[FileOutcome],
    reporter: Reporter,
    *,
    update: bool,
) -> RunReportDTO:
    return RunReportDTO(
        update=update,
        files=[
            FileOutcomeDTO(
                path=outcome.path,
                status=outcome.status.value,
                queries=outcome.queries,
                query_errors=outcome.query_errors,
                got=outcome.got,
                golden=outcome.golden,
            )
            for outcome in outcomes
        ],
        diagnostics=[
            DiagnosticDTO(kind=item.kind.value, message=item.message, path=item.path)
            for item in reporter.diagnostics
        ],
        failures=len(reporter.errors),
    )


@app.command("run")
def run(
    paths: List[Path] = typer.Argument(None, help="Fixture files or directories."),
    update: bool = typer.Option(False, "--update", help="Update the golden files."),
    root: Path = typer.Option(Path("."), "--root"),
    config: Optional[Path] = typer.Option(None, "--config"),
    engine: Optional[str] = typer.Option(
        None, "--engine", help="Engine entry point as module:attribute."
    ),
    engine_command: Optional[str] = typer.Option(
        None, "--engine-command", help="External engine command line."
    ),
    search_path: List[str] = typer.Option([], "--search-path"),
    comparator: Optional[str] = typer.Option(None, "--comparator", help="diff|difflib"),
    report: Optional[Path] = typer.Option(
        None, "--report", help="Write a JSON run report."
    ),
) -> None:
    """Run golden query tests over annotated fixture files."""
    defaults = harness_defaults(root=root, config_path=config)
    payload: TomlTable = {
        "update": True if update else None,
        "engine": engine,
        "engine_command": engine_command,
        "search_path": list(search_path) or None,
        "comparator": comparator,
    }
    if engine_command is not None:
        defaults = {key: value for key, value in defaults.items() if key != "engine"}
    section = merge_payload(payload, defaults)
    _ensure_import_root(root)
    try:
        harness_config = config_from_section(section, root=root)
    except (ValueError, ImportError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    targets = list(paths or []) or [root / entry for entry in harness_fixtures(section)]
    if not targets:
        raise typer.BadParameter("no fixtures given and none configured under [harness]")
    fixtures = discover_fixtures(targets)

    reporter = Reporter(echo=_echo_err)
    outcomes = run_fixtures(fixtures, harness_config, reporter)
    for outcome in outcomes:
        typer.echo(f"{outcome.status.value:8} {outcome.path} ({outcome.queries} queries)")
    typer.echo(reporter.summary())

    if report is not None:
        document = _build_report(outcomes, reporter, update=harness_config.update)
        report.parent.mkdir(parents=True, exist_ok=True)
        report.write_text(document.model_dump_json(indent=2) + "\n", encoding="utf-8")
    if reporter.failed:
        raise typer.Exit(code=1)


@app.command("queries")
def queries(path: Path = typer.Argument(..., help="Annotated fixture file.")) -> None:
    """List the queries annotated in a fixture file."""
    reporter = Reporter(echo=_echo_err)
    try:
        parsed = parse_queries(path, reporter)
    except SourceFileError as exc:
        _echo_err(str(exc))
        raise typer.Exit(code=2) from exc
    for query in parsed:
        typer.echo(f"{query.position}: @{query.verb} {query.id} {location_spec(query)}")
    if reporter.failed:
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
