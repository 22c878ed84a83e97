"""pytest integration.

Run golden query tests from a test module::

    def test_fixtures(golden_harness):
        golden_harness(["testdata/calls.py"], engine=MyEngine())

and refresh golden files with ``pytest --update-golden``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable

import pytest

from annotest.engine import Engine, EngineContext
from annotest.golden import DifflibComparator, FileComparator, FileCopier, ShutilCopier
from annotest.harness import FileOutcome, HarnessConfig, discover_fixtures, run_fixtures
from annotest.render import DEFAULT_STRUCTURED_SUFFIX
from annotest.report import DiagnosticKind, Reporter

UPDATE_OPTION = "--update-golden"


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("annotest")
    group.addoption(
        UPDATE_OPTION,
        action="store_true",
        default=False,
        help="Update the golden files of annotated query fixtures.",
    )


@pytest.fixture
def golden_update(request: pytest.FixtureRequest) -> bool:
    return bool(request.config.getoption(UPDATE_OPTION, default=False))


@pytest.fixture
def golden_harness(golden_update: bool) -> Callable[..., list[FileOutcome]]:
    def _run(
        paths: Iterable[Path | str],
        *,
        engine: Engine,
        context: EngineContext | None = None,
        structured_suffix: str = DEFAULT_STRUCTURED_SUFFIX,
        comparator: FileComparator | None = None,
        copier: FileCopier | None = None,
    ) -> list[FileOutcome]:
        config = HarnessConfig(
            engine=engine,
            context=context or EngineContext(),
            update=golden_update,
            structured_suffix=structured_suffix,
            comparator=comparator or DifflibComparator(),
            copier=copier or ShutilCopier(),
        )
        reporter = Reporter()
        fixtures = discover_fixtures(Path(path) for path in paths)
        outcomes = run_fixtures(fixtures, config, reporter)
        for item in reporter.diagnostics:
            if item.kind is not DiagnosticKind.ERROR:
                print(item.render())
        if reporter.failed:
            pytest.fail(reporter.summary(), pytrace=False)
        return outcomes

    return _run
