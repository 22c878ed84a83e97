from __future__ import annotations

import shutil
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for entry in (ROOT, ROOT / "src"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))


import pytest

from annotest.engine import EngineContext
from annotest.golden import DifflibComparator, ShutilCopier
from annotest.harness import HarnessConfig
from annotest.report import Reporter
from tests.fake_engines import FakeEngine

TESTDATA = Path(__file__).resolve().parent / "testdata"


@pytest.fixture
def reporter() -> Reporter:
    return Reporter()


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def write_source(tmp_path: Path):
    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(text.encode("utf-8"))
        return path

    return _write


@pytest.fixture
def make_config(tmp_path: Path, fake_engine: FakeEngine):
    def _make(*, update: bool = False, **overrides: object) -> HarnessConfig:
        values: dict[str, object] = {
            "engine": fake_engine,
            "context": EngineContext(root=tmp_path),
            "update": update,
            "comparator": DifflibComparator(),
            "copier": ShutilCopier(),
        }
        values.update(overrides)
        return HarnessConfig(**values)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def testdata_copy(tmp_path: Path) -> Path:
    target = tmp_path / "testdata"
    shutil.copytree(TESTDATA, target)
    return target
