"""Got/golden artifact comparison and golden updating.

For a fixture ``calls.go`` the captured output is written to ``calls.got`` and
compared against the checked-in ``calls.golden`` sibling.
"""

from __future__ import annotations

import difflib
import shutil
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Protocol, runtime_checkable

from annotest.exceptions import AnnotestError, ToolError
from annotest.report import Reporter

GOT_SUFFIX = ".got"
GOLDEN_SUFFIX = ".golden"
ARTIFACT_SUFFIXES = (GOT_SUFFIX, GOLDEN_SUFFIX)


def artifact_paths(source: Path | str) -> tuple[Path, Path]:
    source = Path(source)
    return source.with_suffix(GOT_SUFFIX), source.with_suffix(GOLDEN_SUFFIX)


class GoldenStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    UPDATED = "updated"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Comparison:
    equal: bool
    diff: str = ""
    detail: str = ""


@runtime_checkable
class FileComparator(Protocol):
    name: str

    def available(self) -> bool: ...

    def compare(self, golden: Path, got: Path) -> Comparison: ...


@runtime_checkable
class FileCopier(Protocol):
    name: str

    def available(self) -> bool: ...

    def copy(self, src: Path, dst: Path) -> None: ...


@dataclass
class DiffCommandComparator:
    executable: str = "diff"
    which_fn: Callable[[str], str | None] = shutil.which
    run_fn: Callable[..., subprocess.CompletedProcess[str]] = subprocess.run

    @property
    def name(self) -> str:
        return self.executable

    def available(self) -> bool:
        return self.which_fn(self.executable) is not None

    def compare(self, golden: Path, got: Path) -> Comparison:
        try:
            proc = self.run_fn(
                [self.executable, "-u", str(golden), str(got)],
                check=False,
                capture_output=True,
                text=True,
            )
        except OSError as exc:
            return Comparison(equal=False, detail=f"{self.executable}: {exc}")
        if proc.returncode == 0:
            return Comparison(equal=True)
        diff = proc.stdout
        if proc.stderr:
            diff = f"{diff}{proc.stderr}"
        return Comparison(equal=False, diff=diff, detail=f"exit status {proc.returncode}")


@dataclass(frozen=True)
class DifflibComparator:
    name: str = "difflib"

    def available(self) -> bool:
        return True

    def compare(self, golden: Path, got: Path) -> Comparison:
        got_data = got.read_bytes()
        try:
            golden_data = golden.read_bytes()
        except FileNotFoundError:
            return Comparison(equal=False, diff="", detail=f"{golden}: no such file")
        if golden_data == got_data:
            return Comparison(equal=True)
        diff = difflib.unified_diff(
            golden_data.decode("utf-8", errors="replace").splitlines(keepends=True),
            got_data.decode("utf-8", errors="replace").splitlines(keepends=True),
            fromfile=str(golden),
            tofile=str(got),
        )
        lines = [line if line.endswith("\n") else f"{line}\n\\ No newline at end of file\n" for line in diff]
        return Comparison(equal=False, diff="".join(lines), detail="files differ")


@dataclass
class CommandCopier:
    executable: str = "cp"
    which_fn: Callable[[str], str | None] = shutil.which
    run_fn: Callable[..., subprocess.CompletedProcess[str]] = subprocess.run

    @property
    def name(self) -> str:
        return self.executable

    def available(self) -> bool:
        return self.which_fn(self.executable) is not None

    def copy(self, src: Path, dst: Path) -> None:
        proc = self.run_fn(
            [self.executable, str(src), str(dst)],
            check=False,
            capture_output=True,
            text=True,
        )
        if proc.returncode != 0:
            message = proc.stderr.strip() or f"exit status {proc.returncode}"
            raise ToolError(message)


@dataclass(frozen=True)
class ShutilCopier:
    name: str = "shutil"

    def available(self) -> bool:
        return True

    def copy(self, src: Path, dst: Path) -> None:
        shutil.copyfile(src, dst)


def compare_and_update(
    source: Path,
    *,
    got: Path,
    golden: Path,
    comparator: FileComparator,
    copier: FileCopier,
    update: bool,
    reporter: Reporter,
) -> GoldenStatus:
    """Diff ``got`` against ``golden``; in update mode, overwrite a stale golden."""
    path = str(source)
    if not comparator.available():
        reporter.skip(
            f"skipping golden comparison for {source}: {comparator.name} not available",
            path=path,
        )
        return GoldenStatus.SKIPPED

    comparison = comparator.compare(golden, got)
    if comparison.equal:
        return GoldenStatus.PASSED

    reporter.error(
        f"Golden tests for {source} failed: {comparison.detail}.\n{comparison.diff}\n",
        path=path,
    )
    if not update:
        return GoldenStatus.FAILED

    reporter.log(f"Updating {golden}...", path=path)
    if not copier.available():
        reporter.error(f"Update failed: {copier.name} not available", path=path)
        return GoldenStatus.FAILED
    try:
        copier.copy(got, golden)
    except (OSError, AnnotestError) as exc:
        reporter.error(f"Update failed: {exc}", path=path)
        return GoldenStatus.FAILED
    return GoldenStatus.UPDATED
