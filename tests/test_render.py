from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path

import pytest
from pydantic import BaseModel

from annotest.annotations import Query
from annotest.invoke import QueryOutcome
from annotest.position import Position
from annotest.render import (
    OutputMode,
    banner,
    mode_for_path,
    render_outcome,
    render_structured,
    strip_location,
    write_query,
)


def _query(verb: str = "callers", query_id: str = "C1") -> Query:
    return Query(
        id=query_id,
        verb=verb,
        position=Position("calls.py", 3, 10, 40),
        filename="calls.py",
        start=31,
        end=34,
    )


@dataclass(frozen=True)
class _LinesResult:
    lines: tuple[str, ...]

    def write_to(self, stream) -> None:
        for line in self.lines:
            stream.write(f"{line}\n")

    def to_json(self):
        return {"lines": list(self.lines), "count": len(self.lines)}


class _Callers(BaseModel):
    callers: list[str]
    pos: str


@dataclass(frozen=True)
class _Describe:
    desc: str
    detail: str


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("path/to/file.go:12:3: some message", "some message"),
        ("no location here", "no location here"),
        ("a: b: c", "b: c"),
        ("trailing: ", ""),
        ("", ""),
        ("x:y", "x:y"),
    ],
)
def test_strip_location(line: str, expected: str) -> None:
    assert strip_location(line) == expected


def test_strip_location_is_stable_on_stripped_text() -> None:
    once = strip_location("path/to/file.go:12:3: some message")
    assert strip_location(once) == once


def test_banner() -> None:
    assert banner(_query("peers", "P9")) == "-------- @peers P9 --------\n"


def test_mode_for_path() -> None:
    assert mode_for_path(Path("calls-json.go")) is OutputMode.STRUCTURED
    assert mode_for_path(Path("dir/calls-json.py")) is OutputMode.STRUCTURED
    assert mode_for_path(Path("calls.go")) is OutputMode.PLAIN
    assert mode_for_path("calls.struct.py", structured_suffix=".struct") is OutputMode.STRUCTURED
    assert mode_for_path("calls-json.py", structured_suffix="") is OutputMode.PLAIN


def test_plain_rendering_strips_location_from_every_line() -> None:
    result = _LinesResult(("calls.py:3:10: main.f is called from:", "calls.py:7:2: \tmain.main"))
    outcome = QueryOutcome(query=_query(), result=result)

    assert render_outcome(outcome, OutputMode.PLAIN) == (
        "-------- @callers C1 --------\n"
        "main.f is called from:\n"
        "\tmain.main\n"
        "\n"
    )


def test_error_rendering_is_shared_by_both_modes() -> None:
    outcome = QueryOutcome(
        query=_query(), error="calls.py:3:10: no function call selected"
    )
    expected = "-------- @callers C1 --------\n\nError: no function call selected\n"

    assert render_outcome(outcome, OutputMode.PLAIN) == expected
    assert render_outcome(outcome, OutputMode.STRUCTURED) == expected


def test_structured_rendering_sorts_keys_and_indents_with_tabs() -> None:
    outcome = QueryOutcome(query=_query(), result=_LinesResult(("a", "b")))

    assert render_outcome(outcome, OutputMode.STRUCTURED) == (
        "-------- @callers C1 --------\n"
        "{\n"
        '\t"count": 2,\n'
        '\t"lines": [\n'
        '\t\t"a",\n'
        '\t\t"b"\n'
        "\t]\n"
        "}\n"
    )


def test_structured_rendering_of_pydantic_and_dataclass_results() -> None:
    assert render_structured(_Callers(callers=["main"], pos="x")) == (
        '{\n\t"callers": [\n\t\t"main"\n\t],\n\t"pos": "x"\n}\n'
    )
    assert render_structured(_Describe(desc="d", detail="func")) == (
        '{\n\t"desc": "d",\n\t"detail": "func"\n}\n'
    )


def test_structured_rendering_reports_serialization_errors() -> None:
    class _Opaque:
        def to_json(self):
            return {"set": {1, 2}}

    assert render_structured(_Opaque()).startswith("JSON error: ")
    assert render_structured(object()).startswith("JSON error: cannot serialize")


def test_failing_result_renders_inline_error() -> None:
    class _Broken:
        def write_to(self, stream) -> None:
            stream.write("partial\n")
            raise RuntimeError("calls.py:3:10: no callers available")

        def to_json(self):
            raise RuntimeError("no json")

    outcome = QueryOutcome(query=_query(), result=_Broken())

    assert render_outcome(outcome, OutputMode.PLAIN) == (
        "-------- @callers C1 --------\n\nError: no callers available\n"
    )
    assert render_outcome(outcome, OutputMode.STRUCTURED) == (
        "-------- @callers C1 --------\nJSON error: no json\n"
    )


def test_plain_rendering_falls_back_to_str() -> None:
    outcome = QueryOutcome(query=_query(), result=_Describe(desc="d", detail="x"))

    rendered = render_outcome(outcome, OutputMode.PLAIN)

    assert rendered.startswith("-------- @callers C1 --------\n")
    assert "_Describe(desc='d', detail='x')" in rendered


def test_write_query_appends_to_stream() -> None:
    out = io.StringIO()
    write_query(out, QueryOutcome(query=_query(query_id="A"), error="boom"), OutputMode.PLAIN)
    write_query(out, QueryOutcome(query=_query(query_id="B"), error="x: bang"), OutputMode.PLAIN)

    assert out.getvalue() == (
        "-------- @callers A --------\n\nError: boom\n"
        "-------- @callers B --------\n\nError: bang\n"
    )
