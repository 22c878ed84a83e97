from __future__ import annotations

from pathlib import Path

import pytest

from annotest.exceptions import NeverThrown, SourceFileError
from annotest.ingest import registry
from annotest.ingest.adapter_contract import CommentScanner, line_offsets
from annotest.ingest.line_comment_adapter import LineCommentScanner
from annotest.ingest.python_adapter import PythonScanner


def test_line_offsets() -> None:
    assert line_offsets(b"") == [0]
    assert line_offsets(b"ab\ncd\n") == [0, 3, 6]
    assert line_offsets(b"ab\r\ncd") == [0, 4]


def test_python_scanner_reports_byte_positions() -> None:
    data = "x = 1\ns = \"é\"  # note\n".encode("utf-8")

    (comment,) = PythonScanner().scan(Path("m.py"), data)

    assert comment.text == " note"
    assert comment.position.line == 2
    # "s = \"é\"  " is ten bytes: the accented letter takes two.
    assert comment.position.column == 11
    assert comment.position.offset == 6 + 10
    assert data[comment.position.offset : comment.position.offset + 1] == b"#"
    assert str(comment.position) == "m.py:2:11"


def test_python_scanner_keeps_source_order() -> None:
    data = b"# first\nx = 1  # second\n\n# third\n"

    comments = PythonScanner().scan(Path("m.py"), data)

    assert [item.text.strip() for item in comments] == ["first", "second", "third"]
    assert [item.position.line for item in comments] == [1, 2, 4]


def test_python_scanner_ignores_hashes_in_strings() -> None:
    data = b'url = "a#b"  # real\n'

    (comment,) = PythonScanner().scan(Path("m.py"), data)

    assert comment.text == " real"
    assert comment.position.column == 14


def test_python_scanner_rejects_syntax_errors() -> None:
    with pytest.raises(SourceFileError, match="syntax error"):
        PythonScanner().scan(Path("bad.py"), b"def f(:\n")


def test_line_comment_scanner_skips_literals_and_block_comments() -> None:
    data = b"\n".join(
        [
            b'a := "http://x" // one',
            b"/* // not",
            b"   a comment */ b := 'x' // two",
            b"c := `raw",
            b"// still raw` // three",
        ]
    )

    comments = LineCommentScanner().scan(Path("m.go"), data)

    assert [item.text for item in comments] == [" one", " two", " three"]
    assert [item.position.line for item in comments] == [1, 3, 5]
    for item in comments:
        assert data[item.position.offset : item.position.offset + 2] == b"//"
        assert item.position.line_start == line_offsets(data)[item.position.line - 1]


def test_line_comment_scanner_strips_carriage_return() -> None:
    (comment,) = LineCommentScanner().scan(Path("m.c"), b"x; // hi\r\ny;\r\n")

    assert comment.text == " hi"


@pytest.mark.parametrize(
    "data",
    [
        b'a := "open\n',
        b"/* never closed",
        b"c := `raw",
    ],
)
def test_line_comment_scanner_rejects_unterminated_tokens(data: bytes) -> None:
    with pytest.raises(SourceFileError):
        LineCommentScanner().scan(Path("m.go"), data)


def test_registry_resolves_by_extension() -> None:
    assert registry.resolve_scanner(Path("a.py")).language_id == "python"
    assert registry.resolve_scanner(Path("a.GO")).language_id == "c-family"
    assert registry.resolve_scanner(Path("a.txt")) is None
    assert ".py" in registry.supported_extensions()


def test_registry_resolves_by_language() -> None:
    scanner = registry.resolve_scanner(Path("a.txt"), language_id="python")
    assert isinstance(scanner, CommentScanner)
    with pytest.raises(NeverThrown, match="unknown comment scanner"):
        registry.resolve_scanner(Path("a.py"), language_id="cobol")
