"""Annotation parser: turns `@verb id "regexp"` comments into queries.

A directive lives in a comment on the line whose code it annotates:

    foo(bar)  # @callers C1 "foo"

``verb`` is the query mode forwarded to the engine, ``id`` names the query
uniquely within its file, and the quoted regular expression selects the
substring of the directive's own line (the code before the comment) that the
engine receives as its input selection.
"""

from __future__ import annotations

import ast
import re
import warnings
from dataclasses import dataclass
from pathlib import Path

from annotest.exceptions import SourceFileError, UnquoteError
from annotest.ingest.adapter_contract import CommentScanner
from annotest.ingest.registry import resolve_scanner
from annotest.invariants import never
from annotest.position import Position
from annotest.report import Reporter

# @verb id "regexp"
DIRECTIVE_RE = re.compile(r'@([a-z]+)\s+(\S+)\s+(".*)$')


@dataclass(frozen=True)
class Query:
    id: str
    verb: str
    position: Position
    filename: str
    start: int
    end: int


def unquote(text: str) -> str:
    """Decode a double-quoted string literal, escapes included."""
    if len(text) < 2 or text[0] != '"' or text[-1] != '"':
        raise UnquoteError(f"can't unquote {text}")
    try:
        with warnings.catch_warnings():
            # Invalid escape sequences are rejected, not passed through.
            warnings.simplefilter("error")
            value = ast.literal_eval(text)
    except (SyntaxError, ValueError, Warning) as exc:
        raise UnquoteError(f"can't unquote {text}") from exc
    if not isinstance(value, str):
        raise UnquoteError(f"can't unquote {text}")
    return value


def parse_selection_pattern(text: str) -> re.Pattern[bytes]:
    """Compile a quoted selection pattern for matching raw source bytes."""
    pattern = unquote(text)
    try:
        return re.compile(pattern.encode("utf-8"))
    except re.error as exc:
        raise UnquoteError(f"bad selection pattern {text}: {exc}") from exc


def read_source(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise SourceFileError(path, f"cannot read file: {exc.strerror or exc}") from exc


def parse_queries(
    path: Path | str,
    reporter: Reporter,
    *,
    scanner: CommentScanner | None = None,
) -> list[Query]:
    """Return the queries annotated in ``path``, in source order.

    Malformed directives are reported to ``reporter`` and skipped. A file that
    cannot be read or parsed raises SourceFileError.
    """
    path = Path(path)
    filename = str(path)
    data = read_source(path)
    if scanner is None:
        scanner = resolve_scanner(path)
        if scanner is None:
            raise SourceFileError(path, f"no comment scanner for {path.suffix or 'extensionless'} files")

    lines = data.split(b"\n")
    queries: list[Query] = []
    queries_by_id: dict[str, Query] = {}
    for comment in scanner.scan(path, data):
        text = comment.text.strip()
        if not text.startswith("@"):
            continue
        posn = comment.position

        match = DIRECTIVE_RE.search(text)
        if match is None:
            reporter.error(f"{posn}: ill-formed query: {text}", path=filename)
            continue

        verb, query_id, quoted = match.group(1), match.group(2), match.group(3)
        previous = queries_by_id.get(query_id)
        if previous is not None:
            reporter.error(f"{posn}: duplicate id {query_id}", path=filename)
            reporter.error(f"{previous.position}: previously used here", path=filename)
            continue

        try:
            select_re = parse_selection_pattern(quoted)
        except UnquoteError as exc:
            reporter.error(f"{posn}: {exc}", path=filename)
            continue

        # Bytes of the directive's line, sans the comment itself.
        line = lines[posn.line - 1][: posn.column - 1]
        found = select_re.search(line)
        if found is None:
            shown = line.decode("utf-8", errors="replace")
            reporter.error(
                f"{posn}: selection pattern {quoted} doesn't match line {shown!r}",
                path=filename,
            )
            continue

        line_start = posn.line_start
        query = Query(
            id=query_id,
            verb=verb,
            position=posn,
            filename=filename,
            start=line_start + found.start(),
            end=line_start + found.end(),
        )
        if not 0 <= query.start <= query.end <= len(data):
            never("selection outside file", query_id=query_id, start=query.start, end=query.end)
        queries.append(query)
        queries_by_id[query_id] = query

    # A list, not the id map, so iteration order is source order.
    return queries
