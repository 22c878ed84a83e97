"""Rendering of query outcomes into the text captured in got artifacts.

Location information (``file:line:col: ``) is stripped from every rendered
line because it is too environment-dependent to compare byte-for-byte with a
checked-in golden file.
"""

from __future__ import annotations

import io
import json
from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path
from typing import TextIO

from pydantic import BaseModel

from annotest.annotations import Query
from annotest.invoke import QueryOutcome
from annotest.json_types import JSONValue

DEFAULT_STRUCTURED_SUFFIX = "-json"


class OutputMode(str, Enum):
    PLAIN = "plain"
    STRUCTURED = "structured"


def mode_for_path(path: Path | str, structured_suffix: str = DEFAULT_STRUCTURED_SUFFIX) -> OutputMode:
    if structured_suffix and Path(path).stem.endswith(structured_suffix):
        return OutputMode.STRUCTURED
    return OutputMode.PLAIN


def strip_location(line: str) -> str:
    """Remove a leading "file:line: " prefix: everything through the first ": "."""
    index = line.find(": ")
    if index >= 0:
        return line[index + 2 :]
    return line


def banner(query: Query) -> str:
    return f"-------- @{query.verb} {query.id} --------\n"


def structured_payload(result: object) -> JSONValue:
    to_json = getattr(result, "to_json", None)
    if callable(to_json):
        return to_json()
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json")
    if is_dataclass(result) and not isinstance(result, type):
        return asdict(result)
    raise TypeError(f"cannot serialize result of type {type(result).__name__}")


def render_structured(result: object) -> str:
    try:
        text = json.dumps(structured_payload(result), indent="\t", sort_keys=True)
    except Exception as exc:
        return f"JSON error: {exc}\n"
    return text + "\n"


def render_plain(result: object) -> str:
    capture = io.StringIO()
    write_to = getattr(result, "write_to", None)
    if callable(write_to):
        write_to(capture)
    else:
        capture.write(str(result))
    return "".join(f"{strip_location(line)}\n" for line in capture.getvalue().split("\n"))


def render_outcome(outcome: QueryOutcome, mode: OutputMode) -> str:
    parts = [banner(outcome.query)]
    if outcome.error is not None:
        parts.append(f"\nError: {strip_location(outcome.error)}\n")
    elif mode is OutputMode.STRUCTURED:
        parts.append(render_structured(outcome.result))
    else:
        try:
            parts.append(render_plain(outcome.result))
        except Exception as exc:
            # Rendered inline, like an engine error.
            parts.append(f"\nError: {strip_location(str(exc))}\n")
    return "".join(parts)


def write_query(out: TextIO, outcome: QueryOutcome, mode: OutputMode) -> None:
    out.write(render_outcome(outcome, mode))
