from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from annotest.position import Position


@dataclass(frozen=True)
class Comment:
    # Comment body with its marker ("#", "//") removed; not yet trimmed.
    text: str
    position: Position


@runtime_checkable
class CommentScanner(Protocol):
    """Source-language capability that yields comment text plus positions.

    Implementations raise SourceFileError when the file fails base syntactic
    parsing. Comments are returned in source order.
    """

    language_id: str
    file_extensions: tuple[str, ...]

    def scan(self, path: Path, data: bytes) -> list[Comment]: ...


def line_offsets(data: bytes) -> list[int]:
    """Byte offset of the start of every line in data (line 1 is index 0)."""
    offsets = [0]
    for line in data.split(b"\n")[:-1]:
        offsets.append(offsets[-1] + len(line) + 1)
    return offsets
