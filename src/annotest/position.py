from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """A source position: 1-based line, 1-based byte column, 0-based byte offset."""

    filename: str
    line: int
    column: int
    offset: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    @property
    def line_start(self) -> int:
        # Byte offset of the first byte of this position's line.
        return self.offset - (self.column - 1)
