from __future__ import annotations

from pathlib import Path

from annotest.exceptions import SourceFileError
from annotest.ingest.adapter_contract import Comment, CommentScanner
from annotest.position import Position

_QUOTES = frozenset(b"\"'`")
_RAW_QUOTE = ord("`")
_NEWLINE = ord("\n")
_BACKSLASH = ord("\\")


class LineCommentScanner(CommentScanner):
    """Lexical scanner for C-family sources with `//` line comments.

    Only `//` comments are reported. Block comments and string, character and
    backquoted raw literals are skipped so that `//` inside them is not taken
    for a comment.
    """

    language_id = "c-family"
    file_extensions = (
        ".go",
        ".c",
        ".h",
        ".cc",
        ".cpp",
        ".hpp",
        ".java",
        ".js",
        ".ts",
        ".kt",
        ".scala",
        ".swift",
    )

    def scan(self, path: Path, data: bytes) -> list[Comment]:
        comments: list[Comment] = []
        size = len(data)
        line = 1
        line_start = 0
        index = 0
        while index < size:
            byte = data[index]
            if byte == _NEWLINE:
                line += 1
                line_start = index + 1
                index += 1
                continue
            if data.startswith(b"//", index):
                end = data.find(b"\n", index)
                if end < 0:
                    end = size
                text = data[index + 2 : end].rstrip(b"\r")
                comments.append(
                    Comment(
                        text=text.decode("utf-8", errors="replace"),
                        position=Position(
                            filename=str(path),
                            line=line,
                            column=index - line_start + 1,
                            offset=index,
                        ),
                    )
                )
                index = end
                continue
            if data.startswith(b"/*", index):
                end = data.find(b"*/", index + 2)
                if end < 0:
                    raise SourceFileError(path, f"{line}: unterminated block comment")
                line += data.count(b"\n", index, end)
                line_start = max(line_start, data.rfind(b"\n", index, end) + 1)
                index = end + 2
                continue
            if byte in _QUOTES:
                index, line, line_start = self._skip_literal(
                    path, data, index, line, line_start
                )
                continue
            index += 1
        return comments

    @staticmethod
    def _skip_literal(
        path: Path,
        data: bytes,
        index: int,
        line: int,
        line_start: int,
    ) -> tuple[int, int, int]:
        quote = data[index]
        cursor = index + 1
        while cursor < len(data):
            byte = data[cursor]
            if byte == _BACKSLASH and quote != _RAW_QUOTE:
                cursor += 2
                continue
            if byte == quote:
                return cursor + 1, line, line_start
            if byte == _NEWLINE:
                if quote != _RAW_QUOTE:
                    raise SourceFileError(path, f"{line}: newline in literal")
                line += 1
                line_start = cursor + 1
            cursor += 1
        raise SourceFileError(path, f"{line}: unterminated literal")
