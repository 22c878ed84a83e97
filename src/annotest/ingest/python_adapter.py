from __future__ import annotations

import ast
import io
import tokenize
from pathlib import Path

from annotest.exceptions import SourceFileError
from annotest.ingest.adapter_contract import Comment, CommentScanner, line_offsets
from annotest.position import Position

_BOM = b"\xef\xbb\xbf"


class PythonScanner(CommentScanner):
    language_id = "python"
    file_extensions = (".py", ".pyi")

    def scan(self, path: Path, data: bytes) -> list[Comment]:
        try:
            ast.parse(data, filename=str(path))
        except (SyntaxError, ValueError) as exc:
            raise SourceFileError(path, f"syntax error: {exc}") from exc
        try:
            tokens = list(tokenize.tokenize(io.BytesIO(data).readline))
        except (tokenize.TokenError, SyntaxError) as exc:
            raise SourceFileError(path, f"tokenize failed: {exc}") from exc

        encoding = "utf-8"
        if tokens and tokens[0].type == tokenize.ENCODING:
            encoding = tokens[0].string
        offsets = line_offsets(data)
        comments: list[Comment] = []
        for token in tokens:
            if token.type != tokenize.COMMENT:
                continue
            row, col = token.start
            # tokenize columns count characters; positions count bytes.
            byte_col = len(token.line[:col].encode(encoding))
            if row == 1 and data.startswith(_BOM):
                byte_col += len(_BOM)
            comments.append(
                Comment(
                    text=token.string[1:],
                    position=Position(
                        filename=str(path),
                        line=row,
                        column=byte_col + 1,
                        offset=offsets[row - 1] + byte_col,
                    ),
                )
            )
        return comments
