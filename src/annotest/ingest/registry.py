from __future__ import annotations

from pathlib import Path

from annotest.ingest.adapter_contract import CommentScanner
from annotest.ingest.line_comment_adapter import LineCommentScanner
from annotest.ingest.python_adapter import PythonScanner
from annotest.invariants import never


_SCANNERS_BY_LANGUAGE: dict[str, CommentScanner] = {}
_SCANNERS_BY_EXTENSION: dict[str, CommentScanner] = {}


def register_scanner(scanner: CommentScanner) -> None:
    _SCANNERS_BY_LANGUAGE[scanner.language_id] = scanner
    for extension in scanner.file_extensions:
        _SCANNERS_BY_EXTENSION[extension.lower()] = scanner


def scanner_for_language(language_id: str) -> CommentScanner | None:
    return _SCANNERS_BY_LANGUAGE.get(language_id.lower())


def scanner_for_extension(extension: str) -> CommentScanner | None:
    return _SCANNERS_BY_EXTENSION.get(extension.lower())


def supported_extensions() -> tuple[str, ...]:
    return tuple(sorted(_SCANNERS_BY_EXTENSION))


def resolve_scanner(path: Path, *, language_id: str | None = None) -> CommentScanner | None:
    if language_id is not None:
        scanner = scanner_for_language(language_id)
        if scanner is None:
            never("unknown comment scanner", language_id=language_id)
        return scanner
    return scanner_for_extension(path.suffix)


register_scanner(PythonScanner())
register_scanner(LineCommentScanner())
