from annotest.ingest.adapter_contract import Comment, CommentScanner
from annotest.ingest.registry import (
    register_scanner,
    resolve_scanner,
    scanner_for_extension,
    scanner_for_language,
    supported_extensions,
)

__all__ = [
    "Comment",
    "CommentScanner",
    "register_scanner",
    "resolve_scanner",
    "scanner_for_extension",
    "scanner_for_language",
    "supported_extensions",
]
