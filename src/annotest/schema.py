from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class DiagnosticDTO(BaseModel):
    kind: str
    message: str
    path: Optional[str] = None


class FileOutcomeDTO(BaseModel):
    path: str
    status: str
    queries: int = 0
    query_errors: int = 0
    got: Optional[str] = None
    golden: Optional[str] = None


class RunReportDTO(BaseModel):
    update: bool
    files: List[FileOutcomeDTO]
    diagnostics: List[DiagnosticDTO] = []
    failures: int = 0
