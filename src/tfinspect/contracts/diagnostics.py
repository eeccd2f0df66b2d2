"""Diagnostics: located, non-fatal reports of parse, schema and merge anomalies."""

from enum import Enum
from typing import Iterable, List, Optional
from pydantic import BaseModel, Field
from ..syntax.tree import SourceRange


class Severity(str, Enum):
    """Diagnostic severity."""
    ERROR = "error"
    WARNING = "warning"


class DiagnosticKind(str, Enum):
    """Where in the pipeline a diagnostic came from."""
    SYNTAX_ERROR = "syntax_error"
    SCHEMA_VIOLATION = "schema_violation"
    UNRESOLVED_EXPRESSION = "unresolved_expression"
    MERGE_CONFLICT = "merge_conflict"
    FILE_ERROR = "file_error"


class Diagnostic(BaseModel):
    """A single problem found in the inspected module."""
    severity: Severity = Field(..., description="error or warning")
    kind: DiagnosticKind = Field(..., description="Diagnostic category")
    summary: str = Field(..., description="Short one-line summary")
    detail: str = Field("", description="Longer explanation")
    file_path: str = Field(..., description="File the problem was found in")
    source_range: Optional[SourceRange] = Field(None, description="Location, when known")

    class Config:
        frozen = True

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def location(self) -> str:
        """`file:line` style location string."""
        if self.source_range is None:
            return self.file_path
        return f"{self.file_path}:{self.source_range}"


class DiagnosticSink:
    """
    Ordered collector of diagnostics for one file.

    Every stage records through a sink so provenance is attached in one
    place. Nothing is ever dropped or deduplicated; the list keeps the order
    in which problems were observed.
    """

    def __init__(self, file_path: str):
        self.file_path = file_path
        self._diagnostics: List[Diagnostic] = []

    def error(self, kind: DiagnosticKind, summary: str, detail: str = "",
              source_range: Optional[SourceRange] = None) -> Diagnostic:
        return self.add(Severity.ERROR, kind, summary, detail, source_range)

    def warning(self, kind: DiagnosticKind, summary: str, detail: str = "",
                source_range: Optional[SourceRange] = None) -> Diagnostic:
        return self.add(Severity.WARNING, kind, summary, detail, source_range)

    def add(self, severity: Severity, kind: DiagnosticKind, summary: str, detail: str = "",
            source_range: Optional[SourceRange] = None) -> Diagnostic:
        diagnostic = Diagnostic(
            severity=severity,
            kind=kind,
            summary=summary,
            detail=detail,
            file_path=self.file_path,
            source_range=source_range,
        )
        self._diagnostics.append(diagnostic)
        return diagnostic

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        self._diagnostics.extend(diagnostics)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)
