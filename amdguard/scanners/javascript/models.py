"""Pydantic models for JavaScript lint results.

This module defines the data models used to represent diagnostics and
aggregated lint results produced by the rules in ``amdguard.rules``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Diagnostic(BaseModel):
    """A single lint diagnostic.

    Attributes:
        rule_id: Identifier of the rule that produced it
            (e.g., ``"no-module-state"``).
        message: Human-readable message.
        identifier_name: Name of the offending identifier.
        file_path: Path of the file the diagnostic belongs to.
        line: 1-based line number.
        column: 0-based column offset.
        end_line: 1-based end line number.
        end_column: 0-based end column offset.
        severity: ``"error"`` or ``"warn"``.
        fix: Always ``None``; no rule offers an automatic fix.
    """

    rule_id: str
    message: str
    identifier_name: str
    file_path: str = ""
    line: int = 0
    column: int = 0
    end_line: int = 0
    end_column: int = 0
    severity: str = "error"
    fix: None = None


class FileReport(BaseModel):
    """Lint outcome for a single file.

    Attributes:
        file_path: Path of the analysed file.
        diagnostics: Diagnostics in source order.
        parse_error: Reason the file could not be analysed, if any.
    """

    file_path: str
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    parse_error: str | None = None


class AnalysisResult(BaseModel):
    """Aggregated results from linting a project or set of files.

    Attributes:
        project_path: Root path of the analysed project.
        files_analyzed: Total number of files that were visited.
        files: Per-file reports in path order.
        findings: All diagnostics across all files.
        summary: Mapping of rule ids to diagnostic counts.
        analysis_time_seconds: Wall-clock time spent on analysis.
    """

    project_path: str
    files_analyzed: int = 0
    files: list[FileReport] = Field(default_factory=list)
    findings: list[Diagnostic] = Field(default_factory=list)
    summary: dict[str, int] = Field(default_factory=dict)
    analysis_time_seconds: float = 0.0

    @property
    def error_count(self) -> int:
        return sum(1 for d in self.findings if d.severity == "error")

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.findings if d.severity == "warn")

    @property
    def parse_error_count(self) -> int:
        return sum(1 for f in self.files if f.parse_error is not None)
