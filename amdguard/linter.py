"""Lint runner: applies the enabled rules to files and directories."""

from __future__ import annotations

import json
import logging
import time
from collections import Counter
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .config import LintConfig
from .constants import ESTREE_EXTENSION, LANGUAGE_BY_EXTENSION
from .core.exceptions import (
    FileTooLargeError,
    ScannerError,
    SourceParseError,
    UnsupportedFileTypeError,
)
from .logging_config import get_lint_logger
from .rules import get_rule
from .rules.base import Rule, Severity
from .scanners.javascript.ast_engine import ASTEngine
from .scanners.javascript.models import AnalysisResult, Diagnostic, FileReport
from .scanners.javascript.nodes import Program, from_estree

logger = logging.getLogger(__name__)
events = get_lint_logger()

# Language recorded for trees loaded from ESTree JSON
ESTREE_LANGUAGE = "estree"


class Linter:
    """Runs the configured rules over source files.

    A ``Linter`` keeps no state between files: every file is parsed and
    analysed from scratch, so one instance can be reused for any number of
    runs and results do not depend on the order files are visited in.

    Example::

        linter = Linter()
        result = linter.lint_paths(["src/"])
        for diagnostic in result.findings:
            print(diagnostic.file_path, diagnostic.line, diagnostic.message)
    """

    def __init__(
        self,
        config: LintConfig | None = None,
        engine: ASTEngine | None = None,
    ) -> None:
        self.config = config or LintConfig()
        self.engine = engine or ASTEngine()
        self._rules: list[tuple[Rule, Severity]] = [
            (get_rule(rule_id), severity)
            for rule_id, severity in self.config.enabled_rules().items()
        ]

    # ------------------------------------------------------------------
    # Single trees / sources
    # ------------------------------------------------------------------

    def lint_program(self, program: Program, file_path: str = "") -> list[Diagnostic]:
        """Run every enabled rule on an already parsed *program*."""
        diagnostics: list[Diagnostic] = []
        for rule, severity in self._rules:
            diagnostics.extend(
                rule.check(program, file_path=file_path, severity=severity)
            )
        return diagnostics

    def lint_source(
        self,
        source_code: str,
        file_path: str = "<input>",
        language: str = "javascript",
    ) -> FileReport:
        """Parse and lint JavaScript/TypeScript source text."""
        try:
            program = self._parse_source(source_code, language)
        except SourceParseError as e:
            return self._failed(file_path, e, language)
        return self._report(file_path, program, language)

    def lint_estree(self, data: dict[str, Any], file_path: str = "<estree>") -> FileReport:
        """Lint an ESTree document produced by an external parser."""
        try:
            program = self._program_from_estree(data)
        except SourceParseError as e:
            return self._failed(file_path, e, ESTREE_LANGUAGE)
        return self._report(file_path, program, ESTREE_LANGUAGE)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def load_program(self, path: Path) -> Program:
        """Read and parse *path* into a ``Program``.

        Raises:
            FileTooLargeError: If the file exceeds ``max_file_size``.
            UnsupportedFileTypeError: If the extension is not recognised.
            SourceParseError: If the file cannot be decoded or parsed.
        """
        suffix = path.suffix.lower()
        if suffix != ESTREE_EXTENSION and suffix not in LANGUAGE_BY_EXTENSION:
            raise UnsupportedFileTypeError(f"Unsupported file type: {path.name}")

        size = path.stat().st_size
        if size > self.config.max_file_size:
            raise FileTooLargeError(
                f"File too large: {size} bytes (limit: {self.config.max_file_size})"
            )

        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise SourceParseError(f"File is not valid UTF-8: {e}") from e

        if suffix == ESTREE_EXTENSION:
            try:
                data = json.loads(content)
            except json.JSONDecodeError as e:
                raise SourceParseError(
                    f"Invalid ESTree JSON: {e.msg}", line=e.lineno, column=e.colno - 1
                ) from e
            except RecursionError as e:
                raise SourceParseError("Invalid ESTree JSON: nested too deeply") from e
            return self._program_from_estree(data)

        return self._parse_source(content, LANGUAGE_BY_EXTENSION[suffix])

    def lint_file(self, path: str | Path) -> FileReport:
        """Lint one file; loading problems are recorded, not raised."""
        path = Path(path)
        language = _language_for(path)
        try:
            program = self.load_program(path)
        except ScannerError as e:
            return self._failed(str(path), e, language)
        except OSError as e:
            return self._failed(
                str(path), SourceParseError(f"Cannot read file: {e}"), language
            )
        return self._report(str(path), program, language)

    def iter_files(self, paths: Iterable[str | Path]) -> list[Path]:
        """Expand *paths* into the sorted list of files to lint.

        Files named explicitly are always included; directories are
        walked for the configured extensions, skipping excluded names.
        """
        excluded = set(self.config.exclude)
        extensions = set(self.config.extensions)
        found: set[Path] = set()

        for raw in paths:
            path = Path(raw)
            if path.is_file():
                found.add(path)
                continue
            if not path.is_dir():
                logger.warning(f"Path does not exist: {path}")
                continue
            for candidate in path.rglob("*"):
                relative = candidate.relative_to(path)
                if any(part in excluded for part in relative.parts):
                    continue
                if candidate.is_file() and candidate.suffix.lower() in extensions:
                    found.add(candidate)

        return sorted(found)

    def lint_paths(self, paths: Iterable[str | Path]) -> AnalysisResult:
        """Lint every file under *paths* and aggregate the results."""
        paths = list(paths)
        started = time.perf_counter()

        reports = [self.lint_file(path) for path in self.iter_files(paths)]
        findings = [d for report in reports for d in report.diagnostics]
        summary = dict(Counter(d.rule_id for d in findings))

        result = AnalysisResult(
            project_path=str(paths[0]) if len(paths) == 1 else ".",
            files_analyzed=len(reports),
            files=reports,
            findings=findings,
            summary=summary,
            analysis_time_seconds=round(time.perf_counter() - started, 4),
        )

        logger.info(
            f"Linted {result.files_analyzed} files: {result.error_count} errors, "
            f"{result.warning_count} warnings"
        )
        events.info(
            "lint run complete",
            extra={
                "event": "lint_run",
                "files_analyzed": result.files_analyzed,
                "errors": result.error_count,
                "warnings": result.warning_count,
                "parse_errors": result.parse_error_count,
                "duration": result.analysis_time_seconds,
            },
        )
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _parse_source(self, source_code: str, language: str) -> Program:
        parsed = self.engine.parse(source_code, language=language)
        if parsed.has_errors:
            error = parsed.first_error()
            if error is None:
                raise SourceParseError("Syntax error")
            line = error.start_point.row + 1
            column = error.start_point.column
            raise SourceParseError(
                f"Syntax error at line {line}, column {column}",
                line=line,
                column=column,
            )
        try:
            return self.engine.to_program(parsed)
        except RecursionError as e:
            raise SourceParseError("Syntax tree is nested too deeply to analyse") from e
        except ValueError as e:
            raise SourceParseError(f"Cannot lower syntax tree: {e}") from e

    @staticmethod
    def _program_from_estree(data: Any) -> Program:
        try:
            program = from_estree(data)
        except (KeyError, TypeError, ValueError) as e:
            raise SourceParseError(f"Malformed ESTree document: {e}") from e
        except RecursionError as e:
            raise SourceParseError(
                "Malformed ESTree document: nested too deeply to analyse"
            ) from e
        if not isinstance(program, Program):
            raise SourceParseError(
                f"ESTree root must be a Program, got {program.kind}"
            )
        return program

    def _report(self, file_path: str, program: Program, language: str | None) -> FileReport:
        diagnostics = self.lint_program(program, file_path=file_path)
        logger.debug(f"{file_path}: {len(diagnostics)} diagnostics")

        by_rule: dict[tuple[str, str], list[str]] = {}
        for diagnostic in diagnostics:
            key = (diagnostic.rule_id, diagnostic.severity)
            by_rule.setdefault(key, []).append(diagnostic.message)
        for (rule_id, severity), messages in by_rule.items():
            events.info(
                "diagnostics reported",
                extra={
                    "event": "file_linted",
                    "file": file_path,
                    "language": language,
                    "rule": rule_id,
                    "severity": severity,
                    "diagnostics": messages,
                },
            )
        return FileReport(file_path=file_path, diagnostics=diagnostics)

    @staticmethod
    def _failed(file_path: str, error: ScannerError, language: str | None) -> FileReport:
        logger.warning(f"Skipping {file_path}: {error}")
        events.warning(
            "file skipped",
            extra={
                "event": "file_skipped",
                "file": file_path,
                "language": language,
                "error": str(error),
            },
        )
        return FileReport(file_path=file_path, parse_error=str(error))


def _language_for(path: Path) -> str | None:
    """Language a file is parsed as, from its extension."""
    suffix = path.suffix.lower()
    if suffix == ESTREE_EXTENSION:
        return ESTREE_LANGUAGE
    return LANGUAGE_BY_EXTENSION.get(suffix)
