"""Diagnostics for module-scope state."""

from __future__ import annotations

from ...scanners.javascript.models import Diagnostic
from ...scanners.javascript.nodes import VariableDeclarator
from ..base import Severity

RULE_ID = "no-module-state"

# Stand-in name for destructuring declarators such as ``var {a} = b``
PATTERN_NAME = "<pattern>"


def format_message(name: str) -> str:
    return f"{name} defined in module scope."


def report(
    declarator: VariableDeclarator,
    *,
    file_path: str = "",
    severity: Severity = Severity.ERROR,
) -> Diagnostic:
    """Build the diagnostic for one unsafe declarator."""
    name = declarator.name or PATTERN_NAME
    span = declarator.span
    return Diagnostic(
        rule_id=RULE_ID,
        message=format_message(name),
        identifier_name=name,
        file_path=file_path,
        line=span.line,
        column=span.column,
        end_line=span.end_line,
        end_column=span.end_column,
        severity=severity.value,
        fix=None,
    )
