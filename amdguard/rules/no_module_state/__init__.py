"""``no-module-state``: flag state kept in an AMD module's scope.

Variables declared at the top of a ``define`` factory live in closure
scope for the lifetime of the process, so anything mutable stored there
leaks between server-side renders.  The rule runs in four stages::

    recognizer -> context -> classifier -> reporter

Usage::

    rule = NoModuleStateRule()
    for diagnostic in rule.check(program, file_path="app/cache.js"):
        print(diagnostic.message)
"""

from __future__ import annotations

from ...scanners.javascript.models import Diagnostic
from ...scanners.javascript.nodes import Program
from ..base import Rule, RuleDocs, RuleMeta, Severity
from .classifier import SAFE_PREDICATES, classify, collect_module_vars, is_safe
from .context import ModuleContext, extract_context
from .recognizer import get_module_body, is_amd_module
from .reporter import RULE_ID, report


class NoModuleStateRule(Rule):
    """Reports ``var`` declarations that can hold state in module scope."""

    rule_id = RULE_ID
    meta = RuleMeta(
        docs=RuleDocs(
            description="Prevents modules from declaring variables (saving state in their scope)",
            category="SSR",
            recommended=False,
        ),
        schema=[],
        fixable=None,
    )

    def check(
        self,
        program: Program,
        *,
        file_path: str = "",
        severity: Severity = Severity.ERROR,
    ) -> list[Diagnostic]:
        if not is_amd_module(program):
            return []

        body = get_module_body(program)
        if body is None:
            return []

        context = extract_context(program)
        unsafe = classify(collect_module_vars(body), context)
        return [
            report(declarator, file_path=file_path, severity=severity)
            for declarator in unsafe
        ]


__all__ = [
    "ModuleContext",
    "NoModuleStateRule",
    "SAFE_PREDICATES",
    "classify",
    "collect_module_vars",
    "extract_context",
    "is_amd_module",
    "is_safe",
]
