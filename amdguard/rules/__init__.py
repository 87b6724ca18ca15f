"""Registered lint rules.

Rules are registered explicitly; add new ones to ``RULES``.
"""

from ..core.exceptions import UnknownRuleError
from .base import Rule, RuleDocs, RuleMeta, Severity
from .no_module_state import NoModuleStateRule

RULES: dict[str, type[Rule]] = {
    NoModuleStateRule.rule_id: NoModuleStateRule,
}


def get_rule(rule_id: str) -> Rule:
    """Instantiate the rule registered as *rule_id*.

    Raises:
        UnknownRuleError: If no such rule exists.
    """
    try:
        return RULES[rule_id]()
    except KeyError:
        raise UnknownRuleError(rule_id) from None


__all__ = [
    "RULES",
    "NoModuleStateRule",
    "Rule",
    "RuleDocs",
    "RuleMeta",
    "Severity",
    "get_rule",
]
