"""Per-module context derived from a recognised AMD module.

All functions here assume ``is_amd_module(program)`` holds and return an
empty result, never raise, when the shape they look for is missing.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...scanners.javascript.nodes import (
    CallExpression,
    ExpressionStatement,
    Identifier,
    MemberExpression,
    Node,
    Program,
    ReturnStatement,
    VariableDeclaration,
)
from .recognizer import get_factory


@dataclass(frozen=True)
class ModuleContext:
    """What the classifier needs to know about one module.

    Attributes:
        dependency_names: Names of the factory parameters (injected
            dependencies).
        returned_identifier: Name the factory returns, when it returns a
            bare identifier.
        frozen_identifiers: Names passed to, or bound from, a ``*.freeze``
            call anywhere in the factory body.
    """

    dependency_names: frozenset[str] = frozenset()
    returned_identifier: str | None = None
    frozen_identifiers: frozenset[str] = frozenset()


def _statements(program: Program) -> tuple[Node, ...]:
    factory = get_factory(program)
    return factory.body.body if factory is not None else ()


def get_dependency_names(program: Program) -> frozenset[str]:
    factory = get_factory(program)
    if factory is None:
        return frozenset()
    return frozenset(
        param.name for param in factory.params if isinstance(param, Identifier)
    )


def get_returned_identifier(program: Program) -> str | None:
    """Name returned by the first top-level ``return``, if it is an identifier."""
    for statement in _statements(program):
        if isinstance(statement, ReturnStatement):
            if isinstance(statement.argument, Identifier):
                return statement.argument.name
            return None
    return None


def is_freeze_call(node: Node | None) -> bool:
    """True for ``<anything>.freeze(...)``, e.g. ``Object.freeze(x)``."""
    if not isinstance(node, CallExpression):
        return False
    callee = node.callee
    return (
        isinstance(callee, MemberExpression)
        and not callee.computed
        and isinstance(callee.property, Identifier)
        and callee.property.name == "freeze"
    )


def get_frozen_identifiers(program: Program) -> frozenset[str]:
    frozen: set[str] = set()
    for statement in _statements(program):
        if isinstance(statement, ExpressionStatement):
            call = statement.expression
            if isinstance(call, CallExpression) and is_freeze_call(call) and call.arguments:
                target = call.arguments[0]
                if isinstance(target, Identifier):
                    frozen.add(target.name)
        elif isinstance(statement, VariableDeclaration):
            for declarator in statement.declarations:
                if is_freeze_call(declarator.init) and declarator.name:
                    frozen.add(declarator.name)
    return frozenset(frozen)


def extract_context(program: Program) -> ModuleContext:
    """Build the ``ModuleContext`` for a recognised module."""
    return ModuleContext(
        dependency_names=get_dependency_names(program),
        returned_identifier=get_returned_identifier(program),
        frozen_identifiers=get_frozen_identifiers(program),
    )
