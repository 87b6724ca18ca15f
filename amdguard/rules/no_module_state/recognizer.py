"""Recognition of AMD modules (a file whose only statement is ``define(...)``)."""

from __future__ import annotations

from ...scanners.javascript.nodes import (
    ArrayExpression,
    BlockStatement,
    CallExpression,
    ExpressionStatement,
    FunctionExpression,
    Identifier,
    Literal,
    Node,
    Program,
)


def _is_function(node: Node) -> bool:
    return isinstance(node, FunctionExpression)


def _is_dependency_list(node: Node) -> bool:
    return isinstance(node, ArrayExpression)


def _is_module_id(node: Node) -> bool:
    return isinstance(node, Literal) and isinstance(node.value, str) and node.regex is None


# Expected argument shapes read from the last argument backwards:
# define(factory), define(deps, factory), define(id, deps, factory)
_DEFINE_SIGNATURE = (_is_function, _is_dependency_list, _is_module_id)


def get_define_call(program: Program) -> CallExpression | None:
    """Return the ``define(...)`` call wrapping *program*, if it is one."""
    if len(program.body) != 1:
        return None
    statement = program.body[0]
    if not isinstance(statement, ExpressionStatement):
        return None
    call = statement.expression
    if not isinstance(call, CallExpression):
        return None
    if not (isinstance(call.callee, Identifier) and call.callee.name == "define"):
        return None
    return call


def is_amd_module(program: Program) -> bool:
    """Check whether *program* is an AMD module.

    True when the file consists of a single ``define`` call taking one to
    three arguments that, read right to left, are a factory function, a
    dependency array and a string module id.
    """
    call = get_define_call(program)
    if call is None:
        return False

    args = call.arguments
    if not 1 <= len(args) <= len(_DEFINE_SIGNATURE):
        return False

    return all(
        matches(arg)
        for arg, matches in zip(reversed(args), _DEFINE_SIGNATURE)
    )


def get_factory(program: Program) -> FunctionExpression | None:
    """Return the factory function passed to ``define``."""
    call = get_define_call(program)
    if call is None:
        return None
    for arg in call.arguments:
        if isinstance(arg, FunctionExpression):
            return arg
    return None


def get_module_body(program: Program) -> BlockStatement | None:
    """Return the factory body, the module's real top-level scope."""
    factory = get_factory(program)
    return factory.body if factory is not None else None
