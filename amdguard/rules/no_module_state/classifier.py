"""Classification of module-scope ``var`` declarations.

A declarator is *safe* when it has an initializer and at least one of the
predicates in ``SAFE_PREDICATES`` matches it.  Each predicate is a
structural heuristic that the bound value cannot carry state from one
invocation of the module to the next.  The chain deliberately
over-approximates safety: it never follows data flow, and a declarator
that no predicate recognises is reported.

Every predicate has the signature ``(declarator, context) -> bool`` and
returns ``False`` for shapes it does not understand, so each can be used
and tested on its own.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from ...scanners.javascript.nodes import (
    ArrayExpression,
    BinaryExpression,
    BlockStatement,
    CallExpression,
    FunctionExpression,
    Identifier,
    Literal,
    MemberExpression,
    NewExpression,
    Node,
    ObjectExpression,
    Property,
    UnaryExpression,
    VariableDeclaration,
    VariableDeclarator,
)
from .context import ModuleContext

SafePredicate = Callable[[VariableDeclarator, ModuleContext], bool]

REACT_FACTORIES = frozenset({"createClass", "createFactory"})

# Framework helper whose result is immutable wrapped data
FETCH_WRAPPER = "applyFetch"


# ---------------------------------------------------------------------------
# Node helpers
# ---------------------------------------------------------------------------


def root_name(node: Node | None) -> str | None:
    """Name at the root of an identifier or member chain (``a`` in ``a.b[c].d``)."""
    while isinstance(node, MemberExpression):
        node = node.object
    if isinstance(node, Identifier):
        return node.name
    return None


def _is_literal_value(node: Node | None) -> bool:
    if isinstance(node, Literal):
        return True
    return isinstance(node, UnaryExpression) and isinstance(node.argument, Literal)


def _is_dependency_value(node: Node | None, context: ModuleContext) -> bool:
    if isinstance(node, Identifier):
        return node.name in context.dependency_names
    if isinstance(node, MemberExpression):
        return root_name(node.object) in context.dependency_names
    return False


def _is_constant_value(node: Node | None, context: ModuleContext) -> bool:
    return (
        _is_literal_value(node)
        or isinstance(node, FunctionExpression)
        or _is_dependency_value(node, context)
        or (isinstance(node, Identifier) and node.name in context.frozen_identifiers)
        or _is_constant_object(node, context)
    )


def _is_constant_object(node: Node | None, context: ModuleContext) -> bool:
    if not isinstance(node, ObjectExpression) or not node.properties:
        return False
    return all(
        isinstance(prop, Property) and _is_constant_value(prop.value, context)
        for prop in node.properties
    )


# ---------------------------------------------------------------------------
# Safe predicates
# ---------------------------------------------------------------------------


def is_literal(declarator: VariableDeclarator, context: ModuleContext) -> bool:
    """``var a = 1``, ``var b = 'x'``, ``var c = -1``."""
    return _is_literal_value(declarator.init)


def is_binary_expression(declarator: VariableDeclarator, context: ModuleContext) -> bool:
    """``var total = a + b``: a derived value, not a reference."""
    return isinstance(declarator.init, BinaryExpression)


def is_function(declarator: VariableDeclarator, context: ModuleContext) -> bool:
    return isinstance(declarator.init, FunctionExpression)


def is_populated_array(declarator: VariableDeclarator, context: ModuleContext) -> bool:
    """A non-empty array literal is static configuration.

    An empty one is an accumulator and stays reportable.
    """
    init = declarator.init
    return isinstance(init, ArrayExpression) and len(init.elements) > 0


def is_upper_case_name(declarator: VariableDeclarator, context: ModuleContext) -> bool:
    """``var MAX_ITEMS = ...`` is a constant by naming convention."""
    name = declarator.name
    return bool(name) and name == name.upper()


def is_returned_object(declarator: VariableDeclarator, context: ModuleContext) -> bool:
    """The module's exported value: an alias of, or the object literal bound to,
    the identifier the factory returns."""
    returned = context.returned_identifier
    if returned is None:
        return False
    init = declarator.init
    if isinstance(init, Identifier):
        return init.name == returned
    if isinstance(init, ObjectExpression):
        return declarator.name == returned
    return False


def is_frozen(declarator: VariableDeclarator, context: ModuleContext) -> bool:
    init = declarator.init
    if isinstance(init, Identifier):
        name = init.name
    elif isinstance(init, (ObjectExpression, ArrayExpression, CallExpression)):
        name = declarator.name
    else:
        return False
    return name is not None and name in context.frozen_identifiers


def is_regex(declarator: VariableDeclarator, context: ModuleContext) -> bool:
    """``var re = new RegExp(...)``."""
    init = declarator.init
    return (
        isinstance(init, NewExpression)
        and isinstance(init.callee, Identifier)
        and init.callee.name == "RegExp"
    )


def is_react_factory(declarator: VariableDeclarator, context: ModuleContext) -> bool:
    """``React.createClass(...)`` / ``React.createFactory(...)``."""
    init = declarator.init
    if not isinstance(init, CallExpression):
        return False
    callee = init.callee
    return (
        isinstance(callee, MemberExpression)
        and not callee.computed
        and isinstance(callee.object, Identifier)
        and callee.object.name.lower() == "react"
        and isinstance(callee.property, Identifier)
        and callee.property.name in REACT_FACTORIES
    )


def is_dependency_alias(declarator: VariableDeclarator, context: ModuleContext) -> bool:
    """``var _ = lodash`` or ``var get = lodash.get`` for an injected ``lodash``."""
    return _is_dependency_value(declarator.init, context)


def is_constant_object(declarator: VariableDeclarator, context: ModuleContext) -> bool:
    """A non-empty object literal whose values are all constant, recursively."""
    return _is_constant_object(declarator.init, context)


def is_fetch_wrapper(declarator: VariableDeclarator, context: ModuleContext) -> bool:
    init = declarator.init
    return (
        isinstance(init, CallExpression)
        and isinstance(init.callee, Identifier)
        and init.callee.name == FETCH_WRAPPER
    )


SAFE_PREDICATES: tuple[SafePredicate, ...] = (
    is_literal,
    is_binary_expression,
    is_function,
    is_populated_array,
    is_upper_case_name,
    is_returned_object,
    is_frozen,
    is_regex,
    is_react_factory,
    is_dependency_alias,
    is_constant_object,
    is_fetch_wrapper,
)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def collect_module_vars(body: BlockStatement) -> list[VariableDeclarator]:
    """Declarators of the ``var`` statements directly in *body*, in order."""
    return [
        declarator
        for statement in body.body
        if isinstance(statement, VariableDeclaration) and statement.kind_keyword == "var"
        for declarator in statement.declarations
    ]


def is_safe(declarator: VariableDeclarator, context: ModuleContext) -> bool:
    if declarator.init is None:
        return False
    return any(predicate(declarator, context) for predicate in SAFE_PREDICATES)


def classify(
    declarators: Iterable[VariableDeclarator], context: ModuleContext
) -> list[VariableDeclarator]:
    """Return the unsafe declarators, keeping their order."""
    return [d for d in declarators if not is_safe(d, context)]
