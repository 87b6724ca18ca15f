"""ESTree-shaped syntax node model for JavaScript analysis.

Every node is an immutable dataclass and the concrete class is the
discriminant, so rules dispatch with ``isinstance`` rather than probing
loosely-typed attributes.  Only the shapes the rules actually inspect are
modelled structurally; everything else becomes an ``OtherNode`` that keeps
its type name and nothing else.

Trees come from two places:

* ``ASTEngine.to_program`` lowers a tree-sitter parse tree into this model.
* ``from_estree`` converts an ESTree JSON document produced by an external
  parser (acorn, espree, esprima).

Usage::

    from amdguard.scanners.javascript.nodes import from_estree

    program = from_estree(json.loads(dump))
    for statement in program.body:
        print(statement.kind)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class SourceSpan:
    """Location of a node in its source file.

    Attributes:
        line: 1-based start line.
        column: 0-based start column.
        end_line: 1-based end line.
        end_column: 0-based end column.
    """

    line: int = 0
    column: int = 0
    end_line: int = 0
    end_column: int = 0


NO_SPAN = SourceSpan()


class SyntaxNode:
    """Base class of every node in the model."""

    __slots__ = ()

    @property
    def kind(self) -> str:
        """The ESTree ``type`` of this node."""
        return type(self).__name__


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Program(SyntaxNode):
    body: tuple[Node, ...] = ()
    span: SourceSpan = NO_SPAN


@dataclass(frozen=True)
class ExpressionStatement(SyntaxNode):
    expression: Node
    span: SourceSpan = NO_SPAN


@dataclass(frozen=True)
class BlockStatement(SyntaxNode):
    body: tuple[Node, ...] = ()
    span: SourceSpan = NO_SPAN


@dataclass(frozen=True)
class ReturnStatement(SyntaxNode):
    argument: Node | None = None
    span: SourceSpan = NO_SPAN


@dataclass(frozen=True)
class VariableDeclarator(SyntaxNode):
    id: Node
    init: Node | None = None
    span: SourceSpan = NO_SPAN

    @property
    def name(self) -> str | None:
        """Bound name, or ``None`` for destructuring patterns."""
        if isinstance(self.id, Identifier):
            return self.id.name
        return None


@dataclass(frozen=True)
class VariableDeclaration(SyntaxNode):
    kind_keyword: str
    declarations: tuple[VariableDeclarator, ...] = ()
    span: SourceSpan = NO_SPAN


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Identifier(SyntaxNode):
    name: str
    span: SourceSpan = NO_SPAN


@dataclass(frozen=True)
class Literal(SyntaxNode):
    """A primitive literal.

    ``value`` holds the decoded Python value (``str``, ``int``, ``float``,
    ``bool`` or ``None``).  Regular expression literals keep their source
    text in ``regex`` and have ``value`` set to ``None``.
    """

    value: Any = None
    raw: str = ""
    regex: str | None = None
    span: SourceSpan = NO_SPAN


@dataclass(frozen=True)
class FunctionExpression(SyntaxNode):
    params: tuple[Node, ...] = ()
    body: BlockStatement = BlockStatement()
    name: str | None = None
    span: SourceSpan = NO_SPAN


@dataclass(frozen=True)
class ArrowFunctionExpression(SyntaxNode):
    params: tuple[Node, ...] = ()
    body: Node = BlockStatement()
    span: SourceSpan = NO_SPAN


@dataclass(frozen=True)
class CallExpression(SyntaxNode):
    callee: Node
    arguments: tuple[Node, ...] = ()
    span: SourceSpan = NO_SPAN


@dataclass(frozen=True)
class NewExpression(SyntaxNode):
    callee: Node
    arguments: tuple[Node, ...] = ()
    span: SourceSpan = NO_SPAN


@dataclass(frozen=True)
class MemberExpression(SyntaxNode):
    object: Node
    property: Node
    computed: bool = False
    span: SourceSpan = NO_SPAN


@dataclass(frozen=True)
class UnaryExpression(SyntaxNode):
    operator: str
    argument: Node
    span: SourceSpan = NO_SPAN


@dataclass(frozen=True)
class BinaryExpression(SyntaxNode):
    operator: str
    left: Node
    right: Node
    span: SourceSpan = NO_SPAN


@dataclass(frozen=True)
class LogicalExpression(SyntaxNode):
    operator: str
    left: Node
    right: Node
    span: SourceSpan = NO_SPAN


@dataclass(frozen=True)
class ArrayExpression(SyntaxNode):
    elements: tuple[Node | None, ...] = ()
    span: SourceSpan = NO_SPAN


@dataclass(frozen=True)
class Property(SyntaxNode):
    key: Node
    value: Node
    shorthand: bool = False
    span: SourceSpan = NO_SPAN


@dataclass(frozen=True)
class SpreadElement(SyntaxNode):
    argument: Node
    span: SourceSpan = NO_SPAN


@dataclass(frozen=True)
class ObjectExpression(SyntaxNode):
    properties: tuple[Property | SpreadElement, ...] = ()
    span: SourceSpan = NO_SPAN


@dataclass(frozen=True)
class OtherNode(SyntaxNode):
    """Any construct the model does not represent structurally."""

    type_name: str
    span: SourceSpan = NO_SPAN

    @property
    def kind(self) -> str:
        return self.type_name


Node = Union[
    Program,
    ExpressionStatement,
    BlockStatement,
    ReturnStatement,
    VariableDeclaration,
    VariableDeclarator,
    Identifier,
    Literal,
    FunctionExpression,
    ArrowFunctionExpression,
    CallExpression,
    NewExpression,
    MemberExpression,
    UnaryExpression,
    BinaryExpression,
    LogicalExpression,
    ArrayExpression,
    Property,
    SpreadElement,
    ObjectExpression,
    OtherNode,
]


# ---------------------------------------------------------------------------
# ESTree JSON loader
# ---------------------------------------------------------------------------


def _span(data: dict[str, Any]) -> SourceSpan:
    loc = data.get("loc")
    if not isinstance(loc, dict):
        return NO_SPAN
    start = loc.get("start") or {}
    end = loc.get("end") or {}
    return SourceSpan(
        line=int(start.get("line", 0)),
        column=int(start.get("column", 0)),
        end_line=int(end.get("line", 0)),
        end_column=int(end.get("column", 0)),
    )


def _many(items: list[dict[str, Any]] | None) -> tuple[Node, ...]:
    return tuple(from_estree(item) for item in items or ())


def _optional(data: dict[str, Any] | None) -> Node | None:
    return from_estree(data) if data is not None else None


_BINARY_TYPES = frozenset({"BinaryExpression", "LogicalExpression"})


def _binary_chain(data: dict[str, Any]) -> Node:
    """Convert a left-nested binary/logical chain without recursing per operand."""
    chain = [data]
    left = data["left"]
    while isinstance(left, dict) and left.get("type") in _BINARY_TYPES:
        chain.append(left)
        left = left["left"]

    node = from_estree(left)
    for item in reversed(chain):
        cls = BinaryExpression if item["type"] == "BinaryExpression" else LogicalExpression
        node = cls(
            operator=item["operator"],
            left=node,
            right=from_estree(item["right"]),
            span=_span(item),
        )
    return node


def from_estree(data: dict[str, Any]) -> Node:
    """Convert an ESTree JSON node (and its subtree) into the node model.

    Args:
        data: A decoded ESTree node, typically the ``Program`` root.

    Returns:
        The equivalent node.  Unknown node types become ``OtherNode``.

    Raises:
        ValueError: If *data* is not an ESTree node (no ``type`` key).
    """
    if not isinstance(data, dict) or "type" not in data:
        raise ValueError(f"Not an ESTree node: {data!r:.80}")

    node_type = data["type"]
    span = _span(data)

    if node_type == "Program":
        return Program(body=_many(data.get("body")), span=span)
    if node_type == "ExpressionStatement":
        return ExpressionStatement(from_estree(data["expression"]), span=span)
    if node_type == "BlockStatement":
        return BlockStatement(body=_many(data.get("body")), span=span)
    if node_type == "ReturnStatement":
        return ReturnStatement(_optional(data.get("argument")), span=span)
    if node_type == "VariableDeclaration":
        declarations = tuple(
            VariableDeclarator(
                id=from_estree(decl["id"]),
                init=_optional(decl.get("init")),
                span=_span(decl),
            )
            for decl in data.get("declarations") or ()
        )
        return VariableDeclaration(
            kind_keyword=data.get("kind", "var"),
            declarations=declarations,
            span=span,
        )
    if node_type == "Identifier":
        return Identifier(data["name"], span=span)
    if node_type == "Literal":
        regex = data.get("regex")
        return Literal(
            value=None if regex else data.get("value"),
            raw=data.get("raw", ""),
            regex=f"/{regex['pattern']}/{regex.get('flags', '')}" if regex else None,
            span=span,
        )
    if node_type == "FunctionExpression":
        name = data.get("id") or {}
        return FunctionExpression(
            params=_many(data.get("params")),
            body=from_estree(data["body"]),
            name=name.get("name"),
            span=span,
        )
    if node_type == "ArrowFunctionExpression":
        return ArrowFunctionExpression(
            params=_many(data.get("params")),
            body=from_estree(data["body"]),
            span=span,
        )
    if node_type in ("CallExpression", "NewExpression"):
        cls = CallExpression if node_type == "CallExpression" else NewExpression
        return cls(
            callee=from_estree(data["callee"]),
            arguments=_many(data.get("arguments")),
            span=span,
        )
    if node_type == "MemberExpression":
        return MemberExpression(
            object=from_estree(data["object"]),
            property=from_estree(data["property"]),
            computed=bool(data.get("computed")),
            span=span,
        )
    if node_type == "UnaryExpression":
        return UnaryExpression(
            operator=data["operator"],
            argument=from_estree(data["argument"]),
            span=span,
        )
    if node_type in _BINARY_TYPES:
        return _binary_chain(data)
    if node_type == "ArrayExpression":
        return ArrayExpression(
            elements=tuple(_optional(el) for el in data.get("elements") or ()),
            span=span,
        )
    if node_type == "ObjectExpression":
        return ObjectExpression(properties=_many(data.get("properties")), span=span)  # type: ignore[arg-type]
    if node_type == "Property":
        return Property(
            key=from_estree(data["key"]),
            value=from_estree(data["value"]),
            shorthand=bool(data.get("shorthand")),
            span=span,
        )
    if node_type == "SpreadElement":
        return SpreadElement(from_estree(data["argument"]), span=span)

    return OtherNode(node_type, span=span)
