"""Parser host for JavaScript and TypeScript analysis.

This module provides a high-level interface around tree-sitter for parsing
JS/TS source code and lowering the resulting concrete syntax tree into the
ESTree-shaped node model in ``nodes.py``.  It is the foundation every lint
rule builds on; the rules themselves never see tree-sitter objects.

Usage::

    engine = ASTEngine()
    parsed = engine.parse("define(function () { var x; });")
    program = engine.to_program(parsed)
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import tree_sitter as ts
import tree_sitter_javascript as ts_js
import tree_sitter_typescript as ts_ts

from .nodes import (
    ArrayExpression,
    ArrowFunctionExpression,
    BinaryExpression,
    BlockStatement,
    CallExpression,
    ExpressionStatement,
    FunctionExpression,
    Identifier,
    Literal,
    LogicalExpression,
    MemberExpression,
    NewExpression,
    Node,
    ObjectExpression,
    OtherNode,
    Program,
    Property,
    ReturnStatement,
    SourceSpan,
    SpreadElement,
    UnaryExpression,
    VariableDeclaration,
    VariableDeclarator,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# ParsedAST wrapper
# ---------------------------------------------------------------------------


class ParsedAST:
    """Wrapper around a tree-sitter parse tree with convenience methods.

    Attributes:
        tree: The underlying ``tree_sitter.Tree``.
        source_code: Original source string that was parsed.
        language: Language identifier (``"javascript"``, ``"typescript"``,
            or ``"tsx"``).
    """

    __slots__ = ("tree", "source_code", "language", "_source_bytes")

    def __init__(
        self,
        tree: ts.Tree,
        source_code: str,
        language: str,
    ) -> None:
        self.tree = tree
        self.source_code = source_code
        self.language = language
        self._source_bytes: bytes = source_code.encode("utf-8")

    @property
    def root_node(self) -> ts.Node:
        """Return the root node of the parse tree."""
        return self.tree.root_node

    @property
    def has_errors(self) -> bool:
        """Return ``True`` if the tree contains any parse errors."""
        return self.tree.root_node.has_error

    def first_error(self) -> ts.Node | None:
        """Return the first ``ERROR`` or missing node in source order."""
        found: list[ts.Node] = []

        def _visitor(node: ts.Node, _depth: int) -> bool | None:
            if found:
                return False
            if node.type == "ERROR" or node.is_missing:
                found.append(node)
                return False
            return None

        self.walk(_visitor)
        return found[0] if found else None

    def get_text(self, node: ts.Node) -> str:
        """Extract the source text spanned by *node*.

        Args:
            node: Any node within this parse tree.

        Returns:
            The corresponding source substring.
        """
        return self._source_bytes[node.start_byte:node.end_byte].decode(
            "utf-8", errors="replace"
        )

    def walk(self, visitor: Callable[[ts.Node, int], bool | None]) -> None:
        """Depth-first walk of the tree using a visitor callback.

        The *visitor* is called with ``(node, depth)`` for every node.
        If the visitor returns ``False`` explicitly, the subtree rooted
        at that node is skipped.  The walk uses an explicit stack, so
        deeply nested trees do not exhaust the interpreter's recursion
        limit.
        """
        stack: list[tuple[ts.Node, int]] = [(self.tree.root_node, 0)]
        while stack:
            node, depth = stack.pop()
            if visitor(node, depth) is False:
                continue
            stack.extend((child, depth + 1) for child in reversed(node.children))


# ---------------------------------------------------------------------------
# Supported languages
# ---------------------------------------------------------------------------

_SUPPORTED_LANGUAGES = frozenset({"javascript", "typescript", "tsx"})

# Grammar node types whose ESTree name is not the CamelCase of the type.
_ESTREE_NAMES: dict[str, str] = {
    "assignment_expression": "AssignmentExpression",
    "augmented_assignment_expression": "AssignmentExpression",
    "ternary_expression": "ConditionalExpression",
    "template_string": "TemplateLiteral",
    "this": "ThisExpression",
    "super": "Super",
    "class": "ClassExpression",
    "generator_function": "FunctionExpression",
    "generator_function_declaration": "FunctionDeclaration",
    "object_pattern": "ObjectPattern",
    "array_pattern": "ArrayPattern",
    "assignment_pattern": "AssignmentPattern",
    "rest_pattern": "RestElement",
    "await_expression": "AwaitExpression",
    "yield_expression": "YieldExpression",
    "jsx_element": "JSXElement",
    "jsx_self_closing_element": "JSXElement",
}

_LOGICAL_OPERATORS = frozenset({"&&", "||", "??"})

_SIMPLE_ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

_OCTAL_DIGITS = frozenset("01234567")

_SKIPPED_TYPES = frozenset({"comment", "html_comment", "hash_bang_line"})


def _estree_name(node_type: str) -> str:
    if node_type in _ESTREE_NAMES:
        return _ESTREE_NAMES[node_type]
    return "".join(part.capitalize() for part in node_type.split("_"))


def _span(node: ts.Node) -> SourceSpan:
    return SourceSpan(
        line=node.start_point.row + 1,
        column=node.start_point.column,
        end_line=node.end_point.row + 1,
        end_column=node.end_point.column,
    )


def _named(node: ts.Node) -> list[ts.Node]:
    return [c for c in node.named_children if c.type not in _SKIPPED_TYPES]


def _decode_escape(text: str) -> str:
    """Decode one string escape sequence.

    Sequences that name no code point (``\\u{110000}``) are kept verbatim.
    """
    body = text[1:]
    if body in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[body]
    try:
        if body.startswith("u{") and body.endswith("}"):
            return chr(int(body[2:-1], 16))
        if body[:1] in ("u", "x") and len(body) > 1:
            return chr(int(body[1:], 16))
        if _OCTAL_DIGITS.issuperset(body):
            # Legacy octal escape: \1, \12, \377
            return chr(int(body, 8))
    except (ValueError, OverflowError):
        return text
    if body in ("\n", "\r\n", "\r"):
        return ""
    return body


def _number_value(text: str) -> int | float | str:
    cleaned = text.replace("_", "")
    if cleaned.endswith("n"):
        cleaned = cleaned[:-1]
    if len(cleaned) > 1 and cleaned[0] == "0" and cleaned.isdigit():
        # Legacy octal (010 == 8); a literal containing 8 or 9 is decimal (089 == 89)
        base = 8 if _OCTAL_DIGITS.issuperset(cleaned) else 10
        return int(cleaned, base)
    try:
        return int(cleaned, 0)
    except ValueError:
        pass
    try:
        return float(cleaned)
    except ValueError:
        return text


# ---------------------------------------------------------------------------
# ASTEngine
# ---------------------------------------------------------------------------


class ASTEngine:
    """Parser host for JavaScript and TypeScript.

    Initialises tree-sitter ``Language`` objects lazily on first use and
    caches them for the lifetime of the engine instance.  Lowering is
    stateless, so one engine can serve any number of files.

    Example::

        engine = ASTEngine()
        parsed = engine.parse(source, language="javascript")
        if not parsed.has_errors:
            program = engine.to_program(parsed)
    """

    def __init__(self) -> None:
        self._languages: dict[str, ts.Language] = {}
        self._parsers: dict[str, ts.Parser] = {}

    # ------------------------------------------------------------------
    # Language / parser initialisation
    # ------------------------------------------------------------------

    def _get_language(self, language: str) -> ts.Language:
        """Return (and cache) the tree-sitter ``Language`` for *language*.

        Raises:
            ValueError: If *language* is not supported.
        """
        if language not in _SUPPORTED_LANGUAGES:
            raise ValueError(
                f"Unsupported language: {language!r}. "
                f"Supported: {', '.join(sorted(_SUPPORTED_LANGUAGES))}"
            )

        if language not in self._languages:
            if language == "javascript":
                self._languages[language] = ts.Language(ts_js.language())
            elif language == "typescript":
                self._languages[language] = ts.Language(
                    ts_ts.language_typescript()
                )
            else:  # tsx
                self._languages[language] = ts.Language(
                    ts_ts.language_tsx()
                )

        return self._languages[language]

    def _get_parser(self, language: str) -> ts.Parser:
        """Return (and cache) a ``Parser`` configured for *language*."""
        if language not in self._parsers:
            lang = self._get_language(language)
            self._parsers[language] = ts.Parser(language=lang)
        return self._parsers[language]

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse(
        self, source_code: str, language: str = "javascript"
    ) -> ParsedAST:
        """Parse *source_code* into a ``ParsedAST``.

        Args:
            source_code: The full file contents to parse.
            language: One of ``"javascript"``, ``"typescript"``, or
                ``"tsx"``.

        Raises:
            ValueError: If *language* is not supported.
        """
        parser = self._get_parser(language)
        tree = parser.parse(source_code.encode("utf-8"))
        return ParsedAST(tree=tree, source_code=source_code, language=language)

    def parse_program(
        self, source_code: str, language: str = "javascript"
    ) -> Program:
        """Parse and lower *source_code* in one step."""
        return self.to_program(self.parse(source_code, language=language))

    # ------------------------------------------------------------------
    # Lowering to the ESTree model
    # ------------------------------------------------------------------

    def to_program(self, ast: ParsedAST) -> Program:
        """Lower a parse tree into an ESTree-shaped ``Program``.

        Parenthesised expressions are unwrapped and comments dropped, so
        the result has the same shape an ESTree parser would produce for
        the constructs the rules inspect.
        """
        root = ast.root_node
        body = tuple(self._lower(ast, child) for child in _named(root))
        return Program(body=body, span=_span(root))

    def _lower(self, ast: ParsedAST, node: ts.Node) -> Node:
        handler = _LOWERINGS.get(node.type)
        if handler is None:
            return OtherNode(_estree_name(node.type), span=_span(node))
        return handler(self, ast, node)

    def _lower_field(self, ast: ParsedAST, node: ts.Node, name: str) -> Node | None:
        child = node.child_by_field_name(name)
        return self._lower(ast, child) if child is not None else None

    def _lower_expression_statement(self, ast: ParsedAST, node: ts.Node) -> Node:
        children = _named(node)
        expression = (
            self._lower(ast, children[0])
            if children
            else OtherNode("EmptyStatement", span=_span(node))
        )
        return ExpressionStatement(expression, span=_span(node))

    def _lower_block(self, ast: ParsedAST, node: ts.Node) -> Node:
        return BlockStatement(
            body=tuple(self._lower(ast, child) for child in _named(node)),
            span=_span(node),
        )

    def _lower_return(self, ast: ParsedAST, node: ts.Node) -> Node:
        children = _named(node)
        argument = self._lower(ast, children[0]) if children else None
        return ReturnStatement(argument, span=_span(node))

    def _lower_declaration(self, ast: ParsedAST, node: ts.Node) -> Node:
        if node.type == "variable_declaration":
            keyword = "var"
        else:
            kind = node.child_by_field_name("kind")
            keyword = ast.get_text(kind) if kind is not None else "let"

        declarators: list[VariableDeclarator] = []
        for child in _named(node):
            if child.type != "variable_declarator":
                continue
            name = child.child_by_field_name("name")
            declarators.append(
                VariableDeclarator(
                    id=self._lower(ast, name) if name is not None else OtherNode("Unknown"),
                    init=self._lower_field(ast, child, "value"),
                    span=_span(child),
                )
            )
        return VariableDeclaration(
            kind_keyword=keyword,
            declarations=tuple(declarators),
            span=_span(node),
        )

    def _lower_params(self, ast: ParsedAST, node: ts.Node) -> tuple[Node, ...]:
        params_node = node.child_by_field_name("parameters")
        if params_node is None:
            single = node.child_by_field_name("parameter")
            return (self._lower(ast, single),) if single is not None else ()

        params: list[Node] = []
        for child in _named(params_node):
            if child.type in ("required_parameter", "optional_parameter"):
                pattern = child.child_by_field_name("pattern")
                if pattern is not None:
                    params.append(self._lower(ast, pattern))
                    continue
            params.append(self._lower(ast, child))
        return tuple(params)

    def _lower_function(self, ast: ParsedAST, node: ts.Node) -> Node:
        name = node.child_by_field_name("name")
        body = node.child_by_field_name("body")
        return FunctionExpression(
            params=self._lower_params(ast, node),
            body=(
                self._lower_block(ast, body)
                if body is not None
                else BlockStatement()
            ),
            name=ast.get_text(name) if name is not None else None,
            span=_span(node),
        )

    def _lower_arrow(self, ast: ParsedAST, node: ts.Node) -> Node:
        body = self._lower_field(ast, node, "body")
        return ArrowFunctionExpression(
            params=self._lower_params(ast, node),
            body=body if body is not None else BlockStatement(),
            span=_span(node),
        )

    def _lower_arguments(self, ast: ParsedAST, node: ts.Node | None) -> tuple[Node, ...]:
        if node is None:
            return ()
        return tuple(self._lower(ast, child) for child in _named(node))

    def _lower_call(self, ast: ParsedAST, node: ts.Node) -> Node:
        args = node.child_by_field_name("arguments")
        if args is not None and args.type == "template_string":
            return OtherNode("TaggedTemplateExpression", span=_span(node))
        callee = self._lower_field(ast, node, "function")
        return CallExpression(
            callee=callee if callee is not None else OtherNode("Unknown"),
            arguments=self._lower_arguments(ast, args),
            span=_span(node),
        )

    def _lower_new(self, ast: ParsedAST, node: ts.Node) -> Node:
        callee = self._lower_field(ast, node, "constructor")
        return NewExpression(
            callee=callee if callee is not None else OtherNode("Unknown"),
            arguments=self._lower_arguments(
                ast, node.child_by_field_name("arguments")
            ),
            span=_span(node),
        )

    def _lower_member(self, ast: ParsedAST, node: ts.Node) -> Node:
        obj = self._lower_field(ast, node, "object")
        computed = node.type == "subscript_expression"
        prop = self._lower_field(ast, node, "index" if computed else "property")
        return MemberExpression(
            object=obj if obj is not None else OtherNode("Unknown"),
            property=prop if prop is not None else OtherNode("Unknown"),
            computed=computed,
            span=_span(node),
        )

    def _lower_unary(self, ast: ParsedAST, node: ts.Node) -> Node:
        operator = node.child_by_field_name("operator")
        argument = self._lower_field(ast, node, "argument")
        return UnaryExpression(
            operator=ast.get_text(operator) if operator is not None else "",
            argument=argument if argument is not None else OtherNode("Unknown"),
            span=_span(node),
        )

    def _lower_binary(self, ast: ParsedAST, node: ts.Node) -> Node:
        # Left-nested chains (a + b + c + ...) are folded in a loop so long
        # concatenations cost no stack depth per operand.
        chain = [node]
        left_node = node.child_by_field_name("left")
        while left_node is not None and left_node.type == "binary_expression":
            chain.append(left_node)
            left_node = left_node.child_by_field_name("left")

        left = self._lower(ast, left_node) if left_node is not None else OtherNode("Unknown")
        for current in reversed(chain):
            operator_node = current.child_by_field_name("operator")
            operator = ast.get_text(operator_node) if operator_node is not None else ""
            cls = LogicalExpression if operator in _LOGICAL_OPERATORS else BinaryExpression
            right = self._lower_field(ast, current, "right")
            left = cls(
                operator=operator,
                left=left,
                right=right if right is not None else OtherNode("Unknown"),
                span=_span(current),
            )
        return left

    def _lower_array(self, ast: ParsedAST, node: ts.Node) -> Node:
        return ArrayExpression(
            elements=tuple(self._lower(ast, child) for child in _named(node)),
            span=_span(node),
        )

    def _lower_object(self, ast: ParsedAST, node: ts.Node) -> Node:
        properties: list[Property | SpreadElement] = []
        for child in _named(node):
            span = _span(child)
            if child.type == "pair":
                key = self._lower_key(ast, child.child_by_field_name("key"))
                value = self._lower_field(ast, child, "value")
                properties.append(
                    Property(
                        key=key,
                        value=value if value is not None else OtherNode("Unknown"),
                        span=span,
                    )
                )
            elif child.type == "shorthand_property_identifier":
                ident = Identifier(ast.get_text(child), span=span)
                properties.append(
                    Property(key=ident, value=ident, shorthand=True, span=span)
                )
            elif child.type == "method_definition":
                properties.append(
                    Property(
                        key=self._lower_key(ast, child.child_by_field_name("name")),
                        value=self._lower_function(ast, child),
                        span=span,
                    )
                )
            elif child.type == "spread_element":
                properties.append(self._lower_spread(ast, child))  # type: ignore[arg-type]
        return ObjectExpression(properties=tuple(properties), span=_span(node))

    def _lower_key(self, ast: ParsedAST, node: ts.Node | None) -> Node:
        if node is None:
            return OtherNode("Unknown")
        if node.type in ("property_identifier", "private_property_identifier"):
            return Identifier(ast.get_text(node), span=_span(node))
        if node.type == "computed_property_name":
            inner = _named(node)
            return self._lower(ast, inner[0]) if inner else OtherNode("Unknown")
        return self._lower(ast, node)

    def _lower_spread(self, ast: ParsedAST, node: ts.Node) -> Node:
        inner = _named(node)
        argument = self._lower(ast, inner[0]) if inner else OtherNode("Unknown")
        return SpreadElement(argument, span=_span(node))

    def _lower_identifier(self, ast: ParsedAST, node: ts.Node) -> Node:
        return Identifier(ast.get_text(node), span=_span(node))

    def _lower_parenthesized(self, ast: ParsedAST, node: ts.Node) -> Node:
        inner = _named(node)
        if len(inner) != 1:
            return OtherNode("SequenceExpression", span=_span(node))
        return self._lower(ast, inner[0])

    def _lower_string(self, ast: ParsedAST, node: ts.Node) -> Node:
        parts: list[str] = []
        for child in node.named_children:
            text = ast.get_text(child)
            if child.type == "escape_sequence":
                parts.append(_decode_escape(text))
            else:
                parts.append(text)
        return Literal(value="".join(parts), raw=ast.get_text(node), span=_span(node))

    def _lower_number(self, ast: ParsedAST, node: ts.Node) -> Node:
        raw = ast.get_text(node)
        return Literal(value=_number_value(raw), raw=raw, span=_span(node))

    def _lower_keyword_literal(self, ast: ParsedAST, node: ts.Node) -> Node:
        raw = ast.get_text(node)
        value = {"true": True, "false": False, "null": None}[node.type]
        return Literal(value=value, raw=raw, span=_span(node))

    def _lower_regex(self, ast: ParsedAST, node: ts.Node) -> Node:
        raw = ast.get_text(node)
        return Literal(value=None, raw=raw, regex=raw, span=_span(node))


_Lowering = Callable[[ASTEngine, ParsedAST, ts.Node], Node]

_LOWERINGS: dict[str, _Lowering] = {
    "expression_statement": ASTEngine._lower_expression_statement,
    "statement_block": ASTEngine._lower_block,
    "return_statement": ASTEngine._lower_return,
    "variable_declaration": ASTEngine._lower_declaration,
    "lexical_declaration": ASTEngine._lower_declaration,
    "function": ASTEngine._lower_function,
    "function_expression": ASTEngine._lower_function,
    "arrow_function": ASTEngine._lower_arrow,
    "call_expression": ASTEngine._lower_call,
    "new_expression": ASTEngine._lower_new,
    "member_expression": ASTEngine._lower_member,
    "subscript_expression": ASTEngine._lower_member,
    "unary_expression": ASTEngine._lower_unary,
    "binary_expression": ASTEngine._lower_binary,
    "array": ASTEngine._lower_array,
    "object": ASTEngine._lower_object,
    "spread_element": ASTEngine._lower_spread,
    "identifier": ASTEngine._lower_identifier,
    "shorthand_property_identifier": ASTEngine._lower_identifier,
    "property_identifier": ASTEngine._lower_identifier,
    "undefined": ASTEngine._lower_identifier,
    "parenthesized_expression": ASTEngine._lower_parenthesized,
    "string": ASTEngine._lower_string,
    "number": ASTEngine._lower_number,
    "true": ASTEngine._lower_keyword_literal,
    "false": ASTEngine._lower_keyword_literal,
    "null": ASTEngine._lower_keyword_literal,
    "regex": ASTEngine._lower_regex,
}
