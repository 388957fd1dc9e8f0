"""HCL parsing via tree-sitter.

The tree-sitter concrete syntax tree is converted into a small closed AST:
blocks, attributes and a handful of expression variants. Every node keeps
its byte range so callers can recover the verbatim source of expressions
that are not evaluated.

HCL tree-sitter structure:
    config_file
    └── body
        ├── attribute: identifier "=" expression
        └── block
            ├── identifier: "resource" | "variable" | ...
            ├── string_lit | identifier: labels
            └── body: { attributes, nested blocks }
"""

from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from ..core.exceptions import HCLParseError, TfIndexError
from .values import StaticValue


class ParserUnavailableError(TfIndexError):
    """The tree-sitter HCL grammar could not be loaded."""

    pass


# =============================================================================
# AST
# =============================================================================


@dataclass(frozen=True)
class Expression:
    """Base of all expression variants; offsets are byte positions."""

    start: int
    end: int


@dataclass(frozen=True)
class LiteralExpr(Expression):
    """Number, bool, null or a string without interpolation."""

    value: StaticValue


@dataclass(frozen=True)
class TupleExpr(Expression):
    """``[a, b, c]``"""

    items: tuple[Expression, ...]


@dataclass(frozen=True)
class ObjectExpr(Expression):
    """``{ key = value }``; a key is None when it is not a static name."""

    items: tuple[tuple[str | None, Expression], ...]


@dataclass(frozen=True)
class OpaqueExpr(Expression):
    """Anything else: references, function calls, templates, operators."""

    node_type: str


@dataclass(frozen=True)
class Attribute:
    name: str
    expr: Expression


@dataclass
class Block:
    """A block such as ``resource "type" "name" { ... }``."""

    type: str
    labels: tuple[str, ...]
    attributes: dict[str, Attribute] = field(default_factory=dict)
    blocks: list["Block"] = field(default_factory=list)
    line: int = 0


@dataclass
class HCLFile:
    """A parsed configuration file and its raw source."""

    filename: str
    source: bytes
    blocks: list[Block] = field(default_factory=list)
    attributes: dict[str, Attribute] = field(default_factory=dict)

    def expression_text(self, expr: Expression) -> str:
        """Verbatim, whitespace-trimmed source of an expression."""
        start = max(expr.start, 0)
        end = min(max(expr.end, start), len(self.source))
        return self.source[start:end].decode("utf-8", errors="replace").strip()


# =============================================================================
# Conversion from tree-sitter
# =============================================================================

_INTERPOLATION_TYPES = frozenset(
    {"template_interpolation", "template_directive", "template_for", "template_if"}
)
_STRING_TYPES = frozenset({"string_lit", "quoted_template"})

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\"}
_ESCAPE_RE = re.compile(r'\\(u[0-9a-fA-F]{4}|U[0-9a-fA-F]{8}|[ntr"\\])|\$\$\{|%%\{')


def _unescape(raw: str) -> str:
    def replace(match: re.Match[str]) -> str:
        token = match.group(0)
        if token == "$${":
            return "${"
        if token == "%%{":
            return "%{"
        code = match.group(1)
        if code[0] in "uU":
            return chr(int(code[1:], 16))
        return _ESCAPES[code]

    return _ESCAPE_RE.sub(replace, raw)


def _text(node: Any) -> str:
    return node.text.decode("utf-8", errors="replace")


def _has_interpolation(node: Any) -> bool:
    if node.type in _INTERPOLATION_TYPES:
        return True
    return any(_has_interpolation(child) for child in node.children)


def _quoted_value(node: Any) -> str | None:
    """Value of a quoted string node, or None if it interpolates."""
    if _has_interpolation(node):
        return None
    raw = _text(node)
    if len(raw) >= 2 and raw[0] == '"' and raw[-1] == '"':
        raw = raw[1:-1]
    return _unescape(raw)


def _heredoc_value(node: Any) -> str | None:
    if _has_interpolation(node):
        return None
    lines = _text(node).split("\n")
    if len(lines) < 2:
        return None
    body = "\n".join(lines[1:-1])
    if lines[0].startswith("<<-"):
        body = textwrap.dedent(body)
    return body + "\n" if body else ""


def _number(text: str) -> StaticValue | None:
    try:
        if re.fullmatch(r"\d+", text):
            return StaticValue.number(int(text))
        value = float(text)
    except ValueError:
        return None
    if value.is_integer():
        return StaticValue.number(int(value))
    return StaticValue.number(value)


def _literal(node: Any) -> StaticValue | None:
    kind = node.type
    if kind == "literal_value" and node.named_child_count == 1:
        return _literal(node.named_children[0])
    if kind == "numeric_lit":
        return _number(_text(node))
    if kind == "bool_lit":
        return StaticValue.boolean(_text(node) == "true")
    if kind == "null_lit":
        return StaticValue.null()
    if kind in _STRING_TYPES:
        value = _quoted_value(node)
        return StaticValue.string(value) if value is not None else None
    if kind == "heredoc_template":
        value = _heredoc_value(node)
        return StaticValue.string(value) if value is not None else None
    if kind == "template_expr" and node.named_child_count == 1:
        return _literal(node.named_children[0])
    return None


def _unwrap(node: Any) -> Any:
    while node.type == "expression" and node.named_child_count == 1:
        node = node.named_children[0]
    return node


def _negated_number(node: Any) -> StaticValue | None:
    """Fold ``-<number>`` into a numeric literal."""
    if node.type == "operation" and node.named_child_count == 1:
        node = node.named_children[0]
    if node.type != "unary_operation" or node.child_count != 2:
        return None
    operator, operand = node.children
    if _text(operator) != "-":
        return None
    value = _literal(_unwrap(operand))
    if value is None or not isinstance(value.payload, (int, float)) or isinstance(value.payload, bool):
        return None
    return StaticValue.number(-value.payload)


def _object_key(node: Any) -> str | None:
    node = _unwrap(node)
    if node.type == "variable_expr" and node.named_child_count == 1:
        return _text(node.named_children[0])
    if node.type == "identifier":
        return _text(node)
    value = _literal(node)
    if value is not None and isinstance(value.payload, str):
        return value.payload
    return None


def convert_expression(node: Any) -> Expression:
    """Convert a tree-sitter expression node into an AST expression."""
    start, end = node.start_byte, node.end_byte
    inner = _unwrap(node)

    value = _literal(inner)
    if value is not None:
        return LiteralExpr(start, end, value)

    negated = _negated_number(inner)
    if negated is not None:
        return LiteralExpr(start, end, negated)

    if inner.type == "collection_value" and inner.named_child_count == 1:
        inner = inner.named_children[0]

    if inner.type == "tuple":
        items = tuple(
            convert_expression(child)
            for child in inner.named_children
            if child.type == "expression"
        )
        return TupleExpr(start, end, items)

    if inner.type == "object":
        pairs: list[tuple[str | None, Expression]] = []
        for elem in inner.named_children:
            if elem.type != "object_elem":
                continue
            key_node = elem.child_by_field_name("key")
            val_node = elem.child_by_field_name("val")
            if key_node is None or val_node is None:
                parts = [c for c in elem.named_children if c.type == "expression"]
                if len(parts) != 2:
                    continue
                key_node, val_node = parts
            pairs.append((_object_key(key_node), convert_expression(val_node)))
        return ObjectExpr(start, end, tuple(pairs))

    return OpaqueExpr(start, end, inner.type)


def _convert_attribute(node: Any) -> Attribute | None:
    named = node.named_children
    if len(named) < 2 or named[0].type != "identifier":
        return None
    return Attribute(name=_text(named[0]), expr=convert_expression(named[1]))


def _label(node: Any) -> str:
    if node.type in _STRING_TYPES:
        value = _quoted_value(node)
        if value is not None:
            return value
    return _text(node).strip('"')


def _convert_body(body: Any) -> tuple[dict[str, Attribute], list[Block]]:
    attributes: dict[str, Attribute] = {}
    blocks: list[Block] = []
    for child in body.named_children:
        if child.type == "attribute":
            attribute = _convert_attribute(child)
            if attribute is not None:
                attributes[attribute.name] = attribute
        elif child.type == "block":
            blocks.append(_convert_block(child))
    return attributes, blocks


def _convert_block(node: Any) -> Block:
    block_type = ""
    labels: list[str] = []
    attributes: dict[str, Attribute] = {}
    blocks: list[Block] = []

    for child in node.named_children:
        if child.type == "body":
            attributes, blocks = _convert_body(child)
        elif child.type in ("block_start", "block_end"):
            continue
        elif not block_type and child.type == "identifier":
            block_type = _text(child)
        elif child.type in _STRING_TYPES or child.type == "identifier":
            labels.append(_label(child))

    return Block(
        type=block_type,
        labels=tuple(labels),
        attributes=attributes,
        blocks=blocks,
        line=node.start_point[0] + 1,
    )


def _first_error(node: Any) -> Any | None:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error:
            found = _first_error(child)
            if found is not None:
                return found
    return None


# =============================================================================
# Parser
# =============================================================================


class HCLParser:
    """Lazily initialized tree-sitter HCL parser.

    Example:
        parser = HCLParser()
        hcl_file = parser.parse(b'variable "x" {}', "variables.tf")
    """

    def __init__(self) -> None:
        self._parser: Any | None = None

    def _get_parser(self) -> Any:
        if self._parser is None:
            try:
                from tree_sitter_language_pack import get_parser

                self._parser = get_parser("hcl")
            except Exception as e:
                raise ParserUnavailableError(f"tree-sitter HCL grammar unavailable: {e}") from e
            logger.debug("Initialized tree-sitter parser for hcl")
        return self._parser

    def parse(self, source: bytes | str, filename: str = "<memory>") -> HCLFile:
        """Parse configuration source.

        Raises:
            HCLParseError: If the source contains syntax errors.
        """
        if isinstance(source, str):
            source = source.encode("utf-8")

        tree = self._get_parser().parse(source)
        root = tree.root_node

        if root.has_error:
            error = _first_error(root)
            if error is not None:
                line, column = error.start_point
                raise HCLParseError(filename, f"syntax error at line {line + 1}, column {column + 1}")
            raise HCLParseError(filename, "syntax error")

        hcl_file = HCLFile(filename=filename, source=source)
        for child in root.named_children:
            if child.type == "body":
                hcl_file.attributes, hcl_file.blocks = _convert_body(child)
        return hcl_file


_default_parser: HCLParser | None = None


def parse_hcl(source: bytes | str, filename: str = "<memory>") -> HCLFile:
    """Parse configuration source with the shared parser."""
    global _default_parser
    if _default_parser is None:
        _default_parser = HCLParser()
    return _default_parser.parse(source, filename)
