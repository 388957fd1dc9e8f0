"""Structural extraction from parsed configuration files.

Only top-level ``variable``, ``output``, ``resource`` and ``data`` blocks
are recognized; nested blocks are never visited. Provider detection also
looks at ``terraform``/``provider`` blocks.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from loguru import logger

from ..core.exceptions import HCLParseError
from ..core.types import DataSource, ModuleStructure, Output, Resource, Variable
from .hcl import (
    Attribute,
    Block,
    Expression,
    HCLFile,
    LiteralExpr,
    ObjectExpr,
    TupleExpr,
    parse_hcl,
)
from .values import NOT_STATIC, EvalResult, StaticValue, ValueKind


def provider_from_type(type_name: str) -> str:
    """Provider prefix of a resource/data type (``azurerm_x`` -> ``azurerm``)."""
    return type_name.split("_", 1)[0]


def evaluate_static(expr: Expression) -> EvalResult:
    """Resolve an expression to a value without any evaluation context.

    Literals, tuples of static values and objects with static keys and
    values are resolved; anything else yields NOT_STATIC.
    """
    if isinstance(expr, LiteralExpr):
        return expr.value

    if isinstance(expr, TupleExpr):
        items: list[StaticValue] = []
        for item in expr.items:
            value = evaluate_static(item)
            if value is NOT_STATIC:
                return NOT_STATIC
            items.append(value)
        return StaticValue.sequence(items)

    if isinstance(expr, ObjectExpr):
        pairs: list[tuple[str, StaticValue]] = []
        for key, item in expr.items:
            if key is None:
                return NOT_STATIC
            value = evaluate_static(item)
            if value is NOT_STATIC:
                return NOT_STATIC
            pairs.append((key, value))
        return StaticValue.mapping(pairs)

    return NOT_STATIC


def _string_literal(attribute: Attribute | None) -> str:
    if attribute is None:
        return ""
    expr = attribute.expr
    if isinstance(expr, LiteralExpr) and expr.value.kind is ValueKind.STRING:
        return expr.value.payload
    return ""


def _is_true(hcl_file: HCLFile, attribute: Attribute | None) -> bool:
    if attribute is None:
        return False
    expr = attribute.expr
    if isinstance(expr, LiteralExpr) and expr.value.kind is ValueKind.BOOL:
        return bool(expr.value.payload)
    return hcl_file.expression_text(expr).lower() == "true"


def extract_variable(hcl_file: HCLFile, block: Block, source_file: str) -> Variable:
    variable = Variable(name=block.labels[0], source_file=source_file)

    if (type_attr := block.attributes.get("type")) is not None:
        variable.type = hcl_file.expression_text(type_attr.expr)

    variable.description = _string_literal(block.attributes.get("description"))

    if (default_attr := block.attributes.get("default")) is not None:
        variable.required = False
        variable.default_text = hcl_file.expression_text(default_attr.expr)
        value = evaluate_static(default_attr.expr)
        variable.default_value = value if isinstance(value, StaticValue) else None

    variable.sensitive = _is_true(hcl_file, block.attributes.get("sensitive"))
    return variable


def extract_output(hcl_file: HCLFile, block: Block, source_file: str) -> Output:
    return Output(
        name=block.labels[0],
        description=_string_literal(block.attributes.get("description")),
        sensitive=_is_true(hcl_file, block.attributes.get("sensitive")),
        source_file=source_file,
    )


def extract_structure(hcl_file: HCLFile, source_file: str = "") -> ModuleStructure:
    """Extract variables, outputs, resources and data sources.

    Args:
        hcl_file: Parsed file (carries its raw source).
        source_file: Path recorded on every extracted entity.

    Returns:
        Entities in source order.
    """
    source_file = source_file or hcl_file.filename
    structure = ModuleStructure()

    for block in hcl_file.blocks:
        if block.type == "variable" and block.labels:
            structure.variables.append(extract_variable(hcl_file, block, source_file))
        elif block.type == "output" and block.labels:
            structure.outputs.append(extract_output(hcl_file, block, source_file))
        elif block.type == "resource" and len(block.labels) >= 2:
            type_name, name = block.labels[0], block.labels[1]
            structure.resources.append(
                Resource(type_name, name, provider_from_type(type_name), source_file)
            )
        elif block.type == "data" and len(block.labels) >= 2:
            type_name, name = block.labels[0], block.labels[1]
            structure.data_sources.append(
                DataSource(type_name, name, provider_from_type(type_name), source_file)
            )

    return structure


def extract_source(source: bytes | str, source_file: str) -> ModuleStructure | None:
    """Parse and extract one file, returning None when it does not parse."""
    try:
        hcl_file = parse_hcl(source, source_file)
    except HCLParseError as e:
        logger.warning(f"Skipping unparsable file: {e}")
        return None
    return extract_structure(hcl_file, source_file)


def declared_provider(hcl_file: HCLFile) -> str | None:
    """First provider named by ``required_providers`` or a ``provider`` block."""
    for block in hcl_file.blocks:
        if block.type == "terraform":
            for inner in block.blocks:
                if inner.type == "required_providers" and inner.attributes:
                    return next(iter(inner.attributes))
        elif block.type == "provider" and block.labels:
            return block.labels[0]
    return None


def detect_provider(files: Iterable[HCLFile], resources: Iterable[Resource]) -> str:
    """Primary provider of a module.

    Declared providers win; otherwise the most common resource provider,
    or an empty string when the module declares no resources.
    """
    for hcl_file in files:
        if provider := declared_provider(hcl_file):
            return provider

    counts = Counter(resource.provider for resource in resources)
    if not counts:
        return ""
    return counts.most_common(1)[0][0]
