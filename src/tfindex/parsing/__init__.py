"""Configuration parsing: tree-sitter HCL frontend and structural extraction."""

from .extractor import (
    declared_provider,
    detect_provider,
    evaluate_static,
    extract_source,
    extract_structure,
    provider_from_type,
)
from .hcl import (
    Attribute,
    Block,
    Expression,
    HCLFile,
    HCLParser,
    LiteralExpr,
    ObjectExpr,
    OpaqueExpr,
    ParserUnavailableError,
    TupleExpr,
    parse_hcl,
)
from .values import NOT_STATIC, EvalResult, StaticValue, ValueKind

__all__ = [
    "declared_provider",
    "detect_provider",
    "evaluate_static",
    "extract_source",
    "extract_structure",
    "provider_from_type",
    "Attribute",
    "Block",
    "Expression",
    "HCLFile",
    "HCLParser",
    "LiteralExpr",
    "ObjectExpr",
    "OpaqueExpr",
    "ParserUnavailableError",
    "TupleExpr",
    "parse_hcl",
    "NOT_STATIC",
    "EvalResult",
    "StaticValue",
    "ValueKind",
]
