"""Statically evaluated configuration values.

Only a closed set of shapes is ever produced by the static evaluator, so
values are a tagged variant rather than arbitrary Python objects:
null, string, number, bool, ordered sequence and ordered key/value map.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class ValueKind(str, Enum):
    """Tag of a StaticValue."""

    NULL = "null"
    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    LIST = "list"
    MAP = "map"


@dataclass(frozen=True)
class StaticValue:
    """A statically known configuration value.

    ``payload`` depends on ``kind``: None for NULL, str, int/float, bool,
    a tuple of StaticValue for LIST, a tuple of (key, StaticValue) pairs
    for MAP (source order preserved).
    """

    kind: ValueKind
    payload: Any = None

    @classmethod
    def null(cls) -> "StaticValue":
        return cls(ValueKind.NULL)

    @classmethod
    def string(cls, value: str) -> "StaticValue":
        return cls(ValueKind.STRING, value)

    @classmethod
    def number(cls, value: int | float) -> "StaticValue":
        return cls(ValueKind.NUMBER, value)

    @classmethod
    def boolean(cls, value: bool) -> "StaticValue":
        return cls(ValueKind.BOOL, value)

    @classmethod
    def sequence(cls, items: list["StaticValue"]) -> "StaticValue":
        return cls(ValueKind.LIST, tuple(items))

    @classmethod
    def mapping(cls, items: list[tuple[str, "StaticValue"]]) -> "StaticValue":
        return cls(ValueKind.MAP, tuple(items))

    def to_python(self) -> Any:
        """Convert to plain Python data (dicts keep source order)."""
        if self.kind is ValueKind.LIST:
            return [item.to_python() for item in self.payload]
        if self.kind is ValueKind.MAP:
            return {key: value.to_python() for key, value in self.payload}
        return self.payload

    def to_json(self) -> str:
        """Serialize for storage."""
        return json.dumps(self.to_python())

    @classmethod
    def from_python(cls, value: Any) -> "StaticValue":
        """Rebuild from plain Python data (as produced by ``to_python``)."""
        if value is None:
            return cls.null()
        if isinstance(value, bool):
            return cls.boolean(value)
        if isinstance(value, (int, float)):
            return cls.number(value)
        if isinstance(value, str):
            return cls.string(value)
        if isinstance(value, list):
            return cls.sequence([cls.from_python(item) for item in value])
        if isinstance(value, dict):
            return cls.mapping([(str(k), cls.from_python(v)) for k, v in value.items()])
        raise TypeError(f"Unsupported static value type: {type(value).__name__}")

    @classmethod
    def from_json(cls, text: str) -> "StaticValue":
        return cls.from_python(json.loads(text))


class _NotStatic:
    """Marker for an expression whose value is not statically known."""

    _instance: "_NotStatic | None" = None

    def __new__(cls) -> "_NotStatic":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_STATIC"

    def __bool__(self) -> bool:
        return False


NOT_STATIC = _NotStatic()

EvalResult = Union[StaticValue, _NotStatic]
