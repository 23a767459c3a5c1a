"""Constraint model: the declarative tree describing allowed value shapes.

Nodes are frozen dataclasses. Every impossible parameter combination is
rejected when the node is built, raising SchemaDefinitionError, so a model
that exists is always checkable. Nodes carry no validation behavior; see
schemaguard.core.validator for that.
"""

import re
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Union

from schemaguard.core.errors import SchemaDefinitionError


@dataclass(frozen=True)
class StringConstraint:
    min_length: int = 0
    max_length: int | None = None
    pattern: str | None = None
    description: str = ""

    def __post_init__(self):
        if self.min_length < 0:
            raise SchemaDefinitionError(f"min_length must be >= 0, got {self.min_length}")
        if self.max_length is not None and self.max_length < self.min_length:
            raise SchemaDefinitionError(
                f"max_length ({self.max_length}) is smaller than min_length ({self.min_length})"
            )
        if self.pattern is not None:
            try:
                re.compile(self.pattern)
            except re.error as e:
                raise SchemaDefinitionError(f"Invalid pattern {self.pattern!r}: {e}") from e

    @property
    def kind(self) -> str:
        return "string"


@dataclass(frozen=True)
class NumberConstraint:
    minimum: float | None = None
    maximum: float | None = None
    integer: bool = False
    description: str = ""

    def __post_init__(self):
        if self.minimum is not None and self.maximum is not None and self.minimum > self.maximum:
            raise SchemaDefinitionError(
                f"minimum ({self.minimum}) is greater than maximum ({self.maximum})"
            )

    @property
    def kind(self) -> str:
        return "integer" if self.integer else "number"


@dataclass(frozen=True)
class BooleanConstraint:
    description: str = ""

    @property
    def kind(self) -> str:
        return "boolean"


@dataclass(frozen=True)
class EnumConstraint:
    values: tuple[str, ...]
    description: str = ""

    def __post_init__(self):
        if not self.values:
            raise SchemaDefinitionError("Enum requires at least one value")
        for value in self.values:
            if not isinstance(value, str):
                raise SchemaDefinitionError(f"Enum values must be strings, got {value!r}")
        if len(set(self.values)) != len(self.values):
            duplicates = [v for v, n in Counter(self.values).items() if n > 1]
            raise SchemaDefinitionError(f"Duplicate enum values: {', '.join(duplicates)}")

    @property
    def kind(self) -> str:
        return "enum"


@dataclass(frozen=True)
class OptionalConstraint:
    inner: "Constraint"

    def __post_init__(self):
        if isinstance(self.inner, OptionalConstraint):
            raise SchemaDefinitionError("optional() cannot wrap another optional()")

    @property
    def kind(self) -> str:
        return "optional"

    @property
    def description(self) -> str:
        return self.inner.description


@dataclass(frozen=True)
class Field:
    name: str
    node: "Constraint"
    required: bool = True


@dataclass(frozen=True)
class ObjectConstraint:
    fields: tuple[Field, ...]
    closed: bool = False
    description: str = ""

    def __post_init__(self):
        names = [f.name for f in self.fields]
        for name in names:
            if not isinstance(name, str) or not name:
                raise SchemaDefinitionError(f"Field names must be non-empty strings, got {name!r}")
        if len(set(names)) != len(names):
            raise SchemaDefinitionError(f"Duplicate field names in object: {names}")

    @property
    def kind(self) -> str:
        return "object"

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Field | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None


@dataclass(frozen=True)
class ArrayConstraint:
    items: "Constraint"
    min_items: int = 0
    max_items: int | None = None
    description: str = ""

    def __post_init__(self):
        if self.min_items < 0:
            raise SchemaDefinitionError(f"min_items must be >= 0, got {self.min_items}")
        if self.max_items is not None and self.max_items < self.min_items:
            raise SchemaDefinitionError(
                f"max_items ({self.max_items}) is smaller than min_items ({self.min_items})"
            )

    @property
    def kind(self) -> str:
        return "array"


Constraint = Union[
    StringConstraint,
    NumberConstraint,
    BooleanConstraint,
    EnumConstraint,
    ObjectConstraint,
    ArrayConstraint,
    OptionalConstraint,
]

PRIMITIVES = (StringConstraint, NumberConstraint, BooleanConstraint)
NODE_TYPES = PRIMITIVES + (EnumConstraint, ObjectConstraint, ArrayConstraint, OptionalConstraint)


def _check_node(node, context: str) -> None:
    if not isinstance(node, NODE_TYPES):
        raise SchemaDefinitionError(f"{context} is not a constraint node: {node!r}")


# =========================================================================
# Construction helpers
# =========================================================================

def string(min_length: int = 0, max_length: int | None = None,
           pattern: str | None = None, description: str = "") -> StringConstraint:
    return StringConstraint(min_length, max_length, pattern, description)


def number(minimum: float | None = None, maximum: float | None = None,
           integer: bool = False, description: str = "") -> NumberConstraint:
    return NumberConstraint(minimum, maximum, integer, description)


def integer(minimum: int | None = None, maximum: int | None = None,
            description: str = "") -> NumberConstraint:
    return NumberConstraint(minimum, maximum, True, description)


def boolean(description: str = "") -> BooleanConstraint:
    return BooleanConstraint(description)


def enum(values: Iterable[str], description: str = "") -> EnumConstraint:
    """Closed, ordered set of allowed string tags"""
    if isinstance(values, str):
        raise SchemaDefinitionError("enum() expects a collection of strings, not a single string")
    return EnumConstraint(tuple(values), description)


def optional(inner: Constraint) -> OptionalConstraint:
    _check_node(inner, "optional() argument")
    return OptionalConstraint(inner)


def array(items: Constraint, min_items: int = 0, max_items: int | None = None,
          description: str = "") -> ArrayConstraint:
    _check_node(items, "array() element")
    return ArrayConstraint(items, min_items, max_items, description)


def obj(fields: Mapping[str, Constraint], closed: bool = False,
        description: str = "") -> ObjectConstraint:
    """Build an object node; fields wrapped in optional() are not required"""
    built = []
    for name, node in fields.items():
        _check_node(node, f"Field '{name}'")
        built.append(Field(name, node, required=not isinstance(node, OptionalConstraint)))
    return ObjectConstraint(tuple(built), closed, description)


def format_number(value: float) -> str:
    """Exact text for a numeric bound: ``1234567``, ``0.5``, never rounded"""
    return repr(value)


def describe(node: Constraint) -> str:
    """Human-readable summary of a node's constraint, without child detail"""
    if isinstance(node, StringConstraint):
        parts = ["string"]
        if node.min_length:
            parts.append(f"at least {node.min_length} characters")
        if node.max_length is not None:
            parts.append(f"at most {node.max_length} characters")
        if node.pattern is not None:
            parts.append(f"matching {node.pattern}")
        return ", ".join(parts)
    if isinstance(node, NumberConstraint):
        parts = ["integer" if node.integer else "number"]
        if node.minimum is not None:
            parts.append(f">= {format_number(node.minimum)}")
        if node.maximum is not None:
            parts.append(f"<= {format_number(node.maximum)}")
        return " ".join(parts)
    if isinstance(node, BooleanConstraint):
        return "boolean"
    if isinstance(node, EnumConstraint):
        return "one of " + ", ".join(repr(v) for v in node.values)
    if isinstance(node, ObjectConstraint):
        return "closed object" if node.closed else "object"
    if isinstance(node, ArrayConstraint):
        bounds = []
        if node.min_items:
            bounds.append(f"at least {node.min_items} items")
        if node.max_items is not None:
            bounds.append(f"at most {node.max_items} items")
        return "array" + (f" with {' and '.join(bounds)}" if bounds else "")
    if isinstance(node, OptionalConstraint):
        return describe(node.inner)
    raise SchemaDefinitionError(f"Unknown constraint node: {node!r}")
