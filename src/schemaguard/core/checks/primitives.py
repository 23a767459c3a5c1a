"""Leaf checks for the Schema Guard validator: strings, numbers, booleans, enums."""

import math
import re
from typing import Any

from schemaguard.core.constraints import (
    BooleanConstraint,
    EnumConstraint,
    NumberConstraint,
    StringConstraint,
    describe,
    format_number,
)
from schemaguard.core.errors import PathElement, Violation, ViolationCollector, summarize_value


def type_name(value: Any) -> str:
    """JSON-flavored name of a Python value's type"""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, float) and not math.isfinite(value):
        return "non-finite number"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not isinstance(value, float) or math.isfinite(value)


class PrimitiveChecksMixin:
    """Mixin providing leaf constraint checks.

    Each check returns the value unchanged; violations go to the collector.
    A type mismatch yields exactly one violation and skips the bound checks.
    """

    value_limit: int

    def _type_mismatch(self, node, value: Any, path: tuple[PathElement, ...],
                       collector: ViolationCollector) -> None:
        expected = describe(node)
        collector.add(Violation(
            path=path,
            code="TYP-001",
            category="type",
            message=f"expected {node.kind}, received {type_name(value)}",
            expected=expected,
            received=summarize_value(value, self.value_limit),
        ))

    def _check_string(self, node: StringConstraint, value: Any, path: tuple[PathElement, ...],
                      collector: ViolationCollector) -> Any:
        if not isinstance(value, str):
            self._type_mismatch(node, value, path, collector)
            return value

        received = summarize_value(value, self.value_limit)
        if len(value) < node.min_length:
            collector.add(Violation(
                path=path,
                code="STR-001",
                message=f"must be at least {node.min_length} characters long",
                expected=f"string with at least {node.min_length} characters",
                received=received,
            ))
        if node.max_length is not None and len(value) > node.max_length:
            collector.add(Violation(
                path=path,
                code="STR-002",
                message=f"must be at most {node.max_length} characters long",
                expected=f"string with at most {node.max_length} characters",
                received=received,
            ))
        if node.pattern is not None and re.search(node.pattern, value) is None:
            collector.add(Violation(
                path=path,
                code="STR-003",
                message=f"must match the pattern {node.pattern}",
                expected=f"string matching {node.pattern}",
                received=received,
            ))
        return value

    def _check_number(self, node: NumberConstraint, value: Any, path: tuple[PathElement, ...],
                      collector: ViolationCollector) -> Any:
        if not is_number(value):
            self._type_mismatch(node, value, path, collector)
            return value

        received = summarize_value(value, self.value_limit)
        if node.minimum is not None and value < node.minimum:
            collector.add(Violation(
                path=path,
                code="NUM-001",
                message=f"must be greater than or equal to {format_number(node.minimum)}",
                expected=f"number >= {format_number(node.minimum)}",
                received=received,
            ))
        if node.maximum is not None and value > node.maximum:
            collector.add(Violation(
                path=path,
                code="NUM-002",
                message=f"must be less than or equal to {format_number(node.maximum)}",
                expected=f"number <= {format_number(node.maximum)}",
                received=received,
            ))
        if node.integer and not (isinstance(value, int) or value.is_integer()):
            collector.add(Violation(
                path=path,
                code="NUM-003",
                message="must be an integer",
                expected="integer",
                received=received,
            ))
        return value

    def _check_boolean(self, node: BooleanConstraint, value: Any, path: tuple[PathElement, ...],
                       collector: ViolationCollector) -> Any:
        if not isinstance(value, bool):
            self._type_mismatch(node, value, path, collector)
        return value

    def _check_enum(self, node: EnumConstraint, value: Any, path: tuple[PathElement, ...],
                    collector: ViolationCollector) -> Any:
        if isinstance(value, str) and value in node.values:
            return value
        collector.add(Violation(
            path=path,
            code="ENM-001",
            category="constraint" if isinstance(value, str) else "type",
            message="must be one of: " + ", ".join(node.values),
            expected=describe(node),
            received=summarize_value(value, self.value_limit),
            valid_options=node.values,
        ))
        return value
