"""Structural checks for the Schema Guard validator: objects and arrays."""

from collections.abc import Mapping
from typing import Any

from schemaguard.core.constraints import ArrayConstraint, ObjectConstraint, describe
from schemaguard.core.errors import PathElement, Violation, ViolationCollector, summarize_value


class CompositeChecksMixin:
    """Mixin providing object and array checks.

    Children are visited in declaration order (objects) and index order
    (arrays), so violations come out in a stable pre-order.
    """

    value_limit: int

    def _check_object(self, node: ObjectConstraint, value: Any, path: tuple[PathElement, ...],
                      collector: ViolationCollector) -> Any:
        if not isinstance(value, Mapping):
            self._type_mismatch(node, value, path, collector)
            return value

        narrowed = {}
        for field in node.fields:
            field_path = path + (field.name,)
            if field.name not in value:
                if field.required:
                    collector.add(Violation(
                        path=field_path,
                        code="OBJ-001",
                        category="structure",
                        message="is required but missing",
                        expected=describe(field.node),
                        received="missing",
                    ))
                continue
            narrowed[field.name] = self._check(field.node, value[field.name], field_path, collector)

        if node.closed:
            declared = set(node.field_names())
            for key in value:
                if key in declared:
                    continue
                collector.add(Violation(
                    path=path + (str(key),),
                    code="OBJ-002",
                    category="structure",
                    message="is not an allowed field",
                    expected="one of the declared fields: " + ", ".join(node.field_names()),
                    received=summarize_value(value[key], self.value_limit),
                    valid_options=tuple(node.field_names()),
                ))
        # Undeclared fields of open objects are ignored and left out of the output
        return narrowed

    def _check_array(self, node: ArrayConstraint, value: Any, path: tuple[PathElement, ...],
                     collector: ViolationCollector) -> Any:
        if not isinstance(value, (list, tuple)):
            self._type_mismatch(node, value, path, collector)
            return value

        if len(value) < node.min_items:
            collector.add(Violation(
                path=path,
                code="ARR-001",
                category="structure",
                message=f"must contain at least {node.min_items} items",
                expected=describe(node),
                received=f"{len(value)} items",
            ))
        if node.max_items is not None and len(value) > node.max_items:
            collector.add(Violation(
                path=path,
                code="ARR-002",
                category="structure",
                message=f"must contain at most {node.max_items} items",
                expected=describe(node),
                received=f"{len(value)} items",
            ))

        return [
            self._check(node.items, item, path + (index,), collector)
            for index, item in enumerate(value)
        ]
