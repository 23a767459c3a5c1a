"""Decision rules: validated payload -> operation selection.

A DecisionTable is a finite map from the value of one categorical field to
an operation name and an argument builder. It is pure and total: a missing
or unknown driver value always falls through to the explicit default.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field as dataclass_field
from types import MappingProxyType
from typing import Any

from schemaguard.core.constraints import EnumConstraint
from schemaguard.core.errors import PathElement, SchemaDefinitionError, format_path

logger = logging.getLogger(__name__)

ArgumentBuilder = Callable[[Mapping[str, Any]], dict[str, Any]]

_ABSENT = object()


@dataclass(frozen=True)
class Case:
    """Operation to select and how to build its arguments from the payload"""

    operation: str
    build_arguments: ArgumentBuilder


@dataclass(frozen=True)
class OperationSelection:
    operation: str
    arguments: dict[str, Any]
    matched: str | None = None  # Driver value that matched, None for the default branch

    @property
    def is_default(self) -> bool:
        return self.matched is None

    def to_dict(self) -> dict:
        return {"operation": self.operation, "arguments": self.arguments, "matched": self.matched}


def _lookup(payload: Any, path: tuple[PathElement, ...]) -> Any:
    current = payload
    for element in path:
        if isinstance(element, int):
            if not isinstance(current, (list, tuple)) or not -len(current) <= element < len(current):
                return _ABSENT
            current = current[element]
        else:
            if not isinstance(current, Mapping) or element not in current:
                return _ABSENT
            current = current[element]
    return current


@dataclass(frozen=True)
class DecisionTable:
    driver: tuple[PathElement, ...]
    cases: Mapping[str, Case]
    default: Case
    name: str = ""
    _frozen_cases: Mapping[str, Case] = dataclass_field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if isinstance(self.driver, str):
            object.__setattr__(self, "driver", (self.driver,))
        if not self.driver:
            raise SchemaDefinitionError("Decision table needs a driver field path")
        if not isinstance(self.default, Case):
            raise SchemaDefinitionError("Decision table needs an explicit default case")
        for key, case in self.cases.items():
            if not isinstance(key, str) or not isinstance(case, Case):
                raise SchemaDefinitionError(f"Invalid decision case {key!r}: {case!r}")
        object.__setattr__(self, "_frozen_cases", MappingProxyType(dict(self.cases)))

    def case_for(self, payload: Mapping[str, Any]) -> tuple[Case, str | None]:
        """The case for a payload and the driver value it matched (None for the default)"""
        value = _lookup(payload, self.driver)
        case = self._frozen_cases.get(value) if isinstance(value, str) else None

        if case is None:
            logger.info(
                "No decision case for %s=%r, using default %s",
                format_path(self.driver), None if value is _ABSENT else value, self.default.operation,
            )
            return self.default, None
        return case, value

    def select(self, payload: Mapping[str, Any]) -> OperationSelection:
        """Pick the operation for a validated payload.

        Never raises for out-of-domain values: they take the default branch.
        """
        case, matched = self.case_for(payload)
        return OperationSelection(case.operation, case.build_arguments(payload), matched=matched)

    def missing_cases(self, domain: EnumConstraint) -> list[str]:
        """Enum values that have no explicit case and would take the default"""
        return [v for v in domain.values if v not in self._frozen_cases]

    def operations(self) -> set[str]:
        """Every operation this table can select, default included"""
        return {c.operation for c in self._frozen_cases.values()} | {self.default.operation}
