"""Error types and validation results for the Schema Guard validator."""

import json
from dataclasses import dataclass, field as dataclass_field
from typing import Any, Literal, Union


# Error code prefixes
# TYP-xxx: Type mismatches
# STR-xxx: String bound violations
# NUM-xxx: Number bound violations
# ENM-xxx: Enumeration violations
# OBJ-xxx: Object structure violations
# ARR-xxx: Array cardinality violations
# DEC-xxx: Embedded JSON text that does not decode

PathElement = Union[str, int]

DEFAULT_VALUE_LIMIT = 80


class SchemaDefinitionError(ValueError):
    """Raised when a constraint model is built with impossible parameters.

    This is a programmer error detected at build time, never a data error.
    """


class RegistrationError(ValueError):
    """Raised when an operation registration is malformed or duplicated"""


def format_path(path: tuple[PathElement, ...]) -> str:
    """Render a path as dotted/bracketed text: ``steps[1].evidence``"""
    if not path:
        return "root"
    parts: list[str] = []
    for element in path:
        if isinstance(element, int):
            parts.append(f"[{element}]")
        elif parts:
            parts.append(f".{element}")
        else:
            parts.append(element)
    return "".join(parts)


def summarize_value(value: Any, limit: int = DEFAULT_VALUE_LIMIT) -> str:
    """Render an offending value compactly, truncating past ``limit`` characters"""
    try:
        text = json.dumps(value, ensure_ascii=False, default=repr)
    except (TypeError, ValueError, RecursionError):
        # Non-string keys, circular or very deep structures, huge integers
        try:
            text = repr(value)
        except (ValueError, RecursionError):
            text = f"<{type(value).__name__}>"
    if limit > 0 and len(text) > limit:
        return text[: max(limit - 3, 0)] + "..."
    return text


@dataclass(frozen=True)
class Violation:
    """One path-qualified failure of a value against a constraint"""

    # Location info
    path: tuple[PathElement, ...]

    # Error classification
    code: str = ""  # Systematic code: "TYP-001", "NUM-002"
    category: Literal["type", "constraint", "structure"] = "constraint"
    message: str = ""  # Human-readable description of the broken rule

    # Machine-processable info
    expected: str = ""  # Constraint summary: "number <= 100"
    received: str = ""  # Value summary: "150"
    valid_options: tuple[str, ...] = ()

    @property
    def path_str(self) -> str:
        return format_path(self.path)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {
            "path": self.path_str,
            "segments": list(self.path),
            "code": self.code,
            "category": self.category,
            "message": self.message,
            "expected": self.expected,
            "received": self.received,
            "valid_options": list(self.valid_options),
        }


@dataclass(frozen=True)
class Valid:
    """Successful validation carrying the value narrowed to the declared shape"""

    value: Any

    @property
    def valid(self) -> bool:
        return True

    @property
    def violations(self) -> tuple[Violation, ...]:
        return ()

    def to_dict(self) -> dict:
        return {"valid": True, "value": self.value}


@dataclass(frozen=True)
class Invalid:
    """Failed validation carrying every violation found in one pass"""

    violations: tuple[Violation, ...]
    raw_input: Any = None

    def __post_init__(self):
        if not self.violations:
            raise ValueError("Invalid requires at least one violation")

    @property
    def valid(self) -> bool:
        return False

    @property
    def error_count(self) -> int:
        return len(self.violations)

    def paths(self) -> list[str]:
        """Rendered paths of all violations, in report order"""
        return [v.path_str for v in self.violations]

    def to_dict(self) -> dict:
        return {
            "valid": False,
            "errors": [v.to_dict() for v in self.violations],
            "error_count": len(self.violations),
        }


@dataclass(frozen=True)
class DecodeFailure:
    """Raw input could not be parsed into a structured value at all"""

    message: str
    raw_text: str = ""
    line: int | None = None
    column: int | None = None

    @property
    def valid(self) -> bool:
        return False

    @property
    def violations(self) -> tuple[Violation, ...]:
        return ()

    def to_dict(self) -> dict:
        return {
            "valid": False,
            "decode_error": self.message,
            "line": self.line,
            "column": self.column,
        }


ValidationResult = Union[Valid, Invalid]


@dataclass
class ViolationCollector:
    """Accumulates violations during one validation pass"""

    violations: list[Violation] = dataclass_field(default_factory=list)

    def add(self, violation: Violation) -> None:
        self.violations.append(violation)

    def __len__(self) -> int:
        return len(self.violations)
