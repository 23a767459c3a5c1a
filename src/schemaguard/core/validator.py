"""Schema Guard Validator

Checks untyped values (typically decoded JSON from a generative model)
against a constraint model. Validation is exhaustive: every broken rule in
the tree is reported in one pass, never just the first, so the full list
can be fed back to the producer for a corrected attempt.
"""

import json
import logging
from typing import Any

from schemaguard.core.checks import CompositeChecksMixin, PrimitiveChecksMixin
from schemaguard.core.constraints import (
    ArrayConstraint,
    BooleanConstraint,
    Constraint,
    EnumConstraint,
    NumberConstraint,
    ObjectConstraint,
    OptionalConstraint,
    StringConstraint,
)
from schemaguard.core.errors import (
    DEFAULT_VALUE_LIMIT,
    DecodeFailure,
    Invalid,
    PathElement,
    SchemaDefinitionError,
    Valid,
    ValidationResult,
    ViolationCollector,
)

logger = logging.getLogger(__name__)


# Node type -> check method
NODE_CHECKS = {
    StringConstraint: "_check_string",
    NumberConstraint: "_check_number",
    BooleanConstraint: "_check_boolean",
    EnumConstraint: "_check_enum",
    ObjectConstraint: "_check_object",
    ArrayConstraint: "_check_array",
}


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


class SchemaValidator(PrimitiveChecksMixin, CompositeChecksMixin):
    """Validates values against constraint models.

    The validator holds no per-call state and may be shared between
    threads; each call builds its own collector.
    """

    def __init__(self, value_limit: int = DEFAULT_VALUE_LIMIT):
        self.value_limit = value_limit

    def validate(self, node: Constraint, value: Any) -> ValidationResult:
        """Validate ``value`` against ``node``.

        Returns Valid with the value narrowed to the declared shape, or
        Invalid with every violation in pre-order of the model.
        """
        collector = ViolationCollector()
        narrowed = self._check(node, value, (), collector)

        if collector.violations:
            logger.debug("Validation failed with %d violation(s)", len(collector))
            return Invalid(violations=tuple(collector.violations), raw_input=value)
        return Valid(value=narrowed)

    def validate_json(self, node: Constraint, raw: str | bytes) -> ValidationResult | DecodeFailure:
        """Decode JSON text, then validate it.

        Text that does not decode yields DecodeFailure and structural
        checking never starts.
        """
        decoded = decode_json(raw)
        if isinstance(decoded, DecodeFailure):
            logger.debug("Payload decode failed: %s", decoded.message)
            return decoded
        return self.validate(node, decoded.value)

    def _check(self, node: Constraint, value: Any, path: tuple[PathElement, ...],
               collector: ViolationCollector) -> Any:
        if isinstance(node, OptionalConstraint):
            # Reached only when the value is present; absence is handled by the parent
            return self._check(node.inner, value, path, collector)

        method = NODE_CHECKS.get(type(node))
        if method is None:
            raise SchemaDefinitionError(f"Unknown constraint node: {node!r}")
        return getattr(self, method)(node, value, path, collector)


def decode_json(raw: str | bytes) -> Valid | DecodeFailure:
    """Parse JSON text into a value. NaN and Infinity literals are rejected."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as e:
            return DecodeFailure(message=f"Payload is not valid UTF-8: {e}", raw_text=repr(raw))
    if not isinstance(raw, str):
        return DecodeFailure(message=f"Expected JSON text, got {type(raw).__name__}")

    try:
        return Valid(value=json.loads(raw, parse_constant=_reject_constant))
    except json.JSONDecodeError as e:
        return DecodeFailure(
            message=f"Failed to parse JSON: {e.msg}",
            raw_text=raw,
            line=e.lineno,
            column=e.colno,
        )
    except RecursionError:
        return DecodeFailure(message="Failed to parse JSON: nesting too deep", raw_text=raw)
    except ValueError as e:
        return DecodeFailure(message=f"Failed to parse JSON: {e}", raw_text=raw)


_DEFAULT_VALIDATOR = SchemaValidator()


def validate(node: Constraint, value: Any) -> ValidationResult:
    """Validate with a shared default validator"""
    return _DEFAULT_VALIDATOR.validate(node, value)


def validate_json(node: Constraint, raw: str | bytes) -> ValidationResult | DecodeFailure:
    """Decode and validate with a shared default validator"""
    return _DEFAULT_VALIDATOR.validate_json(node, raw)
