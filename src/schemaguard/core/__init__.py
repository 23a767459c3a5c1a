"""Core validation and dispatch components."""

from schemaguard.core.errors import (
    DecodeFailure,
    Invalid,
    RegistrationError,
    SchemaDefinitionError,
    Valid,
    ValidationResult,
    Violation,
)
from schemaguard.core.validator import SchemaValidator, validate, validate_json
from schemaguard.core.formatter import build_feedback, format_violations
from schemaguard.core.json_schema import to_json_schema
from schemaguard.core.registry import Operation, OperationRegistry, RegistryBuilder, build_registry
from schemaguard.core.dispatch import (
    ArgumentInvalid,
    Dispatched,
    DispatchResult,
    Dispatcher,
    ExecutionFailed,
    UnknownOperation,
)
from schemaguard.core.decision import Case, DecisionTable, OperationSelection
from schemaguard.core.pipeline import ActionPipeline, PipelineOutcome

__all__ = [
    "SchemaValidator",
    "validate",
    "validate_json",
    "ValidationResult",
    "Valid",
    "Invalid",
    "DecodeFailure",
    "Violation",
    "SchemaDefinitionError",
    "RegistrationError",
    "format_violations",
    "build_feedback",
    "to_json_schema",
    "Operation",
    "OperationRegistry",
    "RegistryBuilder",
    "build_registry",
    "Dispatcher",
    "DispatchResult",
    "Dispatched",
    "UnknownOperation",
    "ArgumentInvalid",
    "ExecutionFailed",
    "Case",
    "DecisionTable",
    "OperationSelection",
    "ActionPipeline",
    "PipelineOutcome",
]
