"""Validated dispatch of named operations.

The dispatcher looks an operation up in a registry, validates the raw
arguments against that operation's own schema, and calls the executor only
with the validated, narrowed arguments. Every outcome is returned as a
typed result; nothing is raised to the caller.
"""

import inspect
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from schemaguard.core.constraints import obj, string
from schemaguard.core.errors import DecodeFailure, Invalid, Violation, summarize_value
from schemaguard.core.registry import Operation, OperationRegistry
from schemaguard.core.validator import SchemaValidator, decode_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dispatched:
    operation: str
    executor_succeeded: bool

    kind = "dispatched"

    def to_dict(self) -> dict:
        return {"kind": self.kind, "operation": self.operation, "success": self.executor_succeeded}


@dataclass(frozen=True)
class UnknownOperation:
    name: str

    kind = "unknown_operation"

    def to_dict(self) -> dict:
        return {"kind": self.kind, "operation": self.name, "message": f"Unknown operation: {self.name}"}


@dataclass(frozen=True)
class ArgumentInvalid:
    operation: str
    violations: tuple[Violation, ...]

    kind = "argument_invalid"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "operation": self.operation,
            "errors": [v.to_dict() for v in self.violations],
        }


@dataclass(frozen=True)
class ExecutionFailed:
    operation: str
    message: str

    kind = "execution_failed"

    def to_dict(self) -> dict:
        return {"kind": self.kind, "operation": self.operation, "message": self.message}


DispatchResult = Union[Dispatched, UnknownOperation, ArgumentInvalid, ExecutionFailed]

# Envelope of a function call emitted by a generative model
FUNCTION_CALL = obj({
    "function_name": string(min_length=1, description="Name of the operation to invoke"),
    "arguments": obj({}, description="Arguments for the operation"),
})


def describe_exception(error: Exception) -> str:
    text = str(error)
    return f"{type(error).__name__}: {text}" if text else type(error).__name__


class Dispatcher:
    """Dispatches operations from an explicitly supplied registry"""

    def __init__(self, registry: OperationRegistry, validator: SchemaValidator | None = None):
        self.registry = registry
        self.validator = validator or SchemaValidator()

    def _prepare(self, name: str, raw_arguments: Any) -> tuple[Operation | None, Any, DispatchResult | None]:
        """Steps 1 and 2: lookup and argument validation"""
        operation = self.registry.get(name) if isinstance(name, str) else None
        if operation is None:
            logger.warning("Dispatch requested for unknown operation %r", name)
            return None, None, UnknownOperation(name=str(name))

        result = self.validator.validate(operation.argument_schema, raw_arguments)
        if isinstance(result, Invalid):
            logger.warning(
                "Rejected arguments for %s: %d violation(s)", name, len(result.violations)
            )
            return operation, None, ArgumentInvalid(operation=name, violations=result.violations)
        return operation, result.value, None

    def _finish(self, name: str, outcome: Any) -> DispatchResult:
        if not isinstance(outcome, bool):
            logger.error("Executor for %s returned %s, expected bool", name, type(outcome).__name__)
            return ExecutionFailed(
                operation=name,
                message=f"Executor returned {type(outcome).__name__}, expected bool",
            )
        logger.info("Dispatched %s (success=%s)", name, outcome)
        return Dispatched(operation=name, executor_succeeded=outcome)

    def dispatch(self, name: str, raw_arguments: Any) -> DispatchResult:
        """Validate arguments for ``name`` and run its executor synchronously"""
        operation, arguments, rejection = self._prepare(name, raw_arguments)
        if rejection is not None:
            return rejection

        try:
            outcome = operation.executor(arguments)
        except Exception as e:
            logger.error("Executor for %s failed", name, exc_info=True)
            return ExecutionFailed(operation=name, message=describe_exception(e))

        if inspect.isawaitable(outcome):
            if inspect.iscoroutine(outcome):
                outcome.close()
            logger.error("Executor for %s is asynchronous; use dispatch_async", name)
            return ExecutionFailed(
                operation=name,
                message="Executor is asynchronous and must be run with dispatch_async",
            )
        return self._finish(name, outcome)

    async def dispatch_async(self, name: str, raw_arguments: Any) -> DispatchResult:
        """Like dispatch, awaiting executors that return awaitables"""
        operation, arguments, rejection = self._prepare(name, raw_arguments)
        if rejection is not None:
            return rejection

        try:
            outcome = operation.executor(arguments)
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except Exception as e:
            logger.error("Executor for %s failed", name, exc_info=True)
            return ExecutionFailed(operation=name, message=describe_exception(e))
        return self._finish(name, outcome)

    def dispatch_call(self, call: Any) -> DispatchResult:
        """Dispatch a ``{"function_name": ..., "arguments": ...}`` envelope.

        Arguments given as JSON text are decoded first.
        """
        name = call.get("function_name") if isinstance(call, Mapping) else None
        operation = name if isinstance(name, str) else ""

        if isinstance(call, Mapping) and isinstance(call.get("arguments"), (str, bytes)):
            decoded = decode_json(call["arguments"])
            if isinstance(decoded, DecodeFailure):
                logger.warning("Arguments for %r are not valid JSON: %s", name, decoded.message)
                return ArgumentInvalid(operation=operation, violations=(self._decode_violation(decoded),))
            call = {**call, "arguments": decoded.value}

        envelope = self.validator.validate(FUNCTION_CALL, call)
        if isinstance(envelope, Invalid):
            return ArgumentInvalid(operation=operation, violations=envelope.violations)
        return self.dispatch(call["function_name"], call["arguments"])

    def _decode_violation(self, failure: DecodeFailure) -> Violation:
        message = failure.message
        if failure.line is not None:
            message += f" at line {failure.line}, column {failure.column}"
        return Violation(
            path=("arguments",),
            code="DEC-001",
            category="structure",
            message=message,
            expected="JSON object text",
            received=summarize_value(failure.raw_text, self.validator.value_limit),
        )
