"""Operation registry for Schema Guard.

Operations are registered on a RegistryBuilder at startup, then frozen into
an OperationRegistry. The frozen registry is never mutated and can be read
from any number of callers without locking. It is handed to dispatchers
explicitly; there is no process-wide instance.
"""

from collections.abc import Awaitable, Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Union

from schemaguard.core.constraints import ObjectConstraint
from schemaguard.core.errors import RegistrationError
from schemaguard.core.json_schema import to_json_schema

ExecutorResult = Union[bool, Awaitable[bool]]
Executor = Callable[[dict[str, Any]], ExecutorResult]


@dataclass(frozen=True)
class Operation:
    """A named side-effecting operation and the contract for its arguments"""

    name: str
    argument_schema: ObjectConstraint
    executor: Executor
    description: str = ""

    def tool_definition(self) -> dict:
        """Function-calling tool entry with the argument schema as parameters"""
        parameters = to_json_schema(self.argument_schema)
        parameters.pop("$schema", None)
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters,
            },
        }


class OperationRegistry(Mapping):
    """Read-only mapping from operation name to Operation"""

    def __init__(self, operations: Mapping[str, Operation]):
        self._operations = MappingProxyType(dict(operations))

    def __getitem__(self, name: str) -> Operation:
        return self._operations[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def get(self, name: str, default: Operation | None = None) -> Operation | None:
        """Get an operation by name.

        Args:
            name: The operation name to look up
            default: Returned when the name is not registered

        Returns:
            The Operation, or ``default`` if not found
        """
        return self._operations.get(name, default)

    def names(self) -> list[str]:
        """List all registered operation names, in registration order"""
        return list(self._operations.keys())

    def tool_definitions(self) -> list[dict]:
        """Tool list for a function-calling request"""
        return [op.tool_definition() for op in self._operations.values()]


class RegistryBuilder:
    """Collects operation registrations before the registry is frozen"""

    def __init__(self):
        self._operations: dict[str, Operation] = {}
        self._built = False

    def register(self, name: str, argument_schema: ObjectConstraint, executor: Executor,
                 description: str = "") -> "RegistryBuilder":
        """Register an operation; fails on a duplicate name"""
        if self._built:
            raise RegistrationError("Registry has already been built")
        if not isinstance(name, str) or not name:
            raise RegistrationError(f"Operation name must be a non-empty string, got {name!r}")
        if name in self._operations:
            raise RegistrationError(f"Operation '{name}' is already registered")
        if not isinstance(argument_schema, ObjectConstraint):
            raise RegistrationError(
                f"Operation '{name}' needs an object argument schema, "
                f"got {type(argument_schema).__name__}"
            )
        if not callable(executor):
            raise RegistrationError(f"Executor for operation '{name}' is not callable")

        self._operations[name] = Operation(name, argument_schema, executor, description)
        return self

    def add(self, operation: Operation) -> "RegistryBuilder":
        return self.register(
            operation.name, operation.argument_schema, operation.executor, operation.description
        )

    def build(self) -> OperationRegistry:
        self._built = True
        return OperationRegistry(self._operations)


def build_registry(operations: Iterable[Operation]) -> OperationRegistry:
    """Build a frozen registry from operations, rejecting duplicate names"""
    builder = RegistryBuilder()
    for operation in operations:
        builder.add(operation)
    return builder.build()
