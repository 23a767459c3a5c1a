"""
Registry and Dispatcher Test Suite

Tests for operation registration and validated dispatch:
- Registry construction, duplicate rejection and immutability
- Unknown operations never reach an executor
- Invalid arguments never reach an executor
- Executor failures become typed results
- Function-call envelopes
"""

import asyncio

import pytest

from schemaguard.core.constraints import number, obj, optional, string
from schemaguard.core.dispatch import (
    ArgumentInvalid,
    Dispatched,
    Dispatcher,
    ExecutionFailed,
    UnknownOperation,
)
from schemaguard.core.errors import RegistrationError
from schemaguard.core.registry import Operation, RegistryBuilder, build_registry


class Recorder:
    """Executor double that records every call"""

    def __init__(self, result=True):
        self.calls = []
        self.result = result

    def __call__(self, args):
        self.calls.append(args)
        return self.result


@pytest.fixture
def update_args():
    return obj({
        "status": string(min_length=1),
        "review_id": string(min_length=1),
        "metadata": optional(obj({"risk_score": optional(number(1, 10))})),
    })


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def dispatcher(update_args, recorder):
    registry = (
        RegistryBuilder()
        .register("update_database", update_args, recorder, "Update a review")
        .build()
    )
    return Dispatcher(registry)


@pytest.fixture
def async_calls():
    return []


@pytest.fixture
def async_dispatcher(update_args, async_calls):
    async def executor(args):
        async_calls.append(args)
        return True

    return Dispatcher(RegistryBuilder().register("op", update_args, executor).build())


class TestRegistry:
    """Registry construction"""

    def test_register_and_lookup(self, update_args, recorder):
        registry = RegistryBuilder().register("op", update_args, recorder).build()
        assert "op" in registry
        assert registry["op"].executor is recorder
        assert registry.get("missing") is None
        assert len(registry) == 1

    def test_names_in_registration_order(self, update_args, recorder):
        registry = build_registry([
            Operation("b", update_args, recorder),
            Operation("a", update_args, recorder),
        ])
        assert registry.names() == ["b", "a"]
        assert list(registry) == ["b", "a"]

    def test_duplicate_name_rejected(self, update_args, recorder):
        """Registering a name twice fails at build time"""
        builder = RegistryBuilder().register("op", update_args, recorder)
        with pytest.raises(RegistrationError, match="already registered"):
            builder.register("op", update_args, recorder)

    def test_duplicate_in_build_registry(self, update_args, recorder):
        with pytest.raises(RegistrationError):
            build_registry([Operation("op", update_args, recorder)] * 2)

    def test_non_object_schema_rejected(self, recorder):
        """Argument schemas must be objects"""
        with pytest.raises(RegistrationError, match="object argument schema"):
            RegistryBuilder().register("op", string(), recorder)

    def test_non_callable_executor_rejected(self, update_args):
        with pytest.raises(RegistrationError, match="not callable"):
            RegistryBuilder().register("op", update_args, "not a function")

    def test_empty_name_rejected(self, update_args, recorder):
        with pytest.raises(RegistrationError):
            RegistryBuilder().register("", update_args, recorder)

    def test_no_registration_after_build(self, update_args, recorder):
        """A built registry is frozen"""
        builder = RegistryBuilder()
        builder.build()
        with pytest.raises(RegistrationError, match="already been built"):
            builder.register("op", update_args, recorder)

    def test_registry_is_read_only(self, update_args, recorder):
        registry = RegistryBuilder().register("op", update_args, recorder).build()
        with pytest.raises(TypeError):
            registry["other"] = registry["op"]

    def test_tool_definitions(self, update_args, recorder):
        """Each operation exports a function-calling tool entry"""
        registry = RegistryBuilder().register("op", update_args, recorder, "Does things").build()
        tool = registry.tool_definitions()[0]
        assert tool["type"] == "function"
        assert tool["function"]["name"] == "op"
        assert tool["function"]["description"] == "Does things"
        parameters = tool["function"]["parameters"]
        assert "$schema" not in parameters
        assert parameters["type"] == "object"
        assert parameters["required"] == ["status", "review_id"]


class TestDispatch:
    """Validated dispatch"""

    def test_unknown_operation(self, dispatcher, recorder):
        """Unknown names never invoke an executor"""
        result = dispatcher.dispatch("doesNotExist", {"status": "completed"})
        assert result == UnknownOperation(name="doesNotExist")
        assert result.kind == "unknown_operation"
        assert recorder.calls == []

    def test_invalid_arguments(self, dispatcher, recorder):
        """All argument violations are reported and the executor is not called"""
        result = dispatcher.dispatch(
            "update_database", {"status": "", "review_id": "", "metadata": {"risk_score": 20}}
        )
        assert isinstance(result, ArgumentInvalid)
        assert result.operation == "update_database"
        assert [v.path_str for v in result.violations] == ["status", "review_id", "metadata.risk_score"]
        assert recorder.calls == []

    def test_successful_dispatch(self, dispatcher, recorder):
        """Valid arguments invoke the executor exactly once"""
        result = dispatcher.dispatch("update_database", {"status": "completed", "review_id": "r1"})
        assert result == Dispatched(operation="update_database", executor_succeeded=True)
        assert recorder.calls == [{"status": "completed", "review_id": "r1"}]

    def test_executor_sees_narrowed_arguments(self, dispatcher, recorder):
        """Undeclared argument keys never reach the executor"""
        dispatcher.dispatch("update_database", {"status": "ok", "review_id": "r1", "drop_table": True})
        assert recorder.calls == [{"status": "ok", "review_id": "r1"}]

    def test_executor_reports_failure(self, update_args):
        failing = Recorder(result=False)
        dispatcher = Dispatcher(RegistryBuilder().register("op", update_args, failing).build())
        result = dispatcher.dispatch("op", {"status": "x", "review_id": "y"})
        assert result == Dispatched(operation="op", executor_succeeded=False)

    def test_executor_exception(self, update_args):
        """Exceptions become ExecutionFailed"""
        def explode(args):
            raise RuntimeError("boom")

        dispatcher = Dispatcher(RegistryBuilder().register("op", update_args, explode).build())
        result = dispatcher.dispatch("op", {"status": "x", "review_id": "y"})
        assert result == ExecutionFailed(operation="op", message="RuntimeError: boom")

    def test_executor_returning_non_bool(self, update_args):
        dispatcher = Dispatcher(RegistryBuilder().register("op", update_args, lambda args: "done").build())
        result = dispatcher.dispatch("op", {"status": "x", "review_id": "y"})
        assert isinstance(result, ExecutionFailed)
        assert "expected bool" in result.message

    def test_non_string_name(self, dispatcher):
        assert isinstance(dispatcher.dispatch(None, {}), UnknownOperation)

    def test_result_to_dict(self, dispatcher):
        result = dispatcher.dispatch("update_database", {"status": "", "review_id": "r"})
        data = result.to_dict()
        assert data["kind"] == "argument_invalid"
        assert data["errors"][0]["path"] == "status"

    def test_registries_are_independent(self, update_args):
        """Dispatchers only see the registry they were given"""
        first = Dispatcher(RegistryBuilder().register("a", update_args, Recorder()).build())
        second = Dispatcher(RegistryBuilder().register("b", update_args, Recorder()).build())
        assert isinstance(first.dispatch("b", {"status": "x", "review_id": "y"}), UnknownOperation)
        assert isinstance(second.dispatch("b", {"status": "x", "review_id": "y"}), Dispatched)


class TestAsyncDispatch:
    """Asynchronous executors"""

    def test_dispatch_async_awaits_executor(self, async_dispatcher, async_calls):
        result = asyncio.run(async_dispatcher.dispatch_async("op", {"status": "x", "review_id": "y"}))
        assert result == Dispatched(operation="op", executor_succeeded=True)
        assert len(async_calls) == 1

    def test_sync_dispatch_refuses_async_executor(self, async_dispatcher, async_calls):
        """Sync dispatch cannot run a coroutine executor"""
        result = async_dispatcher.dispatch("op", {"status": "x", "review_id": "y"})
        assert isinstance(result, ExecutionFailed)
        assert "dispatch_async" in result.message
        assert async_calls == []

    def test_dispatch_async_with_sync_executor(self, dispatcher, recorder):
        result = asyncio.run(dispatcher.dispatch_async("update_database", {"status": "x", "review_id": "y"}))
        assert result.executor_succeeded
        assert len(recorder.calls) == 1

    def test_dispatch_async_validates_first(self, async_dispatcher, async_calls):
        result = asyncio.run(async_dispatcher.dispatch_async("op", {}))
        assert isinstance(result, ArgumentInvalid)
        assert async_calls == []


class TestDispatchCall:
    """Function-call envelopes"""

    def test_call_with_object_arguments(self, dispatcher, recorder):
        result = dispatcher.dispatch_call({
            "function_name": "update_database",
            "arguments": {"status": "completed", "review_id": "r1"},
        })
        assert isinstance(result, Dispatched)
        assert recorder.calls == [{"status": "completed", "review_id": "r1"}]

    def test_call_with_json_text_arguments(self, dispatcher, recorder):
        """Arguments encoded as JSON text are decoded"""
        result = dispatcher.dispatch_call({
            "function_name": "update_database",
            "arguments": '{"status": "completed", "review_id": "r1"}',
        })
        assert isinstance(result, Dispatched)
        assert len(recorder.calls) == 1

    def test_malformed_envelope(self, dispatcher, recorder):
        result = dispatcher.dispatch_call({"arguments": {}})
        assert isinstance(result, ArgumentInvalid)
        assert result.operation == ""
        assert [v.path_str for v in result.violations] == ["function_name"]
        assert recorder.calls == []

    def test_undecodable_arguments(self, dispatcher, recorder):
        result = dispatcher.dispatch_call({"function_name": "update_database", "arguments": "{oops"})
        assert isinstance(result, ArgumentInvalid)
        assert result.operation == "update_database"
        violation, = result.violations
        assert violation.path_str == "arguments"
        assert violation.code == "DEC-001"
        assert violation.message.startswith("Failed to parse JSON")
        assert "at line 1, column 2" in violation.message
        assert violation.received == '"{oops"'
        assert recorder.calls == []

    def test_unknown_function_name(self, dispatcher):
        result = dispatcher.dispatch_call({"function_name": "nope", "arguments": {}})
        assert result == UnknownOperation(name="nope")
