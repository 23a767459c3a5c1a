"""End-to-end flow: decode -> validate -> decide -> dispatch.

The pipeline never retries. When a stage fails it stops and returns the
diagnostic artifact (feedback text) a retry loop would send back to the
producer.
"""

import logging
from dataclasses import dataclass
from typing import Any, Literal

from schemaguard.core.constraints import Constraint
from schemaguard.core.decision import DecisionTable, OperationSelection
from schemaguard.core.dispatch import (
    ArgumentInvalid,
    Dispatched,
    DispatchResult,
    Dispatcher,
    ExecutionFailed,
    describe_exception,
)
from schemaguard.core.errors import DecodeFailure, Invalid, Violation
from schemaguard.core.formatter import build_feedback, describe_decode_failure
from schemaguard.core.validator import decode_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineOutcome:
    stage: Literal["decode", "validate", "dispatch"]
    decode_failure: DecodeFailure | None = None
    violations: tuple[Violation, ...] = ()
    payload: Any = None
    selection: OperationSelection | None = None
    dispatch: DispatchResult | None = None
    feedback: str = ""

    @property
    def success(self) -> bool:
        return isinstance(self.dispatch, Dispatched) and self.dispatch.executor_succeeded

    def to_dict(self) -> dict:
        return {
            "stage": self.stage,
            "success": self.success,
            "decode_error": self.decode_failure.message if self.decode_failure else None,
            "errors": [v.to_dict() for v in self.violations],
            "selection": self.selection.to_dict() if self.selection else None,
            "dispatch": self.dispatch.to_dict() if self.dispatch else None,
            "feedback": self.feedback,
        }


class ActionPipeline:
    """Validates a producer payload and dispatches the operation it selects"""

    def __init__(self, payload_schema: Constraint, decision: DecisionTable, dispatcher: Dispatcher,
                 max_value_length: int = 80):
        self.payload_schema = payload_schema
        self.decision = decision
        self.dispatcher = dispatcher
        self.max_value_length = max_value_length

    def _validate(self, raw: Any) -> PipelineOutcome | tuple[Any, PipelineOutcome | OperationSelection]:
        if isinstance(raw, (str, bytes, bytearray)):
            decoded = decode_json(raw)
            if isinstance(decoded, DecodeFailure):
                return PipelineOutcome(
                    stage="decode",
                    decode_failure=decoded,
                    feedback=describe_decode_failure(decoded, self.max_value_length),
                )
            raw = decoded.value

        result = self.dispatcher.validator.validate(self.payload_schema, raw)
        if isinstance(result, Invalid):
            return PipelineOutcome(
                stage="validate",
                violations=result.violations,
                feedback=build_feedback(result.violations, self.max_value_length),
            )
        return result.value, self._select(result.value)

    def _select(self, payload: Any) -> PipelineOutcome | OperationSelection:
        case, matched = self.decision.case_for(payload)
        try:
            arguments = case.build_arguments(payload)
        except Exception as e:
            logger.error("Argument builder for %s failed", case.operation, exc_info=True)
            return PipelineOutcome(
                stage="dispatch",
                payload=payload,
                dispatch=ExecutionFailed(operation=case.operation, message=describe_exception(e)),
            )
        return OperationSelection(case.operation, arguments, matched=matched)

    def _dispatched(self, payload: Any, selection: OperationSelection,
                    dispatched: DispatchResult) -> PipelineOutcome:
        feedback = ""
        violations: tuple[Violation, ...] = ()
        if isinstance(dispatched, ArgumentInvalid):
            # The decision rule built arguments the operation rejects
            violations = dispatched.violations
            feedback = build_feedback(violations, self.max_value_length)
        logger.info("Pipeline selected %s -> %s", selection.operation, dispatched.kind)
        return PipelineOutcome(
            stage="dispatch",
            violations=violations,
            payload=payload,
            selection=selection,
            dispatch=dispatched,
            feedback=feedback,
        )

    def run(self, raw: Any) -> PipelineOutcome:
        """Run all stages on JSON text or an already-decoded value"""
        validated = self._validate(raw)
        if isinstance(validated, PipelineOutcome):
            return validated
        payload, selection = validated
        if isinstance(selection, PipelineOutcome):
            return selection
        return self._dispatched(
            payload, selection, self.dispatcher.dispatch(selection.operation, selection.arguments)
        )

    async def run_async(self, raw: Any) -> PipelineOutcome:
        """Like run, awaiting asynchronous executors"""
        validated = self._validate(raw)
        if isinstance(validated, PipelineOutcome):
            return validated
        payload, selection = validated
        if isinstance(selection, PipelineOutcome):
            return selection
        dispatched = await self.dispatcher.dispatch_async(selection.operation, selection.arguments)
        return self._dispatched(payload, selection, dispatched)
