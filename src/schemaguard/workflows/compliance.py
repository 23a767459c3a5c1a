"""Compliance review workflow.

A producer reviews a document and returns a ComplianceReview. The review's
preliminary finding selects either a database status update or a
notification to the compliance team.
"""

import logging

from schemaguard.config.settings import SchemaGuardConfig
from schemaguard.core.constraints import ObjectConstraint, array, integer, number, obj, optional, string
from schemaguard.core.decision import Case, DecisionTable
from schemaguard.core.dispatch import Dispatcher
from schemaguard.core.pipeline import ActionPipeline
from schemaguard.core.registry import Operation, OperationRegistry, build_registry
from schemaguard.workflows.store import RecordStore

logger = logging.getLogger(__name__)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
REVIEWER = "compliance-agent-v1"
DEFAULT_RECIPIENT = "compliance-team@example.com"


def compliance_review_schema(config: SchemaGuardConfig | None = None) -> ObjectConstraint:
    config = config or SchemaGuardConfig.from_dict()
    risk_min, risk_max = config.score_range("risk_score")

    reasoning_step = obj({
        "step_number": integer(minimum=1, description="Sequential step number"),
        "focus_area": string(min_length=1, description="Aspect of the document examined in this step"),
        "intermediate_conclusion": string(min_length=1, description="Conclusion reached for this aspect"),
    })

    return obj({
        "document_id": string(min_length=1, description="Identifier of the reviewed document"),
        "preliminary_finding": config.enum(
            "preliminary_findings", "Overall finding before detailed reasoning"
        ),
        "reasoning_steps": array(
            reasoning_step,
            min_items=config.limit("min_reasoning_steps"),
            description="Step-by-step examination of the document",
        ),
        "final_risk_score": number(risk_min, risk_max, description="Risk score for the document"),
        "action_required": array(string(), description="Specific follow-up actions"),
    })


def update_database_args(config: SchemaGuardConfig | None = None) -> ObjectConstraint:
    config = config or SchemaGuardConfig.from_dict()
    risk_min, risk_max = config.score_range("risk_score")
    return obj({
        "status": config.enum("review_statuses", "Current status of the review process"),
        "review_id": string(min_length=1, description="Unique identifier for the compliance review"),
        "metadata": optional(obj({
            "risk_score": optional(number(risk_min, risk_max)),
            "reviewer": optional(string()),
            "timestamp": optional(string()),
        }, description="Additional metadata for the update")),
    })


def send_notification_args(config: SchemaGuardConfig | None = None) -> ObjectConstraint:
    config = config or SchemaGuardConfig.from_dict()
    return obj({
        "recipient": string(pattern=EMAIL_PATTERN, description="Email address of the recipient"),
        "priority": config.enum("priority_levels", "Notification priority level"),
        "subject": string(min_length=1, max_length=200, description="Notification subject line"),
        "body": string(min_length=1, description="Notification body content"),
    })


def compliance_operations(store: RecordStore, config: SchemaGuardConfig | None = None) -> list[Operation]:
    """Operations whose executors write to ``store``"""

    def update_database(args: dict) -> bool:
        logger.info("Updating review %s to status %s", args["review_id"], args["status"])
        store.write("reviews", args)
        return True

    def send_notification(args: dict) -> bool:
        logger.info("Sending %s priority notification to %s", args["priority"], args["recipient"])
        store.write("notifications", args)
        return True

    return [
        Operation(
            "update_database",
            update_database_args(config),
            update_database,
            "Update the compliance review status in the database",
        ),
        Operation(
            "send_notification",
            send_notification_args(config),
            send_notification,
            "Send a notification about the compliance review",
        ),
    ]


def build_compliance_registry(store: RecordStore, config: SchemaGuardConfig | None = None) -> OperationRegistry:
    return build_registry(compliance_operations(store, config))


def _status_update(status: str):
    def build(review: dict) -> dict:
        return {
            "status": status,
            "review_id": review["document_id"],
            "metadata": {"risk_score": review["final_risk_score"], "reviewer": REVIEWER},
        }
    return build


def _escalation(recipient: str):
    def build(review: dict) -> dict:
        actions = [a for a in review["action_required"] if a]
        if actions:
            body = "Required actions:\n" + "\n".join(f"- {a}" for a in actions)
        else:
            body = "No actions were listed by the reviewer."
        return {
            "recipient": recipient,
            "priority": "urgent" if review["final_risk_score"] >= 8 else "high",
            "subject": f"Document {review['document_id']} is non-compliant"[:200],
            "body": body,
        }
    return build


def compliance_decision(recipient: str = DEFAULT_RECIPIENT) -> DecisionTable:
    """Decision table on ``preliminary_finding``"""
    return DecisionTable(
        driver=("preliminary_finding",),
        cases={
            "compliant": Case("update_database", _status_update("completed")),
            "needs_revision": Case("update_database", _status_update("pending")),
            "non_compliant": Case("send_notification", _escalation(recipient)),
        },
        default=Case("update_database", _status_update("failed")),
        name="compliance",
    )


def compliance_pipeline(store: RecordStore, config: SchemaGuardConfig | None = None,
                        recipient: str = DEFAULT_RECIPIENT) -> ActionPipeline:
    config = config or SchemaGuardConfig.from_dict()
    return ActionPipeline(
        compliance_review_schema(config),
        compliance_decision(recipient),
        Dispatcher(build_compliance_registry(store, config)),
        max_value_length=config.max_value_length,
    )
