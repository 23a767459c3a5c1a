"""Reference workflows built on the Schema Guard core.

Each workflow contributes a payload schema, its operations and a decision
table. Registries are built per caller from these pieces.
"""

from schemaguard.workflows.store import RecordStore
from schemaguard.workflows.compliance import (
    build_compliance_registry,
    compliance_decision,
    compliance_pipeline,
    compliance_review_schema,
)
from schemaguard.workflows.screening import (
    build_screening_registry,
    resume_screening_schema,
    screening_decision,
    screening_pipeline,
)

__all__ = [
    "RecordStore",
    "build_compliance_registry",
    "compliance_decision",
    "compliance_pipeline",
    "compliance_review_schema",
    "build_screening_registry",
    "resume_screening_schema",
    "screening_decision",
    "screening_pipeline",
]
