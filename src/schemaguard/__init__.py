"""Schema Guard - Exhaustive validation and validated dispatch for generated structured data."""

__version__ = "0.1.0"

from schemaguard.core.validator import SchemaValidator
from schemaguard.core.errors import Invalid, Valid, Violation
from schemaguard.core.dispatch import Dispatcher
from schemaguard.core.registry import RegistryBuilder
from schemaguard.core.decision import DecisionTable
from schemaguard.core.pipeline import ActionPipeline
from schemaguard.config.settings import SchemaGuardConfig

__all__ = [
    "SchemaValidator",
    "Valid",
    "Invalid",
    "Violation",
    "Dispatcher",
    "RegistryBuilder",
    "DecisionTable",
    "ActionPipeline",
    "SchemaGuardConfig",
]
