"""Constraint check mixins for the Schema Guard validator."""

from schemaguard.core.checks.primitives import PrimitiveChecksMixin, is_number, type_name
from schemaguard.core.checks.composites import CompositeChecksMixin

__all__ = [
    "PrimitiveChecksMixin",
    "CompositeChecksMixin",
    "is_number",
    "type_name",
]
