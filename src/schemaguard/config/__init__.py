"""Configuration loading for Schema Guard."""

from schemaguard.config.settings import SchemaGuardConfig

__all__ = ["SchemaGuardConfig"]
