"""Constraint model -> JSON Schema export.

One-way and pure: the exported document is what gets sent to the
structured-data producer. It carries no validation semantics of its own;
Schema Guard always validates with its own engine.
"""

from typing import Any

from jsonschema import Draft202012Validator

from schemaguard.core.constraints import (
    ArrayConstraint,
    BooleanConstraint,
    Constraint,
    EnumConstraint,
    NumberConstraint,
    ObjectConstraint,
    OptionalConstraint,
    StringConstraint,
)
from schemaguard.core.errors import SchemaDefinitionError

JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"


def _node_schema(node: Constraint) -> dict[str, Any]:
    if isinstance(node, OptionalConstraint):
        return _node_schema(node.inner)

    schema: dict[str, Any]
    if isinstance(node, StringConstraint):
        schema = {"type": "string"}
        if node.min_length:
            schema["minLength"] = node.min_length
        if node.max_length is not None:
            schema["maxLength"] = node.max_length
        if node.pattern is not None:
            schema["pattern"] = node.pattern
    elif isinstance(node, NumberConstraint):
        schema = {"type": "integer" if node.integer else "number"}
        if node.minimum is not None:
            schema["minimum"] = node.minimum
        if node.maximum is not None:
            schema["maximum"] = node.maximum
    elif isinstance(node, BooleanConstraint):
        schema = {"type": "boolean"}
    elif isinstance(node, EnumConstraint):
        schema = {"type": "string", "enum": list(node.values)}
    elif isinstance(node, ObjectConstraint):
        schema = {
            "type": "object",
            "properties": {f.name: _node_schema(f.node) for f in node.fields},
        }
        required = [f.name for f in node.fields if f.required]
        if required:
            schema["required"] = required
        if node.closed:
            schema["additionalProperties"] = False
    elif isinstance(node, ArrayConstraint):
        schema = {"type": "array", "items": _node_schema(node.items)}
        if node.min_items:
            schema["minItems"] = node.min_items
        if node.max_items is not None:
            schema["maxItems"] = node.max_items
    else:
        raise SchemaDefinitionError(f"Unknown constraint node: {node!r}")

    if node.description:
        schema["description"] = node.description
    return schema


def to_json_schema(node: Constraint, title: str | None = None) -> dict[str, Any]:
    """Convert a constraint model into a JSON Schema 2020-12 document"""
    document = {"$schema": JSON_SCHEMA_DIALECT}
    if title:
        document["title"] = title
    document.update(_node_schema(node))
    return document


def check_json_schema(document: dict[str, Any]) -> None:
    """Raise jsonschema.exceptions.SchemaError if the document is not a valid schema"""
    Draft202012Validator.check_schema(document)


def response_format(node: Constraint, name: str, strict: bool = True) -> dict[str, Any]:
    """Structured-output request envelope for generative APIs"""
    return {
        "type": "json_schema",
        "json_schema": {
            "name": name,
            "schema": to_json_schema(node),
            "strict": strict,
        },
    }
