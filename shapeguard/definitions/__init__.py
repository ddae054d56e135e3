"""Declarative (YAML / JSON) schema definitions."""

from .loader import (
    SUPPORTED_TYPES,
    DefinitionError,
    load_schema,
    read_document,
    schema_from_definition,
)

__all__ = [
    "DefinitionError",
    "SUPPORTED_TYPES",
    "load_schema",
    "read_document",
    "schema_from_definition",
]
