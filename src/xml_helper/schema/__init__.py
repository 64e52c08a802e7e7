"""Schema model and builder.

Key Components:
    Schema: Immutable element, complex type and simple type definitions
    SchemaBuilder: Builds a Schema from schema text or a parsed tree
    parse_schema_document: Convenience function returning a SchemaResult
"""

from .builder import SchemaBuilder, coerce_facet_value, parse_schema_document
from .model import (
    INLINE_TYPE_PREFIX,
    UNBOUNDED,
    AttributeDef,
    AttributeUse,
    ComplexTypeDef,
    ElementDef,
    FacetKind,
    Restriction,
    Schema,
    SimpleTypeDef,
)

__all__ = [
    "INLINE_TYPE_PREFIX",
    "UNBOUNDED",
    "AttributeDef",
    "AttributeUse",
    "ComplexTypeDef",
    "ElementDef",
    "FacetKind",
    "Restriction",
    "Schema",
    "SchemaBuilder",
    "SimpleTypeDef",
    "coerce_facet_value",
    "parse_schema_document",
]
