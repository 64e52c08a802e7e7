"""Schema validation for parsed document trees.

Key Components:
    Validator: Accumulating validator bound to one Schema
    compile_validator: Factory returning a reusable Validator
    BuiltinType: Primitive type keywords with their lexical forms
    resolve_type: Resolves a type reference to a tagged ResolvedType
"""

from .facets import FacetViolation, check_facet, check_facets
from .types import (
    BuiltinType,
    ResolvedType,
    TypeKind,
    is_lexically_valid,
    resolve_type,
)
from .validator import Validator, compile_validator

__all__ = [
    "BuiltinType",
    "FacetViolation",
    "ResolvedType",
    "TypeKind",
    "Validator",
    "check_facet",
    "check_facets",
    "compile_validator",
    "is_lexically_valid",
    "resolve_type",
]
