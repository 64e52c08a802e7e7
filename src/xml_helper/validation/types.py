"""Builtin lexical types and type-reference resolution.

A type reference on an element or attribute resolves to exactly one
``ResolvedType`` variant. ``TypeKind.UNKNOWN`` is the deliberate fallback for
names that match nothing: such content is accepted without checks.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Pattern, TypeVar, Union

from xml_helper.schema.model import (
    INLINE_TYPE_PREFIX,
    ComplexTypeDef,
    Schema,
    SimpleTypeDef,
)
from xml_helper.tree import local_name

_ZONE = r"(Z|[+-]\d{2}:\d{2})?"
_CLOCK = r"\d{2}:\d{2}:\d{2}(\.\d+)?"

_DECIMAL = re.compile(r"-?\d*\.?\d+")

LEXICAL_PATTERNS: Dict[str, Optional[Pattern[str]]] = {
    "string": None,
    "int": re.compile(r"-?\d+"),
    "integer": re.compile(r"-?\d+"),
    "decimal": _DECIMAL,
    "float": _DECIMAL,
    "double": _DECIMAL,
    "boolean": re.compile(r"true|false|1|0"),
    "date": re.compile(r"\d{4}-\d{2}-\d{2}"),
    "dateTime": re.compile(r"\d{4}-\d{2}-\d{2}T" + _CLOCK + _ZONE),
    "time": re.compile(_CLOCK + _ZONE),
    "base64Binary": None,
    "hexBinary": None,
}


class BuiltinType(str, Enum):
    """Primitive type keywords recognized without a schema definition."""

    STRING = "string"
    INT = "int"
    INTEGER = "integer"
    DECIMAL = "decimal"
    FLOAT = "float"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    DATE = "date"
    DATE_TIME = "dateTime"
    TIME = "time"
    BASE64_BINARY = "base64Binary"
    HEX_BINARY = "hexBinary"

    @classmethod
    def lookup(cls, type_name: str) -> Optional["BuiltinType"]:
        """Find the builtin named by ``type_name`` after stripping any prefix."""
        name = local_name(type_name)
        for member in cls:
            if member.value == name:
                return member
        return None

    def is_valid(self, text: str) -> bool:
        """Check ``text`` against this type's lexical form."""
        pattern = LEXICAL_PATTERNS.get(self.value)
        if pattern is None:
            return True
        return pattern.fullmatch(text) is not None


def is_lexically_valid(type_name: str, text: str) -> bool:
    """Check ``text`` against a type keyword; unknown keywords always pass."""
    builtin = BuiltinType.lookup(type_name)
    if builtin is None:
        return True
    return builtin.is_valid(text)


class TypeKind(Enum):
    BUILTIN = "builtin"
    COMPLEX = "complex"
    SIMPLE = "simple"
    INLINE = "inline"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ResolvedType:
    """Result of resolving a type reference against a schema."""

    kind: TypeKind
    name: str
    definition: Union[BuiltinType, ComplexTypeDef, SimpleTypeDef, None] = None


_Definition = TypeVar("_Definition", ComplexTypeDef, SimpleTypeDef)


def _lookup_named(
    definitions: Dict[str, _Definition], type_name: str
) -> Optional[_Definition]:
    if type_name in definitions:
        return definitions[type_name]
    return definitions.get(local_name(type_name))


def resolve_type(schema: Schema, type_name: str) -> ResolvedType:
    """Resolve a type reference.

    Resolution order: inline marker, builtin keyword, complex type, simple
    type, unknown. A marker for a prefixed element such as
    ``#inline-x:string`` is INLINE, never BUILTIN. Named lookups try the
    reference as written first, then its local name, so ``tns:BookType``
    finds ``BookType``.

    Args:
        schema: Schema whose definitions are searched
        type_name: Reference as written in the schema

    Returns:
        ResolvedType tagged with the matching TypeKind
    """
    if type_name.startswith(INLINE_TYPE_PREFIX):
        return ResolvedType(TypeKind.INLINE, type_name)

    builtin = BuiltinType.lookup(type_name)
    if builtin is not None:
        return ResolvedType(TypeKind.BUILTIN, type_name, builtin)

    complex_type = _lookup_named(schema.complex_types, type_name)
    if complex_type is not None:
        return ResolvedType(TypeKind.COMPLEX, type_name, complex_type)

    simple_type = _lookup_named(schema.simple_types, type_name)
    if simple_type is not None:
        return ResolvedType(TypeKind.SIMPLE, type_name, simple_type)

    return ResolvedType(TypeKind.UNKNOWN, type_name)
