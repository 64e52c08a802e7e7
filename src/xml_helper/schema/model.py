"""Typed schema definitions produced by the schema builder.

All definitions are frozen and hold tuples, so a built ``Schema`` can be
shared by any number of validators without copying.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

INLINE_TYPE_PREFIX = "#inline-"

DEFAULT_TYPE = "string"


class _Unbounded:
    """Marker for ``maxOccurs="unbounded"``."""

    _instance: Optional["_Unbounded"] = None

    def __new__(cls) -> "_Unbounded":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNBOUNDED"

    def __reduce__(self) -> str:
        return "UNBOUNDED"


UNBOUNDED = _Unbounded()

MaxOccurs = Union[int, _Unbounded]
FacetValue = Union[int, float, str]


class FacetKind(str, Enum):
    """Restriction facets understood by the builder."""

    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    PATTERN = "pattern"
    ENUMERATION = "enumeration"
    MIN_INCLUSIVE = "minInclusive"
    MAX_INCLUSIVE = "maxInclusive"

    @classmethod
    def from_name(cls, name: str) -> Optional["FacetKind"]:
        """Look up a facet by its schema element name, None when unknown."""
        for kind in cls:
            if kind.value == name:
                return kind
        return None


class AttributeUse(str, Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"
    PROHIBITED = "prohibited"


@dataclass(frozen=True)
class Restriction:
    """One facet; ``lexical`` keeps the attribute text as written."""

    kind: FacetKind
    value: FacetValue
    lexical: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "value": self.value}


@dataclass(frozen=True)
class AttributeDef:
    name: str
    type_name: str = DEFAULT_TYPE
    use: AttributeUse = AttributeUse.OPTIONAL
    default_value: Optional[str] = None
    fixed_value: Optional[str] = None

    @property
    def required(self) -> bool:
        return self.use is AttributeUse.REQUIRED

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "name": self.name,
            "type": self.type_name,
            "use": self.use.value,
        }
        if self.default_value is not None:
            result["default"] = self.default_value
        if self.fixed_value is not None:
            result["fixed"] = self.fixed_value
        return result


@dataclass(frozen=True)
class ElementDef:
    """Element declaration, either global or a particle of a complex type.

    ``attributes`` is only filled from an inline complex type and
    ``restrictions`` only from an inline simple type.
    """

    name: str
    type_name: str = DEFAULT_TYPE
    min_occurs: int = 1
    max_occurs: MaxOccurs = 1
    attributes: Tuple[AttributeDef, ...] = ()
    restrictions: Tuple[Restriction, ...] = ()
    namespace: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate occurrence bounds."""
        if self.min_occurs < 0:
            raise ValueError(f"minOccurs must be >= 0 for element '{self.name}'")
        if self.max_occurs is not UNBOUNDED:
            if self.max_occurs < 0:
                raise ValueError(f"maxOccurs must be >= 0 for element '{self.name}'")
            if self.max_occurs < self.min_occurs:
                raise ValueError(
                    f"maxOccurs is less than minOccurs for element '{self.name}'"
                )

    @property
    def is_inline(self) -> bool:
        return self.type_name.startswith(INLINE_TYPE_PREFIX)

    @property
    def is_unbounded(self) -> bool:
        return self.max_occurs is UNBOUNDED

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "name": self.name,
            "type": self.type_name,
            "min_occurs": self.min_occurs,
            "max_occurs": "unbounded" if self.is_unbounded else self.max_occurs,
        }
        if self.attributes:
            result["attributes"] = [a.to_dict() for a in self.attributes]
        if self.restrictions:
            result["restrictions"] = [r.to_dict() for r in self.restrictions]
        return result


@dataclass(frozen=True)
class ComplexTypeDef:
    """Named complex type with sequence/choice/all particles flattened in order."""

    name: str
    elements: Tuple[ElementDef, ...] = ()
    attributes: Tuple[AttributeDef, ...] = ()

    def find_attribute(self, name: str) -> Optional[AttributeDef]:
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "elements": [e.to_dict() for e in self.elements],
            "attributes": [a.to_dict() for a in self.attributes],
        }


@dataclass(frozen=True)
class SimpleTypeDef:
    name: str
    base_type: str = DEFAULT_TYPE
    restrictions: Tuple[Restriction, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "base": self.base_type,
            "restrictions": [r.to_dict() for r in self.restrictions],
        }


@dataclass(frozen=True)
class Schema:
    """Global element, complex type and simple type definitions by name.

    ``namespaces`` maps declared prefixes to URIs, with ``""`` standing for
    the default namespace.
    """

    target_namespace: Optional[str] = None
    elements: Dict[str, ElementDef] = field(default_factory=dict)
    complex_types: Dict[str, ComplexTypeDef] = field(default_factory=dict)
    simple_types: Dict[str, SimpleTypeDef] = field(default_factory=dict)
    namespaces: Dict[str, str] = field(default_factory=dict)

    def get_element(self, name: str) -> Optional[ElementDef]:
        return self.elements.get(name)

    def summary(self) -> Dict[str, int]:
        """Definition counts, used in log records and CLI output."""
        return {
            "elements": len(self.elements),
            "complex_types": len(self.complex_types),
            "simple_types": len(self.simple_types),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_namespace": self.target_namespace,
            "namespaces": dict(self.namespaces),
            "elements": {k: v.to_dict() for k, v in self.elements.items()},
            "complex_types": {k: v.to_dict() for k, v in self.complex_types.items()},
            "simple_types": {k: v.to_dict() for k, v in self.simple_types.items()},
        }
