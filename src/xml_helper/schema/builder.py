"""Schema builder: turns a parsed XSD tree into typed definitions.

Building is fail-fast. Parser diagnostics are returned unchanged; any problem
found while interpreting the tree yields one ``SCHEMA_ERROR`` at (1, 1) and no
schema.
"""

import re
from typing import Dict, List, Optional, Tuple

from xml_helper.parsing import MarkupParser
from xml_helper.schema.model import (
    DEFAULT_TYPE,
    INLINE_TYPE_PREFIX,
    UNBOUNDED,
    AttributeDef,
    AttributeUse,
    ComplexTypeDef,
    ElementDef,
    FacetKind,
    FacetValue,
    MaxOccurs,
    Restriction,
    Schema,
    SimpleTypeDef,
)
from xml_helper.shared import (
    ErrorCode,
    SchemaBuildError,
    SchemaResult,
    get_logger,
    make_error,
)
from xml_helper.tree import Node

SCHEMA_ROOT = "schema"
PARTICLE_GROUPS = ("sequence", "choice", "all")

_INTEGER_LITERAL = re.compile(r"[+-]?\d+")
_NUMERIC_LITERAL = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def coerce_facet_value(text: str) -> FacetValue:
    """Convert numeric-looking facet text to int or float, else keep the string."""
    stripped = text.strip()
    if _INTEGER_LITERAL.fullmatch(stripped):
        return int(stripped)
    if _NUMERIC_LITERAL.fullmatch(stripped):
        return float(stripped)
    return text


def _parse_occurs(value: Optional[str], attribute: str, element: str) -> int:
    if value is None:
        return 1
    try:
        return int(value.strip())
    except ValueError as e:
        raise SchemaBuildError(
            f"Invalid {attribute} '{value}' on element '{element}'", component="element"
        ) from e


class SchemaBuilder:
    """Build ``Schema`` values from schema documents.

    Examples:
        >>> result = SchemaBuilder().parse_schema(
        ...     '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">'
        ...     '<xs:element name="title" type="xs:string"/></xs:schema>'
        ... )
        >>> result.schema.elements["title"].type_name
        'xs:string'
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        """Initialize the builder.

        Args:
            correlation_id: Optional correlation ID for request tracking
        """
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "schema_builder")
        self._parser = MarkupParser(correlation_id)

    def parse_schema(self, text: str) -> SchemaResult:
        """Parse schema text and build its definitions.

        Args:
            text: Complete schema document text

        Returns:
            SchemaResult with the schema, or parser diagnostics, or a single
            SCHEMA_ERROR
        """
        parsed = self._parser.parse(text)
        if parsed.errors or parsed.node is None:
            return SchemaResult(schema=None, errors=list(parsed.errors))
        return self.build(parsed.node)

    def build(self, root: Node) -> SchemaResult:
        """Build definitions from an already parsed schema tree."""
        with self.logger.timed("build_schema", root=root.name) as summary:
            try:
                schema = self._build_schema(root)
            except (SchemaBuildError, ValueError) as e:
                message = getattr(e, "message", None) or str(e)
                summary["error"] = message
                self.logger.debug("Schema rejected", extra={"reason": message})
                return SchemaResult(
                    schema=None,
                    errors=[make_error(ErrorCode.SCHEMA_ERROR, f"Invalid schema: {message}")],
                )
            except Exception as e:
                summary["error"] = str(e)
                self.logger.exception("Unexpected failure while building schema")
                return SchemaResult(
                    schema=None,
                    errors=[make_error(ErrorCode.SCHEMA_ERROR, f"Invalid schema: {e}")],
                )

            summary.update(schema.summary())
        self.logger.info("Schema built", extra=schema.summary())
        return SchemaResult(schema=schema, errors=[])

    def _build_schema(self, root: Node) -> Schema:
        if root.local_name != SCHEMA_ROOT:
            raise SchemaBuildError(
                f"root element must be '{SCHEMA_ROOT}', found '{root.name}'",
                component="schema",
            )

        target_namespace = root.get_attribute("targetNamespace")
        namespaces: Dict[str, str] = {}
        for name, value in root.attributes.items():
            if name == "xmlns":
                namespaces[""] = value
            elif name.startswith("xmlns:"):
                namespaces[name[len("xmlns:"):]] = value

        elements: Dict[str, ElementDef] = {}
        complex_types: Dict[str, ComplexTypeDef] = {}
        simple_types: Dict[str, SimpleTypeDef] = {}

        for child in root.element_children():
            kind = child.local_name
            if kind == "element":
                element = self._build_element(child, target_namespace)
                elements[element.name] = element
            elif kind == "complexType":
                complex_type = self._build_complex_type(child, target_namespace)
                complex_types[complex_type.name] = complex_type
            elif kind == "simpleType":
                simple_type = self._build_simple_type(child)
                simple_types[simple_type.name] = simple_type
            else:
                self.logger.debug("Skipping schema component", extra={"component_name": child.name})

        return Schema(
            target_namespace=target_namespace,
            elements=elements,
            complex_types=complex_types,
            simple_types=simple_types,
            namespaces=namespaces,
        )

    def _build_element(self, node: Node, namespace: Optional[str]) -> ElementDef:
        name = node.get_attribute("name", "") or ""
        type_name = node.get_attribute("type", DEFAULT_TYPE) or DEFAULT_TYPE
        min_occurs = _parse_occurs(node.get_attribute("minOccurs"), "minOccurs", name)

        raw_max = node.get_attribute("maxOccurs")
        max_occurs: MaxOccurs
        if raw_max is not None and raw_max.strip() == "unbounded":
            max_occurs = UNBOUNDED
        else:
            max_occurs = _parse_occurs(raw_max, "maxOccurs", name)

        attributes: Tuple[AttributeDef, ...] = ()
        restrictions: Tuple[Restriction, ...] = ()
        for child in node.element_children():
            if child.local_name == "complexType":
                type_name = INLINE_TYPE_PREFIX + name
                attributes = tuple(
                    self._build_attribute(a)
                    for a in child.element_children()
                    if a.local_name == "attribute"
                )
            elif child.local_name == "simpleType":
                type_name = INLINE_TYPE_PREFIX + name
                restrictions = self._build_simple_type(child).restrictions

        return ElementDef(
            name=name,
            type_name=type_name,
            min_occurs=min_occurs,
            max_occurs=max_occurs,
            attributes=attributes,
            restrictions=restrictions,
            namespace=namespace,
        )

    def _build_complex_type(self, node: Node, namespace: Optional[str]) -> ComplexTypeDef:
        particles: List[ElementDef] = []
        attributes: List[AttributeDef] = []

        for child in node.element_children():
            if child.local_name in PARTICLE_GROUPS:
                particles.extend(
                    self._build_element(particle, namespace)
                    for particle in child.element_children()
                    if particle.local_name == "element"
                )
            elif child.local_name == "attribute":
                attributes.append(self._build_attribute(child))

        return ComplexTypeDef(
            name=node.get_attribute("name", "") or "",
            elements=tuple(particles),
            attributes=tuple(attributes),
        )

    def _build_simple_type(self, node: Node) -> SimpleTypeDef:
        name = node.get_attribute("name", "") or ""
        base_type = DEFAULT_TYPE
        restrictions: List[Restriction] = []

        restriction = next(
            (c for c in node.element_children() if c.local_name == "restriction"), None
        )
        if restriction is not None:
            base_type = restriction.get_attribute("base", DEFAULT_TYPE) or DEFAULT_TYPE
            for facet in restriction.element_children():
                value = facet.get_attribute("value")
                if value is None:
                    continue
                kind = FacetKind.from_name(facet.local_name)
                if kind is None:
                    self.logger.debug(
                        "Ignoring unsupported facet",
                        extra={"facet": facet.local_name, "simple_type": name},
                    )
                    continue
                restrictions.append(
                    Restriction(kind=kind, value=coerce_facet_value(value), lexical=value)
                )

        return SimpleTypeDef(name=name, base_type=base_type, restrictions=tuple(restrictions))

    def _build_attribute(self, node: Node) -> AttributeDef:
        name = node.get_attribute("name", "") or ""
        raw_use = node.get_attribute("use", AttributeUse.OPTIONAL.value)
        try:
            use = AttributeUse(raw_use)
        except ValueError as e:
            raise SchemaBuildError(
                f"Invalid use '{raw_use}' on attribute '{name}'", component="attribute"
            ) from e

        return AttributeDef(
            name=name,
            type_name=node.get_attribute("type", DEFAULT_TYPE) or DEFAULT_TYPE,
            use=use,
            default_value=node.get_attribute("default"),
            fixed_value=node.get_attribute("fixed"),
        )


def parse_schema_document(text: str, correlation_id: Optional[str] = None) -> SchemaResult:
    """Parse schema text into a ``Schema``.

    Args:
        text: Complete schema document text
        correlation_id: Optional correlation ID for request tracking

    Returns:
        SchemaResult; ``schema`` is None when ``errors`` is non-empty
    """
    return SchemaBuilder(correlation_id).parse_schema(text)
