"""Tests for the schema builder and schema model."""

import pytest

from xml_helper.schema import (
    INLINE_TYPE_PREFIX,
    UNBOUNDED,
    AttributeUse,
    ElementDef,
    FacetKind,
    SchemaBuilder,
    coerce_facet_value,
    parse_schema_document,
)
from xml_helper.shared import ErrorCode

XS = 'xmlns:xs="http://www.w3.org/2001/XMLSchema"'

BOOK_SCHEMA = f"""<?xml version="1.0"?>
<xs:schema {XS} xmlns:tns="urn:books" targetNamespace="urn:books">
  <xs:element name="library" type="tns:LibraryType"/>
  <xs:complexType name="LibraryType">
    <xs:sequence>
      <xs:element name="book" type="tns:BookType" maxOccurs="unbounded"/>
    </xs:sequence>
  </xs:complexType>
  <xs:complexType name="BookType">
    <xs:sequence>
      <xs:element name="title" type="xs:string"/>
      <xs:element name="isbn" type="tns:IsbnType"/>
      <xs:element name="pages" type="xs:int" minOccurs="0"/>
    </xs:sequence>
    <xs:attribute name="id" type="xs:string" use="required"/>
    <xs:attribute name="format" type="xs:string" fixed="hardcover"/>
    <xs:attribute name="year" type="xs:int" default="2000"/>
  </xs:complexType>
  <xs:simpleType name="IsbnType">
    <xs:restriction base="xs:string">
      <xs:pattern value="[0-9]{{3}}-[0-9]{{10}}"/>
    </xs:restriction>
  </xs:simpleType>
</xs:schema>
"""


def build(body):
    return parse_schema_document(f"<xs:schema {XS}>{body}</xs:schema>")


def assert_schema_error(result, fragment=None):
    assert result.schema is None
    assert len(result.errors) == 1
    error = result.errors[0]
    assert error.code == ErrorCode.SCHEMA_ERROR.value
    assert (error.line, error.column) == (1, 1)
    if fragment is not None:
        assert fragment in error.message


class TestCoerceFacetValue:
    """Test numeric coercion of facet values."""

    @pytest.mark.parametrize("text,expected", [
        ("5", 5),
        ("-12", -12),
        ("+3", 3),
        ("0.5", 0.5),
        ("1e3", 1000.0),
        (".25", 0.25),
    ])
    def test_numeric(self, text, expected) -> None:
        """Test integer and float literals."""
        value = coerce_facet_value(text)
        assert value == expected
        assert type(value) is type(expected)

    def test_non_numeric_kept(self) -> None:
        """Test that patterns and words stay strings."""
        assert coerce_facet_value("[0-9]+") == "[0-9]+"
        assert coerce_facet_value("red") == "red"


class TestBookSchema:
    """Test building a schema with named types."""

    @pytest.fixture
    def schema(self):
        result = parse_schema_document(BOOK_SCHEMA)
        assert result.success, result.errors
        return result.schema

    def test_namespaces(self, schema) -> None:
        """Test target namespace and declared prefixes."""
        assert schema.target_namespace == "urn:books"
        assert schema.namespaces == {
            "xs": "http://www.w3.org/2001/XMLSchema",
            "tns": "urn:books",
        }

    def test_global_element(self, schema) -> None:
        """Test the global element declaration."""
        library = schema.get_element("library")
        assert library.type_name == "tns:LibraryType"
        assert (library.min_occurs, library.max_occurs) == (1, 1)
        assert library.namespace == "urn:books"
        assert schema.get_element("book") is None

    def test_unbounded_particle(self, schema) -> None:
        """Test that maxOccurs="unbounded" maps to the sentinel."""
        book = schema.complex_types["LibraryType"].elements[0]
        assert book.name == "book"
        assert book.max_occurs is UNBOUNDED
        assert book.is_unbounded

    def test_complex_type_particles_in_order(self, schema) -> None:
        """Test particle order and bounds."""
        particles = schema.complex_types["BookType"].elements
        assert [p.name for p in particles] == ["title", "isbn", "pages"]
        assert particles[2].min_occurs == 0

    def test_attributes(self, schema) -> None:
        """Test attribute use, fixed and default values."""
        book_type = schema.complex_types["BookType"]
        identifier = book_type.find_attribute("id")
        assert identifier.required
        assert identifier.use is AttributeUse.REQUIRED

        fmt = book_type.find_attribute("format")
        assert fmt.fixed_value == "hardcover"
        assert not fmt.required

        assert book_type.find_attribute("year").default_value == "2000"
        assert book_type.find_attribute("missing") is None

    def test_simple_type(self, schema) -> None:
        """Test simple type base and pattern facet."""
        isbn = schema.simple_types["IsbnType"]
        assert isbn.base_type == "xs:string"
        assert len(isbn.restrictions) == 1
        facet = isbn.restrictions[0]
        assert facet.kind is FacetKind.PATTERN
        assert facet.lexical == "[0-9]{3}-[0-9]{10}"

    def test_summary(self, schema) -> None:
        """Test definition counts."""
        assert schema.summary() == {"elements": 1, "complex_types": 2, "simple_types": 1}

    def test_to_dict(self, schema) -> None:
        """Test the serializable form."""
        data = schema.to_dict()
        assert data["elements"]["library"]["max_occurs"] == 1
        assert data["complex_types"]["LibraryType"]["elements"][0]["max_occurs"] == "unbounded"


class TestInlineTypes:
    """Test inline type declarations."""

    def test_inline_simple_type_copies_facets(self) -> None:
        """Test that inline simple type facets land on the element."""
        result = build(
            '<xs:element name="code"><xs:simpleType>'
            '<xs:restriction base="xs:string">'
            '<xs:minLength value="2"/><xs:maxLength value="4"/>'
            "</xs:restriction></xs:simpleType></xs:element>"
        )
        element = result.schema.elements["code"]

        assert element.type_name == INLINE_TYPE_PREFIX + "code"
        assert element.is_inline
        assert [(r.kind, r.value) for r in element.restrictions] == [
            (FacetKind.MIN_LENGTH, 2),
            (FacetKind.MAX_LENGTH, 4),
        ]

    def test_inline_complex_type_keeps_attributes_only(self) -> None:
        """Test that inline complex particles are discarded."""
        result = build(
            '<xs:element name="item"><xs:complexType>'
            '<xs:sequence><xs:element name="child"/></xs:sequence>'
            '<xs:attribute name="sku" use="required"/>'
            "</xs:complexType></xs:element>"
        )
        element = result.schema.elements["item"]

        assert element.type_name == "#inline-item"
        assert [a.name for a in element.attributes] == ["sku"]
        assert result.schema.complex_types == {}


class TestDefaultsAndTolerance:
    """Test defaults and ignored constructs."""

    def test_element_defaults(self) -> None:
        """Test default type and occurrence bounds."""
        element = build('<xs:element name="note"/>').schema.elements["note"]
        assert element.type_name == "string"
        assert (element.min_occurs, element.max_occurs) == (1, 1)

    def test_unsupported_facets_and_components_ignored(self) -> None:
        """Test that unknown facets and top-level components are skipped."""
        result = build(
            '<xs:annotation><xs:documentation>docs</xs:documentation></xs:annotation>'
            '<xs:simpleType name="T"><xs:restriction base="xs:decimal">'
            '<xs:totalDigits value="5"/><xs:minInclusive value="0"/>'
            "</xs:restriction></xs:simpleType>"
        )
        assert result.success
        assert [r.kind for r in result.schema.simple_types["T"].restrictions] == [
            FacetKind.MIN_INCLUSIVE
        ]

    def test_enumeration_facets_collected(self) -> None:
        """Test that enumeration values are retained."""
        result = build(
            '<xs:simpleType name="Color"><xs:restriction base="xs:string">'
            '<xs:enumeration value="red"/><xs:enumeration value="blue"/>'
            "</xs:restriction></xs:simpleType>"
        )
        values = [r.value for r in result.schema.simple_types["Color"].restrictions]
        assert values == ["red", "blue"]

    def test_unprefixed_schema_root(self) -> None:
        """Test a schema using the default namespace."""
        result = parse_schema_document(
            '<schema xmlns="http://www.w3.org/2001/XMLSchema">'
            '<element name="a" type="int"/></schema>'
        )
        assert result.schema.namespaces == {"": "http://www.w3.org/2001/XMLSchema"}
        assert result.schema.elements["a"].type_name == "int"


class TestSchemaErrors:
    """Test fail-fast schema diagnostics."""

    def test_parser_errors_pass_through(self) -> None:
        """Test that malformed schema text yields the parser's diagnostic."""
        result = parse_schema_document(f"<xs:schema {XS}><xs:element></xs:schema>")

        assert result.schema is None
        assert [e.code for e in result.errors] == ["PARSE_ERROR"]

    def test_wrong_root(self) -> None:
        """Test that the root must be a schema element."""
        assert_schema_error(parse_schema_document("<notschema/>"), "Invalid schema")

    def test_non_integer_occurs(self) -> None:
        """Test that minOccurs must be an integer."""
        assert_schema_error(build('<xs:element name="a" minOccurs="many"/>'), "minOccurs")

    def test_max_below_min(self) -> None:
        """Test inconsistent occurrence bounds."""
        assert_schema_error(build('<xs:element name="a" minOccurs="3" maxOccurs="2"/>'))

    def test_negative_occurs(self) -> None:
        """Test negative occurrence bounds."""
        assert_schema_error(build('<xs:element name="a" minOccurs="-1"/>'))

    def test_invalid_attribute_use(self) -> None:
        """Test an unknown attribute use value."""
        assert_schema_error(
            build('<xs:complexType name="T"><xs:attribute name="a" use="sometimes"/></xs:complexType>'),
            "use",
        )


class TestElementDef:
    """Test ElementDef invariants."""

    def test_rejects_max_below_min(self) -> None:
        """Test bound validation on construction."""
        with pytest.raises(ValueError):
            ElementDef("a", min_occurs=2, max_occurs=1)

    def test_unbounded_accepts_any_min(self) -> None:
        """Test that unbounded maximum skips the comparison."""
        assert ElementDef("a", min_occurs=5, max_occurs=UNBOUNDED).is_unbounded


class TestSchemaBuilderInstance:
    """Test builder reuse."""

    def test_builder_reuse(self) -> None:
        """Test that one builder can build several schemas."""
        builder = SchemaBuilder("req-7")
        first = builder.parse_schema(BOOK_SCHEMA)
        second = builder.parse_schema("<oops/>")
        third = builder.parse_schema(f'<xs:schema {XS}><xs:element name="x"/></xs:schema>')

        assert first.success
        assert not second.success
        assert list(third.schema.elements) == ["x"]
