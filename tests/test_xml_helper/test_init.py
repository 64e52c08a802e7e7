"""Test module for xml_helper package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    # Arrange & Act
    import xml_helper

    # Assert
    assert xml_helper is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    # Arrange & Act
    import xml_helper

    # Assert
    assert isinstance(xml_helper.__version__, str)
    assert xml_helper.__version__ == "0.1.0"


def test_package_has_author() -> None:
    """Test that the package has an author attribute."""
    import xml_helper

    assert xml_helper.__author__ == "xml-helper Team"


def test_core_operations_exported() -> None:
    """Test that the core operation set is importable from the package root."""
    import xml_helper

    for name in ("parse_document", "parse_schema_document", "compile_validator", "XmlHelper"):
        assert name in xml_helper.__all__
        assert callable(getattr(xml_helper, name))


def test_end_to_end_validation() -> None:
    """Test parse, build and validate through the top-level exports."""
    # Arrange
    from xml_helper import compile_validator, parse_document, parse_schema_document

    schema_result = parse_schema_document(
        '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">'
        '<xs:element name="count" type="xs:int"/>'
        "</xs:schema>"
    )
    validator = compile_validator(schema_result.schema)

    # Act
    good = validator.validate(parse_document("<count>42</count>").node)
    bad = validator.validate(parse_document("<count>many</count>").node)

    # Assert
    assert good == []
    assert [error.code for error in bad] == ["INVALID_ELEMENT_VALUE"]
