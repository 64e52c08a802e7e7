"""High-level facade wiring parser, schema builder, validator and converters.

``XmlHelper`` is the single entry point most callers need::

    helper = XmlHelper()
    helper.load_schema(xsd_text)
    errors = helper.validate_xml(xml_text)
"""

from typing import Any, List, Optional

from xml_helper.conversion import DictToTreeConverter, TreeToDictConverter
from xml_helper.parsing import MarkupParser
from xml_helper.schema import Schema, SchemaBuilder
from xml_helper.shared import (
    ConversionResult,
    DictToXmlOptions,
    ErrorCode,
    HelperConfig,
    ParseResult,
    ValidationError,
    XmlToDictOptions,
    get_logger,
    make_error,
)
from xml_helper.tree import Node
from xml_helper.validation import Validator, compile_validator


class XmlHelper:
    """Parse, validate and convert documents with one loaded schema.

    The helper owns its schema/validator pair and is not synchronized; give
    each thread its own instance.
    """

    def __init__(
        self,
        config: Optional[HelperConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the helper.

        Args:
            config: Helper configuration, defaults when omitted
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or HelperConfig()
        self.correlation_id = (
            correlation_id if self.config.global_.enable_correlation_tracking else None
        )
        self.logger = get_logger(__name__, self.correlation_id, "xml_helper")

        self._parser = MarkupParser(self.correlation_id)
        self._schema_builder = SchemaBuilder(self.correlation_id)
        self._schema: Optional[Schema] = None
        self._validator: Optional[Validator] = None

    @property
    def schema(self) -> Optional[Schema]:
        """Get the currently loaded schema, if any."""
        return self._schema

    @property
    def has_schema(self) -> bool:
        """Check if a schema is loaded."""
        return self._schema is not None

    def load_schema(self, schema_text: str) -> List[ValidationError]:
        """Load a schema and compile a validator for it.

        The previous schema stays active when loading fails.

        Args:
            schema_text: Schema document text

        Returns:
            Diagnostics from building the schema, empty on success
        """
        result = self._schema_builder.parse_schema(schema_text)
        if result.schema is not None and not result.errors:
            self._schema = result.schema
            self._validator = compile_validator(result.schema, self.correlation_id)
            self.logger.info("Schema loaded", extra=result.schema.summary())
        else:
            self.logger.warning(
                "Schema load failed", extra={"error_count": len(result.errors)}
            )
        return result.errors

    def parse_xml(self, xml_text: str) -> ParseResult:
        """Parse a document without validating it."""
        return self._parser.parse(xml_text)

    def validate_xml(self, xml_text: str) -> List[ValidationError]:
        """Parse and validate a document against the loaded schema.

        Args:
            xml_text: Document text

        Returns:
            NO_SCHEMA when no schema is loaded, parser diagnostics when the
            document is malformed, validator diagnostics otherwise
        """
        if self._validator is None:
            return [make_error(
                ErrorCode.NO_SCHEMA, "No schema loaded. Call load_schema() first."
            )]

        parsed = self._parser.parse(xml_text)
        if parsed.errors:
            return list(parsed.errors)
        if parsed.node is None:
            return [make_error(ErrorCode.PARSE_FAILED, "Failed to parse XML")]
        return self._validator.validate(parsed.node)

    def validate_node(self, node: Node) -> List[ValidationError]:
        """Validate an already parsed tree against the loaded schema."""
        if self._validator is None:
            return [make_error(
                ErrorCode.NO_SCHEMA, "No schema loaded. Call load_schema() first."
            )]
        return self._validator.validate(node)

    def xml_to_dict(
        self, xml_text: str, options: Optional[XmlToDictOptions] = None
    ) -> ConversionResult:
        """Parse a document and convert it into plain Python data.

        Args:
            xml_text: Document text
            options: Conversion options, ``config.xml_to_dict`` when omitted

        Returns:
            ConversionResult with the converted data or diagnostics
        """
        parsed = self._parser.parse(xml_text)
        if parsed.errors or parsed.node is None:
            return ConversionResult(success=False, errors=list(parsed.errors))

        converter = TreeToDictConverter(
            options or self.config.xml_to_dict, self.correlation_id
        )
        try:
            data = converter.convert(parsed.node)
        except (ValueError, RecursionError) as e:
            self.logger.exception("Tree to dict conversion failed")
            return ConversionResult(
                success=False,
                errors=[make_error(ErrorCode.CONVERSION_ERROR, str(e) or "Conversion error")],
            )
        return ConversionResult(success=True, data=data, errors=[])

    def dict_to_tree(
        self,
        data: Any,
        root_element: Optional[str] = None,
        options: Optional[DictToXmlOptions] = None,
    ) -> Node:
        """Build a tree from plain Python data.

        Raises:
            ConversionError: If a key is not a valid element or attribute name
        """
        converter = DictToTreeConverter(options or self.config.dict_to_xml, self.correlation_id)
        return converter.to_tree(data, root_element)

    def dict_to_xml(
        self,
        data: Any,
        root_element: Optional[str] = None,
        options: Optional[DictToXmlOptions] = None,
    ) -> str:
        """Convert plain Python data into markup text.

        Args:
            data: Dict, list or scalar
            root_element: Root element name, ``options.root_element`` when omitted
            options: Conversion options, ``config.dict_to_xml`` when omitted

        Returns:
            Markup text

        Raises:
            ConversionError: If a key is not a valid element or attribute name
        """
        converter = DictToTreeConverter(options or self.config.dict_to_xml, self.correlation_id)
        return converter.to_xml(data, root_element)
