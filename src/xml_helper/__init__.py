"""xml-helper.

Parse XML into a generic tree, build typed definitions from XSD schemas and
validate trees against them, reporting every violation with its source
position and a stable error code.

Progressive API Disclosure:
- Level 1: Core functions - parse_document(), parse_schema_document(),
  compile_validator()
- Level 2: Facade - XmlHelper (schema loading, validation, JSON conversion)
- Level 3: Components - MarkupParser, SchemaBuilder, Validator, converters
"""

__version__ = "0.1.0"
__author__ = "xml-helper Team"

# Level 1: Core operations
from .parsing import MarkupParser, parse_document
from .schema import Schema, SchemaBuilder, parse_schema_document
from .validation import Validator, compile_validator

# Level 2: Facade
from .api import XmlHelper

# Level 3: Conversion components
from .conversion import DictToTreeConverter, TreeSerializer, TreeToDictConverter

# Shared data model and configuration
from .shared import (
    DictToXmlOptions,
    ErrorCode,
    HelperConfig,
    ParseResult,
    SchemaResult,
    ValidationError,
    XmlToDictOptions,
)
from .tree import Node

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Core operations
    "compile_validator",
    "parse_document",
    "parse_schema_document",

    # Level 2: Facade
    "XmlHelper",

    # Level 3: Components
    "DictToTreeConverter",
    "MarkupParser",
    "SchemaBuilder",
    "TreeSerializer",
    "TreeToDictConverter",
    "Validator",

    # Data model and configuration
    "DictToXmlOptions",
    "ErrorCode",
    "HelperConfig",
    "Node",
    "ParseResult",
    "Schema",
    "SchemaResult",
    "ValidationError",
    "XmlToDictOptions",
]
