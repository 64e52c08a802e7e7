"""Shared utilities for xml-helper.

This module provides the diagnostic model, result containers, configuration
objects, exceptions and logging helpers used across all components.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    DictToXmlOptions,
    GlobalConfig,
    HelperConfig,
    XmlToDictOptions,
)
from .exceptions import (
    ConversionError,
    MarkupSyntaxError,
    SchemaBuildError,
    XmlHelperError,
)
from .logging import CorrelationLogger, configure_logging, get_logger
from .result import (
    ConversionResult,
    ErrorCode,
    ParseResult,
    SchemaResult,
    ValidationError,
    make_error,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ConversionError",
    "ConversionResult",
    "CorrelationLogger",
    "DictToXmlOptions",
    "ErrorCode",
    "GlobalConfig",
    "HelperConfig",
    "MarkupSyntaxError",
    "ParseResult",
    "SchemaBuildError",
    "SchemaResult",
    "ValidationError",
    "XmlHelperError",
    "XmlToDictOptions",
    "configure_logging",
    "get_logger",
    "make_error",
]
