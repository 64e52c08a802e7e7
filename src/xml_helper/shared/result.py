"""Diagnostic and result types shared by every xml-helper component.

The parser, the schema builder and the validator all report problems as
``ValidationError`` records carrying a 1-based source position and a stable
code from ``ErrorCode``. Callers treat diagnostics from all three producers
uniformly.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from xml_helper.schema.model import Schema
    from xml_helper.tree.node import Node


class ErrorCode(str, Enum):
    """Closed set of diagnostic codes."""

    # Parser
    PARSE_ERROR = "PARSE_ERROR"

    # Schema builder
    SCHEMA_ERROR = "SCHEMA_ERROR"

    # Validator: structure
    ELEMENT_NOT_FOUND = "ELEMENT_NOT_FOUND"
    ELEMENT_MISMATCH = "ELEMENT_MISMATCH"
    MIN_OCCURS_VIOLATION = "MIN_OCCURS_VIOLATION"
    MAX_OCCURS_VIOLATION = "MAX_OCCURS_VIOLATION"
    UNEXPECTED_ELEMENT = "UNEXPECTED_ELEMENT"
    INVALID_CONTENT = "INVALID_CONTENT"

    # Validator: attributes
    MISSING_REQUIRED_ATTRIBUTE = "MISSING_REQUIRED_ATTRIBUTE"
    UNEXPECTED_ATTRIBUTE = "UNEXPECTED_ATTRIBUTE"
    FIXED_VALUE_VIOLATION = "FIXED_VALUE_VIOLATION"
    INVALID_ATTRIBUTE_VALUE = "INVALID_ATTRIBUTE_VALUE"

    # Validator: values and facets
    INVALID_ELEMENT_VALUE = "INVALID_ELEMENT_VALUE"
    INVALID_SIMPLE_TYPE_VALUE = "INVALID_SIMPLE_TYPE_VALUE"
    MIN_LENGTH_VIOLATION = "MIN_LENGTH_VIOLATION"
    MAX_LENGTH_VIOLATION = "MAX_LENGTH_VIOLATION"
    PATTERN_VIOLATION = "PATTERN_VIOLATION"
    INVALID_PATTERN = "INVALID_PATTERN"
    MIN_INCLUSIVE_VIOLATION = "MIN_INCLUSIVE_VIOLATION"
    MAX_INCLUSIVE_VIOLATION = "MAX_INCLUSIVE_VIOLATION"

    # Facade
    NO_SCHEMA = "NO_SCHEMA"
    PARSE_FAILED = "PARSE_FAILED"
    CONVERSION_ERROR = "CONVERSION_ERROR"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ValidationError:
    """Single diagnostic with 1-based source position and a stable code."""

    line: int
    column: int
    message: str
    code: str

    def __post_init__(self) -> None:
        """Validate diagnostic values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        # Store the plain token so diagnostics compare equal however they
        # were created.
        if isinstance(self.code, ErrorCode):
            object.__setattr__(self, "code", self.code.value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert diagnostic to dictionary representation."""
        return {
            "line": self.line,
            "column": self.column,
            "message": self.message,
            "code": self.code,
        }

    def __str__(self) -> str:
        return f"{self.line}:{self.column} [{self.code}] {self.message}"


def make_error(
    code: ErrorCode,
    message: str,
    line: Optional[int] = None,
    column: Optional[int] = None,
) -> ValidationError:
    """Create a diagnostic, falling back to (1, 1) for unknown positions."""
    return ValidationError(
        line=line or 1,
        column=column or 1,
        message=message,
        code=code.value,
    )


@dataclass
class ParseResult:
    """Outcome of parsing a markup document.

    ``node`` is None exactly when ``errors`` is non-empty.
    """

    node: Optional["Node"] = None
    errors: List[ValidationError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if a tree was produced without diagnostics."""
        return self.node is not None and not self.errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary representation."""
        result: Dict[str, Any] = {
            "success": self.success,
            "errors": [error.to_dict() for error in self.errors],
        }
        if self.node is not None:
            result["node"] = self.node.to_dict()
        return result


@dataclass
class SchemaResult:
    """Outcome of building a schema from schema text."""

    schema: Optional["Schema"] = None
    errors: List[ValidationError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if a schema was produced without diagnostics."""
        return self.schema is not None and not self.errors


@dataclass
class ConversionResult:
    """Outcome of converting a document into plain Python data."""

    success: bool
    data: Any = None
    errors: List[ValidationError] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary representation."""
        return {
            "success": self.success,
            "data": self.data,
            "errors": [error.to_dict() for error in self.errors],
        }
