"""Exception hierarchy used inside xml-helper.

Parser and schema-builder exceptions never cross the public operations; they
are raised internally and converted into diagnostics at the boundary.
"""

from typing import Optional


class XmlHelperError(Exception):
    """Base class for all xml-helper exceptions."""


class MarkupSyntaxError(XmlHelperError):
    """Raised by the parser at the first structural problem in the input."""

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


class SchemaBuildError(XmlHelperError):
    """Raised when a parsed schema tree cannot be turned into definitions."""

    def __init__(self, message: str, component: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.component = component


class ConversionError(XmlHelperError):
    """Raised when plain Python data cannot be represented as a tree."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
