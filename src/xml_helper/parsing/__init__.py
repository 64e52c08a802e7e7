"""Markup parsing for xml-helper.

Key Components:
    MarkupParser: Fail-fast recursive-descent parser with position tracking
    parse_document: Convenience function returning a ParseResult
    SourcePosition: Immutable cursor value (offset, line, column)
"""

from .entities import decode_entity, escape_attribute, escape_text
from .parser import MarkupParser, SourcePosition, parse_document

__all__ = [
    "MarkupParser",
    "SourcePosition",
    "decode_entity",
    "escape_attribute",
    "escape_text",
    "parse_document",
]
