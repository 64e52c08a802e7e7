"""Recursive-descent markup parser.

Turns document text into a ``Node`` tree in a single linear pass. The parser
is fail-fast: the first structural problem produces exactly one
``PARSE_ERROR`` diagnostic at the cursor position and no tree.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from xml_helper.parsing.entities import decode_entity
from xml_helper.shared import (
    ErrorCode,
    MarkupSyntaxError,
    ParseResult,
    get_logger,
    make_error,
)
from xml_helper.tree import Node

WHITESPACE = " \t\n\r"

XML_DECLARATION_START = "<?xml"
COMMENT_START = "<!--"
COMMENT_END = "-->"
DOCTYPE_START = "<!DOCTYPE"
PI_START = "<?"
PI_END = "?>"
END_TAG_START = "</"

# Upper bound on text included in log records
PREVIEW_LENGTH = 80


@dataclass(frozen=True)
class SourcePosition:
    """Immutable cursor into the source text (offset 0-based, line/column 1-based)."""

    offset: int = 0
    line: int = 1
    column: int = 1

    def after(self, char: str) -> "SourcePosition":
        """Position following ``char`` consumed at this position."""
        if char == "\n":
            return SourcePosition(self.offset + 1, self.line + 1, 1)
        return SourcePosition(self.offset + 1, self.line, self.column + 1)


def is_name_start_char(char: str) -> bool:
    """Check if character can start an element or attribute name."""
    if not char:
        return False
    if char == "_" or ("a" <= char <= "z") or ("A" <= char <= "Z"):
        return True
    code = ord(char)
    return 0xC0 <= code <= 0xD6 or 0xD8 <= code <= 0xF6 or code >= 0xF8


def is_name_char(char: str) -> bool:
    """Check if character can continue a name."""
    return is_name_start_char(char) or char.isdigit() or char in ":.-"


def _describe(char: str) -> str:
    return f"'{char}'" if char else "end of input"


class MarkupParser:
    """Fail-fast markup parser with line/column tracking.

    Cursor state lives on the instance and is reset by every ``parse`` call,
    so one parser can be reused sequentially but not from several threads at
    once.

    Examples:
        >>> result = MarkupParser().parse('<root><item id="1">value</item></root>')
        >>> result.node.find_child("item").text
        'value'
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        """Initialize the parser.

        Args:
            correlation_id: Optional correlation ID for request tracking
        """
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "markup_parser")
        self._reset_state("")

    def _reset_state(self, text: str) -> None:
        self._text = text
        self._length = len(text)
        self.position = SourcePosition()

    def parse(self, text: str) -> ParseResult:
        """Parse document text into a tree.

        Args:
            text: Complete document text

        Returns:
            ParseResult with the root node, or no node and one PARSE_ERROR
        """
        self._reset_state(text)

        with self.logger.timed("parse", content_length=len(text)) as summary:
            try:
                self._skip_prolog()
                root = self._parse_element()
            except MarkupSyntaxError as e:
                summary["error"] = e.message
                self.logger.debug(
                    "Document rejected",
                    extra={
                        "line": e.line,
                        "column": e.column,
                        "preview": text[:PREVIEW_LENGTH],
                    },
                )
                return ParseResult(
                    node=None,
                    errors=[make_error(ErrorCode.PARSE_ERROR, e.message, e.line, e.column)],
                )
            except RecursionError:
                summary["error"] = "nesting too deep"
                return ParseResult(
                    node=None,
                    errors=[make_error(
                        ErrorCode.PARSE_ERROR,
                        "Element nesting is too deep to parse",
                        self.position.line,
                        self.position.column,
                    )],
                )

            summary["root"] = root.name
            return ParseResult(node=root, errors=[])

    # Cursor primitives

    def _current(self) -> str:
        offset = self.position.offset
        return self._text[offset] if offset < self._length else ""

    def _peek(self, distance: int = 1) -> str:
        offset = self.position.offset + distance
        return self._text[offset] if offset < self._length else ""

    def _at_end(self) -> bool:
        return self.position.offset >= self._length

    def _looking_at(self, literal: str) -> bool:
        return self._text.startswith(literal, self.position.offset)

    def _advance(self, count: int = 1) -> None:
        """Consume ``count`` characters; the only place the cursor moves."""
        for _ in range(count):
            if self._at_end():
                return
            self.position = self.position.after(self._current())

    def _error(self, message: str) -> MarkupSyntaxError:
        return MarkupSyntaxError(message, self.position.line, self.position.column)

    def _expect(self, char: str, context: str) -> None:
        if self._current() != char:
            raise self._error(
                f"Expected '{char}' {context} but found {_describe(self._current())}"
            )
        self._advance()

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self._current() in WHITESPACE:
            self._advance()

    def _skip_until(self, terminator: str, what: str) -> None:
        """Consume up to and including ``terminator``."""
        while not self._at_end():
            if self._looking_at(terminator):
                self._advance(len(terminator))
                return
            self._advance()
        raise self._error(f"Unterminated {what}")

    # Prolog

    def _skip_prolog(self) -> None:
        """Skip declaration, comments, DOCTYPE and PIs before the root element."""
        self._skip_whitespace()
        if self._looking_at(XML_DECLARATION_START):
            self._skip_until(PI_END, "XML declaration")
            self._skip_whitespace()

        while self._current() == "<":
            if self._looking_at(COMMENT_START):
                self._skip_until(COMMENT_END, "comment")
            elif self._looking_at(DOCTYPE_START):
                self._skip_doctype()
            elif self._looking_at(PI_START):
                self._skip_until(PI_END, "processing instruction")
            else:
                break
            self._skip_whitespace()

    def _skip_doctype(self) -> None:
        """Skip a DOCTYPE block, counting nested angle brackets."""
        depth = 0
        while not self._at_end():
            char = self._current()
            self._advance()
            if char == "<":
                depth += 1
            elif char == ">":
                depth -= 1
                if depth == 0:
                    return
        raise self._error("Unterminated DOCTYPE declaration")

    # Elements

    def _parse_element(self) -> Node:
        start = self.position
        if self._current() != "<":
            raise self._error(f"Expected '<' but found {_describe(self._current())}")
        self._advance()

        if self._current() == "/":
            raise self._error("Unexpected end tag")

        name = self._parse_name()
        attributes = self._parse_attributes()
        self._skip_whitespace()

        if self._current() == "/" and self._peek() == ">":
            self._advance(2)
            return self._build_node(name, attributes, [], "", start)

        self._expect(">", f"to close start tag '{name}'")
        return self._parse_content(name, attributes, start)

    def _parse_content(
        self, name: str, attributes: Dict[str, str], start: SourcePosition
    ) -> Node:
        children: List[Node] = []
        text_parts: List[str] = []
        text_start: Optional[SourcePosition] = None

        while True:
            if self._at_end():
                raise self._error(f"Unexpected end of input: missing end tag for '{name}'")

            char = self._current()
            if char == "<":
                if self._looking_at(END_TAG_START):
                    break
                if self._looking_at(COMMENT_START):
                    self._skip_until(COMMENT_END, "comment")
                    continue
                if self._looking_at(PI_START):
                    self._skip_until(PI_END, "processing instruction")
                    continue
                if self._peek() == "!":
                    raise self._error("Unsupported markup declaration in element content")

                text = "".join(text_parts).strip()
                if text:
                    children.append(Node.text_node(text, text_start.line, text_start.column))
                text_parts = []
                text_start = None
                children.append(self._parse_element())
                continue

            if text_start is None and char not in WHITESPACE:
                text_start = self.position
            if char == "&":
                text_parts.append(self._parse_reference())
            else:
                text_parts.append(char)
                self._advance()

        self._parse_end_tag(name)

        trailing = "".join(text_parts).strip()
        if trailing and children:
            children.append(Node.text_node(trailing, text_start.line, text_start.column))
            trailing = ""
        return self._build_node(name, attributes, children, trailing, start)

    def _parse_end_tag(self, expected_name: str) -> None:
        self._advance(len(END_TAG_START))
        end_name = self._parse_name()
        if end_name != expected_name:
            raise self._error(
                f"End tag '{end_name}' does not match start tag '{expected_name}'"
            )
        self._skip_whitespace()
        self._expect(">", f"in end tag '{end_name}'")

    def _build_node(
        self,
        name: str,
        attributes: Dict[str, str],
        children: List[Node],
        text: str,
        start: SourcePosition,
    ) -> Node:
        prefix, sep, _ = name.partition(":")
        declaration = f"xmlns:{prefix}" if sep else "xmlns"
        return Node(
            name=name,
            attributes=attributes,
            children=children,
            text=text or None,
            namespace=attributes.get(declaration),
            line=start.line,
            column=start.column,
        )

    # Attributes, names, references

    def _parse_attributes(self) -> Dict[str, str]:
        attributes: Dict[str, str] = {}
        while True:
            self._skip_whitespace()
            if self._at_end():
                raise self._error("Unexpected end of input inside start tag")
            if self._current() in ">/":
                return attributes

            name = self._parse_name()
            if name in attributes:
                raise self._error(f"Duplicate attribute '{name}'")
            self._skip_whitespace()
            if self._current() != "=":
                raise self._error(f"Expected '=' after attribute name '{name}'")
            self._advance()
            self._skip_whitespace()
            attributes[name] = self._parse_attribute_value()

    def _parse_attribute_value(self) -> str:
        quote = self._current()
        if quote not in ("'", '"'):
            raise self._error(f"Expected quote but found {_describe(quote)}")
        self._advance()

        parts: List[str] = []
        while self._current() != quote:
            if self._at_end():
                raise self._error("Unterminated attribute value")
            if self._current() == "&":
                parts.append(self._parse_reference())
            else:
                parts.append(self._current())
                self._advance()

        self._advance()
        return "".join(parts)

    def _parse_name(self) -> str:
        first = self._current()
        if not first:
            raise self._error("Expected a name but found end of input")
        if not is_name_start_char(first):
            raise self._error(f"Invalid name start character: '{first}'")

        begin = self.position.offset
        while not self._at_end() and is_name_char(self._current()):
            self._advance()
        return self._text[begin:self.position.offset]

    def _parse_reference(self) -> str:
        """Consume ``&name;`` and return its replacement text."""
        self._advance()
        begin = self.position.offset
        while not self._at_end() and self._current() != ";":
            self._advance()
        entity = self._text[begin:self.position.offset]

        if self._at_end():
            raise self._error("Unterminated entity reference")
        try:
            replacement = decode_entity(entity)
        except ValueError as e:
            raise self._error(str(e)) from e
        self._advance()
        return replacement


def parse_document(text: str, correlation_id: Optional[str] = None) -> ParseResult:
    """Parse document text into a tree.

    Args:
        text: Complete document text
        correlation_id: Optional correlation ID for request tracking

    Returns:
        ParseResult; ``node`` is None and ``errors`` holds one PARSE_ERROR
        when the text is malformed

    Examples:
        >>> parse_document("<unclosed><tag>content</unclosed>").errors[0].code
        'PARSE_ERROR'
    """
    return MarkupParser(correlation_id).parse(text)
