"""Serialize ``Node`` trees back to markup text."""

from typing import List, Optional

from xml_helper.parsing.entities import escape_attribute, escape_text
from xml_helper.shared import get_logger
from xml_helper.tree import Node

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


class TreeSerializer:
    """Render a tree as markup.

    Element-only content is pretty-printed one element per line using
    ``indent``; an empty ``indent`` produces compact single-line output.
    ``#text`` children are written as their own lines between siblings.
    """

    def __init__(
        self,
        indent: str = "  ",
        declaration: bool = True,
        correlation_id: Optional[str] = None,
    ) -> None:
        if indent.strip():
            raise ValueError("indent must contain only whitespace")
        self.indent = indent
        self.declaration = declaration
        self.logger = get_logger(__name__, correlation_id, "tree_serializer")

    @property
    def _newline(self) -> str:
        return "\n" if self.indent else ""

    def serialize(self, node: Node) -> str:
        """Serialize ``node`` and its descendants.

        Args:
            node: Root element to render

        Returns:
            Markup text, prefixed with an XML declaration when enabled
        """
        parts: List[str] = []
        if self.declaration:
            parts.append(XML_DECLARATION + "\n")
        self._write_element(node, 0, parts)

        output = "".join(parts)
        self.logger.debug(
            "Tree serialized",
            extra={"root": node.name, "output_length": len(output)},
        )
        return output

    def _write_element(self, node: Node, depth: int, parts: List[str]) -> None:
        indent = self.indent * depth
        newline = self._newline

        if node.is_text:
            parts.append(f"{indent}{escape_text(node.text or '')}{newline}")
            return

        tag_parts = [node.name]
        for name, value in node.attributes.items():
            tag_parts.append(f'{name}="{escape_attribute(value)}"')
        opening = " ".join(tag_parts)

        if not node.children:
            if node.text:
                parts.append(
                    f"{indent}<{opening}>{escape_text(node.text)}</{node.name}>{newline}"
                )
            else:
                parts.append(f"{indent}<{opening}/>{newline}")
            return

        parts.append(f"{indent}<{opening}>{newline}")
        for child in node.children:
            self._write_element(child, depth + 1, parts)
        parts.append(f"{indent}</{node.name}>{newline}")


def serialize(node: Node, indent: str = "  ", declaration: bool = True) -> str:
    """Serialize ``node`` with a one-off ``TreeSerializer``."""
    return TreeSerializer(indent=indent, declaration=declaration).serialize(node)
