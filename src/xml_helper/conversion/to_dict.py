"""Convert ``Node`` trees into plain Python data.

The result is JSON-compatible: attributes become prefixed keys, repeated
child elements become lists and text collapses into scalars where nothing
else is attached to the element.
"""

import re
from typing import Any, Dict, List, Optional

from xml_helper.shared import XmlToDictOptions, get_logger
from xml_helper.tree import Node, is_namespace_declaration, local_name

_INTEGER = re.compile(r"-?\d+")
_DECIMAL = re.compile(r"-?\d*\.?\d+")


def coerce_scalar(value: str) -> Any:
    """Convert text to bool, None, int or float when it is written canonically.

    Canonical means the value prints back unchanged, so ``"007"`` and ``"1.50"``
    stay strings.

    Examples:
        >>> coerce_scalar("42"), coerce_scalar("19.99"), coerce_scalar("007")
        (42, 19.99, '007')
    """
    if value == "true":
        return True
    if value == "false":
        return False
    if value == "null":
        return None

    if _INTEGER.fullmatch(value):
        number = int(value)
        if str(number) == value:
            return number

    if _DECIMAL.fullmatch(value):
        decimal = float(value)
        if repr(decimal) == value:
            return decimal

    return value


class TreeToDictConverter:
    """Convert a tree into nested dicts, lists and scalars."""

    def __init__(
        self,
        options: Optional[XmlToDictOptions] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the converter.

        Args:
            options: Conversion options, defaults when omitted
            correlation_id: Optional correlation ID for request tracking
        """
        self.options = options or XmlToDictOptions()
        self.logger = get_logger(__name__, correlation_id, "tree_to_dict")

    def convert(self, node: Node) -> Any:
        """Convert ``node`` (without its own name) into plain data.

        Args:
            node: Element to convert

        Returns:
            Dict for structured elements, scalar for text-only elements
        """
        with self.logger.timed("tree_to_dict", root=node.name):
            return self._convert_node(node)

    def _name(self, name: str) -> str:
        return local_name(name) if self.options.ignore_namespaces else name

    def _value(self, text: str) -> Any:
        return coerce_scalar(text) if self.options.coerce_values else text

    def _convert_node(self, node: Node) -> Any:
        if node.text is not None and not node.children and not node.attributes:
            return self._value(node.text)

        result: Dict[str, Any] = {}
        text_key = self.options.text_key

        if self.options.preserve_attributes:
            for name, value in node.attributes.items():
                if self.options.ignore_namespaces and is_namespace_declaration(name):
                    continue
                result[self.options.attribute_prefix + self._name(name)] = self._value(value)

        if node.text is not None:
            result[text_key] = self._value(node.text)

        text_runs: List[str] = []
        groups: Dict[str, List[Any]] = {}
        for child in node.children:
            if child.is_text:
                if child.text:
                    text_runs.append(child.text)
                continue
            groups.setdefault(self._name(child.name), []).append(self._convert_node(child))

        if text_runs:
            result[text_key] = self._value(" ".join(text_runs))

        for name, values in groups.items():
            result[name] = values[0] if len(values) == 1 else values

        if len(result) == 1 and text_key in result:
            return result[text_key]
        return result
