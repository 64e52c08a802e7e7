"""Build ``Node`` trees and markup from plain Python data.

Keys starting with the attribute prefix become attributes, the text key
becomes element text and every other key becomes a child element. Lists
repeat the element they are stored under.
"""

from typing import Any, Dict, List, Mapping, Optional

from xml_helper.conversion.serializer import TreeSerializer
from xml_helper.parsing.parser import is_name_char, is_name_start_char
from xml_helper.shared import ConversionError, DictToXmlOptions, get_logger
from xml_helper.tree import Node

# Element name used for items of a list passed as the whole document
ROOT_LIST_ITEM = "item"


def is_valid_name(name: str) -> bool:
    """Check if ``name`` can be used as an element or attribute name."""
    if not name or not is_name_start_char(name[0]):
        return False
    return all(is_name_char(char) for char in name[1:])


def format_scalar(value: Any) -> Optional[str]:
    """Render a scalar as element or attribute text; None stays None."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class DictToTreeConverter:
    """Convert dicts, lists and scalars into a tree or markup text.

    Examples:
        >>> DictToTreeConverter().to_xml({"@id": 1, "name": "Ann"}, "person")
        '<?xml version="1.0" encoding="UTF-8"?>\\n<person id="1">\\n  <name>Ann</name>\\n</person>\\n'
    """

    def __init__(
        self,
        options: Optional[DictToXmlOptions] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the converter.

        Args:
            options: Conversion options, defaults when omitted
            correlation_id: Optional correlation ID for request tracking
        """
        self.options = options or DictToXmlOptions()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "dict_to_tree")

    def to_tree(self, data: Any, root_element: Optional[str] = None) -> Node:
        """Build a tree from ``data``.

        Args:
            data: Dict, list or scalar
            root_element: Root element name, ``options.root_element`` when omitted

        Returns:
            Root node

        Raises:
            ConversionError: If a key is not a valid element or attribute name
        """
        root_name = root_element or self.options.root_element
        with self.logger.timed("dict_to_tree", root=root_name):
            if isinstance(data, (list, tuple)):
                self._check_name(root_name, root_name)
                children = [
                    self._build(item, ROOT_LIST_ITEM, f"{root_name}/{ROOT_LIST_ITEM}")
                    for item in data
                ]
                return Node(name=root_name, children=children)
            return self._build(data, root_name, root_name)

    def to_xml(self, data: Any, root_element: Optional[str] = None) -> str:
        """Build a tree from ``data`` and serialize it."""
        tree = self.to_tree(data, root_element)
        serializer = TreeSerializer(
            indent=self.options.indent,
            declaration=self.options.declaration,
            correlation_id=self.correlation_id,
        )
        return serializer.serialize(tree)

    def _check_name(self, name: str, path: str) -> None:
        if not is_valid_name(name):
            raise ConversionError(f"'{name}' is not a valid XML name (at {path})", path=path)

    def _build(self, value: Any, name: str, path: str) -> Node:
        self._check_name(name, path)
        if isinstance(value, Mapping):
            return self._build_mapping(value, name, path)
        if isinstance(value, (list, tuple)):
            raise ConversionError(f"Nested list under '{name}' has no element name", path=path)
        return Node(name=name, text=format_scalar(value))

    def _build_mapping(self, data: Mapping, name: str, path: str) -> Node:
        prefix = self.options.attribute_prefix
        attributes: Dict[str, str] = {}
        children: List[Node] = []
        text: Optional[str] = None

        for key, value in data.items():
            key = str(key)
            if key == self.options.text_key:
                text = format_scalar(value)
            elif key.startswith(prefix):
                attribute = key[len(prefix):]
                self._check_name(attribute, f"{path}/{key}")
                attributes[attribute] = format_scalar(value) or ""
            elif isinstance(value, (list, tuple)):
                child_path = f"{path}/{key}"
                children.extend(self._build(item, key, child_path) for item in value)
            else:
                children.append(self._build(value, key, f"{path}/{key}"))

        if text and children:
            children.insert(0, Node.text_node(text))
            text = None
        return Node(name=name, attributes=attributes, children=children, text=text or None)
