"""Generic document tree produced by the parser.

A ``Node`` is either a markup element or a synthetic ``#text`` run. Children
are owned exclusively by their parent and there are no parent references, so
a tree is acyclic by construction and can be shared read-only.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

TEXT_NODE_NAME = "#text"


def split_qualified_name(name: str) -> Tuple[Optional[str], str]:
    """Split ``prefix:local`` into its parts; the prefix is None when absent."""
    prefix, sep, local = name.partition(":")
    if not sep:
        return None, name
    return prefix, local


def local_name(name: str) -> str:
    """Return ``name`` without its namespace prefix."""
    return split_qualified_name(name)[1]


def is_namespace_declaration(name: str) -> bool:
    """Check if an attribute name is an ``xmlns`` or ``xmlns:*`` declaration."""
    return name == "xmlns" or name.startswith("xmlns:")


@dataclass(eq=True)
class Node:
    """One element or text run in a parsed document.

    ``text`` is only populated on nodes without element children; mixed
    content is represented by ``#text`` children instead.
    """

    name: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List["Node"] = field(default_factory=list)
    text: Optional[str] = None
    namespace: Optional[str] = None

    # Position of the element's "<" in the source text, when parsed
    line: Optional[int] = field(default=None, compare=False)
    column: Optional[int] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        """Validate node values."""
        if not self.name:
            raise ValueError("Node name cannot be empty")

    @classmethod
    def text_node(
        cls, text: str, line: Optional[int] = None, column: Optional[int] = None
    ) -> "Node":
        """Create a synthetic ``#text`` child."""
        return cls(name=TEXT_NODE_NAME, text=text, line=line, column=column)

    @property
    def is_text(self) -> bool:
        """Check if this node is a synthetic text run."""
        return self.name == TEXT_NODE_NAME

    @property
    def local_name(self) -> str:
        """Get element name without namespace prefix."""
        return local_name(self.name)

    @property
    def prefix(self) -> Optional[str]:
        """Get namespace prefix if present."""
        return split_qualified_name(self.name)[0]

    @property
    def text_content(self) -> str:
        """Own text, else the text of the first ``#text`` child, else empty."""
        if self.text:
            return self.text
        for child in self.children:
            if child.is_text and child.text:
                return child.text
        return ""

    @property
    def has_position(self) -> bool:
        return self.line is not None and self.column is not None

    def element_children(self) -> List["Node"]:
        """Get direct children that are elements (not ``#text`` runs)."""
        return [child for child in self.children if not child.is_text]

    def find_child(self, name: str) -> Optional["Node"]:
        """Find first direct child element with matching name."""
        for child in self.children:
            if child.name == name:
                return child
        return None

    def find_children(self, name: str) -> List["Node"]:
        """Find all direct child elements with matching name."""
        return [child for child in self.children if child.name == name]

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get attribute value with optional default."""
        return self.attributes.get(name, default)

    def iter(self) -> Iterator["Node"]:
        """Iterate over this node and all descendants in document order."""
        yield self
        for child in self.children:
            yield from child.iter()

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to a structural dictionary (not the attribute/text
        keyed form produced by the converters)."""
        result: Dict[str, Any] = {"name": self.name}
        if self.attributes:
            result["attributes"] = dict(self.attributes)
        if self.text is not None:
            result["text"] = self.text
        if self.namespace is not None:
            result["namespace"] = self.namespace
        if self.has_position:
            result["position"] = {"line": self.line, "column": self.column}
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result
