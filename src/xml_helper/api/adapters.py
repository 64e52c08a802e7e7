"""Adapters between ``Node`` trees and ElementTree-compatible libraries.

Two backends are provided: the standard library's ``xml.etree.ElementTree``
and ``lxml.etree``. lxml is optional and imported only when its adapter is
used.

Prefixed names are mapped to ``{uri}local`` using the ``xmlns`` declarations
in scope; declarations themselves become ``nsmap`` entries on lxml elements
and are dropped on ElementTree elements, which chooses its own prefixes.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from xml_helper.shared import ConversionError, get_logger
from xml_helper.tree import Node, is_namespace_declaration, split_qualified_name

Scope = Dict[str, str]


def _declarations(attributes: Dict[str, str]) -> Scope:
    declared: Scope = {}
    for name, value in attributes.items():
        if name == "xmlns":
            declared[""] = value
        elif name.startswith("xmlns:"):
            declared[name[len("xmlns:"):]] = value
    return declared


def _split_clark(tag: str) -> Tuple[Optional[str], str]:
    if tag.startswith("{"):
        uri, _, local = tag[1:].partition("}")
        return uri, local
    return None, tag


class EtreeAdapter(ABC):
    """Bidirectional conversion between ``Node`` and one etree implementation."""

    name = ""
    module_name = ""

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, f"{self.name}_adapter")

    def is_available(self) -> bool:
        """Check if the backing library can be imported."""
        try:
            self._load()
            return True
        except ImportError:
            return False

    @abstractmethod
    def _load(self) -> Any:
        """Import and return the etree module."""

    @abstractmethod
    def _make_element(self, etree: Any, tag: str, nsmap: Scope) -> Any:
        """Create an element; ``nsmap`` holds declarations made on it."""

    def _element_prefix(self, element: Any) -> Optional[str]:
        return None

    def to_etree(self, node: Node) -> Any:
        """Convert ``node`` and its descendants into an etree element.

        Raises:
            ConversionError: If the library is missing or a name is rejected
        """
        try:
            etree = self._load()
        except ImportError as e:
            raise ConversionError(f"{self.module_name} is not installed") from e

        try:
            element = self._convert_to(etree, node, {})
        except ValueError as e:
            raise ConversionError(f"Cannot convert to {self.module_name}: {e}") from e

        self.logger.debug("Converted tree to etree", extra={"root": node.name})
        return element

    def _qualify(self, name: str, scope: Scope, is_attribute: bool) -> str:
        prefix, local = split_qualified_name(name)
        if prefix is None:
            uri = None if is_attribute else scope.get("")
        else:
            uri = scope.get(prefix)
            if uri is None:
                return name
        return f"{{{uri}}}{local}" if uri else local

    def _convert_to(self, etree: Any, node: Node, parent_scope: Scope) -> Any:
        declared = _declarations(node.attributes)
        scope = {**parent_scope, **declared}

        element = self._make_element(etree, self._qualify(node.name, scope, False), declared)
        for name, value in node.attributes.items():
            if not is_namespace_declaration(name):
                element.set(self._qualify(name, scope, True), value)

        element.text = node.text
        previous = None
        for child in node.children:
            if child.is_text:
                if previous is None:
                    element.text = (element.text or "") + (child.text or "")
                else:
                    previous.tail = (previous.tail or "") + (child.text or "")
                continue
            previous = self._convert_to(etree, child, scope)
            element.append(previous)
        return element

    def from_etree(self, element: Any) -> Node:
        """Convert an etree element into a ``Node`` tree.

        Comments and processing instructions are dropped; surrounding text is
        kept. Whitespace-only text is ignored and other text is trimmed.
        """
        if not isinstance(getattr(element, "tag", None), str):
            raise ConversionError("Expected an element with a string tag")
        node = self._convert_from(element, {})
        self.logger.debug("Converted etree to tree", extra={"root": node.name})
        return node

    def _nsmap(self, element: Any) -> Scope:
        return {}

    def _name_from(self, tag: str, prefix: Optional[str]) -> Tuple[str, Optional[str]]:
        uri, local = _split_clark(tag)
        if uri is None:
            return local, None
        return (f"{prefix}:{local}" if prefix else local), uri

    def _convert_from(self, element: Any, parent_nsmap: Scope) -> Node:
        nsmap = self._nsmap(element)
        attributes: Dict[str, str] = {}
        for prefix, uri in nsmap.items():
            if parent_nsmap.get(prefix) != uri:
                attributes[f"xmlns:{prefix}" if prefix else "xmlns"] = uri

        reverse = {uri: prefix for prefix, uri in nsmap.items() if prefix}
        for key, value in element.attrib.items():
            uri, local = _split_clark(key)
            prefix = reverse.get(uri) if uri else None
            attributes[f"{prefix}:{local}" if prefix else local] = value

        name, namespace = self._name_from(element.tag, self._element_prefix(element))

        children: List[Node] = []
        text = (element.text or "").strip()
        element_children = [c for c in element if isinstance(c.tag, str)]
        if element_children and text:
            children.append(Node.text_node(text))
            text = ""

        for child in element:
            if isinstance(child.tag, str):
                children.append(self._convert_from(child, nsmap))
            tail = (child.tail or "").strip()
            if tail:
                if element_children:
                    children.append(Node.text_node(tail))
                else:
                    text = f"{text} {tail}".strip()

        return Node(
            name=name,
            attributes=attributes,
            children=children,
            text=text or None,
            namespace=namespace,
            line=getattr(element, "sourceline", None),
        )


class ElementTreeAdapter(EtreeAdapter):
    """Adapter for ``xml.etree.ElementTree`` (always available)."""

    name = "stdlib"
    module_name = "xml.etree.ElementTree"

    def _load(self) -> Any:
        import xml.etree.ElementTree as ET
        return ET

    def _make_element(self, etree: Any, tag: str, nsmap: Scope) -> Any:
        return etree.Element(tag)


class LxmlAdapter(EtreeAdapter):
    """Adapter for ``lxml.etree``; keeps prefixes through ``nsmap``."""

    name = "lxml"
    module_name = "lxml"

    def _load(self) -> Any:
        import lxml.etree
        return lxml.etree

    def _make_element(self, etree: Any, tag: str, nsmap: Scope) -> Any:
        mapping = {(prefix or None): uri for prefix, uri in nsmap.items()}
        return etree.Element(tag, nsmap=mapping or None)

    def _element_prefix(self, element: Any) -> Optional[str]:
        return element.prefix

    def _nsmap(self, element: Any) -> Scope:
        return {(prefix or ""): uri for prefix, uri in element.nsmap.items()}


ADAPTERS = {
    ElementTreeAdapter.name: ElementTreeAdapter,
    LxmlAdapter.name: LxmlAdapter,
}


def get_adapter(backend: str = "stdlib", correlation_id: Optional[str] = None) -> EtreeAdapter:
    """Get an adapter instance by backend name.

    Raises:
        ValueError: If the backend name is unknown
    """
    try:
        adapter_class = ADAPTERS[backend]
    except KeyError:
        raise ValueError(
            f"Unknown backend '{backend}', expected one of {sorted(ADAPTERS)}"
        ) from None
    return adapter_class(correlation_id)


def is_lxml_available() -> bool:
    """Check if lxml is installed."""
    return LxmlAdapter().is_available()


def to_etree(node: Node, backend: str = "stdlib") -> Any:
    """Convert a tree into an ElementTree or lxml element."""
    return get_adapter(backend).to_etree(node)


def from_etree(element: Any) -> Node:
    """Convert an ElementTree or lxml element into a tree.

    The backend is picked from the element's type, so lxml elements keep
    their namespace prefixes.
    """
    module = type(element).__module__ or ""
    backend = LxmlAdapter.name if module.startswith("lxml") else ElementTreeAdapter.name
    return get_adapter(backend).from_etree(element)
