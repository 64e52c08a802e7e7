"""Public facade and library adapters.

Key Components:
    XmlHelper: Schema-aware facade for parsing, validation and conversion
    to_etree / from_etree: Bridges to xml.etree.ElementTree and lxml.etree
"""

from .adapters import (
    ElementTreeAdapter,
    EtreeAdapter,
    LxmlAdapter,
    from_etree,
    get_adapter,
    is_lxml_available,
    to_etree,
)
from .helper import XmlHelper

__all__ = [
    "ElementTreeAdapter",
    "EtreeAdapter",
    "LxmlAdapter",
    "XmlHelper",
    "from_etree",
    "get_adapter",
    "is_lxml_available",
    "to_etree",
]
