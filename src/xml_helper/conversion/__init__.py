"""Conversion between document trees, plain Python data and markup text.

Key Components:
    TreeToDictConverter: Node tree to dicts, lists and scalars
    DictToTreeConverter: Plain data to Node tree or markup text
    TreeSerializer: Node tree to markup text
"""

from .from_dict import DictToTreeConverter, format_scalar, is_valid_name
from .serializer import TreeSerializer, serialize
from .to_dict import TreeToDictConverter, coerce_scalar

__all__ = [
    "DictToTreeConverter",
    "TreeSerializer",
    "TreeToDictConverter",
    "coerce_scalar",
    "format_scalar",
    "is_valid_name",
    "serialize",
]
