"""Command-line interface for xml-helper.

Provides the ``xml-helper`` console script with parse, validate, to-json and
from-json commands.
"""

from .main import main

__all__ = ["main"]
