"""Restriction facet evaluation.

Facets are evaluated independently of each other; every failing facet yields
one ``FacetViolation``. ``enumeration`` is accepted unconditionally.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, List, Optional, Pattern

from xml_helper.schema.model import FacetKind, Restriction
from xml_helper.shared import ErrorCode
from xml_helper.validation.types import BuiltinType


@dataclass(frozen=True)
class FacetViolation:
    code: ErrorCode
    message: str


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> Pattern[str]:
    """Compile a facet pattern, caching compiled expressions across calls."""
    return re.compile(pattern)


def _as_number(text: str) -> Optional[float]:
    """Read ``text`` as a decimal literal; other spellings are not numbers."""
    value = text.strip()
    if not BuiltinType.DECIMAL.is_valid(value):
        return None
    return float(value)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def check_facet(text: str, facet: Restriction, subject: str) -> Optional[FacetViolation]:
    """Evaluate a single facet against ``text``.

    Args:
        text: Value under test
        facet: Restriction to apply
        subject: Element name used in messages

    Returns:
        FacetViolation, or None when the facet holds or does not apply
    """
    kind = facet.kind

    if kind is FacetKind.MIN_LENGTH and _is_number(facet.value):
        if len(text) < facet.value:
            return FacetViolation(
                ErrorCode.MIN_LENGTH_VIOLATION,
                f"Value of '{subject}' has length {len(text)}, "
                f"below minimum length {facet.value}",
            )

    elif kind is FacetKind.MAX_LENGTH and _is_number(facet.value):
        if len(text) > facet.value:
            return FacetViolation(
                ErrorCode.MAX_LENGTH_VIOLATION,
                f"Value of '{subject}' has length {len(text)}, "
                f"above maximum length {facet.value}",
            )

    elif kind is FacetKind.PATTERN:
        source = facet.lexical or str(facet.value)
        try:
            compiled = compile_pattern(source)
        except re.error as e:
            return FacetViolation(
                ErrorCode.INVALID_PATTERN,
                f"Pattern '{source}' for '{subject}' is not a valid expression: {e}",
            )
        if compiled.fullmatch(text) is None:
            return FacetViolation(
                ErrorCode.PATTERN_VIOLATION,
                f"Value '{text}' of '{subject}' does not match pattern '{source}'",
            )

    elif kind in (FacetKind.MIN_INCLUSIVE, FacetKind.MAX_INCLUSIVE):
        number = _as_number(text)
        if number is None or not _is_number(facet.value):
            return None
        if kind is FacetKind.MIN_INCLUSIVE and number < facet.value:
            return FacetViolation(
                ErrorCode.MIN_INCLUSIVE_VIOLATION,
                f"Value {text} of '{subject}' is less than minimum {facet.value}",
            )
        if kind is FacetKind.MAX_INCLUSIVE and number > facet.value:
            return FacetViolation(
                ErrorCode.MAX_INCLUSIVE_VIOLATION,
                f"Value {text} of '{subject}' is greater than maximum {facet.value}",
            )

    # enumeration is parsed but not enforced
    return None


def check_facets(
    text: str, facets: Iterable[Restriction], subject: str
) -> List[FacetViolation]:
    """Evaluate every facet against ``text`` and collect the violations."""
    violations = []
    for facet in facets:
        violation = check_facet(text, facet, subject)
        if violation is not None:
            violations.append(violation)
    return violations
