"""Entity reference decoding and markup escaping.

Only the five predefined entities and numeric character references are
decoded; any other entity name is kept literally as ``&name;``.
"""

import re

PREDEFINED_ENTITIES = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
}

_DECIMAL_REFERENCE = re.compile(r"#([0-9]+)")
_HEX_REFERENCE = re.compile(r"#[xX]([0-9a-fA-F]+)")

MAX_CODE_POINT = 0x10FFFF


def decode_entity(name: str) -> str:
    """Decode the body of an ``&name;`` reference.

    Args:
        name: Text between ``&`` and ``;``

    Returns:
        The replacement text

    Raises:
        ValueError: If a numeric reference is malformed or out of range
    """
    if name in PREDEFINED_ENTITIES:
        return PREDEFINED_ENTITIES[name]

    if not name.startswith("#"):
        return f"&{name};"

    hex_match = _HEX_REFERENCE.fullmatch(name)
    if hex_match:
        code_point = int(hex_match.group(1), 16)
    else:
        decimal_match = _DECIMAL_REFERENCE.fullmatch(name)
        if not decimal_match:
            raise ValueError(f"Invalid character reference '&{name};'")
        code_point = int(decimal_match.group(1))

    if code_point == 0 or code_point > MAX_CODE_POINT:
        raise ValueError(f"Character reference '&{name};' is out of range")
    return chr(code_point)


def escape_text(text: str) -> str:
    """Escape character data for element content."""
    return (text
            .replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;"))


def escape_attribute(value: str) -> str:
    """Escape a value for use inside a double-quoted attribute."""
    return (value
            .replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;")
            .replace('"', "&quot;")
            .replace("'", "&apos;"))
