"""Configuration classes for xml-helper.

Conversion options control how documents are turned into plain Python data
and back; the global section controls logging. ``HelperConfig`` aggregates
everything and is what the facade and the command-line tool consume.
"""

import json
from dataclasses import dataclass, field, fields, is_dataclass, replace
from typing import Any, Dict, List, Optional

from .exceptions import XmlHelperError

VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_COMPONENT_FIELDS = ("xml_to_dict", "dict_to_xml", "global_")


@dataclass
class XmlToDictOptions:
    """Options for converting a document tree into plain Python data."""

    preserve_attributes: bool = True
    attribute_prefix: str = "@"
    text_key: str = "#text"
    ignore_namespaces: bool = False
    coerce_values: bool = True

    def __post_init__(self) -> None:
        """Validate conversion options."""
        if not self.text_key:
            raise ValueError("text_key cannot be empty")
        if self.preserve_attributes and self.attribute_prefix == self.text_key:
            raise ValueError("attribute_prefix and text_key must differ")


@dataclass
class DictToXmlOptions:
    """Options for building a document from plain Python data."""

    attribute_prefix: str = "@"
    text_key: str = "#text"
    root_element: str = "root"
    declaration: bool = True
    indent: str = "  "

    def __post_init__(self) -> None:
        """Validate conversion options."""
        if not self.attribute_prefix:
            raise ValueError("attribute_prefix cannot be empty")
        if not self.text_key:
            raise ValueError("text_key cannot be empty")
        if not self.root_element:
            raise ValueError("root_element cannot be empty")
        if self.indent.strip():
            raise ValueError("indent must contain only whitespace")


@dataclass
class GlobalConfig:
    """Settings that apply across all components."""

    logging_level: str = "WARNING"
    enable_correlation_tracking: bool = True

    def __post_init__(self) -> None:
        """Validate global configuration."""
        if self.logging_level not in VALID_LOGGING_LEVELS:
            raise ValueError(f"logging_level must be one of {VALID_LOGGING_LEVELS}")


class ConfigError(XmlHelperError):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class HelperConfig:
    """Complete configuration for the xml-helper facade and CLI.

    Immutable; use ``override`` to derive a modified copy.
    """

    xml_to_dict: XmlToDictOptions = field(default_factory=XmlToDictOptions)
    dict_to_xml: DictToXmlOptions = field(default_factory=DictToXmlOptions)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete configuration."""
        try:
            self.xml_to_dict.__post_init__()
            self.dict_to_xml.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        if (
            self.xml_to_dict.attribute_prefix != self.dict_to_xml.attribute_prefix
            or self.xml_to_dict.text_key != self.dict_to_xml.text_key
        ):
            raise ConfigValidationError(
                "Conversion options use different attribute prefixes or text keys",
                suggestions=[
                    "Use the same attribute_prefix in xml_to_dict and dict_to_xml",
                    "Use the same text_key in xml_to_dict and dict_to_xml",
                ],
            )

    def override(self, **kwargs: Any) -> "HelperConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Field overrides; nested fields use ``component__field``

        Returns:
            New HelperConfig instance with overrides applied

        Example:
            >>> config = HelperConfig().override(
            ...     dict_to_xml__declaration=False,
            ...     global___logging_level="DEBUG",
            ... )
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            component, sep, field_name = key.partition("__")
            if sep and component in _COMPONENT_FIELDS:
                nested_overrides.setdefault(component, {})[field_name] = value
            elif sep and component == "global" and field_name.startswith("_"):
                # "global___level" splits as ("global", "_level")
                nested_overrides.setdefault("global_", {})[field_name[1:]] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = {}
        try:
            for component, values in nested_overrides.items():
                new_fields[component] = replace(getattr(self, component), **values)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

        new_fields.update(top_level)
        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if is_dataclass(obj):
                return {f.name: _dataclass_to_dict(getattr(obj, f.name)) for f in fields(obj)}
            return obj

        return _dataclass_to_dict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HelperConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos in configuration files surface
        instead of being silently ignored.
        """
        component_types = {
            "xml_to_dict": XmlToDictOptions,
            "dict_to_xml": DictToXmlOptions,
            "global_": GlobalConfig,
        }
        known = set(component_types) | {"name"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                field_name=unknown[0],
            )

        values: Dict[str, Any] = {}
        try:
            for key, component_type in component_types.items():
                if key in data:
                    values[key] = component_type(**data[key])
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

        if "name" in data:
            values["name"] = data["name"]
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "HelperConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    @classmethod
    def compact(cls) -> "HelperConfig":
        """Preset producing XML without declaration or indentation."""
        return cls(
            dict_to_xml=DictToXmlOptions(declaration=False, indent=""),
            name="compact",
        )

    @classmethod
    def namespace_agnostic(cls) -> "HelperConfig":
        """Preset that drops namespace prefixes when converting to dicts."""
        return cls(
            xml_to_dict=XmlToDictOptions(ignore_namespaces=True),
            name="namespace_agnostic",
        )
