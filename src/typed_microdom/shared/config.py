"""Configuration classes for typed micro DOM processing.

This module provides configuration objects for the type converter registry,
the micro DOM reader and the micro DOM writer, plus an immutable aggregate
that bundles them.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class DuplicateRulePolicy(Enum):
    """What to do when an exact conversion rule is registered twice."""

    FAIL = auto()        # Raise DuplicateRuleError, keep the first rule
    OVERWRITE = auto()   # Last registration wins


class EXMLSerializeComments(Enum):
    """Whether comment nodes are written out."""

    EMIT = auto()
    IGNORE = auto()

    @property
    def is_emit(self) -> bool:
        return self is EXMLSerializeComments.EMIT


@dataclass
class TypeConverterConfig:
    """Configuration for the type converter registry."""

    duplicate_policy: DuplicateRulePolicy = DuplicateRulePolicy.FAIL
    log_registrations: bool = True
    allow_none_source: bool = True

    def __post_init__(self) -> None:
        """Validate type converter configuration."""
        if not isinstance(self.duplicate_policy, DuplicateRulePolicy):
            raise ValueError("duplicate_policy must be a DuplicateRulePolicy")


@dataclass
class XMLReaderSettings:
    """Configuration for building micro DOM trees from XML input."""

    keep_comments: bool = True
    remove_blank_text: bool = False
    resolve_entities: bool = False
    huge_tree: bool = False
    max_depth: int = 1000

    def __post_init__(self) -> None:
        """Validate reader settings."""
        if self.max_depth <= 0:
            raise ValueError("max_depth must be > 0")


@dataclass
class XMLWriterSettings:
    """Configuration for serializing micro DOM trees."""

    serialize_comments: EXMLSerializeComments = EXMLSerializeComments.EMIT
    indent: bool = True
    encoding: str = "utf-8"
    xml_declaration: bool = True

    def __post_init__(self) -> None:
        """Validate writer settings."""
        if not self.encoding:
            raise ValueError("encoding cannot be empty")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


_COMPONENTS = ["typeconvert", "reader", "writer"]


@dataclass(frozen=True)
class ToolkitConfig:
    """Comprehensive configuration for all toolkit components.

    Immutable, so a single instance can be shared between the registry,
    readers and writers. ``create_default_registry``, ``MicroDomBuilder``,
    the ``read_micro_dom_*`` functions and ``MicroWriter`` accept it in place
    of their own settings object and pick their component. Use ``override``
    to derive variants.
    """

    typeconvert: TypeConverterConfig = field(default_factory=TypeConverterConfig)
    reader: XMLReaderSettings = field(default_factory=XMLReaderSettings)
    writer: XMLWriterSettings = field(default_factory=XMLWriterSettings)

    def __post_init__(self) -> None:
        """Validate the complete configuration."""
        try:
            self.typeconvert.__post_init__()
            self.reader.__post_init__()
            self.writer.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        if self.reader.resolve_entities and self.reader.huge_tree:
            raise ConfigValidationError(
                "Entity resolution cannot be combined with huge_tree",
                field_name="reader",
                suggestions=["Disable reader.resolve_entities",
                             "Disable reader.huge_tree"],
            )

    def override(self, **kwargs: Any) -> "ToolkitConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Keyword arguments for configuration fields to override

        Returns:
            New ToolkitConfig instance with overrides applied

        Example:
            >>> config = ToolkitConfig()
            >>> new_config = config.override(
            ...     typeconvert__duplicate_policy=DuplicateRulePolicy.OVERWRITE,
            ...     writer__indent=False
            ... )
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=list(_COMPONENTS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                raise ConfigValidationError(
                    f"Overrides must name a component field: {key}",
                    field_name=key,
                    suggestions=[f"{component}__{key}" for component in _COMPONENTS],
                )

        new_fields: Dict[str, Any] = {}
        for component in _COMPONENTS:
            current_config = getattr(self, component)
            if component in nested_overrides:
                try:
                    new_fields[component] = replace(
                        current_config, **nested_overrides[component]
                    )
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=component) from e
            else:
                new_fields[component] = current_config

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            if isinstance(obj, (list, tuple, set)):
                return [_dataclass_to_dict(item) for item in obj]
            if isinstance(obj, dict):
                return {key: _dataclass_to_dict(value) for key, value in obj.items()}
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ToolkitConfig":
        """Create configuration from dictionary.

        Nested components are rebuilt from their own dictionaries and enum
        fields are accepted by member name.
        """
        def _dict_to_dataclass(data_dict: Dict[str, Any], target_class: type) -> Any:
            if not hasattr(target_class, "__dataclass_fields__"):
                return data_dict

            field_values: Dict[str, Any] = {}
            for field_name, field_info in target_class.__dataclass_fields__.items():
                if field_name not in data_dict:
                    continue
                value = data_dict[field_name]
                field_type = field_info.type

                if hasattr(field_type, "__dataclass_fields__"):
                    field_values[field_name] = _dict_to_dataclass(value, field_type)
                elif hasattr(field_type, "__members__") and isinstance(value, str):
                    try:
                        field_values[field_name] = field_type[value]
                    except KeyError as e:
                        raise ConfigValidationError(
                            f"Invalid value {value!r} for {field_name}",
                            field_name=field_name,
                            suggestions=list(field_type.__members__),
                        ) from e
                else:
                    field_values[field_name] = value

            return target_class(**field_values)

        try:
            result = _dict_to_dataclass(data, cls)
        except ValueError as e:
            if isinstance(e, ConfigValidationError):
                raise
            raise ConfigValidationError(str(e)) from e
        if not isinstance(result, cls):
            raise ConfigValidationError(f"Failed to deserialize to {cls.__name__}")
        return result

    @classmethod
    def from_json(cls, json_str: str) -> "ToolkitConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def strict(cls) -> "ToolkitConfig":
        """Create preset that fails fast on duplicate rules and keeps all nodes."""
        return cls(
            typeconvert=TypeConverterConfig(
                duplicate_policy=DuplicateRulePolicy.FAIL,
                allow_none_source=False,
            ),
            reader=XMLReaderSettings(keep_comments=True),
        )

    @classmethod
    def lenient(cls) -> "ToolkitConfig":
        """Create preset where later rule registrations replace earlier ones."""
        return cls(
            typeconvert=TypeConverterConfig(
                duplicate_policy=DuplicateRulePolicy.OVERWRITE,
                log_registrations=False,
            ),
            reader=XMLReaderSettings(keep_comments=False, remove_blank_text=True),
            writer=XMLWriterSettings(
                serialize_comments=EXMLSerializeComments.IGNORE
            ),
        )
