"""Convenience conversions layered on top of ``TypeConverterRegistry.convert``."""

from typing import Any, Optional, TypeVar

from typed_microdom.typeconvert.errors import TypeConverterError
from typed_microdom.typeconvert.registry import TypeConverterRegistry
from typed_microdom.typeconvert.types import ArrayKind, PrimitiveArray, TypeKey

T = TypeVar("T")


def convert_or_default(registry: TypeConverterRegistry, value: Any,
                       destination: TypeKey, default: T) -> Any:
    """Convert ``value``; return ``default`` on any conversion failure or ``None`` result."""
    try:
        result = registry.convert(value, destination)
    except TypeConverterError:
        return default
    return default if result is None else result


def convert_to_bool(registry: TypeConverterRegistry, value: Any) -> Optional[bool]:
    return registry.convert(value, bool)


def convert_to_int(registry: TypeConverterRegistry, value: Any) -> Optional[int]:
    result = registry.convert(value, int)
    # bool passes the isinstance short-circuit unchanged
    return int(result) if isinstance(result, bool) else result


def convert_to_float(registry: TypeConverterRegistry, value: Any) -> Optional[float]:
    return registry.convert(value, float)


def convert_to_str(registry: TypeConverterRegistry, value: Any) -> Optional[str]:
    return registry.convert(value, str)


def convert_to_list(registry: TypeConverterRegistry, value: Any) -> Optional[list]:
    return registry.convert(value, list)


def convert_to_array(registry: TypeConverterRegistry, value: Any,
                     kind: ArrayKind) -> Optional[PrimitiveArray]:
    """Convert ``value`` to a primitive array of ``kind``."""
    return registry.convert(value, kind)
