"""Built-in conversion rules and registry bootstrap.

Registrars populate a ``TypeConverterRegistry`` during start-up. The
registry never looks for registrars on its own: callers either pass them to
``create_default_registry`` or call ``register_type_converter`` themselves.
Third-party packages may advertise registrars under the
``typed_microdom.registrars`` entry point group; ``load_registrars`` resolves
them on request.
"""

import base64
import binascii
from abc import ABC, abstractmethod
from collections import deque
from decimal import Decimal
from fractions import Fraction
from importlib.metadata import entry_points
from typing import Any, Callable, Iterable, List, Optional, Sequence, Union

from typed_microdom.stringparser import parse_bool, parse_double, parse_integer
from typed_microdom.shared import ToolkitConfig, TypeConverterConfig, get_logger
from typed_microdom.typeconvert.errors import ElementConversionError, TypeConverterError
from typed_microdom.typeconvert.registry import TypeConverterRegistry
from typed_microdom.typeconvert.types import (
    ArrayKind,
    PrimitiveArray,
    is_any,
    is_array,
    is_collection,
)

REGISTRAR_ENTRY_POINT_GROUP = "typed_microdom.registrars"

_logger = get_logger(__name__, component="registrars")


class TypeConverterRegistrar(ABC):
    """Contributes conversion rules to a registry."""

    @abstractmethod
    def register_type_converter(self, registry: TypeConverterRegistry) -> None:
        """Register all rules of this registrar with ``registry``."""


# Strict string parsing: unlike the lenient parsers these reject bad literals.

def _str_to_int(value: str) -> int:
    result = parse_integer(value, None)
    if result is None:
        raise ValueError(f"Invalid integer literal: {value!r}")
    return result


def _str_to_float(value: str) -> float:
    result = parse_double(value, None)
    if result is None:
        raise ValueError(f"Invalid floating point literal: {value!r}")
    return result


def _str_to_bool(value: str) -> bool:
    result = parse_bool(value, None)
    if result is None:
        raise ValueError(f"Invalid boolean literal: {value!r}")
    return result


def _bool_to_str(value: bool) -> str:
    return "true" if value else "false"


class BaseTypeConverterRegistrar(TypeConverterRegistrar):
    """Scalar conversions between strings, numbers, booleans and bytes."""

    def register_type_converter(self, registry: TypeConverterRegistry) -> None:
        # from str
        registry.register_rule(str, int, _str_to_int)
        registry.register_rule(str, float, _str_to_float)
        registry.register_rule(str, bool, _str_to_bool)
        registry.register_rule(str, Decimal, lambda s: Decimal(s.strip()))
        registry.register_rule(str, Fraction, lambda s: Fraction(s.strip()))
        registry.register_rule(str, bytes, lambda s: s.encode("utf-8"))

        # bool is an int subclass; these take precedence over the int rules
        registry.register_rule(bool, str, _bool_to_str)
        registry.register_rule(bool, float, float)

        # from int
        registry.register_rule(int, float, float)
        registry.register_rule(int, bool, lambda n: n != 0)
        registry.register_rule(int, Decimal, Decimal)
        registry.register_rule(int, Fraction, Fraction)

        # from float
        registry.register_rule(float, int, int)
        registry.register_rule(float, bool, lambda f: f != 0.0)
        registry.register_rule(float, Decimal, lambda f: Decimal(repr(f)))
        registry.register_rule(float, Fraction, Fraction)

        # from Decimal / Fraction
        registry.register_rule(Decimal, int, int)
        registry.register_rule(Decimal, float, float)
        registry.register_rule(Fraction, int, int)
        registry.register_rule(Fraction, float, float)

        # from bytes
        registry.register_rule(bytes, str, lambda b: b.decode("utf-8"))
        registry.register_rule(bytearray, str, lambda b: bytes(b).decode("utf-8"))
        registry.register_rule(bytearray, bytes, bytes)

        # Everything can be rendered as a string
        registry.register_any_source_rule(str, str, is_any)


def _to_container(factory: Callable[[Iterable[Any]], Any]) -> Callable[[Any], Any]:
    def convert(source: Any) -> Any:
        if is_array(source) or is_collection(source):
            return factory(source)
        return factory([source])
    return convert


class CollectionTypeConverterRegistrar(TypeConverterRegistrar):
    """Any value to the built-in container types.

    Arrays and collections are copied preserving iteration order, any other
    value becomes the single element of the new container.
    """

    CONTAINER_TYPES = (list, tuple, set, frozenset, deque)

    def register_type_converter(self, registry: TypeConverterRegistry) -> None:
        for container_type in self.CONTAINER_TYPES:
            registry.register_any_source_rule(
                container_type, _to_container(container_type), is_any
            )


def _signed_byte(value: int) -> int:
    return value - 256 if value > 127 else value


def _bytes_to_byte_array(value: bytes) -> PrimitiveArray:
    return PrimitiveArray(ArrayKind.BYTE, (_signed_byte(b) for b in value))


def _byte_array_to_bytes(value: PrimitiveArray) -> bytes:
    return bytes(b & 0xFF for b in value)


def _base64_to_byte_array(value: str) -> PrimitiveArray:
    try:
        decoded = base64.b64decode(value.strip(), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 content: {e}") from e
    return _bytes_to_byte_array(decoded)


def _char_from(value: str) -> str:
    if len(value) != 1:
        raise ValueError(f"Expected a single character, got {value!r}")
    return value


class ArrayTypeConverterRegistrar(TypeConverterRegistrar):
    """Conversions to and from primitive arrays.

    Every ``ArrayKind`` gets a wildcard rule accepting three source shapes:
    an existing array (converted element by element), a collection
    (element by element in iteration order) and any other value (wrapped
    into a one-element array). Element conversion goes through the registry
    itself; the first failing element aborts the whole conversion.
    """

    def register_type_converter(self, registry: TypeConverterRegistry) -> None:
        # char[] <-> str
        registry.register_rule(str, ArrayKind.CHAR, lambda s: PrimitiveArray(ArrayKind.CHAR, s))
        registry.register_rule(ArrayKind.CHAR, str, lambda a: "".join(a))

        # byte[] <-> bytes, byte[] <-> base64 str
        registry.register_rule(bytes, ArrayKind.BYTE, _bytes_to_byte_array)
        registry.register_rule(bytearray, ArrayKind.BYTE, _bytes_to_byte_array)
        registry.register_rule(ArrayKind.BYTE, bytes, _byte_array_to_bytes)
        registry.register_rule(
            ArrayKind.BYTE, str,
            lambda a: base64.b64encode(_byte_array_to_bytes(a)).decode("ascii"),
        )
        registry.register_rule(str, ArrayKind.BYTE, _base64_to_byte_array)

        for kind in ArrayKind:
            registry.register_any_source_rule(
                kind, self._array_converter(registry, kind), is_any
            )

    @staticmethod
    def _element_converter(registry: TypeConverterRegistry,
                           kind: ArrayKind) -> Callable[[Any], Any]:
        if kind is ArrayKind.BOOLEAN:
            return lambda e: registry.convert(e, bool)
        if kind is ArrayKind.CHAR:
            return lambda e: _char_from(registry.convert(e, str))
        if kind in (ArrayKind.FLOAT, ArrayKind.DOUBLE):
            return lambda e: registry.convert(e, float)
        if kind is ArrayKind.STRING:
            return lambda e: registry.convert(e, str)

        low, high = kind.bounds

        def to_integral(element: Any) -> int:
            result = registry.convert(element, int)
            if isinstance(result, bool):
                result = int(result)
            if result is not None and not low <= result <= high:
                raise ValueError(f"{result} is out of range for {kind.value}")
            return result
        return to_integral

    @classmethod
    def _array_converter(cls, registry: TypeConverterRegistry,
                         kind: ArrayKind) -> Callable[[Any], PrimitiveArray]:
        convert_element = cls._element_converter(registry, kind)

        def convert_elements(elements: Iterable[Any]) -> PrimitiveArray:
            converted: List[Any] = []
            for index, element in enumerate(elements):
                try:
                    result = convert_element(element)
                except (TypeConverterError, ValueError, TypeError, ArithmeticError) as e:
                    raise ElementConversionError(index, element, kind, str(e)) from e
                if not kind.accepts(result):
                    raise ElementConversionError(
                        index, element, kind, f"{result!r} is not a valid {kind.value}"
                    )
                converted.append(result)
            return PrimitiveArray(kind, converted)

        def convert_to_array(source: Any) -> PrimitiveArray:
            if is_array(source):
                # Array to array, by index
                return convert_elements(source[i] for i in range(len(source)))
            if is_collection(source):
                # Collection to array, in iteration order
                return convert_elements(iter(source))
            # Use the value as the only element
            return convert_elements([source])

        return convert_to_array


DEFAULT_REGISTRARS = (
    BaseTypeConverterRegistrar,
    CollectionTypeConverterRegistrar,
    ArrayTypeConverterRegistrar,
)


def load_registrars(group: str = REGISTRAR_ENTRY_POINT_GROUP) -> List[TypeConverterRegistrar]:
    """Resolve registrars advertised under an entry point group.

    Entry points may reference a registrar class or a ready instance.
    """
    registrars: List[TypeConverterRegistrar] = []
    for entry_point in entry_points(group=group):
        loaded = entry_point.load()
        registrar = loaded() if isinstance(loaded, type) else loaded
        if not hasattr(registrar, "register_type_converter"):
            raise TypeError(
                f"Entry point {entry_point.name!r} does not provide a registrar"
            )
        _logger.debug(f"Loaded registrar {entry_point.name} from {entry_point.value}")
        registrars.append(registrar)
    return registrars


def create_default_registry(
    config: Union[TypeConverterConfig, ToolkitConfig, None] = None,
    extra_registrars: Sequence[Any] = (),
    correlation_id: Optional[str] = None,
) -> TypeConverterRegistry:
    """Create a registry holding the built-in rules plus ``extra_registrars``.

    ``config`` may be the registry configuration itself or a ``ToolkitConfig``
    whose ``typeconvert`` component is used.
    """
    if isinstance(config, ToolkitConfig):
        config = config.typeconvert
    registry = TypeConverterRegistry(config, correlation_id)
    registrars = [registrar() for registrar in DEFAULT_REGISTRARS]
    registrars.extend(extra_registrars)
    return registry.reinitialize(registrars)
