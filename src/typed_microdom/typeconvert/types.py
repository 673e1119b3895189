"""Type descriptors used as keys of the conversion dispatch table.

A destination or source is identified either by a plain Python type or by an
``ArrayKind`` member. Array kinds describe fixed element-type arrays (the
``boolean[]``, ``int[]``, ``String[]`` ... family) whose runtime values are
``PrimitiveArray`` instances.
"""

import array
from collections.abc import Collection, Mapping, Sequence
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, Optional, Tuple, Union, overload


class ArrayKind(Enum):
    """Element type of a primitive array."""

    BOOLEAN = "boolean"
    BYTE = "byte"
    CHAR = "char"
    SHORT = "short"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "String"

    def __str__(self) -> str:
        return f"{self.value}[]"

    @property
    def bounds(self) -> Optional[Tuple[int, int]]:
        """Inclusive value range for fixed-width integer kinds, else None."""
        return _INTEGER_BOUNDS.get(self)

    @property
    def is_integral(self) -> bool:
        return self in _INTEGER_BOUNDS

    def accepts(self, element: Any) -> bool:
        """Check whether ``element`` may be stored in an array of this kind."""
        return _ELEMENT_CHECKS[self](element)


_INTEGER_BOUNDS = {
    ArrayKind.BYTE: (-(2 ** 7), 2 ** 7 - 1),
    ArrayKind.SHORT: (-(2 ** 15), 2 ** 15 - 1),
    ArrayKind.INT: (-(2 ** 31), 2 ** 31 - 1),
    ArrayKind.LONG: (-(2 ** 63), 2 ** 63 - 1),
}


def _is_bounded_int(kind: ArrayKind) -> Callable[[Any], bool]:
    low, high = _INTEGER_BOUNDS[kind]
    return lambda e: isinstance(e, int) and not isinstance(e, bool) and low <= e <= high


_ELEMENT_CHECKS = {
    ArrayKind.BOOLEAN: lambda e: isinstance(e, bool),
    ArrayKind.BYTE: _is_bounded_int(ArrayKind.BYTE),
    ArrayKind.CHAR: lambda e: isinstance(e, str) and len(e) == 1,
    ArrayKind.SHORT: _is_bounded_int(ArrayKind.SHORT),
    ArrayKind.INT: _is_bounded_int(ArrayKind.INT),
    ArrayKind.LONG: _is_bounded_int(ArrayKind.LONG),
    ArrayKind.FLOAT: lambda e: isinstance(e, float),
    ArrayKind.DOUBLE: lambda e: isinstance(e, float),
    ArrayKind.STRING: lambda e: e is None or isinstance(e, str),
}


class PrimitiveArray(Sequence):
    """Immutable, fixed element-type array.

    Equality requires the same kind and the same elements, so an ``INT``
    array never equals a ``LONG`` array with identical values.
    """

    __slots__ = ("_kind", "_items")

    def __init__(self, kind: ArrayKind, items: Iterable[Any] = ()) -> None:
        if not isinstance(kind, ArrayKind):
            raise TypeError("kind must be an ArrayKind")
        values = tuple(items)
        for index, element in enumerate(values):
            if not kind.accepts(element):
                raise ValueError(
                    f"Element {index} ({element!r}) is not a valid {kind.value}"
                )
        self._kind = kind
        self._items = values

    @property
    def kind(self) -> ArrayKind:
        return self._kind

    @overload
    def __getitem__(self, index: int) -> Any: ...

    @overload
    def __getitem__(self, index: slice) -> "PrimitiveArray": ...

    def __getitem__(self, index: Union[int, slice]) -> Any:
        if isinstance(index, slice):
            return PrimitiveArray(self._kind, self._items[index])
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PrimitiveArray):
            return NotImplemented
        return self._kind is other._kind and self._items == other._items

    def __hash__(self) -> int:
        return hash((self._kind, self._items))

    def __repr__(self) -> str:
        return f"PrimitiveArray({self._kind.name}, {list(self._items)!r})"

    def tolist(self) -> list:
        return list(self._items)


TypeKey = Union[type, ArrayKind]


def runtime_type_of(value: Any) -> TypeKey:
    """Return the dispatch key describing the runtime type of ``value``."""
    if isinstance(value, PrimitiveArray):
        return value.kind
    return type(value)


def is_instance_of(value: Any, type_key: TypeKey) -> bool:
    """``isinstance`` extended to array kinds."""
    if isinstance(type_key, ArrayKind):
        return isinstance(value, PrimitiveArray) and value.kind is type_key
    return isinstance(value, type_key)


def is_array(value: Any) -> bool:
    """Check for an array value.

    ``PrimitiveArray``, ``array.array``, ``bytes`` and ``bytearray`` all count;
    the elements of the byte types are their unsigned integer values.
    """
    return isinstance(value, (PrimitiveArray, array.array, bytes, bytearray))


def is_collection(value: Any) -> bool:
    """Check for a non-array, non-string, non-mapping collection."""
    if isinstance(value, (str, Mapping)) or is_array(value):
        return False
    return isinstance(value, Collection)


def is_any(value: Any) -> bool:
    return True
