"""Exceptions raised by the type converter registry."""

from typing import Any, Optional


def describe_type(type_key: Any) -> str:
    """Human readable name of a type key (a Python type or an ArrayKind)."""
    if isinstance(type_key, type):
        return type_key.__qualname__
    return str(type_key)


class TypeConverterError(Exception):
    """Base exception for all conversion failures."""

    def __init__(self, message: str, source_type: Any = None,
                 destination: Any = None) -> None:
        super().__init__(message)
        self.source_type = source_type
        self.destination = destination


class NoConverterFoundError(TypeConverterError):
    """Neither an exact nor a wildcard rule matches the requested conversion."""

    def __init__(self, source_type: Any, destination: Any) -> None:
        super().__init__(
            f"No converter found from {describe_type(source_type)} "
            f"to {describe_type(destination)}",
            source_type,
            destination,
        )


class DuplicateRuleError(TypeConverterError):
    """An exact rule for the same (source, destination) pair already exists."""

    def __init__(self, source_type: Any, destination: Any) -> None:
        super().__init__(
            f"A rule from {describe_type(source_type)} to "
            f"{describe_type(destination)} is already registered",
            source_type,
            destination,
        )


class ConversionFailedError(TypeConverterError):
    """A matching rule was found but raised while converting the value."""

    def __init__(self, value: Any, destination: Any,
                 reason: Optional[str] = None) -> None:
        message = (
            f"Failed to convert {value!r} of type {describe_type(type(value))} "
            f"to {describe_type(destination)}"
        )
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, type(value), destination)
        self.value = value


class ElementConversionError(TypeConverterError):
    """One element of an array or collection conversion failed.

    The whole batch is aborted; no partial result is returned.
    """

    def __init__(self, index: int, element: Any, destination: Any,
                 reason: Optional[str] = None) -> None:
        message = (
            f"Failed to convert element {index} ({element!r}) "
            f"to {describe_type(destination)}"
        )
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, type(element), destination)
        self.index = index
        self.element = element
