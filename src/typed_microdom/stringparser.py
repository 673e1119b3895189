"""Lenient string parsing with caller supplied defaults.

Every ``parse_*`` function returns the default instead of raising when the
input is ``None``, empty or not a valid literal. This is the recovery policy
used by the typed attribute getters of ``MicroElement``; strict conversion
lives in ``typed_microdom.typeconvert``.
"""

import re
from typing import Optional, TypeVar, Union

T = TypeVar("T")

INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1
LONG_MIN = -(2 ** 63)
LONG_MAX = 2 ** 63 - 1

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+", re.ASCII)
_DECIMAL_PATTERN = re.compile(
    r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
    r"|[+-]?(?:nan|inf|infinity)",
    re.ASCII | re.IGNORECASE,
)


def _prepare(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def parse_bool(value: Optional[str], default: T) -> Union[bool, T]:
    """Parse ``"true"``/``"false"`` (case insensitive); anything else yields default."""
    value = _prepare(value)
    if value is not None:
        lowered = value.lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    return default


def parse_integer(value: Optional[str], default: T,
                  min_value: Optional[int] = None,
                  max_value: Optional[int] = None) -> Union[int, T]:
    """Parse a decimal integer literal, optionally bounded."""
    value = _prepare(value)
    if value is None or not _INTEGER_PATTERN.fullmatch(value):
        return default
    result = int(value)
    if min_value is not None and result < min_value:
        return default
    if max_value is not None and result > max_value:
        return default
    return result


def parse_int(value: Optional[str], default: T) -> Union[int, T]:
    """Parse a 32-bit signed integer."""
    return parse_integer(value, default, INT_MIN, INT_MAX)


def parse_long(value: Optional[str], default: T) -> Union[int, T]:
    """Parse a 64-bit signed integer."""
    return parse_integer(value, default, LONG_MIN, LONG_MAX)


def parse_double(value: Optional[str], default: T) -> Union[float, T]:
    """Parse a floating point literal including ``NaN`` and ``Infinity``."""
    value = _prepare(value)
    if value is None or not _DECIMAL_PATTERN.fullmatch(value):
        return default
    return float(value)


def parse_float(value: Optional[str], default: T) -> Union[float, T]:
    # Python has a single float type
    return parse_double(value, default)
