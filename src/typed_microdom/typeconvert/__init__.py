"""Rule based type conversion.

Key Components:
    TypeConverterRegistry: Dispatch table of exact and wildcard rules
    ArrayKind / PrimitiveArray: Fixed element-type array descriptors and values
    create_default_registry: Registry populated with the built-in registrars
"""

from .errors import (
    ConversionFailedError,
    DuplicateRuleError,
    ElementConversionError,
    NoConverterFoundError,
    TypeConverterError,
)
from .types import (
    ArrayKind,
    PrimitiveArray,
    TypeKey,
    is_array,
    is_collection,
    is_instance_of,
    runtime_type_of,
)
from .registry import (
    ConversionRule,
    RuleKind,
    TypeConverterRegistry,
)
from .registrars import (
    ArrayTypeConverterRegistrar,
    BaseTypeConverterRegistrar,
    CollectionTypeConverterRegistrar,
    TypeConverterRegistrar,
    create_default_registry,
    load_registrars,
)
from .helpers import (
    convert_or_default,
    convert_to_array,
    convert_to_bool,
    convert_to_float,
    convert_to_int,
    convert_to_list,
    convert_to_str,
)

__all__ = [
    "ConversionFailedError",
    "DuplicateRuleError",
    "ElementConversionError",
    "NoConverterFoundError",
    "TypeConverterError",
    "ArrayKind",
    "PrimitiveArray",
    "TypeKey",
    "is_array",
    "is_collection",
    "is_instance_of",
    "runtime_type_of",
    "ConversionRule",
    "RuleKind",
    "TypeConverterRegistry",
    "ArrayTypeConverterRegistrar",
    "BaseTypeConverterRegistrar",
    "CollectionTypeConverterRegistrar",
    "TypeConverterRegistrar",
    "create_default_registry",
    "load_registrars",
    "convert_or_default",
    "convert_to_array",
    "convert_to_bool",
    "convert_to_float",
    "convert_to_int",
    "convert_to_list",
    "convert_to_str",
]
