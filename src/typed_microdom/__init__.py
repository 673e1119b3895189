"""Typed Micro DOM.

A rule based type converter registry and a lightweight mutable XML object
model whose elements expose typed attribute access.

Progressive API Disclosure:
- Level 1: Default registry and readers - create_default_registry(), read_micro_dom_from_string()
- Level 2: Configured components - ToolkitConfig, TypeConverterRegistry, MicroWriter
- Level 3: Custom registrars - TypeConverterRegistrar plug-ins via entry points
"""

__version__ = "0.1.0"
__author__ = "Typed Micro DOM Team"

# Level 1: Ready to use registry and tree I/O
from .typeconvert import (
    TypeConverterRegistry,
    TypeConverterRegistrar,
    create_default_registry,
)
from .microdom import (
    MicroContainer,
    MicroDocument,
    MicroElement,
    MicroWriter,
    read_micro_dom_from_bytes,
    read_micro_dom_from_file,
    read_micro_dom_from_string,
    write_micro_dom_to_string,
)

# Configuration classes for advanced usage
from .shared import EChange, EContinue, ToolkitConfig

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Type conversion
    "TypeConverterRegistry",
    "TypeConverterRegistrar",
    "create_default_registry",

    # Micro DOM
    "MicroContainer",
    "MicroDocument",
    "MicroElement",
    "MicroWriter",
    "read_micro_dom_from_bytes",
    "read_micro_dom_from_file",
    "read_micro_dom_from_string",
    "write_micro_dom_to_string",

    # Shared result indicators and configuration
    "EChange",
    "EContinue",
    "ToolkitConfig",
]
