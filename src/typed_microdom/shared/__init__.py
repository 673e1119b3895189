"""Shared utilities for typed micro DOM processing.

This module provides configuration objects, result indicators and logging
helpers used by the converter registry and the micro DOM layers.
"""

from .result import (
    EChange,
    EContinue,
)
from .config import (
    ConfigError,
    ConfigValidationError,
    DuplicateRulePolicy,
    EXMLSerializeComments,
    ToolkitConfig,
    TypeConverterConfig,
    XMLReaderSettings,
    XMLWriterSettings,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "EChange",
    "EContinue",
    "ConfigError",
    "ConfigValidationError",
    "DuplicateRulePolicy",
    "EXMLSerializeComments",
    "ToolkitConfig",
    "TypeConverterConfig",
    "XMLReaderSettings",
    "XMLWriterSettings",
    "CorrelationLogger",
    "get_logger",
]
