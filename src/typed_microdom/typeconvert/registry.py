"""Rule based type converter registry.

The registry maps a (source type, destination type) pair to a conversion
callable. Two rule kinds exist:

* EXACT rules, keyed by the pair; at most one per pair.
* ANY_SOURCE_FIXED_DEST rules, an ordered list of (predicate, converter)
  entries per destination, consulted only when no exact rule matches.

Lookup order for ``convert(value, destination)``:

1. ``value`` already is a ``destination`` -> returned unchanged.
2. Exact rule for the runtime type of ``value`` (walking the MRO for plain
   Python types, most specific class first).
3. First wildcard rule for ``destination`` whose predicate accepts ``value``,
   in registration order.
4. ``NoConverterFoundError``.

Registries are plain objects. Populate one during start-up (see
``typed_microdom.typeconvert.registrars``) and hand it to the code that needs
conversions. Registration and lookup are guarded by a re-entrant lock.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from typed_microdom.shared import (
    DuplicateRulePolicy,
    EChange,
    TypeConverterConfig,
    get_logger,
)
from typed_microdom.typeconvert.errors import (
    ConversionFailedError,
    DuplicateRuleError,
    NoConverterFoundError,
    TypeConverterError,
    describe_type,
)
from typed_microdom.typeconvert.types import (
    ArrayKind,
    TypeKey,
    is_any,
    is_instance_of,
    runtime_type_of,
)

Converter = Callable[[Any], Any]
Predicate = Callable[[Any], bool]


class RuleKind(Enum):
    """How a conversion rule is matched against a source value."""

    EXACT = auto()                    # Keyed by (source type, destination)
    ANY_SOURCE_FIXED_DEST = auto()    # Predicate over the source value


@dataclass(frozen=True)
class ConversionRule:
    """A single registered conversion."""

    destination: TypeKey
    convert: Converter
    kind: RuleKind
    source: Optional[TypeKey] = None
    predicate: Optional[Predicate] = None

    def __post_init__(self) -> None:
        """Validate rule consistency."""
        if not callable(self.convert):
            raise TypeError("Converter must be callable")
        if self.kind is RuleKind.EXACT and self.source is None:
            raise ValueError("Exact rules require a source type")
        if self.kind is RuleKind.ANY_SOURCE_FIXED_DEST and self.source is not None:
            raise ValueError("Wildcard rules must not declare a source type")

    def is_applicable(self, value: Any) -> bool:
        """Check whether this rule may convert ``value``."""
        if self.kind is RuleKind.EXACT:
            return is_instance_of(value, self.source)
        return self.predicate is None or bool(self.predicate(value))

    def __str__(self) -> str:
        source = "*" if self.source is None else describe_type(self.source)
        return f"{source} -> {describe_type(self.destination)} ({self.kind.name})"


def _check_type_key(type_key: Any, label: str) -> None:
    if not isinstance(type_key, (type, ArrayKind)):
        raise TypeError(f"{label} must be a type or an ArrayKind, got {type_key!r}")


class TypeConverterRegistry:
    """Dispatch table of conversion rules."""

    def __init__(
        self,
        config: Optional[TypeConverterConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize an empty registry.

        Args:
            config: Registry configuration (duplicate policy, None handling)
            correlation_id: Optional correlation ID for log records
        """
        self.config = config or TypeConverterConfig()
        self._logger = get_logger(__name__, correlation_id, "type_converter_registry")
        self._exact: Dict[Tuple[TypeKey, TypeKey], ConversionRule] = {}
        self._wildcards: List[ConversionRule] = []
        self._lock = threading.RLock()

    # Registration

    def _should_log_registration(self) -> bool:
        return self.config.log_registrations and self._logger.is_enabled_for(logging.DEBUG)

    def register_rule(
        self, source: TypeKey, destination: TypeKey, convert: Converter
    ) -> ConversionRule:
        """Register an EXACT rule for ``(source, destination)``.

        Raises:
            DuplicateRuleError: a rule for the pair exists and the duplicate
                policy is ``FAIL``
        """
        _check_type_key(source, "Source")
        _check_type_key(destination, "Destination")
        rule = ConversionRule(
            destination=destination,
            convert=convert,
            kind=RuleKind.EXACT,
            source=source,
        )

        with self._lock:
            key = (source, destination)
            if key in self._exact:
                if self.config.duplicate_policy is DuplicateRulePolicy.FAIL:
                    self._logger.error(
                        f"Duplicate conversion rule {rule}",
                        extra={"source": describe_type(source),
                               "destination": describe_type(destination)},
                        exc_info=False,
                    )
                    raise DuplicateRuleError(source, destination)
                self._logger.warning(f"Overwriting conversion rule {rule}")
            elif self._should_log_registration():
                self._logger.debug(f"Registered conversion rule {rule}")
            self._exact[key] = rule
        return rule

    def register_any_source_rule(
        self,
        destination: TypeKey,
        convert: Converter,
        predicate: Optional[Predicate] = None
    ) -> ConversionRule:
        """Register an ANY_SOURCE_FIXED_DEST rule.

        Args:
            destination: Destination type produced by ``convert``
            convert: Conversion callable
            predicate: Applicability test on the source value; ``None``
                accepts every value
        """
        _check_type_key(destination, "Destination")
        rule = ConversionRule(
            destination=destination,
            convert=convert,
            kind=RuleKind.ANY_SOURCE_FIXED_DEST,
            predicate=None if predicate is is_any else predicate,
        )

        with self._lock:
            self._wildcards.append(rule)
            if self._should_log_registration():
                self._logger.debug(f"Registered conversion rule {rule}")
        return rule

    # Lookup

    def find_rule(self, value: Any, destination: TypeKey) -> Optional[ConversionRule]:
        """Return the rule ``convert`` would apply, or ``None``."""
        with self._lock:
            for source in self._candidate_sources(value):
                rule = self._exact.get((source, destination))
                if rule is not None:
                    return rule

            for rule in self._wildcards:
                if rule.destination == destination and rule.is_applicable(value):
                    return rule
        return None

    @staticmethod
    def _candidate_sources(value: Any) -> Iterator[TypeKey]:
        runtime_type = runtime_type_of(value)
        if isinstance(runtime_type, ArrayKind):
            yield runtime_type
            return
        yield from runtime_type.__mro__

    def convert(self, value: Any, destination: TypeKey) -> Any:
        """Convert ``value`` to ``destination``.

        Raises:
            NoConverterFoundError: no rule matches
            ConversionFailedError: the matching rule rejected the value
            ElementConversionError: an element of an array/collection failed
        """
        _check_type_key(destination, "Destination")

        if value is None:
            if self.config.allow_none_source:
                return None
            raise NoConverterFoundError(type(None), destination)

        if is_instance_of(value, destination):
            return value

        rule = self.find_rule(value, destination)
        if rule is None:
            if self._logger.is_enabled_for(logging.DEBUG):
                self._logger.debug(
                    f"No conversion rule from {describe_type(runtime_type_of(value))} "
                    f"to {describe_type(destination)}"
                )
            raise NoConverterFoundError(runtime_type_of(value), destination)

        try:
            return rule.convert(value)
        except TypeConverterError:
            raise
        except (ValueError, TypeError, ArithmeticError) as e:
            raise ConversionFailedError(value, destination, str(e)) from e

    def can_convert(self, value: Any, destination: TypeKey) -> bool:
        """Check whether a conversion path exists (the rule may still reject the value)."""
        if value is None:
            return self.config.allow_none_source
        return is_instance_of(value, destination) or (
            self.find_rule(value, destination) is not None
        )

    # Inspection and lifecycle

    def has_rule(self, source: TypeKey, destination: TypeKey) -> bool:
        """Check for an EXACT rule for the pair."""
        with self._lock:
            return (source, destination) in self._exact

    def get_rule_count(self) -> int:
        with self._lock:
            return len(self._exact) + len(self._wildcards)

    def is_empty(self) -> bool:
        return self.get_rule_count() == 0

    def iter_rules(self) -> Iterator[ConversionRule]:
        """Iterate over a snapshot of all rules, exact rules first."""
        with self._lock:
            snapshot = list(self._exact.values()) + list(self._wildcards)
        return iter(snapshot)

    def clear(self) -> EChange:
        """Remove all rules."""
        with self._lock:
            if self.is_empty():
                return EChange.UNCHANGED
            self._exact.clear()
            self._wildcards.clear()
        self._logger.debug("Cleared all conversion rules")
        return EChange.CHANGED

    def reinitialize(self, registrars: Iterable[Any]) -> "TypeConverterRegistry":
        """Clear the registry and apply each registrar in order.

        A registrar is any object with ``register_type_converter(registry)``.
        """
        with self._lock:
            self.clear()
            for registrar in registrars:
                registrar.register_type_converter(self)
        self._logger.debug(
            f"Registry initialized with {self.get_rule_count()} rules"
        )
        return self

    def __repr__(self) -> str:
        return (
            f"TypeConverterRegistry(exact={len(self._exact)}, "
            f"wildcards={len(self._wildcards)})"
        )
