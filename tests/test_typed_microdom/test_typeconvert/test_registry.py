"""Tests for the rule based type converter registry."""

import logging
import threading
from typing import Any, List

import pytest

from typed_microdom.shared import DuplicateRulePolicy, EChange, TypeConverterConfig
from typed_microdom.typeconvert import (
    ArrayKind,
    ConversionFailedError,
    ConversionRule,
    DuplicateRuleError,
    NoConverterFoundError,
    PrimitiveArray,
    RuleKind,
    TypeConverterError,
    TypeConverterRegistry,
)


class Base:
    pass


class Derived(Base):
    pass


class TestConversionRule:
    """Test suite for ConversionRule validation."""

    def test_exact_rule_requires_source(self) -> None:
        """Test that exact rules need a source type."""
        with pytest.raises(ValueError, match="Exact rules require a source type"):
            ConversionRule(destination=int, convert=int, kind=RuleKind.EXACT)

    def test_wildcard_rule_rejects_source(self) -> None:
        """Test that wildcard rules cannot declare a source."""
        with pytest.raises(ValueError, match="Wildcard rules must not declare a source type"):
            ConversionRule(destination=int, convert=int,
                           kind=RuleKind.ANY_SOURCE_FIXED_DEST, source=str)

    def test_converter_must_be_callable(self) -> None:
        """Test converter validation."""
        with pytest.raises(TypeError, match="Converter must be callable"):
            ConversionRule(destination=int, convert="int",  # type: ignore[arg-type]
                           kind=RuleKind.EXACT, source=str)

    def test_str_describes_rule(self) -> None:
        """Test the readable rule description."""
        rule = ConversionRule(destination=ArrayKind.INT, convert=list,
                              kind=RuleKind.ANY_SOURCE_FIXED_DEST)

        assert str(rule) == "* -> int[] (ANY_SOURCE_FIXED_DEST)"


class TestRegistration:
    """Test suite for registering rules."""

    def test_new_registry_is_empty(self) -> None:
        """Test an empty registry."""
        registry = TypeConverterRegistry()

        assert registry.is_empty()
        assert registry.get_rule_count() == 0
        assert repr(registry) == "TypeConverterRegistry(exact=0, wildcards=0)"

    def test_register_exact_rule(self) -> None:
        """Test registering and inspecting an exact rule."""
        registry = TypeConverterRegistry()

        rule = registry.register_rule(str, int, int)

        assert rule.kind is RuleKind.EXACT
        assert registry.has_rule(str, int)
        assert not registry.has_rule(int, str)
        assert registry.get_rule_count() == 1

    def test_duplicate_rule_fails_by_default(self) -> None:
        """Test the fail-fast duplicate policy keeps the first rule."""
        registry = TypeConverterRegistry()
        registry.register_rule(str, int, lambda s: 1)

        with pytest.raises(DuplicateRuleError, match="A rule from str to int is already registered"):
            registry.register_rule(str, int, lambda s: 2)

        assert registry.convert("x", int) == 1

    def test_duplicate_rule_overwrite_policy(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test the last-wins duplicate policy and its warning."""
        registry = TypeConverterRegistry(
            TypeConverterConfig(duplicate_policy=DuplicateRulePolicy.OVERWRITE)
        )
        registry.register_rule(str, int, lambda s: 1)

        with caplog.at_level(logging.WARNING):
            registry.register_rule(str, int, lambda s: 2)

        assert registry.convert("x", int) == 2
        assert registry.get_rule_count() == 1
        assert any("Overwriting conversion rule" in r.getMessage() for r in caplog.records)

    @pytest.mark.parametrize("log_registrations,expected", [
        (True, 1),
        (False, 0),
    ])
    def test_registration_debug_records(
        self, caplog: pytest.LogCaptureFixture, log_registrations: bool, expected: int
    ) -> None:
        """Test that registrations are logged at DEBUG only when enabled."""
        registry = TypeConverterRegistry(
            TypeConverterConfig(log_registrations=log_registrations), "reg-1"
        )

        with caplog.at_level(logging.DEBUG, logger="typed_microdom.typeconvert.registry"):
            registry.register_rule(str, int, int)

        records = [r for r in caplog.records if "Registered conversion rule" in r.getMessage()]
        assert len(records) == expected
        if records:
            assert records[0].correlation_id == "reg-1"
            assert records[0].component == "type_converter_registry"

    def test_wildcard_rules_may_repeat(self) -> None:
        """Test that wildcard rules are appended, never rejected."""
        registry = TypeConverterRegistry()
        registry.register_any_source_rule(int, lambda v: 1)
        registry.register_any_source_rule(int, lambda v: 2)

        assert registry.get_rule_count() == 2

    def test_invalid_type_keys_rejected(self) -> None:
        """Test that only types and array kinds are accepted as keys."""
        registry = TypeConverterRegistry()

        with pytest.raises(TypeError, match="Source must be a type or an ArrayKind"):
            registry.register_rule("str", int, int)  # type: ignore[arg-type]
        with pytest.raises(TypeError, match="Destination must be a type or an ArrayKind"):
            registry.register_any_source_rule(None, int)  # type: ignore[arg-type]

    def test_clear(self) -> None:
        """Test clearing reports whether rules were removed."""
        registry = TypeConverterRegistry()
        registry.register_rule(str, int, int)

        assert registry.clear() is EChange.CHANGED
        assert registry.is_empty()
        assert registry.clear() is EChange.UNCHANGED

    def test_iter_rules_exact_first(self) -> None:
        """Test the rule snapshot order."""
        registry = TypeConverterRegistry()
        registry.register_any_source_rule(str, str)
        registry.register_rule(int, str, str)

        kinds = [rule.kind for rule in registry.iter_rules()]

        assert kinds == [RuleKind.EXACT, RuleKind.ANY_SOURCE_FIXED_DEST]

    def test_reinitialize_applies_registrars_in_order(self) -> None:
        """Test that reinitialize clears and replays registrars."""
        calls: List[str] = []

        class Recording:
            def __init__(self, name: str) -> None:
                self.name = name

            def register_type_converter(self, registry: TypeConverterRegistry) -> None:
                calls.append(self.name)
                registry.register_any_source_rule(str, lambda v: self.name)

        registry = TypeConverterRegistry()
        registry.register_rule(int, float, float)

        result = registry.reinitialize([Recording("a"), Recording("b")])

        assert result is registry
        assert calls == ["a", "b"]
        assert not registry.has_rule(int, float)
        assert registry.convert(1, str) == "a"


class TestConvert:
    """Test suite for conversion dispatch."""

    def test_identity_short_circuit(self) -> None:
        """Test that a value of the destination type is returned unchanged."""
        registry = TypeConverterRegistry()
        registry.register_rule(str, str, lambda s: s.upper())
        value = "abc"

        assert registry.convert(value, str) is value

    def test_identity_short_circuit_for_arrays(self) -> None:
        """Test the short-circuit for an array of the requested kind."""
        registry = TypeConverterRegistry()
        values = PrimitiveArray(ArrayKind.INT, [1, 2])

        assert registry.convert(values, ArrayKind.INT) is values

    def test_bool_passes_as_int(self) -> None:
        """Test that bool values satisfy an int destination unchanged."""
        registry = TypeConverterRegistry()

        assert registry.convert(True, int) is True

    def test_none_source_returns_none(self) -> None:
        """Test default None handling."""
        registry = TypeConverterRegistry()

        assert registry.convert(None, int) is None
        assert registry.can_convert(None, int)

    def test_none_source_rejected_when_disabled(self) -> None:
        """Test None handling when None sources are not allowed."""
        registry = TypeConverterRegistry(TypeConverterConfig(allow_none_source=False))

        with pytest.raises(NoConverterFoundError, match="from NoneType to int"):
            registry.convert(None, int)
        assert not registry.can_convert(None, int)

    def test_no_converter_found(self) -> None:
        """Test the error raised when no rule matches."""
        registry = TypeConverterRegistry()

        with pytest.raises(NoConverterFoundError) as exc_info:
            registry.convert("x", ArrayKind.INT)

        assert exc_info.value.source_type is str
        assert exc_info.value.destination is ArrayKind.INT
        assert "to int[]" in str(exc_info.value)

    def test_exact_rule_walks_mro(self) -> None:
        """Test that a rule for a base class applies to subclasses."""
        registry = TypeConverterRegistry()
        registry.register_rule(Base, str, lambda v: "base")

        assert registry.convert(Derived(), str) == "base"

    def test_most_specific_exact_rule_wins(self) -> None:
        """Test that the subclass rule is preferred over the base class rule."""
        registry = TypeConverterRegistry()
        registry.register_rule(Base, str, lambda v: "base")
        registry.register_rule(Derived, str, lambda v: "derived")

        assert registry.convert(Derived(), str) == "derived"
        assert registry.convert(Base(), str) == "base"

    def test_exact_rule_precedes_wildcards(self) -> None:
        """Test lookup order between rule kinds."""
        registry = TypeConverterRegistry()
        registry.register_any_source_rule(str, lambda v: "wildcard")
        registry.register_rule(int, str, lambda v: "exact")

        assert registry.convert(1, str) == "exact"
        assert registry.convert(1.5, str) == "wildcard"

    def test_wildcards_in_registration_order(self) -> None:
        """Test that the first applicable wildcard wins."""
        registry = TypeConverterRegistry()
        registry.register_any_source_rule(str, lambda v: "ints", lambda v: isinstance(v, int))
        registry.register_any_source_rule(str, lambda v: "any")

        assert registry.convert(5, str) == "ints"
        assert registry.convert(5.0, str) == "any"
        assert registry.find_rule(5.0, str).predicate is None

    def test_array_kind_source_rule(self) -> None:
        """Test an exact rule keyed by an array kind with element-wise boxing."""
        registry = TypeConverterRegistry()
        registry.register_rule(ArrayKind.INT, list, lambda a: [int(e) for e in a])

        result = registry.convert(PrimitiveArray(ArrayKind.INT, [1, 2, 3]), list)

        assert result == [1, 2, 3]
        assert registry.find_rule(PrimitiveArray(ArrayKind.LONG, [1]), list) is None

    @pytest.mark.parametrize("exception", [ValueError, TypeError, ZeroDivisionError])
    def test_rule_failures_wrapped(self, exception: type) -> None:
        """Test that rule exceptions become ConversionFailedError."""
        registry = TypeConverterRegistry()

        def failing(value: Any) -> Any:
            raise exception("boom")

        registry.register_rule(str, int, failing)

        with pytest.raises(ConversionFailedError, match="Failed to convert 'x' of type str to int: boom") as exc_info:
            registry.convert("x", int)

        assert exc_info.value.value == "x"
        assert isinstance(exc_info.value.__cause__, exception)

    def test_other_exceptions_propagate(self) -> None:
        """Test that unexpected exceptions are not wrapped."""
        registry = TypeConverterRegistry()

        def failing(value: Any) -> Any:
            raise KeyError("boom")

        registry.register_rule(str, int, failing)

        with pytest.raises(KeyError):
            registry.convert("x", int)

    def test_converter_errors_not_rewrapped(self) -> None:
        """Test that nested converter errors pass through unchanged."""
        registry = TypeConverterRegistry()
        registry.register_rule(str, float, lambda s: registry.convert(s, ArrayKind.INT))

        with pytest.raises(NoConverterFoundError):
            registry.convert("x", float)

    def test_can_convert(self) -> None:
        """Test conversion path checks."""
        registry = TypeConverterRegistry()
        registry.register_rule(str, int, int)

        assert registry.can_convert("1", int)
        assert registry.can_convert(1, int)
        assert not registry.can_convert(1.0, int)

    def test_convert_rejects_invalid_destination(self) -> None:
        """Test destination validation during conversion."""
        registry = TypeConverterRegistry()

        with pytest.raises(TypeError, match="Destination must be a type or an ArrayKind"):
            registry.convert("x", "int")  # type: ignore[arg-type]

    def test_all_errors_share_base_class(self) -> None:
        """Test the error hierarchy."""
        assert issubclass(NoConverterFoundError, TypeConverterError)
        assert issubclass(DuplicateRuleError, TypeConverterError)
        assert issubclass(ConversionFailedError, TypeConverterError)


class TestConcurrency:
    """Test suite for concurrent registry use."""

    def test_concurrent_registration_and_lookup(self) -> None:
        """Test that parallel registrations are all recorded."""
        registry = TypeConverterRegistry(TypeConverterConfig(log_registrations=False))
        errors: List[BaseException] = []

        def worker(offset: int) -> None:
            try:
                for i in range(50):
                    registry.register_any_source_rule(str, lambda v: "x")
                    registry.convert(offset + i, str)
            except BaseException as e:  # pragma: no cover - reported below
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n * 100,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert registry.get_rule_count() == 200
