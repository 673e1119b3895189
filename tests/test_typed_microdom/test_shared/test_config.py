"""Tests for the configuration system."""

import json

import pytest

from typed_microdom.shared.config import (
    ConfigError,
    ConfigValidationError,
    DuplicateRulePolicy,
    EXMLSerializeComments,
    ToolkitConfig,
    TypeConverterConfig,
    XMLReaderSettings,
    XMLWriterSettings,
)


class TestComponentConfigs:
    """Test suite for the individual component configurations."""

    def test_type_converter_defaults(self) -> None:
        """Test default type converter configuration values."""
        config = TypeConverterConfig()

        assert config.duplicate_policy is DuplicateRulePolicy.FAIL
        assert config.log_registrations is True
        assert config.allow_none_source is True

    def test_type_converter_rejects_invalid_policy(self) -> None:
        """Test that a non-enum duplicate policy is rejected."""
        with pytest.raises(ValueError, match="duplicate_policy must be a DuplicateRulePolicy"):
            TypeConverterConfig(duplicate_policy="fail")  # type: ignore[arg-type]

    def test_reader_defaults(self) -> None:
        """Test default reader settings."""
        settings = XMLReaderSettings()

        assert settings.keep_comments is True
        assert settings.remove_blank_text is False
        assert settings.resolve_entities is False
        assert settings.huge_tree is False
        assert settings.max_depth == 1000

    def test_reader_rejects_non_positive_depth(self) -> None:
        """Test max_depth validation."""
        with pytest.raises(ValueError, match="max_depth must be > 0"):
            XMLReaderSettings(max_depth=0)

    def test_writer_defaults(self) -> None:
        """Test default writer settings."""
        settings = XMLWriterSettings()

        assert settings.serialize_comments is EXMLSerializeComments.EMIT
        assert settings.serialize_comments.is_emit
        assert settings.indent is True
        assert settings.encoding == "utf-8"
        assert settings.xml_declaration is True

    def test_writer_rejects_empty_encoding(self) -> None:
        """Test encoding validation."""
        with pytest.raises(ValueError, match="encoding cannot be empty"):
            XMLWriterSettings(encoding="")

    def test_ignore_comments_is_not_emit(self) -> None:
        """Test the comment serialization flag."""
        assert not EXMLSerializeComments.IGNORE.is_emit


class TestToolkitConfig:
    """Test suite for the aggregate configuration."""

    def test_default_configuration(self) -> None:
        """Test that the default aggregate holds default components."""
        config = ToolkitConfig()

        assert config.typeconvert == TypeConverterConfig()
        assert config.reader == XMLReaderSettings()
        assert config.writer == XMLWriterSettings()
        assert set(config.to_dict()) == {"typeconvert", "reader", "writer"}

    def test_configuration_is_immutable(self) -> None:
        """Test that the aggregate cannot be mutated in place."""
        config = ToolkitConfig()

        with pytest.raises(AttributeError):
            config.reader = XMLReaderSettings()  # type: ignore[misc]

    def test_entities_with_huge_tree_rejected(self) -> None:
        """Test the cross-component reader check and its suggestions."""
        with pytest.raises(ConfigValidationError) as exc_info:
            ToolkitConfig(reader=XMLReaderSettings(resolve_entities=True, huge_tree=True))

        assert exc_info.value.field_name == "reader"
        assert len(exc_info.value.suggestions) == 2
        assert isinstance(exc_info.value, ConfigError)

    def test_override_nested_fields(self) -> None:
        """Test overriding component fields with double underscore notation."""
        config = ToolkitConfig()

        new_config = config.override(
            typeconvert__duplicate_policy=DuplicateRulePolicy.OVERWRITE,
            writer__indent=False,
        )

        assert new_config.typeconvert.duplicate_policy is DuplicateRulePolicy.OVERWRITE
        assert new_config.writer.indent is False
        assert config.typeconvert.duplicate_policy is DuplicateRulePolicy.FAIL
        assert config.writer.indent is True

    def test_override_unknown_component(self) -> None:
        """Test that an unknown component name is reported with suggestions."""
        with pytest.raises(ConfigValidationError, match="Unknown configuration component") as exc_info:
            ToolkitConfig().override(parser__strict=True)

        assert exc_info.value.suggestions == ["typeconvert", "reader", "writer"]

    def test_override_requires_component_prefix(self) -> None:
        """Test that plain field names are rejected with prefixed suggestions."""
        with pytest.raises(ConfigValidationError, match="must name a component field") as exc_info:
            ToolkitConfig().override(indent=False)

        assert exc_info.value.field_name == "indent"
        assert "writer__indent" in exc_info.value.suggestions

    def test_override_invalid_value(self) -> None:
        """Test that component validation failures surface as ConfigValidationError."""
        with pytest.raises(ConfigValidationError, match="max_depth must be > 0"):
            ToolkitConfig().override(reader__max_depth=-1)

    def test_dict_round_trip(self) -> None:
        """Test conversion to and from a dictionary."""
        config = ToolkitConfig.lenient()

        data = config.to_dict()
        restored = ToolkitConfig.from_dict(data)

        assert data["typeconvert"]["duplicate_policy"] == "OVERWRITE"
        assert data["writer"]["serialize_comments"] == "IGNORE"
        assert restored == config

    def test_json_round_trip(self) -> None:
        """Test conversion to and from JSON."""
        config = ToolkitConfig.strict()

        json_str = config.to_json()
        restored = ToolkitConfig.from_json(json_str)

        assert json.loads(json_str)["typeconvert"]["allow_none_source"] is False
        assert restored == config

    def test_from_dict_invalid_enum_member(self) -> None:
        """Test that an unknown enum member name is rejected."""
        with pytest.raises(ConfigValidationError, match="Invalid value 'SOMETIMES'") as exc_info:
            ToolkitConfig.from_dict({"typeconvert": {"duplicate_policy": "SOMETIMES"}})

        assert exc_info.value.suggestions == ["FAIL", "OVERWRITE"]

    def test_from_dict_partial_data_uses_defaults(self) -> None:
        """Test that missing fields fall back to defaults."""
        config = ToolkitConfig.from_dict({"reader": {"keep_comments": False}})

        assert config.reader.keep_comments is False
        assert config.reader.max_depth == 1000
        assert config.writer == XMLWriterSettings()

    def test_strict_preset(self) -> None:
        """Test the strict preset values."""
        config = ToolkitConfig.strict()

        assert config.typeconvert.duplicate_policy is DuplicateRulePolicy.FAIL
        assert config.typeconvert.allow_none_source is False
        assert config.reader.keep_comments is True

    def test_lenient_preset(self) -> None:
        """Test the lenient preset values."""
        config = ToolkitConfig.lenient()

        assert config.typeconvert.duplicate_policy is DuplicateRulePolicy.OVERWRITE
        assert config.typeconvert.log_registrations is False
        assert config.reader.keep_comments is False
        assert config.reader.remove_blank_text is True
        assert config.writer.serialize_comments is EXMLSerializeComments.IGNORE
