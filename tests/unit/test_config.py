"""
Unit tests for configuration data models.

Tests the configuration management system including validation,
defaults, warnings, and dictionary conversion.
"""

import pytest
from pydantic import ValidationError

from keyfind.models.config import (
    SearchConfig,
    LimitsConfig,
    ContentConfig,
    ProgressConfig,
    validate_config_dict
)


class TestLimitsConfig:
    """Test cases for LimitsConfig."""

    def test_default_config(self):
        """Test default limits."""
        config = LimitsConfig()

        assert config.max_files is None
        assert config.max_bytes_per_file is None
        assert config.max_workers == 1
        assert not config.is_parallel()
        assert config.get_max_size_human_readable() == "unlimited"

    def test_custom_config(self):
        """Test custom limits."""
        config = LimitsConfig(max_files=500, max_bytes_per_file=2048, max_workers=4)

        assert config.max_files == 500
        assert config.is_parallel()
        assert config.get_max_size_human_readable() == "2.0 KB"

    def test_invalid_limits(self):
        """Test that non-positive limits are rejected."""
        with pytest.raises(ValidationError):
            LimitsConfig(max_files=0)

        with pytest.raises(ValidationError):
            LimitsConfig(max_bytes_per_file=-1)

        with pytest.raises(ValidationError):
            LimitsConfig(max_workers=0)

        with pytest.raises(ValidationError):
            LimitsConfig(max_workers=1000)


class TestContentConfig:
    """Test cases for ContentConfig."""

    def test_default_config(self):
        """Test default decoding settings."""
        config = ContentConfig()

        assert config.encoding == "utf-8"
        assert config.errors == "replace"

    def test_custom_encoding(self):
        """Test a custom, valid encoding."""
        config = ContentConfig(encoding="latin-1", errors="ignore")

        assert config.encoding == "latin-1"
        assert config.errors == "ignore"

    def test_unknown_encoding(self):
        """Test that unknown encodings are rejected."""
        with pytest.raises(ValidationError, match="Unknown text encoding"):
            ContentConfig(encoding="no-such-codec")

    def test_unknown_error_handler(self):
        """Test that unknown error handlers are rejected."""
        with pytest.raises(ValidationError, match="Unknown decoding error handler"):
            ContentConfig(errors="shrug")


class TestProgressConfig:
    """Test cases for ProgressConfig."""

    def test_default_config(self):
        """Test default progress settings."""
        config = ProgressConfig()

        assert config.spinner_every == 10
        assert config.glyphs == "|/-\\"

    def test_invalid_progress_config(self):
        """Test invalid progress settings."""
        with pytest.raises(ValidationError):
            ProgressConfig(spinner_every=0)

        with pytest.raises(ValidationError):
            ProgressConfig(glyphs="")


class TestSearchConfig:
    """Test cases for SearchConfig."""

    def test_default_config(self):
        """Test the default configuration ignores nothing."""
        config = SearchConfig()

        assert config.ignore == []
        assert config.follow_symlinks is False
        assert isinstance(config.limits, LimitsConfig)
        assert not config.should_ignore("anything/at/all.txt")

    def test_nested_dict_creation(self):
        """Test creation from nested dictionaries."""
        config = SearchConfig(
            ignore=["*.pyc"],
            limits={'max_workers': 3},
            content={'encoding': 'utf-16'},
            progress={'spinner_every': 5}
        )

        assert config.limits.max_workers == 3
        assert config.content.encoding == 'utf-16'
        assert config.progress.spinner_every == 5

    def test_ignore_pattern_normalization(self):
        """Test that unanchored patterns get a **/ prefix."""
        config = SearchConfig(ignore=[
            "*.pyc",
            "**/.git/**",
            "/build",
            "./dist",
            "!keep.pyc",
            "",
            "   ",
            "# comment"
        ])

        assert config.ignore == [
            "**/*.pyc",
            "**/.git/**",
            "/build",
            "./dist",
            "!**/keep.pyc"
        ]

    def test_validate_configuration_default(self):
        """Test that defaults produce no warnings."""
        assert SearchConfig().validate_configuration() == []

    def test_validate_configuration_warnings(self):
        """Test warnings for questionable settings."""
        config = SearchConfig(
            follow_symlinks=True,
            limits={'max_files': 10, 'max_workers': 32},
            content={'errors': 'strict'}
        )

        warnings = config.validate_configuration()

        assert any("max_files" in w for w in warnings)
        assert any("max_workers" in w for w in warnings)
        assert any("symlinks" in w for w in warnings)
        assert any("Strict decoding" in w for w in warnings)

    def test_to_dict_and_from_dict(self):
        """Test dictionary conversion round trip."""
        config = SearchConfig(ignore=["*.log"], limits={'max_workers': 2})
        data = config.to_dict()

        assert data['ignore'] == ["**/*.log"]
        assert data['limits']['max_workers'] == 2
        assert data['content']['encoding'] == 'utf-8'

        restored = SearchConfig.from_dict(data)
        assert restored.ignore == config.ignore
        assert restored.limits == config.limits

    def test_string_representation(self):
        """Test string representation."""
        text = str(SearchConfig(limits={'max_workers': 4}))

        assert "Ignore patterns: 0" in text
        assert "Workers: 4" in text
        assert "Max file size: unlimited" in text


class TestValidateConfigDict:
    """Test cases for validate_config_dict."""

    def test_valid_dict(self):
        """Test a valid configuration dictionary."""
        result = validate_config_dict({
            'ignore': ['*.tmp'],
            'limits': {'max_files': 100}
        })

        assert result['ignore'] == ['**/*.tmp']
        assert result['limits']['max_files'] == 100

    def test_empty_dict(self):
        """Test that an empty dictionary yields defaults."""
        result = validate_config_dict({})

        assert result['ignore'] == []
        assert result['limits']['max_workers'] == 1

    def test_null_sections_use_defaults(self):
        """Test that null sections fall back to defaults."""
        result = validate_config_dict({'limits': None, 'ignore': None})

        assert result['limits']['max_workers'] == 1
        assert result['ignore'] == []

    def test_single_ignore_string(self):
        """Test that a single ignore pattern string is accepted."""
        result = validate_config_dict({'ignore': '*.bak'})
        assert result['ignore'] == ['**/*.bak']

    def test_unknown_keys(self):
        """Test that unknown keys are rejected."""
        with pytest.raises(ValueError, match="Unknown configuration keys: roots"):
            validate_config_dict({'roots': ['.']})

    def test_invalid_ignore_type(self):
        """Test that a non-list ignore value is rejected."""
        with pytest.raises(ValueError, match="'ignore' must be a list of strings"):
            validate_config_dict({'ignore': [1, 2]})

    def test_invalid_section_type(self):
        """Test that sections must be mappings."""
        with pytest.raises(ValueError, match="'limits' must be a mapping"):
            validate_config_dict({'limits': 5})

    def test_invalid_values(self):
        """Test that invalid nested values are rejected."""
        with pytest.raises(ValueError, match="Configuration validation failed"):
            validate_config_dict({'limits': {'max_workers': -2}})
