"""
Unit tests for calcsize.config.validation.
"""

from __future__ import annotations

import logging

import pytest

from calcsize.config.exceptions import (
    ConfigError,
    IncompatibleSchemaError,
    ValidationError,
)
from calcsize.config.validation import (
    SCHEMA_VERSION,
    check_schema_version,
    find_unknown_keys,
)


class TestCheckSchemaVersion:
    """Tests for check_schema_version."""

    def test_same_version(self, caplog):
        """Equal versions are accepted silently."""
        with caplog.at_level(logging.WARNING):
            check_schema_version(SCHEMA_VERSION)
        assert caplog.text == ""

    def test_older_minor(self, caplog):
        """Older minor versions are accepted silently."""
        with caplog.at_level(logging.WARNING):
            check_schema_version("1.0.0", "1.3.0")
        assert caplog.text == ""

    def test_newer_minor_warns(self, caplog):
        """Newer minor versions are accepted with a warning naming the source."""
        with caplog.at_level(logging.WARNING, logger="calcsize.config.validation"):
            check_schema_version("1.2.0", "1.0.0", source="tuning.toml")
        assert "tuning.toml uses schema version 1.2.0" in caplog.text

    def test_patch_ignored(self, caplog):
        """Patch versions never matter."""
        with caplog.at_level(logging.WARNING):
            check_schema_version("1.0.9", "1.0.0")
        assert caplog.text == ""

    def test_major_mismatch(self):
        """A different major version cannot be read."""
        with pytest.raises(IncompatibleSchemaError) as excinfo:
            check_schema_version("2.0.0", "1.0.0")
        assert excinfo.value.config_version == "2.0.0"
        assert excinfo.value.loader_version == "1.0.0"
        assert isinstance(excinfo.value, ConfigError)

    @pytest.mark.parametrize("version", ["one", "1.2", "1.2.3.4", "1.0.rc1", "", 1])
    def test_invalid_version(self, version):
        """Malformed versions are validation errors."""
        with pytest.raises(ValidationError, match="expected 'MAJOR.MINOR.PATCH'"):
            check_schema_version(version)


class TestFindUnknownKeys:
    """Tests for find_unknown_keys."""

    def test_unknown_sorted(self):
        """Unknown keys are returned in sorted order."""
        data = {"zeta": 1, "column": 2, "alpha": 3}
        assert find_unknown_keys(data, {"column"}) == ["alpha", "zeta"]

    def test_all_known(self):
        """Nothing is returned when every key is known."""
        assert find_unknown_keys({"column": 1}, {"column", "model"}) == []
