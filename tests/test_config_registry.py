"""
Unit tests for calcsize.config.registry.
"""

from __future__ import annotations

import pytest

from calcsize import CalcSize
from calcsize.config.exceptions import ProcessNotFoundError
from calcsize.config.registry import ProcessRegistry, process_registry
from calcsize.process import AerosolProcess


class First(AerosolProcess):
    """Placeholder process."""

    @classmethod
    def from_parameters(cls, params, registry=None):
        return cls()


class Second(First):
    """Placeholder process."""


class NotConfigurable(AerosolProcess):
    """A process without a from_parameters constructor."""


class TestProcessRegistry:
    """Tests for ProcessRegistry."""

    def test_register_and_get(self):
        """Registered classes are returned by name."""
        registry = ProcessRegistry()
        registry.register("first", First)
        assert registry.get("first") is First

    def test_register_twice(self):
        """Registering the same class again is a no-op."""
        registry = ProcessRegistry()
        registry.register("first", First)
        registry.register("first", First)
        assert registry.get("first") is First

    def test_name_clash(self):
        """A name cannot be reused for another class."""
        registry = ProcessRegistry()
        registry.register("first", First)
        with pytest.raises(ValueError, match="already registered"):
            registry.register("first", Second)

    @pytest.mark.parametrize("process_class", [NotConfigurable, dict, "CalcSize"])
    def test_rejects_unbuildable(self, process_class):
        """Only processes that can be built from parameters are accepted."""
        with pytest.raises(TypeError, match="from_parameters"):
            ProcessRegistry().register("bad", process_class)

    def test_not_found_lists_sorted(self):
        """Unknown names list the available processes alphabetically."""
        registry = ProcessRegistry()
        registry.register("zeta", First)
        registry.register("alpha", Second)
        with pytest.raises(
            ProcessNotFoundError, match="Available processes: 'alpha', 'zeta'"
        ):
            registry.get("third")

    def test_not_found_empty(self):
        """An empty registry says so."""
        with pytest.raises(ProcessNotFoundError, match="No processes are registered"):
            ProcessRegistry().get("anything")


def test_calcsize_registered():
    """Importing the model configuration registers CalcSize."""
    import calcsize.config.models  # noqa: F401, PLC0415

    assert process_registry.get("CalcSize") is CalcSize
