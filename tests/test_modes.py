"""
Unit tests for calcsize.modes and calcsize.conversions.
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from calcsize.conversions import (
    PI_SIXTH,
    diameter_from_mean_particle_volume,
    mean_particle_volume_from_diameter,
    mode_shape_factor,
    volume_to_number_ratio,
)
from calcsize.modes import (
    MAX_SPECIES_PER_MODE,
    NUM_MODES,
    Mode,
    ModeRegistry,
    Species,
    mam4_registry,
)


class TestConversions:
    """Tests for the lognormal conversions."""

    def test_shape_factor(self):
        """pi/6 * exp(4.5 ln^2 sigma)."""
        assert mode_shape_factor(1.8) == pytest.approx(
            math.pi / 6.0 * math.exp(4.5 * math.log(1.8) ** 2)
        )

    def test_monodisperse_limit(self):
        """A width of one gives the volume of a sphere."""
        assert mode_shape_factor(1.0) == pytest.approx(PI_SIXTH)

    def test_volume_diameter_inverse(self):
        """Diameter from volume undoes volume from diameter."""
        diameters = np.array([1e-8, 1e-7, 1e-6])
        volumes = mean_particle_volume_from_diameter(diameters, 1.6)
        np.testing.assert_allclose(
            diameter_from_mean_particle_volume(volumes, 1.6), diameters
        )

    def test_ratio_decreases_with_size(self):
        """Larger particles mean fewer of them per volume."""
        small, large = volume_to_number_ratio(np.array([1e-8, 1e-7]), 1.6)
        assert small == pytest.approx(1000.0 * large)


class TestMode:
    """Tests for Mode."""

    def test_ratios(self):
        """Minimum ratio at the maximum diameter and vice versa."""
        mode = Mode("test", 1e-8, 2e-8, 4e-8, 1.6)
        cmn = mode_shape_factor(1.6)
        assert mode.shape_factor == pytest.approx(cmn)
        assert mode.v2n_min == pytest.approx(1.0 / (cmn * 4e-8**3))
        assert mode.v2n_max == pytest.approx(1.0 / (cmn * 1e-8**3))
        assert mode.v2n_min < mode.v2n_nom < mode.v2n_max

    @pytest.mark.parametrize(
        "diameters",
        [(0.0, 1e-8, 2e-8), (2e-8, 1e-8, 3e-8), (1e-8, 3e-8, 2e-8)],
    )
    def test_invalid_diameters(self, diameters):
        """Diameters must be positive and ordered."""
        with pytest.raises(ValueError, match="diameters must satisfy"):
            Mode("bad", *diameters, 1.6)

    def test_invalid_width(self):
        """The geometric standard deviation must exceed one."""
        with pytest.raises(ValueError, match="must be greater than 1"):
            Mode("bad", 1e-8, 2e-8, 3e-8, 1.0)

    def test_frozen(self):
        """Modes cannot be modified."""
        mode = Mode("test", 1e-8, 2e-8, 4e-8, 1.6)
        with pytest.raises(AttributeError):
            mode.nom_diameter = 3e-8


class TestSpecies:
    """Tests for Species."""

    @pytest.mark.parametrize("density", [0.0, -1.0])
    def test_density_positive(self, density):
        """Density must be positive."""
        with pytest.raises(ValueError, match="must be positive"):
            Species("bad", density)


def _registry(**kwargs):
    defaults = {
        "modes": (
            Mode("big", 1e-7, 2e-7, 4e-7, 1.8),
            Mode("small", 1e-8, 2e-8, 4e-8, 1.6),
        ),
        "species": (Species("A", 1000.0), Species("B", 2000.0)),
        "mode_species": (("A", "B"), ("A",)),
        "aitken": "small",
        "accumulation": "big",
    }
    defaults.update(kwargs)
    return ModeRegistry(**defaults)


class TestModeRegistry:
    """Tests for ModeRegistry."""

    def test_indices(self):
        """Roles resolve to mode indices."""
        registry = _registry()
        assert registry.num_modes == 2
        assert registry.aitken_index == 1
        assert registry.accumulation_index == 0

    def test_inverse_density_padding(self):
        """Unused species slots have zero inverse density."""
        inv_density = _registry().inverse_density()
        assert inv_density.shape == (2, MAX_SPECIES_PER_MODE)
        np.testing.assert_allclose(inv_density[0, :3], [1e-3, 5e-4, 0.0])
        np.testing.assert_allclose(inv_density[1, :2], [1e-3, 0.0])

    def test_transfer_pairs(self):
        """Species without a counterpart are not transferred."""
        registry = _registry()
        assert registry.transfer_pairs("big", "small") == [(0, 0)]
        assert registry.transfer_pairs("small", "big") == [(0, 0)]

    def test_no_transfer_species(self):
        """No-transfer species are skipped from accumulation to aitken only."""
        registry = _registry(no_transfer_acc2ait={"A"})
        assert registry.transfer_pairs("big", "small") == []
        assert registry.transfer_pairs("small", "big") == [(0, 0)]
        mask = registry.no_transfer_mask()
        assert mask[:2].tolist() == [True, True]
        assert not mask[2:].any()

    def test_unknown_mode(self):
        """Looking up an unknown mode raises KeyError."""
        with pytest.raises(KeyError, match="Unknown mode 'medium'"):
            _registry().mode_index("medium")

    def test_unknown_species(self):
        """Looking up an unknown species raises KeyError."""
        with pytest.raises(KeyError, match="Unknown species 'C'"):
            _registry().species_by_name("C")

    @pytest.mark.parametrize(
        "kwargs,match",
        [
            ({"mode_species": (("A",),)}, "mode_species has 1 entries"),
            ({"mode_species": (("A", "C"), ("A",))}, "unknown species"),
            ({"mode_species": (("A",) * 8, ("A",))}, "at most 7"),
            ({"aitken": "tiny"}, "Mode 'tiny' is not defined"),
            ({"aitken": "big"}, "must be different"),
            ({"no_transfer_acc2ait": {"C"}}, "no_transfer_acc2ait references"),
        ],
    )
    def test_invalid(self, kwargs, match):
        """Inconsistent tables are rejected."""
        with pytest.raises(ValueError, match=match):
            _registry(**kwargs)


class TestMam4Registry:
    """Tests for the default MAM4 table."""

    def test_layout(self):
        """Four modes in the MAM4 order."""
        registry = mam4_registry()
        assert registry.num_modes == NUM_MODES
        assert registry.mode_names == (
            "accumulation",
            "aitken",
            "coarse",
            "primary_carbon",
        )
        assert registry.accumulation_index == 0
        assert registry.aitken_index == 1

    def test_membership(self):
        """Mode membership follows MAM4."""
        registry = mam4_registry()
        assert len(registry.species_in_mode("accumulation")) == 7
        assert registry.species_in_mode("primary_carbon") == ("POM", "BC", "MOM")
        assert registry.no_transfer_acc2ait == frozenset({"POM", "BC", "DST"})


# Liu et al. (2016), Geosci. Model Dev. 9, 505-522, Table 1:
# (min, nominal, max) number median diameter [m] and geometric standard deviation
LIU_2016_MODES = {
    "accumulation": (5.35e-8, 1.1e-7, 4.4e-7, 1.8),
    "aitken": (8.7e-9, 2.6e-8, 5.2e-8, 1.6),
    "coarse": (1.0e-6, 2.0e-6, 4.0e-6, 1.8),
    "primary_carbon": (1.0e-8, 5.0e-8, 1.0e-7, 1.6),
}

# E3SM MAM4 physical property files, dry density [kg/m^3]
E3SM_MAM4_DENSITIES = {
    "SO4": 1770.0,
    "POM": 1000.0,
    "SOA": 1000.0,
    "BC": 1700.0,
    "DST": 2600.0,
    "NaCl": 1900.0,
    "MOM": 1601.0,
}

E3SM_MAM4_MEMBERSHIP = {
    "accumulation": ("SO4", "POM", "SOA", "BC", "DST", "NaCl", "MOM"),
    "aitken": ("SO4", "SOA", "NaCl", "MOM"),
    "coarse": ("DST", "NaCl", "SO4", "BC", "POM", "SOA", "MOM"),
    "primary_carbon": ("POM", "BC", "MOM"),
}


class TestMam4Reference:
    """The default table reproduces the published MAM4 configuration."""

    @pytest.mark.parametrize("name", list(LIU_2016_MODES))
    def test_mode_sizes(self, name):
        mode = mam4_registry().mode(name)
        assert (
            mode.min_diameter,
            mode.nom_diameter,
            mode.max_diameter,
            mode.mean_std_dev,
        ) == LIU_2016_MODES[name]

    def test_densities(self):
        registry = mam4_registry()
        assert {s.name: s.density for s in registry.species} == E3SM_MAM4_DENSITIES

    def test_membership(self):
        registry = mam4_registry()
        for name, members in E3SM_MAM4_MEMBERSHIP.items():
            assert registry.species_in_mode(name) == members
