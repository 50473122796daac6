"""
Aerosol mode and species registry.

The registry is the fixed table of lognormal modes and aerosol species that
every calcsize component reads. It is built once at configuration time and
is immutable afterwards, so it can be shared freely between columns.

Example
-------
    >>> from calcsize.modes import mam4_registry
    >>> registry = mam4_registry()
    >>> registry.mode_names
    ('accumulation', 'aitken', 'coarse', 'primary_carbon')
    >>> registry.species_in_mode("aitken")
    ('SO4', 'SOA', 'NaCl', 'MOM')
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .conversions import mode_shape_factor

__all__ = [
    "MAX_SPECIES_PER_MODE",
    "NUM_MODES",
    "Mode",
    "ModeRegistry",
    "Species",
    "mam4_registry",
]

NUM_MODES = 4
MAX_SPECIES_PER_MODE = 7


@dataclass(frozen=True)
class Mode:
    """
    A lognormal aerosol mode.

    Parameters
    ----------
    name
        Mode name (e.g. "aitken")
    min_diameter
        Lower bound of the number median diameter [m]
    nom_diameter
        Nominal number median diameter [m]
    max_diameter
        Upper bound of the number median diameter [m]
    mean_std_dev
        Geometric standard deviation (dimensionless, > 1)

    Raises
    ------
    ValueError
        If the diameters are not positive and ordered, or sigma <= 1
    """

    name: str
    min_diameter: float
    nom_diameter: float
    max_diameter: float
    mean_std_dev: float

    def __post_init__(self) -> None:
        """Validate diameter ordering and mode width."""
        if not 0.0 < self.min_diameter <= self.nom_diameter <= self.max_diameter:
            msg = (
                f"Mode '{self.name}' diameters must satisfy "
                f"0 < min ({self.min_diameter}) <= nom ({self.nom_diameter}) "
                f"<= max ({self.max_diameter})"
            )
            raise ValueError(msg)
        if self.mean_std_dev <= 1.0:
            msg = (
                f"Mode '{self.name}' mean_std_dev ({self.mean_std_dev}) "
                "must be greater than 1"
            )
            raise ValueError(msg)

    @property
    def shape_factor(self) -> float:
        """Volume = shape_factor * diameter**3 for this mode."""
        return mode_shape_factor(self.mean_std_dev)

    @property
    def v2n_nom(self) -> float:
        """Nominal volume-to-number ratio [1/m^3]."""
        return 1.0 / (self.shape_factor * self.nom_diameter**3)

    @property
    def v2n_min(self) -> float:
        """Minimum ratio, reached at the maximum diameter."""
        return 1.0 / (self.shape_factor * self.max_diameter**3)

    @property
    def v2n_max(self) -> float:
        """Maximum ratio, reached at the minimum diameter."""
        return 1.0 / (self.shape_factor * self.min_diameter**3)


@dataclass(frozen=True)
class Species:
    """
    An aerosol species.

    Parameters
    ----------
    name
        Species name (e.g. "SO4")
    density
        Dry density [kg/m^3]
    """

    name: str
    density: float

    def __post_init__(self) -> None:
        """Validate that density is positive."""
        if self.density <= 0.0:
            msg = f"Species '{self.name}' density ({self.density}) must be positive"
            raise ValueError(msg)


@dataclass(frozen=True)
class ModeRegistry:
    """
    Immutable table of modes, species and mode membership.

    Parameters
    ----------
    modes
        Modes, in index order
    species
        All aerosol species known to the registry
    mode_species
        For each mode (same order as ``modes``), the names of its member
        species in slot order. At most :data:`MAX_SPECIES_PER_MODE` per mode.
    aitken
        Name of the Aitken mode
    accumulation
        Name of the Accumulation mode
    no_transfer_acc2ait
        Names of species that stay in the Accumulation mode when particles
        are moved into the Aitken mode
    """

    modes: tuple[Mode, ...]
    species: tuple[Species, ...]
    mode_species: tuple[tuple[str, ...], ...]
    aitken: str = "aitken"
    accumulation: str = "accumulation"
    no_transfer_acc2ait: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        """Validate membership and the Aitken/Accumulation pair."""
        # Normalise containers so the registry stays hashable and read-only
        object.__setattr__(self, "modes", tuple(self.modes))
        object.__setattr__(self, "species", tuple(self.species))
        object.__setattr__(
            self, "mode_species", tuple(tuple(m) for m in self.mode_species)
        )
        object.__setattr__(
            self, "no_transfer_acc2ait", frozenset(self.no_transfer_acc2ait)
        )

        if len(self.mode_species) != len(self.modes):
            msg = (
                f"mode_species has {len(self.mode_species)} entries but there "
                f"are {len(self.modes)} modes"
            )
            raise ValueError(msg)

        known = {s.name for s in self.species}
        for mode, members in zip(self.modes, self.mode_species):
            if len(members) > MAX_SPECIES_PER_MODE:
                msg = (
                    f"Mode '{mode.name}' has {len(members)} species, "
                    f"at most {MAX_SPECIES_PER_MODE} are supported"
                )
                raise ValueError(msg)
            unknown = sorted(set(members) - known)
            if unknown:
                msg = f"Mode '{mode.name}' references unknown species: {unknown}"
                raise ValueError(msg)

        names = self.mode_names
        for role in (self.aitken, self.accumulation):
            if role not in names:
                msg = f"Mode '{role}' is not defined (available: {list(names)})"
                raise ValueError(msg)
        if self.aitken == self.accumulation:
            msg = "The Aitken and Accumulation modes must be different"
            raise ValueError(msg)

        unknown = sorted(self.no_transfer_acc2ait - known)
        if unknown:
            msg = f"no_transfer_acc2ait references unknown species: {unknown}"
            raise ValueError(msg)

    @property
    def num_modes(self) -> int:
        """Number of modes."""
        return len(self.modes)

    @property
    def mode_names(self) -> tuple[str, ...]:
        """Mode names in index order."""
        return tuple(m.name for m in self.modes)

    @property
    def aitken_index(self) -> int:
        """Index of the Aitken mode."""
        return self.mode_index(self.aitken)

    @property
    def accumulation_index(self) -> int:
        """Index of the Accumulation mode."""
        return self.mode_index(self.accumulation)

    def mode_index(self, name: str) -> int:
        """Index of the mode called ``name``."""
        try:
            return self.mode_names.index(name)
        except ValueError as err:
            msg = f"Unknown mode '{name}' (available: {list(self.mode_names)})"
            raise KeyError(msg) from err

    def mode(self, name: str) -> Mode:
        """Look up a mode by name."""
        return self.modes[self.mode_index(name)]

    def species_by_name(self, name: str) -> Species:
        """Look up a species by name."""
        for s in self.species:
            if s.name == name:
                return s
        raise KeyError(f"Unknown species '{name}'")

    def species_in_mode(self, name: str) -> tuple[str, ...]:
        """Member species names of a mode, in slot order."""
        return self.mode_species[self.mode_index(name)]

    def inverse_density(self) -> np.ndarray:
        """
        Inverse densities per mode and species slot.

        Returns
        -------
        np.ndarray
            Array of shape ``(num_modes, MAX_SPECIES_PER_MODE)``. Unused slots
            are zero so they never contribute to a dry volume.
        """
        inv_density = np.zeros((self.num_modes, MAX_SPECIES_PER_MODE))
        for m, members in enumerate(self.mode_species):
            for ispec, name in enumerate(members):
                inv_density[m, ispec] = 1.0 / self.species_by_name(name).density
        return inv_density

    def transfer_pairs(self, source: str, dest: str) -> list[tuple[int, int]]:
        """
        Species slot pairs for moving mass from ``source`` to ``dest``.

        A source species is paired with the destination slot holding the same
        species. Species without a counterpart in the destination mode are
        not transferable. When moving from the Accumulation to the Aitken
        mode, species in ``no_transfer_acc2ait`` are skipped as well.
        """
        src_members = self.species_in_mode(source)
        dest_members = self.species_in_mode(dest)
        skip: frozenset[str] = frozenset()
        if source == self.accumulation and dest == self.aitken:
            skip = self.no_transfer_acc2ait

        pairs = []
        for isrc, name in enumerate(src_members):
            if name in skip or name not in dest_members:
                continue
            pairs.append((isrc, dest_members.index(name)))
        return pairs

    def no_transfer_mask(self) -> np.ndarray:
        """Boolean mask over the Accumulation species slots that stay put."""
        mask = np.zeros(MAX_SPECIES_PER_MODE, dtype=bool)
        pairs = self.transfer_pairs(self.accumulation, self.aitken)
        movable = {isrc for isrc, _ in pairs}
        for ispec in range(len(self.species_in_mode(self.accumulation))):
            mask[ispec] = ispec not in movable
        return mask


# MAM4 defaults. Size ranges and widths: Liu et al. (2016), Geosci. Model Dev. 9,
# 505-522, Table 1. Densities: E3SM MAM4 physical property files.
_MAM4_MODES = (
    Mode("accumulation", 5.35e-8, 1.1e-7, 4.4e-7, 1.8),
    Mode("aitken", 8.7e-9, 2.6e-8, 5.2e-8, 1.6),
    Mode("coarse", 1.0e-6, 2.0e-6, 4.0e-6, 1.8),
    Mode("primary_carbon", 1.0e-8, 5.0e-8, 1.0e-7, 1.6),
)

_MAM4_SPECIES = (
    Species("SO4", 1770.0),
    Species("POM", 1000.0),
    Species("SOA", 1000.0),
    Species("BC", 1700.0),
    Species("DST", 2600.0),
    Species("NaCl", 1900.0),
    Species("MOM", 1601.0),
)

_MAM4_MODE_SPECIES = (
    ("SO4", "POM", "SOA", "BC", "DST", "NaCl", "MOM"),
    ("SO4", "SOA", "NaCl", "MOM"),
    ("DST", "NaCl", "SO4", "BC", "POM", "SOA", "MOM"),
    ("POM", "BC", "MOM"),
)


def mam4_registry() -> ModeRegistry:
    """
    Build the default four-mode MAM4 registry.

    Primary organic matter, black carbon and dust are never moved from the
    Accumulation mode into the Aitken mode.
    """
    return ModeRegistry(
        modes=_MAM4_MODES,
        species=_MAM4_SPECIES,
        mode_species=_MAM4_MODE_SPECIES,
        no_transfer_acc2ait=frozenset({"POM", "BC", "DST"}),
    )
