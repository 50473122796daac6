"""
Column state containers.

Containers are sized once, when a column is configured, and mutated in place
every time step afterwards:

- Prognostics: number and mass mixing ratios
- Diagnostics: current diameters and volume-to-number ratios
- Tendencies: same layout as Prognostics, rates of change over a step
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING

import numpy as np

from .modes import MAX_SPECIES_PER_MODE, NUM_MODES

if TYPE_CHECKING:
    import pandas as pd

    from .modes import ModeRegistry

__all__ = ["Diagnostics", "NegativeQuantityError", "Prognostics", "Tendencies"]


class NegativeQuantityError(AssertionError):
    """
    Raised when a prognostic quantity that must be non-negative is negative.

    This points at a bug upstream of the caller (configuration or another
    process) and is meant to fail loudly in tests and debug runs.
    """


def _check_num_levels(num_levels: int) -> None:
    if num_levels <= 0:
        msg = f"num_levels ({num_levels}) must be positive"
        raise ValueError(msg)


@dataclass
class Prognostics:
    """
    Prognostic aerosol fields of one column.

    Parameters
    ----------
    num_levels
        Number of vertical levels
    num_modes
        Number of aerosol modes

    Attributes
    ----------
    n_mode_i, n_mode_c
        Interstitial and cloud-borne number mixing ratios,
        shape ``(num_levels, num_modes)``
    q_aero_i, q_aero_c
        Interstitial and cloud-borne mass mixing ratios,
        shape ``(num_levels, num_modes, MAX_SPECIES_PER_MODE)``
    """

    num_levels: int
    num_modes: int = NUM_MODES
    n_mode_i: np.ndarray = field(init=False, repr=False)
    n_mode_c: np.ndarray = field(init=False, repr=False)
    q_aero_i: np.ndarray = field(init=False, repr=False)
    q_aero_c: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Allocate zero-initialised fields."""
        _check_num_levels(self.num_levels)
        number_shape = (self.num_levels, self.num_modes)
        mass_shape = (self.num_levels, self.num_modes, MAX_SPECIES_PER_MODE)
        self.n_mode_i = np.zeros(number_shape)
        self.n_mode_c = np.zeros(number_shape)
        self.q_aero_i = np.zeros(mass_shape)
        self.q_aero_c = np.zeros(mass_shape)

    def field_names(self) -> list[str]:
        """Names of the array fields."""
        return [f.name for f in fields(self) if not f.init]

    def zero(self) -> None:
        """Reset every field to zero."""
        for name in self.field_names():
            getattr(self, name)[...] = 0.0

    def quantities_nonnegative(self) -> bool:
        """Whether every number and mass mixing ratio is non-negative."""
        return not any(
            np.any(getattr(self, name) < 0.0) for name in self.field_names()
        )

    def check_nonnegative(self) -> None:
        """
        Assert that all quantities are non-negative.

        Raises
        ------
        NegativeQuantityError
            Listing the offending fields
        """
        negative = [
            name for name in self.field_names() if np.any(getattr(self, name) < 0.0)
        ]
        if negative:
            msg = f"Negative values found in prognostic fields: {', '.join(negative)}"
            raise NegativeQuantityError(msg)


@dataclass
class Tendencies(Prognostics):
    """Tendencies of the prognostic fields, same layout as Prognostics."""


@dataclass
class Diagnostics:
    """
    Diagnostic aerosol fields of one column.

    Attributes
    ----------
    dgncur_i, dgncur_c
        Current number median diameter [m] per phase,
        shape ``(num_levels, num_modes)``
    v2ncur_i, v2ncur_c
        Current volume-to-number ratio [1/m^3] per phase
    """

    num_levels: int
    num_modes: int = NUM_MODES
    dgncur_i: np.ndarray = field(init=False, repr=False)
    dgncur_c: np.ndarray = field(init=False, repr=False)
    v2ncur_i: np.ndarray = field(init=False, repr=False)
    v2ncur_c: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Allocate zero-initialised fields."""
        _check_num_levels(self.num_levels)
        shape = (self.num_levels, self.num_modes)
        self.dgncur_i = np.zeros(shape)
        self.dgncur_c = np.zeros(shape)
        self.v2ncur_i = np.zeros(shape)
        self.v2ncur_c = np.zeros(shape)

    def field_names(self) -> list[str]:
        """Names of the array fields."""
        return [f.name for f in fields(self) if not f.init]

    def to_dataframe(self, registry: ModeRegistry | None = None) -> pd.DataFrame:
        """
        Export the diagnostics as a long-format DataFrame.

        Requires the optional ``pandas`` dependency.

        Parameters
        ----------
        registry
            Used to label modes by name. Modes are labelled by index otherwise.

        Returns
        -------
        pd.DataFrame
            One row per level and mode, one column per diagnostic field
        """
        import pandas as pd  # noqa: PLC0415

        if registry is not None:
            mode_labels = list(registry.mode_names)
        else:
            mode_labels = list(range(self.num_modes))

        index = pd.MultiIndex.from_product(
            [range(self.num_levels), mode_labels], names=["level", "mode"]
        )
        return pd.DataFrame(
            {name: getattr(self, name).ravel() for name in self.field_names()},
            index=index,
        )
