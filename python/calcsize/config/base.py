"""
Base classes for calcsize configuration.

- ColumnConfig: Size of the vertical column
- ModelConfig: Base configuration shared by all model types
"""

from __future__ import annotations

from dataclasses import dataclass

from calcsize.modes import NUM_MODES
from calcsize.state import Diagnostics, Prognostics, Tendencies

__all__ = ["ColumnConfig", "ModelConfig"]


@dataclass
class ColumnConfig:
    """
    Column configuration.

    Parameters
    ----------
    num_levels
        Number of vertical levels

    Raises
    ------
    ValueError
        If num_levels is not positive
    """

    num_levels: int = 72

    def __post_init__(self) -> None:
        """Validate the number of levels."""
        if self.num_levels <= 0:
            msg = f"num_levels ({self.num_levels}) must be positive"
            raise ValueError(msg)

    def allocate(
        self, num_modes: int = NUM_MODES
    ) -> tuple[Prognostics, Diagnostics, Tendencies]:
        """
        Allocate zeroed containers for this column.

        Parameters
        ----------
        num_modes
            Number of aerosol modes

        Returns
        -------
        tuple[Prognostics, Diagnostics, Tendencies]
            Containers sized ``num_levels`` by ``num_modes``
        """
        return (
            Prognostics(self.num_levels, num_modes),
            Diagnostics(self.num_levels, num_modes),
            Tendencies(self.num_levels, num_modes),
        )


@dataclass
class ModelConfig:
    """
    Base model configuration.

    Parameters
    ----------
    name
        Model name
    model_type
        Type of model (e.g., "calcsize")
    version
        Model version
    config_schema
        Configuration schema version
    description
        Model description
    column
        Column configuration
    """

    name: str
    model_type: str = ""
    version: str = "1.0.0"
    config_schema: str = "1.0.0"
    description: str = ""
    column: ColumnConfig | None = None
