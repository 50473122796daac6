"""
Aerosol mode size diagnosis and Aitken <-> Accumulation transfer.

Example:
    >>> from calcsize import CalcSize, Diagnostics, Prognostics, Tendencies
    >>> process = CalcSize()
"""

from __future__ import annotations

from calcsize.core import (
    MAX_SPECIES_PER_MODE,
    NUM_MODES,
    AerosolProcess,
    CalcSize,
    Diagnostics,
    Input,
    Mode,
    ModeRegistry,
    NegativeQuantityError,
    Output,
    Prognostics,
    RequirementDefinition,
    RequirementType,
    Species,
    State,
    Tendencies,
    mam4_registry,
)

__version__ = "0.1.0"

__all__ = [
    "MAX_SPECIES_PER_MODE",
    "NUM_MODES",
    "AerosolProcess",
    "CalcSize",
    "Diagnostics",
    "Input",
    "Mode",
    "ModeRegistry",
    "NegativeQuantityError",
    "Output",
    "Prognostics",
    "RequirementDefinition",
    "RequirementType",
    "Species",
    "State",
    "Tendencies",
    "__version__",
    "mam4_registry",
]
