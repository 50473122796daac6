"""
Core classes and functions of the calcsize aerosol process
"""

from calcsize.calcsize import CalcSize
from calcsize.modes import (
    MAX_SPECIES_PER_MODE,
    NUM_MODES,
    Mode,
    ModeRegistry,
    Species,
    mam4_registry,
)
from calcsize.process import (
    AerosolProcess,
    Input,
    Output,
    RequirementDefinition,
    RequirementType,
    State,
)
from calcsize.state import (
    Diagnostics,
    NegativeQuantityError,
    Prognostics,
    Tendencies,
)

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
    "mam4_registry",
]
