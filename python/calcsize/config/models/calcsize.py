"""
Parameters of the calcsize process.

Example
-------
    >>> from calcsize.config.models.calcsize import CalcSizeParameters
    >>> params = CalcSizeParameters(do_aitacc_transfer=False)
    >>> params.adjustment_timescale
    86400.0
"""

from __future__ import annotations

from dataclasses import dataclass, field

from calcsize.calcsize import CalcSize
from calcsize.config.base import ColumnConfig, ModelConfig
from calcsize.config.parameters import parameter, validate_parameters
from calcsize.config.registry import process_registry
from calcsize.kernels import SECONDS_IN_A_DAY
from calcsize.modes import ModeRegistry

__all__ = ["CalcSizeConfig", "CalcSizeParameters"]


@dataclass
class CalcSizeParameters:
    """Switches and timescale of the calcsize process.

    Attributes
    ----------
    do_adjust : bool
        Relax number mixing ratios towards each mode's size limits
    do_aitacc_transfer : bool
        Move particles between the Aitken and Accumulation modes
    adjustment_timescale : float
        Relaxation timescale of the number adjustment and mode transfer (s)
    check_nonnegative : bool
        Fail on negative prognostic fields (debug runs)
    """

    do_adjust: bool = parameter(
        default=True,
        description="Relax number mixing ratios towards the mode size limits",
        choices=[True, False],
    )

    do_aitacc_transfer: bool = parameter(
        default=True,
        description="Transfer particles between the Aitken and Accumulation modes",
        choices=[True, False],
    )

    adjustment_timescale: float = parameter(
        default=SECONDS_IN_A_DAY,
        unit="s",
        description=(
            "Timescale of the number adjustment and mode transfer. "
            "Steps longer than this use the step length."
        ),
        range=(1.0, 1.0e7),
        source="Liu et al. (2016), MAM4",
    )

    check_nonnegative: bool = parameter(
        default=False,
        description="Raise when a prognostic field is negative on entry",
        choices=[True, False],
    )

    def __post_init__(self) -> None:
        """Validate parameters after initialisation."""
        errors = validate_parameters(self)
        if errors:
            msg = f"Invalid parameters: {errors}"
            raise ValueError(msg)


@dataclass
class CalcSizeConfig(ModelConfig):
    """Complete configuration of a calcsize column.

    Attributes
    ----------
    model_type : str
        Model type identifier (defaults to "calcsize")
    process : str
        Registered name of the process to build
    calcsize : CalcSizeParameters
        Process parameters
    registry : ModeRegistry | None
        Mode and species table. The MAM4 table is used when None.
    column : ColumnConfig | None
        Column size (inherited from ModelConfig)

    Example
    -------
        >>> from calcsize.config.models.calcsize import CalcSizeConfig
        >>> config = CalcSizeConfig(name="single-column", column=ColumnConfig(1))
        >>> config.model_type
        'calcsize'
    """

    model_type: str = "calcsize"
    process: str = "CalcSize"
    calcsize: CalcSizeParameters = field(default_factory=CalcSizeParameters)
    registry: ModeRegistry | None = None
    column: ColumnConfig | None = field(default_factory=ColumnConfig)


process_registry.register("CalcSize", CalcSize)
