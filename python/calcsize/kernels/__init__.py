"""
Numerical kernels of the calcsize process.

Every kernel works on scalars or on arrays over vertical levels; the case
splits are written as masked array selections so that all levels are
processed together.
"""

from __future__ import annotations

from .diameter import update_diameter_and_vol2num
from .dry_volume import compute_dry_volume
from .limits import (
    RELAX_FACTOR,
    SZADJ_BLOCK_FACTOR,
    RelaxedLimits,
    get_relaxed_v2n_limits,
)
from .number_adjust import (
    CLOSE_TO_ONE,
    SECONDS_IN_A_DAY,
    NumberAdjustment,
    adjust_num_sizes,
    min_max_bounded,
    update_num_adj_tends,
)
from .transfer import (
    ExchangeConstants,
    ExchangeResult,
    ModeSnapshot,
    TransferCoefficients,
    aitken_accum_exchange,
    compute_coef_acc_ait_transfer,
    compute_coef_ait_acc_transfer,
)

__all__ = [
    "CLOSE_TO_ONE",
    "RELAX_FACTOR",
    "SECONDS_IN_A_DAY",
    "SZADJ_BLOCK_FACTOR",
    "ExchangeConstants",
    "ExchangeResult",
    "ModeSnapshot",
    "NumberAdjustment",
    "RelaxedLimits",
    "TransferCoefficients",
    "adjust_num_sizes",
    "aitken_accum_exchange",
    "compute_coef_acc_ait_transfer",
    "compute_coef_ait_acc_transfer",
    "compute_dry_volume",
    "get_relaxed_v2n_limits",
    "min_max_bounded",
    "update_diameter_and_vol2num",
    "update_num_adj_tends",
]
