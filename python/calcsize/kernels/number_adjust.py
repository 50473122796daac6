"""
Number adjustment for interstitial and cloud-borne aerosol.

If the number mixing ratio of a mode is outside the range implied by its
dry volume and volume-to-number limits, the interstitial and cloud-borne
numbers are rebalanced to bring it back. The adjustment is assumed to take
one relaxation timescale (a day by default); a single step only applies the
fraction ``dt / timescale`` of the full correction.

Four mutually exclusive situations exist for every level:

- both dry volumes are zero: both numbers are set to zero
- only the cloud-borne volume is zero: cloud-borne number is zero and the
  interstitial number is relaxed towards the strict limits
- only the interstitial volume is zero: the symmetric case
- both volumes are positive: relaxed limits per phase, then strict limits on
  the combined number (see :func:`_adjust_both_phases`)

All four are evaluated as masked array operations over the level axis.
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np

__all__ = [
    "CLOSE_TO_ONE",
    "SECONDS_IN_A_DAY",
    "NumberAdjustment",
    "adjust_num_sizes",
    "min_max_bounded",
    "update_num_adj_tends",
]

CLOSE_TO_ONE = 1.0 + 1.0e-15
SECONDS_IN_A_DAY = 86400.0


class NumberAdjustment(NamedTuple):
    """Adjusted numbers and their tendencies."""

    num_i: np.ndarray
    num_c: np.ndarray
    dqdt: np.ndarray
    dqqcwdt: np.ndarray


def min_max_bounded(drv, v2nmin, v2nmax, num):
    """Clamp ``num`` to ``[drv * v2nmin, drv * v2nmax]``."""
    return np.maximum(drv * v2nmin, np.minimum(drv * v2nmax, num))


def update_num_adj_tends(num, num0, dt_inverse):
    """Tendency taking ``num0`` to ``num``."""
    return (num - num0) * dt_inverse


def _adjust_both_phases(
    drv_i, drv_c, num_i, num_c, frac, v2nmin, v2nmax, v2nminrl, v2nmaxrl
):
    """Adjust numbers where both dry volumes are positive.

    Values in lanes where either volume is not positive are meaningless and
    must be masked out by the caller.
    """
    # Step 2a/2b: move each phase towards its relaxed limits
    numbnd = min_max_bounded(drv_i, v2nminrl, v2nmaxrl, num_i)
    delta_num_i_stp2 = (numbnd - num_i) * frac
    num_i_stp2 = num_i + delta_num_i_stp2

    numbnd = min_max_bounded(drv_c, v2nminrl, v2nmaxrl, num_c)
    delta_num_c_stp2 = (numbnd - num_c) * frac
    num_c_stp2 = num_c + delta_num_c_stp2

    # Step 2c: if only one phase moved, move the other the opposite way so
    # that num_i + num_c stays close to its original value
    delta_i_eq0 = delta_num_i_stp2 == 0.0
    delta_c_eq0 = delta_num_c_stp2 == 0.0
    num_i_stp2 = np.where(
        delta_i_eq0 & ~delta_c_eq0,
        min_max_bounded(drv_i, v2nminrl, v2nmaxrl, num_i - delta_num_c_stp2),
        num_i_stp2,
    )
    num_c_stp2 = np.where(
        delta_c_eq0 & ~delta_i_eq0,
        min_max_bounded(drv_c, v2nminrl, v2nmaxrl, num_c - delta_num_i_stp2),
        num_c_stp2,
    )

    # Step 3: strict limits on the combined number
    total_drv = drv_i + drv_c
    total_num = num_i_stp2 + num_c_stp2

    min_number_bound = total_drv * v2nmin
    max_number_bound = total_drv * v2nmax

    # share of the combined number, falling back to the volume share
    share_i = np.where(total_num > 0.0, num_i_stp2 / total_num, drv_i / total_drv)
    share_c = 1.0 - share_i

    delta_num_i_stp3 = np.zeros_like(total_num)
    delta_num_c_stp3 = np.zeros_like(total_num)

    for total_out, i_out, c_out, bound in (
        (
            total_num < min_number_bound,
            num_i_stp2 < drv_i * v2nmin,
            num_c_stp2 < drv_c * v2nmin,
            min_number_bound,
        ),
        (
            total_num > max_number_bound,
            num_i_stp2 > drv_i * v2nmax,
            num_c_stp2 > drv_c * v2nmax,
            max_number_bound,
        ),
    ):
        delta_num_t3 = (bound - total_num) * frac
        both_out = total_out & i_out & c_out

        delta_num_i_stp3 = np.where(
            both_out,
            delta_num_t3 * share_i,
            np.where(total_out & i_out, delta_num_t3, delta_num_i_stp3),
        )
        delta_num_c_stp3 = np.where(
            both_out,
            delta_num_t3 * share_c,
            np.where(total_out & c_out, delta_num_t3, delta_num_c_stp3),
        )

    return num_i_stp2 + delta_num_i_stp3, num_c_stp2 + delta_num_c_stp3


def adjust_num_sizes(  # noqa: PLR0913
    drv_i,
    drv_c,
    init_num_i,
    init_num_c,
    dt: float,
    v2nmin: float,
    v2nmax: float,
    v2nminrl: float,
    v2nmaxrl: float,
    adj_tscale_inv: float,
    close_to_one: float = CLOSE_TO_ONE,
) -> NumberAdjustment:
    """
    Bring interstitial and cloud-borne numbers within their limits.

    Parameters
    ----------
    drv_i, drv_c
        Interstitial and cloud-borne dry volumes (scalar or per level)
    init_num_i, init_num_c
        Number mixing ratios at the start of the step. May be negative.
    dt
        Time step [s]
    v2nmin, v2nmax
        Strict volume-to-number limits
    v2nminrl, v2nmaxrl
        Relaxed volume-to-number limits
    adj_tscale_inv
        Inverse of the adjustment timescale [1/s]
    close_to_one
        Slightly more than one, guards the step inverse

    Returns
    -------
    NumberAdjustment
        Adjusted numbers and tendencies ``(num - init_num) / (dt * close_to_one)``
    """
    drv_i, drv_c, init_num_i, init_num_c = np.broadcast_arrays(
        np.asarray(drv_i, dtype=float),
        np.asarray(drv_c, dtype=float),
        np.asarray(init_num_i, dtype=float),
        np.asarray(init_num_c, dtype=float),
    )

    # fraction of the adjustment timescale covered by this step
    frac_adj_in_dt = max(0.0, min(1.0, dt * adj_tscale_inv))
    dtinv = 1.0 / (dt * close_to_one)

    # numbers start non-negative
    num_i = np.maximum(init_num_i, 0.0)
    num_c = np.maximum(init_num_c, 0.0)

    drv_i_le_zero = drv_i <= 0.0
    drv_c_le_zero = drv_c <= 0.0

    # no volume, no particles
    num_i = np.where(drv_i_le_zero, 0.0, num_i)
    num_c = np.where(drv_c_le_zero, 0.0, num_c)

    # only one phase holds volume: relax it towards the strict limits
    only_drv_c_le_zero = ~drv_i_le_zero & drv_c_le_zero
    numbnd = min_max_bounded(drv_i, v2nmin, v2nmax, num_i)
    num_i = np.where(
        only_drv_c_le_zero, num_i + (numbnd - num_i) * frac_adj_in_dt, num_i
    )
    only_drv_i_le_zero = drv_i_le_zero & ~drv_c_le_zero
    numbnd = min_max_bounded(drv_c, v2nmin, v2nmax, num_c)
    num_c = np.where(
        only_drv_i_le_zero, num_c + (numbnd - num_c) * frac_adj_in_dt, num_c
    )

    drv_i_c_gt_zero = ~drv_i_le_zero & ~drv_c_le_zero
    if np.any(drv_i_c_gt_zero):
        with np.errstate(divide="ignore", invalid="ignore"):
            num_i_both, num_c_both = _adjust_both_phases(
                drv_i,
                drv_c,
                num_i,
                num_c,
                frac_adj_in_dt,
                v2nmin,
                v2nmax,
                v2nminrl,
                v2nmaxrl,
            )
        num_i = np.where(drv_i_c_gt_zero, num_i_both, num_i)
        num_c = np.where(drv_i_c_gt_zero, num_c_both, num_c)

    dqdt = update_num_adj_tends(num_i, init_num_i, dtinv)
    dqqcwdt = update_num_adj_tends(num_c, init_num_c, dtinv)

    # 0-d arrays come back as numpy scalars
    return NumberAdjustment(num_i[()], num_c[()], dqdt[()], dqqcwdt[()])
