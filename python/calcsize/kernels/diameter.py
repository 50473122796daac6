"""Current diameter and volume-to-number ratio from dry volume and number."""

from __future__ import annotations

import numpy as np

__all__ = ["update_diameter_and_vol2num"]


def update_diameter_and_vol2num(
    drv,
    num,
    v2nmin: float,
    v2nmax: float,
    dgnmin: float,
    dgnmax: float,
    cmn_factor: float,
    dgncur,
    v2ncur,
):
    """
    Update the diameter and volume-to-number ratio of one mode and phase.

    Where ``drv <= 0`` the supplied ``dgncur`` and ``v2ncur`` are returned
    untouched. Otherwise a number at or below ``drv * v2nmin`` pins the
    outputs to ``(dgnmin, v2nmin)`` and a number at or above ``drv * v2nmax``
    pins them to ``(dgnmax, v2nmax)``. In between, the diameter follows from
    the mean particle volume ``drv / num``.

    Parameters
    ----------
    drv
        Dry volume (scalar or per level)
    num
        Number mixing ratio
    v2nmin, v2nmax
        Strict volume-to-number limits
    dgnmin, dgnmax
        Mode minimum and maximum diameters
    cmn_factor
        Mode shape constant
    dgncur, v2ncur
        Current values, returned where the dry volume is not positive

    Returns
    -------
    tuple
        ``(dgncur, v2ncur)`` with the same shape as the broadcast inputs
    """
    drv, num, dgncur, v2ncur = np.broadcast_arrays(
        np.asarray(drv, dtype=float),
        np.asarray(num, dtype=float),
        np.asarray(dgncur, dtype=float),
        np.asarray(v2ncur, dtype=float),
    )

    drv_gt_0 = drv > 0.0
    if not np.any(drv_gt_0):
        return dgncur.copy()[()], v2ncur.copy()[()]

    drv_mul_v2nmin = drv * v2nmin
    drv_mul_v2nmax = drv * v2nmax
    at_min = num <= drv_mul_v2nmin
    at_max = num >= drv_mul_v2nmax

    with np.errstate(divide="ignore", invalid="ignore"):
        dgn_between = np.cbrt(drv / (cmn_factor * num))
        v2n_between = num / drv

    dgn = np.where(at_min, dgnmin, np.where(at_max, dgnmax, dgn_between))
    v2n = np.where(at_min, v2nmin, np.where(at_max, v2nmax, v2n_between))

    dgn = np.where(drv_gt_0, dgn, dgncur)
    v2n = np.where(drv_gt_0, v2n, v2ncur)
    return dgn[()], v2n[()]
