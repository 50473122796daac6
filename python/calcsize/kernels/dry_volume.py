"""Dry aerosol volume from mass mixing ratios."""

from __future__ import annotations

import numpy as np

__all__ = ["compute_dry_volume"]


def compute_dry_volume(
    imode: int,
    inv_density: np.ndarray,
    q_aero_i: np.ndarray,
    q_aero_c: np.ndarray,
    k: int | slice | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Compute interstitial and cloud-borne dry volume of one mode.

    Volume is ``mmr / density`` summed over the member species of the mode.
    Negative mixing ratios are treated as zero, so the result is never
    negative.

    Parameters
    ----------
    imode
        Mode index
    inv_density
        Inverse densities, shape ``(num_modes, max_species)``. Slots that are
        not used by a mode must be zero.
    q_aero_i
        Interstitial mass mixing ratios, shape
        ``(num_levels, num_modes, max_species)``
    q_aero_c
        Cloud-borne mass mixing ratios, same shape as ``q_aero_i``
    k
        Level index or slice. All levels when ``None``.

    Returns
    -------
    tuple[np.ndarray, np.ndarray]
        ``(dryvol_i, dryvol_c)``, one value per selected level
    """
    levels = slice(None) if k is None else k
    inv_density_m = inv_density[imode]

    q_i = np.maximum(q_aero_i[levels, imode, :], 0.0)
    q_c = np.maximum(q_aero_c[levels, imode, :], 0.0)

    dryvol_i = np.sum(q_i * inv_density_m, axis=-1)
    dryvol_c = np.sum(q_c * inv_density_m, axis=-1)
    return dryvol_i, dryvol_c
