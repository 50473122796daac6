"""
Relaxed volume-to-number limits.

Number adjustment between the interstitial and cloud-borne phases uses
limits that are wider than the mode's own limits. The relaxation is a factor
of 3 in diameter, i.e. ``3**3 = 27`` in volume.

When explicit Aitken <-> Accumulation transfer is enabled, the size
adjustment of those two modes is effectively switched off by pushing the
relevant strict limit out by :data:`SZADJ_BLOCK_FACTOR`: the transfer engine
moves the particles instead.
"""

from __future__ import annotations

from typing import NamedTuple

__all__ = [
    "RELAX_FACTOR",
    "SZADJ_BLOCK_FACTOR",
    "RelaxedLimits",
    "get_relaxed_v2n_limits",
]

RELAX_FACTOR = 27.0
SZADJ_BLOCK_FACTOR = 1.0e6


class RelaxedLimits(NamedTuple):
    """Strict and relaxed volume-to-number limits for one mode."""

    v2nmin: float
    v2nmax: float
    v2nminrl: float
    v2nmaxrl: float


def get_relaxed_v2n_limits(
    do_aitacc_transfer: bool,
    is_aitken_mode: bool,
    is_accum_mode: bool,
    v2nmin: float,
    v2nmax: float,
) -> RelaxedLimits:
    """
    Compute the relaxed limits, inflating the strict ones when required.

    Parameters
    ----------
    do_aitacc_transfer
        Whether explicit Aitken <-> Accumulation transfer is enabled
    is_aitken_mode
        True for the Aitken mode
    is_accum_mode
        True for the Accumulation mode
    v2nmin
        Strict minimum volume-to-number ratio
    v2nmax
        Strict maximum volume-to-number ratio

    Returns
    -------
    RelaxedLimits
        The (possibly modified) strict limits together with the relaxed ones.
        Later stages must use the returned strict limits.

    Examples
    --------
    >>> get_relaxed_v2n_limits(False, False, False, 10.0, 1000.0).v2nmaxrl
    27000.0
    """
    if do_aitacc_transfer:
        # aitken: no adjustment when number is too small (size too big)
        if is_aitken_mode:
            v2nmin = v2nmin / SZADJ_BLOCK_FACTOR
        # accumulation: no adjustment when number is too big (size too small)
        if is_accum_mode:
            v2nmax = v2nmax * SZADJ_BLOCK_FACTOR

    return RelaxedLimits(
        v2nmin=v2nmin,
        v2nmax=v2nmax,
        v2nminrl=v2nmin / RELAX_FACTOR,
        v2nmaxrl=v2nmax * RELAX_FACTOR,
    )
