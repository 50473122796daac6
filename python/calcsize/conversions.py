"""
Lognormal size-distribution conversions.

For a lognormal number distribution with geometric standard deviation
``sigma`` and number median diameter ``d``, the mean particle volume is

    v = pi/6 * d**3 * exp(4.5 * ln(sigma)**2)

The factor multiplying ``d**3`` only depends on the mode width, so it is
computed once per mode and reused (the "shape constant").
"""

from __future__ import annotations

import math

import numpy as np

__all__ = [
    "PI_SIXTH",
    "diameter_from_mean_particle_volume",
    "mean_particle_volume_from_diameter",
    "mode_shape_factor",
    "volume_to_number_ratio",
]

PI_SIXTH = math.pi / 6.0


def mode_shape_factor(mean_std_dev: float) -> float:
    """
    Shape constant of a lognormal mode.

    Parameters
    ----------
    mean_std_dev
        Geometric standard deviation of the mode (> 1)

    Returns
    -------
    float
        ``pi/6 * exp(4.5 * ln(sigma)**2)``
    """
    log_sigma = math.log(mean_std_dev)
    return PI_SIXTH * math.exp(4.5 * log_sigma * log_sigma)


def mean_particle_volume_from_diameter(diameter, mean_std_dev: float):
    """Mean particle volume [m^3] for a number median diameter [m]."""
    return mode_shape_factor(mean_std_dev) * np.power(diameter, 3.0)


def diameter_from_mean_particle_volume(volume, mean_std_dev: float):
    """Inverse of :func:`mean_particle_volume_from_diameter`."""
    return np.cbrt(volume / mode_shape_factor(mean_std_dev))


def volume_to_number_ratio(diameter, mean_std_dev: float):
    """
    Number of particles per unit dry volume [1/m^3].

    Note that the "volume to number" name is historical: the quantity is a
    number per volume, so the *largest* diameter of a mode gives the *minimum*
    ratio.
    """
    return 1.0 / mean_particle_volume_from_diameter(diameter, mean_std_dev)
