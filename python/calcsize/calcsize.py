"""
The calcsize aerosol process.

For every mode the process

1. computes the interstitial and cloud-borne dry volume from the mass mixing
   ratios,
2. nudges the number mixing ratios back inside the range implied by the
   mode's size limits,
3. diagnoses the current diameter and volume-to-number ratio,

and finally moves particles between the Aitken and Accumulation modes when
their mean sizes have drifted across the boundary between the two.

Example
-------
    >>> from calcsize import CalcSize, Diagnostics, Prognostics, Tendencies
    >>> process = CalcSize()
    >>> prognostics = Prognostics(num_levels=72)
    >>> diagnostics = Diagnostics(num_levels=72)
    >>> tendencies = Tendencies(num_levels=72)
    >>> process.compute_tendencies(0.0, 3600.0, prognostics, diagnostics, tendencies)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import numpy as np

from .kernels import (
    CLOSE_TO_ONE,
    SECONDS_IN_A_DAY,
    ExchangeConstants,
    ModeSnapshot,
    adjust_num_sizes,
    aitken_accum_exchange,
    compute_dry_volume,
    get_relaxed_v2n_limits,
    update_diameter_and_vol2num,
)
from .modes import mam4_registry
from .process import AerosolProcess, Input, Output, State

if TYPE_CHECKING:
    from .modes import ModeRegistry
    from .state import Diagnostics, Prognostics, Tendencies

logger = logging.getLogger(__name__)

__all__ = ["CalcSize"]


class CalcSize(AerosolProcess):
    """
    Diagnose mode sizes and keep number consistent with mass.

    Parameters
    ----------
    registry
        Mode and species table. Defaults to :func:`calcsize.modes.mam4_registry`.
    do_adjust
        Relax number mixing ratios towards the size limits of each mode
    do_aitacc_transfer
        Move particles between the Aitken and Accumulation modes
    adjustment_timescale
        Timescale of the number adjustment and the mode transfer [s]. Steps
        longer than this use the step length instead.
    check_nonnegative
        Raise :class:`calcsize.state.NegativeQuantityError` when a prognostic
        field is negative on entry. Meant for tests and debug runs.
    """

    n_mode_i = Input("n_mode_i", unit="1/kg")
    n_mode_c = Input("n_mode_c", unit="1/kg")
    q_aero_i = Input("q_aero_i", unit="kg/kg")
    q_aero_c = Input("q_aero_c", unit="kg/kg")

    dnidt = Output("n_mode_i", unit="1/kg/s")
    dncdt = Output("n_mode_c", unit="1/kg/s")
    dqidt = Output("q_aero_i", unit="kg/kg/s")
    dqcdt = Output("q_aero_c", unit="kg/kg/s")

    dgncur_i = State("dgncur_i", unit="m")
    dgncur_c = State("dgncur_c", unit="m")
    v2ncur_i = State("v2ncur_i", unit="1/m^3")
    v2ncur_c = State("v2ncur_c", unit="1/m^3")

    def __init__(  # noqa: PLR0913
        self,
        registry: ModeRegistry | None = None,
        *,
        do_adjust: bool = True,
        do_aitacc_transfer: bool = True,
        adjustment_timescale: float = SECONDS_IN_A_DAY,
        check_nonnegative: bool = False,
    ):
        if adjustment_timescale <= 0.0:
            msg = f"adjustment_timescale ({adjustment_timescale}) must be positive"
            raise ValueError(msg)

        self.registry = registry if registry is not None else mam4_registry()
        self.do_adjust = do_adjust
        self.do_aitacc_transfer = do_aitacc_transfer
        self.adjustment_timescale = adjustment_timescale
        self.check_nonnegative = check_nonnegative

        modes = self.registry.modes
        self.dgnnom = np.array([m.nom_diameter for m in modes])
        self.dgnmin = np.array([m.min_diameter for m in modes])
        self.dgnmax = np.array([m.max_diameter for m in modes])
        self.v2nnom = np.array([m.v2n_nom for m in modes])
        self.v2nmin = np.array([m.v2n_min for m in modes])
        self.v2nmax = np.array([m.v2n_max for m in modes])
        self.common_factor = np.array([m.shape_factor for m in modes])
        self.inv_density = self.registry.inverse_density()
        self.exchange = ExchangeConstants.from_registry(self.registry)

        logger.info(
            f"Configured {self.name()} for modes {list(self.registry.mode_names)} "
            f"(do_adjust={do_adjust}, do_aitacc_transfer={do_aitacc_transfer})"
        )
        logger.debug(
            f"v2n_geomean={self.exchange.v2n_geomean:.6e}, "
            f"acc2ait transferable pairs={list(self.exchange.acc2ait_pairs)}"
        )

    @classmethod
    def from_parameters(
        cls, params: dict[str, Any], registry: ModeRegistry | None = None
    ) -> CalcSize:
        """
        Create the process from a parameter mapping.

        Parameters
        ----------
        params
            Keyword arguments of the constructor, e.g. from a configuration file
        registry
            Mode and species table

        Returns
        -------
        CalcSize
            The configured process
        """
        return cls(registry, **params)

    def name(self) -> str:
        """Unique name of the process."""
        return "MAM4 calcsize"

    def validate_containers(
        self,
        prognostics: Prognostics,
        diagnostics: Diagnostics,
        tendencies: Tendencies,
    ) -> None:
        """Also check that the containers are sized for the registry's modes."""
        super().validate_containers(prognostics, diagnostics, tendencies)
        for container in (prognostics, diagnostics, tendencies):
            if container.num_modes != self.registry.num_modes:
                msg = (
                    f"{type(container).__name__} has {container.num_modes} modes, "
                    f"the registry defines {self.registry.num_modes}"
                )
                raise ValueError(msg)

    def compute_tendencies(  # noqa: PLR0913
        self,
        t: float,
        dt: float,
        prognostics: Prognostics,
        diagnostics: Diagnostics,
        tendencies: Tendencies,
    ) -> None:
        """
        Compute number and mass tendencies and update the diagnostics.

        The tendency fields are overwritten, not accumulated into.

        Parameters
        ----------
        t
            Current time [s]
        dt
            Time step [s], must be positive
        prognostics
            Number and mass mixing ratios at the start of the step
        diagnostics
            Receives the current diameters and volume-to-number ratios
        tendencies
            Receives the number and mass tendencies
        """
        if dt <= 0.0:
            msg = f"dt ({dt}) must be positive"
            raise ValueError(msg)
        self.validate_containers(prognostics, diagnostics, tendencies)
        if self.check_nonnegative:
            prognostics.check_nonnegative()

        tendencies.zero()

        adj_tscale = max(self.adjustment_timescale, dt)
        adj_tscale_inv = 1.0 / (adj_tscale * CLOSE_TO_ONE)

        iait = self.registry.aitken_index
        iacc = self.registry.accumulation_index
        snapshots: dict[int, ModeSnapshot] = {}

        for imode in range(self.registry.num_modes):
            diagnostics.dgncur_i[:, imode] = self.dgnnom[imode]
            diagnostics.dgncur_c[:, imode] = self.dgnnom[imode]
            diagnostics.v2ncur_i[:, imode] = self.v2nnom[imode]
            diagnostics.v2ncur_c[:, imode] = self.v2nnom[imode]

            drv_i, drv_c = compute_dry_volume(
                imode, self.inv_density, prognostics.q_aero_i, prognostics.q_aero_c
            )
            limits = get_relaxed_v2n_limits(
                self.do_aitacc_transfer,
                imode == iait,
                imode == iacc,
                self.v2nmin[imode],
                self.v2nmax[imode],
            )

            init_num_i = prognostics.n_mode_i[:, imode]
            init_num_c = prognostics.n_mode_c[:, imode]
            if self.do_adjust:
                adjusted = adjust_num_sizes(
                    drv_i,
                    drv_c,
                    init_num_i,
                    init_num_c,
                    dt,
                    limits.v2nmin,
                    limits.v2nmax,
                    limits.v2nminrl,
                    limits.v2nmaxrl,
                    adj_tscale_inv,
                )
                num_i, num_c = adjusted.num_i, adjusted.num_c
                tendencies.n_mode_i[:, imode] = adjusted.dqdt
                tendencies.n_mode_c[:, imode] = adjusted.dqqcwdt
            else:
                num_i = np.maximum(init_num_i, 0.0)
                num_c = np.maximum(init_num_c, 0.0)

            for dgncur, v2ncur, drv, num in (
                (diagnostics.dgncur_i, diagnostics.v2ncur_i, drv_i, num_i),
                (diagnostics.dgncur_c, diagnostics.v2ncur_c, drv_c, num_c),
            ):
                dgncur[:, imode], v2ncur[:, imode] = update_diameter_and_vol2num(
                    drv,
                    num,
                    limits.v2nmin,
                    limits.v2nmax,
                    self.dgnmin[imode],
                    self.dgnmax[imode],
                    self.common_factor[imode],
                    dgncur[:, imode],
                    v2ncur[:, imode],
                )

            if imode in (iait, iacc):
                snapshots[imode] = ModeSnapshot(drv_i, drv_c, num_i, num_c)

        if not self.do_aitacc_transfer:
            return

        result = aitken_accum_exchange(
            self.exchange,
            dt,
            adj_tscale_inv,
            snapshots[iait],
            snapshots[iacc],
            prognostics.q_aero_i,
            prognostics.q_aero_c,
            diagnostics.dgncur_i,
            diagnostics.v2ncur_i,
            diagnostics.dgncur_c,
            diagnostics.v2ncur_c,
        )
        tendencies.n_mode_i += result.dnidt
        tendencies.n_mode_c += result.dncdt
        tendencies.q_aero_i += result.dqidt
        tendencies.q_aero_c += result.dqcdt
        diagnostics.dgncur_i[...] = result.dgncur_i
        diagnostics.v2ncur_i[...] = result.v2ncur_i
        diagnostics.dgncur_c[...] = result.dgncur_c
        diagnostics.v2ncur_c[...] = result.v2ncur_c

        logger.debug(
            f"t={t}: aitken->accumulation transfer on "
            f"{int(np.count_nonzero(result.ait2acc.index))} levels, "
            f"accumulation->aitken on "
            f"{int(np.count_nonzero(result.acc2ait.index))} levels"
        )
