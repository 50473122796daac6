"""
Aitken <-> Accumulation mode transfer.

When the Aitken mode mean size grows too large, its largest particles are
moved into the Accumulation mode. When the Accumulation mode mean size
shrinks too small, its smallest particles are moved into the Aitken mode.
"Too large" and "too small" are measured against the geometric mean of the
two modes' nominal volume-to-number ratios.

The transfer is applied as tendencies over the adjustment timescale, in the
same way as the number adjustment.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple

import numpy as np

from .diameter import update_diameter_and_vol2num

if TYPE_CHECKING:
    from calcsize.modes import ModeRegistry

__all__ = [
    "ExchangeConstants",
    "ExchangeResult",
    "ModeSnapshot",
    "TransferCoefficients",
    "aitken_accum_exchange",
    "compute_coef_acc_ait_transfer",
    "compute_coef_ait_acc_transfer",
]


class ModeSnapshot(NamedTuple):
    """Dry volumes and numbers of one mode saved before the transfer."""

    drv_i: np.ndarray
    drv_c: np.ndarray
    num_i: np.ndarray
    num_c: np.ndarray


class TransferCoefficients(NamedTuple):
    """
    Transfer rates in one direction.

    Attributes
    ----------
    index
        True where a transfer takes place
    xfercoef_num
        Fraction of the source number moved per second [1/s]
    xfercoef_vol
        Fraction of the transferable source volume moved per second [1/s]
    """

    index: np.ndarray
    xfercoef_num: np.ndarray
    xfercoef_vol: np.ndarray


@dataclass(frozen=True, eq=False)
class ExchangeConstants:
    """Mode constants used by the exchange, derived once from the registry."""

    aitken: int
    accumulation: int
    v2n_geomean: float
    v2nnom_ait: float
    v2nnom_acc: float
    v2nmin_ait: float
    v2nmax_ait: float
    v2nmin_acc: float
    v2nmax_acc: float
    dgnmin_ait: float
    dgnmax_ait: float
    dgnmin_acc: float
    dgnmax_acc: float
    cmn_ait: float
    cmn_acc: float
    ait2acc_pairs: tuple[tuple[int, int], ...]
    acc2ait_pairs: tuple[tuple[int, int], ...]
    noxf_inv_density_acc: np.ndarray

    @classmethod
    def from_registry(cls, registry: ModeRegistry) -> ExchangeConstants:
        """Collect the Aitken/Accumulation constants of ``registry``."""
        ait = registry.mode(registry.aitken)
        acc = registry.mode(registry.accumulation)
        iacc = registry.accumulation_index

        # only non-transferable accumulation species contribute here
        inv_density_acc = registry.inverse_density()[iacc]
        noxf_inv_density = inv_density_acc * registry.no_transfer_mask()

        return cls(
            aitken=registry.aitken_index,
            accumulation=iacc,
            v2n_geomean=math.sqrt(ait.v2n_nom * acc.v2n_nom),
            v2nnom_ait=ait.v2n_nom,
            v2nnom_acc=acc.v2n_nom,
            v2nmin_ait=ait.v2n_min,
            v2nmax_ait=ait.v2n_max,
            v2nmin_acc=acc.v2n_min,
            v2nmax_acc=acc.v2n_max,
            dgnmin_ait=ait.min_diameter,
            dgnmax_ait=ait.max_diameter,
            dgnmin_acc=acc.min_diameter,
            dgnmax_acc=acc.max_diameter,
            cmn_ait=ait.shape_factor,
            cmn_acc=acc.shape_factor,
            ait2acc_pairs=tuple(
                registry.transfer_pairs(registry.aitken, registry.accumulation)
            ),
            acc2ait_pairs=tuple(
                registry.transfer_pairs(registry.accumulation, registry.aitken)
            ),
            noxf_inv_density_acc=noxf_inv_density,
        )


class ExchangeResult(NamedTuple):
    """
    Outcome of the Aitken <-> Accumulation exchange for a column.

    Tendency arrays have the full ``(num_levels, num_modes[, max_species])``
    shape and are zero outside the two modes. Diameter arrays are updated
    copies of the ones passed in.
    """

    transfer: np.ndarray
    ait2acc: TransferCoefficients
    acc2ait: TransferCoefficients
    dnidt: np.ndarray
    dncdt: np.ndarray
    dqidt: np.ndarray
    dqcdt: np.ndarray
    dgncur_i: np.ndarray
    v2ncur_i: np.ndarray
    dgncur_c: np.ndarray
    v2ncur_c: np.ndarray


def compute_coef_ait_acc_transfer(
    snapshot: ModeSnapshot,
    v2n_geomean: float,
    v2nnom_acc: float,
    adj_tscale_inv: float,
) -> TransferCoefficients:
    """
    Compute the Aitken -> Accumulation transfer rates.

    A transfer happens where the combined (interstitial + cloud-borne)
    Aitken number per volume is below the geometric-mean ratio. Below the
    Accumulation nominal ratio everything is moved; in between, the volume
    fraction is interpolated linearly and the number fraction follows it.
    """
    drv_t = np.asarray(snapshot.drv_i + snapshot.drv_c, dtype=float)
    num_t = np.asarray(snapshot.num_i + snapshot.num_c, dtype=float)

    index = (drv_t > 0.0) & (num_t < drv_t * v2n_geomean)
    full = num_t < drv_t * v2nnom_acc

    with np.errstate(divide="ignore", invalid="ignore"):
        vol = (num_t / drv_t - v2n_geomean) / (v2nnom_acc - v2n_geomean)
        vol = np.clip(vol, 0.0, 1.0)
        num = np.clip(vol * (drv_t * v2n_geomean / num_t), 0.0, 1.0)

    xfercoef_vol = np.where(index, np.where(full, 1.0, vol), 0.0) * adj_tscale_inv
    xfercoef_num = np.where(index, np.where(full, 1.0, num), 0.0) * adj_tscale_inv
    return TransferCoefficients(index, xfercoef_num, xfercoef_vol)


def compute_coef_acc_ait_transfer(  # noqa: PLR0913
    snapshot: ModeSnapshot,
    v2n_geomean: float,
    v2nnom_ait: float,
    v2nmin_acc: float,
    adj_tscale_inv: float,
    drv_noxf=0.0,
) -> TransferCoefficients:
    """
    Compute the Accumulation -> Aitken transfer rates.

    The reciprocal of :func:`compute_coef_ait_acc_transfer`: a transfer
    happens where the Accumulation number per volume is above the
    geometric-mean ratio, and everything is moved above the Aitken nominal
    ratio.

    Only the transferable part of the mode is considered. The volume of
    species that never leave the Accumulation mode (``drv_noxf``, summed
    over both phases) is removed together with the number it implies when
    held in the largest Accumulation particles. The returned number rate
    applies to the total Accumulation number and the volume rate to the
    transferable species only.
    """
    drv_t0 = np.asarray(snapshot.drv_i + snapshot.drv_c, dtype=float)
    num_t0 = np.asarray(snapshot.num_i + snapshot.num_c, dtype=float)
    drv_noxf = np.asarray(drv_noxf, dtype=float)

    drv_t = np.maximum(0.0, drv_t0 - drv_noxf)
    num_t = np.maximum(0.0, num_t0 - drv_noxf * v2nmin_acc)

    index = (drv_t > 0.0) & (num_t > drv_t * v2n_geomean)
    full = num_t > drv_t * v2nnom_ait

    with np.errstate(divide="ignore", invalid="ignore"):
        vol = (num_t / drv_t - v2n_geomean) / (v2nnom_ait - v2n_geomean)
        vol = np.clip(vol, 0.0, 1.0)
        num = np.clip(vol * (drv_t * v2n_geomean / num_t), 0.0, 1.0)
        # rescale from the transferable number to the total number
        num_share = num_t / num_t0
        num = np.where(full, 1.0, num) * num_share

    xfercoef_vol = np.where(index, np.where(full, 1.0, vol), 0.0) * adj_tscale_inv
    xfercoef_num = np.where(index, num, 0.0) * adj_tscale_inv
    return TransferCoefficients(index, xfercoef_num, xfercoef_vol)


def aitken_accum_exchange(  # noqa: PLR0913
    constants: ExchangeConstants,
    dt: float,
    adj_tscale_inv: float,
    ait: ModeSnapshot,
    acc: ModeSnapshot,
    q_aero_i: np.ndarray,
    q_aero_c: np.ndarray,
    dgncur_i: np.ndarray,
    v2ncur_i: np.ndarray,
    dgncur_c: np.ndarray,
    v2ncur_c: np.ndarray,
) -> ExchangeResult:
    """
    Exchange particles between the Aitken and Accumulation modes.

    Parameters
    ----------
    constants
        Mode constants from :meth:`ExchangeConstants.from_registry`
    dt
        Time step [s]
    adj_tscale_inv
        Inverse of the adjustment timescale [1/s]
    ait, acc
        Snapshots of the two modes after the number adjustment
    q_aero_i, q_aero_c
        Mass mixing ratios, shape ``(num_levels, num_modes, max_species)``
    dgncur_i, v2ncur_i, dgncur_c, v2ncur_c
        Current diameters and ratios, shape ``(num_levels, num_modes)``

    Returns
    -------
    ExchangeResult
        Number and mass tendencies to add to the process tendencies, and
        the diameters after the transfer
    """
    iait = constants.aitken
    iacc = constants.accumulation

    q_i = np.maximum(q_aero_i, 0.0)
    q_c = np.maximum(q_aero_c, 0.0)

    drv_noxf_i = np.sum(q_i[:, iacc, :] * constants.noxf_inv_density_acc, axis=-1)
    drv_noxf_c = np.sum(q_c[:, iacc, :] * constants.noxf_inv_density_acc, axis=-1)

    ait2acc = compute_coef_ait_acc_transfer(
        ait, constants.v2n_geomean, constants.v2nnom_acc, adj_tscale_inv
    )
    acc2ait = compute_coef_acc_ait_transfer(
        acc,
        constants.v2n_geomean,
        constants.v2nnom_ait,
        constants.v2nmin_acc,
        adj_tscale_inv,
        drv_noxf=drv_noxf_i + drv_noxf_c,
    )
    transfer = ait2acc.index | acc2ait.index

    dnidt = np.zeros(dgncur_i.shape)
    dncdt = np.zeros(dgncur_c.shape)
    dqidt = np.zeros(q_aero_i.shape)
    dqcdt = np.zeros(q_aero_c.shape)

    # number
    for dndt, num_ait, num_acc in (
        (dnidt, ait.num_i, acc.num_i),
        (dncdt, ait.num_c, acc.num_c),
    ):
        xfertend_ait2acc = num_ait * ait2acc.xfercoef_num
        xfertend_acc2ait = num_acc * acc2ait.xfercoef_num
        dndt[:, iait] += xfertend_acc2ait - xfertend_ait2acc
        dndt[:, iacc] += xfertend_ait2acc - xfertend_acc2ait

    # mass
    for dqdt, q in ((dqidt, q_i), (dqcdt, q_c)):
        for isrc, idst in constants.ait2acc_pairs:
            xfertend = q[:, iait, isrc] * ait2acc.xfercoef_vol
            dqdt[:, iait, isrc] -= xfertend
            dqdt[:, iacc, idst] += xfertend
        for isrc, idst in constants.acc2ait_pairs:
            xfertend = q[:, iacc, isrc] * acc2ait.xfercoef_vol
            dqdt[:, iacc, isrc] -= xfertend
            dqdt[:, iait, idst] += xfertend

    # diameters from the volumes and numbers left after this step
    xferfrac_vol_ait2acc = np.minimum(1.0, ait2acc.xfercoef_vol * dt)
    xferfrac_num_ait2acc = np.minimum(1.0, ait2acc.xfercoef_num * dt)
    xferfrac_vol_acc2ait = np.minimum(1.0, acc2ait.xfercoef_vol * dt)
    xferfrac_num_acc2ait = np.minimum(1.0, acc2ait.xfercoef_num * dt)

    dgncur_i = dgncur_i.copy()
    v2ncur_i = v2ncur_i.copy()
    dgncur_c = dgncur_c.copy()
    v2ncur_c = v2ncur_c.copy()

    for dgncur, v2ncur, drv_ait, num_ait, drv_acc, num_acc, drv_noxf in (
        (dgncur_i, v2ncur_i, ait.drv_i, ait.num_i, acc.drv_i, acc.num_i, drv_noxf_i),
        (dgncur_c, v2ncur_c, ait.drv_c, ait.num_c, acc.drv_c, acc.num_c, drv_noxf_c),
    ):
        drv_ait2acc = drv_ait * xferfrac_vol_ait2acc
        num_ait2acc = num_ait * xferfrac_num_ait2acc
        drv_acc2ait = np.maximum(0.0, drv_acc - drv_noxf) * xferfrac_vol_acc2ait
        num_acc2ait = num_acc * xferfrac_num_acc2ait

        for imode, drv_new, num_new, v2nmin, v2nmax, dgnmin, dgnmax, cmn in (
            (
                iait,
                drv_ait - drv_ait2acc + drv_acc2ait,
                num_ait - num_ait2acc + num_acc2ait,
                constants.v2nmin_ait,
                constants.v2nmax_ait,
                constants.dgnmin_ait,
                constants.dgnmax_ait,
                constants.cmn_ait,
            ),
            (
                iacc,
                drv_acc - drv_acc2ait + drv_ait2acc,
                num_acc - num_acc2ait + num_ait2acc,
                constants.v2nmin_acc,
                constants.v2nmax_acc,
                constants.dgnmin_acc,
                constants.dgnmax_acc,
                constants.cmn_acc,
            ),
        ):
            dgn, v2n = update_diameter_and_vol2num(
                drv_new,
                num_new,
                v2nmin,
                v2nmax,
                dgnmin,
                dgnmax,
                cmn,
                dgncur[:, imode],
                v2ncur[:, imode],
            )
            dgncur[:, imode] = np.where(transfer, dgn, dgncur[:, imode])
            v2ncur[:, imode] = np.where(transfer, v2n, v2ncur[:, imode])

    return ExchangeResult(
        transfer=transfer,
        ait2acc=ait2acc,
        acc2ait=acc2ait,
        dnidt=dnidt,
        dncdt=dncdt,
        dqidt=dqidt,
        dqcdt=dqcdt,
        dgncur_i=dgncur_i,
        v2ncur_i=v2ncur_i,
        dgncur_c=dgncur_c,
        v2ncur_c=v2ncur_c,
    )
