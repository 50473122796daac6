"""
Integration tests for the CalcSize process.
"""

from __future__ import annotations

import logging

import numpy as np
import pytest

from calcsize import (
    CalcSize,
    Diagnostics,
    Mode,
    ModeRegistry,
    NegativeQuantityError,
    Prognostics,
    Species,
    Tendencies,
    mam4_registry,
)
from calcsize.kernels import (
    CLOSE_TO_ONE,
    SECONDS_IN_A_DAY,
    ModeSnapshot,
    adjust_num_sizes,
    aitken_accum_exchange,
    compute_dry_volume,
    get_relaxed_v2n_limits,
)

DT = 3600.0


@pytest.fixture
def column():
    """Empty containers for a three level MAM4 column."""
    return Prognostics(3), Diagnostics(3), Tendencies(3)


def _nominal(registry, attr):
    return np.array([getattr(m, attr) for m in registry.modes])


class TestCalcSizeSetup:
    """Tests for process construction."""

    def test_definitions(self):
        """Four inputs, four outputs and four diagnostics."""
        defs = CalcSize().definitions()
        containers = [d.container for d in defs]
        assert containers.count("prognostics") == 4
        assert containers.count("tendencies") == 4
        assert containers.count("diagnostics") == 4

    def test_name(self):
        """The process has a descriptive name."""
        assert CalcSize().name() == "MAM4 calcsize"

    def test_precomputed_constants(self):
        """Per-mode constants come from the registry."""
        registry = mam4_registry()
        process = CalcSize(registry)
        np.testing.assert_allclose(process.v2nnom, _nominal(registry, "v2n_nom"))
        np.testing.assert_allclose(process.dgnmax, _nominal(registry, "max_diameter"))
        assert process.inv_density.shape == (4, 7)

    def test_from_parameters(self):
        """Parameters can be passed as a mapping."""
        process = CalcSize.from_parameters(
            {"do_adjust": False, "adjustment_timescale": 3600.0}
        )
        assert not process.do_adjust
        assert process.do_aitacc_transfer
        assert process.adjustment_timescale == 3600.0

    def test_invalid_timescale(self):
        """The adjustment timescale must be positive."""
        with pytest.raises(ValueError, match="adjustment_timescale"):
            CalcSize(adjustment_timescale=0.0)

    def test_logs_configuration(self, caplog):
        """Construction is logged."""
        with caplog.at_level(logging.INFO, logger="calcsize.calcsize"):
            CalcSize()
        assert "Configured MAM4 calcsize" in caplog.text


class TestCalcSizeStep:
    """Tests for CalcSize.compute_tendencies."""

    def test_empty_column(self, column):
        """Without aerosol the diagnostics are nominal and nothing changes."""
        prognostics, diagnostics, tendencies = column
        registry = mam4_registry()
        tendencies.n_mode_i[...] = 99.0

        CalcSize(registry).compute_tendencies(
            0.0, DT, prognostics, diagnostics, tendencies
        )

        for name in tendencies.field_names():
            np.testing.assert_array_equal(getattr(tendencies, name), 0.0)
        expected_dgn = np.tile(_nominal(registry, "nom_diameter"), (3, 1))
        expected_v2n = np.tile(_nominal(registry, "v2n_nom"), (3, 1))
        np.testing.assert_allclose(diagnostics.dgncur_i, expected_dgn)
        np.testing.assert_allclose(diagnostics.dgncur_c, expected_dgn)
        np.testing.assert_allclose(diagnostics.v2ncur_i, expected_v2n)
        np.testing.assert_allclose(diagnostics.v2ncur_c, expected_v2n)

    def test_number_without_mass_removed(self, column):
        """Particles without any volume are removed within the step."""
        prognostics, diagnostics, tendencies = column
        prognostics.n_mode_i[...] = 1e6
        prognostics.n_mode_c[...] = 2e6

        CalcSize().compute_tendencies(0.0, DT, prognostics, diagnostics, tendencies)

        np.testing.assert_allclose(tendencies.n_mode_i, -1e6 / (DT * CLOSE_TO_ONE))
        np.testing.assert_allclose(tendencies.n_mode_c, -2e6 / (DT * CLOSE_TO_ONE))

    @pytest.mark.parametrize("do_adjust", [True, False])
    def test_nominal_coarse_mode(self, column, do_adjust):
        """A coarse mode at its nominal size is left alone."""
        prognostics, diagnostics, tendencies = column
        registry = mam4_registry()
        icoarse = registry.mode_index("coarse")
        coarse = registry.mode("coarse")

        # 1e-12 m^3/kg of dust
        prognostics.q_aero_i[:, icoarse, 0] = 2.6e-9
        prognostics.n_mode_i[:, icoarse] = 1e-12 * coarse.v2n_nom

        CalcSize(registry, do_adjust=do_adjust).compute_tendencies(
            0.0, DT, prognostics, diagnostics, tendencies
        )

        np.testing.assert_array_equal(tendencies.n_mode_i, 0.0)
        np.testing.assert_allclose(diagnostics.dgncur_i[:, icoarse], 2.0e-6)
        np.testing.assert_allclose(diagnostics.v2ncur_i[:, icoarse], coarse.v2n_nom)

    def test_aitken_growth_transfers_to_accumulation(self, column):
        """Aitken particles grown past the boundary move to accumulation."""
        prognostics, diagnostics, tendencies = column
        registry = mam4_registry()
        iait = registry.aitken_index
        iacc = registry.accumulation_index

        prognostics.q_aero_i[0, iait, 0] = 1.77e-9
        prognostics.n_mode_i[0, iait] = 1e9

        CalcSize(registry).compute_tendencies(
            0.0, DT, prognostics, diagnostics, tendencies
        )

        assert tendencies.n_mode_i[0, iait] < 0.0
        assert tendencies.n_mode_i[0, iacc] == pytest.approx(
            -tendencies.n_mode_i[0, iait]
        )
        assert tendencies.q_aero_i[0, iait, 0] < 0.0
        assert tendencies.q_aero_i[0, iacc, 0] == pytest.approx(
            -tendencies.q_aero_i[0, iait, 0]
        )
        # the accumulation mode now holds particles
        acc = registry.mode("accumulation")
        assert diagnostics.dgncur_i[0, iacc] != acc.nom_diameter
        np.testing.assert_array_equal(tendencies.n_mode_i[1:], 0.0)

    def test_aitken_growth_without_transfer(self, column):
        """Without transfer the number is adjusted up instead."""
        prognostics, diagnostics, tendencies = column
        registry = mam4_registry()
        iait = registry.aitken_index

        prognostics.q_aero_i[0, iait, 0] = 1.77e-9
        prognostics.n_mode_i[0, iait] = 1e9

        CalcSize(registry, do_aitacc_transfer=False).compute_tendencies(
            0.0, DT, prognostics, diagnostics, tendencies
        )

        assert tendencies.n_mode_i[0, iait] > 0.0
        np.testing.assert_array_equal(tendencies.q_aero_i, 0.0)
        assert tendencies.n_mode_i[0, registry.accumulation_index] == 0.0

    def test_transfer_uses_adjusted_numbers(self, column):
        """The exchange sees the numbers left after the number adjustment."""
        prognostics, diagnostics, tendencies = column
        registry = mam4_registry()
        iait = registry.aitken_index
        iacc = registry.accumulation_index

        # far more accumulation particles than even the relaxed limit allows
        prognostics.q_aero_i[0, iacc, 0] = 1.77e-9
        prognostics.n_mode_i[0, iacc] = 1e18

        process = CalcSize(registry)
        process.compute_tendencies(0.0, DT, prognostics, diagnostics, tendencies)

        adj_tscale_inv = 1.0 / (max(SECONDS_IN_A_DAY, DT) * CLOSE_TO_ONE)
        limits = get_relaxed_v2n_limits(
            True, False, True, process.v2nmin[iacc], process.v2nmax[iacc]
        )
        drv_i, drv_c = compute_dry_volume(
            iacc, process.inv_density, prognostics.q_aero_i, prognostics.q_aero_c
        )
        adjusted = adjust_num_sizes(
            drv_i,
            drv_c,
            prognostics.n_mode_i[:, iacc],
            prognostics.n_mode_c[:, iacc],
            DT,
            limits.v2nmin,
            limits.v2nmax,
            limits.v2nminrl,
            limits.v2nmaxrl,
            adj_tscale_inv,
        )
        assert adjusted.num_i[0] < 1e17

        zeros = np.zeros(3)
        empty_aitken = ModeSnapshot(zeros, zeros, zeros, zeros)
        fresh = Diagnostics(3)

        def exchange(num_i, num_c):
            return aitken_accum_exchange(
                process.exchange,
                DT,
                adj_tscale_inv,
                empty_aitken,
                ModeSnapshot(drv_i, drv_c, num_i, num_c),
                prognostics.q_aero_i,
                prognostics.q_aero_c,
                fresh.dgncur_i.copy(),
                fresh.v2ncur_i.copy(),
                fresh.dgncur_c.copy(),
                fresh.v2ncur_c.copy(),
            )

        expected = exchange(adjusted.num_i, adjusted.num_c)
        assert expected.dnidt[0, iait] > 0.0
        np.testing.assert_allclose(
            tendencies.n_mode_i[:, iait], expected.dnidt[:, iait]
        )
        np.testing.assert_allclose(
            tendencies.n_mode_i[:, iacc], adjusted.dqdt + expected.dnidt[:, iacc]
        )
        np.testing.assert_allclose(tendencies.q_aero_i, expected.dqidt)

        raw = exchange(prognostics.n_mode_i[:, iacc], prognostics.n_mode_c[:, iacc])
        assert not np.isclose(raw.dnidt[0, iait], tendencies.n_mode_i[0, iait])

        final = prognostics.n_mode_i + DT * tendencies.n_mode_i
        assert np.all(final >= 0.0)

    def test_long_step_reaches_limits(self):
        """Steps longer than the timescale bring every mode inside its limits."""
        registry = mam4_registry()
        nlev = 50
        rng = np.random.default_rng(0)
        prognostics = Prognostics(nlev)
        diagnostics = Diagnostics(nlev)
        tendencies = Tendencies(nlev)
        prognostics.q_aero_i[...] = 10.0 ** rng.uniform(-12, -8, (nlev, 4, 7))
        prognostics.q_aero_c[...] = 10.0 ** rng.uniform(-12, -8, (nlev, 4, 7))
        prognostics.n_mode_i[...] = 10.0 ** rng.uniform(4, 10, (nlev, 4))
        prognostics.n_mode_c[...] = 10.0 ** rng.uniform(4, 10, (nlev, 4))

        dt = 2.0 * 86400.0
        process = CalcSize(registry, do_aitacc_transfer=False)
        process.compute_tendencies(0.0, dt, prognostics, diagnostics, tendencies)

        inv_density = registry.inverse_density()
        num = (
            prognostics.n_mode_i
            + prognostics.n_mode_c
            + dt * (tendencies.n_mode_i + tendencies.n_mode_c)
        )
        for imode, mode in enumerate(registry.modes):
            drv = (
                (prognostics.q_aero_i[:, imode] + prognostics.q_aero_c[:, imode])
                * inv_density[imode]
            ).sum(axis=-1)
            ratio = num[:, imode] / drv
            assert np.all(ratio >= mode.v2n_min * (1.0 - 1e-6))
            assert np.all(ratio <= mode.v2n_max * (1.0 + 1e-6))

    def test_nonnegative_check(self, column):
        """Negative inputs fail loudly when the check is enabled."""
        prognostics, diagnostics, tendencies = column
        prognostics.n_mode_c[0, 0] = -1.0

        with pytest.raises(NegativeQuantityError):
            CalcSize(check_nonnegative=True).compute_tendencies(
                0.0, DT, prognostics, diagnostics, tendencies
            )

    def test_negative_number_tolerated(self, column):
        """Without the check negative numbers are treated as zero."""
        prognostics, diagnostics, tendencies = column
        prognostics.n_mode_c[0, 0] = -1.0

        CalcSize().compute_tendencies(0.0, DT, prognostics, diagnostics, tendencies)
        assert tendencies.n_mode_c[0, 0] == pytest.approx(1.0 / (DT * CLOSE_TO_ONE))

    def test_invalid_step(self, column):
        """The time step must be positive."""
        with pytest.raises(ValueError, match="dt"):
            CalcSize().compute_tendencies(0.0, 0.0, *column)

    def test_mode_count_mismatch(self):
        """Containers must be sized for the registry."""
        with pytest.raises(ValueError, match="modes"):
            CalcSize().compute_tendencies(
                0.0, DT, Prognostics(1, 3), Diagnostics(1, 3), Tendencies(1, 3)
            )


def test_two_mode_registry():
    """The process runs on any registry with an Aitken/Accumulation pair."""
    registry = ModeRegistry(
        modes=(
            Mode("accumulation", 5.35e-8, 1.1e-7, 4.4e-7, 1.8),
            Mode("aitken", 8.7e-9, 2.6e-8, 5.2e-8, 1.6),
        ),
        species=(Species("SO4", 1770.0),),
        mode_species=(("SO4",), ("SO4",)),
    )
    prognostics = Prognostics(1, 2)
    diagnostics = Diagnostics(1, 2)
    tendencies = Tendencies(1, 2)
    prognostics.q_aero_i[0, 1, 0] = 1.77e-9
    prognostics.n_mode_i[0, 1] = 1e9

    CalcSize(registry).compute_tendencies(0.0, DT, prognostics, diagnostics, tendencies)

    assert tendencies.n_mode_i[0, 0] > 0.0
    assert tendencies.n_mode_i[0, 0] == pytest.approx(-tendencies.n_mode_i[0, 1])
