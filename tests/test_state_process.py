"""
Unit tests for the cross asset state process and covariance salvaging.
"""

from datetime import date
import logging
import numpy as np
import pytest

from xassetlib.curves import create_flat_curve
from xassetlib.errors import ConfigurationError
from xassetlib.math import SalvagingAlgorithm, pseudo_sqrt, salvage
from xassetlib.models import (
    CrossAssetModel,
    FxBsPiecewiseConstantParametrization,
    IrLgm1fPiecewiseConstantParametrization,
)
from xassetlib.processes import (
    CrossAssetStateProcess,
    Discretization,
    StateProcessConfig,
    StepCache,
)

ANCHOR = date(2024, 1, 15)

NON_PSD = np.array([
    [1.0, 0.9, 0.9],
    [0.9, 1.0, -0.9],
    [0.9, -0.9, 1.0],
])


@pytest.fixture
def single_ccy_model():
    usd = IrLgm1fPiecewiseConstantParametrization(
        "USD", create_flat_curve(ANCHOR, 0.05), [1.0, 2.0], [0.01, 0.02, 0.03], kappa_values=0.03)
    return CrossAssetModel([usd])


@pytest.fixture
def two_ccy_model():
    usd = IrLgm1fPiecewiseConstantParametrization(
        "USD", create_flat_curve(ANCHOR, 0.05), [1.0], [0.010, 0.012], kappa_values=0.03)
    eur = IrLgm1fPiecewiseConstantParametrization(
        "EUR", create_flat_curve(ANCHOR, 0.03, currency="EUR"), [], [0.008], kappa_values=0.02)
    fx = FxBsPiecewiseConstantParametrization("EUR", 1.10, [1.0], [0.10, 0.12])
    rho = np.array([
        [1.0, 0.5, 0.2],
        [0.5, 1.0, -0.1],
        [0.2, -0.1, 1.0],
    ])
    return CrossAssetModel([usd, eur], [fx], rho)


@pytest.fixture
def zero_ir_vol_model():
    usd = IrLgm1fPiecewiseConstantParametrization(
        "USD", create_flat_curve(ANCHOR, 0.05), [], [0.0], kappa_values=0.03)
    eur = IrLgm1fPiecewiseConstantParametrization(
        "EUR", create_flat_curve(ANCHOR, 0.03, currency="EUR"), [], [0.0], kappa_values=0.02)
    fx = FxBsPiecewiseConstantParametrization("EUR", 1.10, [1.0], [0.10, 0.12])
    return CrossAssetModel([usd, eur], [fx])


class TestSalvaging:
    """Tests for covariance repair."""

    def test_psd_matrix_unchanged(self):
        m = np.array([[1.0, 0.3], [0.3, 1.0]])
        np.testing.assert_allclose(salvage(m, SalvagingAlgorithm.NONE), m)

    def test_none_raises(self):
        with pytest.raises(ValueError):
            salvage(NON_PSD, SalvagingAlgorithm.NONE)

    def test_spectral(self, caplog):
        with caplog.at_level(logging.WARNING):
            repaired = salvage(NON_PSD, SalvagingAlgorithm.SPECTRAL)
        assert np.min(np.linalg.eigvalsh(repaired)) > -1e-10
        np.testing.assert_allclose(np.diag(repaired), 1.0)
        assert "Salvaging" in caplog.text

    def test_higham(self):
        repaired = salvage(NON_PSD, SalvagingAlgorithm.HIGHAM)
        assert np.min(np.linalg.eigvalsh(repaired)) > -1e-8
        np.testing.assert_allclose(np.diag(repaired), 1.0)
        np.testing.assert_allclose(repaired, repaired.T)

    def test_pseudo_sqrt(self):
        m = np.array([[0.04, 0.006], [0.006, 0.01]])
        s = pseudo_sqrt(m)
        np.testing.assert_allclose(s @ s.T, m, atol=1e-14)
        np.testing.assert_allclose(s, s.T)

    def test_from_string(self):
        assert SalvagingAlgorithm.from_string("higham") == SalvagingAlgorithm.HIGHAM
        with pytest.raises(ValueError):
            SalvagingAlgorithm.from_string("clip")


class TestStepCache:
    """Tests for the step cache."""

    def test_hits_and_misses(self):
        cache = StepCache()
        assert cache.get((0.0, 1.0)) is None
        cache.put((0.0, 1.0), "a")
        assert cache.get((0.0, 1.0)) == "a"
        assert cache.hits == 1
        assert cache.misses == 1

    def test_lru_eviction(self):
        cache = StepCache(maxsize=2)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.get("a")
        cache.put("c", 3)
        assert "a" in cache
        assert "b" not in cache
        assert len(cache) == 2

    def test_invalid_size(self):
        with pytest.raises(ConfigurationError):
            StepCache(maxsize=0)


class TestCrossAssetStateProcess:
    """Tests for drift, diffusion and step moments."""

    def test_requires_model(self):
        with pytest.raises(ConfigurationError):
            CrossAssetStateProcess(None)

    def test_dimensions(self, two_ccy_model):
        process = CrossAssetStateProcess(two_ccy_model)
        assert process.size() == 3
        assert process.factors() == 3
        assert process.discretization == Discretization.EXACT
        np.testing.assert_allclose(process.initial_values(), [0.0, 0.0, np.log(1.10)])

    def test_single_ccy_exact_variance(self, single_ccy_model):
        process = CrossAssetStateProcess(single_ccy_model)
        x0 = np.zeros(1)
        # alpha is 0.01 on [0.5, 1) and 0.02 on [1, 1.5)
        cov = process.covariance(0.5, x0, 1.0)
        assert cov[0, 0] == pytest.approx(0.01 ** 2 * 0.5 + 0.02 ** 2 * 0.5, rel=1e-12)
        np.testing.assert_allclose(process.expectation(0.5, np.array([0.3]), 1.0), [0.3])
        assert process.std_deviation(0.5, x0, 1.0)[0, 0] == pytest.approx(np.sqrt(cov[0, 0]))

    def test_fx_moments_without_rates_vol(self, zero_ir_vol_model):
        process = CrossAssetStateProcess(zero_ir_vol_model)
        x0 = process.initial_values()
        mean = process.expectation(0.0, x0, 1.0)
        cov = process.covariance(0.0, x0, 1.0)

        assert mean[2] == pytest.approx(np.log(1.10) + 0.02 - 0.5 * 0.01, rel=1e-10)
        assert cov[2, 2] == pytest.approx(0.01, rel=1e-12)
        assert cov[0, 0] == pytest.approx(0.0, abs=1e-16)

    def test_drift(self, two_ccy_model):
        process = CrossAssetStateProcess(two_ccy_model)
        drift = process.drift(0.5, process.initial_values())
        assert drift.shape == (3,)
        assert drift[0] == 0.0

    def test_diffusion(self, two_ccy_model):
        process = CrossAssetStateProcess(two_ccy_model)
        sigma = process.diffusion(0.5)
        vols = np.array([0.010, 0.008, 0.10])
        np.testing.assert_allclose(
            sigma @ sigma.T, np.outer(vols, vols) * two_ccy_model.correlation_matrix, atol=1e-14)

    def test_euler_matches_exact_for_small_steps(self, two_ccy_model):
        exact = CrossAssetStateProcess(two_ccy_model, StateProcessConfig.exact())
        euler = CrossAssetStateProcess(two_ccy_model, StateProcessConfig.euler())
        x0 = exact.initial_values()
        dt = 1e-4
        np.testing.assert_allclose(
            exact.covariance(0.5, x0, dt) / dt, euler.covariance(0.5, x0, dt) / dt,
            rtol=1e-3, atol=1e-12)
        np.testing.assert_allclose(
            (exact.expectation(0.5, x0, dt) - x0) / dt,
            (euler.expectation(0.5, x0, dt) - x0) / dt,
            rtol=1e-2, atol=1e-6)

    def test_exact_covariance_psd(self, two_ccy_model):
        process = CrossAssetStateProcess(two_ccy_model)
        cov = process.covariance(0.0, process.initial_values(), 5.0)
        np.testing.assert_allclose(cov, cov.T)
        assert np.min(np.linalg.eigvalsh(cov)) > -1e-14

    def test_evolve(self, two_ccy_model):
        process = CrossAssetStateProcess(two_ccy_model)
        x0 = process.initial_values()
        np.testing.assert_allclose(
            process.evolve(0.0, x0, 0.5, np.zeros(3)), process.expectation(0.0, x0, 0.5))
        dw = np.array([0.3, -1.2, 0.7])
        expected = process.expectation(0.0, x0, 0.5) + process.std_deviation(0.0, x0, 0.5) @ dw
        np.testing.assert_allclose(process.evolve(0.0, x0, 0.5, dw), expected)
        with pytest.raises(ValueError):
            process.evolve(0.0, x0, 0.5, np.zeros(2))

    def test_cache_hits_are_bit_identical(self, two_ccy_model):
        process = CrossAssetStateProcess(two_ccy_model)
        x0 = process.initial_values()
        first = process.covariance(0.25, x0, 0.5)
        second = process.covariance(0.25, x0, 0.5)
        assert np.array_equal(first, second)
        assert process.cache.hits == 1
        assert process.cache.misses == 1

    def test_key_is_exact(self, two_ccy_model):
        process = CrossAssetStateProcess(two_ccy_model)
        x0 = process.initial_values()
        process.covariance(0.1 + 0.2, x0, 0.5)
        process.covariance(0.3, x0, 0.5)
        assert len(process.cache) == 2

    def test_stale_until_flush(self, single_ccy_model):
        process = CrossAssetStateProcess(single_ccy_model)
        x0 = np.zeros(1)
        before = process.covariance(0.5, x0, 1.0)

        single_ccy_model.irlgm1f(0).set_alpha([0.02, 0.04, 0.06])
        assert np.array_equal(process.covariance(0.5, x0, 1.0), before)

        process.flush_cache()
        after = process.covariance(0.5, x0, 1.0)
        np.testing.assert_allclose(after, 4.0 * before, rtol=1e-12)

    def test_auto_flush(self, single_ccy_model):
        process = CrossAssetStateProcess(single_ccy_model, StateProcessConfig.bounded(cache_size=8))
        x0 = np.zeros(1)
        before = process.covariance(0.5, x0, 1.0)
        single_ccy_model.irlgm1f(0).set_alpha([0.02, 0.04, 0.06])
        np.testing.assert_allclose(process.covariance(0.5, x0, 1.0), 4.0 * before, rtol=1e-12)

    def test_auto_flush_on_curve_change(self, zero_ir_vol_model):
        process = CrossAssetStateProcess(zero_ir_vol_model, StateProcessConfig(auto_flush=True))
        x0 = process.initial_values()
        version = zero_ir_vol_model.version
        assert process.expectation(0.0, x0, 1.0)[2] == pytest.approx(
            np.log(1.10) + 0.02 - 0.005, rel=1e-10)

        curve = zero_ir_vol_model.irlgm1f(0).term_structure
        curve.add_node(1.0, np.exp(-0.08))
        curve.build()
        assert zero_ir_vol_model.version > version
        assert process.expectation(0.0, x0, 1.0)[2] == pytest.approx(
            np.log(1.10) + 0.05 - 0.005, rel=1e-10)

    def test_curve_change_stale_without_auto_flush(self, zero_ir_vol_model):
        process = CrossAssetStateProcess(zero_ir_vol_model)
        x0 = process.initial_values()
        before = process.expectation(0.0, x0, 1.0)
        zero_ir_vol_model.irlgm1f(1).term_structure.add_node(1.0, np.exp(-0.01))
        assert np.array_equal(process.expectation(0.0, x0, 1.0), before)
        process.flush_cache()
        assert process.expectation(0.0, x0, 1.0)[2] == pytest.approx(
            np.log(1.10) + 0.04 - 0.005, rel=1e-10)

    def test_bounded_cache(self, single_ccy_model):
        process = CrossAssetStateProcess(single_ccy_model, StateProcessConfig.bounded(cache_size=2))
        x0 = np.zeros(1)
        for t0 in (0.0, 1.0, 2.0):
            process.covariance(t0, x0, 1.0)
        assert len(process.cache) == 2
        assert (0.0, 1.0) not in process.cache

    def test_euler_steps_cached(self, two_ccy_model):
        process = CrossAssetStateProcess(two_ccy_model, StateProcessConfig.euler())
        x0 = process.initial_values()
        process.expectation(0.0, x0, 0.1)
        process.expectation(0.0, x0, 0.1)
        assert process.cache.hits == 1

    def test_non_psd_correlation(self, two_ccy_model):
        two_ccy_model.set_correlation(NON_PSD)
        strict = CrossAssetStateProcess(
            two_ccy_model, StateProcessConfig(salvaging=SalvagingAlgorithm.NONE))
        with pytest.raises(ValueError):
            strict.diffusion(0.5)

        repaired = CrossAssetStateProcess(
            two_ccy_model, StateProcessConfig(salvaging=SalvagingAlgorithm.SPECTRAL))
        sigma = repaired.diffusion(0.5)
        assert np.all(np.isfinite(sigma))
