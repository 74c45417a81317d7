"""
Unit tests for the analytic LGM swaption engine.
"""

from datetime import date
import numpy as np
import pytest

from xassetlib.conventions import DayCount
from xassetlib.curves import create_flat_curve
from xassetlib.dates import DateUtils
from xassetlib.engines import AnalyticLgmSwaptionEngine, FloatSpreadMapping
from xassetlib.errors import ConfigurationError, UnsupportedFeatureError
from xassetlib.instruments import SettlementType, SwapType, Swaption, fixed_rate_leg, ibor_leg
from xassetlib.models import (
    CrossAssetModel,
    FxBsPiecewiseConstantParametrization,
    IrLgm1fPiecewiseConstantParametrization,
    LinearGaussMarkovModel,
)

TODAY = date(2024, 1, 15)
EXPIRY = date(2025, 1, 15)
MATURITY = date(2030, 1, 15)
NOMINAL = 1_000_000


@pytest.fixture
def curve():
    return create_flat_curve(TODAY, 0.03)


@pytest.fixture
def lgm(curve):
    return IrLgm1fPiecewiseConstantParametrization("USD", curve, [], [0.01], kappa_values=0.02)


def make_swaption(forecast_curve, fixed_rate, swap_type=SwapType.PAYER, expiry=EXPIRY,
                  settlement=SettlementType.PHYSICAL):
    fixed = fixed_rate_leg(DateUtils.generate_schedule(EXPIRY, MATURITY, 1),
                           NOMINAL, fixed_rate, DayCount.THIRTY_360)
    floating = ibor_leg(DateUtils.generate_schedule(EXPIRY, MATURITY, 2),
                        NOMINAL, forecast_curve, DayCount.ACT_360)
    return Swaption(swap_type, expiry, fixed, floating, settlement)


def atm_rate(curve):
    fixed = fixed_rate_leg(DateUtils.generate_schedule(EXPIRY, MATURITY, 1),
                           NOMINAL, 0.0, DayCount.THIRTY_360)
    annuity = sum(c.accrual_period() * curve.discount(c.date) for c in fixed)
    return (curve.discount(EXPIRY) - curve.discount(fixed[-1].date)) / annuity


class TestAnalyticLgmSwaptionEngine:
    """Tests for LGM swaption pricing."""

    def test_put_call_parity(self, lgm, curve):
        engine = AnalyticLgmSwaptionEngine(lgm)
        payer = engine.calculate(make_swaption(curve, 0.035, SwapType.PAYER))
        receiver = engine.calculate(make_swaption(curve, 0.035, SwapType.RECEIVER))

        swaption = make_swaption(curve, 0.035)
        fixed_pv = sum(c.amount() * curve.discount(c.date) for c in swaption.fixed_leg)
        fixed_pv += NOMINAL * curve.discount(swaption.fixed_leg[-1].date)
        forward_payer = NOMINAL * curve.discount(EXPIRY) - fixed_pv

        assert payer.value - receiver.value == pytest.approx(forward_payer, rel=1e-8)

    def test_atm_payer_equals_receiver(self, lgm, curve):
        engine = AnalyticLgmSwaptionEngine(lgm)
        k = atm_rate(curve)
        payer = engine.calculate(make_swaption(curve, k, SwapType.PAYER)).value
        receiver = engine.calculate(make_swaption(curve, k, SwapType.RECEIVER)).value
        assert payer > 0
        assert payer == pytest.approx(receiver, rel=1e-8)

    def test_value_increases_with_volatility(self, curve):
        k = atm_rate(curve)
        values = []
        for alpha in (0.005, 0.01, 0.02):
            p = IrLgm1fPiecewiseConstantParametrization("USD", curve, [], [alpha], kappa_values=0.02)
            values.append(AnalyticLgmSwaptionEngine(p).calculate(make_swaption(curve, k)).value)
        assert np.all(np.diff(values) > 0)

    def test_zero_volatility_is_intrinsic(self, curve):
        p = IrLgm1fPiecewiseConstantParametrization("USD", curve, [], [0.0], kappa_values=0.02)
        engine = AnalyticLgmSwaptionEngine(p)
        swaption = make_swaption(curve, 0.02, SwapType.PAYER)
        fixed_pv = sum(c.amount() * curve.discount(c.date) for c in swaption.fixed_leg)
        fixed_pv += NOMINAL * curve.discount(swaption.fixed_leg[-1].date)
        intrinsic = NOMINAL * curve.discount(EXPIRY) - fixed_pv

        assert engine.calculate(swaption).value == pytest.approx(intrinsic)
        assert engine.calculate(make_swaption(curve, 0.02, SwapType.RECEIVER)).value == 0.0

    def test_mappings_agree_without_basis(self, lgm, curve):
        swaption = make_swaption(curve, 0.03)
        next_coupon = AnalyticLgmSwaptionEngine(lgm, float_spread_mapping=FloatSpreadMapping.NEXT_COUPON)
        pro_rata = AnalyticLgmSwaptionEngine(lgm, float_spread_mapping="proRata")
        r1 = next_coupon.calculate(swaption)
        r2 = pro_rata.calculate(swaption)
        assert r1.value == pytest.approx(r2.value, rel=1e-12)
        np.testing.assert_allclose(r1["mappedSpreads"], 0.0, atol=1e-8)

    def test_basis_spread_mapping(self, lgm, curve):
        forecast = create_flat_curve(TODAY, 0.035)
        swaption = make_swaption(forecast, 0.03)
        flat = AnalyticLgmSwaptionEngine(lgm).calculate(make_swaption(curve, 0.03)).value

        results = []
        for mapping in FloatSpreadMapping:
            result = AnalyticLgmSwaptionEngine(lgm, float_spread_mapping=mapping).calculate(swaption)
            # payer receives the higher floating leg
            assert result.value > flat
            results.append(result)

        # both mappings preserve the present value of the spreads
        pv = [np.dot(r["mappedSpreads"], r["Dj"]) for r in results]
        assert pv[0] == pytest.approx(pv[1], rel=1e-10)
        assert pv[0] > 0

    def test_model_inputs(self, lgm, curve):
        swaption = make_swaption(curve, 0.03)
        expected = AnalyticLgmSwaptionEngine(lgm).calculate(swaption).value
        assert AnalyticLgmSwaptionEngine(LinearGaussMarkovModel(lgm)).calculate(swaption).value == expected

        eur = IrLgm1fPiecewiseConstantParametrization(
            "EUR", create_flat_curve(TODAY, 0.02, currency="EUR"), [], [0.008], kappa_values=0.01)
        fx = FxBsPiecewiseConstantParametrization("EUR", 1.1, [], [0.1])
        cam = CrossAssetModel([lgm, eur], [fx])
        assert AnalyticLgmSwaptionEngine(cam).calculate(swaption).value == expected
        assert (AnalyticLgmSwaptionEngine(cam, ccy=1).calculate(swaption).value
                == AnalyticLgmSwaptionEngine(eur).calculate(swaption).value)

        with pytest.raises(ConfigurationError):
            AnalyticLgmSwaptionEngine(curve)

    def test_discount_curve_override(self, lgm, curve):
        swaption = make_swaption(curve, 0.03)
        default = AnalyticLgmSwaptionEngine(lgm).calculate(swaption).value
        overridden = AnalyticLgmSwaptionEngine(lgm, discount_curve=curve).calculate(swaption).value
        assert overridden == pytest.approx(default)

    def test_cash_settlement_not_supported(self, lgm, curve):
        swaption = make_swaption(curve, 0.03, settlement=SettlementType.CASH)
        with pytest.raises(UnsupportedFeatureError):
            AnalyticLgmSwaptionEngine(lgm).calculate(swaption)

    def test_expired(self, lgm, curve):
        swaption = make_swaption(curve, 0.03, expiry=TODAY)
        result = AnalyticLgmSwaptionEngine(lgm).calculate(swaption)
        assert result.value == 0.0
        assert result["expired"]

    def test_exercise_boundary_is_root(self, lgm, curve):
        result = AnalyticLgmSwaptionEngine(lgm).calculate(make_swaption(curve, 0.03))
        a = np.array(result["fixedAmounts"]) / NOMINAL
        d = np.array(result["Dj"])
        h = np.array(result["Hj"])
        y, zeta, h0, d0 = result["yStar"], result["zetaExpiry"], result["H0"], result["D0"]
        lhs = np.sum(a * d * np.exp(-h * y - 0.5 * h * h * zeta))
        rhs = d0 * np.exp(-h0 * y - 0.5 * h0 * h0 * zeta)
        assert lhs == pytest.approx(rhs, rel=1e-10)


class TestSwaption:
    """Tests for the swaption instrument."""

    def test_string_enums(self, curve):
        swaption = make_swaption(curve, 0.03, swap_type="Receiver", settlement="Cash")
        assert swaption.swap_type == SwapType.RECEIVER
        assert swaption.settlement_type == SettlementType.CASH
        assert swaption.nominal == NOMINAL
        assert swaption.maturity == MATURITY

    def test_legs_required(self):
        with pytest.raises(ValueError):
            Swaption(SwapType.PAYER, EXPIRY, [], [])
