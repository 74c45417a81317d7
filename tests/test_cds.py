"""
Unit tests for the credit default swap and the mid-point engine.
"""

from datetime import date
import numpy as np
import pytest

from xassetlib.curves import Curve, SurvivalCurve, create_flat_curve, create_flat_survival_curve
from xassetlib.dates import DateUtils
from xassetlib.engines import MidPointCdsEngine
from xassetlib.instruments import (
    CreditDefaultSwap,
    FaceValueClaim,
    ProtectionPaymentTime,
    ProtectionSide,
)

TODAY = date(2024, 1, 15)
NOTIONAL = 10_000_000
RECOVERY = 0.4
HAZARD = 0.02


@pytest.fixture
def discount_curve():
    return create_flat_curve(TODAY, 0.03)


@pytest.fixture
def survival_curve():
    return create_flat_survival_curve(TODAY, HAZARD)


@pytest.fixture
def engine(survival_curve, discount_curve):
    return MidPointCdsEngine(survival_curve, RECOVERY, discount_curve)


@pytest.fixture
def schedule():
    return DateUtils.generate_schedule(TODAY, date(2029, 1, 15), 4)


def make_cds(schedule, side=ProtectionSide.BUYER, spread=0.01, **kwargs):
    return CreditDefaultSwap(side=side, notional=NOTIONAL, spread=spread, schedule=schedule, **kwargs)


class TestCreditDefaultSwap:
    """Tests for the instrument."""

    def test_leg(self, schedule):
        cds = make_cds(schedule)
        assert len(cds.coupons()) == 20
        assert cds.maturity == date(2029, 1, 15)
        assert cds.protection_start == TODAY
        assert cds.coupons()[0].rate() == 0.01

    def test_side_from_string(self, schedule):
        assert make_cds(schedule, side="seller").side == ProtectionSide.SELLER
        with pytest.raises(ValueError):
            make_cds(schedule, side="lender")

    def test_validation(self, schedule):
        with pytest.raises(ValueError):
            CreditDefaultSwap(ProtectionSide.BUYER, 0.0, 0.01, schedule)
        with pytest.raises(ValueError):
            make_cds(schedule, protection_start=date(2023, 12, 1))

    def test_accrual_rebate(self):
        seasoned = DateUtils.generate_schedule(date(2023, 12, 20), date(2028, 12, 20), 4)
        cds = make_cds(seasoned, protection_start=TODAY)
        # 26 days accrued on ACT/360
        assert cds.accrual_rebate.amount() == pytest.approx(NOTIONAL * 0.01 * 26 / 360)
        assert cds.accrual_rebate_current.amount() == pytest.approx(NOTIONAL * 0.01 * 27 / 360)

    def test_face_value_claim(self):
        assert FaceValueClaim().amount(TODAY, 100.0, 0.4) == pytest.approx(60.0)


class TestMidPointCdsEngine:
    """Tests for the mid-point engine."""

    def test_buyer_seller_symmetry(self, engine, schedule):
        buyer = engine.calculate(make_cds(schedule, ProtectionSide.BUYER))
        seller = engine.calculate(make_cds(schedule, ProtectionSide.SELLER))
        assert buyer.value == pytest.approx(-seller.value)
        assert buyer.default_leg_npv == pytest.approx(-seller.default_leg_npv)
        assert buyer.coupon_leg_npv == pytest.approx(-seller.coupon_leg_npv)
        assert buyer.default_leg_npv > 0
        assert buyer.coupon_leg_npv < 0

    def test_single_coupon_legs(self):
        end = date(2024, 4, 15)
        t = 91 / 365
        survival = SurvivalCurve(TODAY, [t], [0.98])
        discount = Curve(TODAY)
        discount.add_node(t, 0.995)
        discount.build()
        engine = MidPointCdsEngine(survival, RECOVERY, discount)

        cds = CreditDefaultSwap(
            ProtectionSide.BUYER, 1_000_000, 2500.0 * 360 / (1_000_000 * 91), [TODAY, end],
            rebates_accrual=False, settles_accrual=False,
            protection_payment_time=ProtectionPaymentTime.AT_PERIOD_END)
        assert cds.coupons()[0].amount() == pytest.approx(2500.0)

        result = engine.calculate(cds)
        assert result.default_leg_npv == pytest.approx(11940.0)
        assert result.coupon_leg_npv == pytest.approx(-0.98 * 2500.0 * 0.995)
        assert result["defaultProbabilities"] == [pytest.approx(0.02)]
        assert result["midpointDiscounts"] == [pytest.approx(0.995)]

    def test_fair_spread_reprices_to_zero(self, engine, schedule):
        result = engine.calculate(make_cds(schedule, rebates_accrual=False))
        fair = result.fair_spread_dirty
        # spread approximately hazard rate times loss given default, ACT/360 premium
        assert fair == pytest.approx(HAZARD * (1 - RECOVERY) * 365 / 360, rel=0.03)

        at_fair = engine.calculate(make_cds(schedule, spread=fair, rebates_accrual=False))
        assert abs(at_fair.value) < 1e-6

    def test_fair_upfront_reprices_to_zero(self, engine, schedule):
        cds = make_cds(schedule, upfront=0.01, upfront_date=date(2024, 1, 18), rebates_accrual=False)
        result = engine.calculate(cds)
        assert result.fair_upfront is not None

        repriced = engine.calculate(make_cds(
            schedule, upfront=result.fair_upfront, upfront_date=date(2024, 1, 18), rebates_accrual=False))
        assert abs(repriced.value) < 1e-6

    def test_upfront_on_settlement_date_has_occurred(self, engine, schedule):
        result = engine.calculate(make_cds(schedule, upfront=0.01))
        assert result.upfront_npv == 0.0
        assert result.fair_upfront is None

    def test_zero_spread(self, engine, schedule):
        result = engine.calculate(make_cds(schedule, spread=0.0))
        assert result.coupon_leg_bps is None
        assert result.fair_spread_dirty is None
        assert result["couponLegBPS"] is None

    def test_coupon_leg_bps(self, engine, schedule):
        result = engine.calculate(make_cds(schedule))
        assert result.coupon_leg_bps == pytest.approx(result.coupon_leg_npv * 1e-4 / 0.01)

    def test_no_default_risk(self, discount_curve, schedule):
        engine = MidPointCdsEngine(create_flat_survival_curve(TODAY, 0.0), RECOVERY, discount_curve)
        cds = make_cds(schedule, ProtectionSide.SELLER)
        result = engine.calculate(cds)
        expected = sum(c.amount() * discount_curve.discount(c.date) for c in cds.coupons())
        assert result.default_leg_npv == pytest.approx(0.0, abs=1e-9)
        assert result.coupon_leg_npv == pytest.approx(expected)

    def test_seasoned_first_period_starts_today(self, engine, survival_curve):
        seasoned = DateUtils.generate_schedule(date(2023, 12, 20), date(2028, 12, 20), 4)
        cds = make_cds(seasoned)
        result = engine.calculate(cds)
        first_end = cds.coupons()[0].accrual_end_date
        assert result["defaultProbabilities"][0] == pytest.approx(
            survival_curve.default_probability(TODAY, first_end))

    def test_protection_payment_time(self, engine, schedule):
        at_default = engine.calculate(make_cds(schedule))
        at_maturity = engine.calculate(make_cds(
            schedule, protection_payment_time=ProtectionPaymentTime.AT_MATURITY))
        at_period_end = engine.calculate(make_cds(schedule, protection_payment_time="atPeriodEnd"))
        assert at_maturity.default_leg_npv < at_period_end.default_leg_npv < at_default.default_leg_npv
        assert all(d == date(2029, 1, 15) for d in at_maturity["protectionPaymentDates"])

    def test_expected_losses(self, engine, schedule):
        result = engine.calculate(make_cds(schedule))
        losses = np.array(result["expectedLosses"])
        probs = np.array(result["defaultProbabilities"])
        np.testing.assert_allclose(losses, NOTIONAL * (1 - RECOVERY) * probs)

    def test_matured_coupons_skipped(self, survival_curve):
        later = date(2026, 1, 15)
        engine = MidPointCdsEngine(survival_curve, RECOVERY, create_flat_curve(later, 0.03))
        schedule = DateUtils.generate_schedule(TODAY, date(2029, 1, 15), 4)
        result = engine.calculate(make_cds(schedule))
        assert len(result["midpointDiscounts"]) == 12

    def test_invalid_inputs(self, survival_curve, discount_curve):
        with pytest.raises(ValueError):
            MidPointCdsEngine(survival_curve, 1.5, discount_curve)
        with pytest.raises(ValueError):
            MidPointCdsEngine(None, RECOVERY, discount_curve)
        with pytest.raises(ValueError):
            MidPointCdsEngine(survival_curve, RECOVERY, None)
