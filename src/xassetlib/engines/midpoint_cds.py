"""
Mid-point credit default swap engine.

Defaults are assumed to happen in the middle of each remaining premium
period. Per period [s, e] with payment date p:

    effective start s' = today if s <= today <= e else s
    default date    d  = s' + (e - s') / 2
    S = survival probability to p
    P = default probability over (s', e]

    coupon leg  += S * coupon(p) * D(p)
                 + P * accrued(d) * D(q)        if accrual settles on default
    default leg += claim(d) * P * D(q)

where q is the protection payment date (d, p or maturity). Both legs are
accumulated as positive amounts; the side sign is applied once at the end.
"""

import logging
from datetime import date, timedelta
from typing import List, Optional

from ..instruments.cds import CdsArguments, CreditDefaultSwap, ProtectionPaymentTime, ProtectionSide
from ..instruments.cashflows import Coupon
from .results import CdsResults

logger = logging.getLogger(__name__)

BASIS_POINT = 1.0e-4


class MidPointCdsEngine:
    """
    Args:
        survival_curve: Default probability term structure of the reference entity
        recovery_rate: Recovery rate used by the claim
        discount_curve: Discount curve, its reference date is the settlement date
        include_settlement_date_flows: Value flows paid on the settlement date
        evaluation_date: Today (defaults to the discount curve reference date)
    """

    def __init__(
        self,
        survival_curve,
        recovery_rate: float,
        discount_curve,
        include_settlement_date_flows: Optional[bool] = None,
        evaluation_date: Optional[date] = None
    ):
        if survival_curve is None:
            raise ValueError("MidPointCdsEngine: no probability term structure set")
        if discount_curve is None:
            raise ValueError("MidPointCdsEngine: no discount term structure set")
        if not 0.0 <= recovery_rate <= 1.0:
            raise ValueError(f"Recovery rate must lie in [0, 1], got {recovery_rate}")
        self.survival_curve = survival_curve
        self.recovery_rate = recovery_rate
        self.discount_curve = discount_curve
        self.include_settlement_date_flows = include_settlement_date_flows
        self.evaluation_date = evaluation_date

    def expected_loss(self, arguments: CdsArguments, default_date: date,
                      d1: date, d2: date, notional: float) -> float:
        return (arguments.claim.amount(default_date, notional, self.recovery_rate)
                * self.survival_curve.default_probability(d1, d2))

    def calculate(self, cds: CreditDefaultSwap) -> CdsResults:
        args = cds.arguments()
        today = self.evaluation_date or self.discount_curve.reference_date
        settlement_date = self.discount_curve.reference_date
        include = self.include_settlement_date_flows
        discount = self.discount_curve.discount

        upfront_pv01 = 0.0
        upfront_npv = 0.0
        if args.upfront_payment is not None and not args.upfront_payment.has_occurred(settlement_date, include):
            upfront_pv01 = discount(args.upfront_payment.date)
            upfront_npv = upfront_pv01 * args.upfront_payment.amount()

        rebate_npv = 0.0
        rebate_npv_current = 0.0
        if args.accrual_rebate is not None and not args.accrual_rebate.has_occurred(settlement_date, include):
            rebate_npv = discount(args.accrual_rebate.date) * args.accrual_rebate.amount()
        if (args.accrual_rebate_current is not None
                and not args.accrual_rebate_current.has_occurred(settlement_date, include)):
            rebate_npv_current = discount(args.accrual_rebate_current.date) * args.accrual_rebate_current.amount()

        coupon_leg = 0.0
        default_leg = 0.0
        protection_payment_dates: List[date] = []
        midpoint_discounts: List[float] = []
        expected_losses: List[float] = []
        default_probabilities: List[float] = []

        for i, coupon in enumerate(args.leg):
            if coupon.has_occurred(settlement_date, include):
                continue
            if not isinstance(coupon, Coupon):
                raise TypeError("MidPointCdsEngine: expected coupon, simple cashflows are not allowed")

            payment_date = coupon.date
            start = coupon.accrual_start_date
            end = coupon.accrual_end_date
            if i == 0:
                start = args.protection_start
            effective_start = today if start <= today <= end else start
            default_date = effective_start + timedelta(days=(end - effective_start).days // 2)

            s = self.survival_curve.survival_probability(payment_date)
            p = self.survival_curve.default_probability(effective_start, end)

            if args.protection_payment_time == ProtectionPaymentTime.AT_DEFAULT:
                protection_payment_date = default_date
            elif args.protection_payment_time == ProtectionPaymentTime.AT_PERIOD_END:
                protection_payment_date = payment_date
            elif args.protection_payment_time == ProtectionPaymentTime.AT_MATURITY:
                protection_payment_date = args.maturity
            else:
                raise ValueError(f"protection payment time not handled: {args.protection_payment_time}")

            midpoint_discount = discount(protection_payment_date)
            coupon_leg += s * coupon.amount() * discount(payment_date)
            if args.settles_accrual:
                coupon_leg += p * coupon.accrued_amount(default_date) * midpoint_discount

            expected_loss = self.expected_loss(args, default_date, effective_start, end, coupon.nominal)
            default_leg += expected_loss * midpoint_discount

            protection_payment_dates.append(protection_payment_date)
            midpoint_discounts.append(midpoint_discount)
            expected_losses.append(expected_loss)
            default_probabilities.append(p)

        upfront_sign = 1.0
        if args.side == ProtectionSide.SELLER:
            default_leg = -default_leg
            rebate_npv = -rebate_npv
            rebate_npv_current = -rebate_npv_current
        elif args.side == ProtectionSide.BUYER:
            coupon_leg = -coupon_leg
            upfront_npv = -upfront_npv
            upfront_sign = -1.0
        else:
            raise ValueError(f"unknown protection side: {args.side}")

        value = default_leg + coupon_leg + upfront_npv + rebate_npv

        if coupon_leg != 0.0:
            fair_spread_dirty = -default_leg * args.spread / (coupon_leg + rebate_npv)
            fair_spread_clean = -default_leg * args.spread / (coupon_leg + rebate_npv_current)
        else:
            fair_spread_dirty = None
            fair_spread_clean = None

        upfront_sensitivity = upfront_pv01 * args.notional
        if upfront_sensitivity > 0.0:
            fair_upfront = -upfront_sign * (default_leg + coupon_leg + rebate_npv) / upfront_sensitivity
        else:
            fair_upfront = None

        coupon_leg_bps = coupon_leg * BASIS_POINT / args.spread if args.spread != 0.0 else None
        if args.upfront:
            upfront_bps = upfront_npv * BASIS_POINT / args.upfront
        else:
            upfront_bps = None

        logger.debug("MidPointCdsEngine: %d live periods, value %.6f", len(midpoint_discounts), value)

        additional = {
            "protectionPaymentDates": protection_payment_dates,
            "midpointDiscounts": midpoint_discounts,
            "expectedLosses": expected_losses,
            "defaultProbabilities": default_probabilities,
            "upfrontPremium": args.upfront_payment.amount() if args.upfront_payment is not None else 0.0,
            "upfrontPremiumNPV": upfront_npv,
            "premiumLegNPVDirty": coupon_leg,
            "premiumLegNPVClean": coupon_leg + rebate_npv_current,
            "accrualRebateNPV": rebate_npv,
            "accrualRebateNPVCurrent": rebate_npv_current,
            "protectionLegNPV": default_leg,
            "fairSpreadDirty": fair_spread_dirty,
            "fairSpreadClean": fair_spread_clean,
            "fairUpfront": fair_upfront,
            "couponLegBPS": coupon_leg_bps,
            "upfrontBPS": upfront_bps,
        }

        return CdsResults(
            value=value,
            additional_results=additional,
            coupon_leg_npv=coupon_leg,
            default_leg_npv=default_leg,
            upfront_npv=upfront_npv,
            accrual_rebate_npv=rebate_npv,
            accrual_rebate_npv_current=rebate_npv_current,
            fair_spread_dirty=fair_spread_dirty,
            fair_spread_clean=fair_spread_clean,
            fair_upfront=fair_upfront,
            coupon_leg_bps=coupon_leg_bps,
            upfront_bps=upfront_bps
        )


__all__ = [
    "MidPointCdsEngine",
]
