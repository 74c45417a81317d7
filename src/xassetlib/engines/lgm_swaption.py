"""
Analytic LGM swaption engine.

A physically settled European swaption in the LGM model is an option on a
coupon bond. With the model state x at expiry distributed N(0, zeta) under
the LGM measure, the reduced zero bond is

    P~(x, T) = D(T) exp(-H(T) x - 0.5 H(T)^2 zeta)

and the receiver swap pays sum_j a_j P~(x, T_j) - P~(x, T_0) per unit
nominal. The exercise boundary y* solves

    sum_j a_j D_j exp(-H_j y - 0.5 H_j^2 zeta) = D_0 exp(-H_0 y - 0.5 H_0^2 zeta)

and, with d(H) = (y* + H zeta) / sqrt(zeta),

    receiver = sum_j a_j D_j N(d(H_j)) - D_0 N(d(H_0))
    payer    = D_0 N(-d(H_0)) - sum_j a_j D_j N(-d(H_j))

The basis between the discount curve and the forecast curve of the
floating coupons is captured by a static spread per floating coupon, which
is moved onto the fixed leg with one of two mappings:

- NEXT_COUPON: to the next fixed payment at or after the floating payment
- PRO_RATA: split by the accrual overlap with each fixed period

Cash settled swaptions are not supported. H' > 0 is assumed.
"""

import logging
from enum import Enum
from typing import Optional

import numpy as np
from scipy.optimize import brentq
from scipy.stats import norm

from ..curves.curve import Curve
from ..errors import ConfigurationError, UnsupportedFeatureError
from ..instruments.swaption import SettlementType, SwapType, Swaption
from ..models.cross_asset import CrossAssetModel, LinearGaussMarkovModel
from ..models.parametrization import IrLgm1fParametrization
from .results import PricingResults

logger = logging.getLogger(__name__)

_MAX_BRACKET_EXPANSIONS = 40


class FloatSpreadMapping(Enum):
    """Mapping of floating leg basis spreads onto fixed leg payments."""
    NEXT_COUPON = "nextCoupon"
    PRO_RATA = "proRata"

    @classmethod
    def from_string(cls, s: str) -> "FloatSpreadMapping":
        key = s.strip().upper().replace("_", "")
        for member in cls:
            if member.value.upper() == key or member.name.replace("_", "") == key:
                return member
        raise ValueError(f"Unknown float spread mapping: {s}")


class AnalyticLgmSwaptionEngine:
    """
    Args:
        model: LinearGaussMarkovModel, CrossAssetModel (with ccy) or an
            IrLgm1fParametrization
        discount_curve: Discount curve (defaults to the model curve)
        float_spread_mapping: NEXT_COUPON or PRO_RATA
        ccy: Currency index when model is a CrossAssetModel
    """

    def __init__(
        self,
        model,
        discount_curve: Optional[Curve] = None,
        float_spread_mapping: FloatSpreadMapping = FloatSpreadMapping.PRO_RATA,
        ccy: int = 0
    ):
        if isinstance(model, CrossAssetModel):
            self.parametrization = model.irlgm1f(ccy)
        elif isinstance(model, LinearGaussMarkovModel):
            self.parametrization = model.parametrization
        elif isinstance(model, IrLgm1fParametrization):
            self.parametrization = model
        else:
            raise ConfigurationError(f"AnalyticLgmSwaptionEngine: unsupported model {type(model).__name__}")
        if isinstance(float_spread_mapping, str):
            float_spread_mapping = FloatSpreadMapping.from_string(float_spread_mapping)
        self.discount_curve = discount_curve
        self.float_spread_mapping = float_spread_mapping

    def _curve(self) -> Curve:
        return self.discount_curve if self.discount_curve is not None else self.parametrization.term_structure

    def _mapped_spreads(self, swaption: Swaption, j1: int, k1: int, nominal: float) -> np.ndarray:
        c = self._curve()
        fixed = swaption.fixed_leg[j1:]
        mapped = np.zeros(len(fixed))
        for coupon in swaption.floating_leg[k1:]:
            tau = coupon.accrual_period()
            discount_forward = (c.discount(coupon.accrual_start_date) / c.discount(coupon.accrual_end_date) - 1.0) / tau
            spread_amount = nominal * tau * (coupon.rate() - discount_forward)
            if spread_amount == 0.0:
                continue
            pay_discount = c.discount(coupon.date)
            if self.float_spread_mapping == FloatSpreadMapping.NEXT_COUPON:
                j = next((i for i, f in enumerate(fixed) if f.date >= coupon.date), len(fixed) - 1)
                mapped[j] += spread_amount * pay_discount / c.discount(fixed[j].date)
            else:
                period_days = (coupon.accrual_end_date - coupon.accrual_start_date).days
                for j, f in enumerate(fixed):
                    overlap = (min(f.accrual_end_date, coupon.accrual_end_date)
                               - max(f.accrual_start_date, coupon.accrual_start_date)).days
                    if overlap > 0:
                        mapped[j] += (spread_amount * overlap / period_days
                                      * pay_discount / c.discount(f.date))
        return mapped

    @staticmethod
    def _y_star(a: np.ndarray, d: np.ndarray, h: np.ndarray, d0: float, h0: float, zeta: float) -> float:
        def helper(y: float) -> float:
            return float(np.sum(a * d * np.exp(-h * y - 0.5 * h * h * zeta))
                         - d0 * np.exp(-h0 * y - 0.5 * h0 * h0 * zeta))

        lo, hi = -0.1, 0.1
        for _ in range(_MAX_BRACKET_EXPANSIONS):
            f_lo = helper(lo)
            f_hi = helper(hi)
            if not (np.isfinite(f_lo) and np.isfinite(f_hi)):
                break
            if f_lo > 0.0 > f_hi or f_lo < 0.0 < f_hi:
                return float(brentq(helper, lo, hi, xtol=1e-14, maxiter=200))
            if f_lo == 0.0:
                return lo
            if f_hi == 0.0:
                return hi
            lo *= 2.0
            hi *= 2.0
        raise RuntimeError("AnalyticLgmSwaptionEngine: could not bracket the exercise boundary")

    def calculate(self, swaption: Swaption) -> PricingResults:
        if swaption.settlement_type == SettlementType.CASH:
            raise UnsupportedFeatureError("AnalyticLgmSwaptionEngine: cash settled swaptions are not supported")

        p = self.parametrization
        c = self._curve()
        reference_date = p.term_structure.reference_date
        expiry = swaption.exercise_date
        if expiry <= reference_date:
            return PricingResults(value=0.0, additional_results={"expired": True})

        j1 = next((j for j, f in enumerate(swaption.fixed_leg) if f.accrual_start_date >= expiry), None)
        k1 = next((k for k, f in enumerate(swaption.floating_leg) if f.accrual_start_date >= expiry), None)
        if j1 is None or k1 is None:
            raise ValueError("AnalyticLgmSwaptionEngine: no underlying coupons start after expiry")

        nominal = swaption.fixed_leg[j1].nominal
        fixed = swaption.fixed_leg[j1:]
        mapped = self._mapped_spreads(swaption, j1, k1, nominal)

        amounts = np.array([f.amount() for f in fixed]) - mapped
        amounts[-1] += nominal
        a = amounts / nominal

        start = swaption.floating_leg[k1].accrual_start_date
        d0 = c.discount(start)
        h0 = p.H(p.time_from_reference(start))
        d = np.array([c.discount(f.date) for f in fixed])
        h = np.array([p.H(p.time_from_reference(f.date)) for f in fixed])
        zeta = p.zeta(p.time_from_reference(expiry))

        if zeta <= 0.0:
            # no volatility up to expiry: intrinsic value of the forward swap
            receiver_swap = float(np.sum(a * d) - d0)
            sign = 1.0 if swaption.swap_type == SwapType.RECEIVER else -1.0
            return PricingResults(
                value=nominal * max(sign * receiver_swap, 0.0),
                additional_results={"zetaExpiry": zeta, "D0": d0, "Dj": d.tolist(),
                                    "fixedAmounts": amounts.tolist(), "mappedSpreads": mapped.tolist()}
            )

        y_star = self._y_star(a, d, h, d0, h0, zeta)
        logger.debug("AnalyticLgmSwaptionEngine: y* = %.10f, zeta = %.6e", y_star, zeta)

        std = np.sqrt(zeta)
        d_fixed = (y_star + h * zeta) / std
        d_float = (y_star + h0 * zeta) / std
        if swaption.swap_type == SwapType.RECEIVER:
            value = np.sum(a * d * norm.cdf(d_fixed)) - d0 * norm.cdf(d_float)
        else:
            value = d0 * norm.cdf(-d_float) - np.sum(a * d * norm.cdf(-d_fixed))
        value *= nominal

        return PricingResults(
            value=float(value),
            additional_results={
                "yStar": y_star,
                "zetaExpiry": zeta,
                "H0": h0,
                "D0": d0,
                "Hj": h.tolist(),
                "Dj": d.tolist(),
                "fixedAmounts": amounts.tolist(),
                "mappedSpreads": mapped.tolist(),
            }
        )


__all__ = [
    "FloatSpreadMapping",
    "AnalyticLgmSwaptionEngine",
]
