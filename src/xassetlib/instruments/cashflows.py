"""
Cash flows and coupons.

Coupons accrue between an accrual start and end date and pay on a payment
date. Amounts are in the coupon currency, times are year fractions under the
coupon day count.

Event convention: a cash flow paid on the reference date counts as occurred
unless include_ref_date is set, in which case flows on the reference date
are still included in valuation.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from ..conventions import BusinessDayConvention, DayCount, adjust_business_day, year_fraction
from ..curves.curve import Curve


class CashFlow:
    """Base cash flow: a payment date and an amount."""

    date: date

    def amount(self) -> float:
        raise NotImplementedError

    def has_occurred(self, ref_date: date, include_ref_date: Optional[bool] = None) -> bool:
        """
        Whether the flow has already been paid as of ref_date.

        Args:
            ref_date: Valuation reference date
            include_ref_date: If True, flows on ref_date are still alive
        """
        if include_ref_date:
            return self.date < ref_date
        return self.date <= ref_date


@dataclass
class SimpleCashFlow(CashFlow):
    """Fixed amount paid on a date."""
    fixed_amount: float
    date: date

    def amount(self) -> float:
        return self.fixed_amount


@dataclass
class Coupon(CashFlow):
    """Interest accruing on a nominal over an accrual period."""
    date: date
    nominal: float
    accrual_start_date: date
    accrual_end_date: date
    day_count: DayCount

    def accrual_period(self) -> float:
        return year_fraction(self.accrual_start_date, self.accrual_end_date, self.day_count)

    def accrued_period(self, d: date) -> float:
        if d <= self.accrual_start_date or d > self.date:
            return 0.0
        return year_fraction(self.accrual_start_date, min(d, self.accrual_end_date), self.day_count)

    def rate(self) -> float:
        raise NotImplementedError

    def amount(self) -> float:
        return self.nominal * self.rate() * self.accrual_period()

    def accrued_amount(self, d: date) -> float:
        """Interest accrued up to d; zero before the period or after payment."""
        return self.nominal * self.rate() * self.accrued_period(d)


@dataclass
class FixedRateCoupon(Coupon):
    """Coupon paying a fixed simple rate."""
    fixed_rate: float = 0.0

    def rate(self) -> float:
        return self.fixed_rate


@dataclass
class IborCoupon(Coupon):
    """
    Floating coupon projected off a forecast curve.

    rate = gearing * (P(s)/P(e) - 1) / tau + spread, with tau the accrual
    period under the coupon day count.
    """
    forecast_curve: Optional[Curve] = None
    spread: float = 0.0
    gearing: float = 1.0

    def index_fixing(self) -> float:
        if self.forecast_curve is None:
            raise ValueError("IborCoupon: no forecast curve")
        tau = self.accrual_period()
        df_start = self.forecast_curve.discount_factor(self.accrual_start_date)
        df_end = self.forecast_curve.discount_factor(self.accrual_end_date)
        return (df_start / df_end - 1.0) / tau

    def rate(self) -> float:
        return self.gearing * self.index_fixing() + self.spread


def fixed_rate_leg(
    schedule: List[date],
    nominal: float,
    rate: float,
    day_count: DayCount,
    payment_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
    holidays: Optional[set] = None
) -> List[FixedRateCoupon]:
    """Fixed rate coupons over consecutive schedule dates."""
    if len(schedule) < 2:
        raise ValueError("Schedule needs at least two dates")
    return [
        FixedRateCoupon(
            date=adjust_business_day(end, payment_convention, holidays),
            nominal=nominal,
            accrual_start_date=start,
            accrual_end_date=end,
            day_count=day_count,
            fixed_rate=rate
        )
        for start, end in zip(schedule[:-1], schedule[1:])
    ]


def ibor_leg(
    schedule: List[date],
    nominal: float,
    forecast_curve: Curve,
    day_count: DayCount,
    spread: float = 0.0,
    gearing: float = 1.0,
    payment_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
    holidays: Optional[set] = None
) -> List[IborCoupon]:
    """Floating coupons over consecutive schedule dates."""
    if len(schedule) < 2:
        raise ValueError("Schedule needs at least two dates")
    return [
        IborCoupon(
            date=adjust_business_day(end, payment_convention, holidays),
            nominal=nominal,
            accrual_start_date=start,
            accrual_end_date=end,
            day_count=day_count,
            forecast_curve=forecast_curve,
            spread=spread,
            gearing=gearing
        )
        for start, end in zip(schedule[:-1], schedule[1:])
    ]


__all__ = [
    "CashFlow",
    "SimpleCashFlow",
    "Coupon",
    "FixedRateCoupon",
    "IborCoupon",
    "fixed_rate_leg",
    "ibor_leg",
]
