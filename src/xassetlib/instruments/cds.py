"""
Credit default swap instrument.

The premium leg is a strip of fixed rate coupons paying the running spread
on the notional. Protection covers defaults from the protection start to
the maturity; on default the protection buyer receives the claim amount
(face value times loss given default for a FaceValueClaim).

Optional upfront payment (upfront fraction times notional) and accrual
rebates (the accrued premium of the period containing the protection
start, paid back by the protection seller at the upfront date) are
carried as simple cash flows.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import List, Optional

from ..conventions import BusinessDayConvention, DayCount
from .cashflows import FixedRateCoupon, SimpleCashFlow, fixed_rate_leg


class ProtectionSide(Enum):
    """Side of the protection trade."""
    BUYER = "Buyer"
    SELLER = "Seller"

    @classmethod
    def from_string(cls, s: str) -> "ProtectionSide":
        key = s.strip().upper()
        for member in cls:
            if member.name == key:
                return member
        raise ValueError(f"Unknown protection side: {s}")


class ProtectionPaymentTime(Enum):
    """When the protection payment is made after a default."""
    AT_DEFAULT = "atDefault"
    AT_PERIOD_END = "atPeriodEnd"
    AT_MATURITY = "atMaturity"

    @classmethod
    def from_string(cls, s: str) -> "ProtectionPaymentTime":
        key = s.strip().upper().replace("_", "")
        for member in cls:
            if member.value.upper() == key or member.name.replace("_", "") == key:
                return member
        raise ValueError(f"Unknown protection payment time: {s}")


class Claim:
    """Amount paid to the protection buyer on default."""

    def amount(self, default_date: date, notional: float, recovery_rate: float) -> float:
        raise NotImplementedError


class FaceValueClaim(Claim):
    """Claim on the face value: notional times (1 - recovery)."""

    def amount(self, default_date: date, notional: float, recovery_rate: float) -> float:
        return notional * (1.0 - recovery_rate)


@dataclass
class CdsArguments:
    """Snapshot of the instrument data handed to a pricing engine."""
    side: ProtectionSide
    notional: float
    spread: float
    leg: List[FixedRateCoupon]
    upfront: Optional[float]
    upfront_payment: Optional[SimpleCashFlow]
    accrual_rebate: Optional[SimpleCashFlow]
    accrual_rebate_current: Optional[SimpleCashFlow]
    settles_accrual: bool
    protection_payment_time: ProtectionPaymentTime
    protection_start: date
    maturity: date
    claim: Claim


@dataclass
class CreditDefaultSwap:
    """
    Credit default swap.

    Attributes:
        side: BUYER or SELLER of protection
        notional: Protected notional
        spread: Running premium (e.g. 0.01 for 100bp)
        schedule: Premium accrual dates, first date is the first accrual start
        day_count: Premium day count
        upfront: Upfront as a fraction of notional (None for no upfront)
        upfront_date: Upfront and accrual rebate payment date
        settles_accrual: Accrued premium is paid on default
        protection_payment_time: Timing of the protection payment
        protection_start: Start of protection (defaults to the schedule start)
        rebates_accrual: Seller rebates the premium accrued before protection start
        trade_date: Date of the current accrual rebate (defaults to protection start)
        claim: Claim paid on default
    """
    side: ProtectionSide
    notional: float
    spread: float
    schedule: List[date]
    day_count: DayCount = DayCount.ACT_360
    upfront: Optional[float] = None
    upfront_date: Optional[date] = None
    settles_accrual: bool = True
    protection_payment_time: ProtectionPaymentTime = ProtectionPaymentTime.AT_DEFAULT
    protection_start: Optional[date] = None
    rebates_accrual: bool = True
    trade_date: Optional[date] = None
    payment_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING
    claim: Claim = field(default_factory=FaceValueClaim)

    def __post_init__(self):
        if isinstance(self.side, str):
            self.side = ProtectionSide.from_string(self.side)
        if isinstance(self.protection_payment_time, str):
            self.protection_payment_time = ProtectionPaymentTime.from_string(self.protection_payment_time)
        if self.notional <= 0:
            raise ValueError(f"CDS notional must be positive, got {self.notional}")
        if self.protection_start is None:
            self.protection_start = self.schedule[0]
        if self.protection_start < self.schedule[0]:
            raise ValueError("Protection cannot start before the first accrual start")
        if self.trade_date is None:
            self.trade_date = self.protection_start
        if self.upfront_date is None:
            self.upfront_date = self.protection_start

        self.leg: List[FixedRateCoupon] = fixed_rate_leg(
            self.schedule, self.notional, self.spread, self.day_count, self.payment_convention)

        self.upfront_payment: Optional[SimpleCashFlow] = None
        if self.upfront is not None:
            self.upfront_payment = SimpleCashFlow(self.notional * self.upfront, self.upfront_date)

        self.accrual_rebate: Optional[SimpleCashFlow] = None
        self.accrual_rebate_current: Optional[SimpleCashFlow] = None
        if self.rebates_accrual:
            self.accrual_rebate = SimpleCashFlow(
                self._accrued_at(self.protection_start), self.upfront_date)
            # accrual up to and including the step-in date after the trade date
            self.accrual_rebate_current = SimpleCashFlow(
                self._accrued_at(self.trade_date + timedelta(days=1)), self.upfront_date)

    def _accrued_at(self, d: date) -> float:
        for coupon in self.leg:
            if coupon.accrual_start_date <= d < coupon.accrual_end_date:
                return coupon.accrued_amount(d)
        return 0.0

    @property
    def maturity(self) -> date:
        return self.schedule[-1]

    def coupons(self) -> List[FixedRateCoupon]:
        return list(self.leg)

    def arguments(self) -> CdsArguments:
        return CdsArguments(
            side=self.side,
            notional=self.notional,
            spread=self.spread,
            leg=list(self.leg),
            upfront=self.upfront,
            upfront_payment=self.upfront_payment,
            accrual_rebate=self.accrual_rebate,
            accrual_rebate_current=self.accrual_rebate_current,
            settles_accrual=self.settles_accrual,
            protection_payment_time=self.protection_payment_time,
            protection_start=self.protection_start,
            maturity=self.maturity,
            claim=self.claim
        )


__all__ = [
    "ProtectionSide",
    "ProtectionPaymentTime",
    "Claim",
    "FaceValueClaim",
    "CdsArguments",
    "CreditDefaultSwap",
]
