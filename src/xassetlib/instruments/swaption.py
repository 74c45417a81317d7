"""
European swaption instrument.

The underlying is a fixed versus floating swap given as two coupon legs.
PAYER pays fixed and receives floating, RECEIVER the reverse.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List

from .cashflows import FixedRateCoupon, IborCoupon


class SwapType(Enum):
    """Direction of the underlying swap, seen from the fixed leg."""
    PAYER = "Payer"
    RECEIVER = "Receiver"

    @classmethod
    def from_string(cls, s: str) -> "SwapType":
        key = s.strip().upper()
        for member in cls:
            if member.name == key:
                return member
        raise ValueError(f"Unknown swap type: {s}")


class SettlementType(Enum):
    """Swaption settlement."""
    PHYSICAL = "Physical"
    CASH = "Cash"

    @classmethod
    def from_string(cls, s: str) -> "SettlementType":
        key = s.strip().upper()
        for member in cls:
            if member.name == key:
                return member
        raise ValueError(f"Unknown settlement type: {s}")


@dataclass
class Swaption:
    """
    European swaption.

    Attributes:
        swap_type: PAYER or RECEIVER
        exercise_date: Option expiry
        fixed_leg: Fixed coupons of the underlying
        floating_leg: Floating coupons of the underlying
        settlement_type: PHYSICAL or CASH
    """
    swap_type: SwapType
    exercise_date: date
    fixed_leg: List[FixedRateCoupon]
    floating_leg: List[IborCoupon]
    settlement_type: SettlementType = SettlementType.PHYSICAL

    def __post_init__(self):
        if isinstance(self.swap_type, str):
            self.swap_type = SwapType.from_string(self.swap_type)
        if isinstance(self.settlement_type, str):
            self.settlement_type = SettlementType.from_string(self.settlement_type)
        if not self.fixed_leg or not self.floating_leg:
            raise ValueError("Swaption underlying needs a fixed and a floating leg")

    @property
    def nominal(self) -> float:
        return self.fixed_leg[0].nominal

    @property
    def maturity(self) -> date:
        return max(self.fixed_leg[-1].date, self.floating_leg[-1].date)


__all__ = [
    "SwapType",
    "SettlementType",
    "Swaption",
]
