"""
Instruments package - trade data handed to pricing engines.

Provides:
- Cash flows and coupons (fixed, ibor, simple)
- CreditDefaultSwap with FaceValueClaim
- Swaption
- VanillaOption (equity and FX)
"""

from .cashflows import (
    CashFlow,
    SimpleCashFlow,
    Coupon,
    FixedRateCoupon,
    IborCoupon,
    fixed_rate_leg,
    ibor_leg,
)
from .cds import (
    ProtectionSide,
    ProtectionPaymentTime,
    Claim,
    FaceValueClaim,
    CdsArguments,
    CreditDefaultSwap,
)
from .swaption import SwapType, SettlementType, Swaption
from .vanilla import OptionType, ExerciseType, AssetClass, VanillaOption

__all__ = [
    "CashFlow",
    "SimpleCashFlow",
    "Coupon",
    "FixedRateCoupon",
    "IborCoupon",
    "fixed_rate_leg",
    "ibor_leg",
    "ProtectionSide",
    "ProtectionPaymentTime",
    "Claim",
    "FaceValueClaim",
    "CdsArguments",
    "CreditDefaultSwap",
    "SwapType",
    "SettlementType",
    "Swaption",
    "OptionType",
    "ExerciseType",
    "AssetClass",
    "VanillaOption",
]
