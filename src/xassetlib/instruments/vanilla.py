"""
Vanilla equity and FX options.

For FX options the asset is the foreign currency and the strike and
premium are in the domestic currency (currency field).
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum


class OptionType(Enum):
    CALL = "Call"
    PUT = "Put"

    @classmethod
    def from_string(cls, s: str) -> "OptionType":
        key = s.strip().upper()
        for member in cls:
            if member.name == key:
                return member
        raise ValueError(f"Unknown option type: {s}")


class ExerciseType(Enum):
    EUROPEAN = "European"
    AMERICAN = "American"

    @classmethod
    def from_string(cls, s: str) -> "ExerciseType":
        key = s.strip().upper()
        for member in cls:
            if member.name == key:
                return member
        raise ValueError(f"Unknown exercise type: {s}")


class AssetClass(Enum):
    EQ = "EQ"
    FX = "FX"


@dataclass
class VanillaOption:
    """
    Plain vanilla option on an equity or an FX rate.

    Attributes:
        asset_class: EQ or FX
        asset: Equity name, or foreign currency code for FX
        currency: Payment (domestic) currency
        option_type: CALL or PUT
        strike: Strike in currency units
        expiry_date: Expiry
        exercise_type: EUROPEAN or AMERICAN
        quantity: Number of units
    """
    asset_class: AssetClass
    asset: str
    currency: str
    option_type: OptionType
    strike: float
    expiry_date: date
    exercise_type: ExerciseType = ExerciseType.EUROPEAN
    quantity: float = 1.0

    def __post_init__(self):
        if isinstance(self.asset_class, str):
            self.asset_class = AssetClass(self.asset_class.upper())
        if isinstance(self.option_type, str):
            self.option_type = OptionType.from_string(self.option_type)
        if isinstance(self.exercise_type, str):
            self.exercise_type = ExerciseType.from_string(self.exercise_type)
        if self.strike <= 0:
            raise ValueError(f"Strike must be positive, got {self.strike}")

    @property
    def is_call(self) -> bool:
        return self.option_type == OptionType.CALL

    @property
    def key(self) -> str:
        """Engine cache key, asset/ccy."""
        return f"{self.asset}/{self.currency}"

    def payoff(self, spot: float) -> float:
        if self.is_call:
            return max(spot - self.strike, 0.0)
        return max(self.strike - spot, 0.0)


__all__ = [
    "OptionType",
    "ExerciseType",
    "AssetClass",
    "VanillaOption",
]
