"""
SIMM risk taxonomy.

RiskType values are the CRIF RiskType strings. Each risk type belongs to
one risk class and one margin type.
"""

from enum import Enum


class RiskClass(Enum):
    """SIMM risk classes, in the order of the cross class correlation matrix."""
    INTEREST_RATE = "InterestRate"
    CREDIT_QUALIFYING = "CreditQualifying"
    CREDIT_NON_QUALIFYING = "CreditNonQualifying"
    EQUITY = "Equity"
    COMMODITY = "Commodity"
    FX = "FX"

    @classmethod
    def from_string(cls, s: str) -> "RiskClass":
        key = s.strip().upper().replace("_", "")
        for member in cls:
            if member.value.upper() == key or member.name.replace("_", "") == key:
                return member
        raise ValueError(f"Unknown risk class: {s}")


class MarginType(Enum):
    DELTA = "Delta"
    VEGA = "Vega"
    CURVATURE = "Curvature"
    BASE_CORR = "BaseCorr"

    @classmethod
    def from_string(cls, s: str) -> "MarginType":
        key = s.strip().upper().replace("_", "")
        for member in cls:
            if member.value.upper() == key or member.name.replace("_", "") == key:
                return member
        raise ValueError(f"Unknown margin type: {s}")


class ProductClass(Enum):
    RATES_FX = "RatesFX"
    CREDIT = "Credit"
    EQUITY = "Equity"
    COMMODITY = "Commodity"

    @classmethod
    def from_string(cls, s: str) -> "ProductClass":
        key = s.strip().upper().replace("_", "")
        for member in cls:
            if member.value.upper() == key or member.name.replace("_", "") == key:
                return member
        raise ValueError(f"Unknown product class: {s}")


class RiskType(Enum):
    """CRIF risk types."""
    IR_CURVE = "Risk_IRCurve"
    IR_VOL = "Risk_IRVol"
    INFLATION = "Risk_Inflation"
    INFLATION_VOL = "Risk_InflationVol"
    XCCY_BASIS = "Risk_XCcyBasis"
    FX = "Risk_FX"
    FX_VOL = "Risk_FXVol"
    CREDIT_Q = "Risk_CreditQ"
    CREDIT_VOL = "Risk_CreditVol"
    BASE_CORR = "Risk_BaseCorr"
    CREDIT_NON_Q = "Risk_CreditNonQ"
    CREDIT_VOL_NON_Q = "Risk_CreditVolNonQ"
    EQUITY = "Risk_Equity"
    EQUITY_VOL = "Risk_EquityVol"
    COMMODITY = "Risk_Commodity"
    COMMODITY_VOL = "Risk_CommodityVol"

    @classmethod
    def from_string(cls, s: str) -> "RiskType":
        key = s.strip()
        for member in cls:
            if member.value == key or member.name == key.upper():
                return member
        lowered = key.lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        raise ValueError(f"Unknown CRIF risk type: {s}")

    @property
    def risk_class(self) -> RiskClass:
        return _RISK_CLASS[self]

    @property
    def margin_type(self) -> MarginType:
        if self == RiskType.BASE_CORR:
            return MarginType.BASE_CORR
        if self in _VEGA_TYPES:
            return MarginType.VEGA
        return MarginType.DELTA


_VEGA_TYPES = {
    RiskType.IR_VOL,
    RiskType.INFLATION_VOL,
    RiskType.FX_VOL,
    RiskType.CREDIT_VOL,
    RiskType.CREDIT_VOL_NON_Q,
    RiskType.EQUITY_VOL,
    RiskType.COMMODITY_VOL,
}

_RISK_CLASS = {
    RiskType.IR_CURVE: RiskClass.INTEREST_RATE,
    RiskType.IR_VOL: RiskClass.INTEREST_RATE,
    RiskType.INFLATION: RiskClass.INTEREST_RATE,
    RiskType.INFLATION_VOL: RiskClass.INTEREST_RATE,
    RiskType.XCCY_BASIS: RiskClass.INTEREST_RATE,
    RiskType.FX: RiskClass.FX,
    RiskType.FX_VOL: RiskClass.FX,
    RiskType.CREDIT_Q: RiskClass.CREDIT_QUALIFYING,
    RiskType.CREDIT_VOL: RiskClass.CREDIT_QUALIFYING,
    RiskType.BASE_CORR: RiskClass.CREDIT_QUALIFYING,
    RiskType.CREDIT_NON_Q: RiskClass.CREDIT_NON_QUALIFYING,
    RiskType.CREDIT_VOL_NON_Q: RiskClass.CREDIT_NON_QUALIFYING,
    RiskType.EQUITY: RiskClass.EQUITY,
    RiskType.EQUITY_VOL: RiskClass.EQUITY,
    RiskType.COMMODITY: RiskClass.COMMODITY,
    RiskType.COMMODITY_VOL: RiskClass.COMMODITY,
}


__all__ = [
    "RiskClass",
    "MarginType",
    "ProductClass",
    "RiskType",
]
