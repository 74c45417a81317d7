"""
Pricing results.

Engines return a fresh results object per call: the scalar value plus a
map of named auxiliary results (per cash flow vectors and derived
scalars). A None entry means the quantity is undefined, e.g. a basis
point sensitivity with a zero reference amount.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class PricingResults:
    """Value and named auxiliary results of one pricing call."""
    value: float
    additional_results: Dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.additional_results[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.additional_results.get(key, default)


@dataclass
class CdsResults(PricingResults):
    """Credit default swap legs and derived quantities."""
    coupon_leg_npv: float = 0.0
    default_leg_npv: float = 0.0
    upfront_npv: float = 0.0
    accrual_rebate_npv: float = 0.0
    accrual_rebate_npv_current: float = 0.0
    fair_spread_dirty: Optional[float] = None
    fair_spread_clean: Optional[float] = None
    fair_upfront: Optional[float] = None
    coupon_leg_bps: Optional[float] = None
    upfront_bps: Optional[float] = None


__all__ = [
    "PricingResults",
    "CdsResults",
]
