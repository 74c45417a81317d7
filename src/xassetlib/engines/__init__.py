"""
Engines package - analytic pricing engines.

Provides:
- MidPointCdsEngine: credit default swaps, mid-point default timing
- AnalyticLgmSwaptionEngine: European swaptions in the LGM model
- Vanilla option engines and the caching engine builder
"""

from .results import PricingResults, CdsResults
from .midpoint_cds import MidPointCdsEngine
from .lgm_swaption import FloatSpreadMapping, AnalyticLgmSwaptionEngine
from .vanilla import (
    VanillaEngineKind,
    BlackScholesProcess,
    BlackScholesProcessBuilder,
    AnalyticEuropeanEngine,
    BaroneAdesiWhaleyEngine,
    FdBlackScholesEngine,
    VanillaOptionEngineBuilder,
)

__all__ = [
    "PricingResults",
    "CdsResults",
    "MidPointCdsEngine",
    "FloatSpreadMapping",
    "AnalyticLgmSwaptionEngine",
    "VanillaEngineKind",
    "BlackScholesProcess",
    "BlackScholesProcessBuilder",
    "AnalyticEuropeanEngine",
    "BaroneAdesiWhaleyEngine",
    "FdBlackScholesEngine",
    "VanillaOptionEngineBuilder",
]
