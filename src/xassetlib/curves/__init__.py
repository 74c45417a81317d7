"""
Curves package - term structures.

Provides:
- Curve: discount curve with zero rate interpolation
- SurvivalCurve: default probability term structure
- InterpolatedQuoteCurve / YoYInflationCurve: lazily recalculated curves
  over observable quotes
"""

from .curve import Curve, CurveNode, create_flat_curve
from .credit import SurvivalCurve, create_flat_survival_curve
from .quote_curve import InterpolatedQuoteCurve, YoYInflationCurve
from .interpolation import (
    Interpolator,
    LinearInterpolator,
    CubicSplineInterpolator,
    LogLinearInterpolator,
    BackwardFlatInterpolator,
    create_interpolator,
)

__all__ = [
    "Curve",
    "CurveNode",
    "create_flat_curve",
    "SurvivalCurve",
    "create_flat_survival_curve",
    "InterpolatedQuoteCurve",
    "YoYInflationCurve",
    "Interpolator",
    "LinearInterpolator",
    "CubicSplineInterpolator",
    "LogLinearInterpolator",
    "BackwardFlatInterpolator",
    "create_interpolator",
]
