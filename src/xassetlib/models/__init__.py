"""
Models package - stochastic model components.

Provides:
- Piecewise constant LGM and FX Black-Scholes parametrizations
- CrossAssetModel: multi currency LGM / FX model with correlations
- LinearGaussMarkovModel: single currency LGM model
"""

from .parametrization import (
    PiecewiseConstantHelper,
    Parametrization,
    IrLgm1fParametrization,
    IrLgm1fPiecewiseConstantParametrization,
    FxBsParametrization,
    FxBsPiecewiseConstantParametrization,
)
from .cross_asset import AssetType, CrossAssetModel, LinearGaussMarkovModel

__all__ = [
    "PiecewiseConstantHelper",
    "Parametrization",
    "IrLgm1fParametrization",
    "IrLgm1fPiecewiseConstantParametrization",
    "FxBsParametrization",
    "FxBsPiecewiseConstantParametrization",
    "AssetType",
    "CrossAssetModel",
    "LinearGaussMarkovModel",
]
