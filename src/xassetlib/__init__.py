"""
XAssetLib: Cross Asset Models, Pricing Engines & Margin Library

A modular library for:
- Lazily recalculated curves over observable quotes
- Multi currency LGM / FX cross asset model and its state process
- Analytic pricing engines (CDS mid-point, LGM swaption, vanilla options)
- ISDA SIMM margin configuration and aggregation

Scope: closed form and deterministic calculations, single threaded.
"""

__version__ = "0.1.0"

# Core modules
from .errors import ConfigurationError, UnsupportedFeatureError
from .conventions import DayCount, BusinessDayConvention, Frequency, Convention, convention_from_dict, year_fraction
from .dates import DateUtils
from .observable import Observable, Observer, LazyObject, SimpleQuote

# Curves
from .curves import (
    Curve,
    SurvivalCurve,
    InterpolatedQuoteCurve,
    YoYInflationCurve,
    LinearInterpolator,
    CubicSplineInterpolator,
    LogLinearInterpolator,
    BackwardFlatInterpolator,
)

# Models
from .models import (
    IrLgm1fPiecewiseConstantParametrization,
    FxBsPiecewiseConstantParametrization,
    AssetType,
    CrossAssetModel,
    LinearGaussMarkovModel,
)

# Numerics and processes
from .math import SalvagingAlgorithm, salvage, pseudo_sqrt
from .processes import (
    Discretization,
    StateProcessConfig,
    CrossAssetStateProcess,
)

# Instruments
from .instruments import (
    FixedRateCoupon,
    IborCoupon,
    fixed_rate_leg,
    ibor_leg,
    ProtectionSide,
    CreditDefaultSwap,
    SwapType,
    SettlementType,
    Swaption,
    OptionType,
    ExerciseType,
    AssetClass,
    VanillaOption,
)

# Engines
from .engines import (
    PricingResults,
    CdsResults,
    MidPointCdsEngine,
    FloatSpreadMapping,
    AnalyticLgmSwaptionEngine,
    VanillaEngineKind,
    VanillaOptionEngineBuilder,
)

# Market state
from .market_state import EquityState, MarketState

# SIMM
from .simm import (
    RiskType,
    RiskClass,
    MarginType,
    CrifRecord,
    load_crif,
    SimmBucketMapper,
    SimmConfiguration,
    SimmConfiguration_ISDA_V2_3_8,
    SimmCalculator,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "ConfigurationError",
    "UnsupportedFeatureError",
    # Conventions
    "DayCount",
    "BusinessDayConvention",
    "Frequency",
    "Convention",
    "convention_from_dict",
    "year_fraction",
    # Dates
    "DateUtils",
    # Observables
    "Observable",
    "Observer",
    "LazyObject",
    "SimpleQuote",
    # Curves
    "Curve",
    "SurvivalCurve",
    "InterpolatedQuoteCurve",
    "YoYInflationCurve",
    "LinearInterpolator",
    "CubicSplineInterpolator",
    "LogLinearInterpolator",
    "BackwardFlatInterpolator",
    # Models
    "IrLgm1fPiecewiseConstantParametrization",
    "FxBsPiecewiseConstantParametrization",
    "AssetType",
    "CrossAssetModel",
    "LinearGaussMarkovModel",
    # Numerics and processes
    "SalvagingAlgorithm",
    "salvage",
    "pseudo_sqrt",
    "Discretization",
    "StateProcessConfig",
    "CrossAssetStateProcess",
    # Instruments
    "FixedRateCoupon",
    "IborCoupon",
    "fixed_rate_leg",
    "ibor_leg",
    "ProtectionSide",
    "CreditDefaultSwap",
    "SwapType",
    "SettlementType",
    "Swaption",
    "OptionType",
    "ExerciseType",
    "AssetClass",
    "VanillaOption",
    # Engines
    "PricingResults",
    "CdsResults",
    "MidPointCdsEngine",
    "FloatSpreadMapping",
    "AnalyticLgmSwaptionEngine",
    "VanillaEngineKind",
    "VanillaOptionEngineBuilder",
    # Market state
    "EquityState",
    "MarketState",
    # SIMM
    "RiskType",
    "RiskClass",
    "MarginType",
    "CrifRecord",
    "load_crif",
    "SimmBucketMapper",
    "SimmConfiguration",
    "SimmConfiguration_ISDA_V2_3_8",
    "SimmCalculator",
]
