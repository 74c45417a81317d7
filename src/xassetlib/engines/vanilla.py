"""
Vanilla option engines.

Engines are independent strategies that share one capability, the
BlackScholesProcessBuilder, which assembles the process for an option
from the market state:

- EQ: spot, dividend curve, equity forecast curve (risk free), volatility
- FX: spot, foreign discount curve (dividend), domestic discount curve
  (risk free), volatility

The strategy is selected by VanillaEngineKind. VanillaOptionEngineBuilder
caches one engine per "asset/ccy" key; the cache is not synchronized.
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, Optional

import numpy as np

from ..curves.curve import Curve
from ..errors import UnsupportedFeatureError
from ..instruments.vanilla import AssetClass, ExerciseType, VanillaOption
from ..market_state import MarketState
from ..options.base_models import (
    barone_adesi_whaley_price,
    black_scholes_greeks,
    black_scholes_price,
    fd_black_scholes_price,
)
from .results import PricingResults

logger = logging.getLogger(__name__)


class VanillaEngineKind(Enum):
    """Pricing strategies for vanilla options."""
    ANALYTIC_EUROPEAN = "AnalyticEuropeanEngine"
    BARONE_ADESI_WHALEY = "BaroneAdesiWhaleyApproximationEngine"
    FD_BLACK_SCHOLES = "FdBlackScholesVanillaEngine"

    @classmethod
    def from_string(cls, s: str) -> "VanillaEngineKind":
        key = s.strip().upper().replace("_", "")
        for member in cls:
            if member.value.upper() == key or member.name.replace("_", "") == key:
                return member
        raise ValueError(f"Unknown vanilla engine: {s}")


@dataclass
class BlackScholesProcess:
    """
    Generalized Black-Scholes process.

    Attributes:
        spot: Spot value
        dividend_curve: Dividend yield (foreign rate) term structure
        risk_free_curve: Risk free (domestic / forecast) term structure
        volatility: Flat Black-Scholes volatility
    """
    spot: float
    dividend_curve: Curve
    risk_free_curve: Curve
    volatility: float

    def time(self, d: date) -> float:
        return self.risk_free_curve.time_from_reference(d)

    def rates(self, d: date):
        """(T, r, q) continuously compounded to d."""
        T = self.time(d)
        if T <= 0:
            return T, 0.0, 0.0
        r = -np.log(self.risk_free_curve.discount_factor(d)) / T
        q = -np.log(self.dividend_curve.discount_factor(d)) / T
        return T, float(r), float(q)

    def forward(self, d: date) -> float:
        return self.spot * self.dividend_curve.discount_factor(d) / self.risk_free_curve.discount_factor(d)


class BlackScholesProcessBuilder:
    """Builds the Black-Scholes process of an option from a market state."""

    def __init__(self, market: MarketState):
        self.market = market

    def build(self, option: VanillaOption) -> BlackScholesProcess:
        if option.asset_class == AssetClass.EQ:
            eq = self.market.equity(option.asset)
            if eq.currency != option.currency:
                raise ValueError(f"Equity {eq.name} is quoted in {eq.currency}, option in {option.currency}")
            return BlackScholesProcess(
                spot=eq.spot,
                dividend_curve=eq.dividend_curve,
                risk_free_curve=self.market.equity_forecast_curve(option.asset),
                volatility=eq.volatility
            )
        return BlackScholesProcess(
            spot=self.market.fx_spot(option.asset, option.currency),
            dividend_curve=self.market.discount_curve(option.asset),
            risk_free_curve=self.market.discount_curve(option.currency),
            volatility=self.market.fx_volatility(option.asset, option.currency)
        )

    def discount_curve(self, option: VanillaOption) -> Curve:
        return self.market.discount_curve(option.currency)


class AnalyticEuropeanEngine:
    """Closed form Black-Scholes engine for European exercise."""

    def __init__(self, process: BlackScholesProcess, discount_curve: Optional[Curve] = None):
        self.process = process
        self.discount_curve = discount_curve if discount_curve is not None else process.risk_free_curve

    def calculate(self, option: VanillaOption) -> PricingResults:
        if option.exercise_type != ExerciseType.EUROPEAN:
            raise UnsupportedFeatureError("AnalyticEuropeanEngine: only European exercise is supported")
        p = self.process
        T, r, q = p.rates(option.expiry_date)
        forward = p.forward(option.expiry_date)
        discount = self.discount_curve.discount_factor(option.expiry_date)
        # price off the forward, discount on the payment curve
        undiscounted = black_scholes_price(option.is_call, forward, option.strike, T, 0.0, 0.0, p.volatility)
        greeks = black_scholes_greeks(option.is_call, p.spot, option.strike, T, r, q, p.volatility)
        scale = option.quantity * discount / np.exp(-r * T)
        return PricingResults(
            value=option.quantity * discount * undiscounted,
            additional_results={
                "forward": forward,
                "discountFactor": discount,
                "timeToExpiry": T,
                "volatility": p.volatility,
                "delta": greeks['delta'] * scale,
                "gamma": greeks['gamma'] * scale,
                "vega": greeks['vega'] * scale,
            }
        )


class BaroneAdesiWhaleyEngine:
    """American exercise by the Barone-Adesi-Whaley approximation."""

    def __init__(self, process: BlackScholesProcess):
        self.process = process

    def calculate(self, option: VanillaOption) -> PricingResults:
        p = self.process
        T, r, q = p.rates(option.expiry_date)
        if option.exercise_type == ExerciseType.EUROPEAN:
            price = black_scholes_price(option.is_call, p.spot, option.strike, T, r, q, p.volatility)
            critical = float('nan')
        else:
            price, critical = barone_adesi_whaley_price(
                option.is_call, p.spot, option.strike, T, r, q, p.volatility)
        return PricingResults(
            value=option.quantity * price,
            additional_results={
                "timeToExpiry": T,
                "volatility": p.volatility,
                "criticalPrice": critical,
            }
        )


class FdBlackScholesEngine:
    """Crank-Nicolson finite difference engine, European or American."""

    def __init__(self, process: BlackScholesProcess, time_steps: int = 100, grid_points: int = 201):
        self.process = process
        self.time_steps = time_steps
        self.grid_points = grid_points

    def calculate(self, option: VanillaOption) -> PricingResults:
        p = self.process
        T, r, q = p.rates(option.expiry_date)
        result = fd_black_scholes_price(
            option.is_call, p.spot, option.strike, T, r, q, p.volatility,
            american=option.exercise_type == ExerciseType.AMERICAN,
            time_steps=self.time_steps,
            grid_points=self.grid_points
        )
        return PricingResults(
            value=option.quantity * result['price'],
            additional_results={
                "timeToExpiry": T,
                "volatility": p.volatility,
                "delta": option.quantity * result['delta'],
                "gamma": option.quantity * result['gamma'],
            }
        )


class VanillaOptionEngineBuilder:
    """
    Creates and caches vanilla option engines.

    Args:
        market: Market state the processes are built from
        kind: Engine strategy
        time_steps: Finite difference time steps
        grid_points: Finite difference spot grid size
    """

    def __init__(
        self,
        market: MarketState,
        kind: VanillaEngineKind = VanillaEngineKind.ANALYTIC_EUROPEAN,
        time_steps: int = 100,
        grid_points: int = 201
    ):
        if isinstance(kind, str):
            kind = VanillaEngineKind.from_string(kind)
        self.kind = kind
        self.process_builder = BlackScholesProcessBuilder(market)
        self.time_steps = time_steps
        self.grid_points = grid_points
        self._engines: Dict[str, object] = {}

    def _create(self, option: VanillaOption):
        process = self.process_builder.build(option)
        if self.kind == VanillaEngineKind.ANALYTIC_EUROPEAN:
            return AnalyticEuropeanEngine(process, self.process_builder.discount_curve(option))
        if self.kind == VanillaEngineKind.BARONE_ADESI_WHALEY:
            return BaroneAdesiWhaleyEngine(process)
        return FdBlackScholesEngine(process, self.time_steps, self.grid_points)

    def engine(self, option: VanillaOption):
        key = option.key
        engine = self._engines.get(key)
        if engine is not None:
            logger.debug("Vanilla engine cache hit for %s", key)
            return engine
        engine = self._create(option)
        self._engines[key] = engine
        return engine

    def price(self, option: VanillaOption) -> PricingResults:
        return self.engine(option).calculate(option)

    def reset(self) -> None:
        self._engines.clear()

    def __len__(self) -> int:
        return len(self._engines)


__all__ = [
    "VanillaEngineKind",
    "BlackScholesProcess",
    "BlackScholesProcessBuilder",
    "AnalyticEuropeanEngine",
    "BaroneAdesiWhaleyEngine",
    "FdBlackScholesEngine",
    "VanillaOptionEngineBuilder",
]
