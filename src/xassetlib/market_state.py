"""
Market state abstraction layer.

Single source of market data for the engine builders:
- Discount curves by currency
- Equity state (spot, dividend curve, forecast curve, volatility) by name
- FX spots and volatilities by currency pair

No pricing logic lives here. Lookups of missing data raise ValueError
naming the missing item.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Optional

from .curves.curve import Curve


@dataclass
class EquityState:
    """
    Market data of one equity.

    Attributes:
        name: Equity name
        currency: Quotation currency
        spot: Spot price
        dividend_curve: Curve whose discount factors give the dividend yield
        volatility: Black-Scholes volatility
        forecast_curve: Equity forecast curve (defaults to the ccy discount curve)
    """
    name: str
    currency: str
    spot: float
    dividend_curve: Curve
    volatility: float
    forecast_curve: Optional[Curve] = None


@dataclass
class MarketState:
    """
    Combined market state.

    Attributes:
        valuation_date: Market valuation date
        discount_curves: Discount curve by currency
        equities: Equity state by name
        fx_spots: Spot by pair "FORDOM" (units of DOM per unit of FOR)
        fx_volatilities: Volatility by pair "FORDOM"
        metadata: Additional market metadata
    """
    valuation_date: date
    discount_curves: Dict[str, Curve] = field(default_factory=dict)
    equities: Dict[str, EquityState] = field(default_factory=dict)
    fx_spots: Dict[str, float] = field(default_factory=dict)
    fx_volatilities: Dict[str, float] = field(default_factory=dict)
    metadata: Dict = field(default_factory=dict)

    def discount_curve(self, currency: str) -> Curve:
        try:
            return self.discount_curves[currency]
        except KeyError:
            raise ValueError(f"No discount curve for {currency}") from None

    def equity(self, name: str) -> EquityState:
        try:
            return self.equities[name]
        except KeyError:
            raise ValueError(f"No equity market data for {name}") from None

    def equity_forecast_curve(self, name: str) -> Curve:
        eq = self.equity(name)
        if eq.forecast_curve is not None:
            return eq.forecast_curve
        return self.discount_curve(eq.currency)

    def fx_spot(self, foreign: str, domestic: str) -> float:
        """Units of domestic currency per unit of foreign currency."""
        if foreign == domestic:
            return 1.0
        if foreign + domestic in self.fx_spots:
            return self.fx_spots[foreign + domestic]
        if domestic + foreign in self.fx_spots:
            return 1.0 / self.fx_spots[domestic + foreign]
        raise ValueError(f"No FX spot for {foreign}{domestic}")

    def fx_volatility(self, foreign: str, domestic: str) -> float:
        for pair in (foreign + domestic, domestic + foreign):
            if pair in self.fx_volatilities:
                return self.fx_volatilities[pair]
        raise ValueError(f"No FX volatility for {foreign}{domestic}")

    def add_equity(self, equity: EquityState) -> None:
        self.equities[equity.name] = equity

    def to_dict(self) -> Dict:
        """Serialize the scalar market data to a dictionary."""
        return {
            'valuation_date': self.valuation_date.isoformat(),
            'currencies': sorted(self.discount_curves),
            'equities': {
                name: {'currency': eq.currency, 'spot': eq.spot, 'volatility': eq.volatility}
                for name, eq in self.equities.items()
            },
            'fx_spots': dict(self.fx_spots),
            'fx_volatilities': dict(self.fx_volatilities),
            'metadata': self.metadata
        }

    @classmethod
    def from_curves(cls, valuation_date: date, discount_curves: Dict[str, Curve]) -> "MarketState":
        """Create a MarketState from discount curves only."""
        return cls(valuation_date=valuation_date, discount_curves=dict(discount_curves))


__all__ = [
    "EquityState",
    "MarketState",
]
