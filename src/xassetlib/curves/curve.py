"""
Discount curve used by models and pricing engines.

Nodes are (time, discount factor) pairs; the curve interpolates the
continuously compounded zero rate and exposes P(0,t) and the instantaneous
forward f(0,t) that drives the LGM drift. A Curve is Observable: adding or
replacing a node notifies every model or engine registered with it.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Union

import numpy as np

from ..conventions import DayCount, year_fraction
from ..observable import Observable
from .interpolation import Interpolator, create_interpolator


@dataclass
class CurveNode:
    """Pillar of the curve."""
    time: float
    discount_factor: float
    zero_rate: float  # continuously compounded

    @classmethod
    def from_discount_factor(cls, time: float, df: float) -> "CurveNode":
        zr = -np.log(df) / time if time > 0 else 0.0
        return cls(time=time, discount_factor=df, zero_rate=float(zr))


class Curve(Observable):
    """
    Zero rate interpolated discount curve.

    Attributes:
        anchor_date: Date of time zero
        currency: Currency code
        day_count: Maps dates to model times
        interpolation_method: Name passed to create_interpolator

    The short end is flat in the zero rate of the first pillar and the
    discount factor at time zero is one.
    """

    def __init__(
        self,
        anchor_date: date,
        currency: str = "USD",
        day_count: DayCount = DayCount.ACT_365,
        interpolation_method: str = "linear"
    ):
        super().__init__()
        self.anchor_date = anchor_date
        self.currency = currency
        self.day_count = day_count
        self.interpolation_method = interpolation_method

        self._nodes: List[CurveNode] = [CurveNode(0.0, 1.0, 0.0)]
        self._interpolator: Optional[Interpolator] = None

    @property
    def reference_date(self) -> date:
        return self.anchor_date

    def time_from_reference(self, d: date) -> float:
        return year_fraction(self.anchor_date, d, self.day_count)

    def _to_time(self, t: Union[float, date]) -> float:
        return self.time_from_reference(t) if isinstance(t, date) else float(t)

    def add_node(self, time: float, discount_factor: float) -> None:
        """
        Insert a pillar, replacing any pillar at the same time, and notify
        observers. The interpolation is refitted on the next read.
        """
        if time < 0:
            raise ValueError("Time must be non-negative")
        if discount_factor <= 0:
            raise ValueError(f"Invalid discount factor: {discount_factor}")

        node = CurveNode.from_discount_factor(time, discount_factor)
        self._nodes = [n for n in self._nodes if abs(n.time - time) >= 1e-10]
        self._nodes.append(node)
        self._nodes.sort(key=lambda n: n.time)
        self._interpolator = None
        self.notify_observers()

    def build(self) -> None:
        """Fit the interpolation over the current pillars."""
        if len(self._nodes) < 2:
            raise ValueError("Need at least 2 nodes to build curve")

        times = np.array([n.time for n in self._nodes])
        zero_rates = np.array([n.zero_rate for n in self._nodes])
        zero_rates[0] = zero_rates[1]

        interpolator = create_interpolator(self.interpolation_method)
        interpolator.fit(times, zero_rates)
        self._interpolator = interpolator

    def _zero(self, t: float) -> float:
        if self._interpolator is None:
            self.build()
        return float(self._interpolator.interpolate(t))

    def discount_factor(self, t: Union[float, date]) -> float:
        """P(0,t) for a time or a date."""
        t = self._to_time(t)
        if t <= 0:
            return 1.0
        return float(np.exp(-self._zero(t) * t))

    def discount(self, t: Union[float, date]) -> float:
        return self.discount_factor(t)

    def instantaneous_forward(self, t: Union[float, date]) -> float:
        """f(0,t) = z(t) + t z'(t)"""
        t = max(self._to_time(t), 0.0)
        z = self._zero(t)
        return float(z + t * self._interpolator.derivative(t))

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return (f"Curve(anchor={self.anchor_date}, currency={self.currency}, "
                f"nodes={len(self._nodes)}, method={self.interpolation_method})")


def create_flat_curve(
    anchor_date: date,
    rate: float,
    max_tenor_years: float = 50.0,
    currency: str = "USD",
    day_count: DayCount = DayCount.ACT_365
) -> Curve:
    """
    Flat continuously compounded curve with pillars up to max_tenor_years.
    """
    curve = Curve(anchor_date, currency, day_count=day_count)
    pillars = [t for t in (0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 30.0) if t < max_tenor_years]
    for t in pillars + [max_tenor_years]:
        curve.add_node(t, float(np.exp(-rate * t)))
    curve.build()
    return curve


__all__ = [
    "Curve",
    "CurveNode",
    "create_flat_curve",
]
