"""
Default probability term structure.

Survival probabilities are interpolated log-linearly, i.e. the hazard rate
is piecewise constant between pillars and extrapolated flat beyond the
last one.
"""

from datetime import date
from typing import List, Union

import numpy as np

from ..conventions import DayCount, year_fraction
from ..observable import Observable
from .interpolation import LogLinearInterpolator


class SurvivalCurve(Observable):
    """
    Survival probability curve S(0,t).

    Attributes:
        anchor_date: Reference date, S = 1 there
        day_count: Day count for the time axis
    """

    def __init__(
        self,
        anchor_date: date,
        times: List[float],
        survival_probabilities: List[float],
        day_count: DayCount = DayCount.ACT_365
    ):
        super().__init__()
        self.anchor_date = anchor_date
        self.day_count = day_count
        self._interpolator = LogLinearInterpolator(extrapolation="linear")
        self.set_nodes(times, survival_probabilities)

    @property
    def reference_date(self) -> date:
        return self.anchor_date

    def set_nodes(self, times: List[float], survival_probabilities: List[float]) -> None:
        """Replace the pillars (t=0 is added with S=1 if missing)."""
        times = [float(t) for t in times]
        probs = [float(p) for p in survival_probabilities]
        if len(times) != len(probs):
            raise ValueError("Times and survival probabilities must have same length")
        if not times or times[0] > 0:
            times = [0.0] + times
            probs = [1.0] + probs
        if any(p <= 0 or p > 1 for p in probs):
            raise ValueError("Survival probabilities must lie in (0, 1]")
        if any(b < a for a, b in zip(probs, probs[1:])):
            raise ValueError("Survival probabilities must be non-increasing")
        self._interpolator.fit(np.array(times), np.array(probs))
        self.notify_observers()

    def time_from_reference(self, d: date) -> float:
        return year_fraction(self.anchor_date, d, self.day_count)

    def _to_time(self, t: Union[float, date]) -> float:
        if isinstance(t, date):
            return self.time_from_reference(t)
        return float(t)

    def survival_probability(self, t: Union[float, date]) -> float:
        t = self._to_time(t)
        if t <= 0:
            return 1.0
        return self._interpolator.interpolate(t)

    def default_probability(self, t1: Union[float, date], t2: Union[float, date]) -> float:
        """Probability of default in (t1, t2]."""
        t1 = self._to_time(t1)
        t2 = self._to_time(t2)
        if t2 < t1:
            raise ValueError("default_probability: t2 must not precede t1")
        return self.survival_probability(t1) - self.survival_probability(t2)

    def hazard_rate(self, t: Union[float, date]) -> float:
        t = max(self._to_time(t), 0.0)
        return -self._interpolator.log_derivative(t)


def create_flat_survival_curve(
    anchor_date: date,
    hazard_rate: float,
    max_tenor_years: float = 50.0,
    day_count: DayCount = DayCount.ACT_365
) -> SurvivalCurve:
    """Survival curve with a constant hazard rate."""
    times = [t for t in (1.0, 5.0, 10.0) if t < max_tenor_years] + [max_tenor_years]
    return SurvivalCurve(
        anchor_date,
        times,
        [float(np.exp(-hazard_rate * t)) for t in times],
        day_count=day_count
    )


__all__ = [
    "SurvivalCurve",
    "create_flat_survival_curve",
]
