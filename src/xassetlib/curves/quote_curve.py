"""
Term structures interpolated over observable quotes.

An InterpolatedQuoteCurve registers with each of its node quotes. A quote
change only marks the curve dirty (and forwards the notification to
whatever observes the curve); the next read snapshots all quote values and
refits the interpolation over the full node set.
"""

import logging
from datetime import date
from typing import List, Sequence, Tuple, Union

import numpy as np

from ..conventions import DayCount, Frequency, year_fraction
from ..dates import DateUtils
from ..errors import ConfigurationError
from ..observable import LazyObject, Quote
from .interpolation import Interpolator, create_interpolator

logger = logging.getLogger(__name__)

# two node times closer than this are considered the same time
_TIME_TOLERANCE = 1e-12


class InterpolatedQuoteCurve(LazyObject):
    """
    Lazily recalculated curve over (date, quote) nodes.

    Attributes:
        reference_date: Date of time zero
        day_count: Day count mapping node dates to times
    """

    def __init__(
        self,
        reference_date: date,
        dates: Sequence[date],
        quotes: Sequence[Quote],
        day_count: DayCount = DayCount.ACT_365,
        interpolation: str = "linear",
        extrapolation: str = "linear"
    ):
        super().__init__()
        if len(dates) < 2:
            raise ConfigurationError(f"too few dates: {len(dates)}")
        if len(quotes) != len(dates):
            raise ConfigurationError(f"quotes/dates count mismatch: {len(quotes)} vs {len(dates)}")

        self.reference_date = reference_date
        self.day_count = day_count
        self._dates = self._adjust_dates(list(dates))
        self._quotes = list(quotes)

        times = [self.time_from_reference(self._dates[0])]
        for i in range(1, len(self._dates)):
            if self._dates[i] <= self._dates[i - 1]:
                raise ConfigurationError(
                    f"dates not sorted: {self._dates[i]} does not follow {self._dates[i - 1]}")
            t = self.time_from_reference(self._dates[i])
            if abs(t - times[-1]) <= _TIME_TOLERANCE:
                raise ConfigurationError(
                    "two dates correspond to the same time under this curve's day count convention")
            times.append(t)
        self._times = np.array(times)
        self._data = np.zeros(len(self._dates))
        self._interpolator: Interpolator = create_interpolator(interpolation, extrapolation)

        for q in self._quotes:
            self.register_with(q)

    def _adjust_dates(self, dates: List[date]) -> List[date]:
        """Construction-time hook to normalise node dates."""
        return dates

    def time_from_reference(self, d: date) -> float:
        return year_fraction(self.reference_date, d, self.day_count)

    def perform_calculations(self) -> None:
        self._data = np.array([q.value() for q in self._quotes], dtype=np.float64)
        self._interpolator.fit(self._times, self._data)

    def value(self, t: Union[float, date]) -> float:
        """Interpolated value at a time or date, recalculating first if dirty."""
        if isinstance(t, date):
            t = self.time_from_reference(t)
        self.calculate()
        return self._interpolator.interpolate(float(t))

    def __call__(self, t: Union[float, date]) -> float:
        return self.value(t)

    @property
    def quotes(self) -> List[Quote]:
        return list(self._quotes)

    def dates(self) -> List[date]:
        return list(self._dates)

    def times(self) -> np.ndarray:
        return self._times.copy()

    def data(self) -> np.ndarray:
        self.calculate()
        return self._data.copy()

    def nodes(self) -> List[Tuple[date, float]]:
        self.calculate()
        return list(zip(self._dates, self._data.tolist()))

    def max_date(self) -> date:
        return self._dates[-1]


class YoYInflationCurve(InterpolatedQuoteCurve):
    """
    Year-on-year inflation rate curve over quoted YoY rates.

    When the index is not interpolated every node date is moved back to the
    start of its observation period once, at construction, so that node
    times are consistent with index fixings.

    Attributes:
        observation_lag: Lag tenor, e.g. "3M"
        frequency: Index publication frequency
        index_is_interpolated: Whether index fixings are interpolated
    """

    def __init__(
        self,
        reference_date: date,
        dates: Sequence[date],
        quotes: Sequence[Quote],
        observation_lag: str = "3M",
        frequency: Frequency = Frequency.MONTHLY,
        index_is_interpolated: bool = False,
        day_count: DayCount = DayCount.ACT_365,
        interpolation: str = "linear"
    ):
        self.observation_lag = observation_lag
        self.frequency = frequency
        self.index_is_interpolated = index_is_interpolated
        super().__init__(reference_date, dates, quotes, day_count, interpolation, extrapolation="linear")
        start, end = self.base_period()
        if not start <= self._dates[0] <= end:
            logger.warning("YoY curve first date %s is outside the base period [%s, %s]",
                           self._dates[0], start, end)

    def _adjust_dates(self, dates: List[date]) -> List[date]:
        if self.index_is_interpolated:
            return dates
        return [DateUtils.inflation_period(d, self.frequency)[0] for d in dates]

    def perform_calculations(self) -> None:
        super().perform_calculations()
        if np.any(self._data <= -1.0):
            raise ValueError("yoy inflation data < -100 %")

    def base_period(self) -> Tuple[date, date]:
        """Inflation period of the reference date shifted back by the observation lag."""
        lagged = DateUtils.add_tenor(self.reference_date, "-" + self.observation_lag.lstrip("+"))
        return DateUtils.inflation_period(lagged, self.frequency)

    def base_date(self) -> date:
        self.calculate()
        return self._dates[0]

    def max_date(self) -> date:
        if self.index_is_interpolated:
            return self._dates[-1]
        return DateUtils.inflation_period(self._dates[-1], self.frequency)[1]

    def yoy_rate(self, t: Union[float, date]) -> float:
        return self.value(t)

    def rates(self) -> np.ndarray:
        return self.data()


__all__ = [
    "InterpolatedQuoteCurve",
    "YoYInflationCurve",
]
