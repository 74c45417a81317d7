"""
Interpolation methods for term structures.

Provides:
- LinearInterpolator: linear in the stored values
- LogLinearInterpolator: linear in log values (piecewise constant forwards
  or hazard rates when the values are discount factors or survival
  probabilities)
- CubicSplineInterpolator: natural cubic spline
- BackwardFlatInterpolator: piecewise constant, left continuous

All interpolators take year fractions as x-coordinates. Outside the node
range they extrapolate flat unless built with extrapolation="linear".
fit() always rebuilds from the full node set.
"""

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np
from scipy.interpolate import CubicSpline


class Interpolator(ABC):
    """Abstract base class for one-dimensional interpolation."""

    def __init__(self, extrapolation: str = "flat"):
        if extrapolation not in ("flat", "linear"):
            raise ValueError(f"Unknown extrapolation: {extrapolation}")
        self.extrapolation = extrapolation
        self.times: Optional[np.ndarray] = None
        self.values: Optional[np.ndarray] = None

    def fit(self, times: np.ndarray, values: np.ndarray) -> None:
        """
        Fit the interpolator to data points.

        Args:
            times: Array of year fractions, strictly increasing
            values: Array of values
        """
        times = np.asarray(times, dtype=np.float64)
        values = np.asarray(values, dtype=np.float64)
        if len(times) != len(values):
            raise ValueError("Times and values must have same length")
        if len(times) < 2:
            raise ValueError("Need at least 2 points for interpolation")
        if np.any(np.diff(times) <= 0):
            raise ValueError("Times must be strictly increasing")
        self.times = times
        self.values = values
        self._fit()

    def _fit(self) -> None:
        """Hook for subclasses that precompute coefficients."""

    def _check_fitted(self) -> None:
        if self.times is None:
            raise RuntimeError("Interpolator not fitted")

    def _bracket(self, t: float) -> int:
        idx = np.searchsorted(self.times, t, side='right') - 1
        return int(max(0, min(idx, len(self.times) - 2)))

    def __call__(self, t: float) -> float:
        """Convenience method to call interpolate."""
        return self.interpolate(t)

    def interpolate(self, t: float) -> float:
        self._check_fitted()
        if t < self.times[0] or t > self.times[-1]:
            if self.extrapolation == "flat":
                return float(self.values[0] if t < self.times[0] else self.values[-1])
            edge = self.times[0] if t < self.times[0] else self.times[-1]
            return float(self._value(edge) + self._slope(edge) * (t - edge))
        return float(self._value(t))

    def derivative(self, t: float) -> float:
        """First derivative at t (zero in flat extrapolation regions)."""
        self._check_fitted()
        if t < self.times[0] or t > self.times[-1]:
            if self.extrapolation == "flat":
                return 0.0
            edge = self.times[0] if t < self.times[0] else self.times[-1]
            return float(self._slope(edge))
        return float(self._slope(t))

    @abstractmethod
    def _value(self, t: float) -> float:
        pass

    @abstractmethod
    def _slope(self, t: float) -> float:
        pass


class LinearInterpolator(Interpolator):
    """Linear interpolation between knot points."""

    def _value(self, t: float) -> float:
        idx = self._bracket(t)
        t0, t1 = self.times[idx], self.times[idx + 1]
        v0, v1 = self.values[idx], self.values[idx + 1]
        return v0 + (t - t0) / (t1 - t0) * (v1 - v0)

    def _slope(self, t: float) -> float:
        idx = self._bracket(t)
        return (self.values[idx + 1] - self.values[idx]) / (self.times[idx + 1] - self.times[idx])


class LogLinearInterpolator(Interpolator):
    """
    Log-linear interpolation on strictly positive values.

    interpolate() returns the value itself (not its log). Linear
    extrapolation happens in log space.
    """

    def _fit(self) -> None:
        if np.any(self.values <= 0):
            raise ValueError("Log-linear interpolation needs positive values")
        self._log_values = np.log(self.values)

    def _log_value(self, t: float) -> float:
        idx = self._bracket(t)
        t0, t1 = self.times[idx], self.times[idx + 1]
        v0, v1 = self._log_values[idx], self._log_values[idx + 1]
        return v0 + (t - t0) / (t1 - t0) * (v1 - v0)

    def _log_slope(self, t: float) -> float:
        idx = self._bracket(t)
        return ((self._log_values[idx + 1] - self._log_values[idx])
                / (self.times[idx + 1] - self.times[idx]))

    def interpolate(self, t: float) -> float:
        self._check_fitted()
        if self.extrapolation == "linear" and (t < self.times[0] or t > self.times[-1]):
            edge = self.times[0] if t < self.times[0] else self.times[-1]
            return float(np.exp(self._log_value(edge) + self._log_slope(edge) * (t - edge)))
        return super().interpolate(t)

    def _value(self, t: float) -> float:
        return np.exp(self._log_value(t))

    def _slope(self, t: float) -> float:
        return self._value(t) * self._log_slope(t)

    def log_derivative(self, t: float) -> float:
        """Derivative of the log value, e.g. minus the hazard rate."""
        self._check_fitted()
        if t < self.times[0]:
            return 0.0 if self.extrapolation == "flat" else float(self._log_slope(self.times[0]))
        if t > self.times[-1]:
            return 0.0 if self.extrapolation == "flat" else float(self._log_slope(self.times[-1]))
        return float(self._log_slope(t))


class CubicSplineInterpolator(Interpolator):
    """
    Natural cubic spline (second derivative zero at both ends).

    Degenerates to linear interpolation for two nodes.
    """

    def _fit(self) -> None:
        if len(self.times) == 2:
            self._spline = None
            return
        self._spline = CubicSpline(self.times, self.values, bc_type="natural")

    def _value(self, t: float) -> float:
        if self._spline is None:
            return LinearInterpolator._value(self, t)
        return self._spline(t)

    def _slope(self, t: float) -> float:
        if self._spline is None:
            return LinearInterpolator._slope(self, t)
        return self._spline(t, 1)

    def second_derivative(self, t: float) -> float:
        self._check_fitted()
        if self._spline is None or t < self.times[0] or t > self.times[-1]:
            return 0.0
        return float(self._spline(t, 2))


class BackwardFlatInterpolator(Interpolator):
    """Piecewise constant: the value at t is the value of the next node."""

    def _value(self, t: float) -> float:
        idx = int(np.searchsorted(self.times, t, side='left'))
        return self.values[min(idx, len(self.values) - 1)]

    def _slope(self, t: float) -> float:
        return 0.0


def create_interpolator(method: str, extrapolation: str = "flat") -> Interpolator:
    """
    Factory function to create an interpolator by name.

    Args:
        method: One of "linear", "log_linear", "cubic_spline", "backward_flat"
        extrapolation: "flat" or "linear"

    Returns:
        Interpolator instance
    """
    method = method.lower().replace("-", "_").replace(" ", "_")

    if method in ("linear", "lin"):
        return LinearInterpolator(extrapolation)
    elif method in ("cubic_spline", "cubic", "spline"):
        return CubicSplineInterpolator(extrapolation)
    elif method in ("log_linear", "loglinear"):
        return LogLinearInterpolator(extrapolation)
    elif method in ("backward_flat", "backwardflat"):
        return BackwardFlatInterpolator(extrapolation)
    else:
        raise ValueError(f"Unknown interpolation method: {method}")


__all__ = [
    "Interpolator",
    "LinearInterpolator",
    "CubicSplineInterpolator",
    "LogLinearInterpolator",
    "BackwardFlatInterpolator",
    "create_interpolator",
]
