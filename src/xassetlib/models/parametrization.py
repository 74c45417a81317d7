"""
Model parametrizations with piecewise constant coefficients.

A parametrization maps model time to the coefficient functions of one
component of the cross asset model:

- IrLgm1fPiecewiseConstantParametrization: LGM short rate component with
  piecewise constant volatility alpha(t) and piecewise constant mean
  reversion kappa(t); exposes H(t), H'(t) and zeta(t) = int_0^t alpha^2.
- FxBsPiecewiseConstantParametrization: Black-Scholes log FX spot component
  with piecewise constant volatility sigma(t); exposes variance(t).

Breakpoint convention: times t_1 < ... < t_n with t_1 >= 0 and n + 1
values; value i applies on [t_{i}, t_{i+1}) with t_0 = 0, t_{n+1} = inf.

Parametrizations are Observable and carry a version counter that
increases on every parameter change. They observe their market inputs
(the LGM discount curve, the FX spot quote) and bump the version when
those change as well.
"""

from datetime import date
from typing import List, Optional, Sequence, Union

import numpy as np

from ..curves.curve import Curve
from ..errors import ConfigurationError
from ..observable import Observable, Observer, Quote, SimpleQuote

# below this |kappa| the mean reversion is treated as zero
_KAPPA_ZERO = 1e-10


class PiecewiseConstantHelper:
    """
    Piecewise constant function y(t) with closed form integrals.

    Args:
        times: Breakpoints, strictly increasing, first >= 0
        values: len(times) + 1 values
        name: Used in error messages
    """

    def __init__(self, times: Sequence[float], values: Sequence[float], name: str = "y"):
        self.name = name
        self.t = np.asarray(times, dtype=np.float64)
        if self.t.ndim != 1:
            raise ConfigurationError(f"{name}: times must be one-dimensional")
        if len(self.t) > 0 and self.t[0] < 0.0:
            raise ConfigurationError(f"{name}: first breakpoint ({self.t[0]}) must be >= 0")
        if np.any(np.diff(self.t) <= 0.0):
            raise ConfigurationError(f"{name}: breakpoints must be strictly increasing")
        self.set_values(values)

    def set_values(self, values: Sequence[float]) -> None:
        values = np.asarray(values, dtype=np.float64)
        if len(values) != len(self.t) + 1:
            raise ConfigurationError(
                f"{self.name}: need {len(self.t) + 1} values for {len(self.t)} breakpoints, "
                f"got {len(values)}")
        self.y = values
        self._update()

    def _update(self) -> None:
        # cumulated integrals of y and y^2 at the breakpoints
        widths = np.diff(np.concatenate(([0.0], self.t)))
        self._int_y = np.concatenate(([0.0], np.cumsum(self.y[:-1] * widths)))
        self._int_y2 = np.concatenate(([0.0], np.cumsum(self.y[:-1] ** 2 * widths)))

    def _segment(self, t: float) -> int:
        return int(np.searchsorted(self.t, t, side='right'))

    def __call__(self, t: float) -> float:
        return self.value(t)

    def value(self, t: float) -> float:
        return float(self.y[self._segment(max(t, 0.0))])

    def int_y(self, t: float) -> float:
        """int_0^t y(s) ds"""
        t = max(t, 0.0)
        i = self._segment(t)
        start = self.t[i - 1] if i > 0 else 0.0
        return float(self._int_y[i] + self.y[i] * (t - start))

    def int_y_sqr(self, t: float) -> float:
        """int_0^t y(s)^2 ds"""
        t = max(t, 0.0)
        i = self._segment(t)
        start = self.t[i - 1] if i > 0 else 0.0
        return float(self._int_y2[i] + self.y[i] ** 2 * (t - start))


class Parametrization(Observable, Observer):
    """
    Base class of model component parametrizations.

    Attributes:
        currency: Currency code the component refers to
        version: Increases on each parameter or market input change
    """

    def __init__(self, currency: str):
        super().__init__()
        self.currency = currency
        self.version = 0

    def parameter_times(self) -> np.ndarray:
        """All breakpoints of the coefficient functions, sorted and unique."""
        raise NotImplementedError

    def _changed(self) -> None:
        self.version += 1
        self.notify_observers()

    def update(self) -> None:
        self._changed()


class IrLgm1fParametrization(Parametrization):
    """
    Linear Gauss Markov one factor interest rate parametrization.

    Zero bond reconstruction in terms of the state z(t):
        P(t,T) = P(0,T)/P(0,t) exp(-(H(T)-H(t)) z(t) - 0.5 (H(T)^2 - H(t)^2) zeta(t))
    H must be strictly increasing (H' > 0), which the piecewise constant
    mean reversion guarantees.
    """

    def __init__(self, currency: str, term_structure: Curve):
        super().__init__(currency)
        if term_structure is None:
            raise ConfigurationError(f"{currency} LGM parametrization: no term structure given")
        self.term_structure = term_structure
        self.register_with(term_structure)

    def alpha(self, t: float) -> float:
        raise NotImplementedError

    def zeta(self, t: float) -> float:
        raise NotImplementedError

    def H(self, t: float) -> float:
        raise NotImplementedError

    def H_prime(self, t: float) -> float:
        raise NotImplementedError

    def time_from_reference(self, d: date) -> float:
        return self.term_structure.time_from_reference(d)

    def short_rate_forward(self, t: float) -> float:
        """Instantaneous forward f(0,t) of the model curve."""
        return self.term_structure.instantaneous_forward(t)


class IrLgm1fPiecewiseConstantParametrization(IrLgm1fParametrization):
    """
    LGM parametrization with piecewise constant alpha and kappa.

    Args:
        currency: Currency code
        term_structure: Model discount curve
        alpha_times: Volatility breakpoints
        alpha_values: len(alpha_times) + 1 volatilities
        kappa_times: Mean reversion breakpoints (empty for a constant)
        kappa_values: len(kappa_times) + 1 mean reversion speeds, or a scalar
    """

    def __init__(
        self,
        currency: str,
        term_structure: Curve,
        alpha_times: Sequence[float],
        alpha_values: Sequence[float],
        kappa_times: Sequence[float] = (),
        kappa_values: Union[float, Sequence[float]] = 0.0
    ):
        super().__init__(currency, term_structure)
        if np.isscalar(kappa_values):
            kappa_values = [float(kappa_values)] * (len(kappa_times) + 1)
        self._alpha = PiecewiseConstantHelper(alpha_times, alpha_values, name=f"{currency} alpha")
        self._kappa = PiecewiseConstantHelper(kappa_times, kappa_values, name=f"{currency} kappa")
        self._update_h()

    def _update_h(self) -> None:
        # H at the kappa breakpoints: H(t) = int_0^t exp(-K(s)) ds, K = int kappa
        h = [0.0]
        start = 0.0
        for i, end in enumerate(self._kappa.t):
            h.append(h[-1] + self._h_increment(i, start, end))
            start = end
        self._h_at_breaks = np.array(h)

    def _h_increment(self, segment: int, start: float, end: float) -> float:
        kappa = self._kappa.y[segment]
        scale = np.exp(-self._kappa.int_y(start))
        width = end - start
        if abs(kappa) < _KAPPA_ZERO:
            return float(scale * width)
        return float(scale * (1.0 - np.exp(-kappa * width)) / kappa)

    def set_alpha(self, values: Sequence[float]) -> None:
        self._alpha.set_values(values)
        self._changed()

    def set_kappa(self, values: Union[float, Sequence[float]]) -> None:
        if np.isscalar(values):
            values = [float(values)] * (len(self._kappa.t) + 1)
        self._kappa.set_values(values)
        self._update_h()
        self._changed()

    @property
    def alpha_times(self) -> np.ndarray:
        return self._alpha.t.copy()

    @property
    def alpha_values(self) -> np.ndarray:
        return self._alpha.y.copy()

    def alpha(self, t: float) -> float:
        return self._alpha.value(t)

    def kappa(self, t: float) -> float:
        return self._kappa.value(t)

    def zeta(self, t: float) -> float:
        return self._alpha.int_y_sqr(t)

    def H_prime(self, t: float) -> float:
        return float(np.exp(-self._kappa.int_y(max(t, 0.0))))

    def H(self, t: float) -> float:
        t = max(t, 0.0)
        i = self._kappa._segment(t)
        start = self._kappa.t[i - 1] if i > 0 else 0.0
        return float(self._h_at_breaks[i] + self._h_increment(i, start, t))

    def parameter_times(self) -> np.ndarray:
        return np.unique(np.concatenate((self._alpha.t, self._kappa.t)))


class FxBsParametrization(Parametrization):
    """
    Black-Scholes parametrization of the log FX spot (units of domestic
    currency per unit of foreign currency).

    Args:
        currency: Foreign currency code
        fx_spot_today: Spot quote or value as of today
    """

    def __init__(self, currency: str, fx_spot_today: Union[Quote, float]):
        super().__init__(currency)
        if not isinstance(fx_spot_today, Quote):
            fx_spot_today = SimpleQuote(float(fx_spot_today))
        self.fx_spot_today = fx_spot_today
        self.register_with(fx_spot_today)

    def sigma(self, t: float) -> float:
        raise NotImplementedError

    def variance(self, t: float) -> float:
        raise NotImplementedError

    def std_deviation(self, t: float) -> float:
        return float(np.sqrt(self.variance(t)))


class FxBsPiecewiseConstantParametrization(FxBsParametrization):
    """FX Black-Scholes parametrization with piecewise constant volatility."""

    def __init__(
        self,
        currency: str,
        fx_spot_today: Union[Quote, float],
        times: Sequence[float],
        sigma: Sequence[float]
    ):
        super().__init__(currency, fx_spot_today)
        self._sigma = PiecewiseConstantHelper(times, sigma, name=f"{currency} fx sigma")

    def set_sigma(self, values: Sequence[float]) -> None:
        self._sigma.set_values(values)
        self._changed()

    def sigma(self, t: float) -> float:
        return self._sigma.value(t)

    def variance(self, t: float) -> float:
        return self._sigma.int_y_sqr(t)

    def parameter_times(self) -> np.ndarray:
        return self._sigma.t.copy()


__all__ = [
    "PiecewiseConstantHelper",
    "Parametrization",
    "IrLgm1fParametrization",
    "IrLgm1fPiecewiseConstantParametrization",
    "FxBsParametrization",
    "FxBsPiecewiseConstantParametrization",
]
