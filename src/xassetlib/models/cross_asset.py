"""
Cross asset model.

n interest rate components (LGM, index 0 is the domestic currency) and
n-1 FX components (log spot of currency i+1 against the domestic
currency), driven by 2n-1 correlated Brownian motions ordered as

    [z_0, ..., z_{n-1}, x_1, ..., x_{n-1}]

Under the domestic LGM measure:

    dz_0 = alpha_0 dW_0
    dz_i = gamma_i dt + alpha_i dW_i
        gamma_i = -H_i alpha_i^2 + H_0 alpha_0 alpha_i rho(z_0,z_i)
                  - sigma_i alpha_i rho(z_i,x_i)
    dx_i = (r_0 - r_i - 0.5 sigma_i^2 + H_0 alpha_0 sigma_i rho(z_0,x_i)) dt + sigma_i dW

with LGM short rates r_j = f_j(0,t) + H_j'(t) (z_j + H_j(t) zeta_j(t)).
"""

from enum import Enum
from typing import List, Optional, Sequence

import numpy as np

from ..errors import ConfigurationError
from ..observable import Observable, Observer
from .parametrization import FxBsParametrization, IrLgm1fParametrization

_CORRELATION_TOLERANCE = 1e-12


class AssetType(Enum):
    """Component kinds of the cross asset model."""
    IR = "IR"
    FX = "FX"


class LinearGaussMarkovModel(Observable, Observer):
    """
    Single currency LGM model around one parametrization.

    Numeraire and zero bonds as functions of the model state x = z(t).
    """

    def __init__(self, parametrization: IrLgm1fParametrization):
        Observable.__init__(self)
        if parametrization is None:
            raise ConfigurationError("LGM model: no parametrization given")
        self.parametrization = parametrization
        self.register_with(parametrization)

    def update(self) -> None:
        self.notify_observers()

    @property
    def version(self) -> int:
        return self.parametrization.version

    def numeraire(self, t: float, x: float) -> float:
        p = self.parametrization
        h = p.H(t)
        return float(np.exp(h * x + 0.5 * h * h * p.zeta(t)) / p.term_structure.discount_factor(t))

    def discount_bond(self, t: float, T: float, x: float) -> float:
        if T < t:
            raise ValueError(f"discount_bond: T ({T}) < t ({t})")
        p = self.parametrization
        ht = p.H(t)
        hT = p.H(T)
        ratio = p.term_structure.discount_factor(T) / p.term_structure.discount_factor(t)
        return float(ratio * np.exp(-(hT - ht) * x - 0.5 * (hT * hT - ht * ht) * p.zeta(t)))

    def reduced_discount_bond(self, t: float, T: float, x: float) -> float:
        """Zero bond divided by the numeraire."""
        p = self.parametrization
        hT = p.H(T)
        return float(p.term_structure.discount_factor(T)
                     * np.exp(-hT * x - 0.5 * hT * hT * p.zeta(t)))


class CrossAssetModel(Observable, Observer):
    """
    Multi currency LGM / FX Black-Scholes model.

    Args:
        ir_parametrizations: n LGM parametrizations, domestic first
        fx_parametrizations: n-1 FX parametrizations, fx[i] for ir[i+1]
        correlation: (2n-1)x(2n-1) instantaneous correlation matrix
            (identity when omitted)
    """

    def __init__(
        self,
        ir_parametrizations: Sequence[IrLgm1fParametrization],
        fx_parametrizations: Sequence[FxBsParametrization] = (),
        correlation: Optional[np.ndarray] = None
    ):
        Observable.__init__(self)
        self._ir = list(ir_parametrizations)
        self._fx = list(fx_parametrizations)
        if not self._ir:
            raise ConfigurationError("Cross asset model needs at least one IR component")
        if len(self._fx) != len(self._ir) - 1:
            raise ConfigurationError(
                f"Cross asset model needs {len(self._ir) - 1} FX components, got {len(self._fx)}")
        for i, fx in enumerate(self._fx):
            if fx.currency != self._ir[i + 1].currency:
                raise ConfigurationError(
                    f"FX component {i} currency {fx.currency} does not match IR component "
                    f"{i + 1} currency {self._ir[i + 1].currency}")
        self._correlation_version = 0
        self.set_correlation(np.eye(self.dimension) if correlation is None else correlation)
        for p in self._ir + self._fx:
            self.register_with(p)
        self._lgm = [LinearGaussMarkovModel(p) for p in self._ir]

    def update(self) -> None:
        self.notify_observers()

    @property
    def n_currencies(self) -> int:
        return len(self._ir)

    @property
    def dimension(self) -> int:
        return 2 * len(self._ir) - 1

    def brownians(self) -> int:
        return self.dimension

    @property
    def currencies(self) -> List[str]:
        return [p.currency for p in self._ir]

    @property
    def version(self) -> int:
        """Changes whenever a parameter or the correlation changes."""
        return (self._correlation_version
                + sum(p.version for p in self._ir)
                + sum(p.version for p in self._fx))

    def irlgm1f(self, i: int) -> IrLgm1fParametrization:
        return self._ir[i]

    def fxbs(self, i: int) -> FxBsParametrization:
        return self._fx[i]

    def lgm(self, i: int) -> LinearGaussMarkovModel:
        return self._lgm[i]

    def ccy_index(self, currency: str) -> int:
        for i, p in enumerate(self._ir):
            if p.currency == currency:
                return i
        raise ValueError(f"Currency {currency} not in cross asset model")

    def idx(self, asset_type: AssetType, i: int) -> int:
        """Position of a component in the state / Brownian vector."""
        if asset_type == AssetType.IR:
            if not 0 <= i < len(self._ir):
                raise IndexError(f"IR component {i} out of range")
            return i
        if not 0 <= i < len(self._fx):
            raise IndexError(f"FX component {i} out of range")
        return len(self._ir) + i

    def set_correlation(self, correlation: np.ndarray) -> None:
        rho = np.array(correlation, dtype=np.float64)
        n = self.dimension
        if rho.shape != (n, n):
            raise ConfigurationError(f"Correlation matrix must be {n}x{n}, got {rho.shape}")
        if not np.allclose(rho, rho.T, atol=_CORRELATION_TOLERANCE):
            raise ConfigurationError("Correlation matrix must be symmetric")
        if not np.allclose(np.diag(rho), 1.0, atol=_CORRELATION_TOLERANCE):
            raise ConfigurationError("Correlation matrix must have unit diagonal")
        if np.any(np.abs(rho) > 1.0 + _CORRELATION_TOLERANCE):
            raise ConfigurationError("Correlations must lie in [-1, 1]")
        self._rho = rho
        self._correlation_version += 1
        self.notify_observers()

    @property
    def correlation_matrix(self) -> np.ndarray:
        return self._rho.copy()

    def correlation(self, type1: AssetType, i: int, type2: AssetType, j: int) -> float:
        return float(self._rho[self.idx(type1, i), self.idx(type2, j)])

    def parameter_times(self) -> np.ndarray:
        times = [p.parameter_times() for p in self._ir + self._fx]
        return np.unique(np.concatenate(times)) if times else np.array([])

    def initial_values(self) -> np.ndarray:
        x = np.zeros(self.dimension)
        for i, fx in enumerate(self._fx):
            x[len(self._ir) + i] = np.log(fx.fx_spot_today.value())
        return x

    def short_rate(self, i: int, t: float, z: float) -> float:
        p = self._ir[i]
        return float(p.short_rate_forward(t) + p.H_prime(t) * (z + p.H(t) * p.zeta(t)))

    def numeraire(self, t: float, z0: float) -> float:
        return self._lgm[0].numeraire(t, z0)

    def discount_bond(self, i: int, t: float, T: float, z: float) -> float:
        return self._lgm[i].discount_bond(t, T, z)


__all__ = [
    "AssetType",
    "LinearGaussMarkovModel",
    "CrossAssetModel",
]
