"""
Cross asset state process.

Drift, diffusion and step transition moments of the CrossAssetModel state

    [z_0, ..., z_{n-1}, x_1, ..., x_{n-1}]

under the domestic LGM measure.

Two discretizations:
- EXACT: the transition over [t0, t0+dt] is Gaussian. Its mean is
  m + B x0 and its covariance is int C(u) R C(u)' du, where the loading
  matrix C(u) maps the Brownian drivers onto the state at t0+dt:
      z_j row:  alpha_j(u) on driver z_j
      x_i row:  (H_0(t)-H_0(u)) alpha_0(u) on z_0,
                -(H_i(t)-H_i(u)) alpha_i(u) on z_i,
                sigma_i(u) on x_i
  Integrals are computed with Gauss-Legendre quadrature on sub-intervals
  split at the parameter breakpoints.
- EULER: first order step from the instantaneous drift and diffusion.

The state independent step data (m, B, covariance and its square root)
is memoized per exact (t0, dt) float pair in a StepCache. The cache is
NOT invalidated when the model parameters change unless auto_flush is
set; otherwise call flush_cache() after recalibration. The cache is not
synchronized; share a process read-only across threads or lock around
flush_cache() and evolve().
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Hashable, Optional, Tuple

import numpy as np

from ..errors import ConfigurationError
from ..math.salvaging import SalvagingAlgorithm, pseudo_sqrt, salvage
from ..models.cross_asset import AssetType, CrossAssetModel

logger = logging.getLogger(__name__)


class Discretization(Enum):
    """Step discretization of the state process."""
    EXACT = "Exact"
    EULER = "Euler"

    @classmethod
    def from_string(cls, s: str) -> "Discretization":
        key = s.strip().upper()
        for member in cls:
            if member.name == key:
                return member
        raise ValueError(f"Unknown discretization: {s}")


@dataclass
class StateProcessConfig:
    """
    Settings of a CrossAssetStateProcess.

    Attributes:
        discretization: EXACT or EULER
        salvaging: Repair applied to step covariances and the correlation
        cache_size: Maximum number of cached steps (None = unbounded)
        auto_flush: Flush the cache when the model version changes
        quadrature_points: Gauss-Legendre points per sub-interval
    """
    discretization: Discretization = Discretization.EXACT
    salvaging: SalvagingAlgorithm = SalvagingAlgorithm.SPECTRAL
    cache_size: Optional[int] = None
    auto_flush: bool = False
    quadrature_points: int = 16

    @classmethod
    def exact(cls) -> "StateProcessConfig":
        return cls(discretization=Discretization.EXACT)

    @classmethod
    def euler(cls) -> "StateProcessConfig":
        return cls(discretization=Discretization.EULER)

    @classmethod
    def bounded(cls, cache_size: int = 1024) -> "StateProcessConfig":
        """Exact discretization with an LRU capped cache and auto flush."""
        return cls(discretization=Discretization.EXACT, cache_size=cache_size, auto_flush=True)


class StepCache:
    """
    Mapping from a hashable step key to step data.

    Keys compare by exact equality. With a maxsize the least recently
    used entry is evicted first.
    """

    def __init__(self, maxsize: Optional[int] = None):
        if maxsize is not None and maxsize < 1:
            raise ConfigurationError(f"cache size must be positive, got {maxsize}")
        self.maxsize = maxsize
        self._data: "OrderedDict[Hashable, object]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: Hashable):
        try:
            value = self._data[key]
        except KeyError:
            self.misses += 1
            return None
        self.hits += 1
        self._data.move_to_end(key)
        return value

    def put(self, key: Hashable, value) -> None:
        self._data[key] = value
        self._data.move_to_end(key)
        if self.maxsize is not None and len(self._data) > self.maxsize:
            self._data.popitem(last=False)

    def flush(self) -> None:
        self._data.clear()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


@dataclass
class StepData:
    """State independent transition data of one step: mean = m + B x0."""
    mean_offset: np.ndarray
    state_loading: np.ndarray
    covariance: np.ndarray
    std_deviation: np.ndarray


class _Discretization:
    """Shared model accessors of both step schemes."""

    def __init__(self, model: CrossAssetModel, salvaging: SalvagingAlgorithm):
        self.model = model
        self.salvaging = salvaging
        self.n = model.n_currencies
        self.dim = model.dimension

    def rho(self, t1: AssetType, i: int, t2: AssetType, j: int) -> float:
        return self.model.correlation(t1, i, t2, j)

    def gamma(self, i: int, u: float) -> float:
        """Drift of z_i, i > 0, under the domestic measure."""
        m = self.model
        ir0 = m.irlgm1f(0)
        iri = m.irlgm1f(i)
        fx = m.fxbs(i - 1)
        a_i = iri.alpha(u)
        return (-iri.H(u) * a_i * a_i
                + ir0.H(u) * ir0.alpha(u) * a_i * self.rho(AssetType.IR, 0, AssetType.IR, i)
                - fx.sigma(u) * a_i * self.rho(AssetType.IR, i, AssetType.FX, i - 1))

    def volatilities(self, t: float) -> np.ndarray:
        m = self.model
        vols = np.empty(self.dim)
        for j in range(self.n):
            vols[j] = m.irlgm1f(j).alpha(t)
        for k in range(self.n - 1):
            vols[self.n + k] = m.fxbs(k).sigma(t)
        return vols

    def drift(self, t: float, x: np.ndarray) -> np.ndarray:
        m = self.model
        n = self.n
        result = np.zeros(self.dim)
        r0 = m.short_rate(0, t, x[0])
        ir0 = m.irlgm1f(0)
        for i in range(1, n):
            fx = m.fxbs(i - 1)
            sigma = fx.sigma(t)
            result[i] = self.gamma(i, t)
            result[n + i - 1] = (r0 - m.short_rate(i, t, x[i]) - 0.5 * sigma * sigma
                                 + ir0.H(t) * ir0.alpha(t) * sigma
                                 * self.rho(AssetType.IR, 0, AssetType.FX, i - 1))
        return result

    def diffusion(self, t: float) -> np.ndarray:
        sqrt_rho = pseudo_sqrt(self.model.correlation_matrix, self.salvaging)
        return self.volatilities(t)[:, None] * sqrt_rho

    def step(self, t0: float, dt: float) -> StepData:
        raise NotImplementedError


class EulerDiscretization(_Discretization):
    """First order step: mean x0 + drift dt, covariance sigma sigma' dt."""

    def step(self, t0: float, dt: float) -> StepData:
        # drift is affine in x: only the short rates depend on the state
        m = self.model
        n = self.n
        offset = self.drift(t0, np.zeros(self.dim)) * dt
        loading = np.eye(self.dim)
        for i in range(1, n):
            loading[n + i - 1, 0] += m.irlgm1f(0).H_prime(t0) * dt
            loading[n + i - 1, i] -= m.irlgm1f(i).H_prime(t0) * dt
        sigma = self.diffusion(t0)
        covariance = sigma @ sigma.T * dt
        return StepData(offset, loading, covariance, sigma * np.sqrt(dt))


class ExactDiscretization(_Discretization):
    """Closed form Gaussian transition over a finite step."""

    def __init__(self, model: CrossAssetModel, salvaging: SalvagingAlgorithm,
                 quadrature_points: int = 16):
        super().__init__(model, salvaging)
        if quadrature_points < 1:
            raise ConfigurationError(f"quadrature points must be positive, got {quadrature_points}")
        self._gl_x, self._gl_w = np.polynomial.legendre.leggauss(quadrature_points)

    def quadrature(self, t0: float, t1: float) -> Tuple[np.ndarray, np.ndarray]:
        """Nodes and weights on [t0, t1], split at the parameter breakpoints."""
        breaks = self.model.parameter_times()
        inner = breaks[(breaks > t0) & (breaks < t1)]
        edges = np.concatenate(([t0], inner, [t1]))
        nodes = []
        weights = []
        for a, b in zip(edges[:-1], edges[1:]):
            half = 0.5 * (b - a)
            nodes.append(half * self._gl_x + 0.5 * (a + b))
            weights.append(half * self._gl_w)
        return np.concatenate(nodes), np.concatenate(weights)

    def loading(self, t: float, u: float) -> np.ndarray:
        """Loading matrix C(u) of the drivers onto the state at t."""
        m = self.model
        n = self.n
        c = np.zeros((self.dim, self.dim))
        ir0 = m.irlgm1f(0)
        a0 = ir0.alpha(u)
        c[0, 0] = a0
        for i in range(1, n):
            iri = m.irlgm1f(i)
            ai = iri.alpha(u)
            c[i, i] = ai
            row = n + i - 1
            c[row, 0] = (ir0.H(t) - ir0.H(u)) * a0
            c[row, i] = -(iri.H(t) - iri.H(u)) * ai
            c[row, row] = m.fxbs(i - 1).sigma(u)
        return c

    def _mean_integrand(self, t: float, u: float) -> np.ndarray:
        m = self.model
        n = self.n
        out = np.zeros(self.dim)
        ir0 = m.irlgm1f(0)
        h0 = ir0.H(u)
        convexity0 = ir0.H_prime(u) * h0 * ir0.zeta(u)
        for i in range(1, n):
            iri = m.irlgm1f(i)
            fx = m.fxbs(i - 1)
            sigma = fx.sigma(u)
            gamma = self.gamma(i, u)
            out[i] = gamma
            out[n + i - 1] = (convexity0
                              - iri.H_prime(u) * iri.H(u) * iri.zeta(u)
                              - (iri.H(t) - iri.H(u)) * gamma
                              - 0.5 * sigma * sigma
                              + h0 * ir0.alpha(u) * sigma
                              * self.rho(AssetType.IR, 0, AssetType.FX, i - 1))
        return out

    def step(self, t0: float, dt: float) -> StepData:
        m = self.model
        n = self.n
        t = t0 + dt
        nodes, weights = self.quadrature(t0, t)
        rho = m.correlation_matrix

        offset = np.zeros(self.dim)
        covariance = np.zeros((self.dim, self.dim))
        for u, w in zip(nodes, weights):
            offset += w * self._mean_integrand(t, u)
            c = self.loading(t, u)
            covariance += w * (c @ rho @ c.T)

        loading = np.eye(self.dim)
        ir0 = m.irlgm1f(0)
        p0 = ir0.term_structure
        for i in range(1, n):
            iri = m.irlgm1f(i)
            pi = iri.term_structure
            row = n + i - 1
            offset[row] += np.log(p0.discount_factor(t0) * pi.discount_factor(t)
                                  / (p0.discount_factor(t) * pi.discount_factor(t0)))
            loading[row, 0] += ir0.H(t) - ir0.H(t0)
            loading[row, i] -= iri.H(t) - iri.H(t0)

        covariance = salvage(covariance, self.salvaging)
        return StepData(offset, loading, covariance, pseudo_sqrt(covariance, self.salvaging))


class CrossAssetStateProcess:
    """
    State process of a CrossAssetModel.

    Args:
        model: The cross asset model (required)
        config: Discretization, salvaging and cache settings
    """

    def __init__(self, model: CrossAssetModel, config: Optional[StateProcessConfig] = None):
        if model is None:
            raise ConfigurationError("CrossAssetStateProcess: model is None")
        self.model = model
        self.config = config if config is not None else StateProcessConfig()
        if self.config.discretization == Discretization.EXACT:
            self._scheme: _Discretization = ExactDiscretization(
                model, self.config.salvaging, self.config.quadrature_points)
        else:
            self._scheme = EulerDiscretization(model, self.config.salvaging)
        self._cache = StepCache(self.config.cache_size)
        self._cached_version = model.version

    @property
    def discretization(self) -> Discretization:
        return self.config.discretization

    @property
    def cache(self) -> StepCache:
        return self._cache

    def size(self) -> int:
        return self.model.dimension

    def factors(self) -> int:
        return self.model.brownians()

    def initial_values(self) -> np.ndarray:
        return self.model.initial_values()

    def drift(self, t: float, x: np.ndarray) -> np.ndarray:
        """Instantaneous drift at (t, x)."""
        return self._scheme.drift(t, np.asarray(x, dtype=np.float64))

    def diffusion(self, t: float, x: Optional[np.ndarray] = None) -> np.ndarray:
        """Instantaneous diffusion matrix sigma with sigma sigma' = vol R vol."""
        return self._scheme.diffusion(t)

    def flush_cache(self) -> None:
        logger.debug("Flushing state process cache (%d entries)", len(self._cache))
        self._cache.flush()
        self._cached_version = self.model.version

    def _step(self, t0: float, dt: float) -> StepData:
        if self.config.auto_flush and self.model.version != self._cached_version:
            self.flush_cache()
        key = (float(t0), float(dt))
        data = self._cache.get(key)
        if data is not None:
            logger.debug("State process cache hit t0=%s dt=%s", t0, dt)
            return data
        logger.debug("State process cache miss t0=%s dt=%s", t0, dt)
        data = self._scheme.step(float(t0), float(dt))
        self._cache.put(key, data)
        return data

    def expectation(self, t0: float, x0: np.ndarray, dt: float) -> np.ndarray:
        data = self._step(t0, dt)
        return data.mean_offset + data.state_loading @ np.asarray(x0, dtype=np.float64)

    def covariance(self, t0: float, x0: np.ndarray, dt: float) -> np.ndarray:
        return self._step(t0, dt).covariance.copy()

    def std_deviation(self, t0: float, x0: np.ndarray, dt: float) -> np.ndarray:
        return self._step(t0, dt).std_deviation.copy()

    def evolve(self, t0: float, x0: np.ndarray, dt: float, dw: np.ndarray) -> np.ndarray:
        """State at t0 + dt given independent standard normal draws dw."""
        data = self._step(t0, dt)
        x0 = np.asarray(x0, dtype=np.float64)
        dw = np.asarray(dw, dtype=np.float64)
        if dw.shape != (self.factors(),):
            raise ValueError(f"dw must have shape ({self.factors()},), got {dw.shape}")
        return data.mean_offset + data.state_loading @ x0 + data.std_deviation @ dw


__all__ = [
    "Discretization",
    "StateProcessConfig",
    "StepCache",
    "StepData",
    "EulerDiscretization",
    "ExactDiscretization",
    "CrossAssetStateProcess",
]
