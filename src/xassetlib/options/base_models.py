"""
Black-Scholes option pricing models.

Implements:
- Closed form European prices and Greeks on a spot with continuous
  dividend yield (cost of carry b = r - q)
- Barone-Adesi-Whaley quadratic approximation for American exercise
- Crank-Nicolson finite difference solver in log spot, European or American

Rates and yields are continuously compounded zero rates to expiry, derived
from discount factors by the callers.
"""

from typing import Dict, Tuple

import numpy as np
from scipy.linalg import solve_banded
from scipy.optimize import brentq
from scipy.stats import norm


# Standard normal CDF and PDF
N = norm.cdf
n = norm.pdf


def _d1_d2(spot: float, strike: float, T: float, r: float, q: float, vol: float) -> Tuple[float, float]:
    std = vol * np.sqrt(T)
    d1 = (np.log(spot / strike) + (r - q + 0.5 * vol * vol) * T) / std
    return d1, d1 - std


def black_scholes_price(
    is_call: bool,
    spot: float,
    strike: float,
    T: float,
    r: float,
    q: float,
    vol: float
) -> float:
    """
    European option price.

    Args:
        is_call: True for call, False for put
        spot: Spot price
        strike: Strike
        T: Time to expiry (years)
        r: Risk free zero rate
        q: Dividend yield (foreign rate for FX)
        vol: Black-Scholes volatility

    Returns:
        Option price
    """
    df_r = np.exp(-r * T)
    df_q = np.exp(-q * T)
    if T <= 0 or vol <= 0:
        forward = spot * df_q / df_r
        intrinsic = max(forward - strike, 0.0) if is_call else max(strike - forward, 0.0)
        return float(df_r * intrinsic)

    d1, d2 = _d1_d2(spot, strike, T, r, q, vol)
    if is_call:
        return float(spot * df_q * N(d1) - strike * df_r * N(d2))
    return float(strike * df_r * N(-d2) - spot * df_q * N(-d1))


def black_scholes_greeks(
    is_call: bool,
    spot: float,
    strike: float,
    T: float,
    r: float,
    q: float,
    vol: float
) -> Dict[str, float]:
    """
    Spot Greeks of a European option.

    Returns:
        Dict with delta, gamma, vega, theta, rho
    """
    if T <= 0 or vol <= 0:
        itm = spot > strike if is_call else spot < strike
        return {
            'delta': (1.0 if is_call else -1.0) if itm else 0.0,
            'gamma': 0.0,
            'vega': 0.0,
            'theta': 0.0,
            'rho': 0.0
        }

    sqrt_t = np.sqrt(T)
    df_r = np.exp(-r * T)
    df_q = np.exp(-q * T)
    d1, d2 = _d1_d2(spot, strike, T, r, q, vol)

    if is_call:
        delta = df_q * N(d1)
        theta = (-spot * df_q * n(d1) * vol / (2 * sqrt_t)
                 + q * spot * df_q * N(d1) - r * strike * df_r * N(d2))
        rho = strike * T * df_r * N(d2)
    else:
        delta = -df_q * N(-d1)
        theta = (-spot * df_q * n(d1) * vol / (2 * sqrt_t)
                 - q * spot * df_q * N(-d1) + r * strike * df_r * N(-d2))
        rho = -strike * T * df_r * N(-d2)

    return {
        'delta': float(delta),
        'gamma': float(df_q * n(d1) / (spot * vol * sqrt_t)),
        'vega': float(spot * df_q * sqrt_t * n(d1)),
        'theta': float(theta),
        'rho': float(rho)
    }


def barone_adesi_whaley_price(
    is_call: bool,
    spot: float,
    strike: float,
    T: float,
    r: float,
    q: float,
    vol: float
) -> Tuple[float, float]:
    """
    American option price by the Barone-Adesi-Whaley approximation.

    Returns:
        (price, critical spot price); the critical price is nan when early
        exercise is never optimal and the European price is returned
    """
    european = black_scholes_price(is_call, spot, strike, T, r, q, vol)
    if T <= 0 or vol <= 0:
        intrinsic = max(spot - strike, 0.0) if is_call else max(strike - spot, 0.0)
        return max(european, intrinsic), float('nan')

    b = r - q
    # no early exercise premium: calls without carry cost, puts with r <= 0
    if (is_call and b >= r) or (not is_call and r <= 0.0):
        return european, float('nan')

    vol2 = vol * vol
    m = 2.0 * r / vol2
    nn = 2.0 * b / vol2
    k = 1.0 - np.exp(-r * T)
    carry = np.exp((b - r) * T)
    sqrt_t = np.sqrt(T)

    def d1(s: float) -> float:
        return (np.log(s / strike) + (b + 0.5 * vol2) * T) / (vol * sqrt_t)

    if is_call:
        q2 = 0.5 * (-(nn - 1.0) + np.sqrt((nn - 1.0) ** 2 + 4.0 * m / k))

        def boundary(s: float) -> float:
            return (s - strike - black_scholes_price(True, s, strike, T, r, q, vol)
                    - (1.0 - carry * N(d1(s))) * s / q2)

        hi = 2.0 * strike
        while boundary(hi) < 0.0:
            hi *= 2.0
            if hi > 1e6 * strike:
                return european, float('nan')
        s_star = brentq(boundary, strike, hi, xtol=1e-12 * strike)
        if spot >= s_star:
            return spot - strike, float(s_star)
        a2 = (s_star / q2) * (1.0 - carry * N(d1(s_star)))
        return float(european + a2 * (spot / s_star) ** q2), float(s_star)

    q1 = 0.5 * (-(nn - 1.0) - np.sqrt((nn - 1.0) ** 2 + 4.0 * m / k))

    def boundary(s: float) -> float:
        return (strike - s - black_scholes_price(False, s, strike, T, r, q, vol)
                + (1.0 - carry * N(-d1(s))) * s / q1)

    lo = 0.5 * strike
    while boundary(lo) < 0.0:
        lo *= 0.5
        if lo < 1e-8 * strike:
            return european, float('nan')
    s_star = brentq(boundary, lo, strike, xtol=1e-12 * strike)
    if spot <= s_star:
        return strike - spot, float(s_star)
    a1 = -(s_star / q1) * (1.0 - carry * N(-d1(s_star)))
    return float(european + a1 * (spot / s_star) ** q1), float(s_star)


def fd_black_scholes_price(
    is_call: bool,
    spot: float,
    strike: float,
    T: float,
    r: float,
    q: float,
    vol: float,
    american: bool = False,
    time_steps: int = 100,
    grid_points: int = 201,
    std_devs: float = 5.0
) -> Dict[str, float]:
    """
    Crank-Nicolson solution of the Black-Scholes PDE in x = ln(S).

    The grid is centred on the spot and spans std_devs standard deviations
    on both sides (widened to contain the strike). American exercise is
    applied by projection on the payoff after every step.

    Returns:
        Dict with price, delta, gamma
    """
    if time_steps < 1 or grid_points < 5:
        raise ValueError("Need at least 1 time step and 5 grid points")
    if T <= 0 or vol <= 0:
        price = black_scholes_price(is_call, spot, strike, T, r, q, vol)
        greeks = black_scholes_greeks(is_call, spot, strike, T, r, q, vol)
        return {'price': price, 'delta': greeks['delta'], 'gamma': greeks['gamma']}

    if grid_points % 2 == 0:
        grid_points += 1
    x0 = np.log(spot)
    half_width = max(std_devs * vol * np.sqrt(T), abs(np.log(strike / spot)) * 1.5)
    x = np.linspace(x0 - half_width, x0 + half_width, grid_points)
    dx = x[1] - x[0]
    s = np.exp(x)
    dt = T / time_steps

    payoff = np.maximum(s - strike, 0.0) if is_call else np.maximum(strike - s, 0.0)
    v = payoff.copy()

    mu = r - q - 0.5 * vol * vol
    a = 0.5 * vol * vol / (dx * dx) - 0.5 * mu / dx
    c = 0.5 * vol * vol / (dx * dx) + 0.5 * mu / dx
    b = -vol * vol / (dx * dx) - r

    m = grid_points - 2
    # implicit half: (I - dt/2 L) on the interior nodes
    ab = np.zeros((3, m))
    ab[0, 1:] = -0.5 * dt * c
    ab[1, :] = 1.0 - 0.5 * dt * b
    ab[2, :-1] = -0.5 * dt * a

    for step in range(1, time_steps + 1):
        tau = step * dt
        if is_call:
            lower = 0.0
            upper = s[-1] * np.exp(-q * tau) - strike * np.exp(-r * tau)
        else:
            lower = strike * np.exp(-r * tau) - s[0] * np.exp(-q * tau)
            upper = 0.0
        if american:
            lower = max(lower, payoff[0])
            upper = max(upper, payoff[-1])

        rhs = v[1:-1] + 0.5 * dt * (a * v[:-2] + b * v[1:-1] + c * v[2:])
        rhs[0] += 0.5 * dt * a * lower
        rhs[-1] += 0.5 * dt * c * upper
        v[1:-1] = solve_banded((1, 1), ab, rhs)
        v[0] = lower
        v[-1] = upper
        if american:
            np.maximum(v, payoff, out=v)

    i = grid_points // 2
    dv_dx = (v[i + 1] - v[i - 1]) / (2 * dx)
    d2v_dx2 = (v[i + 1] - 2 * v[i] + v[i - 1]) / (dx * dx)
    return {
        'price': float(v[i]),
        'delta': float(dv_dx / spot),
        'gamma': float((d2v_dx2 - dv_dx) / (spot * spot))
    }


__all__ = [
    "N",
    "n",
    "black_scholes_price",
    "black_scholes_greeks",
    "barone_adesi_whaley_price",
    "fd_black_scholes_price",
]
