"""
Options package - Black-Scholes pricing models.

Provides:
- Closed form European prices and Greeks
- Barone-Adesi-Whaley American approximation
- Crank-Nicolson finite difference solver
"""

from .base_models import (
    black_scholes_price,
    black_scholes_greeks,
    barone_adesi_whaley_price,
    fd_black_scholes_price,
)

__all__ = [
    "black_scholes_price",
    "black_scholes_greeks",
    "barone_adesi_whaley_price",
    "fd_black_scholes_price",
]
