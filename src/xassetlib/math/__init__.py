"""
Numerical helpers.

Provides:
- SalvagingAlgorithm / salvage / pseudo_sqrt: repair and square roots of
  covariance matrices
"""

from .salvaging import SalvagingAlgorithm, salvage, pseudo_sqrt

__all__ = [
    "SalvagingAlgorithm",
    "salvage",
    "pseudo_sqrt",
]
