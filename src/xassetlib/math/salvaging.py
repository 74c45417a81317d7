"""
Repair of covariance matrices that are not positive semi-definite.

- NONE: no repair; a materially negative eigenvalue is an error.
- SPECTRAL: negative eigenvalues are set to zero, then the diagonal is
  rescaled back to the original variances.
- HIGHAM: nearest correlation matrix by alternating projections (Higham
  2002) applied to the implied correlation, then scaled by the original
  standard deviations.

pseudo_sqrt returns the symmetric square root of the (repaired) matrix.
"""

import logging
from enum import Enum

import numpy as np

logger = logging.getLogger(__name__)

# relative eigenvalue tolerance below which a matrix counts as not PSD
_EIGEN_TOLERANCE = 1e-12


class SalvagingAlgorithm(Enum):
    """Repair strategy for non positive semi-definite matrices."""
    NONE = "None"
    SPECTRAL = "Spectral"
    HIGHAM = "Higham"

    @classmethod
    def from_string(cls, s: str) -> "SalvagingAlgorithm":
        key = s.strip().upper()
        for member in cls:
            if member.name == key or member.value.upper() == key:
                return member
        raise ValueError(f"Unknown salvaging algorithm: {s}")


def _symmetric(matrix: np.ndarray) -> np.ndarray:
    m = np.asarray(matrix, dtype=np.float64)
    if m.ndim != 2 or m.shape[0] != m.shape[1]:
        raise ValueError(f"Square matrix required, got shape {m.shape}")
    return 0.5 * (m + m.T)


def _threshold(eigenvalues: np.ndarray) -> float:
    scale = max(float(np.max(np.abs(eigenvalues))), 1.0) if len(eigenvalues) else 1.0
    return _EIGEN_TOLERANCE * scale


def _spectral(m: np.ndarray) -> np.ndarray:
    eigenvalues, eigenvectors = np.linalg.eigh(m)
    clipped = np.clip(eigenvalues, 0.0, None)
    repaired = (eigenvectors * clipped) @ eigenvectors.T
    # restore the original variances
    target = np.clip(np.diag(m), 0.0, None)
    current = np.diag(repaired)
    scale = np.ones_like(current)
    positive = current > 0.0
    scale[positive] = np.sqrt(target[positive] / current[positive])
    return repaired * np.outer(scale, scale)


def _nearest_correlation(corr: np.ndarray, max_iterations: int = 100,
                         tolerance: float = 1e-10) -> np.ndarray:
    y = corr.copy()
    delta_s = np.zeros_like(corr)
    for _ in range(max_iterations):
        r = y - delta_s
        eigenvalues, eigenvectors = np.linalg.eigh(r)
        x = (eigenvectors * np.clip(eigenvalues, 0.0, None)) @ eigenvectors.T
        delta_s = x - r
        y_next = x.copy()
        np.fill_diagonal(y_next, 1.0)
        if np.linalg.norm(y_next - y, 'fro') <= tolerance * max(np.linalg.norm(y, 'fro'), 1.0):
            y = y_next
            break
        y = y_next
    return 0.5 * (y + y.T)


def _higham(m: np.ndarray) -> np.ndarray:
    std = np.sqrt(np.clip(np.diag(m), 0.0, None))
    live = std > 0.0
    repaired = np.zeros_like(m)
    if not np.any(live):
        return repaired
    sub = m[np.ix_(live, live)]
    corr = sub / np.outer(std[live], std[live])
    corr = _nearest_correlation(corr)
    repaired[np.ix_(live, live)] = corr * np.outer(std[live], std[live])
    return repaired


def salvage(matrix: np.ndarray, algorithm: SalvagingAlgorithm = SalvagingAlgorithm.SPECTRAL) -> np.ndarray:
    """
    Return a positive semi-definite version of a symmetric matrix.

    Args:
        matrix: Square, (nearly) symmetric matrix
        algorithm: Repair strategy

    Returns:
        The input (symmetrised) when already PSD, otherwise the repaired matrix

    Raises:
        ValueError: If algorithm is NONE and the matrix is not PSD
    """
    m = _symmetric(matrix)
    if m.size == 0:
        return m
    eigenvalues = np.linalg.eigvalsh(m)
    if eigenvalues[0] >= -_threshold(eigenvalues):
        return m
    if algorithm == SalvagingAlgorithm.NONE:
        raise ValueError(
            f"Matrix is not positive semi-definite (smallest eigenvalue {eigenvalues[0]:.3e})")
    logger.warning("Salvaging non-PSD %dx%d matrix with %s, smallest eigenvalue %.3e",
                   m.shape[0], m.shape[1], algorithm.value, eigenvalues[0])
    if algorithm == SalvagingAlgorithm.SPECTRAL:
        return _spectral(m)
    return _higham(m)


def pseudo_sqrt(matrix: np.ndarray, algorithm: SalvagingAlgorithm = SalvagingAlgorithm.SPECTRAL) -> np.ndarray:
    """
    Symmetric square root S of a covariance matrix, S @ S.T == matrix.

    The matrix is salvaged first, so the result is always real.
    """
    m = salvage(matrix, algorithm)
    if m.size == 0:
        return m
    eigenvalues, eigenvectors = np.linalg.eigh(m)
    roots = np.sqrt(np.clip(eigenvalues, 0.0, None))
    return (eigenvectors * roots) @ eigenvectors.T


__all__ = [
    "SalvagingAlgorithm",
    "salvage",
    "pseudo_sqrt",
]
