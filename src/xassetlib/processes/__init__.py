"""
Processes package - state processes for simulation.

Provides:
- CrossAssetStateProcess: drift, diffusion and cached step moments of the
  cross asset model state
"""

from .state_process import (
    Discretization,
    StateProcessConfig,
    StepCache,
    StepData,
    EulerDiscretization,
    ExactDiscretization,
    CrossAssetStateProcess,
)

__all__ = [
    "Discretization",
    "StateProcessConfig",
    "StepCache",
    "StepData",
    "EulerDiscretization",
    "ExactDiscretization",
    "CrossAssetStateProcess",
]
