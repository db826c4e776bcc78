"""
Numerical core: continuation, stability, phase field and integration.
"""

from .sweep import SweepGrid, ParameterIndexMapper, stepped_range
from .continuation import RootContinuationEngine, RootTracks, ROUNDING_EPSILON, round_small
from .stability import StabilityClassifier, StabilityTracks, Stability
from .phase_field import PhaseVelocityField, VelocityField
from .integrator import RK4Integrator, Trajectory

__all__ = [
    "SweepGrid",
    "ParameterIndexMapper",
    "stepped_range",
    "RootContinuationEngine",
    "RootTracks",
    "ROUNDING_EPSILON",
    "round_small",
    "StabilityClassifier",
    "StabilityTracks",
    "Stability",
    "PhaseVelocityField",
    "VelocityField",
    "RK4Integrator",
    "Trajectory",
]
