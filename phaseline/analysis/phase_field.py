"""
Phase Velocity Field Evaluator
"""

from typing import List, Tuple
from dataclasses import dataclass

import numpy as np

from ..config import ParameterRange
from ..expression import CompiledExpression
from .sweep import stepped_range


@dataclass(frozen=True)
class VelocityField:
    """f(x, r) sampled on the phase-plot x-grid."""
    r: float
    x: np.ndarray
    velocity: np.ndarray

    def pairs(self) -> List[Tuple[float, float]]:
        return list(zip(self.x.tolist(), self.velocity.tolist()))


class PhaseVelocityField:
    """
    Samples the instantaneous vector field ẋ = f(x, r).

    The x-grid comes from the configured bounds of x0, not from its current
    value, so it is built once and reused for every r.
    """

    def __init__(self, expression: CompiledExpression, x_range: ParameterRange):
        self.expression = expression
        self.x_grid = stepped_range(x_range.min, x_range.max, x_range.step)
        self.x_grid.setflags(write=False)

    def evaluate(self, r: float) -> VelocityField:
        velocity = self.expression.evaluate_array({'x': self.x_grid, 'r': float(r), 't': 0.0})
        return VelocityField(r=float(r), x=self.x_grid, velocity=velocity)
