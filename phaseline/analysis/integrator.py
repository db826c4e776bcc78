"""
Trajectory Integrator
Classical fixed-step fourth-order Runge-Kutta for ẋ = f(x, t, r).
"""

from dataclasses import dataclass
import logging

import numpy as np

from ..config import IntegrationSettings
from ..expression import CompiledExpression

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Trajectory:
    """Samples (t_i, x_i) from t = 0 in steps of h."""
    t: np.ndarray
    x: np.ndarray
    r: float
    x0: float

    def __len__(self) -> int:
        return len(self.t)

    @property
    def is_finite(self) -> bool:
        """False once the solution has overflowed or become undefined."""
        return bool(np.all(np.isfinite(self.x)))


class RK4Integrator:
    """
    Fixed-step RK4 integrator.

    There is no step-size or error control and no overflow detection:
    a diverging solution shows up as growing, then ``inf``/``nan``, samples.

    Attributes:
        expression: Right-hand side f(x, t, r)
        settings: Time span and step size
    """

    def __init__(self, expression: CompiledExpression, settings: IntegrationSettings = None):
        self.expression = expression
        self.settings = settings or IntegrationSettings()

    @property
    def n_steps(self) -> int:
        return self.settings.n_steps

    def step(self, x: float, t: float, r: float, h: float) -> float:
        """Advance one step from (t, x)."""
        f = self.expression.evaluate_real
        k1 = f(x, t, r)
        k2 = f(x + 0.5 * h * k1, t + 0.5 * h, r)
        k3 = f(x + 0.5 * h * k2, t + 0.5 * h, r)
        k4 = f(x + h * k3, t + h, r)
        return x + (h / 6.0) * (k1 + 2 * k2 + 2 * k3 + k4)

    def integrate(self, x0: float, r: float) -> Trajectory:
        """
        Integrate from t = 0, x = x0.

        Returns:
            Trajectory with ``n_steps + 1`` samples
        """
        h = self.settings.step_size
        n = self.n_steps

        t_list = np.empty(n + 1)
        x_list = np.empty(n + 1)
        t_list[0] = 0.0
        x_list[0] = x0

        with np.errstate(all='ignore'):
            for i in range(n):
                x_list[i + 1] = self.step(x_list[i], t_list[i], r, h)
                t_list[i + 1] = t_list[i] + h

        trajectory = Trajectory(t=t_list, x=x_list, r=float(r), x0=float(x0))
        if not trajectory.is_finite:
            logger.debug(f"Trajectory from x0={x0} at r={r} left the finite range")
        return trajectory
