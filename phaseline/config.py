"""
Configuration for an analysis session.

Defaults reproduce the classic sub-critical pitchfork explorer:
r in [-5, 5] step 0.1, x0 in [-5, 5] step 0.1, 10 time units with h = 0.01.
"""

from typing import Any, Dict, Optional
from dataclasses import dataclass, field, asdict, replace
import math

from .exceptions import ConfigurationError


@dataclass(frozen=True)
class ParameterRange:
    """A bounded, stepped scalar such as r or x0."""
    min: float
    max: float
    step: float
    value: float

    def __post_init__(self):
        if not self.max > self.min:
            raise ConfigurationError(f"Range max ({self.max}) must exceed min ({self.min})")
        if not self.step > 0:
            raise ConfigurationError(f"Range step must be positive, got {self.step}")

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def clamp(self, value: float) -> float:
        return min(max(float(value), self.min), self.max)

    def with_value(self, value: float) -> 'ParameterRange':
        return replace(self, value=float(value))


@dataclass(frozen=True)
class IntegrationSettings:
    """Fixed-step RK4 settings."""
    time_span: float = 10.0
    step_size: float = 0.01

    def __post_init__(self):
        if not self.time_span > 0:
            raise ConfigurationError(f"time_span must be positive, got {self.time_span}")
        if not self.step_size > 0:
            raise ConfigurationError(f"step_size must be positive, got {self.step_size}")

    @property
    def n_steps(self) -> int:
        """Number of whole steps in the span; a fractional remainder is dropped."""
        return int(math.floor(self.time_span / self.step_size + 1e-9))


def _default_r() -> ParameterRange:
    return ParameterRange(min=-5.0, max=5.0, step=0.1, value=1.0)


def _default_x0() -> ParameterRange:
    return ParameterRange(min=-5.0, max=5.0, step=0.1, value=0.5)


@dataclass(frozen=True)
class AnalysisConfig:
    """
    All recognized options of a session.

    Attributes:
        r: Control parameter range; also defines the sweep grid
        x0: Initial condition range; also defines the phase-plot x-grid
        integration: Trajectory integration settings
        solver_timeout: Timeout for the parametric symbolic solve (seconds)
    """
    r: ParameterRange = field(default_factory=_default_r)
    x0: ParameterRange = field(default_factory=_default_x0)
    integration: IntegrationSettings = field(default_factory=IntegrationSettings)
    solver_timeout: float = 30.0

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]] = None) -> 'AnalysisConfig':
        """
        Build a config from plain dictionaries, e.g.::

            {'r': {'min': -2, 'max': 2, 'step': 0.05, 'value': 0},
             'integration': {'time_span': 5, 'step_size': 0.01}}

        Missing keys keep their defaults.
        """
        data = data or {}
        defaults = cls()
        try:
            r = replace(defaults.r, **data.get('r', {}))
            x0 = replace(defaults.x0, **data.get('x0', {}))
            integration = replace(defaults.integration, **data.get('integration', {}))
        except TypeError as e:
            raise ConfigurationError(f"Unrecognized configuration option: {e}") from e

        return cls(
            r=r,
            x0=x0,
            integration=integration,
            solver_timeout=float(data.get('solver_timeout', defaults.solver_timeout))
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
