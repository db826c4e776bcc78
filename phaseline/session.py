"""
High-Level API (Facade Pattern)
An explicit analysis session: one expression, one configuration, and the
state derived from them.
"""

from typing import Any, Dict, List, Optional, Union
from dataclasses import dataclass
import logging

import numpy as np

from .config import AnalysisConfig
from .expression import NON_REAL
from .symbolic_provider import SymbolicProvider
from .system_definition import SystemDefinition
from .analysis import (
    SweepGrid, ParameterIndexMapper,
    RootContinuationEngine, RootTracks,
    StabilityClassifier, StabilityTracks, Stability,
    PhaseVelocityField, VelocityField,
    RK4Integrator, Trajectory,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContinuationResult:
    """Everything precomputed once per expression."""
    system: SystemDefinition
    grid: SweepGrid
    mapper: ParameterIndexMapper
    roots: RootTracks
    stability: StabilityTracks
    field: PhaseVelocityField
    integrator: RK4Integrator


@dataclass(frozen=True)
class CurrentState:
    """Values the presentation layer reads after a parameter change."""
    r: float
    x0: float
    index: int
    roots: List[Optional[float]]
    labels: List[str]
    velocity_field: VelocityField
    trajectory: Trajectory
    initial_velocity: Optional[float]


class AnalysisSession:
    """
    High-level facade for 1D bifurcation analysis.

    Root continuation and stability classification run once per expression
    in :meth:`load_expression`; moving r or x0 afterwards costs one index
    lookup, one velocity-field pass and one RK4 integration.

    Example:
        >>> from phaseline import AnalysisSession
        >>> session = AnalysisSession()
        >>> session.load_expression("r*x - x**3")
        >>> state = session.set_parameter(2.0)
        >>> state.roots, state.labels
        ([0.0, -1.414..., 1.414...], ['unstable', 'stable', 'stable'])

    Attributes:
        config: Ranges and integration settings
        provider: Symbolic provider used for parsing and re-solving
    """

    def __init__(
        self,
        config: Optional[Union[AnalysisConfig, Dict[str, Any]]] = None,
        provider: Optional[SymbolicProvider] = None
    ):
        """
        Initialize a session.

        Args:
            config: AnalysisConfig or a dict accepted by AnalysisConfig.from_dict
            provider: Symbolic provider to share between sessions
        """
        if config is None:
            config = AnalysisConfig()
        elif isinstance(config, dict):
            config = AnalysisConfig.from_dict(config)
        self.config = config

        self.provider = provider if provider is not None else SymbolicProvider(
            timeout=config.solver_timeout
        )

        self.r = self._bounded('r', config.r.value, config.r)
        self.x0 = self._bounded('x0', config.x0.value, config.x0)

        self._result: Optional[ContinuationResult] = None
        self._state: Optional[CurrentState] = None

    # ------------------------------------------------------------------
    # Expression changes

    def load_expression(self, expression: str, heading: Optional[str] = None) -> CurrentState:
        """
        Parse an expression and precompute roots and stability over the sweep.

        The new tracks replace the previous ones in a single assignment, so
        no lookup ever sees a half-built result.

        Returns:
            The current state at the session's r and x0
        """
        system = SystemDefinition(expression, provider=self.provider, heading=heading)
        r_range = self.config.r
        grid = SweepGrid(r_range.min, r_range.max, r_range.step)

        engine = RootContinuationEngine(
            system.compiled_roots,
            grid,
            lambda r_values: self.provider.resolve_batch(system.expr, r_values)
        )
        roots = engine.run()
        stability = StabilityClassifier(system.compiled_derivative, grid).classify(roots)

        self._result = ContinuationResult(
            system=system,
            grid=grid,
            mapper=ParameterIndexMapper(grid),
            roots=roots,
            stability=stability,
            field=PhaseVelocityField(system.compiled, self.config.x0),
            integrator=RK4Integrator(system.compiled, self.config.integration)
        )
        return self.evaluate()

    # ------------------------------------------------------------------
    # Parameter changes

    def set_parameter(self, r: float) -> CurrentState:
        """Move the control parameter and re-evaluate."""
        self.r = self._bounded('r', r, self.config.r)
        return self.evaluate()

    def set_initial_condition(self, x0: float) -> CurrentState:
        """Move the initial condition and re-evaluate."""
        self.x0 = self._bounded('x0', x0, self.config.x0)
        return self.evaluate()

    def _bounded(self, name: str, value: float, bounds) -> float:
        value = float(value)
        if not bounds.contains(value):
            clamped = bounds.clamp(value)
            logger.warning(f"{name}={value} outside [{bounds.min}, {bounds.max}], using {clamped}")
            return clamped
        return value

    def evaluate(self) -> CurrentState:
        """
        Recompute everything that depends on r and x0.

        Returns:
            The new CurrentState
        """
        result = self._require_result()
        index = result.mapper.index_of(self.r)

        initial_velocity = result.system.compiled.evaluate({'x': self.x0, 'r': self.r, 't': 0.0})

        self._state = CurrentState(
            r=self.r,
            x0=self.x0,
            index=index,
            roots=result.roots.column(index),
            labels=result.stability.column(index),
            velocity_field=result.field.evaluate(self.r),
            trajectory=result.integrator.integrate(self.x0, self.r),
            initial_velocity=None if initial_velocity is NON_REAL else initial_velocity
        )
        return self._state

    # ------------------------------------------------------------------
    # Read access

    def _require_result(self) -> ContinuationResult:
        if self._result is None:
            raise RuntimeError("No expression loaded. Call load_expression() first.")
        return self._result

    @property
    def is_loaded(self) -> bool:
        return self._result is not None

    @property
    def system(self) -> SystemDefinition:
        return self._require_result().system

    @property
    def grid(self) -> SweepGrid:
        return self._require_result().grid

    @property
    def root_tracks(self) -> np.ndarray:
        """Array (N, M) of equilibria over the sweep; nan where undefined."""
        return self._require_result().roots.values

    @property
    def stability_tracks(self) -> np.ndarray:
        """Array (N, M) of stability strings."""
        labels = self._require_result().stability.labels
        return np.vectorize(lambda s: s.value, otypes=[object])(labels)

    @property
    def state(self) -> CurrentState:
        if self._state is None:
            return self.evaluate()
        return self._state

    @property
    def velocity_field(self) -> VelocityField:
        return self.state.velocity_field

    @property
    def trajectory(self) -> Trajectory:
        return self.state.trajectory

    def current_roots(self) -> List[Optional[float]]:
        return self.state.roots

    def current_stability(self) -> List[str]:
        return self.state.labels

    def stability_loci(self, stability: Union[Stability, str]) -> np.ndarray:
        """
        Root tracks masked to one stability label, for bifurcation diagrams.

        Returns:
            Copy of the (N, M) root array with nan outside the label
        """
        result = self._require_result()
        stability = Stability(stability)
        loci = np.array(result.roots.values, dtype=float)
        loci[~result.stability.mask(stability)] = np.nan
        return loci

    def to_latex(self) -> str:
        return self.system.to_latex()

    def to_dataframe(self):
        """
        Convert the sweep to a long-format pandas DataFrame.

        Returns:
            One row per (r, branch) with columns r, branch, x, df/dx, stability
        """
        try:
            import pandas as pd
        except ImportError:
            raise ImportError("pandas is required for DataFrame export")

        result = self._require_result()
        roots = result.roots.values
        n, m = roots.shape
        if n == 0:
            return pd.DataFrame(columns=['r', 'branch', 'x', 'df/dx', 'stability'])

        labels = result.stability.labels
        return pd.DataFrame({
            'r': np.tile(result.grid.values, n),
            'branch': np.repeat(np.arange(n), m),
            'x': roots.ravel(),
            'df/dx': result.stability.derivatives.ravel(),
            'stability': [label.value for label in labels.ravel()],
        })

    def get_stats(self) -> Dict[str, Any]:
        """
        Get session statistics.

        Returns:
            Dictionary with system, sweep and provider statistics
        """
        stats: Dict[str, Any] = {'provider': self.provider.get_stats()}
        if self._result is not None:
            result = self._result
            stats['system'] = {
                'expression': result.system.expression,
                'roots': result.system.root_expressions,
                'derivative': result.system.derivative_string,
                'properties': [p.name for p in result.system.properties]
            }
            stats['sweep'] = {
                'points': result.grid.size,
                'num_roots': result.roots.num_roots,
                'repaired_points': len(result.roots.repair_indices)
            }
        return stats

    def __repr__(self) -> str:
        expression = self._result.system.expression if self._result else None
        return (f"AnalysisSession(expression={expression!r}, "
                f"r={self.r}, x0={self.x0})")


def create_session(expression: str, **kwargs) -> AnalysisSession:
    """
    Convenience function: build a session and load an expression.

    Args:
        expression: Right-hand side f(x, r)
        **kwargs: Additional arguments for AnalysisSession

    Returns:
        Loaded AnalysisSession
    """
    session = AnalysisSession(**kwargs)
    session.load_expression(expression)
    return session
