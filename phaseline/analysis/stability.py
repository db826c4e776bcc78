"""
Stability Classifier
Labels each tracked equilibrium from the sign of df/dx at that point.
"""

from enum import Enum
from typing import List
from dataclasses import dataclass
import logging

import numpy as np

from ..expression import CompiledExpression
from .continuation import RootTracks, round_small, ROUNDING_EPSILON
from .sweep import SweepGrid

logger = logging.getLogger(__name__)


class Stability(Enum):
    """Stability of a 1D equilibrium."""

    STABLE = "stable"
    UNSTABLE = "unstable"

    # Zero derivative (marginal, e.g. at a bifurcation point) or no real root
    UNDEFINED = "undefined"

    @classmethod
    def from_derivative(cls, value: float) -> 'Stability':
        """Classify an already rounded derivative value."""
        if np.isnan(value) or value == 0:
            return cls.UNDEFINED
        return cls.STABLE if value < 0 else cls.UNSTABLE


@dataclass(frozen=True)
class StabilityTracks:
    """
    Stability labels parallel to a RootTracks array.

    Attributes:
        labels: Object array (N, M) of Stability members
        derivatives: Rounded df/dx values; nan where not evaluated
    """
    labels: np.ndarray
    derivatives: np.ndarray

    def column(self, index: int) -> List[str]:
        """Labels at one grid index as strings."""
        return [label.value for label in self.labels[:, index]]

    def mask(self, stability: Stability) -> np.ndarray:
        """Boolean (N, M) mask of entries with the given label."""
        return np.vectorize(lambda s: s is stability, otypes=[bool])(self.labels)


class StabilityClassifier:
    """
    Evaluates df/dx(x, r) at every defined (root, r) pair.

    Negative derivative means stable, positive unstable. A derivative that
    rounds to exactly zero is reported as UNDEFINED rather than forced to
    either side.
    """

    def __init__(
        self,
        derivative: CompiledExpression,
        grid: SweepGrid,
        epsilon: float = ROUNDING_EPSILON
    ):
        self.derivative = derivative
        self.grid = grid
        self.epsilon = epsilon

    def classify(self, tracks: RootTracks) -> StabilityTracks:
        """
        Args:
            tracks: Output of the continuation engine

        Returns:
            StabilityTracks with the same shape as ``tracks.values``
        """
        roots = tracks.values
        r_grid = np.broadcast_to(self.grid.values, roots.shape)
        defined = ~np.isnan(roots)

        derivatives = np.full(roots.shape, np.nan)
        if defined.any():
            derivatives[defined] = self.derivative.evaluate_array({
                'x': roots[defined],
                'r': r_grid[defined],
                't': 0.0
            })
        derivatives = round_small(derivatives, self.epsilon)
        derivatives.setflags(write=False)

        labels = np.empty(roots.shape, dtype=object)
        for index in np.ndindex(roots.shape):
            labels[index] = Stability.from_derivative(derivatives[index])

        marginal = int(np.count_nonzero(derivatives == 0))
        if marginal:
            logger.debug(f"{marginal} equilibria with zero derivative labelled undefined")

        return StabilityTracks(labels=labels, derivatives=derivatives)
