"""
Root Continuation Engine
Evaluates closed-form root branches across the sweep grid and repairs points
where the branches have no real value.

The algorithm runs in two passes:

1. Evaluate every branch x = g_k(r) over the whole grid and collect the
   "repair set": grid indices where branch 0 is not real.
2. Re-solve f(x, r) = 0 at all repair indices with one batched call to the
   symbolic provider and fill the slots:

   - len(sol) == N: branch k gets sol[k]
   - len(sol) != N: every branch gets sol[0] (coincident or missing roots;
     branch identity cannot be recovered here)
   - no real solution: every branch stays undefined (nan)

Finally magnitudes below ``ROUNDING_EPSILON`` are snapped to 0.
"""

from typing import Callable, Dict, List, Sequence
from dataclasses import dataclass, field
import logging
import time

import numpy as np

from ..expression import CompiledExpression
from .sweep import SweepGrid

logger = logging.getLogger(__name__)

ROUNDING_EPSILON = 1e-10

#: ``resolver(r_values) -> one list of real roots per r``
Resolver = Callable[[Sequence[float]], List[List[float]]]


def round_small(values: np.ndarray, epsilon: float = ROUNDING_EPSILON) -> np.ndarray:
    """Snap entries with |v| < epsilon to exactly 0; nan is left alone."""
    values = np.array(values, dtype=float)
    with np.errstate(invalid='ignore'):
        values[np.abs(values) < epsilon] = 0.0
    return values


@dataclass(frozen=True)
class RootTracks:
    """
    Equilibrium positions over the sweep.

    Attributes:
        values: Array (N, M); nan where a branch has no real value
        repair_indices: Grid indices that went through re-solving
        resolve_counts: Number of real solutions found at each repair index
    """
    values: np.ndarray
    repair_indices: tuple = ()
    resolve_counts: Dict[int, int] = field(default_factory=dict)

    @property
    def num_roots(self) -> int:
        return self.values.shape[0]

    @property
    def num_points(self) -> int:
        return self.values.shape[1]

    @property
    def defined(self) -> np.ndarray:
        """Boolean mask of real entries."""
        return ~np.isnan(self.values)

    def column(self, index: int) -> List:
        """Roots at one grid index; ``None`` for undefined branches."""
        return [None if np.isnan(v) else float(v) for v in self.values[:, index]]

    def real_count(self) -> np.ndarray:
        """Number of distinct real roots at each grid index."""
        counts = []
        for column in self.values.T:
            counts.append(len(set(column[~np.isnan(column)].tolist())))
        return np.array(counts, dtype=int)


class RootContinuationEngine:
    """
    Tracks N closed-form root branches over a sweep grid.

    Example:
        >>> from phaseline import SymbolicProvider, compile_expression
        >>> provider = SymbolicProvider()
        >>> roots = [compile_expression(s) for s in provider.solve_for_x("r*x - x**3")]
        >>> grid = SweepGrid(-5, 5, 0.1)
        >>> engine = RootContinuationEngine(
        ...     roots, grid, lambda rs: provider.resolve_batch("r*x - x**3", rs))
        >>> tracks = engine.run()
    """

    def __init__(
        self,
        root_expressions: Sequence[CompiledExpression],
        grid: SweepGrid,
        resolver: Resolver,
        epsilon: float = ROUNDING_EPSILON
    ):
        """
        Args:
            root_expressions: Compiled branches g_k(r)
            grid: Sweep grid
            resolver: Batched point re-solve
            epsilon: Magnitude below which values snap to zero
        """
        self.root_expressions = list(root_expressions)
        self.grid = grid
        self.resolver = resolver
        self.epsilon = epsilon

    @property
    def num_roots(self) -> int:
        return len(self.root_expressions)

    def evaluate_branches(self) -> np.ndarray:
        """Evaluate every branch at every grid value (no repair, no rounding)."""
        r_values = self.grid.values
        values = np.full((self.num_roots, len(r_values)), np.nan)
        for k, branch in enumerate(self.root_expressions):
            # Roots of a time-dependent f are taken at t = 0.
            values[k, :] = branch.evaluate_array({'r': r_values, 't': 0.0})
        return values

    def find_repair_set(self, values: np.ndarray) -> List[int]:
        """Grid indices where branch 0 has no real value."""
        if values.shape[0] == 0:
            return []
        return [int(i) for i in np.flatnonzero(np.isnan(values[0]))]

    def repair(self, values: np.ndarray, repair_indices: Sequence[int]) -> Dict[int, int]:
        """
        Fill repair indices in place from one batched re-solve.

        Returns:
            Mapping of grid index to number of real solutions found
        """
        if not repair_indices:
            return {}

        r_values = self.grid.values
        solutions = self.resolver([float(r_values[i]) for i in repair_indices])
        n = self.num_roots
        counts = {}

        for index, sol in zip(repair_indices, solutions):
            counts[index] = len(sol)
            if not sol:
                values[:, index] = np.nan
            elif len(sol) == n:
                values[:, index] = sol
            else:
                values[:, index] = sol[0]

        mismatched = sum(1 for c in counts.values() if c and c != n)
        empty = sum(1 for c in counts.values() if c == 0)
        if mismatched:
            logger.debug(f"{mismatched} repair points had a root count != {n}; filled with first solution")
        if empty:
            logger.debug(f"{empty} repair points have no real root")
        return counts

    def run(self) -> RootTracks:
        """
        Run the full continuation.

        Returns:
            RootTracks with exactly N rows and M columns
        """
        start_time = time.time()

        values = self.evaluate_branches()
        repair_indices = self.find_repair_set(values)
        logger.debug(
            f"Evaluated {self.num_roots} branches on {self.grid.size} points, "
            f"{len(repair_indices)} need re-solving"
        )

        counts = self.repair(values, repair_indices)
        values = round_small(values, self.epsilon)
        values.setflags(write=False)

        elapsed = time.time() - start_time
        logger.info(f"Continuation finished in {elapsed:.2f}s ({self.num_roots}x{self.grid.size})")

        return RootTracks(
            values=values,
            repair_indices=tuple(repair_indices),
            resolve_counts=counts
        )
