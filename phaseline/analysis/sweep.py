"""
Sweep grid and parameter index mapping.
"""

from dataclasses import dataclass
import math
import logging

import numpy as np

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

GRID_DECIMALS = 12


def stepped_range(start: float, stop: float, step: float) -> np.ndarray:
    """
    Values ``start + i*step`` for i in [0, ceil((stop - start)/step)).

    ``stop`` is excluded, like ``range``. The count is rounded before the
    ceiling so that e.g. 10/0.1 does not gain a spurious extra point.
    """
    if step <= 0:
        raise ConfigurationError(f"step must be positive, got {step}")
    n = int(math.ceil(round((stop - start) / step, 9)))
    return np.round(start + step * np.arange(max(n, 0), dtype=float), GRID_DECIMALS)


@dataclass(frozen=True)
class SweepGrid:
    """
    Uniform grid of control parameter values.

    M = ceil((r_max - r_min)/r_step) + 1 values ``r_min + i*r_step``.
    """
    r_min: float
    r_max: float
    r_step: float

    def __post_init__(self):
        if not self.r_max > self.r_min:
            raise ConfigurationError(f"r_max ({self.r_max}) must exceed r_min ({self.r_min})")
        if not self.r_step > 0:
            raise ConfigurationError(f"r_step must be positive, got {self.r_step}")

    @property
    def size(self) -> int:
        return int(math.ceil(round((self.r_max - self.r_min) / self.r_step, 9))) + 1

    @property
    def values(self) -> np.ndarray:
        arr = self.r_min + self.r_step * np.arange(self.size, dtype=float)
        # Drops accumulation noise so that e.g. -5 + 50*0.1 is exactly 0.
        arr = np.round(arr, GRID_DECIMALS)
        arr.setflags(write=False)
        return arr

    def __len__(self) -> int:
        return self.size


class ParameterIndexMapper:
    """
    Maps a continuous r onto the nearest grid index.

    The position is measured in grid steps from r_min, rounded half-up and
    clamped to [0, M-1]. When r_step does not divide the range, the last
    grid value lies beyond r_max and is still reachable as the nearest one.
    """

    def __init__(self, grid: SweepGrid):
        self.grid = grid
        self._last = grid.size - 1

    def index_of(self, r: float) -> int:
        r = float(r)
        if not self.grid.r_min <= r <= self.grid.r_max:
            logger.warning(f"r={r} outside [{self.grid.r_min}, {self.grid.r_max}], clamping")
        position = round((r - self.grid.r_min) / self.grid.r_step, 9)
        index = int(math.floor(position + 0.5))
        return min(max(index, 0), self._last)

    __call__ = index_of
