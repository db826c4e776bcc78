"""
Visualization
Phase plot, trajectory and bifurcation diagram of an analysis session.
"""

from typing import Optional, Tuple, Union
from pathlib import Path

import numpy as np

from .session import AnalysisSession
from .analysis import Stability

COLORS = {
    'velocity_locus': '#FF7F0E',
    'trajectory': '#1F77B4',
    'stable': '#2CA02C',
    'unstable': '#DB4052',
}


class PhaseVisualizer:
    """
    Matplotlib views of an AnalysisSession.

    Attributes:
        session: A loaded AnalysisSession
        fig_size: Default figure size
        dpi: Default DPI for saved figures
    """

    def __init__(
        self,
        session: AnalysisSession,
        fig_size: Tuple[float, float] = (8, 6),
        dpi: int = 150
    ):
        self.session = session
        self.fig_size = fig_size
        self.dpi = dpi

    def _axes(self, ax):
        import matplotlib.pyplot as plt

        if ax is not None:
            return ax.figure, ax
        return plt.subplots(figsize=self.fig_size)

    def _finish(self, fig, save_path: Optional[Union[str, Path]]):
        if save_path:
            fig.savefig(save_path, dpi=self.dpi, bbox_inches='tight')

    def plot_phase_plot(self, ax=None, save_path: Optional[Union[str, Path]] = None):
        """
        Plot ẋ against x at the current r, with equilibria and x0.

        Returns:
            Matplotlib figure and axes
        """
        fig, ax = self._axes(ax)
        state = self.session.state
        field = state.velocity_field

        ax.plot(field.x, field.velocity, color=COLORS['velocity_locus'], label='locus')
        ax.axhline(0, color='gray', linewidth=0.8, alpha=0.6)

        for stability in (Stability.STABLE, Stability.UNSTABLE):
            xs = [x for x, label in zip(state.roots, state.labels)
                  if x is not None and label == stability.value]
            ax.plot(xs, np.zeros(len(xs)), 'o', color=COLORS[stability.value],
                    label=stability.value.capitalize())

        if state.initial_velocity is not None:
            ax.plot([state.x0], [state.initial_velocity], 'o', markersize=10,
                    color=COLORS['trajectory'], label='Initial Value')

        ax.set_title('Phase Plot')
        ax.set_xlabel('x →')
        ax.set_ylabel('dx/dt →')
        ax.legend(loc='best')

        self._finish(fig, save_path)
        return fig, ax

    def plot_trajectory(self, ax=None, save_path: Optional[Union[str, Path]] = None):
        """
        Plot x(t) from the current initial condition.

        Returns:
            Matplotlib figure and axes
        """
        fig, ax = self._axes(ax)
        trajectory = self.session.trajectory

        ax.plot(trajectory.t, trajectory.x, color=COLORS['trajectory'], label='Trajectory')
        ax.plot([0], [trajectory.x0], 'o', color=COLORS['trajectory'], label='Initial Value')

        finite = trajectory.x[np.isfinite(trajectory.x)]
        if len(finite) < len(trajectory.x) and len(finite):
            # Keep the axes usable when the solution blows up.
            ax.set_ylim(finite.min() - 1, finite.max() + 1)

        ax.set_title('Trajectory')
        ax.set_xlabel('t →')
        ax.set_ylabel('x →')
        ax.legend(loc='best')

        self._finish(fig, save_path)
        return fig, ax

    def plot_bifurcation_diagram(self, ax=None, save_path: Optional[Union[str, Path]] = None):
        """
        Plot the root tracks over r, stable solid and unstable dotted, with
        the equilibria at the current r highlighted.

        Returns:
            Matplotlib figure and axes
        """
        fig, ax = self._axes(ax)
        session = self.session
        r_values = session.grid.values

        for stability, style in ((Stability.STABLE, '-'), (Stability.UNSTABLE, ':')):
            loci = session.stability_loci(stability)
            for k, locus in enumerate(loci):
                ax.plot(r_values, locus, style, color=COLORS[stability.value],
                        label=stability.value.capitalize() if k == 0 else None)

        state = session.state
        for stability in (Stability.STABLE, Stability.UNSTABLE):
            ys = [x for x, label in zip(state.roots, state.labels)
                  if x is not None and label == stability.value]
            ax.plot([state.r] * len(ys), ys, 'o', color=COLORS[stability.value])

        ax.axvline(state.r, color='gray', linewidth=0.8, alpha=0.4)
        ax.set_title('Nodes')
        ax.set_xlabel('r →')
        ax.set_ylabel('Roots →')
        ax.legend(loc='best')

        self._finish(fig, save_path)
        return fig, ax

    def plot_all(self, save_path: Optional[Union[str, Path]] = None):
        """
        The three views side by side.

        Returns:
            Matplotlib figure and array of axes
        """
        import matplotlib.pyplot as plt

        fig, axes = plt.subplots(1, 3, figsize=(self.fig_size[0] * 2, self.fig_size[1] * 0.75))
        self.plot_phase_plot(ax=axes[0])
        self.plot_trajectory(ax=axes[1])
        self.plot_bifurcation_diagram(ax=axes[2])

        heading = self.session.system.heading
        fig.suptitle(heading or f"${self.session.to_latex()}$")
        fig.tight_layout()

        self._finish(fig, save_path)
        return fig, axes
