"""
Tests for the matplotlib views
"""

import pytest

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

import sys
sys.path.insert(0, '..')

from phaseline import create_session
from phaseline.visualization import PhaseVisualizer


@pytest.fixture(scope="module")
def session():
    return create_session("r*x - x**3")


class TestPhaseVisualizer:
    """Smoke tests for PhaseVisualizer."""

    @pytest.fixture
    def visualizer(self, session):
        yield PhaseVisualizer(session)
        plt.close('all')

    def test_phase_plot(self, visualizer):
        fig, ax = visualizer.plot_phase_plot()

        assert ax.get_title() == 'Phase Plot'
        assert len(ax.lines) >= 2

    def test_trajectory(self, visualizer):
        fig, ax = visualizer.plot_trajectory()
        assert ax.get_title() == 'Trajectory'

    def test_bifurcation_diagram(self, visualizer):
        fig, ax = visualizer.plot_bifurcation_diagram()
        assert ax.get_xlabel().startswith('r')

    def test_plot_all_saves(self, visualizer, tmp_path):
        path = tmp_path / "all.png"
        fig, axes = visualizer.plot_all(save_path=path)

        assert len(axes) == 3
        assert path.exists()

    def test_diverging_trajectory(self):
        diverging = create_session("x**2 + r")
        diverging.set_parameter(1.0)
        diverging.set_initial_condition(1.0)

        fig, ax = PhaseVisualizer(diverging).plot_trajectory()
        assert not diverging.trajectory.is_finite
        plt.close('all')


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
