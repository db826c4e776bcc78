"""
Tests for the high-level AnalysisSession API
"""

import pytest
import numpy as np

import sys
sys.path.insert(0, '..')

from phaseline import AnalysisSession, create_session, AnalysisConfig
from phaseline.exceptions import ExpressionError, ConfigurationError
from phaseline.symbolic_provider import SymbolicProvider
from phaseline.session import CurrentState


class ReorderedProvider(SymbolicProvider):
    """
    Provider whose first branch is sqrt(r), so every r < 0 is re-solved, and
    whose re-solve reports two roots for a three-branch system.
    """

    def __init__(self, solutions):
        super().__init__()
        self.solutions = solutions
        self.batch_calls = 0

    def solve_for_x(self, expression):
        return ["sqrt(r)", "0", "-sqrt(r)"]

    def resolve_batch(self, expression, r_values):
        self.batch_calls += 1
        return [list(self.solutions) for _ in r_values]


def _pairs(state):
    """Distinct (root, label) pairs of the defined equilibria."""
    return {(round(x, 9), label) for x, label in zip(state.roots, state.labels) if x is not None}


class TestAnalysisSession:
    """Tests for AnalysisSession class."""

    @pytest.fixture(scope="class")
    def provider(self):
        return SymbolicProvider()

    @pytest.fixture
    def session(self, provider):
        session = AnalysisSession(provider=provider)
        session.load_expression("r*x - x**3")
        return session

    def test_defaults(self, session):
        assert session.r == 1.0
        assert session.x0 == 0.5
        assert session.is_loaded

    def test_track_shapes(self, session):
        assert session.root_tracks.shape == (3, 101)
        assert session.stability_tracks.shape == (3, 101)
        assert session.grid.size == 101

    def test_three_equilibria_for_positive_r(self, session):
        state = session.set_parameter(2.0)
        root = np.sqrt(2.0)

        assert isinstance(state, CurrentState)
        assert state.index == 70
        assert _pairs(state) == {
            (0.0, "unstable"),
            (round(root, 9), "stable"),
            (round(-root, 9), "stable"),
        }

    def test_one_equilibrium_for_negative_r(self, session):
        state = session.set_parameter(-2.0)

        assert state.index == 30
        assert _pairs(state) == {(0.0, "stable")}

    def test_bifurcation_point(self, session):
        state = session.set_parameter(0.0)

        assert state.index == 50
        assert _pairs(state) == {(0.0, "undefined")}

    def test_parameter_at_upper_bound(self, session):
        assert session.set_parameter(5.0).index == 100
        assert session.set_parameter(-5.0).index == 0

    def test_parameter_clamped(self, session):
        state = session.set_parameter(9.0)

        assert state.r == 5.0
        assert state.index == 100

    def test_initial_condition_clamped(self, session):
        assert session.set_initial_condition(-7.5).x0 == -5.0

    def test_rounded_lookup(self, session):
        assert session.set_parameter(1.04).index == 60
        assert session.set_parameter(1.06).index == 61

    def test_initial_velocity(self, session):
        assert session.state.initial_velocity == pytest.approx(0.375)

    def test_velocity_field(self, session):
        field = session.set_parameter(1.0).velocity_field

        assert len(field.x) == 100
        assert field.x[0] == -5.0
        assert np.allclose(field.velocity, field.x - field.x**3)

    def test_trajectory(self, session):
        trajectory = session.set_initial_condition(0.5).trajectory

        assert len(trajectory) == 1001
        assert trajectory.x[0] == 0.5
        assert trajectory.x[-1] == pytest.approx(1.0, abs=1e-4)

    def test_tracks_unchanged_by_parameter_moves(self, session):
        before = np.array(session.root_tracks)
        session.set_parameter(-3.3)
        session.set_initial_condition(2.0)

        assert np.array_equal(session.root_tracks, before, equal_nan=True)

    def test_reload_is_idempotent(self, session):
        before = np.array(session.root_tracks)
        labels = np.array(session.stability_tracks)

        session.load_expression("r*x - x**3")

        assert np.array_equal(session.root_tracks, before, equal_nan=True)
        assert np.array_equal(session.stability_tracks, labels)

    def test_stability_loci(self, session):
        stable = session.stability_loci("stable")
        unstable = session.stability_loci("unstable")

        both = ~np.isnan(stable) & ~np.isnan(unstable)
        assert not both.any()
        assert np.isnan(stable[:, 50]).all()

    def test_stats(self, session):
        stats = session.get_stats()

        assert stats['sweep']['points'] == 101
        assert stats['sweep']['num_roots'] == 3
        assert 'provider' in stats
        assert stats['system']['expression'] == session.system.expression

    def test_to_dataframe(self, session):
        df = session.to_dataframe()

        assert len(df) == 3 * 101
        assert list(df.columns) == ['r', 'branch', 'x', 'df/dx', 'stability']
        row = df[(df['branch'] == 0) & (df['r'] == 0.0)]
        assert row['stability'].iloc[0] == 'undefined'

    def test_latex_and_repr(self, session):
        assert session.to_latex().startswith(r"\dot{x}")
        assert "AnalysisSession" in repr(session)

    def test_failed_load_keeps_previous_result(self, session):
        before = session.system.expression

        with pytest.raises(ExpressionError):
            session.load_expression("r + 1")

        assert session.system.expression == before


class TestSaddleNode:
    """Saddle-node: no equilibria for r > 0."""

    @pytest.fixture(scope="class")
    def session(self):
        return create_session("r + x**2")

    def test_no_roots_for_positive_r(self, session):
        state = session.set_parameter(2.0)

        assert state.roots == [None, None]
        assert state.labels == ["undefined", "undefined"]

    def test_repaired_points(self, session):
        assert session.get_stats()['sweep']['repaired_points'] == 50

    def test_two_roots_for_negative_r(self, session):
        state = session.set_parameter(-4.0)

        assert _pairs(state) == {(-2.0, "stable"), (2.0, "unstable")}

    def test_velocity_field_still_evaluated(self, session):
        field = session.set_parameter(2.0).velocity_field

        assert np.all(field.velocity > 0)


class TestResolveFallback:
    """Re-solve count that differs from the number of branches."""

    def test_first_solution_fills_every_branch(self):
        provider = ReorderedProvider([-1.0, 1.0])
        session = AnalysisSession(provider=provider)

        state = session.load_expression("r*x - x**3")
        assert provider.batch_calls == 1

        state = session.set_parameter(-2.0)
        assert state.roots == [-1.0, -1.0, -1.0]

        state = session.set_parameter(2.0)
        assert sorted(state.roots) == pytest.approx([-np.sqrt(2.0), 0.0, np.sqrt(2.0)])

    def test_matching_count_fills_by_position(self):
        provider = ReorderedProvider([3.0, 2.0, 1.0])
        session = AnalysisSession(provider=provider)
        session.load_expression("r*x - x**3")

        assert session.set_parameter(-1.0).roots == [3.0, 2.0, 1.0]


class TestSessionConfiguration:
    """Tests for configuration handling."""

    def test_dict_config(self):
        session = AnalysisSession({
            'r': {'min': -2.0, 'max': 2.0, 'step': 0.5, 'value': 0.0},
            'integration': {'time_span': 1.0, 'step_size': 0.1}
        })
        state = session.load_expression("r*x - x**3")

        assert session.grid.size == 9
        assert len(state.trajectory) == 11
        assert state.index == 4

    def test_initial_values_clamped_to_ranges(self):
        session = AnalysisSession({'r': {'value': 10.0}, 'x0': {'value': -8.0}})

        assert session.r == 5.0
        assert session.x0 == -5.0

        state = session.load_expression("r*x - x**3")
        assert state.r == 5.0
        assert state.index == 100
        assert state.velocity_field.r == 5.0
        assert state.trajectory.r == 5.0
        assert state.trajectory.x0 == -5.0

    def test_bad_config(self):
        with pytest.raises(ConfigurationError):
            AnalysisSession({'r': {'minimum': 0.0}})

    def test_config_object(self):
        config = AnalysisConfig()
        assert AnalysisSession(config).config is config

    def test_not_loaded(self):
        session = AnalysisSession()

        assert not session.is_loaded
        with pytest.raises(RuntimeError):
            session.set_parameter(1.0)
        with pytest.raises(RuntimeError):
            _ = session.root_tracks

    def test_stats_before_load(self):
        stats = AnalysisSession().get_stats()

        assert 'provider' in stats
        assert 'sweep' not in stats


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
