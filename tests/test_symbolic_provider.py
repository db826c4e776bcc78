"""
Tests for the SymPy-backed Symbolic Provider
"""

import time

import pytest
import sympy as sp

import sys
sys.path.insert(0, '..')

from phaseline.cache_manager import ResolveCache
from phaseline.exceptions import ExpressionError, SymbolicTimeoutError
from phaseline.symbolic_provider import SymbolicProvider


class TestSymbolicProvider:
    """Tests for SymbolicProvider class."""

    @pytest.fixture
    def provider(self):
        return SymbolicProvider(timeout=30.0)

    def test_solve_for_x_cubic(self, provider):
        roots = provider.solve_for_x("r*x - x**3")

        assert len(roots) == 3
        assert set(roots) == {"0", "sqrt(r)", "-sqrt(r)"}

    def test_solve_for_x_saddle_node(self, provider):
        roots = provider.solve_for_x("r + x**2")

        assert len(roots) == 2
        assert all("sqrt(-r)" in root for root in roots)

    def test_solve_for_x_accepts_sympy(self, provider):
        x, r = sp.symbols('x r')
        assert len(provider.solve_for_x(r * x - x**2)) == 2

    def test_derivative(self, provider):
        x, r = sp.symbols('x r')
        derivative = sp.sympify(provider.derivative("r*x - x**3", 'x'))

        assert sp.simplify(derivative - (r - 3 * x**2)) == 0

    def test_derivative_unknown_variable(self, provider):
        with pytest.raises(ExpressionError):
            provider.derivative("r*x", 'y')

    def test_resolve_at_three_roots(self, provider):
        roots = sorted(provider.resolve_at("r*x - x**3", {'r': 4.0}))

        assert roots == pytest.approx([-2.0, 0.0, 2.0])

    def test_resolve_at_discards_complex_roots(self, provider):
        roots = provider.resolve_at("r*x - x**3", {'r': -1.0})

        assert roots == pytest.approx([0.0])

    def test_resolve_at_no_real_root(self, provider):
        assert provider.resolve_at("x**2 + r", {'r': 1.0}) == []

    def test_resolve_at_uses_cache(self, provider):
        provider.resolve_at("r*x - x**3", {'r': 1.0})
        provider.resolve_at("r*x - x**3", {'r': 1.0})

        stats = provider.get_stats()
        assert stats['solve_calls'] == 1
        assert stats['cache']['hits'] == 1

    def test_cache_key_is_normalized(self, provider):
        provider.resolve_at("r*x - x^3", {'r': 1.0})
        provider.resolve_at("r*x-x**3", {'r': 1.0})

        assert provider.get_stats()['solve_calls'] == 1

    def test_resolve_without_cache(self):
        provider = SymbolicProvider(enable_cache=False)
        provider.resolve_at("r*x - x**3", {'r': 1.0})
        provider.resolve_at("r*x - x**3", {'r': 1.0})

        assert provider.cache is None
        assert provider.get_stats()['solve_calls'] == 2

    def test_shared_cache(self):
        cache = ResolveCache()
        SymbolicProvider(cache=cache).resolve_at("r + x", {'r': 2.0})

        assert SymbolicProvider(cache=cache).resolve_at("r + x", {'r': 2.0}) == [-2.0]
        assert cache.get_stats()['hits'] == 1

    def test_resolve_batch(self, provider):
        results = provider.resolve_batch("r + x**2", [-4.0, 0.0, 1.0])

        assert len(results) == 3
        assert sorted(results[0]) == pytest.approx([-2.0, 2.0])
        assert results[1] == pytest.approx([0.0])
        assert results[2] == []

    def test_solver_timeout(self):
        provider = SymbolicProvider(timeout=0.05)

        with pytest.raises(SymbolicTimeoutError):
            provider._solve_with_timeout(time.sleep, 1.0)

    def test_resolve_timeout_gives_no_roots(self, monkeypatch):
        import phaseline.symbolic_provider as module

        def slow_solve(*args):
            time.sleep(1.0)
            return []

        provider = SymbolicProvider(timeout=0.05)
        monkeypatch.setattr(module, 'solve', slow_solve)

        assert provider.resolve_at("r*x - x**3", {'r': 1.0}) == []
        assert len(provider.cache) == 0

    def test_resolve_failure_gives_no_roots(self, monkeypatch):
        import phaseline.symbolic_provider as module

        def failing_solve(*args):
            raise NotImplementedError("no algorithm")

        monkeypatch.setattr(module, 'solve', failing_solve)

        assert SymbolicProvider().resolve_batch("r*x - x**3", [1.0, 2.0]) == [[], []]

    def test_time_is_set_to_zero(self, provider):
        assert provider.resolve_at("x - t - r", {'r': 1.5}) == pytest.approx([1.5])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
