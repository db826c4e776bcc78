"""
Tests for the Numeric Evaluator Adapter
"""

import pytest
import numpy as np
import sympy as sp

import sys
sys.path.insert(0, '..')

from phaseline.exceptions import ExpressionError
from phaseline.expression import (
    CompiledExpression, NonReal, NON_REAL,
    compile_expression, evaluate, parse_expression
)


class TestParseExpression:
    """Tests for string parsing."""

    def test_caret_is_power(self):
        x = sp.Symbol('x')
        assert parse_expression("x^3") == x**3

    def test_empty_string(self):
        with pytest.raises(ExpressionError):
            parse_expression("   ")

    def test_invalid_syntax(self):
        with pytest.raises(ExpressionError):
            parse_expression("r*x -* (")


class TestCompiledExpression:
    """Tests for CompiledExpression."""

    @pytest.fixture
    def cubic(self):
        return compile_expression("r*x - x**3")

    def test_free_variables(self, cubic):
        assert cubic.free_variables == frozenset({'x', 'r'})
        assert not cubic.is_constant

    def test_scalar_evaluation(self, cubic):
        assert cubic.evaluate({'x': 2.0, 'r': 1.0}) == pytest.approx(-6.0)

    def test_module_level_evaluate(self, cubic):
        assert evaluate(cubic, {'x': 1.0, 'r': 1.0}) == pytest.approx(0.0)

    def test_extra_bindings_ignored(self, cubic):
        assert cubic({'x': 1.0, 'r': 2.0, 't': 99.0}) == pytest.approx(1.0)

    def test_non_real_square_root(self):
        branch = compile_expression("sqrt(r)")

        assert branch.evaluate({'r': -1.0}) is NON_REAL
        assert branch.evaluate({'r': 4.0}) == pytest.approx(2.0)

    def test_array_evaluation_marks_non_real(self):
        branch = compile_expression("-sqrt(r)")
        values = branch.evaluate_array({'r': np.array([-1.0, 0.0, 4.0])})

        assert np.isnan(values[0])
        assert values[1] == 0.0
        assert values[2] == pytest.approx(-2.0)

    def test_infinite_value_is_not_real(self):
        branch = compile_expression("log(r)")

        assert branch.evaluate({'r': 0.0}) is NON_REAL
        values = branch.evaluate_array({'r': np.array([0.0, 1.0])})
        assert np.isnan(values[0])
        assert values[1] == 0.0

    def test_constant_broadcast(self):
        constant = compile_expression("2")
        values = constant.evaluate_array({'r': np.zeros(5)})

        assert constant.is_constant
        assert values.shape == (5,)
        assert np.all(values == 2.0)

    def test_complex_intermediate_with_real_result(self):
        expr = compile_expression("(r + I) * (r - I)")
        assert expr.evaluate({'r': 2.0}) == pytest.approx(5.0)

    def test_missing_binding(self, cubic):
        with pytest.raises(ExpressionError):
            cubic.evaluate({'x': 1.0})

    def test_unknown_symbol(self):
        with pytest.raises(ExpressionError):
            compile_expression("a*x")

    def test_sympy_input(self):
        x, r = sp.symbols('x r')
        expr = compile_expression(r * x - x**2)
        assert expr.evaluate({'x': 3.0, 'r': 1.0}) == pytest.approx(-6.0)

    def test_real_fast_path_overflows_quietly(self, cubic):
        value = cubic.evaluate_real(1e200, 0.0, 1.0)
        assert np.isinf(value)

    def test_real_fast_path_invalid_is_nan(self):
        branch = compile_expression("sqrt(x)")
        assert np.isnan(branch.evaluate_real(-1.0, 0.0, 0.0))

    def test_repr(self, cubic):
        assert "CompiledExpression" in repr(cubic)
        assert "x" in str(cubic)


class TestNonReal:
    """Tests for the NonReal sentinel."""

    def test_singleton(self):
        assert NonReal() is NON_REAL

    def test_falsy(self):
        assert not NON_REAL
        assert repr(NON_REAL) == "NON_REAL"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
