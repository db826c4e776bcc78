"""
Numeric Evaluator Adapter
Compiles a SymPy expression tree once and evaluates it at explicit bindings.
"""

from typing import Dict, Mapping, Tuple, Union
import logging

import numpy as np
import sympy as sp
from sympy import Expr, Symbol, lambdify

from .exceptions import ExpressionError

logger = logging.getLogger(__name__)

#: Variables an expression may depend on, in lambdify argument order.
VARIABLE_NAMES: Tuple[str, ...] = ('x', 't', 'r')

IMAG_TOLERANCE = 1e-9
IMAG_ABS_TOLERANCE = 1e-12


class NonReal:
    """Sentinel returned when an evaluation has no real value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NON_REAL"

    def __bool__(self) -> bool:
        return False


NON_REAL = NonReal()


def default_symbols() -> Dict[str, Symbol]:
    """Symbols used when parsing expression strings."""
    return {name: sp.Symbol(name) for name in VARIABLE_NAMES}


def parse_expression(text: str, local_dict: Mapping[str, Symbol] = None) -> Expr:
    """
    Parse a string such as ``"r*x - x**3"`` into a SymPy expression.

    ``^`` is accepted as a power operator.

    Raises:
        ExpressionError: if the string is empty or not a valid expression
    """
    if text is None or not str(text).strip():
        raise ExpressionError("Empty expression")

    local_dict = dict(local_dict or default_symbols())
    try:
        expr = sp.sympify(str(text).replace('^', '**'), locals=local_dict)
    except (sp.SympifyError, SyntaxError, TypeError) as e:
        raise ExpressionError(f"Could not parse expression '{text}': {e}") from e

    if not isinstance(expr, Expr):
        raise ExpressionError(f"'{text}' is not an arithmetic expression")
    return expr


def _to_real(value: complex) -> float:
    """Collapse a complex number to a finite real value, or NaN when it has none."""
    if not (np.isfinite(value.real) and np.isfinite(value.imag)):
        return np.nan
    tol = max(IMAG_ABS_TOLERANCE, IMAG_TOLERANCE * abs(value))
    if abs(value.imag) > tol:
        return np.nan
    return float(value.real)


class CompiledExpression:
    """
    An expression of (a subset of) ``x``, ``t`` and ``r`` compiled to a NumPy
    closure.

    The closure always takes the three variables positionally in
    ``VARIABLE_NAMES`` order; variables the expression does not use are
    simply ignored, so callers pass bindings by name and never rely on
    free-variable capture.

    Attributes:
        expr: The underlying SymPy expression
        free_variables: Names of the variables the expression depends on
    """

    def __init__(self, expr: Union[Expr, str], local_dict: Mapping[str, Symbol] = None):
        symbols_map = dict(local_dict or default_symbols())
        if isinstance(expr, str):
            expr = parse_expression(expr, symbols_map)

        self.expr = sp.sympify(expr)
        self._symbols = [symbols_map[name] for name in VARIABLE_NAMES]

        by_name = {str(s): s for s in self._symbols}
        unknown = {str(s) for s in self.expr.free_symbols} - set(by_name)
        if unknown:
            raise ExpressionError(
                f"Expression '{self.expr}' uses unknown symbols: {sorted(unknown)}. "
                f"Allowed variables are {list(VARIABLE_NAMES)}."
            )

        # Match by name so expressions built with plain Symbol('x') still bind.
        self.expr = self.expr.subs(
            {s: by_name[str(s)] for s in self.expr.free_symbols}
        )
        self.free_variables = frozenset(str(s) for s in self.expr.free_symbols)

        self._func = lambdify(self._symbols, self.expr, modules=['numpy'])
        logger.debug(f"Compiled expression {self.expr} (vars={sorted(self.free_variables)})")

    @property
    def is_constant(self) -> bool:
        """True when the expression depends on none of x, t, r."""
        return not self.free_variables

    def _arguments(self, bindings: Mapping[str, object], dtype) -> list:
        missing = self.free_variables - set(bindings)
        if missing:
            raise ExpressionError(
                f"Missing bindings {sorted(missing)} for expression '{self.expr}'"
            )
        return [
            np.asarray(bindings.get(name, 0.0), dtype=dtype)
            for name in VARIABLE_NAMES
        ]

    def evaluate(self, bindings: Mapping[str, float]) -> Union[float, NonReal]:
        """
        Evaluate at scalar bindings.

        Returns:
            A float, or ``NON_REAL`` when the value is complex or undefined
        """
        args = self._arguments(bindings, np.complex128)
        with np.errstate(all='ignore'):
            try:
                value = complex(self._func(*args))
            except (ZeroDivisionError, OverflowError, ValueError, TypeError):
                return NON_REAL

        real = _to_real(value)
        if np.isnan(real):
            return NON_REAL
        return real

    def evaluate_array(self, bindings: Mapping[str, object]) -> np.ndarray:
        """
        Evaluate over array bindings (broadcast against each other).

        Non-real and non-finite entries come back as ``nan``. A constant
        expression is broadcast to the shape of the bindings.
        """
        args = self._arguments(bindings, np.complex128)
        shape = np.broadcast_shapes(*(a.shape for a in args))
        with np.errstate(all='ignore'):
            values = np.asarray(self._func(*args), dtype=np.complex128)
            values = np.broadcast_to(values, shape)
            magnitude = np.abs(values)

        tol = np.maximum(IMAG_ABS_TOLERANCE, IMAG_TOLERANCE * magnitude)
        real = np.array(values.real, dtype=float)
        non_real = ~np.isfinite(values) | (np.abs(values.imag) > tol)
        real[non_real] = np.nan
        return real

    def evaluate_real(self, x: float, t: float, r: float) -> float:
        """
        Fast real-valued evaluation used inside integration loops.

        Computes in float64 without error checking: overflow gives ``inf``
        and invalid operations give ``nan``.
        """
        with np.errstate(all='ignore'):
            return np.float64(self._func(np.float64(x), np.float64(t), np.float64(r)))

    def __call__(self, bindings: Mapping[str, float]) -> Union[float, NonReal]:
        return self.evaluate(bindings)

    def __str__(self) -> str:
        return str(self.expr)

    def __repr__(self) -> str:
        return f"CompiledExpression({self.expr})"


def compile_expression(expr: Union[Expr, str], local_dict: Mapping[str, Symbol] = None) -> CompiledExpression:
    """Convenience wrapper around :class:`CompiledExpression`."""
    return CompiledExpression(expr, local_dict)


def evaluate(expr: CompiledExpression, bindings: Mapping[str, float]) -> Union[float, NonReal]:
    """``evaluate(expr, bindings) -> float | NON_REAL``."""
    return expr.evaluate(bindings)
