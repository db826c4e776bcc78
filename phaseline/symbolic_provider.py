"""
Symbolic Provider
Closed-form root solving, differentiation and point re-solving with SymPy.
"""

from typing import Dict, List, Optional, Sequence, Union
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
import cmath
import logging
import time

import sympy as sp
from sympy import Expr, Symbol, solve, diff

from .cache_manager import ResolveCache
from .exceptions import ExpressionError, SymbolicTimeoutError
from .expression import default_symbols, parse_expression, IMAG_TOLERANCE

logger = logging.getLogger(__name__)


class SymbolicProvider:
    """
    SymPy-backed symbolic collaborator for the continuation engine.

    Provides:
        solve_for_x(expr)            -> root expressions in x, as strings
        derivative(expr, var)        -> derivative, as a string
        resolve_at(expr, {r: value}) -> real roots at one parameter value
        resolve_batch(expr, values)  -> resolve_at for many values at once

    Point re-solves are cached in a :class:`ResolveCache`.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        cache: Optional[ResolveCache] = None,
        enable_cache: bool = True
    ):
        """
        Initialize the provider.

        Args:
            timeout: Maximum time for the parametric solve (seconds)
            cache: Cache instance to share between providers
            enable_cache: Whether to cache point re-solves
        """
        self.timeout = timeout
        self.symbols: Dict[str, Symbol] = default_symbols()
        if cache is None and enable_cache:
            cache = ResolveCache()
        self.cache = cache

        self._solve_calls = 0

    def _parse(self, expression: Union[str, Expr]) -> Expr:
        if isinstance(expression, Expr):
            return expression
        return parse_expression(expression, self.symbols)

    def _solve_with_timeout(self, solve_func, *args):
        """Execute a solver function with timeout."""
        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(solve_func, *args)
        try:
            return future.result(timeout=self.timeout)
        except FuturesTimeoutError:
            logger.warning(f"Solver timed out after {self.timeout}s")
            raise SymbolicTimeoutError(
                f"Symbolic solve did not finish within {self.timeout}s"
            )
        finally:
            executor.shutdown(wait=False)

    def solve_for_x(self, expression: Union[str, Expr]) -> List[str]:
        """
        Solve f(x, r) = 0 for x in closed form.

        Args:
            expression: f as a string or SymPy expression

        Returns:
            Root expressions (functions of r), duplicates removed

        Raises:
            ExpressionError: if SymPy cannot solve the equation
            SymbolicTimeoutError: if solving exceeds the timeout
        """
        expr = self._parse(expression)
        x = self.symbols['x']
        start_time = time.time()

        try:
            solutions = self._solve_with_timeout(solve, expr, x)
        except NotImplementedError as e:
            raise ExpressionError(
                f"No closed-form solution of {expr} = 0 for x: {e}"
            ) from e

        roots = []
        seen = set()
        for sol in solutions:
            key = str(sol)
            if key in seen:
                continue
            seen.add(key)
            roots.append(key)

        elapsed = time.time() - start_time
        logger.info(f"Solved {expr} = 0 for x in {elapsed:.2f}s, found {len(roots)} roots")
        return roots

    def derivative(self, expression: Union[str, Expr], var: str = 'x') -> str:
        """Return d(expression)/d(var) as a string."""
        expr = self._parse(expression)
        if var not in self.symbols:
            raise ExpressionError(f"Unknown variable '{var}'")
        return str(diff(expr, self.symbols[var]))

    def resolve_at(
        self,
        expression: Union[str, Expr],
        param_values: Dict[str, float]
    ) -> List[float]:
        """
        Re-solve f = 0 for x with parameters substituted.

        Only finite real solutions are returned, in solver order. A solver
        failure or timeout yields an empty list, which is not cached.

        Args:
            expression: f as a string or SymPy expression
            param_values: e.g. {'r': 0.5}; ``t`` defaults to 0

        Returns:
            Real roots at the given parameter values
        """
        expr = self._parse(expression)
        expr_key = str(expr)
        if self.cache is not None:
            cached = self.cache.get(expr_key, param_values)
            if cached is not None:
                return cached

        subs = {self.symbols['t']: 0}
        subs.update({self.symbols[name]: sp.Float(value) for name, value in param_values.items()})
        expr_sub = expr.subs(subs)

        self._solve_calls += 1
        try:
            raw = self._solve_with_timeout(solve, expr_sub, self.symbols['x'])
        except SymbolicTimeoutError:
            logger.warning(f"Re-solve of {expr} at {param_values} timed out, no roots used")
            return []
        except Exception as e:
            logger.warning(f"Re-solve of {expr} at {param_values} failed: {e}")
            return []

        roots = []
        for sol in raw:
            try:
                value = complex(sp.N(sol))
            except TypeError:
                logger.debug(f"Discarding non-numeric solution {sol}")
                continue
            if not cmath.isfinite(value):
                continue
            if abs(value.imag) <= max(1e-12, IMAG_TOLERANCE * abs(value)):
                roots.append(float(value.real))

        logger.debug(f"Re-solved at {param_values}: {roots}")

        if self.cache is not None:
            self.cache.save(expr_key, param_values, roots, metadata={'raw': [str(s) for s in raw]})
        return roots

    def resolve_batch(
        self,
        expression: Union[str, Expr],
        r_values: Sequence[float]
    ) -> List[List[float]]:
        """
        Re-solve at several values of r in one call.

        Returns:
            One list of real roots per entry of ``r_values``
        """
        expr = self._parse(expression)
        start_time = time.time()
        results = [self.resolve_at(expr, {'r': float(r)}) for r in r_values]
        if results:
            logger.info(
                f"Batch re-solve of {len(results)} points in {time.time() - start_time:.2f}s"
            )
        return results

    def get_stats(self) -> Dict:
        """Solver and cache statistics."""
        stats = {'solve_calls': self._solve_calls, 'timeout': self.timeout}
        if self.cache is not None:
            stats['cache'] = self.cache.get_stats()
        return stats
