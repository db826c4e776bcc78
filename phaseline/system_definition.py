"""
System Definition and Validation
Parses ẋ = f(x, r) once and derives everything the numeric core consumes:
compiled f, compiled root branches and the compiled derivative df/dx.
"""

from typing import List, Optional, Set
from dataclasses import dataclass, field
from enum import Enum, auto
import logging

import sympy as sp
from sympy import Expr, simplify

from .exceptions import ExpressionError
from .expression import CompiledExpression, parse_expression, VARIABLE_NAMES
from .symbolic_provider import SymbolicProvider

logger = logging.getLogger(__name__)


class SystemProperty(Enum):
    """Properties that a 1D system may possess."""
    POLYNOMIAL = auto()
    AUTONOMOUS = auto()
    Z2_SYMMETRIC = auto()


@dataclass
class ValidationResult:
    """Result of system validation."""
    is_valid: bool
    message: str
    warnings: List[str] = field(default_factory=list)


class SystemDefinition:
    """
    Defines a scalar system ẋ = f(x, t, r) for bifurcation analysis.

    The expression is parsed once; root expressions and the derivative come
    from the symbolic provider and are compiled for numeric evaluation.

    Attributes:
        expression: Normalized expression string (SymPy printing)
        expr: SymPy expression of f
        compiled: Compiled f
        root_expressions: Closed-form roots x = g_k(r), as strings
        compiled_roots: Compiled root branches
        derivative_string: df/dx as a string
        compiled_derivative: Compiled df/dx
        properties: Detected system properties
    """

    def __init__(
        self,
        expression: str,
        provider: Optional[SymbolicProvider] = None,
        heading: Optional[str] = None,
        auto_validate: bool = True
    ):
        """
        Initialize a system definition.

        Args:
            expression: Right-hand side f, e.g. "r*x - x**3"
            provider: Symbolic provider (a fresh one by default)
            heading: Optional display title
            auto_validate: Raise ExpressionError if validation fails

        Raises:
            ExpressionError: if the expression is malformed or invalid
        """
        self.provider = provider if provider is not None else SymbolicProvider()
        self.symbols = self.provider.symbols
        self.heading = heading

        self.expr: Expr = parse_expression(expression, self.symbols)
        self.expression = str(self.expr)
        self.properties: Set[SystemProperty] = set()
        self._validation_result: Optional[ValidationResult] = None

        if auto_validate:
            result = self.validate()
            if not result.is_valid:
                raise ExpressionError(result.message)
            for warning in result.warnings:
                logger.warning(warning)

        self.compiled = CompiledExpression(self.expr, self.symbols)

        self.root_expressions: List[str] = self.provider.solve_for_x(self.expr)
        self.compiled_roots = [CompiledExpression(s, self.symbols) for s in self.root_expressions]

        self.derivative_string = self.provider.derivative(self.expr, 'x')
        self.compiled_derivative = CompiledExpression(self.derivative_string, self.symbols)

        self.detect_properties()
        logger.info(f"Parsed ẋ = {self.expression}: {self.num_roots} root branches")

    @property
    def num_roots(self) -> int:
        return len(self.root_expressions)

    def validate(self) -> ValidationResult:
        """
        Validate the expression.

        Checks:
        1. Only x, t and r appear as free symbols
        2. f depends on x

        Returns:
            ValidationResult with validation status and details
        """
        warnings = []
        names = {str(s) for s in self.expr.free_symbols}

        unknown = names - set(VARIABLE_NAMES)
        if unknown:
            self._validation_result = ValidationResult(
                is_valid=False,
                message=f"Unknown symbols {sorted(unknown)}. "
                        f"Use x (state), r (parameter) and optionally t (time)."
            )
            return self._validation_result

        if 'x' not in names:
            self._validation_result = ValidationResult(
                is_valid=False,
                message=f"f = {self.expr} does not depend on x; there are no equilibria to track."
            )
            return self._validation_result

        if 'r' not in names:
            warnings.append("f does not depend on r; every root branch is constant over the sweep.")
        if 't' in names:
            warnings.append("f depends on t; equilibria and stability are evaluated at t = 0.")

        self._validation_result = ValidationResult(
            is_valid=True,
            message="Expression is a valid scalar system.",
            warnings=warnings
        )
        return self._validation_result

    def detect_properties(self) -> Set[SystemProperty]:
        """
        Detect special properties of f.

        Detects:
        - Polynomial in x
        - Autonomous: no explicit t
        - Z2 symmetric: f(-x) = -f(x)

        Returns:
            Set of detected properties
        """
        x, t = self.symbols['x'], self.symbols['t']
        self.properties.clear()

        if self.expr.is_polynomial(x):
            self.properties.add(SystemProperty.POLYNOMIAL)

        if not self.expr.has(t):
            self.properties.add(SystemProperty.AUTONOMOUS)

        if simplify(self.expr.subs(x, -x) + self.expr) == 0:
            self.properties.add(SystemProperty.Z2_SYMMETRIC)

        return self.properties

    def to_latex(self) -> str:
        """LaTeX form of the equation, e.g. ``\\dot{x} = r x - x^{3}``."""
        return r"\dot{x} = " + sp.latex(self.expr)

    def get_hash_key(self) -> str:
        """Unique key of this definition, for caching."""
        return "|".join([self.expression] + self.root_expressions + [self.derivative_string])

    def __repr__(self) -> str:
        return (f"SystemDefinition(\n"
                f"  ẋ = {self.expression}\n"
                f"  roots = {self.root_expressions}\n"
                f"  df/dx = {self.derivative_string}\n"
                f"  properties = {[p.name for p in self.properties]}\n"
                f")")

    def __str__(self) -> str:
        return f"ẋ = {self.expression}"
