"""
Exception hierarchy for phaseline.

Numerical outcomes (non-real roots, zero derivatives, diverging trajectories)
are reported as data. Exceptions are raised only for malformed input.
"""


class PhaselineError(Exception):
    """Base class for all phaseline errors."""


class ExpressionError(PhaselineError, ValueError):
    """Raised when an expression cannot be parsed, compiled or bound."""


class ConfigurationError(PhaselineError, ValueError):
    """Raised for inconsistent ranges or integration settings."""


class SymbolicTimeoutError(PhaselineError):
    """Raised when the symbolic solver does not finish in time."""
