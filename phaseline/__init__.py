"""
phaseline v1.0
Equilibrium continuation, stability and trajectories of ẋ = f(x, r)
"""

import logging

from .exceptions import PhaselineError, ExpressionError, ConfigurationError, SymbolicTimeoutError
from .expression import CompiledExpression, NON_REAL, compile_expression, evaluate
from .config import AnalysisConfig, ParameterRange, IntegrationSettings
from .cache_manager import ResolveCache
from .symbolic_provider import SymbolicProvider
from .system_definition import SystemDefinition, SystemProperty, ValidationResult
from .session import AnalysisSession, CurrentState, create_session
from .analysis import (
    SweepGrid, ParameterIndexMapper,
    RootContinuationEngine, RootTracks,
    StabilityClassifier, StabilityTracks, Stability,
    PhaseVelocityField, VelocityField,
    RK4Integrator, Trajectory,
)

__version__ = "1.0.0"

__all__ = [
    "PhaselineError",
    "ExpressionError",
    "ConfigurationError",
    "SymbolicTimeoutError",
    "CompiledExpression",
    "NON_REAL",
    "compile_expression",
    "evaluate",
    "AnalysisConfig",
    "ParameterRange",
    "IntegrationSettings",
    "ResolveCache",
    "SymbolicProvider",
    "SystemDefinition",
    "SystemProperty",
    "ValidationResult",
    "AnalysisSession",
    "CurrentState",
    "create_session",
    "SweepGrid",
    "ParameterIndexMapper",
    "RootContinuationEngine",
    "RootTracks",
    "StabilityClassifier",
    "StabilityTracks",
    "Stability",
    "PhaseVelocityField",
    "VelocityField",
    "RK4Integrator",
    "Trajectory",
    "enable_debug_logging",
]


def enable_debug_logging(level: str = "DEBUG", log_file: str = None):
    """
    Enable debug logging for phaseline computations.

    Args:
        level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR')
        log_file: Optional file path to write logs (None = console only)

    Example:
        >>> import phaseline
        >>> phaseline.enable_debug_logging()  # Console output
        >>> phaseline.enable_debug_logging(log_file="phaseline.log")  # File output
    """
    log_level = getattr(logging, level.upper(), logging.DEBUG)

    logger = logging.getLogger("phaseline")
    logger.setLevel(log_level)

    if not logger.handlers:
        formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%H:%M:%S'
        )

        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    logger.info(f"Debug logging enabled (level={level})")
    return logger
