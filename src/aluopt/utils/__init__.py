"""
aluopt Utilities Package.

Common utilities for error handling and source locations.
"""

from aluopt.utils.errors import (
    AluError,
    DivideByZero,
    ExecutionError,
    InvalidInputCount,
    NegativeOrInvalidModulo,
    OptimizationError,
    ParserError,
    SourceLocation,
    SSAInvariantError,
    StaticModuloViolation,
)

__all__ = [
    "AluError",
    "ParserError",
    "SourceLocation",
    # Execution
    "ExecutionError",
    "InvalidInputCount",
    "DivideByZero",
    "NegativeOrInvalidModulo",
    # Optimization
    "OptimizationError",
    "StaticModuloViolation",
    "SSAInvariantError",
]
