"""
Convex solver interface and its scipy implementation.

"""

from .base import ConvexProgram, ConvexSolver, SolverResult, SolverStatus
from .scipy_solver import ScipyConvexSolver

__all__ = [
    "ConvexProgram",
    "ConvexSolver",
    "ScipyConvexSolver",
    "SolverResult",
    "SolverStatus",
]
