"""
Convex program description and the solver interface.

The optimization-based allocators describe their problem as a
:class:`ConvexProgram` and hand it to any object implementing
:class:`ConvexSolver`. They never talk to a concrete optimization library, so
the solver can be swapped without touching the allocators.

All programs are minimizations of the form::

    minimize    objective(x)          (or linear_cost @ x)
    subject to  A_ub @ x <= b_ub
                A_eq @ x == b_eq
                lower <= x <= upper
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Protocol, runtime_checkable

import numpy as np
from attrs import define, field
from scipy import sparse

from fair_split.library.exceptions import AllocationError


class SolverStatus(Enum):
    """Outcome reported by a convex solver."""

    OPTIMAL = "optimal"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    NOT_CONVERGED = "not-converged"
    TIMED_OUT = "timed-out"


def _optional_array(value) -> np.ndarray | None:
    if value is None:
        return None
    return np.atleast_1d(np.asarray(value, dtype=float))


def _optional_matrix(value) -> np.ndarray | sparse.csr_array | None:
    """Keep sparse constraint matrices sparse, densify everything else."""
    if value is None:
        return None
    if sparse.issparse(value):
        return sparse.csr_array(value, dtype=float)
    return np.atleast_2d(np.asarray(value, dtype=float))


def dense(matrix: np.ndarray | sparse.csr_array) -> np.ndarray:
    """Return ``matrix`` as a dense array."""
    return matrix.toarray() if sparse.issparse(matrix) else matrix


@define
class ConvexProgram:
    """
    A convex minimization problem over ``n_variables`` real variables.

    Exactly one of ``objective`` (a smooth convex function, optionally with
    its ``gradient``) or ``linear_cost`` (a cost vector, making the program a
    linear program) must be given.

    Attributes
    ----------
    n_variables
        Number of decision variables
    bounds
        One ``(lower, upper)`` pair per variable; ``None`` means unbounded
    objective
        Convex objective ``f(x) -> float``
    gradient
        Gradient of ``objective``, ``g(x) -> ndarray``
    linear_cost
        Cost vector for a linear objective
    A_ub, b_ub
        Linear inequality constraints ``A_ub @ x <= b_ub``; ``A_ub`` may be
        a ``scipy.sparse`` matrix
    A_eq, b_eq
        Linear equality constraints ``A_eq @ x == b_eq``
    x0
        Starting point for iterative solvers
    name
        Label used in log and error messages
    """

    n_variables: int
    bounds: list[tuple[float | None, float | None]]
    objective: Callable[[np.ndarray], float] | None = None
    gradient: Callable[[np.ndarray], np.ndarray] | None = None
    linear_cost: np.ndarray | None = field(default=None, converter=_optional_array)
    A_ub: np.ndarray | sparse.csr_array | None = field(
        default=None, converter=_optional_matrix
    )
    b_ub: np.ndarray | None = field(default=None, converter=_optional_array)
    A_eq: np.ndarray | sparse.csr_array | None = field(
        default=None, converter=_optional_matrix
    )
    b_eq: np.ndarray | None = field(default=None, converter=_optional_array)
    x0: np.ndarray | None = field(default=None, converter=_optional_array)
    name: str = "program"

    def __attrs_post_init__(self):
        """Check that the program is well formed."""
        self.validate()

    @property
    def is_linear(self) -> bool:
        """Whether the objective is linear."""
        return self.linear_cost is not None

    def validate(self) -> None:
        """
        Validate the program's shapes.

        Raises
        ------
        AllocationError
            If the objective is missing or ambiguous, or if any bound,
            constraint or starting point has the wrong shape
        """
        if (self.objective is None) == (self.linear_cost is None):
            raise AllocationError(
                f"{self.name}: exactly one of objective or linear_cost is required"
            )
        if len(self.bounds) != self.n_variables:
            raise AllocationError(
                f"{self.name}: expected {self.n_variables} bounds, "
                f"got {len(self.bounds)}"
            )
        if self.linear_cost is not None and self.linear_cost.shape != (
            self.n_variables,
        ):
            raise AllocationError(
                f"{self.name}: linear_cost has shape {self.linear_cost.shape}, "
                f"expected ({self.n_variables},)"
            )
        if self.x0 is not None and self.x0.shape != (self.n_variables,):
            raise AllocationError(
                f"{self.name}: x0 has shape {self.x0.shape}, "
                f"expected ({self.n_variables},)"
            )

        for matrix_name, vector_name in (("A_ub", "b_ub"), ("A_eq", "b_eq")):
            matrix = getattr(self, matrix_name)
            vector = getattr(self, vector_name)
            if (matrix is None) != (vector is None):
                raise AllocationError(
                    f"{self.name}: {matrix_name} and {vector_name} "
                    "must be given together"
                )
            if matrix is None:
                continue
            if matrix.shape != (vector.shape[0], self.n_variables):
                raise AllocationError(
                    f"{self.name}: {matrix_name} has shape {matrix.shape}, "
                    f"expected ({vector.shape[0]}, {self.n_variables})"
                )

    def lower_bounds(self) -> np.ndarray:
        """Lower bounds as an array, ``-inf`` where unbounded."""
        return np.array(
            [-np.inf if lo is None else lo for lo, _ in self.bounds], dtype=float
        )

    def upper_bounds(self) -> np.ndarray:
        """Upper bounds as an array, ``inf`` where unbounded."""
        return np.array(
            [np.inf if hi is None else hi for _, hi in self.bounds], dtype=float
        )

    def max_violation(self, x: np.ndarray) -> float:
        """Largest violation of any bound or constraint at ``x``."""
        violations = [
            np.max(self.lower_bounds() - x, initial=0.0),
            np.max(x - self.upper_bounds(), initial=0.0),
        ]
        if self.A_ub is not None:
            violations.append(np.max(self.A_ub @ x - self.b_ub, initial=0.0))
        if self.A_eq is not None:
            violations.append(np.max(np.abs(self.A_eq @ x - self.b_eq), initial=0.0))
        return float(max(violations))


@define
class SolverResult:
    """
    Outcome of a solve.

    Attributes
    ----------
    status
        Reported solver status
    x
        Optimal point; ``None`` unless ``status`` is ``OPTIMAL``
    objective_value
        Objective at ``x``
    message
        Human-readable message from the underlying solver
    iterations
        Iterations used, when the solver reports them
    """

    status: SolverStatus
    x: np.ndarray | None = None
    objective_value: float | None = None
    message: str = ""
    iterations: int | None = None

    @property
    def success(self) -> bool:
        """Whether an optimal point was found."""
        return self.status is SolverStatus.OPTIMAL


@runtime_checkable
class ConvexSolver(Protocol):
    """Anything that can solve a :class:`ConvexProgram`."""

    def solve(self, program: ConvexProgram) -> SolverResult:
        """Solve ``program`` and report the outcome; never raise on failure."""
        ...
