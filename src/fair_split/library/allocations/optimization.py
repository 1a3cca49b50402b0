"""
Allocations defined as convex programs.

Each approach maps a fairness axiom onto an optimization problem over
``x[agent] >= 0`` and delegates the solve to a
:class:`~fair_split.library.solvers.ConvexSolver`:

- ``proportional``: maximize ``sum log x`` subject to ``sum x <= resource``
  and ``x <= capacity``. This is the unique allocation where, for any
  feasible alternative ``y``, ``sum (y - x) / x <= 0``.
- ``gini``: minimize the total pairwise absolute difference
  ``sum_{i<j} |x_i - x_j|`` (linearized with auxiliary ``y_ij``) subject to
  ``sum x = resource`` and ``x <= capacity``.
- ``jain``: minimize ``sum x^2`` subject to ``sum x = resource`` and
  ``x <= capacity``. At a fixed total this maximizes Jain's index.

Programs are stated in scaled units ``x / scale`` with
``scale = max(resource, max capacity)`` so that solver tolerances mean the same
thing at every magnitude. Agents with zero capacity are fixed at zero and left
out of the program, which keeps ``log x`` finite in the proportional case.
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd
from scipy import sparse

from fair_split.library.error_messages import format_error
from fair_split.library.exceptions import OptimizationFailureError
from fair_split.library.solvers import (
    ConvexProgram,
    ConvexSolver,
    ScipyConvexSolver,
    SolverStatus,
)
from fair_split.library.utils.series import (
    AllocationSeries,
    CapacityLike,
    new_allocation,
)
from fair_split.library.validation.inputs import validate_capacity, validate_resource

logger = logging.getLogger(__name__)

# Lower bound on scaled shares in the proportional program, relative to the resource
LOG_FLOOR = 1e-12


def _problem_scale(resource: float, capacity: pd.Series) -> float:
    return max(resource, float(capacity.max()))


def _start_point(resource: float, upper: np.ndarray) -> np.ndarray:
    """Capacity-proportional point using the whole resource where possible."""
    return upper * min(1.0, resource / upper.sum())


def build_proportional_program(resource: float, capacity: pd.Series) -> ConvexProgram:
    """
    Build the log-utility program for proportional fairness.

    Parameters
    ----------
    resource
        Scaled resource
    capacity
        Scaled capacities, all strictly positive

    Returns
    -------
    ConvexProgram
        minimize ``-mean log(x / capacity)`` s.t. ``sum x <= resource``,
        ``floor <= x <= capacity``

    Notes
    -----
    The objective differs from ``-sum log x`` by a constant and the factor
    ``1 / n``, so the optimum is the same, but its value and gradient stay of
    order one whatever the number of agents. The positive lower bound keeps
    ``log x`` finite; SLSQP only evaluates the objective inside the bounds.
    """
    upper = capacity.to_numpy(dtype=float)
    floor = LOG_FLOOR * resource
    lower = np.minimum(floor, upper)
    n = upper.size

    def objective(x: np.ndarray) -> float:
        return -float(np.mean(np.log(x / upper)))

    def gradient(x: np.ndarray) -> np.ndarray:
        return -1.0 / (n * x)

    return ConvexProgram(
        n_variables=n,
        bounds=list(zip(lower, upper)),
        objective=objective,
        gradient=gradient,
        A_ub=np.ones((1, n)),
        b_ub=[resource],
        x0=np.clip(_start_point(resource, upper), lower, upper),
        name="proportional_allocation",
    )


def build_gini_program(resource: float, capacity: pd.Series) -> ConvexProgram:
    """
    Build the linear program minimizing total pairwise absolute difference.

    Variables are ``x`` (``n`` shares) followed by ``y`` (one gap per
    unordered pair ``i < j``, in ``numpy.triu_indices`` order). For each
    pair::

        x_i - x_j - y_ij <= 0
        x_j - x_i - y_ij <= 0

    Summing over unordered pairs halves ``sum_ij |x_i - x_j|`` and leaves the
    optimum unchanged. The constraint matrix is sparse with three entries
    per row.

    Parameters
    ----------
    resource
        Scaled resource
    capacity
        Scaled capacities

    Returns
    -------
    ConvexProgram
        minimize ``sum y`` s.t. the pair constraints, ``sum x = resource``,
        ``0 <= x <= capacity``, ``y >= 0``
    """
    upper = capacity.to_numpy(dtype=float)
    n = upper.size
    first, second = np.triu_indices(n, k=1)
    n_pairs = first.size

    A_ub = b_ub = None
    if n_pairs:
        pair = np.arange(n_pairs)
        gap = n + pair
        ones = np.ones(n_pairs)
        rows = np.concatenate([2 * pair] * 3 + [2 * pair + 1] * 3)
        cols = np.concatenate([first, second, gap, second, first, gap])
        data = np.concatenate([ones, -ones, -ones, ones, -ones, -ones])
        A_ub = sparse.csr_array(
            (data, (rows, cols)), shape=(2 * n_pairs, n + n_pairs)
        )
        b_ub = np.zeros(2 * n_pairs)

    A_eq = np.concatenate([np.ones(n), np.zeros(n_pairs)])[np.newaxis, :]

    return ConvexProgram(
        n_variables=n + n_pairs,
        bounds=[(0.0, hi) for hi in upper] + [(0.0, None)] * n_pairs,
        linear_cost=np.concatenate([np.zeros(n), np.ones(n_pairs)]),
        A_ub=A_ub,
        b_ub=b_ub,
        A_eq=A_eq,
        b_eq=[resource],
        name="gini_allocation",
    )


def build_jain_program(resource: float, capacity: pd.Series) -> ConvexProgram:
    """
    Build the sum-of-squares program maximizing Jain's index.

    Parameters
    ----------
    resource
        Scaled resource
    capacity
        Scaled capacities

    Returns
    -------
    ConvexProgram
        minimize ``sum x^2`` s.t. ``sum x = resource``, ``0 <= x <= capacity``
    """
    upper = capacity.to_numpy(dtype=float)
    n = upper.size

    return ConvexProgram(
        n_variables=n,
        bounds=[(0.0, hi) for hi in upper],
        objective=lambda x: float(np.dot(x, x)),
        gradient=lambda x: 2.0 * x,
        A_eq=np.ones((1, n)),
        b_eq=[resource],
        x0=_start_point(resource, upper),
        name="jain_allocation",
    )


def _raise_failure(
    approach: str, status: str, reason: str, resource: float, capacity: pd.Series
) -> None:
    raise OptimizationFailureError(
        format_error(
            "solver_failure",
            approach=approach,
            status=status,
            reason=reason,
            resource=resource,
            total_capacity=float(capacity.sum()),
        ),
        status=status,
        reason=reason,
    )


def _solve(
    builder,
    approach: str,
    resource: float,
    capacity: pd.Series,
    solver: ConvexSolver | None,
    full_use: bool,
) -> AllocationSeries:
    """
    Shared driver: scale, build, solve, unscale.

    ``full_use`` marks programs that must hand out the whole resource; for
    those an empty set of positive capacities is infeasible outright.
    """
    alloc = new_allocation(capacity.index)
    active = capacity[capacity > 0]

    if resource == 0:
        return alloc
    if active.empty:
        if full_use:
            _raise_failure(
                approach,
                SolverStatus.INFEASIBLE.value,
                "no agent has positive capacity",
                resource,
                capacity,
            )
        return alloc

    scale = _problem_scale(resource, active)
    program = builder(resource / scale, active / scale)

    solver = solver if solver is not None else ScipyConvexSolver()
    result = solver.solve(program)
    if not result.success:
        _raise_failure(approach, result.status.value, result.message, resource, capacity)

    logger.debug("%s solved in %s iterations", approach, result.iterations)

    shares = np.clip(result.x[: active.size] * scale, 0.0, active.to_numpy())
    alloc.loc[active.index] = shares
    return alloc


def proportional_allocation(
    resource: float,
    capacity: CapacityLike,
    solver: ConvexSolver | None = None,
) -> AllocationSeries:
    """
    Compute the proportionally fair allocation.

    Parameters
    ----------
    resource
        Total quantity to distribute
    capacity
        Maximum share per agent
    solver
        Convex solver to use (default: :class:`ScipyConvexSolver`)

    Returns
    -------
    AllocationSeries
        Amount per agent. Zero-capacity agents receive zero; with a zero
        resource every agent receives zero.

    Raises
    ------
    OptimizationFailureError
        If the solver does not report an optimum
    """
    value = validate_resource(resource)
    cap = validate_capacity(capacity)
    return _solve(
        build_proportional_program,
        "proportional_allocation",
        value,
        cap,
        solver,
        full_use=False,
    )


def gini_allocation(
    resource: float,
    capacity: CapacityLike,
    solver: ConvexSolver | None = None,
) -> AllocationSeries:
    """
    Compute the allocation with the smallest Gini dispersion.

    The whole resource must be allocated, so the program is infeasible when
    ``resource > sum(capacity)``.

    Parameters
    ----------
    resource
        Total quantity to distribute
    capacity
        Maximum share per agent
    solver
        Convex solver to use (default: :class:`ScipyConvexSolver`)

    Returns
    -------
    AllocationSeries
        Amount per agent, summing to ``resource``

    Raises
    ------
    OptimizationFailureError
        If the program is infeasible or the solver does not report an optimum
    """
    value = validate_resource(resource)
    cap = validate_capacity(capacity)
    return _solve(build_gini_program, "gini_allocation", value, cap, solver, True)


def jain_allocation(
    resource: float,
    capacity: CapacityLike,
    solver: ConvexSolver | None = None,
) -> AllocationSeries:
    """
    Compute the allocation with the largest Jain's index.

    The whole resource must be allocated, so the program is infeasible when
    ``resource > sum(capacity)``.

    Parameters
    ----------
    resource
        Total quantity to distribute
    capacity
        Maximum share per agent
    solver
        Convex solver to use (default: :class:`ScipyConvexSolver`)

    Returns
    -------
    AllocationSeries
        Amount per agent, summing to ``resource``

    Raises
    ------
    OptimizationFailureError
        If the program is infeasible or the solver does not report an optimum
    """
    value = validate_resource(resource)
    cap = validate_capacity(capacity)
    return _solve(build_jain_program, "jain_allocation", value, cap, solver, True)
