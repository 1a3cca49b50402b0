"""
Convex solver backed by :mod:`scipy.optimize`.

Linear programs are handed to the HiGHS solver through
:func:`scipy.optimize.linprog`. Smooth nonlinear programs are first checked
for feasibility with a zero-cost HiGHS solve (phase 1), then solved by
:func:`scipy.optimize.minimize` with SLSQP and analytic gradients.

SLSQP status codes used below:

- 0: optimization terminated successfully
- 4: inequality constraints incompatible
- 8: positive directional derivative in the line search, i.e. SLSQP cannot
  make further progress; the point is often optimal to working precision
- 9: iteration limit reached
"""

from __future__ import annotations

import logging
import time

import numpy as np
from attrs import define
from scipy.optimize import (
    OptimizeResult,
    approx_fprime,
    linprog,
    minimize,
    nnls,
)

from fair_split.library.solvers.base import (
    ConvexProgram,
    SolverResult,
    SolverStatus,
    dense,
)

logger = logging.getLogger(__name__)

_LINPROG_STATUS = {
    0: SolverStatus.OPTIMAL,
    1: SolverStatus.NOT_CONVERGED,
    2: SolverStatus.INFEASIBLE,
    3: SolverStatus.UNBOUNDED,
    4: SolverStatus.NOT_CONVERGED,
}

_SLSQP_INCOMPATIBLE_CONSTRAINTS = 4
_SLSQP_LINESEARCH_STALLED = 8


class _SolveTimeout(Exception):
    """Raised from the SLSQP callback once the time budget is spent."""


@define
class ScipyConvexSolver:
    """
    Solve :class:`ConvexProgram` instances with scipy.

    Attributes
    ----------
    timeout
        Wall-clock budget in seconds for one solve; ``None`` for no limit.
        Running out is reported as ``SolverStatus.TIMED_OUT``.
    max_iterations
        Iteration limit for SLSQP
    tolerance
        Convergence tolerance (SLSQP ``ftol``)
    feasibility_tolerance
        Largest constraint violation accepted in a reported optimum
    lp_max_iterations
        Iteration limit for HiGHS; ``None`` keeps the HiGHS default, which is
        sized for simplex iterations rather than SLSQP major iterations
    kkt_tolerance
        When SLSQP stalls in its line search, the point is accepted if the
        KKT conditions hold to this relative tolerance. Also the distance
        within which a bound or inequality counts as active.
    restarts
        SLSQP restarts from a stalled point that fails the KKT check
    """

    timeout: float | None = None
    max_iterations: int = 1000
    tolerance: float = 1e-10
    feasibility_tolerance: float = 1e-7
    lp_max_iterations: int | None = None
    kkt_tolerance: float = 1e-5
    restarts: int = 2

    def solve(self, program: ConvexProgram) -> SolverResult:
        """
        Solve ``program``.

        Parameters
        ----------
        program
            The convex program to solve

        Returns
        -------
        SolverResult
            The optimal point, or the failure status and solver message
        """
        started = time.monotonic()
        if program.is_linear:
            result = self._solve_linear(program, program.linear_cost, started)
        else:
            result = self._check_feasible(program, started)
            if result is None:
                result = self._solve_nonlinear(program, started)

        logger.debug(
            "%s: %s after %.3fs (%s)",
            program.name,
            result.status.value,
            time.monotonic() - started,
            result.message,
        )
        return result

    def _remaining_time(self, started: float) -> float | None:
        if self.timeout is None:
            return None
        return max(self.timeout - (time.monotonic() - started), 0.0)

    def _timed_out(self, started: float) -> bool:
        return self.timeout is not None and time.monotonic() - started >= self.timeout

    def _timeout_result(self) -> SolverResult:
        return SolverResult(
            status=SolverStatus.TIMED_OUT,
            message=f"time limit of {self.timeout}s reached",
        )

    def _solve_linear(
        self, program: ConvexProgram, cost: np.ndarray, started: float
    ) -> SolverResult:
        if self._timed_out(started):
            return self._timeout_result()

        options = {}
        if self.lp_max_iterations is not None:
            options["maxiter"] = self.lp_max_iterations
        remaining = self._remaining_time(started)
        if remaining is not None:
            options["time_limit"] = remaining

        res = linprog(
            cost,
            A_ub=program.A_ub,
            b_ub=program.b_ub,
            A_eq=program.A_eq,
            b_eq=program.b_eq,
            bounds=program.bounds,
            method="highs",
            options=options,
        )

        status = _LINPROG_STATUS.get(res.status, SolverStatus.NOT_CONVERGED)
        if status is SolverStatus.NOT_CONVERGED and self._timed_out(started):
            status = SolverStatus.TIMED_OUT
        if status is not SolverStatus.OPTIMAL:
            return SolverResult(status=status, message=res.message)

        return SolverResult(
            status=status,
            x=np.asarray(res.x, dtype=float),
            objective_value=float(res.fun),
            message=res.message,
            iterations=int(getattr(res, "nit", 0)),
        )

    def _check_feasible(
        self, program: ConvexProgram, started: float
    ) -> SolverResult | None:
        """Phase 1: return a failure result if no feasible point exists."""
        phase_one = self._solve_linear(
            program, np.zeros(program.n_variables), started
        )
        if phase_one.success:
            return None
        return phase_one

    def _solve_nonlinear(
        self, program: ConvexProgram, started: float
    ) -> SolverResult:
        constraints = []
        if program.A_ub is not None:
            A_ub, b_ub = dense(program.A_ub), program.b_ub
            constraints.append(
                {
                    "type": "ineq",
                    "fun": lambda x: b_ub - A_ub @ x,
                    "jac": lambda x: -A_ub,
                }
            )
        if program.A_eq is not None:
            A_eq, b_eq = dense(program.A_eq), program.b_eq
            constraints.append(
                {
                    "type": "eq",
                    "fun": lambda x: A_eq @ x - b_eq,
                    "jac": lambda x: A_eq,
                }
            )

        lower, upper = program.lower_bounds(), program.upper_bounds()
        x0 = program.x0
        if x0 is None:
            x0 = np.clip(np.zeros(program.n_variables), lower, upper)

        def _callback(xk):
            if self._timed_out(started):
                raise _SolveTimeout

        stationary = False
        for attempt in range(self.restarts + 1):
            try:
                res: OptimizeResult = minimize(
                    program.objective,
                    x0,
                    jac=program.gradient,
                    method="SLSQP",
                    bounds=program.bounds,
                    constraints=constraints,
                    callback=_callback,
                    options={"maxiter": self.max_iterations, "ftol": self.tolerance},
                )
            except _SolveTimeout:
                return self._timeout_result()

            if self._timed_out(started):
                return self._timeout_result()
            if res.status != _SLSQP_LINESEARCH_STALLED:
                break

            x = np.clip(res.x, lower, upper)
            feasible = program.max_violation(x) <= self.feasibility_tolerance
            if feasible and self._is_stationary(program, x):
                logger.debug(
                    "%s: line search stalled at a KKT point, accepting it",
                    program.name,
                )
                stationary = True
                break
            logger.debug(
                "%s: line search stalled, restart %d of %d",
                program.name,
                attempt + 1,
                self.restarts,
            )
            x0 = x

        if not (res.success or stationary):
            if res.status == _SLSQP_INCOMPATIBLE_CONSTRAINTS:
                status = SolverStatus.INFEASIBLE
            else:
                status = SolverStatus.NOT_CONVERGED
            return SolverResult(status=status, message=res.message)

        if not np.isfinite(res.fun):
            return SolverResult(status=SolverStatus.UNBOUNDED, message=res.message)

        x = np.clip(res.x, lower, upper)
        violation = program.max_violation(x)
        if violation > self.feasibility_tolerance:
            return SolverResult(
                status=SolverStatus.NOT_CONVERGED,
                message=(
                    f"{res.message}; point violates constraints by {violation:.3e}"
                ),
            )

        return SolverResult(
            status=SolverStatus.OPTIMAL,
            x=np.asarray(x, dtype=float),
            objective_value=float(res.fun),
            message=res.message,
            iterations=int(getattr(res, "nit", 0)),
        )

    def _is_stationary(self, program: ConvexProgram, x: np.ndarray) -> bool:
        """
        Check the KKT stationarity condition at a feasible point ``x``.

        Looks for multipliers ``mu >= 0`` on the active bounds and inequality
        rows, and free multipliers on the equality rows, such that
        ``grad f(x) + sum_k mu_k grad c_k = 0``. The multipliers come from a
        non-negative least-squares fit; equality rows enter with both signs.
        """
        if program.gradient is not None:
            gradient = np.asarray(program.gradient(x), dtype=float)
        else:
            gradient = approx_fprime(x, program.objective)

        tol = self.kkt_tolerance
        identity = np.eye(program.n_variables)
        blocks = [
            -identity[:, x - program.lower_bounds() <= tol],
            identity[:, program.upper_bounds() - x <= tol],
        ]
        if program.A_ub is not None:
            A_ub = dense(program.A_ub)
            blocks.append(A_ub[program.b_ub - A_ub @ x <= tol].T)
        if program.A_eq is not None:
            A_eq = dense(program.A_eq)
            blocks.extend([A_eq.T, -A_eq.T])
        normals = np.hstack(blocks)

        scale = max(1.0, float(np.linalg.norm(gradient)))
        if normals.shape[1] == 0:
            residual = float(np.linalg.norm(gradient))
        else:
            _, residual = nnls(normals, -gradient)
        logger.debug("%s: KKT residual %.3e", program.name, residual / scale)
        return residual <= tol * scale
