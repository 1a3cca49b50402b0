"""
Tests for the convex program description and the scipy solver for the fair-split library.

"""

from __future__ import annotations

import numpy as np
import pytest
from scipy import sparse
from scipy.optimize import OptimizeResult

from fair_split.library.exceptions import AllocationError
from fair_split.library.solvers import scipy_solver
from fair_split.library.solvers import (
    ConvexProgram,
    ConvexSolver,
    ScipyConvexSolver,
    SolverResult,
    SolverStatus,
)


def _quadratic_program(total=1.0, upper=1.0, n=2):
    """minimize sum x^2 s.t. sum x = total, 0 <= x <= upper."""
    return ConvexProgram(
        n_variables=n,
        bounds=[(0.0, upper)] * n,
        objective=lambda x: float(np.dot(x, x)),
        gradient=lambda x: 2.0 * x,
        A_eq=np.ones((1, n)),
        b_eq=[total],
        name="quadratic",
    )


def _linear_program(total=1.0, upper=1.0):
    """minimize x0 s.t. x0 + x1 = total, 0 <= x <= upper."""
    return ConvexProgram(
        n_variables=2,
        bounds=[(0.0, upper), (0.0, upper)],
        linear_cost=[1.0, 0.0],
        A_eq=[[1.0, 1.0]],
        b_eq=[total],
        name="linear",
    )


class TestConvexProgram:
    """Test program construction and checks."""

    def test_needs_exactly_one_objective(self):
        """Both or neither of objective and linear_cost is an error."""
        with pytest.raises(AllocationError, match="exactly one"):
            ConvexProgram(n_variables=1, bounds=[(0.0, 1.0)])
        with pytest.raises(AllocationError, match="exactly one"):
            ConvexProgram(
                n_variables=1,
                bounds=[(0.0, 1.0)],
                objective=lambda x: 0.0,
                linear_cost=[1.0],
            )

    def test_bounds_length(self):
        """One bound pair per variable."""
        with pytest.raises(AllocationError, match="expected 2 bounds"):
            ConvexProgram(n_variables=2, bounds=[(0.0, 1.0)], linear_cost=[1.0, 1.0])

    def test_constraint_shapes(self):
        """Constraint matrices must match the variables and right-hand side."""
        with pytest.raises(AllocationError, match="A_eq has shape"):
            ConvexProgram(
                n_variables=2,
                bounds=[(0.0, 1.0)] * 2,
                linear_cost=[1.0, 1.0],
                A_eq=[[1.0, 1.0, 1.0]],
                b_eq=[1.0],
            )
        with pytest.raises(AllocationError, match="must be given together"):
            ConvexProgram(
                n_variables=2,
                bounds=[(0.0, 1.0)] * 2,
                linear_cost=[1.0, 1.0],
                A_ub=[[1.0, 1.0]],
            )

    def test_max_violation(self):
        """Bounds and constraints both count as violations."""
        program = _quadratic_program(total=1.0, upper=0.8)
        assert program.max_violation(np.array([0.5, 0.5])) == pytest.approx(0.0)
        assert program.max_violation(np.array([0.9, 0.1])) == pytest.approx(0.1)
        assert program.max_violation(np.array([0.5, 0.7])) == pytest.approx(0.2)

    def test_sparse_constraints(self):
        """Sparse constraint matrices stay sparse and are checked like dense ones."""
        program = ConvexProgram(
            n_variables=2,
            bounds=[(0.0, 1.0)] * 2,
            linear_cost=[1.0, 0.0],
            A_ub=sparse.csr_array(np.array([[1.0, -1.0]])),
            b_ub=[0.0],
        )
        assert sparse.issparse(program.A_ub)
        assert program.max_violation(np.array([0.6, 0.4])) == pytest.approx(0.2)
        with pytest.raises(AllocationError, match="A_ub has shape"):
            ConvexProgram(
                n_variables=3,
                bounds=[(0.0, 1.0)] * 3,
                linear_cost=[1.0, 0.0, 0.0],
                A_ub=sparse.csr_array(np.ones((1, 2))),
                b_ub=[0.0],
            )

    def test_unbounded_sides(self):
        """None bounds become infinities."""
        program = ConvexProgram(
            n_variables=2, bounds=[(None, 1.0), (0.0, None)], linear_cost=[1.0, 1.0]
        )
        assert program.lower_bounds().tolist() == [-np.inf, 0.0]
        assert program.upper_bounds().tolist() == [1.0, np.inf]


class TestScipyConvexSolver:
    """Test status mapping and solutions."""

    def test_implements_protocol(self):
        """The scipy solver satisfies the ConvexSolver protocol."""
        assert isinstance(ScipyConvexSolver(), ConvexSolver)

    def test_quadratic_optimum(self):
        """The sum of squares is minimized by an even split."""
        result = ScipyConvexSolver().solve(_quadratic_program(total=1.0, n=4))
        assert result.success
        np.testing.assert_allclose(result.x, 0.25, atol=1e-6)
        assert result.objective_value == pytest.approx(0.25, abs=1e-8)

    def test_linear_optimum(self):
        """Linear programs go to HiGHS."""
        result = ScipyConvexSolver().solve(_linear_program(total=1.0, upper=0.7))
        assert result.status is SolverStatus.OPTIMAL
        np.testing.assert_allclose(result.x, [0.3, 0.7], atol=1e-9)

    def test_linear_infeasible(self):
        """An equality beyond the bounds is infeasible."""
        result = ScipyConvexSolver().solve(_linear_program(total=3.0, upper=1.0))
        assert result.status is SolverStatus.INFEASIBLE
        assert result.x is None
        assert not result.success

    def test_nonlinear_infeasible(self):
        """The feasibility check catches infeasible nonlinear programs."""
        result = ScipyConvexSolver().solve(_quadratic_program(total=3.0, upper=1.0))
        assert result.status is SolverStatus.INFEASIBLE

    def test_linear_unbounded(self):
        """A cost that can decrease forever is unbounded."""
        program = ConvexProgram(
            n_variables=1, bounds=[(None, None)], linear_cost=[1.0]
        )
        result = ScipyConvexSolver().solve(program)
        assert result.status in (SolverStatus.UNBOUNDED, SolverStatus.INFEASIBLE)
        assert not result.success

    @pytest.mark.parametrize("builder", [_quadratic_program, _linear_program])
    def test_zero_timeout(self, builder):
        """An exhausted budget is reported, not raised."""
        result = ScipyConvexSolver(timeout=0.0).solve(builder())
        assert result.status is SolverStatus.TIMED_OUT
        assert "time limit" in result.message

    def test_iteration_limit(self):
        """Running out of iterations is reported as not converged."""
        program = ConvexProgram(
            n_variables=3,
            bounds=[(1e-9, 1.0)] * 3,
            objective=lambda x: -float(np.sum(np.log(x))),
            gradient=lambda x: -1.0 / x,
            A_ub=np.ones((1, 3)),
            b_ub=[1.0],
            x0=[0.9, 0.05, 0.05],
        )
        result = ScipyConvexSolver(max_iterations=1).solve(program)
        assert result.status is SolverStatus.NOT_CONVERGED

    def test_iteration_limit_is_not_applied_to_highs(self):
        """The SLSQP iteration cap leaves linear programs alone."""
        n = 40
        program = ConvexProgram(
            n_variables=n,
            bounds=[(0.0, float(i + 1)) for i in range(n)],
            linear_cost=np.arange(n, 0, -1, dtype=float),
            A_eq=np.ones((1, n)),
            b_eq=[300.0],
        )
        result = ScipyConvexSolver(max_iterations=1).solve(program)
        assert result.success
        assert result.x.sum() == pytest.approx(300.0)

    def test_sparse_linear_program(self):
        """HiGHS accepts sparse inequality constraints."""
        program = ConvexProgram(
            n_variables=2,
            bounds=[(0.0, 1.0)] * 2,
            linear_cost=[-1.0, -1.0],
            A_ub=sparse.csr_array(np.array([[1.0, 2.0]])),
            b_ub=[1.0],
        )
        result = ScipyConvexSolver().solve(program)
        assert result.success
        np.testing.assert_allclose(result.x, [1.0, 0.0], atol=1e-9)


class TestStalledLineSearch:
    """SLSQP exit mode 8 is accepted only at KKT points."""

    @staticmethod
    def _stalled_at(x, calls):
        def fake_minimize(fun, x0, **kwargs):
            calls.append(np.array(x0))
            return OptimizeResult(
                x=np.array(x),
                fun=fun(np.array(x)),
                success=False,
                status=8,
                message="Positive directional derivative for linesearch",
                nit=3,
            )

        return fake_minimize

    def test_accepted_at_optimum(self, monkeypatch):
        """A stall at the optimum is reported as optimal."""
        calls = []
        monkeypatch.setattr(
            scipy_solver, "minimize", self._stalled_at([0.5, 0.5], calls)
        )
        result = ScipyConvexSolver().solve(_quadratic_program(total=1.0, n=2))
        assert result.success
        np.testing.assert_allclose(result.x, [0.5, 0.5])
        assert len(calls) == 1

    def test_accepted_with_active_bounds(self, monkeypatch):
        """Multipliers on active upper bounds count towards stationarity."""
        calls = []
        monkeypatch.setattr(
            scipy_solver, "minimize", self._stalled_at([0.2, 0.4, 0.4], calls)
        )
        program = ConvexProgram(
            n_variables=3,
            bounds=[(0.0, 0.2), (0.0, 1.0), (0.0, 1.0)],
            objective=lambda x: float(np.dot(x, x)),
            gradient=lambda x: 2.0 * x,
            A_eq=np.ones((1, 3)),
            b_eq=[1.0],
        )
        assert ScipyConvexSolver().solve(program).success

    def test_restarted_then_rejected_elsewhere(self, monkeypatch):
        """A stall away from the optimum is retried, then fails."""
        calls = []
        monkeypatch.setattr(
            scipy_solver, "minimize", self._stalled_at([0.2, 0.8], calls)
        )
        result = ScipyConvexSolver(restarts=2).solve(
            _quadratic_program(total=1.0, n=2)
        )
        assert result.status is SolverStatus.NOT_CONVERGED
        assert "linesearch" in result.message
        assert len(calls) == 3
        np.testing.assert_allclose(calls[1], [0.2, 0.8])


class TestSolverResult:
    """Test the result container."""

    @pytest.mark.parametrize(
        "status, success",
        [(status, status is SolverStatus.OPTIMAL) for status in SolverStatus],
    )
    def test_success(self, status, success):
        """Only OPTIMAL counts as success."""
        assert SolverResult(status=status).success is success

    def test_status_values(self):
        """Status values are the names used in error messages."""
        assert [s.value for s in SolverStatus] == [
            "optimal",
            "infeasible",
            "unbounded",
            "not-converged",
            "timed-out",
        ]
