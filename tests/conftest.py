"""
Common fixtures for pytest unit and integration tests for the fair-split library.

"""

from __future__ import annotations

import matplotlib
import pandas as pd
import pytest

from fair_split.library.allocations.manager import AllocationManager
from fair_split.library.solvers import ScipyConvexSolver

matplotlib.use("Agg")

# Standard test scenario: three glasses, one litre of beer
BEER_CAPACITY = {"Alan": 250.0, "Bill": 450.0, "Carl": 450.0}
BEER_RESOURCE = 1000.0

# Tolerance for solver-based approaches
SOLVER_REL = 1e-3

COMBINATORIAL_APPROACHES = [
    "null",
    "greedy",
    "maximin",
    "max-min-fair",
    "egalitarian",
]
OPTIMIZATION_APPROACHES = ["proportional", "gini", "jain"]

# Approaches that never exceed capacities
FEASIBLE_APPROACHES = COMBINATORIAL_APPROACHES + OPTIMIZATION_APPROACHES


@pytest.fixture
def beer_capacity():
    """Capacities of the beer-glasses scenario as a series."""
    return pd.Series(BEER_CAPACITY, name="capacity").rename_axis("agent")


@pytest.fixture
def beer_resource():
    """Resource of the beer-glasses scenario."""
    return BEER_RESOURCE


@pytest.fixture
def solver():
    """Solver with the library defaults."""
    return ScipyConvexSolver()


@pytest.fixture
def manager(solver):
    """Allocation manager using the default solver."""
    return AllocationManager(solver=solver)


@pytest.fixture
def uneven_capacity():
    """Five agents with distinct capacities and one zero-capacity agent."""
    return {"a": 10.0, "b": 40.0, "c": 25.0, "d": 0.0, "e": 60.0}
