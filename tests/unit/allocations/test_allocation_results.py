"""
Tests for the AllocationResult container for the fair-split library.

"""

from __future__ import annotations

import math

import pandas as pd
import pytest

from fair_split.library.allocations.results import AllocationResult
from fair_split.library.exceptions import OutputValidationError
from fair_split.library.utils.series import new_allocation


def _result(approach, allocation, capacity, resource):
    return AllocationResult(
        approach=approach,
        parameters={"resource": resource},
        capacity=capacity,
        allocation=pd.Series(allocation, dtype=float, name="allocation").rename_axis(
            "agent"
        ),
    )


class TestAllocationResultValidation:
    """Test validation on construction."""

    def test_valid_result(self, beer_capacity):
        """A feasible, conserving allocation is accepted."""
        result = _result(
            "max-min-fair",
            {"Alan": 250.0, "Bill": 375.0, "Carl": 375.0},
            beer_capacity,
            1000.0,
        )
        assert result.agent_warnings is None
        assert result.resource == 1000.0

    def test_over_capacity_rejected(self, beer_capacity):
        """Feasible approaches may not exceed a capacity."""
        with pytest.raises(OutputValidationError, match="violates agent capacities"):
            _result(
                "greedy",
                {"Alan": 300.0, "Bill": 350.0, "Carl": 350.0},
                beer_capacity,
                1000.0,
            )

    def test_negative_share_rejected(self, beer_capacity):
        """No agent may receive a negative amount."""
        with pytest.raises(OutputValidationError):
            _result(
                "greedy",
                {"Alan": -10.0, "Bill": 450.0, "Carl": 450.0},
                beer_capacity,
                1000.0,
            )

    def test_resource_exceeded_rejected(self, beer_capacity):
        """An allocation may not hand out more than the resource."""
        with pytest.raises(OutputValidationError, match="more than the resource"):
            _result(
                "max-min-fair",
                {"Alan": 250.0, "Bill": 400.0, "Carl": 400.0},
                beer_capacity,
                1000.0,
            )

    def test_agent_mismatch_rejected(self, beer_capacity):
        """The allocation must cover exactly the capacity's agents."""
        with pytest.raises(OutputValidationError, match="Missing: \\['Carl'\\]"):
            _result("null", {"Alan": 0.0, "Bill": 0.0}, beer_capacity, 1000.0)

    def test_solver_round_off_tolerated(self, beer_capacity):
        """Tiny numerical excess is not reported."""
        result = _result(
            "jain",
            {"Alan": 250.0 + 1e-7, "Bill": 375.0, "Carl": 375.0},
            beer_capacity,
            1000.0,
        )
        assert result.total == pytest.approx(1000.0)

    def test_concurrent_over_capacity_is_warning(self, beer_capacity):
        """Concurrent over-allocation is recorded per agent, not raised."""
        result = _result(
            "concurrent",
            {"Alan": 500.0, "Bill": 900.0, "Carl": 900.0},
            beer_capacity,
            2300.0,
        )
        assert result.agent_warnings == {
            "Alan": "over-capacity:2.00",
            "Bill": "over-capacity:2.00",
            "Carl": "over-capacity:2.00",
        }

    def test_concurrent_still_conserves(self, beer_capacity):
        """The conservation check applies to concurrent too."""
        with pytest.raises(OutputValidationError):
            _result(
                "concurrent",
                {"Alan": 500.0, "Bill": 900.0, "Carl": 900.0},
                beer_capacity,
                1000.0,
            )


class TestAllocationResultSummaries:
    """Test derived quantities."""

    def test_unused(self, beer_capacity):
        """Egalitarian wastes 250 ml of the beer scenario."""
        result = _result(
            "egalitarian",
            {"Alan": 250.0, "Bill": 250.0, "Carl": 250.0},
            beer_capacity,
            1000.0,
        )
        assert result.total == 750.0
        assert result.unused_resource == 250.0
        assert result.unused_capacity.to_dict() == {
            "Alan": 0.0,
            "Bill": 200.0,
            "Carl": 200.0,
        }

    def test_to_frame(self, beer_capacity):
        """Per-agent table of capacity, allocation and unused capacity."""
        result = _result(
            "egalitarian",
            {"Alan": 250.0, "Bill": 250.0, "Carl": 250.0},
            beer_capacity,
            1000.0,
        )
        frame = result.to_frame()
        assert list(frame.columns) == ["capacity", "allocation", "unused"]
        assert frame.loc["Bill", "unused"] == 200.0

    def test_equality_indices(self, beer_capacity):
        """An equal split scores perfectly."""
        result = _result(
            "egalitarian",
            {"Alan": 250.0, "Bill": 250.0, "Carl": 250.0},
            beer_capacity,
            1000.0,
        )
        indices = result.equality_indices()
        assert indices["jain"] == pytest.approx(1.0)
        assert indices["gini"] == pytest.approx(0.0)

    def test_equality_indices_of_null(self, beer_capacity):
        """Indices of an all-zero allocation are NaN rather than an error."""
        result = AllocationResult(
            approach="null",
            parameters={"resource": 1000.0},
            capacity=beer_capacity,
            allocation=new_allocation(beer_capacity.index),
        )
        indices = result.equality_indices()
        assert math.isnan(indices["jain"])
        assert math.isnan(indices["gini"])
