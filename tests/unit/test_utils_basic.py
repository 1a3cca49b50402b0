"""
Tests for series and parameter helpers for the fair-split library.

"""

from __future__ import annotations

import pandas as pd
import pytest

from fair_split.library.exceptions import AllocationError
from fair_split.library.utils import (
    filter_function_parameters,
    new_allocation,
    order_by_capacity,
    validate_function_parameters,
)


def _allocator(resource, capacity, solver=None):
    return None


class TestSeriesHelpers:
    """Test allocation series helpers."""

    def test_new_allocation(self):
        """New allocations are float series named allocation."""
        alloc = new_allocation(pd.Index(["a", "b"]), 2)
        assert alloc.to_dict() == {"a": 2.0, "b": 2.0}
        assert alloc.name == "allocation"
        assert alloc.index.name == "agent"
        assert alloc.dtype == float

    def test_order_by_capacity(self):
        """Capacity descending, ties by agent ascending."""
        capacity = pd.Series({"Carl": 450.0, "Alan": 250.0, "Bill": 450.0})
        assert order_by_capacity(capacity) == ["Bill", "Carl", "Alan"]

    def test_order_by_capacity_integer_agents(self):
        """Integer agent identifiers sort numerically."""
        capacity = pd.Series({10: 1.0, 2: 1.0, 3: 5.0})
        assert order_by_capacity(capacity) == [3, 2, 10]


class TestParameterHelpers:
    """Test keyword argument filtering and checking."""

    def test_filter_drops_unknown_and_none(self):
        """Only parameters in the signature with a value survive."""
        filtered = filter_function_parameters(
            _allocator, {"resource": 1.0, "capacity": {}, "solver": None, "x": 1}
        )
        assert filtered == {"resource": 1.0, "capacity": {}}

    def test_validate_accepts_optional(self):
        """Optional names may be absent from the signature."""
        validate_function_parameters(
            lambda resource, capacity: None,
            {"resource": 1.0, "capacity": {}, "solver": object()},
            optional={"solver"},
        )

    def test_validate_rejects_unknown(self):
        """Unknown names fail with a suggestion."""
        with pytest.raises(AllocationError, match="Did you mean: resource"):
            validate_function_parameters(_allocator, {"resorce": 1.0})
