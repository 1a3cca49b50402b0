"""
Result container for allocation calculations.

An :class:`AllocationResult` keeps the allocation together with everything
needed to interpret it: the approach that produced it, the resource and any
extra parameters, and the capacities it was computed against. Keeping these
side by side makes it possible to compare approaches on the same scenario,
score them with the equality indices, and render them as used/unused
capacity charts.

Results validate themselves on construction. Every approach must cover
exactly the capacity's agents, hand out no negative amounts, and never
distribute more than the resource. Every approach except ``concurrent`` must
also stay within each agent's capacity; ``concurrent`` results that exceed a
capacity are recorded in ``agent_warnings`` instead.
"""

from __future__ import annotations

from collections.abc import Hashable

import numpy as np
import pandas as pd
from attrs import define, field

from fair_split.library.allocations.registry import allows_over_allocation
from fair_split.library.metrics import equality_indices
from fair_split.library.validation import (
    find_over_capacity,
    validate_resource_conserved,
    validate_same_agents,
    validate_within_capacity,
)


@define
class AllocationResult:
    """Container for one allocation with validation.

    Attributes
    ----------
    approach
        The name of the allocation approach used (e.g., "max-min-fair")
    parameters
        The parameter values used in the allocation, always including
        ``resource``
    capacity
        Capacity per agent the allocation was computed against
    allocation
        Amount per agent
    agent_warnings
        Optional dictionary mapping agents to warning messages. Filled
        automatically with ``over-capacity:<ratio>`` for approaches that may
        exceed capacities.
    """

    approach: str
    parameters: dict
    capacity: pd.Series
    allocation: pd.Series
    agent_warnings: dict[Hashable, str] | None = field(default=None, kw_only=True)

    def __attrs_post_init__(self):
        """Initialize and validate the result."""
        self.validate()

    @property
    def resource(self) -> float:
        """The resource that was distributed."""
        return float(self.parameters["resource"])

    def validate(self) -> None:
        """Validate agents, feasibility and conservation.

        Approaches allowed to over-allocate skip the upper capacity check;
        their excess is recorded in ``agent_warnings`` instead.
        """
        validate_same_agents(self.allocation, self.capacity, self.approach)

        if allows_over_allocation(self.approach):
            over = find_over_capacity(self.allocation, self.capacity, self.resource)
            if not over.empty:
                warnings = dict(self.agent_warnings or {})
                for agent, ratio in over.items():
                    warnings[agent] = f"over-capacity:{ratio:.2f}"
                self.agent_warnings = warnings
            validate_within_capacity(
                self.allocation.clip(upper=self.capacity),
                self.capacity,
                self.resource,
                self.approach,
            )
        else:
            validate_within_capacity(
                self.allocation, self.capacity, self.resource, self.approach
            )

        validate_resource_conserved(
            self.allocation, self.capacity, self.resource, self.approach
        )

    @property
    def total(self) -> float:
        """Total amount allocated."""
        return float(self.allocation.sum())

    @property
    def unused_resource(self) -> float:
        """Resource left undistributed (never negative)."""
        return max(self.resource - self.total, 0.0)

    @property
    def unused_capacity(self) -> pd.Series:
        """Capacity left unused per agent (zero where over-allocated)."""
        return (self.capacity - self.allocation).clip(lower=0.0).rename("unused")

    def to_frame(self) -> pd.DataFrame:
        """
        Per-agent table of capacity, allocation and unused capacity.

        Returns
        -------
        pd.DataFrame
            Indexed by agent with columns ``capacity``, ``allocation`` and
            ``unused``
        """
        return pd.concat(
            [self.capacity, self.allocation, self.unused_capacity], axis=1
        )

    def equality_indices(self) -> dict[str, float]:
        """
        Jain and Gini indices of the allocation.

        Returns
        -------
        dict[str, float]
            ``{"jain": ..., "gini": ...}``; both NaN when nothing was
            allocated, since neither index is defined for a zero total
        """
        if not self.total > 0:
            return {"jain": np.nan, "gini": np.nan}
        return equality_indices(self.allocation)
