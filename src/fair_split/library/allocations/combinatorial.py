"""
Closed-form and single-pass allocation approaches.

These approaches need no solver. They serve mostly as baselines against
which the fairness-seeking approaches are compared:

- ``null``: nobody gets anything
- ``greedy``: the largest capacities are filled first
- ``maximin``: an equal floor for everybody, then greedy top-up
- ``egalitarian``: an equal floor for everybody and nothing more
- ``concurrent``: everybody gets the same fraction of their capacity

Greedy-style passes walk agents by capacity descending, breaking ties by agent
identifier ascending (see :func:`~fair_split.library.utils.series.order_by_capacity`).
"""

from __future__ import annotations

import logging

from fair_split.library.error_messages import format_error
from fair_split.library.exceptions import InvalidInputError
from fair_split.library.utils.series import (
    AllocationSeries,
    CapacityLike,
    new_allocation,
    order_by_capacity,
)
from fair_split.library.validation.inputs import (
    validate_capacity,
    validate_not_empty,
    validate_resource,
)

logger = logging.getLogger(__name__)


def null_allocation(resource: float, capacity: CapacityLike) -> AllocationSeries:
    """
    Allocate nothing to anybody.

    Parameters
    ----------
    resource
        Total quantity to distribute (validated, then ignored)
    capacity
        Maximum share per agent

    Returns
    -------
    AllocationSeries
        Zero for every agent
    """
    validate_resource(resource)
    cap = validate_capacity(capacity)
    return new_allocation(cap.index)


def greedy_allocation(resource: float, capacity: CapacityLike) -> AllocationSeries:
    """
    Fill the largest capacities first.

    Agents are visited by capacity descending (ties by agent ascending) and
    each receives ``min(remaining, capacity)``. Agents late in the order get
    nothing once the resource runs out. This favours high-capacity agents and
    is not fairness seeking; it exists as a contrast baseline.

    Parameters
    ----------
    resource
        Total quantity to distribute
    capacity
        Maximum share per agent

    Returns
    -------
    AllocationSeries
        Amount per agent

    Examples
    --------
    >>> greedy_allocation(1000, {"Alan": 250, "Bill": 450, "Carl": 450}).to_dict()
    {'Alan': 100.0, 'Bill': 450.0, 'Carl': 450.0}
    """
    remaining = validate_resource(resource)
    cap = validate_capacity(capacity)

    alloc = new_allocation(cap.index)
    for agent in order_by_capacity(cap):
        alloc[agent] = min(remaining, cap[agent])
        remaining = max(0.0, remaining - cap[agent])

    return alloc


def maximin_allocation(resource: float, capacity: CapacityLike) -> AllocationSeries:
    """
    Give everybody the largest possible equal floor, then top up greedily.

    Phase 1 hands every agent ``min(min_cap, resource / n)``, so the smallest
    allocation is as large as it can be. Phase 2 distributes whatever is left
    greedily (capacity descending, ties by agent ascending), topping each
    agent up towards its capacity.

    Parameters
    ----------
    resource
        Total quantity to distribute
    capacity
        Maximum share per agent

    Returns
    -------
    AllocationSeries
        Amount per agent

    Raises
    ------
    InvalidInputError
        If there are no agents
    """
    remaining = validate_resource(resource)
    cap = validate_capacity(capacity)
    validate_not_empty(cap, "maximin_allocation")

    base = min(cap.min(), remaining / len(cap))
    alloc = new_allocation(cap.index, base)
    remaining = max(0.0, remaining - base * len(cap))

    for agent in order_by_capacity(cap):
        delta = min(remaining, cap[agent] - alloc[agent])
        alloc[agent] += delta
        remaining -= delta

    return alloc


def egalitarian_allocation(
    resource: float, capacity: CapacityLike
) -> AllocationSeries:
    """
    Nobody may have more than the least capable agent can hold.

    Every agent receives ``min(min_cap, resource / n)``. Leftover resource is
    deliberately not redistributed, so resource is wasted whenever
    ``resource > min_cap * n``. This is the contrast with
    :func:`maximin_allocation`, which hands the leftovers out.

    Parameters
    ----------
    resource
        Total quantity to distribute
    capacity
        Maximum share per agent

    Returns
    -------
    AllocationSeries
        The same amount for every agent

    Raises
    ------
    InvalidInputError
        If there are no agents
    """
    value = validate_resource(resource)
    cap = validate_capacity(capacity)
    validate_not_empty(cap, "egalitarian_allocation")

    return new_allocation(cap.index, min(cap.min(), value / len(cap)))


def concurrent_allocation(
    resource: float, capacity: CapacityLike
) -> AllocationSeries:
    """
    Give every agent the same fraction of its capacity.

    Finds the rate ``alpha`` with ``alpha * sum(capacity) = resource`` and
    allocates ``alpha * capacity[agent]``.

    Warning: this approach does not clamp to capacity. When the resource
    exceeds the total capacity, ``alpha > 1`` and every agent with positive
    capacity receives more than it can hold. The over-allocation is logged
    and left in place; the allocation result records it as per-agent
    warnings.

    Parameters
    ----------
    resource
        Total quantity to distribute
    capacity
        Maximum share per agent

    Returns
    -------
    AllocationSeries
        Amount per agent, proportional to capacity

    Raises
    ------
    InvalidInputError
        If the capacities sum to zero (including when there are no agents)
    """
    value = validate_resource(resource)
    cap = validate_capacity(capacity)

    total = cap.sum()
    if total == 0:
        raise InvalidInputError(
            format_error("zero_total_capacity", operation="concurrent_allocation")
        )

    alpha = value / total
    if alpha > 1:
        logger.warning(
            "concurrent_allocation: resource %.6g exceeds total capacity %.6g, "
            "allocating %.4f times each capacity",
            value,
            total,
            alpha,
        )

    return (alpha * cap).rename("allocation")
