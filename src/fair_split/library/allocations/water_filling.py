"""
Max-min fair allocation via water-filling.

The allocation raises every unsaturated agent's share by the same amount
until the smallest residual capacity is used up or the resource runs out.
Saturated agents drop out and the process repeats among the rest. The result
is the unique allocation in which no agent's share can be increased without
decreasing the share of another agent that holds the same amount or less.
"""

from __future__ import annotations

import logging

import numpy as np

from fair_split.library.utils.series import (
    AllocationSeries,
    CapacityLike,
    new_allocation,
)
from fair_split.library.validation.inputs import validate_capacity, validate_resource

logger = logging.getLogger(__name__)

# Relative to the problem scale (largest of resource and capacities)
SATURATION_RTOL = 1e-12


def mmf_allocation(resource: float, capacity: CapacityLike) -> AllocationSeries:
    """
    Compute the max-min fair allocation by water-filling.

    Each round works on a local copy of the residual capacities and an
    explicit mask of active (unsaturated) agents:

    1. ``delta = min(smallest active residual, resource / n_active)``
    2. every active agent receives ``delta``; the resource and the active
       residuals shrink by the same amount (residuals clamped at zero)
    3. agents whose residual is within tolerance of zero leave the active set

    The loop ends when the resource is used up or nobody is active. Each
    round either saturates at least one agent or exhausts the resource, so at
    most ``n`` rounds are needed. Zero-capacity agents are never active.

    Parameters
    ----------
    resource
        Total quantity to distribute
    capacity
        Maximum share per agent

    Returns
    -------
    AllocationSeries
        Amount per agent. Sums to ``min(resource, sum(capacity))``.

    Examples
    --------
    >>> mmf_allocation(1000, {"Alan": 250, "Bill": 450, "Carl": 450}).to_dict()
    {'Alan': 250.0, 'Bill': 375.0, 'Carl': 375.0}
    """
    remaining = validate_resource(resource)
    cap = validate_capacity(capacity)

    residual = cap.to_numpy(copy=True)
    alloc = np.zeros_like(residual)

    scale = max(remaining, residual.max(initial=0.0))
    tol = SATURATION_RTOL * scale
    active = residual > tol

    rounds = 0
    while active.any() and remaining > tol:
        n_active = int(active.sum())
        delta = min(residual[active].min(), remaining / n_active)

        alloc[active] += delta
        residual[active] = np.maximum(residual[active] - delta, 0.0)
        remaining = max(remaining - delta * n_active, 0.0)

        active &= residual > tol
        rounds += 1

    logger.debug(
        "mmf_allocation: %d rounds, %d saturated agents, %.6g resource left",
        rounds,
        int((~active).sum()),
        remaining,
    )

    return new_allocation(cap.index, alloc)
