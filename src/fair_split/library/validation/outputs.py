"""
Output validation functions for the fair-split library.

This module contains validation functions for allocation output data including:
- Agent set matching between allocation and capacity
- Feasibility (0 <= allocation <= capacity)
- Conservation (allocation never exceeds the resource)

Comparisons use a tolerance relative to the problem scale, the larger of the
resource and the largest capacity, so solver round-off is not reported.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from fair_split.library.error_messages import format_error
from fair_split.library.exceptions import OutputValidationError


def _absolute_tolerance(
    resource: float, capacity: pd.Series, tolerance: float
) -> float:
    scale = max(resource, np.max(capacity.to_numpy(), initial=0.0), 1.0)
    return tolerance * scale


def validate_same_agents(
    allocation: pd.Series, capacity: pd.Series, approach: str
) -> None:
    """
    Validate that an allocation covers exactly the capacity's agents.

    Parameters
    ----------
    allocation : pd.Series
        Allocation to check
    capacity : pd.Series
        Validated capacity series
    approach : str
        Approach name for error messages

    Raises
    ------
    OutputValidationError
        If agents are missing or unexpected
    """
    missing = capacity.index.difference(allocation.index)
    extra = allocation.index.difference(capacity.index)
    if len(missing) or len(extra):
        raise OutputValidationError(
            f"Allocation from {approach} does not match the capacity agents. "
            f"Missing: {list(missing)}, unexpected: {list(extra)}"
        )


def find_over_capacity(
    allocation: pd.Series,
    capacity: pd.Series,
    resource: float,
    tolerance: float = 1e-6,
) -> pd.Series:
    """
    Find agents that received more than their capacity.

    Parameters
    ----------
    allocation : pd.Series
        Allocation to check
    capacity : pd.Series
        Validated capacity series with the same agents
    resource : float
        Resource that was distributed, used to scale the tolerance
    tolerance : float
        Relative tolerance for floating point comparison

    Returns
    -------
    pd.Series
        Ratio ``allocation / capacity`` for each offending agent (``inf``
        for zero-capacity agents); empty when every agent is within capacity
    """
    atol = _absolute_tolerance(resource, capacity, tolerance)
    aligned = allocation.reindex(capacity.index)
    over = aligned > capacity + atol
    with np.errstate(divide="ignore"):
        ratios = aligned[over] / capacity[over]
    return ratios


def validate_within_capacity(
    allocation: pd.Series,
    capacity: pd.Series,
    resource: float,
    approach: str,
    tolerance: float = 1e-6,
) -> None:
    """
    Validate that ``0 <= allocation <= capacity`` for every agent.

    Parameters
    ----------
    allocation : pd.Series
        Allocation to check
    capacity : pd.Series
        Validated capacity series with the same agents
    resource : float
        Resource that was distributed, used to scale the tolerance
    approach : str
        Approach name for error messages
    tolerance : float
        Relative tolerance for floating point comparison

    Raises
    ------
    OutputValidationError
        If any agent is below zero or above capacity
    """
    atol = _absolute_tolerance(resource, capacity, tolerance)
    aligned = allocation.reindex(capacity.index)
    bad = (aligned < -atol) | (aligned > capacity + atol) | aligned.isnull()
    if bad.any():
        entries = {
            agent: (float(aligned[agent]), float(capacity[agent]))
            for agent in aligned.index[bad]
        }
        raise OutputValidationError(
            format_error("feasibility_violated", approach=approach, entries=entries)
        )


def validate_resource_conserved(
    allocation: pd.Series,
    capacity: pd.Series,
    resource: float,
    approach: str,
    tolerance: float = 1e-6,
) -> None:
    """
    Validate that the allocation does not hand out more than the resource.

    Parameters
    ----------
    allocation : pd.Series
        Allocation to check
    capacity : pd.Series
        Validated capacity series, used to scale the tolerance
    resource : float
        Resource that was distributed
    approach : str
        Approach name for error messages
    tolerance : float
        Relative tolerance for floating point comparison

    Raises
    ------
    OutputValidationError
        If the allocation total exceeds the resource
    """
    atol = _absolute_tolerance(resource, capacity, tolerance)
    total = float(allocation.sum())
    if total > resource + atol:
        raise OutputValidationError(
            format_error(
                "resource_exceeded",
                approach=approach,
                total=total,
                resource=resource,
                difference=total - resource,
            )
        )
