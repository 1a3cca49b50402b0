"""
Allocation approach registry and lookup functions.

This module provides the central registry mapping approach names to allocation
functions, along with helper functions for querying the registry.
"""

from typing import Any, Callable

from fair_split.library.allocations.combinatorial import (
    concurrent_allocation,
    egalitarian_allocation,
    greedy_allocation,
    maximin_allocation,
    null_allocation,
)
from fair_split.library.allocations.optimization import (
    gini_allocation,
    jain_allocation,
    proportional_allocation,
)
from fair_split.library.allocations.water_filling import mmf_allocation
from fair_split.library.error_messages import suggest_similar
from fair_split.library.exceptions import AllocationError

OPTIMIZATION_APPROACHES = frozenset({"proportional", "gini", "jain"})

# Approaches whose result may exceed individual capacities
OVER_ALLOCATING_APPROACHES = frozenset({"concurrent"})


def get_allocation_functions() -> dict[str, Callable[..., Any]]:
    """
    Get the allocation function registry.

    Returns a dictionary mapping approach names to allocation functions. Every
    function takes ``(resource, capacity)``; the optimization approaches also
    accept a ``solver`` keyword.

    Returns
    -------
    dict[str, Callable]
        Dictionary mapping approach names to allocation functions

    Notes
    -----
    The first seven entries follow the classic comparison order: baselines
    (null, greedy), the fairness-seeking combinatorial approaches (maximin,
    max-min-fair, concurrent), proportional fairness, and finally the strict
    egalitarian rule. The gini and jain approaches optimize an equality index
    directly.
    """
    return {
        # Baselines
        "null": null_allocation,
        "greedy": greedy_allocation,
        # Combinatorial fairness
        "maximin": maximin_allocation,
        "max-min-fair": mmf_allocation,
        # Note: concurrent does not clamp to capacity when resource exceeds it
        "concurrent": concurrent_allocation,
        # Convex programs
        "proportional": proportional_allocation,
        # Strict equality, wastes resource above min_cap * n
        "egalitarian": egalitarian_allocation,
        "gini": gini_allocation,
        "jain": jain_allocation,
    }


def get_function(approach: str) -> Callable[..., Any]:
    """
    Get allocation function by approach name.

    Parameters
    ----------
    approach : str
        Name of the allocation approach (e.g., "max-min-fair")

    Returns
    -------
    Callable
        The allocation function implementing the specified approach

    Raises
    ------
    AllocationError
        If the approach name is not recognized
    """
    allocation_functions = get_allocation_functions()
    if approach not in allocation_functions:
        raise AllocationError(
            f"Unknown allocation approach: {approach}. "
            f"{suggest_similar(approach, list(allocation_functions))}"
        )
    return allocation_functions[approach]


def is_optimization_approach(approach: str) -> bool:
    """
    Check if the approach is solved as a convex program.

    Parameters
    ----------
    approach : str
        Name of the allocation approach

    Returns
    -------
    bool
        True if the approach delegates to a convex solver
    """
    return approach in OPTIMIZATION_APPROACHES


def allows_over_allocation(approach: str) -> bool:
    """
    Check if the approach may hand an agent more than its capacity.

    Parameters
    ----------
    approach : str
        Name of the allocation approach

    Returns
    -------
    bool
        True if results of this approach are exempt from the capacity check
    """
    return approach in OVER_ALLOCATING_APPROACHES
