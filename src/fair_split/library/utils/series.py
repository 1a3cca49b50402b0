"""
Series helpers shared by the allocators.

Capacities and allocations are carried as float ``pandas.Series`` indexed by
agent. These helpers build such series and impose the deterministic agent
ordering used by the greedy-style allocators.
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping

import numpy as np
import pandas as pd

AGENT_LEVEL = "agent"

CapacityLike = Mapping[Hashable, float] | pd.Series
AllocationSeries = pd.Series


def new_allocation(
    index: pd.Index, values: np.ndarray | float = 0.0
) -> AllocationSeries:
    """
    Create an allocation series over ``index``.

    Parameters
    ----------
    index
        The agent index, normally taken from a validated capacity series
    values
        Initial values, broadcast over the index (default: zero)

    Returns
    -------
    AllocationSeries
        A fresh float series named ``allocation``
    """
    return pd.Series(
        values, index=index.copy(), dtype=float, name="allocation"
    ).rename_axis(AGENT_LEVEL)


def order_by_capacity(capacity: pd.Series) -> list[Hashable]:
    """
    Return agents ordered by capacity descending, ties by agent ascending.

    The index is sorted first and a stable sort on the values follows, so
    agents with equal capacity keep their ascending identifier order.

    Parameters
    ----------
    capacity
        Validated capacity series. Agent identifiers must be mutually
        comparable (all strings or all integers).

    Returns
    -------
    list
        Agent identifiers in allocation order

    Examples
    --------
    >>> cap = pd.Series({"Carl": 450.0, "Alan": 250.0, "Bill": 450.0})
    >>> order_by_capacity(cap)
    ['Bill', 'Carl', 'Alan']
    """
    ordered = capacity.sort_index(kind="stable").sort_values(
        ascending=False, kind="stable"
    )
    return list(ordered.index)
