"""
Input validation for allocations and equality indices.

Every allocator and metric funnels its arguments through these functions
before computing anything, so malformed inputs fail synchronously with an
:class:`~fair_split.library.exceptions.InvalidInputError` and no partial
result is ever produced.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence

import numpy as np
import pandas as pd

from fair_split.library.error_messages import format_error
from fair_split.library.exceptions import InvalidInputError
from fair_split.library.utils.series import AGENT_LEVEL, CapacityLike


def validate_resource(resource: float) -> float:
    """
    Validate that the resource is a finite, non-negative number.

    Parameters
    ----------
    resource
        Total quantity to distribute

    Returns
    -------
    float
        The resource as a float

    Raises
    ------
    InvalidInputError
        If the resource is not a number, negative, infinite or NaN
    """
    try:
        value = float(resource)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Resource must be a number, got {resource!r}") from e

    if not math.isfinite(value) or value < 0:
        raise InvalidInputError(
            format_error("negative_values", value_type="Resource", entries=value)
        )
    return value


def validate_capacity(capacity: CapacityLike) -> pd.Series:
    """
    Validate capacities and return them as a fresh float series.

    The returned series never shares memory with the caller's object, so
    allocators are free to build working copies from it.

    Parameters
    ----------
    capacity
        Mapping or series from agent to maximum share

    Returns
    -------
    pd.Series
        Float series indexed by agent (index name ``agent``, name
        ``capacity``), in the caller's order

    Raises
    ------
    InvalidInputError
        If the capacities are not a mapping, list an agent twice, mix agent
        identifiers that cannot be ordered, or hold values that are not
        numeric, negative, infinite or NaN
    """
    if isinstance(capacity, pd.Series):
        series = capacity.copy()
    elif isinstance(capacity, Mapping):
        series = pd.Series(dict(capacity), dtype=object)
    else:
        raise InvalidInputError(
            "Capacity must be a mapping or pandas Series from agent to value, "
            f"got {type(capacity).__name__}"
        )

    if not series.index.is_unique:
        duplicated = series.index[series.index.duplicated()].unique().tolist()
        raise InvalidInputError(f"Capacity lists agents more than once: {duplicated}")

    try:
        series.index.sort_values()
    except TypeError as e:
        kinds = sorted({type(agent).__name__ for agent in series.index})
        raise InvalidInputError(
            "Agent identifiers must be mutually comparable (all strings or all "
            f"integers), got a mix of {', '.join(kinds)}"
        ) from e

    try:
        series = series.astype(float)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Capacity values must be numeric: {e}") from e

    invalid = series[~np.isfinite(series.to_numpy()) | (series.to_numpy() < 0)]
    if not invalid.empty:
        raise InvalidInputError(
            format_error(
                "negative_values",
                value_type="Capacity",
                entries=invalid.to_dict(),
            )
        )

    return series.rename("capacity").rename_axis(AGENT_LEVEL)


def validate_not_empty(capacity: pd.Series, operation: str) -> None:
    """
    Validate that at least one agent is present.

    Parameters
    ----------
    capacity
        Validated capacity series
    operation
        Name of the calling operation for error messages

    Raises
    ------
    InvalidInputError
        If there are no agents
    """
    if capacity.empty:
        raise InvalidInputError(format_error("empty_agent_set", operation=operation))


def validate_index_values(
    allocation: Mapping | pd.Series | Sequence[float] | np.ndarray, index_name: str
) -> np.ndarray:
    """
    Validate the values handed to an equality index.

    Parameters
    ----------
    allocation
        Mapping, series or sequence of allocation values
    index_name
        Name of the index being computed, for error messages

    Returns
    -------
    np.ndarray
        One-dimensional float array of the values

    Raises
    ------
    InvalidInputError
        If values are negative or non-finite, or if they sum to zero
        (including the empty allocation)
    """
    if isinstance(allocation, pd.Series):
        values = allocation.to_numpy(dtype=float)
    elif isinstance(allocation, Mapping):
        values = np.asarray(list(allocation.values()), dtype=float)
    else:
        values = np.asarray(allocation, dtype=float).ravel()

    if np.any(~np.isfinite(values)) or np.any(values < 0):
        raise InvalidInputError(
            format_error(
                "negative_values",
                value_type="Allocation",
                entries=values[~np.isfinite(values) | (values < 0)].tolist(),
            )
        )

    if values.size == 0 or values.sum() == 0:
        raise InvalidInputError(
            format_error("zero_sum_allocation", index_name=index_name, count=values.size)
        )

    return values
