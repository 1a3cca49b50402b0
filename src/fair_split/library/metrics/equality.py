"""
Equality indices for scoring allocations.

Both indices summarise the dispersion of an allocation's values in a single
number:

- Jain's fairness index, ``(sum x)^2 / (n * sum x^2)``, lies in ``[1/n, 1]``
  and equals 1 for a perfectly equal allocation.
- The Gini index, ``sum_i sum_j |x_i - x_j| / (2 n sum x)``, lies in
  ``[0, 1)`` and equals 0 for a perfectly equal allocation.

Neither is defined for an allocation that sums to zero.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import numpy as np
import pandas as pd

from fair_split.library.validation.inputs import validate_index_values

AllocationValues = Mapping | pd.Series | Sequence[float] | np.ndarray


def jain_index(allocation: AllocationValues) -> float:
    """
    Compute Jain's fairness index of an allocation.

    Parameters
    ----------
    allocation
        Allocation values, as a mapping, series or sequence

    Returns
    -------
    float
        Index in ``[1/n, 1]``; 1 means every agent received the same amount

    Raises
    ------
    InvalidInputError
        If the allocation is empty, sums to zero, or holds negative or
        non-finite values

    Examples
    --------
    >>> jain_index({"A": 250.0, "B": 250.0, "C": 250.0})
    1.0
    >>> round(jain_index([1.0, 0.0]), 3)
    0.5
    """
    values = validate_index_values(allocation, "jain_index")
    return float(values.sum() ** 2 / (values.size * np.square(values).sum()))


def gini_index(allocation: AllocationValues) -> float:
    """
    Compute the Gini index of an allocation.

    Parameters
    ----------
    allocation
        Allocation values, as a mapping, series or sequence

    Returns
    -------
    float
        Index in ``[0, 1)``; 0 means every agent received the same amount

    Raises
    ------
    InvalidInputError
        If the allocation is empty, sums to zero, or holds negative or
        non-finite values
    """
    values = validate_index_values(allocation, "gini_index")
    pairwise = np.abs(values[:, np.newaxis] - values[np.newaxis, :]).sum()
    return float(pairwise / (2 * values.size * values.sum()))


def equality_indices(allocation: AllocationValues) -> dict[str, float]:
    """Compute both equality indices, keyed ``"jain"`` and ``"gini"``."""
    return {"jain": jain_index(allocation), "gini": gini_index(allocation)}
