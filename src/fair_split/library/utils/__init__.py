"""
Utility functions for the fair-split library.

"""

from .parameters import filter_function_parameters, validate_function_parameters
from .series import (
    AGENT_LEVEL,
    AllocationSeries,
    CapacityLike,
    new_allocation,
    order_by_capacity,
)

__all__ = [
    "AGENT_LEVEL",
    "AllocationSeries",
    "CapacityLike",
    "filter_function_parameters",
    "new_allocation",
    "order_by_capacity",
    "validate_function_parameters",
]
