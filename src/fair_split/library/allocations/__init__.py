"""
Allocation approaches, orchestration and result handling for fair-split.

"""

from .manager import AllocationManager
from .registry import (
    allows_over_allocation,
    get_allocation_functions,
    get_function,
    is_optimization_approach,
)
from .results import AllocationResult

__all__ = [
    "AllocationManager",
    "AllocationResult",
    "allows_over_allocation",
    "get_allocation_functions",
    "get_function",
    "is_optimization_approach",
]
