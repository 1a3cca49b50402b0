"""
Validation for the fair-split library.

"""

from .inputs import (
    validate_capacity,
    validate_index_values,
    validate_not_empty,
    validate_resource,
)
from .outputs import (
    find_over_capacity,
    validate_resource_conserved,
    validate_same_agents,
    validate_within_capacity,
)

__all__ = [
    "find_over_capacity",
    "validate_capacity",
    "validate_index_values",
    "validate_not_empty",
    "validate_resource",
    "validate_resource_conserved",
    "validate_same_agents",
    "validate_within_capacity",
]
