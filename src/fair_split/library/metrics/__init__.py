"""
Equality indices for comparing allocations.

"""

from .equality import equality_indices, gini_index, jain_index

__all__ = ["equality_indices", "gini_index", "jain_index"]
