"""
Main components for the fair-split library.

Nothing is exported from this module, users should import from specific submodules:
- fair_split.library.allocations (allocation functions, manager, results)
- fair_split.library.metrics (Jain and Gini equality indices)
- fair_split.library.solvers (convex solver interface and SciPy backend)
- fair_split.library.plotting (used/unused capacity charts)
- fair_split.library.pipeline (scenario runner)
- fair_split.library.validation (validation functions)
"""

from __future__ import annotations
