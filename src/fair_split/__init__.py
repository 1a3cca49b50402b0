"""
fair-split: dividing one divisible resource among agents with capacities.

"""

__version__ = "0.1.0"
