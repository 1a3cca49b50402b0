"""
Exceptions that are used throughout the fair-split library.

"""

from __future__ import annotations


class FairSplitError(Exception):
    """Base exception for fair-split library."""

    pass


class ConfigurationError(FairSplitError):
    """Raised when a scenario configuration is invalid or missing."""

    pass


class AllocationError(FairSplitError):
    """Raised when an allocation cannot be carried out."""

    pass


class OptimizationFailureError(AllocationError):
    """
    Raised when the convex solver cannot deliver an optimal point.

    The solver may report the program as infeasible, unbounded, not converged
    or timed out. The allocator never retries and never substitutes a partial
    result, so the failure reaches the caller unchanged.
    """

    def __init__(self, message: str, status: str, reason: str = "") -> None:
        """
        Initialise the error

        Parameters
        ----------
        message
            The formatted error message

        status
            The solver status name (e.g. ``"infeasible"``)

        reason
            The raw message reported by the solver
        """
        super().__init__(message)
        self.status = status
        self.reason = reason


class ValidationError(FairSplitError):
    """Base exception for validation errors."""

    pass


class InvalidInputError(ValidationError):
    """
    Raised when allocation or metric inputs are malformed.

    Covers empty agent sets where a division by the agent count occurs,
    negative or non-finite resource and capacity values, a zero total capacity
    where a ratio is computed and zero-sum allocations handed to an equality
    index. Raised before any computation proceeds.
    """

    pass


class OutputValidationError(ValidationError):
    """
    Raised when an allocation result breaks its invariants.

    Output validation checks that every agent receives between zero and its
    capacity and that no more than the resource is handed out.
    """

    pass
