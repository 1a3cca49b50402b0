"""
Keyword argument handling for allocation functions.

"""

from __future__ import annotations

import inspect
from typing import Any, Callable

from fair_split.library.error_messages import suggest_similar
from fair_split.library.exceptions import AllocationError


def filter_function_parameters(
    func: Callable, provided_params: dict[str, Any]
) -> dict[str, Any]:
    """
    Filter and prepare function parameters using function signatures.

    This function inspects the target function's signature and filters the provided
    parameters to only include those that exist in the function signature and are
    not None.

    Parameters
    ----------
    func : Callable
        The function whose parameters to filter
    provided_params : dict[str, Any]
        Parameters provided by the caller

    Returns
    -------
    dict[str, Any]
        Filtered function arguments ready for function call
    """
    sig = inspect.signature(func)
    return {
        k: v for k, v in provided_params.items() if k in sig.parameters and v is not None
    }


def validate_function_parameters(
    func: Callable, provided_params: dict[str, Any], optional: set[str] | None = None
) -> None:
    """
    Validate that keyword arguments are understood by an allocation function.

    Parameters
    ----------
    func : Callable
        The allocation function whose signature to check against
    provided_params : dict[str, Any]
        Parameters provided by the caller
    optional : set[str] | None
        Parameter names that may be dropped silently when the function
        does not take them (e.g. ``solver`` for combinatorial approaches)

    Raises
    ------
    AllocationError
        If a parameter is not accepted by the function
    """
    sig = inspect.signature(func)
    accepted = list(sig.parameters)
    optional = optional or set()

    for name in provided_params:
        if name not in sig.parameters and name not in optional:
            raise AllocationError(
                f"{func.__name__} does not accept parameter '{name}'. "
                f"{suggest_similar(name, accepted)}"
            )
