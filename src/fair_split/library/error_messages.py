"""
Error message templates for fair-split.

Messages follow WHAT/CAUSE/FIX structure.
"""

from __future__ import annotations

from difflib import get_close_matches

ERROR_MESSAGES = {
    "empty_agent_set": """
No agents provided to {operation}.

WHAT HAPPENED:
  The capacity mapping is empty, but {operation} divides the resource
  by the number of agents.

LIKELY CAUSE:
  - The scenario configuration lists no capacities
  - Filtering removed every agent

HOW TO FIX:
  Provide at least one agent:
  >>> {operation}(resource, {{"Alan": 250.0}})
""",
    "negative_values": """
Invalid {value_type} found.

WHAT HAPPENED:
  {value_type} must be finite and non-negative.
  Offending entries: {entries}

LIKELY CAUSE:
  Data entry error, unit conversion error, or missing values (NaN).

HOW TO FIX:
  Check your inputs for negative, infinite or missing values:
  >>> {{k: v for k, v in capacity.items() if not v >= 0}}
""",
    "zero_total_capacity": """
Total capacity is zero in {operation}.

WHAT HAPPENED:
  {operation} scales every capacity by resource / sum(capacity),
  but the capacities sum to zero.

LIKELY CAUSE:
  Every agent has zero capacity, or no agents were provided.

HOW TO FIX:
  Give at least one agent a positive capacity, or use an approach
  that does not compute a capacity ratio (e.g. max-min-fair).
""",
    "zero_sum_allocation": """
Cannot compute {index_name} for a zero-sum allocation.

WHAT HAPPENED:
  The allocation has {count} values and they sum to zero.
  The {index_name} divides by the allocation total.

LIKELY CAUSE:
  The allocation came from the null approach, the resource was zero,
  or no agents were provided.

HOW TO FIX:
  Only score allocations that hand out a positive amount:
  >>> if sum(allocation.values()) > 0:
  ...     score = {index_name}(allocation)
""",
    "solver_failure": """
Optimization failed for {approach}.

WHAT HAPPENED:
  The convex solver reported status '{status}'.
  Solver message: {reason}

LIKELY CAUSE:
  - infeasible: the resource exceeds the total capacity ({resource} > {total_capacity})
    while the program requires the whole resource to be allocated
  - not-converged / timed-out: the iteration or time limit was too tight

HOW TO FIX:
  1. Check that resource <= sum(capacity) for approaches that use the
     full resource (gini, jain)
  2. Or relax the solver limits:
     >>> ScipyConvexSolver(timeout=30.0, max_iterations=5000)
""",
    "feasibility_violated": """
Allocation from {approach} violates agent capacities.

WHAT HAPPENED:
  Some agents received an amount outside [0, capacity].
  Offending agents: {entries}

CONTEXT:
  Every approach except concurrent must respect 0 <= allocation <= capacity.

LIKELY CAUSE:
  Numerical precision issue or implementation bug.

HOW TO FIX:
  This is likely a bug. Please report it with the approach, the resource
  and the capacities used.
""",
    "resource_exceeded": """
Allocation from {approach} hands out more than the resource.

WHAT HAPPENED:
  The allocation sums to {total:.6f}, but the resource is {resource:.6f}.
  Difference: {difference:.6e}

LIKELY CAUSE:
  Numerical precision issue or implementation bug.

HOW TO FIX:
  This is likely a bug. Please report it with the approach, the resource
  and the capacities used.
""",
}


def format_error(key: str, **kwargs) -> str:
    """
    Format an error message with the given parameters.

    Parameters
    ----------
    key
        The error message key from ERROR_MESSAGES
    **kwargs
        Parameters to format into the message template

    Returns
    -------
    str
        The formatted error message
    """
    template = ERROR_MESSAGES.get(key)
    if template is None:
        return f"Unknown error: {key}"
    return template.format(**kwargs).strip()


def suggest_similar(
    value: str, valid_options: list[str], max_suggestions: int = 3
) -> str:
    """
    Suggest similar valid options for typos.

    Parameters
    ----------
    value
        The invalid value that was provided
    valid_options
        List of valid options to match against
    max_suggestions
        Maximum number of suggestions to return (default: 3)

    Returns
    -------
    str
        A formatted suggestion message
    """
    matches = get_close_matches(value, valid_options, n=max_suggestions, cutoff=0.6)
    if matches:
        return f"Did you mean: {', '.join(matches)}?"
    return f"Valid options: {', '.join(valid_options)}"
