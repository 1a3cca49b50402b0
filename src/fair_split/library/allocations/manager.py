"""
Manager for orchestrating allocation calculations.

This module provides the central interface for dividing a resource among agents
with capacities. It runs single allocations, expands parameter grids (for
example a sweep over resource levels), and tabulates results for comparison.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any

import pandas as pd
from attrs import define, field

from fair_split.library.allocations.registry import get_function
from fair_split.library.allocations.results import AllocationResult
from fair_split.library.exceptions import AllocationError
from fair_split.library.solvers import ConvexSolver, ScipyConvexSolver
from fair_split.library.utils.parameters import (
    filter_function_parameters,
    validate_function_parameters,
)
from fair_split.library.utils.series import CapacityLike
from fair_split.library.validation import validate_capacity, validate_resource

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = ["approach", "resource", "allocated", "unused", "jain", "gini"]


@define
class AllocationManager:
    """
    Manager for allocation operations with validation and result handling.

    This class provides a high-level interface for running allocations and
    collecting their results.

    Supported Approaches
    --------------------
    Combinatorial (no solver):

    - ``null``: nothing for anybody (baseline)
    - ``greedy``: largest capacities first (baseline)
    - ``maximin``: equal floor, then greedy top-up
    - ``max-min-fair``: water-filling
    - ``egalitarian``: equal floor only, leftovers wasted
    - ``concurrent``: same fraction of capacity for everybody (may exceed
      capacities when the resource exceeds their sum)

    Convex programs (delegated to ``solver``):

    - ``proportional``: maximize the sum of log shares
    - ``gini``: minimize total pairwise absolute difference
    - ``jain``: minimize the sum of squared shares

    Attributes
    ----------
    solver
        Convex solver handed to the optimization approaches
    """

    solver: ConvexSolver = field(factory=ScipyConvexSolver)

    def run_allocation(
        self,
        approach: str,
        capacity: CapacityLike,
        resource: float,
        **kwargs,
    ) -> AllocationResult:
        """
        Run a single allocation.

        This is the main method for running allocations. It handles:

        - Input validation
        - Parameter checking against the approach's signature
        - Function execution
        - Result validation

        Parameters
        ----------
        approach : str
            The allocation approach to use
        capacity : CapacityLike
            Maximum share per agent
        resource : float
            Total quantity to distribute
        **kwargs
            Additional parameters specific to the allocation approach

        Returns
        -------
        AllocationResult
            The validated allocation result

        Raises
        ------
        AllocationError
            If the approach is unknown or a parameter is not accepted
        InvalidInputError
            If the capacity or resource is malformed
        OptimizationFailureError
            If an optimization approach's solver fails

        Examples
        --------
        >>> manager = AllocationManager()
        >>> result = manager.run_allocation(
        ...     approach="max-min-fair",
        ...     capacity={"Alan": 250, "Bill": 450, "Carl": 450},
        ...     resource=1000,
        ... )
        >>> result.allocation.to_dict()
        {'Alan': 250.0, 'Bill': 375.0, 'Carl': 375.0}
        >>> result.unused_resource
        0.0
        """
        allocation_func = get_function(approach)

        cap = validate_capacity(capacity)
        value = validate_resource(resource)

        func_args = {"resource": value, "capacity": cap, "solver": self.solver, **kwargs}

        validate_function_parameters(allocation_func, func_args, optional={"solver"})
        filtered_args = filter_function_parameters(allocation_func, func_args)

        logger.info("Running %s with resource=%s over %d agents", approach, value, len(cap))
        allocation = allocation_func(**filtered_args)

        return AllocationResult(
            approach=approach,
            parameters={"resource": value, **kwargs},
            capacity=cap,
            allocation=allocation,
        )

    def run_allocations(
        self,
        approaches: list[str],
        capacity: CapacityLike,
        resource: float,
    ) -> list[AllocationResult]:
        """
        Run several approaches on the same scenario.

        Parameters
        ----------
        approaches : list[str]
            Approach names, run in order
        capacity : CapacityLike
            Maximum share per agent
        resource : float
            Total quantity to distribute

        Returns
        -------
        list[AllocationResult]
            One result per approach, in the order given
        """
        return [
            self.run_allocation(approach=approach, capacity=capacity, resource=resource)
            for approach in approaches
        ]

    def run_parameter_grid(
        self,
        allocations_config: dict[str, list[dict[str, Any]]],
        capacity: CapacityLike,
        resource: float | None = None,
    ) -> list[AllocationResult]:
        """
        Run allocations for all parameter combinations in a grid.

        This method expands the configuration into all possible parameter
        combinations and runs each allocation.

        Parameters
        ----------
        allocations_config : dict[str, list[dict[str, Any]]]
            Configuration dict with approach names as keys and lists of
            parameter dicts as values. Each parameter dict defines one
            configuration to run. Parameters within each dict can be single
            values or lists for grid expansion.
        capacity : CapacityLike
            Maximum share per agent, shared by every run
        resource : float, optional
            Default resource for parameter dicts that do not set one

        Returns
        -------
        list[AllocationResult]
            list of allocation results

        Raises
        ------
        AllocationError
            If the configuration is malformed or a run has no resource

        Examples
        --------
        Sweep the resource for water-filling:

        >>> manager = AllocationManager()
        >>> config = {"max-min-fair": [{"resource": [300, 600, 900]}]}
        >>> results = manager.run_parameter_grid(
        ...     allocations_config=config,
        ...     capacity={"Alan": 250, "Bill": 450, "Carl": 450},
        ... )
        >>> [r.allocation["Alan"] for r in results]
        [100.0, 200.0, 250.0]

        Notes
        -----
        Keys may be given in kebab-case (as in YAML files); they are
        converted to snake_case before the run. Any parameter value can be a
        list, and the method will create all combinations.
        """
        results = []

        for approach, params_list in allocations_config.items():
            logger.info("Processing approach: %s", approach)

            if not isinstance(params_list, list):
                raise AllocationError(
                    f"Invalid configuration for approach '{approach}': "
                    f"expected list of dicts, got {type(params_list)}. "
                    f"Please wrap parameter dicts in a list: "
                    f"[{{'param': value}}]"
                )

            for params in params_list:
                params = {k.replace("-", "_"): v for k, v in params.items()}
                if "resource" not in params:
                    if resource is None:
                        raise AllocationError(
                            f"No resource given for approach '{approach}'. "
                            "Set 'resource' in the parameter dict or pass a default."
                        )
                    params["resource"] = resource

                param_combinations = self._expand_parameters(params)
                logger.info(
                    "  Will run %d parameter combinations", len(param_combinations)
                )

                for param_combo in param_combinations:
                    logger.debug("    Running %s with params=%s", approach, param_combo)
                    results.append(
                        self.run_allocation(
                            approach=approach, capacity=capacity, **param_combo
                        )
                    )

        logger.info("Completed %d allocations successfully", len(results))
        return results

    def summarise(self, results: list[AllocationResult]) -> pd.DataFrame:
        """
        Tabulate results for comparison.

        Parameters
        ----------
        results : list[AllocationResult]
            Results to summarise

        Returns
        -------
        pd.DataFrame
            One row per result with columns ``approach``, ``resource``,
            ``allocated``, ``unused`` (resource left over), ``jain`` and
            ``gini``. The indices are NaN for allocations that hand out
            nothing.
        """
        rows = []
        for result in results:
            rows.append(
                {
                    "approach": result.approach,
                    "resource": result.resource,
                    "allocated": result.total,
                    "unused": result.unused_resource,
                    **result.equality_indices(),
                }
            )
        return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)

    def _to_list(self, value: Any) -> list[Any]:
        """Convert value to list if not already a list/tuple."""
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]

    def _expand_parameters(self, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Expand parameter lists into all combinations."""
        param_lists: dict[str, list[Any]] = {
            k: self._to_list(v) for k, v in params.items()
        }

        if not param_lists:
            return [{}]

        keys: list[str] = list(param_lists.keys())
        values: list[list[Any]] = list(param_lists.values())

        return [dict(zip(keys, combo)) for combo in itertools.product(*values)]
