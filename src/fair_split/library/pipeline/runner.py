"""
Running a scenario end to end.

The runner turns a :class:`ScenarioConfig` into allocation results: it invokes
each configured approach in order through an :class:`AllocationManager`,
hands every allocation to a chart sink when one is configured, and tabulates
the results.
"""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd
from attrs import define, field

from fair_split.library.allocations.manager import AllocationManager
from fair_split.library.allocations.results import AllocationResult
from fair_split.library.config.models import ScenarioConfig
from fair_split.library.plotting import ChartSink, MatplotlibChartSink
from fair_split.library.solvers import ScipyConvexSolver

logger = logging.getLogger(__name__)


@define
class ScenarioRun:
    """Results of one scenario run.

    Attributes
    ----------
    scenario
        The configuration that was run
    results
        One result per approach, in configuration order
    summary
        Comparison table from :meth:`AllocationManager.summarise`
    charts
        Whatever the chart sink returned per approach (paths for
        :class:`MatplotlibChartSink`), empty without a sink
    """

    scenario: ScenarioConfig
    results: list[AllocationResult]
    summary: pd.DataFrame
    charts: list[Any] = field(factory=list)


@define
class AllocationRunner:
    """
    Run every approach of a scenario and optionally chart the allocations.

    Attributes
    ----------
    manager
        Manager the approaches are run through
    chart_sink
        Receives ``(capacity, allocation, label)`` per approach; no charts
        are rendered when None

    Examples
    --------
    >>> from fair_split.library.utils.examples import create_example_scenario
    >>> scenario = create_example_scenario(charts=False)
    >>> run = AllocationRunner.from_config(scenario).run(scenario)
    >>> run.summary["approach"].tolist()[:3]
    ['null', 'greedy', 'maximin']
    """

    manager: AllocationManager = field(factory=AllocationManager)
    chart_sink: ChartSink | None = None

    @classmethod
    def from_config(cls, scenario: ScenarioConfig) -> AllocationRunner:
        """
        Build a runner with the solver and chart settings of a scenario.

        Parameters
        ----------
        scenario : ScenarioConfig
            Validated scenario configuration

        Returns
        -------
        AllocationRunner
            Runner with a configured :class:`ScipyConvexSolver` and, when
            charts are enabled, a :class:`MatplotlibChartSink`
        """
        solver = ScipyConvexSolver(
            timeout=scenario.solver.timeout_seconds,
            max_iterations=scenario.solver.max_iterations,
            tolerance=scenario.solver.tolerance,
        )

        chart_sink = None
        charts = scenario.charts
        if charts.enabled:
            ylabel = f"{scenario.name} [{scenario.unit}]" if scenario.unit else None
            chart_sink = MatplotlibChartSink(
                output_dir=charts.output_dir,
                image_format=charts.image_format,
                width_inches=charts.width_inches,
                height_inches=charts.height_inches,
                ylabel=ylabel,
                y_max=charts.y_max,
            )

        return cls(manager=AllocationManager(solver=solver), chart_sink=chart_sink)

    def run(self, scenario: ScenarioConfig) -> ScenarioRun:
        """
        Run every configured approach in order.

        Parameters
        ----------
        scenario : ScenarioConfig
            Validated scenario configuration

        Returns
        -------
        ScenarioRun
            Results, summary table and rendered charts

        Raises
        ------
        FairSplitError
            Any allocation, validation or solver error propagates unchanged
        """
        logger.info(
            "Running scenario '%s': %d approaches over %d agents",
            scenario.name,
            len(scenario.approaches),
            len(scenario.capacity),
        )

        results = []
        charts = []
        for i, approach in enumerate(scenario.approaches, start=1):
            result = self.manager.run_allocation(
                approach=approach,
                capacity=scenario.capacity,
                resource=scenario.resource,
            )
            results.append(result)

            if self.chart_sink is not None:
                label = f"fig_{i}_{approach}"
                charts.append(
                    self.chart_sink.render(result.capacity, result.allocation, label)
                )

        return ScenarioRun(
            scenario=scenario,
            results=results,
            summary=self.manager.summarise(results),
            charts=charts,
        )
