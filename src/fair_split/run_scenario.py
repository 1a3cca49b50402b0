"""
Run a fair-split scenario from the command line.

"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

import pandas as pd

from fair_split.library.config import load_scenario_config, scenario_from_dict
from fair_split.library.config.models import ScenarioConfig
from fair_split.library.exceptions import ConfigurationError, FairSplitError
from fair_split.library.pipeline import AllocationRunner, ScenarioRun
from fair_split.library.utils.examples import create_example_scenario


def parse_capacity(items: list[str]) -> dict[str, float]:
    """
    Parse ``AGENT=VALUE`` pairs into a capacity mapping.

    Raises
    ------
    ConfigurationError
        If a pair is malformed or its value is not a number
    """
    capacity: dict[str, float] = {}
    for item in items:
        if "=" not in item:
            raise ConfigurationError(
                f"Invalid capacity format: {item}. Expected format: AGENT=VALUE"
            )
        agent, value = item.split("=", 1)
        try:
            capacity[agent.strip()] = float(value)
        except ValueError as e:
            raise ConfigurationError(
                f"Capacity of '{agent}' must be a number, got '{value}'"
            ) from e
    return capacity


def build_scenario(args: argparse.Namespace) -> ScenarioConfig:
    """
    Load the scenario named on the command line and apply overrides.

    Without ``--config`` the built-in beer-glasses scenario is used.
    """
    if args.config:
        scenario = load_scenario_config(args.config)
    else:
        scenario = create_example_scenario()

    overrides: dict[str, Any] = {}
    if args.approaches:
        overrides["approaches"] = args.approaches
    if args.resource is not None:
        overrides["resource"] = args.resource
    if args.capacity:
        overrides["capacity"] = parse_capacity(args.capacity)

    charts = scenario.charts.model_dump()
    if args.output_dir:
        charts["output_dir"] = args.output_dir
    if args.no_charts:
        charts["enabled"] = False
    overrides["charts"] = charts

    return scenario_from_dict({**scenario.model_dump(), **overrides})


def format_summary(run: ScenarioRun) -> str:
    """Render the summary table and per-agent allocations as text."""
    scenario = run.scenario
    unit = f" {scenario.unit}" if scenario.unit else ""

    allocations = pd.DataFrame(
        {result.approach: result.allocation for result in run.results}
    ).T
    allocations.index.name = "approach"

    lines = [
        f"Scenario: {scenario.name} (resource {scenario.resource:g}{unit})",
        "",
        allocations.round(2).to_string(),
        "",
        run.summary.round(4).to_string(index=False),
    ]
    for result in run.results:
        for agent, warning in (result.agent_warnings or {}).items():
            lines.append(f"warning: {result.approach} {agent}: {warning}")
    if run.charts:
        lines.append("")
        lines.extend(f"chart: {chart}" for chart in run.charts)
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> None:
    """
    Command-line interface for running scenarios.

    Usage
    -----
    Run the built-in beer-glasses example::

        fair-split-run --no-charts

    Run a scenario file, restricted to two approaches, with a larger jug::

        fair-split-run --config config/scenarios/beer-glasses.yaml
            --approach max-min-fair --approach jain --resource 1100
    """
    parser = argparse.ArgumentParser(
        description="Divide a resource among agents with capacities"
    )
    parser.add_argument("--config", help="Scenario YAML path (default: beer example)")
    parser.add_argument("--output-dir", help="Directory for chart files")
    parser.add_argument(
        "--approach",
        action="append",
        dest="approaches",
        help="Approach to run (can be specified multiple times)",
    )
    parser.add_argument("--resource", type=float, help="Override the resource")
    parser.add_argument(
        "--capacity",
        action="append",
        help="Capacity in AGENT=VALUE format (can be specified multiple times), "
        "replaces the scenario's capacities",
    )
    parser.add_argument("--no-charts", action="store_true", help="Skip chart output")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        scenario = build_scenario(args)
        run = AllocationRunner.from_config(scenario).run(scenario)
    except FairSplitError as e:
        sep_line = "=" * 80
        print(f"\n{sep_line}", file=sys.stderr)
        print("SCENARIO RUN FAILED", file=sys.stderr)
        print(sep_line, file=sys.stderr)
        print(f"\nScenario: {args.config or 'beer-glasses (built-in)'}", file=sys.stderr)
        print(f"Error Type: {type(e).__name__}", file=sys.stderr)
        print("\nError Details:", file=sys.stderr)
        print(str(e), file=sys.stderr)
        print(f"\n{sep_line}", file=sys.stderr)
        sys.exit(1)

    print(format_summary(run))


if __name__ == "__main__":
    main()
