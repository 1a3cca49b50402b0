"""
Built-in example scenario.

Three friends share a one-litre jug of beer. Alan drinks from a 250 ml glass,
Bill and Carl from 450 ml glasses, so together they could hold 1150 ml.
"""

from __future__ import annotations

from pathlib import Path

from fair_split.library.config.models import ChartConfig, ScenarioConfig

BEER_CAPACITY = {"Alan": 250.0, "Bill": 450.0, "Carl": 450.0}
BEER_RESOURCE = 1000.0
BEER_APPROACHES = [
    "null",
    "greedy",
    "maximin",
    "max-min-fair",
    "concurrent",
    "proportional",
    "egalitarian",
]


def create_example_scenario(
    output_dir: str | Path = "output/figures", charts: bool = True
) -> ScenarioConfig:
    """
    Create the beer-glasses scenario.

    Parameters
    ----------
    output_dir
        Where charts are written when enabled
    charts
        Whether the runner should render charts

    Returns
    -------
    ScenarioConfig
        Resource 1000 ml over capacities {Alan: 250, Bill: 450, Carl: 450}

    Examples
    --------
    >>> scenario = create_example_scenario(charts=False)
    >>> scenario.resource, sum(scenario.capacity.values())
    (1000.0, 1150.0)
    """
    return ScenarioConfig(
        name="beer-glasses",
        resource=BEER_RESOURCE,
        unit="ml",
        capacity=dict(BEER_CAPACITY),
        approaches=list(BEER_APPROACHES),
        charts=ChartConfig(enabled=charts, output_dir=Path(output_dir), y_max=450.0),
    )
