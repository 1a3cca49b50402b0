"""
Used/unused capacity charts for allocations.

Each chart shows one stacked bar per agent: the allocated amount in orange and
the capacity left unused in light blue on top of it. Agents are sorted by
identifier so charts of different approaches line up.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

import matplotlib.pyplot as plt
from attrs import define, field
from matplotlib.axes import Axes

from fair_split.library.utils.series import CapacityLike
from fair_split.library.validation import validate_capacity

logger = logging.getLogger(__name__)

USED_COLOR = "orange"
UNUSED_COLOR = "lightblue"


@runtime_checkable
class ChartSink(Protocol):
    """Anything that can render one allocation against its capacities."""

    def render(self, capacity: CapacityLike, allocation: CapacityLike, label: str):
        """Render the allocation; the return value is sink specific."""
        ...


def plot_allocation(
    capacity: CapacityLike,
    allocation: CapacityLike,
    ax: Axes | None = None,
    ylabel: str | None = None,
    y_max: float | None = None,
    title: str | None = None,
) -> Axes:
    """
    Draw used and unused capacity per agent as stacked bars.

    Parameters
    ----------
    capacity : CapacityLike
        Capacity per agent
    allocation : CapacityLike
        Amount per agent, on the same agents as ``capacity``
    ax : Axes, optional
        Axes to draw on, a new figure is created when omitted
    ylabel : str, optional
        Label of the y axis (e.g. "beer [ml]")
    y_max : float, optional
        Upper y limit, defaults to the largest of capacity and allocation
    title : str, optional
        Axes title

    Returns
    -------
    Axes
        The axes drawn on
    """
    cap = validate_capacity(capacity).sort_index()
    alloc = validate_capacity(allocation).reindex(cap.index).fillna(0.0)
    unused = (cap - alloc).clip(lower=0.0)

    if ax is None:
        _, ax = plt.subplots(1, 1)

    agents = [str(agent) for agent in cap.index]
    ax.bar(agents, alloc.to_numpy(), color=USED_COLOR, label="allocated")
    ax.bar(
        agents,
        unused.to_numpy(),
        bottom=alloc.to_numpy(),
        color=UNUSED_COLOR,
        label="unused",
    )

    if y_max is None:
        y_max = max(float(cap.max()), float(alloc.max())) if len(cap) else 1.0
    ax.set_ylim(0, y_max if y_max > 0 else 1.0)
    if ylabel:
        ax.set_ylabel(ylabel)
    if title:
        ax.set_title(title)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    return ax


@define
class MatplotlibChartSink:
    """
    Chart sink writing one image file per rendered allocation.

    Attributes
    ----------
    output_dir
        Directory the figures are written to, created on first use
    image_format
        File extension and matplotlib format (default "svg")
    width_inches, height_inches
        Figure size
    ylabel
        Label of the y axis
    y_max
        Fixed upper y limit so charts of one scenario share a scale
    """

    output_dir: Path = field(converter=Path)
    image_format: str = "svg"
    width_inches: float = 4.0
    height_inches: float = 3.0
    ylabel: str | None = None
    y_max: float | None = None

    def render(
        self, capacity: CapacityLike, allocation: CapacityLike, label: str
    ) -> Path:
        """
        Write ``<label>.<image_format>`` into the output directory.

        Returns
        -------
        Path
            Path of the written figure
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"{label}.{self.image_format}"

        fig, ax = plt.subplots(1, 1, figsize=(self.width_inches, self.height_inches))
        try:
            plot_allocation(
                capacity, allocation, ax=ax, ylabel=self.ylabel, y_max=self.y_max
            )
            fig.tight_layout()
            fig.savefig(path, format=self.image_format)
        finally:
            plt.close(fig)

        logger.info("Wrote %s", path)
        return path
