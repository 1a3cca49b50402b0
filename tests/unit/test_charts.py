"""
Tests for allocation charts for the fair-split library.

"""

from __future__ import annotations

import matplotlib.pyplot as plt
import pytest
from matplotlib.colors import to_rgba
from conftest import BEER_CAPACITY

from fair_split.library.plotting import ChartSink, MatplotlibChartSink, plot_allocation
from fair_split.library.plotting.charts import UNUSED_COLOR, USED_COLOR

MMF_BEER = {"Alan": 250.0, "Bill": 375.0, "Carl": 375.0}


class TestPlotAllocation:
    """Test drawing one allocation."""

    def test_stacked_bars(self):
        """One used and one unused bar per agent, sorted by agent."""
        fig, ax = plt.subplots()
        try:
            plot_allocation(
                {"Carl": 450.0, "Alan": 250.0, "Bill": 450.0}, MMF_BEER, ax=ax
            )
            fig.canvas.draw()
            patches = ax.patches
            assert len(patches) == 6

            labels = [tick.get_text() for tick in ax.get_xticklabels()]
            assert labels == ["Alan", "Bill", "Carl"]

            used = [p.get_height() for p in patches[:3]]
            unused = [p.get_height() for p in patches[3:]]
            assert used == [250.0, 375.0, 375.0]
            assert unused == [0.0, 75.0, 75.0]
        finally:
            plt.close(fig)

    def test_colours_and_limits(self):
        """Used capacity is orange, unused light blue, y from zero to y_max."""
        fig, ax = plt.subplots()
        try:
            plot_allocation(
                BEER_CAPACITY, MMF_BEER, ax=ax, ylabel="beer [ml]", y_max=450
            )
            assert ax.patches[0].get_facecolor() == pytest.approx(
                to_rgba(USED_COLOR)
            )
            assert ax.patches[-1].get_facecolor() == pytest.approx(
                to_rgba(UNUSED_COLOR)
            )
            assert ax.get_ylim() == (0.0, 450.0)
            assert ax.get_ylabel() == "beer [ml]"
        finally:
            plt.close(fig)

    def test_default_y_limit(self):
        """Without y_max the largest capacity sets the scale."""
        ax = plot_allocation(BEER_CAPACITY, MMF_BEER)
        try:
            assert ax.get_ylim()[1] == 450.0
        finally:
            plt.close(ax.figure)


class TestMatplotlibChartSink:
    """Test writing charts to files."""

    def test_is_chart_sink(self, tmp_path):
        """The matplotlib sink satisfies the ChartSink protocol."""
        assert isinstance(MatplotlibChartSink(output_dir=tmp_path), ChartSink)

    def test_writes_svg(self, tmp_path):
        """Charts are written as <label>.svg by default."""
        sink = MatplotlibChartSink(output_dir=tmp_path / "figures")
        path = sink.render(BEER_CAPACITY, MMF_BEER, "fig_4_max-min-fair")
        assert path == tmp_path / "figures" / "fig_4_max-min-fair.svg"
        assert path.exists()
        assert "<svg" in path.read_text()

    def test_writes_png(self, tmp_path):
        """Other matplotlib formats work too."""
        sink = MatplotlibChartSink(output_dir=str(tmp_path), image_format="png")
        path = sink.render(BEER_CAPACITY, MMF_BEER, "chart")
        assert path.suffix == ".png"
        assert path.read_bytes()[:4] == b"\x89PNG"

    def test_figures_are_closed(self, tmp_path):
        """Rendering does not leave figures open."""
        before = len(plt.get_fignums())
        sink = MatplotlibChartSink(output_dir=tmp_path)
        for i in range(3):
            sink.render(BEER_CAPACITY, MMF_BEER, f"fig_{i}")
        assert len(plt.get_fignums()) == before
