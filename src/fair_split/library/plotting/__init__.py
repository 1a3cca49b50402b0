"""Charts of allocations against capacities."""

from .charts import ChartSink, MatplotlibChartSink, plot_allocation

__all__ = ["ChartSink", "MatplotlibChartSink", "plot_allocation"]
