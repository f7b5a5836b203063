"""Analysis package - numeric engines behind the chart.

Design principle:
  - Ingest produces validated :class:`~radar_graphs.models.series.Series` objects (finite samples only).
  - Analysis consumes series and produces bounds, ticks, interpolated values, peaks and areas.

None of these functions touch pixels; screen coordinates appear only as plain floats
through :class:`~radar_graphs.analysis.coords.PlotRect`.
"""

from .coords import PlotRect, compute_nice_ticks, fit_to_data, format_tick, inv_map_x, map_x, map_y
from .peaks import interpolate_y_at_x, peak_indices, sorted_view
from .aggregate import area_abs, pie_items, pie_legend_lines, pie_slices, pie_total_line

__all__ = [
    "PlotRect",
    "compute_nice_ticks",
    "fit_to_data",
    "format_tick",
    "inv_map_x",
    "map_x",
    "map_y",
    "interpolate_y_at_x",
    "peak_indices",
    "sorted_view",
    "area_abs",
    "pie_items",
    "pie_legend_lines",
    "pie_slices",
    "pie_total_line",
]
