"""Chart package - session state and scene composition.

- ChartSession: owns the loaded series, bounds, axis titles and per-series caches
- build_plot_scene / build_hover_overlay: screen-space primitives for a renderer
"""

from .session import BatchLoadResult, ChartSession, HoverResult, LoadResult, PlotLayout
from .scene import PALETTE, build_hover_overlay, build_plot_scene, palette_color

__all__ = [
    "BatchLoadResult",
    "ChartSession",
    "HoverResult",
    "LoadResult",
    "PlotLayout",
    "PALETTE",
    "build_hover_overlay",
    "build_plot_scene",
    "palette_color",
]
