"""Screen-space scene composition for the main plot.

The chart never touches pixels. It produces an ordered list of primitives
(rectangles, lines, polylines, text, markers) in canvas pixels with y growing
downwards; a renderer draws them in list order, so later primitives sit on top.

Layering of :func:`build_plot_scene`:
  1. plot background and border
  2. grid lines and tick labels (only ticks inside the current bounds)
  3. axis lines and axis titles
  4. one polyline per series, clipped to the plot area
  5. legend panel (top-right corner of the plot)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from radar_graphs.analysis.coords import PlotRect, compute_nice_ticks, format_tick, map_x, map_y
from radar_graphs.chart.session import ChartSession, HoverResult, PlotLayout


PALETTE: Tuple[str, ...] = (
    "deepskyblue",
    "orangered",
    "limegreen",
    "mediumvioletred",
    "goldenrod",
    "mediumturquoise",
    "mediumorchid",
    "sandybrown",
    "dodgerblue",
    "indianred",
)

BACKGROUND = "#141414"
BORDER = "#404040"
GRID = "#323232"
TICK_LABEL = "#b4b4b4"
AXIS = "#a0a0a0"
TITLE = "white"
LEGEND_FILL = "#1e1e1e"
LEGEND_STROKE = "#505050"
GUIDE = "#b4b4b4"

# Rough glyph width as a fraction of the font size, used to size the legend box.
CHAR_WIDTH_FACTOR = 0.6


def palette_color(index: int) -> str:
    return PALETTE[index % len(PALETTE)]


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float
    fill: Optional[str] = None
    stroke: Optional[str] = None
    stroke_width: float = 1.0
    radius: float = 0.0
    alpha: float = 1.0


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str
    width: float = 1.0
    dash: Optional[Tuple[float, ...]] = None
    alpha: float = 1.0


@dataclass(frozen=True)
class Polyline:
    points: Tuple[Tuple[float, float], ...]
    stroke: str
    width: float = 1.8
    clip: Optional[PlotRect] = None


@dataclass(frozen=True)
class Text:
    """Anchored text. ha in {left, center, right}, va in {top, center, bottom}; rotation in degrees CCW."""
    x: float
    y: float
    text: str
    color: str
    size: float = 12.0
    ha: str = "left"
    va: str = "top"
    rotation: float = 0.0


@dataclass(frozen=True)
class Marker:
    x: float
    y: float
    fill: str
    stroke: str = "black"
    size: float = 7.0


Primitive = Union[Rect, Line, Polyline, Text, Marker]


def estimate_text_width(text: str, size: float) -> float:
    return len(text) * size * CHAR_WIDTH_FACTOR


def _axes_and_grid(session: ChartSession, rect: PlotRect, layout: PlotLayout) -> List[Primitive]:
    b = session.bounds
    out: List[Primitive] = [
        Rect(rect.left, rect.top, rect.width, rect.height, fill=BACKGROUND),
        Rect(rect.left, rect.top, rect.width, rect.height, stroke=BORDER),
    ]

    x_ticks, x_step = compute_nice_ticks(b.min_x, b.max_x, layout.max_ticks)
    y_ticks, y_step = compute_nice_ticks(b.min_y, b.max_y, layout.max_ticks)

    for y in y_ticks:
        if y < b.min_y or y > b.max_y:
            continue
        py = map_y(y, rect, b.min_y, b.max_y)
        out.append(Line(rect.left, py, rect.right, py, stroke=GRID, alpha=0.5))
        out.append(Text(rect.left - 8, py, format_tick(y, y_step), TICK_LABEL, ha="right", va="center"))

    for x in x_ticks:
        if x < b.min_x or x > b.max_x:
            continue
        px = map_x(x, rect, b.min_x, b.max_x)
        out.append(Line(px, rect.top, px, rect.bottom, stroke=GRID, alpha=0.5))
        out.append(Text(px, rect.bottom + 6, format_tick(x, x_step), TICK_LABEL, ha="center", va="top"))

    out.append(Line(rect.left, rect.bottom, rect.right, rect.bottom, stroke=AXIS, width=1.5))
    out.append(Line(rect.left, rect.top, rect.left, rect.bottom, stroke=AXIS, width=1.5))

    out.append(Text(rect.left + rect.width / 2, rect.bottom + 26, session.x_title, TITLE, size=13, ha="center", va="top"))
    out.append(Text(rect.left - 50, rect.top + rect.height / 2, session.y_title, TITLE, size=13,
                    ha="center", va="center", rotation=90.0))
    return out


def _series_lines(session: ChartSession, rect: PlotRect) -> List[Primitive]:
    b = session.bounds
    out: List[Primitive] = []
    for i, s in enumerate(session.series):
        if len(s) == 0:
            continue
        px = map_x(s.x, rect, b.min_x, b.max_x)
        py = map_y(s.y, rect, b.min_y, b.max_y)
        pts = tuple(zip(np.asarray(px).tolist(), np.asarray(py).tolist()))
        out.append(Polyline(points=pts, stroke=palette_color(i), clip=rect))
    return out


def _legend(names: Sequence[str], rect: PlotRect, *, font: float = 12.0) -> List[Primitive]:
    if not names:
        return []
    padding = 8.0
    swatch = 18.0
    spacing = 4.0
    row_h = max(swatch, font + 4) + spacing

    max_w = max(estimate_text_width(n, font) for n in names)
    total_h = row_h * len(names) - spacing
    box_w = padding + swatch + 8 + max_w + padding
    box_h = padding + total_h + padding
    x = rect.right - box_w - 8
    y = rect.top + 8

    out: List[Primitive] = [
        Rect(x, y, box_w, box_h, fill=LEGEND_FILL, stroke=LEGEND_STROKE, radius=6.0, alpha=200 / 255),
    ]
    cy = y + padding
    for i, name in enumerate(names):
        mid = cy + swatch / 2
        out.append(Line(x + padding, mid, x + padding + swatch, mid, stroke=palette_color(i), width=2.0))
        out.append(Text(x + padding + swatch + 8, mid, name, TITLE, size=font, va="center"))
        cy += row_h
    return out


def build_plot_scene(
    session: ChartSession,
    width: float,
    height: float,
    layout: Optional[PlotLayout] = None,
) -> List[Primitive]:
    """Primitives for the whole plot; empty when there is no data or no room to draw."""
    layout = layout or session.layout
    if width <= 0 or height <= 0 or not session.has_data:
        return []
    rect = layout.plot_rect(width, height)
    scene = _axes_and_grid(session, rect, layout)
    scene += _series_lines(session, rect)
    scene += _legend([s.name for s in session.series], rect)
    return scene


def build_hover_overlay(session: ChartSession, hover: HoverResult, rect: PlotRect) -> List[Primitive]:
    """Dashed guide line at the hovered x and, when snapped, a marker on the peak."""
    b = session.bounds
    px = map_x(hover.data_x, rect, b.min_x, b.max_x)
    out: List[Primitive] = [Line(px, rect.top, px, rect.bottom, stroke=GUIDE, dash=(3.0, 3.0))]
    if hover.snap is not None:
        out.append(Marker(
            map_x(hover.snap.x, rect, b.min_x, b.max_x),
            map_y(hover.snap.y, rect, b.min_y, b.max_y),
            fill=palette_color(hover.snap.series_index),
        ))
    return out
