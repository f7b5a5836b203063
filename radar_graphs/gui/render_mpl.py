"""
Matplotlib rendering of chart scenes and the area pie, plus image export.

Figures are built with ``matplotlib.figure.Figure`` directly (no pyplot state),
so they render under any backend, including headless Agg.

The plot axes span the whole figure in pixel units with y growing downwards,
which is the coordinate system the scene primitives are expressed in.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from matplotlib.artist import Artist
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib.patches import FancyBboxPatch, Rectangle, Wedge

from radar_graphs.analysis.aggregate import PieItem, pie_legend_lines, pie_slices, pie_total_line
from radar_graphs.chart.scene import Line, Marker, Polyline, Primitive, Rect, Text, palette_color


DEFAULT_DPI = 100
EXPORT_SCALE = 2
CANVAS_BACKGROUND = "#1b1b1b"


def _pt(px: float, dpi: float) -> float:
    return px * 72.0 / dpi


def new_canvas(width: float, height: float, *, dpi: int = DEFAULT_DPI, fig: Optional[Figure] = None) -> Figure:
    """Figure of ``width`` x ``height`` px with a single pixel-space axes (origin top-left)."""
    if fig is None:
        fig = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
    else:
        fig.clear()
    fig.patch.set_facecolor(CANVAS_BACKGROUND)
    ax = fig.add_axes((0.0, 0.0, 1.0, 1.0))
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.set_axis_off()
    return fig


def draw_primitives(ax, primitives: Iterable[Primitive]) -> List[Artist]:
    """Add one artist per primitive, in order; returns the artists so callers can remove them later."""
    dpi = ax.figure.dpi
    artists: List[Artist] = []
    for p in primitives:
        if isinstance(p, Rect):
            style = f"round,pad=0,rounding_size={p.radius}" if p.radius > 0 else "square,pad=0"
            artists.append(ax.add_patch(FancyBboxPatch(
                (p.left, p.top), p.width, p.height,
                boxstyle=style,
                facecolor=p.fill if p.fill is not None else "none",
                edgecolor=p.stroke if p.stroke is not None else "none",
                linewidth=_pt(p.stroke_width, dpi),
                alpha=p.alpha,
            )))
        elif isinstance(p, Line):
            artists.append(ax.add_line(Line2D(
                [p.x1, p.x2], [p.y1, p.y2],
                color=p.stroke,
                linewidth=_pt(p.width, dpi),
                linestyle=(0, p.dash) if p.dash else "-",
                alpha=p.alpha,
            )))
        elif isinstance(p, Polyline):
            if len(p.points) < 2:
                continue
            xs, ys = zip(*p.points)
            line = Line2D(xs, ys, color=p.stroke, linewidth=_pt(p.width, dpi))
            artists.append(ax.add_line(line))
            if p.clip is not None:
                line.set_clip_path(Rectangle((p.clip.left, p.clip.top), p.clip.width, p.clip.height,
                                             transform=ax.transData))
        elif isinstance(p, Text):
            artists.append(ax.text(
                p.x, p.y, p.text,
                color=p.color,
                fontsize=_pt(p.size, dpi),
                ha=p.ha,
                va=p.va,
                rotation=p.rotation,
                rotation_mode="anchor",
            ))
        elif isinstance(p, Marker):
            artists.extend(ax.plot(
                [p.x], [p.y],
                marker="o",
                markersize=_pt(p.size, dpi),
                markerfacecolor=p.fill,
                markeredgecolor=p.stroke,
                linestyle="none",
            ))
        else:
            raise TypeError(f"Unsupported primitive: {type(p).__name__}")
    return artists


def render_scene(
    primitives: Sequence[Primitive],
    width: float,
    height: float,
    *,
    dpi: int = DEFAULT_DPI,
    fig: Optional[Figure] = None,
) -> Figure:
    fig = new_canvas(width, height, dpi=dpi, fig=fig)
    draw_primitives(fig.axes[0], primitives)
    return fig


def render_pie(
    items: Sequence[PieItem],
    *,
    width: float = 720,
    height: float = 420,
    dpi: int = DEFAULT_DPI,
    fig: Optional[Figure] = None,
) -> Figure:
    """
    Pie of positive per-series areas with a legend column and the total.

    Slices start at the top and run clockwise in item order; legend rows are
    sorted by descending value.
    """
    if fig is None:
        fig = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
    else:
        fig.clear()
    fig.patch.set_facecolor("white")
    ax_pie = fig.add_axes((0.02, 0.05, 0.5, 0.9))
    ax_txt = fig.add_axes((0.55, 0.05, 0.43, 0.9))
    ax_txt.set_axis_off()

    if not items:
        ax_pie.set_axis_off()
        ax_txt.text(0.0, 0.5, "Nothing to show: no series has a positive area.", va="center")
        return fig

    # Slice angles are screen angles (y down); matplotlib measures counter-clockwise with y up.
    for sl in pie_slices(items):
        ax_pie.add_patch(Wedge(
            (0.0, 0.0), 1.0,
            -(sl.start_deg + sl.sweep_deg), -sl.start_deg,
            facecolor=palette_color(sl.item.series_index),
            edgecolor="white",
            linewidth=1.0,
        ))
    ax_pie.set_xlim(-1.05, 1.05)
    ax_pie.set_ylim(-1.05, 1.05)
    ax_pie.set_aspect("equal")
    ax_pie.set_axis_off()

    ordered = sorted(items, key=lambda i: i.value, reverse=True)
    lines = pie_legend_lines(items)
    n = len(lines) + 1
    step = min(0.08, 0.9 / n)
    y = 0.95
    for it, text in zip(ordered, lines):
        ax_txt.add_patch(Rectangle((0.0, y - 0.025), 0.04, 0.04, color=palette_color(it.series_index),
                                   transform=ax_txt.transAxes))
        ax_txt.text(0.06, y, text, va="center", fontsize=9, transform=ax_txt.transAxes)
        y -= step
    ax_txt.text(0.0, y - step / 2, pie_total_line(items), va="center", fontsize=10,
                fontweight="bold", transform=ax_txt.transAxes)
    return fig


def export_figure(fig: Figure, path: Union[str, Path], *, scale: int = EXPORT_SCALE) -> Path:
    """
    Save ``fig`` at ``scale`` times its screen resolution.

    The format follows the suffix: ``.png`` keeps a transparent background,
    ``.jpg``/``.jpeg`` are flattened on white.
    """
    p = Path(path)
    ext = p.suffix.lower()
    dpi = fig.dpi * scale
    if ext == ".png":
        fig.savefig(p, format="png", dpi=dpi, transparent=True)
    elif ext in (".jpg", ".jpeg"):
        fig.savefig(p, format="jpeg", dpi=dpi, facecolor="white")
    else:
        raise ValueError(f"Unsupported export format '{p.suffix}' (use .png, .jpg or .jpeg)")
    return p
