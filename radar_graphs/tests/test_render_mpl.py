"""Headless tests for the Matplotlib renderer and image export."""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.image as mpimg  # noqa: E402
import pytest  # noqa: E402
from matplotlib.colors import to_rgba  # noqa: E402
from matplotlib.lines import Line2D  # noqa: E402

from radar_graphs.analysis.aggregate import PieItem  # noqa: E402
from radar_graphs.chart.scene import Line, Marker, Polyline, Rect, Text, build_plot_scene, palette_color  # noqa: E402
from radar_graphs.chart.session import ChartSession  # noqa: E402
from radar_graphs.gui.render_mpl import (  # noqa: E402
    draw_primitives,
    export_figure,
    new_canvas,
    render_pie,
    render_scene,
)


def test_new_canvas_is_pixel_space() -> None:
    fig = new_canvas(300, 200)
    ax = fig.axes[0]
    assert ax.get_xlim() == (0.0, 300.0)
    assert ax.get_ylim() == (200.0, 0.0)


def test_draw_primitives_returns_one_artist_each() -> None:
    fig = new_canvas(300, 200)
    prims = [
        Rect(10, 10, 100, 50, fill="black"),
        Line(0, 0, 10, 10, stroke="red", dash=(3.0, 3.0)),
        Polyline(points=((0.0, 0.0), (5.0, 5.0), (10.0, 0.0)), stroke="blue"),
        Text(5, 5, "hello", "white"),
        Marker(20, 20, fill="green"),
    ]
    artists = draw_primitives(fig.axes[0], prims)
    assert len(artists) == len(prims)
    for a in artists:
        a.remove()
    assert not fig.axes[0].lines


def test_single_point_polyline_draws_nothing() -> None:
    fig = new_canvas(100, 100)
    assert draw_primitives(fig.axes[0], [Polyline(points=((1.0, 1.0),), stroke="red")]) == []


def test_render_scene_from_session(tmp_path: Path) -> None:
    p = tmp_path / "s.csv"
    p.write_text("time,voltage\n0,0\n1,2\n2,1\n", encoding="utf-8")
    s = ChartSession()
    s.load_file(p)
    fig = render_scene(build_plot_scene(s, 400, 300), 400, 300)
    series_lines = [ln for ln in fig.axes[0].lines if isinstance(ln, Line2D) and len(ln.get_xdata()) == 3]
    assert len(series_lines) == 1


def test_export_png_is_double_size(tmp_path: Path) -> None:
    fig = render_scene([Rect(0, 0, 50, 50, fill="red")], 300, 200)
    out = export_figure(fig, tmp_path / "chart.png")
    img = mpimg.imread(out)
    assert img.shape[:2] == (400, 600)


def test_export_jpeg(tmp_path: Path) -> None:
    fig = render_scene([Rect(0, 0, 50, 50, fill="red")], 300, 200)
    out = export_figure(fig, tmp_path / "chart.JPG")
    assert out.exists()
    assert out.stat().st_size > 0


def test_export_rejects_unknown_format(tmp_path: Path) -> None:
    fig = render_scene([], 100, 100)
    with pytest.raises(ValueError):
        export_figure(fig, tmp_path / "chart.bmp")


def test_render_pie() -> None:
    fig = render_pie([PieItem("a", 1.0, 0), PieItem("b", 3.0, 1)])
    ax_pie, ax_txt = fig.axes
    assert len(ax_pie.patches) == 2
    texts = [t.get_text() for t in ax_txt.texts]
    assert texts[0].startswith("b — 3")
    assert texts[-1] == "Total: 4"


def test_render_pie_starts_at_top_and_runs_clockwise() -> None:
    fig = render_pie([PieItem("a", 1.0, 0), PieItem("b", 3.0, 1)])
    first, second = fig.axes[0].patches
    assert (first.theta1, first.theta2) == pytest.approx((0.0, 90.0))
    assert (second.theta1, second.theta2) == pytest.approx((-270.0, 0.0))
    assert first.get_facecolor() == pytest.approx(to_rgba(palette_color(0)))


def test_render_pie_empty() -> None:
    fig = render_pie([])
    assert any("Nothing to show" in t.get_text() for t in fig.axes[1].texts)
