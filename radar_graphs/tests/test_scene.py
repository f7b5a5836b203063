"""Tests for screen-space scene composition."""

from __future__ import annotations

from pathlib import Path

import pytest

from radar_graphs.analysis.coords import map_x
from radar_graphs.chart.scene import (
    PALETTE,
    Line,
    Marker,
    Polyline,
    Rect,
    Text,
    build_hover_overlay,
    build_plot_scene,
    palette_color,
)
from radar_graphs.chart.session import ChartSession


W, H = 640, 400


@pytest.fixture()
def session(tmp_path: Path) -> ChartSession:
    s = ChartSession()
    p1 = tmp_path / "one.csv"
    p1.write_text("time,voltage\n0,0\n1,1\n2,5\n3,1\n4,0\n", encoding="utf-8")
    p2 = tmp_path / "two.csv"
    p2.write_text("time,voltage\n0,1\n4,2\n", encoding="utf-8")
    s.load_file(p1)
    s.load_file(p2)
    return s


def test_palette_cycles() -> None:
    assert palette_color(0) == "deepskyblue"
    assert palette_color(len(PALETTE)) == palette_color(0)
    assert len(PALETTE) == 10


def test_empty_session_has_empty_scene() -> None:
    assert build_plot_scene(ChartSession(), W, H) == []


def test_zero_size_has_empty_scene(session: ChartSession) -> None:
    assert build_plot_scene(session, 0, H) == []


def test_scene_layers(session: ChartSession) -> None:
    scene = build_plot_scene(session, W, H)
    assert isinstance(scene[0], Rect) and scene[0].fill is not None
    assert isinstance(scene[1], Rect) and scene[1].stroke is not None

    polylines = [p for p in scene if isinstance(p, Polyline)]
    assert [p.stroke for p in polylines] == [palette_color(0), palette_color(1)]
    assert len(polylines[0].points) == 5
    rect = session.layout.plot_rect(W, H)
    assert all(p.clip == rect for p in polylines)

    # Legend comes last: panel, then a swatch and a label per series.
    texts = [p.text for p in scene if isinstance(p, Text)]
    assert texts[-2:] == ["one - voltage", "two - voltage"]
    assert isinstance(scene[-5], Rect)


def test_scene_titles(session: ChartSession) -> None:
    texts = [p for p in build_plot_scene(session, W, H) if isinstance(p, Text)]
    titles = {t.text: t for t in texts}
    assert titles["Time [s]"].rotation == 0.0
    assert titles["Voltage [V]"].rotation == 90.0


def test_tick_labels_inside_bounds(session: ChartSession) -> None:
    rect = session.layout.plot_rect(W, H)
    scene = build_plot_scene(session, W, H)
    grid = [p for p in scene if isinstance(p, Line) and p.alpha < 1.0]
    assert grid
    for g in grid:
        assert rect.left - 1e-6 <= g.x1 <= rect.right + 1e-6
        assert rect.top - 1e-6 <= g.y1 <= rect.bottom + 1e-6


def test_hover_overlay_with_snap(session: ChartSession) -> None:
    rect = session.layout.plot_rect(W, H)
    b = session.bounds
    hov = session.hover(map_x(2.0, rect, b.min_x, b.max_x), rect.top + 10, rect)
    overlay = build_hover_overlay(session, hov, rect)
    assert isinstance(overlay[0], Line)
    assert overlay[0].dash is not None
    assert isinstance(overlay[1], Marker)
    assert overlay[1].fill == palette_color(hov.snap.series_index)


def test_hover_overlay_without_snap(session: ChartSession) -> None:
    rect = session.layout.plot_rect(W, H)
    hov = session.hover(rect.left + 1, rect.top + 10, rect)
    overlay = build_hover_overlay(session, hov, rect)
    assert len(overlay) == 1
