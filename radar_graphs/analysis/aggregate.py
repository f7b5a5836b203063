from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np
import pandas as pd

from radar_graphs.models.series import Series


def area_abs(x: np.ndarray, y: np.ndarray) -> float:
    """
    Trapezoidal integral of |y| over x.

    Pairs containing a non-finite coordinate and zero-width steps are skipped;
    the width of each step is taken as |dx| so unsorted samples still add up.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.size < 2:
        return 0.0
    x0, x1 = x[:-1], x[1:]
    y0, y1 = y[:-1], y[1:]
    dx = x1 - x0
    ok = np.isfinite(x0) & np.isfinite(x1) & np.isfinite(y0) & np.isfinite(y1) & (dx != 0)
    avg_abs_y = 0.5 * (np.abs(y0[ok]) + np.abs(y1[ok]))
    return float(np.sum(np.abs(dx[ok]) * avg_abs_y))


@dataclass(frozen=True)
class PieItem:
    """One positive scalar per series; series_index selects the palette colour."""
    name: str
    value: float
    series_index: int


@dataclass(frozen=True)
class PieSlice:
    item: PieItem
    start_deg: float
    sweep_deg: float
    percent: float


def pie_items(series: Sequence[Series]) -> List[PieItem]:
    """Area per series, keeping only finite values > 0. An empty list means nothing to show."""
    items: List[PieItem] = []
    for i, s in enumerate(series):
        val = area_abs(s.x, s.y)
        if not math.isfinite(val) or val <= 0:
            continue
        items.append(PieItem(name=s.name, value=val, series_index=i))
    return items


def pie_slices(items: Sequence[PieItem], start_deg: float = -90.0) -> List[PieSlice]:
    """Clockwise slices starting at the top, in item order."""
    total = sum(max(0.0, it.value) for it in items)
    if total <= 0:
        return []
    out: List[PieSlice] = []
    angle = start_deg
    for it in items:
        if it.value <= 0:
            continue
        sweep = it.value / total * 360.0
        out.append(PieSlice(item=it, start_deg=angle, sweep_deg=sweep, percent=it.value / total * 100.0))
        angle += sweep
    return out


def pie_legend_lines(items: Sequence[PieItem]) -> List[str]:
    """Legend text, largest value first."""
    total = sum(max(0.0, it.value) for it in items)
    lines = []
    for it in sorted(items, key=lambda i: i.value, reverse=True):
        pct = it.value / total * 100.0 if total > 0 else 0.0
        lines.append(f"{it.name} — {it.value:.4g} ({pct:.1f}%)")
    return lines


def area_summary(series: Sequence[Series]) -> pd.DataFrame:
    """Per-series table: name, n_points, area_abs, percent of the positive total."""
    rows = []
    for s in series:
        rows.append({"name": s.name, "n_points": len(s), "area_abs": area_abs(s.x, s.y)})
    df = pd.DataFrame(rows, columns=["name", "n_points", "area_abs"])
    positive = df["area_abs"].where(df["area_abs"] > 0, 0.0)
    total = float(positive.sum())
    df["percent"] = positive / total * 100.0 if total > 0 else 0.0
    return df


def pie_total_line(items: Sequence[PieItem]) -> str:
    total = sum(max(0.0, it.value) for it in items)
    return f"Total: {total:.6g}"
