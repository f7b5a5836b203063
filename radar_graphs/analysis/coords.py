from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import numpy as np

from radar_graphs.models.series import Bounds, Series


_EPS = 1e-12


def almost_equal(a: float, b: float) -> bool:
    return abs(a - b) <= _EPS


@dataclass(frozen=True)
class PlotRect:
    """Plot area in screen pixels (y grows downwards)."""
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def contains(self, px: float, py: float) -> bool:
        return self.left <= px <= self.right and self.top <= py <= self.bottom


# ---------------------------------------------------------------------------
# Fit to data
# ---------------------------------------------------------------------------


def _expand(lo: float, hi: float) -> Tuple[float, float]:
    """Pad by 5% of the span; a zero span is replaced by the value magnitude (or 1)."""
    span = hi - lo
    if span <= 0:
        span = max(abs(lo), abs(hi))
    if span == 0:
        span = 1.0
    pad = span * 0.05
    return lo - pad, hi + pad


def fit_to_data(series: Iterable[Series], current: Optional[Bounds] = None) -> Bounds:
    """
    Bounds covering every finite sample, padded by 5% per axis.

    Returns ``current`` unchanged (default bounds if None) when there is no finite sample,
    or when the padded box would overflow the float range.
    """
    fallback = current if current is not None else Bounds()
    min_x = min_y = math.inf
    max_x = max_y = -math.inf
    for s in series:
        ok = np.isfinite(s.x) & np.isfinite(s.y)
        if not np.any(ok):
            continue
        xs = s.x[ok]
        ys = s.y[ok]
        min_x = min(min_x, float(xs.min()))
        max_x = max(max_x, float(xs.max()))
        min_y = min(min_y, float(ys.min()))
        max_y = max(max_y, float(ys.max()))

    if not all(math.isfinite(v) for v in (min_x, max_x, min_y, max_y)):
        return fallback

    min_x, max_x = _expand(min_x, max_x)
    min_y, max_y = _expand(min_y, max_y)
    if almost_equal(max_x, min_x):
        min_x -= 0.5
        max_x += 0.5
    if almost_equal(max_y, min_y):
        min_y -= 0.5
        max_y += 0.5
    out = Bounds(min_x=min_x, max_x=max_x, min_y=min_y, max_y=max_y)
    if not all(math.isfinite(v) for v in (out.min_x, out.max_x, out.min_y, out.max_y, out.span_x, out.span_y)):
        return fallback
    return out


# ---------------------------------------------------------------------------
# Linear mapping
# ---------------------------------------------------------------------------


def _guard(d: float) -> float:
    if abs(d) >= _EPS:
        return d
    return _EPS if d >= 0 else -_EPS


def map_x(x: float, rect: PlotRect, min_x: float, max_x: float) -> float:
    return rect.left + (x - min_x) / _guard(max_x - min_x) * rect.width


def map_y(y: float, rect: PlotRect, min_y: float, max_y: float) -> float:
    """Data-up, screen-down."""
    return rect.bottom - (y - min_y) / _guard(max_y - min_y) * rect.height


def inv_map_x(px: float, rect: PlotRect, min_x: float, max_x: float) -> float:
    t = (px - rect.left) / max(_EPS, rect.width)
    return min_x + t * (max_x - min_x)


def inv_map_y(py: float, rect: PlotRect, min_y: float, max_y: float) -> float:
    t = (rect.bottom - py) / max(_EPS, rect.height)
    return min_y + t * (max_y - min_y)


# ---------------------------------------------------------------------------
# Nice ticks
# ---------------------------------------------------------------------------


def nice_num(x: float, round_: bool) -> float:
    """
    Closest "nice" number (1, 2, 5 or 10 times a power of ten).

    round_=True rounds to the nearest nice value, otherwise takes the next one up.
    """
    expv = math.floor(math.log10(x))
    f = x / 10.0 ** expv
    if round_:
        if f < 1.5:
            nf = 1.0
        elif f < 3:
            nf = 2.0
        elif f < 7:
            nf = 5.0
        else:
            nf = 10.0
    else:
        if f <= 1:
            nf = 1.0
        elif f <= 2:
            nf = 2.0
        elif f <= 5:
            nf = 5.0
        else:
            nf = 10.0
    return nf * 10.0 ** expv


def compute_nice_ticks(min_v: float, max_v: float, max_ticks: int) -> Tuple[List[float], float]:
    """
    Ticks at multiples of a nice step covering [floor(min/step)*step, ceil(max/step)*step].

    Returns (ticks, step).
    """
    if min_v > max_v:
        min_v, max_v = max_v, min_v
    if almost_equal(min_v, max_v):
        max_v = min_v + 1.0

    span = nice_num(max_v - min_v, round_=False)
    step = nice_num(span / max(1, int(max_ticks) - 1), round_=True)
    nice_min = math.floor(min_v / step) * step
    nice_max = math.ceil(max_v / step) * step

    n = int(math.floor((nice_max - nice_min) / step + 0.5)) + 1
    ticks = [nice_min + k * step for k in range(n)]
    return ticks, step


def format_tick(v: float, step: float) -> str:
    """
    Tick label text.

    Steps >= 1 use 6 significant digits, so labels on one axis may differ in decimal count.
    Smaller steps use a fixed decimal count derived from the step.
    """
    mag = max(abs(step), _EPS)
    if mag >= 1:
        return f"{v:.6g}"
    decimals = min(8, max(0, int(math.ceil(-math.log10(mag))) + 1))
    return f"{v:.{decimals}f}"
