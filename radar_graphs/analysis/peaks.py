"""Hover support: sorted views, interpolation, local maxima and snap-to-peak.

All functions work on a series' *sorted view* (samples ordered by x). Building the
view is O(n) when the samples are already monotonic, which is the common case for
time-series files.

Snap search
  Each series contributes at most the two peaks bracketing the cursor x. Among all
  contributions within the x tolerance the highest y wins; equal y (within 1e-12)
  prefers the smaller distance to the cursor. The search is global across series.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from radar_graphs.models.series import Series


PLATEAU_EPS = 1e-12


def is_monotonic_by_x(x: np.ndarray) -> bool:
    return bool(x.size < 2 or np.all(np.diff(x) >= 0))


def sorted_view(series: Series) -> Tuple[np.ndarray, np.ndarray]:
    """(x, y) ordered ascending by x; the series' own arrays if already monotonic."""
    if is_monotonic_by_x(series.x):
        return series.x, series.y
    order = np.argsort(series.x, kind="stable")
    return series.x[order], series.y[order]


def interpolate_y_at_x(x: np.ndarray, y: np.ndarray, at: float) -> Optional[float]:
    """
    Linear interpolation on a sorted view, clamped to the end values.

    Returns None for an empty view.
    """
    n = int(x.size)
    if n == 0:
        return None
    if n == 1:
        return float(y[0])
    if at <= x[0]:
        return float(y[0])
    if at >= x[n - 1]:
        return float(y[n - 1])

    # x[lo] <= at < x[hi]
    hi = int(np.searchsorted(x, at, side="right"))
    lo = hi - 1
    dx = float(x[hi] - x[lo])
    if dx == 0:
        return float(y[lo])
    t = (at - float(x[lo])) / dx
    return float(y[lo] + t * (y[hi] - y[lo]))


def peak_indices(y: Sequence[float]) -> List[int]:
    """
    Indices of local maxima.

    A strict maximum ``y[i-1] < y[i] > y[i+1]`` is a peak. A flat run entered from below
    and left downwards is one peak at the run's midpoint; a run that is left upwards or
    reaches the end is not a peak.
    """
    ys = [float(v) for v in y]
    n = len(ys)
    peaks: List[int] = []
    if n < 2:
        return peaks

    i = 1
    while i < n - 1:
        y0, y1, y2 = ys[i - 1], ys[i], ys[i + 1]

        if y1 > y0 and y1 > y2:
            peaks.append(i)
            i += 1
            continue

        if y1 > y0 and abs(y1 - y2) < PLATEAU_EPS:
            start = i
            j = i + 1
            while j < n and abs(ys[j] - y1) < PLATEAU_EPS:
                j += 1
            if j < n and ys[j] < y1:
                peaks.append((start + (j - 1)) // 2)
            i = j
            continue

        i += 1
    return peaks


def snap_tolerance(pixel_radius: float, plot_width_px: float, min_x: float, max_x: float) -> float:
    """Data-space x distance equivalent to ``pixel_radius`` screen pixels."""
    return abs(pixel_radius / max(1e-12, plot_width_px)) * (max_x - min_x)


@dataclass(frozen=True)
class PeakCandidate:
    series_index: int
    x: float
    y: float
    dx: float


@dataclass(frozen=True)
class SnapHit:
    """Peak chosen by the snap search."""
    series_index: int
    x: float
    y: float
    dx: float


def bracketing_peaks(x: np.ndarray, peaks: Sequence[int], at: float) -> List[int]:
    """The one or two peaks (indices into the sorted view) adjacent to ``at``."""
    if not peaks:
        return []
    lo, hi = 0, len(peaks) - 1
    while hi - lo > 1:
        mid = (lo + hi) >> 1
        if x[peaks[mid]] <= at:
            lo = mid
        else:
            hi = mid
    return [peaks[k] for k in (lo, lo + 1) if 0 <= k < len(peaks)]


def _prefer(best: Optional[PeakCandidate], cand: PeakCandidate) -> Optional[PeakCandidate]:
    if best is None:
        return cand
    if cand.y > best.y or (abs(cand.y - best.y) <= PLATEAU_EPS and cand.dx < best.dx):
        return cand
    return best


def find_snap_peak(candidates: Iterable[PeakCandidate], dx_tol: float) -> Optional[SnapHit]:
    """Best candidate within ``dx_tol``, or None."""
    within = (c for c in candidates if c.dx <= dx_tol)
    best = reduce(_prefer, within, None)
    if best is None or not (np.isfinite(best.x) and np.isfinite(best.y)):
        return None
    return SnapHit(series_index=best.series_index, x=best.x, y=best.y, dx=best.dx)


def peak_candidates(
    series_index: int,
    x: np.ndarray,
    y: np.ndarray,
    peaks: Sequence[int],
    at: float,
) -> List[PeakCandidate]:
    return [
        PeakCandidate(series_index=series_index, x=float(x[i]), y=float(y[i]), dx=abs(float(x[i]) - at))
        for i in bracketing_peaks(x, peaks, at)
    ]
