from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from radar_graphs.models.series import Bounds, Series
from radar_graphs.ingest.csv_rows import LoaderConfig, read_rows
from radar_graphs.ingest.errors import IngestError
from radar_graphs.ingest.series_builder import build_series, merge_axis_titles
from radar_graphs.analysis.coords import PlotRect, fit_to_data, inv_map_x
from radar_graphs.analysis.aggregate import PieItem, area_summary, pie_items
from radar_graphs.analysis.peaks import (
    SnapHit,
    find_snap_peak,
    interpolate_y_at_x,
    peak_candidates,
    peak_indices,
    snap_tolerance,
    sorted_view,
)


DEFAULT_X_TITLE = "X"
DEFAULT_Y_TITLE = "Y"
FALLBACK_X_TITLE = "Sample"
FALLBACK_Y_TITLE = "Value"


@dataclass(frozen=True)
class PlotLayout:
    """
    Screen layout of the main plot.

    left/right/top/bottom:
      Margins (px) around the plot area, reserved for tick labels, axis titles and the legend.
    max_ticks:
      Upper bound used by the nice-tick step computation.
    snap_pixel_radius:
      How close (px) the pointer must be to a peak to snap to it.
    """
    left: float = 80.0
    right: float = 20.0
    top: float = 20.0
    bottom: float = 60.0
    max_ticks: int = 8
    snap_pixel_radius: float = 10.0

    def plot_rect(self, width: float, height: float) -> PlotRect:
        return PlotRect(
            left=self.left,
            top=self.top,
            width=max(0.0, width - self.left - self.right),
            height=max(0.0, height - self.top - self.bottom),
        )


@dataclass(frozen=True)
class LoadResult:
    """Outcome of loading one file into a session."""
    source_path: Path
    series_added: int
    header_driven: bool
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BatchLoadResult:
    """
    Outcome of loading several files. One failing file does not stop the batch.

    errors: one IngestError per file that produced no usable row.
    """
    loaded: Tuple[LoadResult, ...]
    errors: Tuple[IngestError, ...]
    total_series: int

    @property
    def series_added(self) -> int:
        return sum(r.series_added for r in self.loaded)


@dataclass(frozen=True)
class SeriesValue:
    name: str
    y: Optional[float]


@dataclass(frozen=True)
class HoverResult:
    """
    Pointer query answer.

    data_x is the snapped peak x when snapped, the x under the pointer otherwise.
    """
    data_x: float
    values: Tuple[SeriesValue, ...]
    snap: Optional[SnapHit] = None

    @property
    def snapped(self) -> bool:
        return self.snap is not None

    def text_lines(self, x_title: str) -> List[str]:
        head = f"{x_title}: {self.data_x:.6g}"
        lines = [f"{head}  (snap)" if self.snapped else head]
        for i, v in enumerate(self.values):
            if v.y is None:
                lines.append(f"{v.name}: (n/a)")
                continue
            prefix = "★ " if self.snap is not None and self.snap.series_index == i else ""
            lines.append(f"{prefix}{v.name}: {v.y:.6g}")
        return lines


@dataclass
class _Derived:
    """Per-series cache entry: sorted view and, once asked for, its peak indices."""
    x: np.ndarray
    y: np.ndarray
    peaks: Optional[List[int]] = None


@dataclass
class ChartSession:
    """
    In-memory chart state: loaded series, fitted bounds and axis titles.

    Notes
    - Series keep load order; the series handle is its index in that order.
    - Derived caches (sorted view, peaks) are keyed by handle and dropped wholesale
      whenever the series collection changes.
    - Mutations and queries are serialised by one re-entrant lock.
    """
    config: LoaderConfig = field(default_factory=LoaderConfig)
    layout: PlotLayout = field(default_factory=PlotLayout)

    def __post_init__(self) -> None:
        self._lock = threading.RLock()
        self._series: List[Series] = []
        self._cache: Dict[int, _Derived] = {}
        self.bounds = Bounds()
        self.x_title = DEFAULT_X_TITLE
        self.y_title = DEFAULT_Y_TITLE

    # -------------------------
    # State
    # -------------------------
    @property
    def series(self) -> Tuple[Series, ...]:
        return tuple(self._series)

    @property
    def has_data(self) -> bool:
        return len(self._series) > 0

    def clear(self) -> None:
        with self._lock:
            self._series.clear()
            self._cache.clear()
            self.bounds = Bounds()
            self.x_title = DEFAULT_X_TITLE
            self.y_title = DEFAULT_Y_TITLE

    def fit_to_data(self) -> Bounds:
        with self._lock:
            if self._series:
                self.bounds = fit_to_data(self._series, self.bounds)
            return self.bounds

    # -------------------------
    # Loading
    # -------------------------
    def load_file(self, file_path: Union[str, Path]) -> LoadResult:
        """
        Read one file and append its series. Bounds are refitted afterwards.

        Raises IngestError (session untouched) when the file has no usable row.
        """
        table = read_rows(file_path, self.config)
        built = build_series(table, self.config)

        with self._lock:
            warnings = list(built.warnings)
            if built.series:
                if built.header_driven:
                    new_titles = merge_axis_titles(
                        (self.x_title, self.y_title),
                        (built.x_title or "", built.y_title or ""),
                    )
                    if new_titles != (self.x_title, self.y_title) and self.x_title != DEFAULT_X_TITLE:
                        warnings.append(
                            f"axis titles differ between files; using '{new_titles[0]}' / '{new_titles[1]}'"
                        )
                    self.x_title, self.y_title = new_titles
                else:
                    if self.x_title == DEFAULT_X_TITLE:
                        self.x_title = built.x_title or FALLBACK_X_TITLE
                        if self.x_title == DEFAULT_X_TITLE:
                            self.x_title = FALLBACK_X_TITLE
                    if self.y_title == DEFAULT_Y_TITLE:
                        self.y_title = built.y_title or FALLBACK_Y_TITLE

                self._series.extend(built.series)
                self._cache.clear()
                self.fit_to_data()
            else:
                warnings.append("no series produced")

        return LoadResult(
            source_path=table.source_path,
            series_added=len(built.series),
            header_driven=built.header_driven,
            warnings=tuple(warnings),
        )

    def load_files(self, paths: Iterable[Union[str, Path]]) -> BatchLoadResult:
        loaded: List[LoadResult] = []
        errors: List[IngestError] = []
        for p in paths:
            try:
                loaded.append(self.load_file(p))
            except IngestError as e:
                errors.append(e)
        return BatchLoadResult(loaded=tuple(loaded), errors=tuple(errors), total_series=len(self._series))

    # -------------------------
    # Derived caches
    # -------------------------
    def _derived(self, index: int) -> _Derived:
        entry = self._cache.get(index)
        if entry is None:
            x, y = sorted_view(self._series[index])
            entry = _Derived(x=x, y=y)
            self._cache[index] = entry
        return entry

    def sorted_points(self, index: int) -> Tuple[np.ndarray, np.ndarray]:
        with self._lock:
            d = self._derived(index)
            return d.x, d.y

    def peak_indices(self, index: int) -> List[int]:
        with self._lock:
            d = self._derived(index)
            if d.peaks is None:
                d.peaks = peak_indices(d.y)
            return d.peaks

    # -------------------------
    # Queries
    # -------------------------
    def interpolate(self, index: int, x: float) -> Optional[float]:
        xs, ys = self.sorted_points(index)
        return interpolate_y_at_x(xs, ys, x)

    def snap(self, x: float, plot_width_px: float) -> Optional[SnapHit]:
        """Highest peak, across all series, within the snap radius of ``x``."""
        with self._lock:
            if not self._series:
                return None
            dx_tol = snap_tolerance(self.layout.snap_pixel_radius, plot_width_px, self.bounds.min_x, self.bounds.max_x)
            candidates = []
            for i in range(len(self._series)):
                d = self._derived(i)
                if d.x.size == 0:
                    continue
                candidates.extend(peak_candidates(i, d.x, d.y, self.peak_indices(i), x))
            return find_snap_peak(candidates, dx_tol)

    def hover(self, px: float, py: float, rect: PlotRect) -> Optional[HoverResult]:
        """
        Interpolated values of every series at the pointer (plot-local pixels).

        None when there is no data or the pointer is outside the plot area.
        """
        with self._lock:
            if not self.has_data or rect.width <= 0 or rect.height <= 0:
                return None
            if not rect.contains(px, py):
                return None

            x_mouse = inv_map_x(px, rect, self.bounds.min_x, self.bounds.max_x)
            hit = self.snap(x_mouse, rect.width)
            x_query = hit.x if hit is not None else x_mouse

            values = tuple(
                SeriesValue(name=s.name, y=self.interpolate(i, x_query))
                for i, s in enumerate(self._series)
            )
            return HoverResult(data_x=x_query, values=values, snap=hit)

    # -------------------------
    # Aggregation / export
    # -------------------------
    def pie_items(self) -> List[PieItem]:
        with self._lock:
            return pie_items(self._series)

    def area_summary(self) -> pd.DataFrame:
        with self._lock:
            return area_summary(self._series)

    def to_frame(self) -> pd.DataFrame:
        """All series in long format: columns series, x, y (file-row order)."""
        with self._lock:
            frames = [
                pd.DataFrame({"series": s.name, "x": s.x, "y": s.y})
                for s in self._series
            ]
        if not frames:
            return pd.DataFrame({"series": pd.Series(dtype=object), "x": pd.Series(dtype=float), "y": pd.Series(dtype=float)})
        return pd.concat(frames, ignore_index=True)
