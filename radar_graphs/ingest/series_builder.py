from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import numpy as np

from radar_graphs.models.series import Series
from radar_graphs.ingest.csv_rows import HeaderPresent, LoaderConfig, RawTable
from radar_graphs.ingest.schema_detect import (
    RADAR_Y_TITLE,
    TIME_TITLE,
    VALUE_TITLE,
    DateTimeLikely,
    best_y_title,
    classify_x_column,
    clean_header_for_legend,
    detect_schema,
    elapsed_seconds,
    is_radar_header,
    prioritize_y,
)


@dataclass(frozen=True)
class BuildResult:
    """
    Series built from one file plus the axis titles that file suggests.

    header_driven:
      True if the header-driven schema was used, False for the positional fallback.
    x_title / y_title:
      None when the file has nothing to say about that axis.
    """
    series: Tuple[Series, ...]
    x_title: Optional[str]
    y_title: Optional[str]
    header_driven: bool
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SchemaMiss:
    """The header-driven path does not apply; the caller uses the fallback builder."""
    reason: str


def make_paired_points(name: str, xs: np.ndarray, ys: np.ndarray) -> Tuple[Series, int]:
    """Build a Series from paired columns. Returns (series, number of dropped pairs)."""
    n = min(len(xs), len(ys))
    s = Series.from_pairs(name, xs, ys)
    return s, n - len(s)


def _column(mat: np.ndarray, index: int) -> np.ndarray:
    if 0 <= index < mat.shape[1]:
        return mat[:, index]
    return np.full(mat.shape[0], np.nan, dtype=np.float64)


def build_series_from_headers(
    table: RawTable,
    config: Optional[LoaderConfig] = None,
) -> Union[BuildResult, SchemaMiss]:
    """Header-driven path: time column by name, Y columns by priority rules."""
    cfg = config or LoaderConfig()
    kind = table.header()
    if not isinstance(kind, HeaderPresent):
        return SchemaMiss("no header row (row 0 holds numbers)")

    headers = kind.headers
    start = kind.data_start
    if table.n_rows <= start:
        return SchemaMiss("header row without data rows")

    smap = detect_schema(headers)
    if smap.x_index is None:
        return SchemaMiss("no X column")
    x_idx = smap.x_index

    warnings: List[str] = []
    mat = table.numeric_matrix(start)
    ncols = mat.shape[1]

    x_kind = classify_x_column(table.rows, start, x_idx, probe_rows=cfg.date_probe_rows)
    if isinstance(x_kind, DateTimeLikely):
        xs = elapsed_seconds(table.rows, start, x_idx)
        x_title = TIME_TITLE
        warnings.append(
            f"x=col{x_idx} '{headers[x_idx]}' as timestamps ({x_kind.n_ok}/{x_kind.n_probed} probed rows parsed)"
        )
    else:
        scale = smap.time_scale_to_seconds
        xs = _column(mat, x_idx)
        if scale != 0:
            xs = xs * scale
        x_title = smap.x_title or TIME_TITLE
        warnings.append(f"x=col{x_idx} '{headers[x_idx]}' numeric, scale to seconds={scale:.6g}")

    radar_y = [
        i for i in range(ncols)
        if i != x_idx and is_radar_header(headers[i] if i < len(headers) else "")
    ]
    if radar_y:
        candidates = radar_y
    elif smap.y_indices:
        candidates = smap.y_indices
    else:
        candidates = [i for i in range(ncols) if i != x_idx]

    final_y = prioritize_y(headers, candidates, cap=cfg.max_y_columns)
    if not final_y:
        return SchemaMiss("no Y column")
    if len(candidates) > len(final_y):
        warnings.append(f"kept {len(final_y)} of {len(candidates)} Y candidates")

    if radar_y:
        y_title = RADAR_Y_TITLE
    else:
        y_title, _ = best_y_title(headers, final_y)

    series: List[Series] = []
    for yi in final_y:
        y_header = headers[yi] if yi < len(headers) else f"Y{yi}"
        name = f"{table.base_name} - {clean_header_for_legend(y_header)}"
        s, n_drop = make_paired_points(name, xs, _column(mat, yi))
        if len(s) == 0:
            warnings.append(f"col{yi} '{y_header}': no finite (x, y) pairs, skipped")
            continue
        if n_drop:
            warnings.append(f"col{yi} '{y_header}': dropped {n_drop} non-finite pairs")
        series.append(s)

    if not series:
        return SchemaMiss("no Y column produced finite points")

    warnings.append("y columns: " + ", ".join(f"col{i}" for i in final_y))
    return BuildResult(
        series=tuple(series),
        x_title=x_title,
        y_title=y_title,
        header_driven=True,
        warnings=tuple(warnings),
    )


def build_series_from_rows(table: RawTable, config: Optional[LoaderConfig] = None) -> BuildResult:
    """
    Positional fallback: column 0 is X, the radar columns (or every other column) are Y.

    Row 0 is a header unless it looks like two numbers.
    """
    cfg = config or LoaderConfig()
    kind = table.header()
    start = kind.data_start
    headers: Tuple[str, ...] = kind.headers if isinstance(kind, HeaderPresent) else ()

    if table.n_rows - start <= 0:
        return BuildResult(series=(), x_title=None, y_title=None, header_driven=False,
                           warnings=("fallback: no data rows",))

    warnings: List[str] = []
    mat = table.numeric_matrix(start)
    ncols = mat.shape[1]

    x_kind = classify_x_column(table.rows, start, 0, probe_rows=cfg.date_probe_rows)
    if isinstance(x_kind, DateTimeLikely):
        xs = elapsed_seconds(table.rows, start, 0)
        x_title: Optional[str] = TIME_TITLE
        warnings.append("fallback: x=col0 as timestamps")
    else:
        xs = _column(mat, 0)
        x_title = headers[0].strip() if headers else None
        warnings.append("fallback: x=col0 numeric")

    y_indices: List[int] = []
    if headers:
        y_indices = [c for c in range(1, ncols) if is_radar_header(headers[c] if c < len(headers) else "")]
    if not y_indices:
        y_indices = list(range(1, ncols))

    series: List[Series] = []
    for c in y_indices:
        if headers and c < len(headers) and headers[c].strip():
            name = f"{table.base_name} - {headers[c].strip()}"
        elif ncols > 2:
            name = f"{table.base_name} - Y{c}"
        else:
            name = table.base_name
        s, n_drop = make_paired_points(name, xs, mat[:, c])
        if len(s) == 0:
            warnings.append(f"fallback: col{c} has no finite (x, y) pairs, skipped")
            continue
        if n_drop:
            warnings.append(f"fallback: col{c} dropped {n_drop} non-finite pairs")
        series.append(s)

    radar = bool(headers) and any(is_radar_header(headers[i] if i < len(headers) else VALUE_TITLE) for i in y_indices)
    y_title = RADAR_Y_TITLE if radar else VALUE_TITLE

    return BuildResult(
        series=tuple(series),
        x_title=x_title,
        y_title=y_title,
        header_driven=False,
        warnings=tuple(warnings),
    )


def build_series(table: RawTable, config: Optional[LoaderConfig] = None) -> BuildResult:
    """Header-driven schema when it applies, positional fallback otherwise."""
    res = build_series_from_headers(table, config)
    if isinstance(res, BuildResult):
        return BuildResult(
            series=res.series,
            x_title=res.x_title,
            y_title=res.y_title,
            header_driven=True,
            warnings=table.warnings + res.warnings,
        )
    fb = build_series_from_rows(table, config)
    return BuildResult(
        series=fb.series,
        x_title=fb.x_title,
        y_title=fb.y_title,
        header_driven=False,
        warnings=table.warnings + (f"schema detection: {res.reason}; using positional columns",) + fb.warnings,
    )


def merge_axis_titles(
    current: Tuple[str, str],
    detected: Tuple[str, str],
    *,
    defaults: Tuple[str, str] = ("X", "Y"),
) -> Tuple[str, str]:
    """
    Combine the session's axis titles with a newly loaded file's titles.

    A default title adopts the new one; a case-insensitive mismatch falls back to a
    generic title ("Time [s]" for X, "Value" for Y).
    """
    generic = (TIME_TITLE, VALUE_TITLE)
    out = []
    for cur, new, dflt, gen in zip(current, detected, defaults, generic):
        if cur == dflt:
            out.append(new)
        elif new.lower() != cur.lower():
            out.append(gen)
        else:
            out.append(cur)
    return out[0], out[1]
